import uuid
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds; every backend stores this form."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Generate a new entity identifier."""
    return uuid.uuid4().hex


def as_naive_utc(value):
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
