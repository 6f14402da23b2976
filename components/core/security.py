"""Security utilities for JWT and password handling."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from components.core.config import get_settings
from components.core.exceptions import InvalidCredentialsError, InvalidTokenError
from components.user.schemas import TokenPayload

settings = get_settings()

# JWT Configuration, read once at import
SECRET_KEY = settings.JWT_SECRET_KEY
ALGORITHM = settings.JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
BCRYPT_ROUNDS = settings.BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """Generate a salted bcrypt hash with a fixed cost factor."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    A mismatch returns False; a hash bcrypt cannot parse raises
    InvalidCredentialsError.
    """
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as exc:
        raise InvalidCredentialsError() from exc


def create_access_token(data: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token."""
    to_encode = data.model_dump(by_alias=True)
    if expires_delta is None:
        expires_delta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> TokenPayload:
    """Verify a JWT token and return its payload."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError() from exc

    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidTokenError("Invalid token payload")
    return TokenPayload(userId=user_id, email=email)
