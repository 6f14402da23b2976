"""Pydantic schemas for payment data validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from components.core.schemas import CamelModel
from components.core.utils import as_naive_utc


class PaymentStatusEntry(CamelModel):
    """One month's payment record; a null paid_at means unpaid."""
    month_index: int = Field(ge=0)
    status: str
    amount: float = Field(gt=0)
    paid_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("paid_at")
    @classmethod
    def normalize_paid_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are naive UTC in every backend
        return as_naive_utc(value)

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None


class PaymentStatusUpdate(CamelModel):
    """Schema for replacing a plan's payment status collection."""
    status: List[PaymentStatusEntry]

    @model_validator(mode="after")
    def unique_month_indexes(self):
        seen = set()
        for entry in self.status:
            if entry.month_index in seen:
                raise ValueError(f"Duplicate monthIndex {entry.month_index}")
            seen.add(entry.month_index)
        return self


class PaymentTotals(CamelModel):
    """Paid and remaining amounts of a plan."""
    total_paid: float = Field(ge=0)
    remaining: float = Field(ge=0)

    model_config = ConfigDict(from_attributes=True)
