"""Pydantic schemas for plan data validation."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from components.core.schemas import CamelModel
from components.core.utils import as_naive_utc

DebtOwner = Literal["self", "other"]


class PlanBase(CamelModel):
    """Fields shared by every plan shape."""
    plan_name: str = Field(min_length=1, max_length=255)
    total_amount: float = Field(gt=0)
    number_of_months: Optional[int] = Field(default=None, gt=0)
    monthly_payment: float = Field(gt=0)
    debt_owner: DebtOwner = "self"
    is_active: bool = True


class PlanCreate(PlanBase):
    """Schema for plan creation."""
    pass


class PlanUpdate(CamelModel):
    """Schema for partial plan updates; absent fields are left untouched."""
    plan_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    total_amount: Optional[float] = Field(default=None, gt=0)
    number_of_months: Optional[int] = Field(default=None, gt=0)
    monthly_payment: Optional[float] = Field(default=None, gt=0)
    debt_owner: Optional[DebtOwner] = None
    is_active: Optional[bool] = None

    @field_validator("plan_name", "total_amount", "monthly_payment", "debt_owner", "is_active", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field may not be null")
        return value


class BulkPlanItem(PlanBase):
    """Creation-shaped entry of a bulk import; an id makes it an upsert."""
    id: Optional[str] = Field(default=None, max_length=64)


class BulkPlans(CamelModel):
    """Schema for bulk plan import."""
    plans: List[BulkPlanItem]


class Plan(PlanBase):
    """Schema for a persisted plan."""
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value)


class PlanImportError(CamelModel):
    """Schema for a rejected CSV row."""
    row: int
    message: str
