"""Core schemas for the application."""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str


class FieldViolation(BaseModel):
    """A single field-level validation failure."""
    field: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    errors: Optional[List[FieldViolation]] = None
