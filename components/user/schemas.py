"""Pydantic schemas for user data validation."""

from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field

from components.core.schemas import CamelModel


class UserCreate(CamelModel):
    """Schema for user registration."""
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserLogin(CamelModel):
    """Schema for user login."""
    email: EmailStr
    password: str = Field(min_length=1)


class User(CamelModel):
    """Schema for user response."""
    id: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserWithToken(CamelModel):
    """Schema for user response with JWT token."""
    user: User
    token: str


class TokenPayload(CamelModel):
    """Claims carried by a session token."""
    user_id: str
    email: str
