# app/schemas/auth_schema.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _normalize_email_value(email: str | None) -> str:
    """Normalize user-provided email strings for consistent lookups."""
    if email is None:
        raise ValueError("Email cannot be empty.")
    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("Email cannot be empty.")
    return normalized


# User/auth
class UserCreate(BaseModel):
    email: EmailStr = Field(
        ...,
        description="User's email address",
        json_schema_extra={"example": "user@example.com"},
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="User's password (must be between 8 and 72 characters)",
        json_schema_extra={"example": "securePassword1"},
    )

    # Normalize email
    @field_validator("email", mode="before")
    def normalize_email(cls, email: str) -> str:
        return _normalize_email_value(email)

    @field_validator("password")
    def validate_password(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Password cannot be empty.")
        return value


class LoginRequest(BaseModel):
    email: EmailStr = Field(
        ...,
        description="User's email address",
        json_schema_extra={"example": "user@example.com"},
    )
    password: str = Field(
        ...,
        json_schema_extra={"example": "securePassword1"},
    )

    @field_validator("email", mode="before")
    def normalize_email(cls, email: str) -> str:
        return _normalize_email_value(email)


# Token
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(BaseModel):
    id: UUID
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(Token):
    user: UserOut
