from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from asms.models import UserRole


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class UserRegister(BaseModel):
    """Schema for applicant self-registration."""

    full_name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str
    mobile_number: str = Field(..., min_length=1, max_length=20)


class UserResponse(BaseModel):
    """Schema for user response."""

    id: int
    full_name: str
    email: str
    mobile_number: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Schema for login/registration response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class UserProfileUpdate(BaseModel):
    """Schema for user self-update (limited fields)."""

    full_name: str = Field(..., min_length=1, max_length=120)
    mobile_number: str = Field(..., min_length=1, max_length=20)


class UserPasswordChange(BaseModel):
    """Schema for password change."""

    current_password: str
    new_password: str


class MessageResponse(BaseModel):
    message: str
