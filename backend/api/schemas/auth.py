"""Authentication schemas."""

from pydantic import BaseModel, Field, EmailStr
from datetime import datetime
from typing import Optional


class LoginRequest(BaseModel):
    """User login request."""

    username: str = Field(min_length=1, description="Login name")
    password: str = Field(min_length=1, description="User password")


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(min_length=3, max_length=64, description="Login name")
    email: Optional[EmailStr] = Field(default=None, description="User email address")
    password: str = Field(min_length=8, description="User password (min 8 characters)")


class UserResponse(BaseModel):
    """User information response."""

    id: str = Field(description="User ID")
    username: str = Field(description="Login name")
    email: Optional[str] = Field(default=None, description="User email address")
    role: Optional[str] = Field(default=None, description="User role")
    created_at: Optional[datetime] = Field(default=None, description="User creation timestamp")

    class Config:
        from_attributes = True


class AdminUserResponse(UserResponse):
    """User record as seen by administrators."""

    is_active: bool = Field(description="Whether user account is active")
    last_login_at: Optional[datetime] = Field(default=None, description="Last successful login")


class RegisterResponse(BaseModel):
    user: UserResponse


class LoginResponse(BaseModel):
    """Token plus the authenticated user."""

    token: str = Field(description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse


class VerifyResponse(BaseModel):
    """Result of verifying the presented bearer token."""

    valid: bool = True
    user: UserResponse
    token_role: Optional[str] = Field(default=None, description="Role carried by the token")
    role_changed: bool = Field(description="Whether the stored role differs from the token's")
    expires_at: datetime


class RoleUpdateRequest(BaseModel):
    role: str = Field(min_length=1, description="New role name")


class ActiveUpdateRequest(BaseModel):
    is_active: bool
