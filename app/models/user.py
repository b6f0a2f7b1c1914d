"""
User models for authentication and role management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class UserRole(str, Enum):
    """Role stored on the users/{uid} document."""
    CITIZEN = "citizen"
    ADMIN = "admin"
    WORKER = "worker"


class RegisterRequest(BaseModel):
    """Self-registration. Always creates a citizen account."""
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128, description="Firebase requires 6+ characters")
    name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class UserResponse(BaseModel):
    """Public profile of a user."""
    id: str = Field(..., description="Firebase Auth uid (also the users document ID)")
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.CITIZEN
    created_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    """Profile plus the home view the client should open for this role."""
    user: UserResponse
    home_view: str


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: Optional[UserResponse] = None
    home_view: Optional[str] = None
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
