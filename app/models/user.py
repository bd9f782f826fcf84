"""
User and session models for the reviewer login.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    AUTHORITY = "authority"


class User(BaseModel):
    """Reviewer identity as read from the identity provider."""
    id: str = Field(..., description="Identity provider user ID")
    email: Optional[str] = None
    role: Optional[UserRole] = None
    name: Optional[str] = None
    department: Optional[str] = None
    created_at: Optional[datetime] = None


class Session(BaseModel):
    """An authenticated reviewer session."""
    user: User
    id_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(None, description="Seconds until id_token expires")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)


class AuthResponse(BaseModel):
    success: bool
    message: str
    session: Optional[Session] = None
