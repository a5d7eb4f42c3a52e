"""User schema definitions.

This module defines the stored User record and the auth request/response
models built on it.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from utils.clock import utc_now


class UserCreate(BaseModel):
    username: str
    name: str
    password_hash: str
    email: Optional[str] = None
    role: str = "employee"


class User(BaseModel):
    id: str = Field(description="Opaque id assigned by the backing store.")
    username: str = Field(description="Unique login name.")
    name: str = Field(description="Display name.")
    email: Optional[str] = None
    password_hash: str = Field(description="bcrypt hash of the password.")
    role: str = Field(default="employee", description="e.g. 'employee' or 'admin'.")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_public(self) -> "PublicUser":
        return PublicUser(
            id=self.id,
            username=self.username,
            name=self.name,
            email=self.email,
            role=self.role,
        )


class PublicUser(BaseModel):
    """User fields that are safe to return to clients."""

    id: str
    username: str
    name: str
    email: Optional[str] = None
    role: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, description="Login name, at least 3 characters.")
    name: str = Field(min_length=1)
    password: str = Field(min_length=6, description="At least 6 characters.")
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=6)


class AuthResponse(BaseModel):
    user: PublicUser
    token: str
