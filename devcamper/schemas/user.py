"""
DevCamper API — User & Auth Schemas
====================================

Request bodies for /auth and /users, and the public user representation.
The password hash and reset token never appear in a response model.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from devcamper.schemas.common import RequestModel

PASSWORD_FIELDS = frozenset({"password", "current_password", "new_password"})


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    success: bool = True
    token: str


# ── Auth ──────────────────────────────────────────────────────────────────


class RegisterRequest(RequestModel):
    __unsanitized__ = PASSWORD_FIELDS

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    # Admins are created through /users only
    role: Literal["user", "publisher"] = "user"


class LoginRequest(RequestModel):
    """Both fields optional so a missing one yields the API's own 400 message."""

    __unsanitized__ = PASSWORD_FIELDS

    email: Optional[str] = None
    password: Optional[str] = None


class UpdateDetailsRequest(RequestModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class UpdatePasswordRequest(RequestModel):
    __unsanitized__ = PASSWORD_FIELDS

    current_password: str
    new_password: str = Field(min_length=6)


class ForgotPasswordRequest(RequestModel):
    email: EmailStr


class ResetPasswordRequest(RequestModel):
    __unsanitized__ = PASSWORD_FIELDS

    password: str = Field(min_length=6)


# ── Admin user management ─────────────────────────────────────────────────


class UserCreate(RequestModel):
    __unsanitized__ = PASSWORD_FIELDS

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["user", "publisher", "admin"] = "user"


class UserUpdate(RequestModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Literal["user", "publisher", "admin"]] = None
