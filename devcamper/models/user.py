"""
DevCamper API — User Model
===========================

What:  ORM model for the `users` table.
Who:   Auth service (register, login, reset), user admin service, and the
       authentication dependency that loads the acting user.

Roles:
    user       → may write reviews
    publisher  → may publish one bootcamp and its courses
    admin      → bypasses ownership checks; manages users

The password is stored only as an argon2 hash. Reset tokens are stored as
the sha256 hex digest of the raw token mailed to the user.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devcamper.database import Base

ROLE_USER = "user"
ROLE_PUBLISHER = "publisher"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    reset_password_token: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True, index=True
    )
    reset_password_expire: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
