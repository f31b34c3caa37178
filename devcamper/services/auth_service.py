"""
DevCamper API — Authentication Service
=======================================

What:  Registration, login, profile updates and the password-reset flow.
How:   Returns ORM users; the auth routes turn a user into a token
       response (JWT in the body plus an HTTP-only cookie).

Password reset:
    forgot_password:  raw token mailed → sha256(raw) + expiry stored
    reset_password:   sha256(path token) must match a row whose expiry is
                      still in the future → new password, reset fields cleared
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.config import Settings
from devcamper.exceptions import (
    BadRequestError,
    MailDeliveryError,
    NotFoundError,
    UnauthorizedError,
)
from devcamper.models.user import User
from devcamper.schemas.user import (
    LoginRequest,
    RegisterRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)
from devcamper.security import (
    generate_reset_token,
    hash_password_async,
    hash_reset_token,
    verify_password_async,
)
from devcamper.services.mail_service import Mailer

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, settings: Settings, mailer: Mailer):
        self.settings = settings
        self.mailer = mailer

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> User:
        user = User(
            name=payload.name,
            email=payload.email.lower(),
            role=payload.role,
            password_hash=await hash_password_async(payload.password),
        )
        db.add(user)
        await db.commit()
        logger.info("User registered: %s (%s)", user.id, user.role)
        return user

    async def login(self, db: AsyncSession, payload: LoginRequest) -> User:
        if not payload.email or not payload.password:
            raise BadRequestError(message="Please provide an email and password")

        user = await self._find_by_email(db, payload.email)
        # Same message for unknown email and wrong password
        if user is None or not await verify_password_async(payload.password, user.password_hash):
            raise UnauthorizedError(message="Invalid credentials")
        return user

    async def update_details(self, db: AsyncSession, user: User, payload: UpdateDetailsRequest) -> User:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        for key, value in changes.items():
            setattr(user, key, value)
        await db.commit()
        return user

    async def update_password(self, db: AsyncSession, user: User, payload: UpdatePasswordRequest) -> User:
        if not await verify_password_async(payload.current_password, user.password_hash):
            raise UnauthorizedError(message="Password is incorrect")
        user.password_hash = await hash_password_async(payload.new_password)
        await db.commit()
        return user

    async def forgot_password(
        self, db: AsyncSession, email: str, reset_url_for: Callable[[str], str]
    ) -> None:
        """
        Stores a reset token for `email` and mails the reset link.

        Args:
            reset_url_for: Builds the public reset URL from the raw token
        """
        user = await self._find_by_email(db, email)
        if user is None:
            raise NotFoundError(message="There is no user with that email")

        raw, digest, expire = generate_reset_token(self.settings)
        user.reset_password_token = digest
        user.reset_password_expire = expire
        await db.commit()

        text = (
            "You are receiving this email because you (or someone else) has requested "
            f"the reset of a password. Please make a PUT request to:\n\n{reset_url_for(raw)}"
        )
        try:
            await self.mailer.send(to=user.email, subject="Password reset token", text=text)
        except MailDeliveryError:
            user.reset_password_token = None
            user.reset_password_expire = None
            await db.commit()
            raise
        logger.info("Password reset email sent to user %s", user.id)

    async def reset_password(self, db: AsyncSession, raw_token: str, password: str) -> User:
        result = await db.execute(
            select(User).where(
                User.reset_password_token == hash_reset_token(raw_token),
                User.reset_password_expire > datetime.now(timezone.utc),
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise BadRequestError(message="Invalid token")

        user.password_hash = await hash_password_async(password)
        user.reset_password_token = None
        user.reset_password_expire = None
        await db.commit()
        logger.info("Password reset for user %s", user.id)
        return user
