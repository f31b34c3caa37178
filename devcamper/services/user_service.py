"""
DevCamper API — User Administration Service
============================================

What:  Admin-only CRUD over users (mounted under /users).
       Passwords are hashed here; the hash and reset fields never leave
       the service layer.
"""

import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import NotFoundError
from devcamper.models.user import User
from devcamper.schemas.user import UserCreate, UserUpdate
from devcamper.security import hash_password_async
from devcamper.services.query_service import ListQuery, PageResult, fetch_page, filterable_columns

logger = logging.getLogger(__name__)


class UserService:
    columns = filterable_columns(
        User, exclude=("password_hash", "reset_password_token", "reset_password_expire")
    )

    async def get_or_404(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    async def list_users(self, db: AsyncSession, query: ListQuery) -> PageResult:
        return await fetch_page(db, User, query, self.columns)

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> User:
        user = User(
            name=payload.name,
            email=payload.email.lower(),
            role=payload.role,
            password_hash=await hash_password_async(payload.password),
        )
        db.add(user)
        await db.commit()
        logger.info("User created by admin: %s (%s)", user.id, user.role)
        return user

    async def update_user(self, db: AsyncSession, user_id: uuid.UUID, payload: UserUpdate) -> User:
        user = await self.get_or_404(db, user_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        for key, value in changes.items():
            setattr(user, key, value)
        await db.commit()
        return user

    async def delete_user(self, db: AsyncSession, user_id: uuid.UUID, acting_user: Any) -> None:
        user = await self.get_or_404(db, user_id)
        await db.delete(user)
        await db.commit()
        logger.info("User %s deleted by admin %s", user_id, acting_user.id)
