"""
DevCamper API — Request Dependencies
=====================================

What:  FastAPI dependencies shared by the routers.

    get_context        → the AppContext on app.state
    get_current_user   → authenticated User (401 otherwise)
    require_roles(...) → role gate on top of get_current_user (403)

The token is read from `Authorization: Bearer <token>` first, then from the
`token` cookie set by the auth routes.
"""

import uuid
from typing import Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.exceptions import UnauthorizedError
from devcamper.models.user import User
from devcamper.security import decode_access_token
from devcamper.services.access_policy import ensure_role


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def _extract_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    cookie = request.cookies.get("token")
    if cookie and cookie != "none":
        return cookie
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> User:
    token = _extract_token(request)
    if not token:
        raise UnauthorizedError()

    user_id = decode_access_token(token, ctx.settings)
    try:
        user = await db.get(User, uuid.UUID(user_id))
    except ValueError:
        raise UnauthorizedError(context={"reason": "malformed id claim"})
    if user is None:
        raise UnauthorizedError(context={"reason": "user no longer exists"})
    return user


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory for role-gated routes.

        @router.post("", dependencies=[Depends(require_roles("publisher", "admin"))])
    """

    async def checker(user: User = Depends(get_current_user)) -> User:
        ensure_role(user, roles)
        return user

    return checker
