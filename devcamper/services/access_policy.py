"""
DevCamper API — Access Policy
==============================

What:  The ownership / role decision applied before every mutating operation
       on an owned resource.
How:   Pure functions over (owner id, acting user id, acting user role).
       They return nothing on ALLOW and raise on DENY, so a service reads:

           bootcamp = await self._get_or_404(db, bootcamp_id)   # 404 first
           ensure_owner_or_admin(bootcamp.user_id, user, "update", "this bootcamp")
           ... mutate ...

Decisions:
    owner or admin        → ALLOW
    anyone else           → OwnershipError (401, names the acting user id)
    second bootcamp by a
    non-admin publisher   → BadRequestError (400)
    role not in route set → ForbiddenError (403)
"""

from typing import Any, Iterable, Optional, Protocol

from devcamper.exceptions import BadRequestError, ForbiddenError, OwnershipError
from devcamper.models.user import ROLE_ADMIN


class Principal(Protocol):
    id: Any
    role: str


def is_allowed(owner_id: Any, user_id: Any, role: str) -> bool:
    """ALLOW iff the acting user owns the resource or is an admin."""
    return str(owner_id) == str(user_id) or role == ROLE_ADMIN


def ensure_owner_or_admin(owner_id: Any, user: Principal, action: str, resource: str) -> None:
    """
    Raises OwnershipError unless `user` owns the resource or is an admin.

    Args:
        owner_id: The resource's owning user id
        user:     The authenticated acting user
        action:   Verb used in the error message ("update", "delete", ...)
        resource: Object phrase used in the error message ("this bootcamp")
    """
    if not is_allowed(owner_id, user.id, user.role):
        raise OwnershipError(user_id=user.id, action=action, resource=resource)


def ensure_can_publish_bootcamp(existing_bootcamp_id: Optional[Any], user: Principal) -> None:
    """
    A non-admin user may own at most one bootcamp.

    `existing_bootcamp_id` is the id of a bootcamp the user already owns, or
    None. Reported as 400, unlike the ownership check's 401.
    """
    if existing_bootcamp_id is not None and user.role != ROLE_ADMIN:
        raise BadRequestError(
            message=f"The user with ID {user.id} has already published a bootcamp",
            context={"user_id": str(user.id), "bootcamp_id": str(existing_bootcamp_id)},
        )


def ensure_role(user: Principal, allowed_roles: Iterable[str]) -> None:
    """Role gate for whole routes."""
    if user.role not in set(allowed_roles):
        raise ForbiddenError(role=user.role)
