"""
DevCamper API — User Admin Routes
==================================

Every route requires an authenticated admin (403 for other roles).

    GET    /users        list (advanced results)
    GET    /users/{id}   single user
    POST   /users        create (any role)
    PUT    /users/{id}   update
    DELETE /users/{id}   delete
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.dependencies import get_context, require_roles
from devcamper.models.user import ROLE_ADMIN, User
from devcamper.routes.common import empty_data, list_query, paginated
from devcamper.schemas.common import DataResponse, ErrorResponse, PaginatedResponse
from devcamper.schemas.user import UserCreate, UserResponse, UserUpdate

admin_only = require_roles(ROLE_ADMIN)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=PaginatedResponse)
async def list_users(
    request: Request,
    response: Response,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PaginatedResponse:
    query = list_query(request, ctx.users.columns)
    result = await ctx.users.list_users(db, query)
    return paginated(result, query, UserResponse, response)


@router.get("/{user_id}", response_model=DataResponse[UserResponse], responses={404: {"model": ErrorResponse}})
async def get_user(
    user_id: UUID,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[UserResponse]:
    user = await ctx.users.get_or_404(db, user_id)
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.post("", status_code=201, response_model=DataResponse[UserResponse])
async def create_user(
    payload: UserCreate,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[UserResponse]:
    user = await ctx.users.create_user(db, payload)
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=DataResponse[UserResponse], responses={404: {"model": ErrorResponse}})
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[UserResponse]:
    user = await ctx.users.update_user(db, user_id, payload)
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.delete("/{user_id}", responses={404: {"model": ErrorResponse}})
async def delete_user(
    user_id: UUID,
    admin: User = Depends(admin_only),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> dict:
    await ctx.users.delete_user(db, user_id, admin)
    return empty_data()
