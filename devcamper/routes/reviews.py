"""
DevCamper API — Review Routes
==============================

    GET    /reviews                          list (advanced results)
    GET    /bootcamps/{bootcamp_id}/reviews  reviews of one bootcamp
    GET    /reviews/{id}                     single review (with bootcamp)
    POST   /bootcamps/{bootcamp_id}/reviews  add           user, admin
    PUT    /reviews/{id}                     update        author or admin
    DELETE /reviews/{id}                     delete        author or admin
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.dependencies import get_context, require_roles
from devcamper.models.user import ROLE_ADMIN, ROLE_USER, User
from devcamper.routes.common import empty_data, list_query, paginated
from devcamper.schemas.common import DataResponse, ErrorResponse, ListResponse, PaginatedResponse
from devcamper.schemas.review import ReviewCreate, ReviewDetail, ReviewResponse, ReviewUpdate

router = APIRouter(tags=["Reviews"])

user_or_admin = require_roles(ROLE_USER, ROLE_ADMIN)


@router.get("/reviews", response_model=PaginatedResponse)
async def list_reviews(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PaginatedResponse:
    query = list_query(request, ctx.reviews.columns)
    result = await ctx.reviews.list_reviews(db, query)
    return paginated(result, query, ReviewDetail, response)


@router.get("/bootcamps/{bootcamp_id}/reviews", response_model=ListResponse[ReviewResponse])
async def list_bootcamp_reviews(
    bootcamp_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> ListResponse[ReviewResponse]:
    reviews = await ctx.reviews.list_for_bootcamp(db, bootcamp_id)
    data = [ReviewResponse.model_validate(r) for r in reviews]
    return ListResponse[ReviewResponse](count=len(data), data=data)


@router.get(
    "/reviews/{review_id}",
    response_model=DataResponse[ReviewDetail],
    responses={404: {"model": ErrorResponse}},
)
async def get_review(
    review_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[ReviewDetail]:
    review = await ctx.reviews.get_review(db, review_id)
    return DataResponse[ReviewDetail](data=ReviewDetail.model_validate(review))


@router.post(
    "/bootcamps/{bootcamp_id}/reviews",
    status_code=201,
    response_model=DataResponse[ReviewResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_review(
    bootcamp_id: UUID,
    payload: ReviewCreate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[ReviewResponse]:
    review = await ctx.reviews.add_review(db, user, bootcamp_id, payload)
    return DataResponse[ReviewResponse](data=ReviewResponse.model_validate(review))


@router.put(
    "/reviews/{review_id}",
    response_model=DataResponse[ReviewResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_review(
    review_id: UUID,
    payload: ReviewUpdate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[ReviewResponse]:
    review = await ctx.reviews.update_review(db, user, review_id, payload)
    return DataResponse[ReviewResponse](data=ReviewResponse.model_validate(review))


@router.delete("/reviews/{review_id}", responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_review(
    review_id: UUID,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> dict:
    await ctx.reviews.delete_review(db, user, review_id)
    return empty_data()
