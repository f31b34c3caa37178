"""
DevCamper API — Course Routes
==============================

    GET    /courses                          list (advanced results)
    GET    /bootcamps/{bootcamp_id}/courses  courses of one bootcamp
    GET    /courses/{id}                     single course (with bootcamp)
    POST   /bootcamps/{bootcamp_id}/courses  add           bootcamp owner or admin
    PUT    /courses/{id}                     update        course owner or admin
    DELETE /courses/{id}                     delete        course owner or admin
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.dependencies import get_context, require_roles
from devcamper.models.user import ROLE_ADMIN, ROLE_PUBLISHER, User
from devcamper.routes.common import empty_data, list_query, paginated
from devcamper.schemas.common import DataResponse, ErrorResponse, ListResponse, PaginatedResponse
from devcamper.schemas.course import CourseCreate, CourseDetail, CourseResponse, CourseUpdate

router = APIRouter(tags=["Courses"])

publisher_or_admin = require_roles(ROLE_PUBLISHER, ROLE_ADMIN)


@router.get("/courses", response_model=PaginatedResponse)
async def list_courses(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PaginatedResponse:
    query = list_query(request, ctx.courses.columns)
    result = await ctx.courses.list_courses(db, query)
    return paginated(result, query, CourseDetail, response)


@router.get("/bootcamps/{bootcamp_id}/courses", response_model=ListResponse[CourseResponse])
async def list_bootcamp_courses(
    bootcamp_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> ListResponse[CourseResponse]:
    courses = await ctx.courses.list_for_bootcamp(db, bootcamp_id)
    data = [CourseResponse.model_validate(c) for c in courses]
    return ListResponse[CourseResponse](count=len(data), data=data)


@router.get(
    "/courses/{course_id}",
    response_model=DataResponse[CourseDetail],
    responses={404: {"model": ErrorResponse}},
)
async def get_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[CourseDetail]:
    course = await ctx.courses.get_course(db, course_id)
    return DataResponse[CourseDetail](data=CourseDetail.model_validate(course))


@router.post(
    "/bootcamps/{bootcamp_id}/courses",
    status_code=201,
    response_model=DataResponse[CourseResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_course(
    bootcamp_id: UUID,
    payload: CourseCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[CourseResponse]:
    course = await ctx.courses.add_course(db, user, bootcamp_id, payload)
    return DataResponse[CourseResponse](data=CourseResponse.model_validate(course))


@router.put(
    "/courses/{course_id}",
    response_model=DataResponse[CourseResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[CourseResponse]:
    course = await ctx.courses.update_course(db, user, course_id, payload)
    return DataResponse[CourseResponse](data=CourseResponse.model_validate(course))


@router.delete("/courses/{course_id}", responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_course(
    course_id: UUID,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> dict:
    await ctx.courses.delete_course(db, user, course_id)
    return empty_data()
