"""
DevCamper API — Bootcamp Routes
================================

    GET    /bootcamps                              list (advanced results)
    GET    /bootcamps/radius/{zipcode}/{distance}  radius search (miles)
    GET    /bootcamps/{id}                         single bootcamp
    POST   /bootcamps                              create      publisher, admin
    PUT    /bootcamps/{id}                         update      owner or admin
    DELETE /bootcamps/{id}                         delete      owner or admin
    PUT    /bootcamps/{id}/photo                   upload      owner or admin

Course and review routes nested under a bootcamp live in courses.py and
reviews.py.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Request, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.dependencies import get_context, require_roles
from devcamper.models.user import ROLE_ADMIN, ROLE_PUBLISHER, User
from devcamper.routes.common import empty_data, list_query, paginated
from devcamper.schemas.bootcamp import BootcampCreate, BootcampResponse, BootcampUpdate, BootcampWithCourses
from devcamper.schemas.common import DataResponse, ErrorResponse, ListResponse, PaginatedResponse
from devcamper.services.file_service import PhotoUpload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bootcamps", tags=["Bootcamps"])

publisher_or_admin = require_roles(ROLE_PUBLISHER, ROLE_ADMIN)


@router.get("", response_model=PaginatedResponse, summary="List bootcamps")
async def list_bootcamps(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PaginatedResponse:
    query = list_query(request, ctx.bootcamps.columns)
    result = await ctx.bootcamps.list_bootcamps(db, query)
    return paginated(result, query, BootcampWithCourses, response)


@router.get(
    "/radius/{zipcode}/{distance}",
    response_model=ListResponse[BootcampResponse],
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Bootcamps within a distance (miles) of a zipcode",
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(gt=0),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> ListResponse[BootcampResponse]:
    bootcamps = await ctx.bootcamps.find_in_radius(db, zipcode, distance)
    data = [BootcampResponse.model_validate(b) for b in bootcamps]
    return ListResponse[BootcampResponse](count=len(data), data=data)


@router.get(
    "/{bootcamp_id}",
    response_model=DataResponse[BootcampResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_bootcamp(
    bootcamp_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[BootcampResponse]:
    bootcamp = await ctx.bootcamps.get_bootcamp(db, bootcamp_id)
    return DataResponse[BootcampResponse](data=BootcampResponse.model_validate(bootcamp))


@router.post(
    "",
    status_code=201,
    response_model=DataResponse[BootcampResponse],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_bootcamp(
    payload: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[BootcampResponse]:
    bootcamp = await ctx.bootcamps.create_bootcamp(db, user, payload)
    return DataResponse[BootcampResponse](data=BootcampResponse.model_validate(bootcamp))


@router.put(
    "/{bootcamp_id}",
    response_model=DataResponse[BootcampResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_bootcamp(
    bootcamp_id: UUID,
    payload: BootcampUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[BootcampResponse]:
    bootcamp = await ctx.bootcamps.update_bootcamp(db, user, bootcamp_id, payload)
    return DataResponse[BootcampResponse](data=BootcampResponse.model_validate(bootcamp))


@router.delete("/{bootcamp_id}", responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def delete_bootcamp(
    bootcamp_id: UUID,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> dict:
    await ctx.bootcamps.delete_bootcamp(db, user, bootcamp_id)
    return empty_data()


@router.put(
    "/{bootcamp_id}/photo",
    response_model=DataResponse[str],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Upload a bootcamp photo (multipart field `file`)",
)
async def upload_bootcamp_photo(
    bootcamp_id: UUID,
    file: Optional[UploadFile] = File(default=None),
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[str]:
    upload = None
    if file is not None:
        upload = PhotoUpload(
            filename=file.filename or "",
            content_type=file.content_type,
            content=await file.read(),
        )
    name = await ctx.bootcamps.upload_photo(db, user, bootcamp_id, upload)
    return DataResponse[str](data=name)
