"""
DevCamper API — Auth Routes
============================

    POST /auth/register                  → token response
    POST /auth/login                     → token response
    GET  /auth/logout                    → clears the token cookie
    GET  /auth/me                        → current user
    PUT  /auth/updatedetails             → updated user
    PUT  /auth/updatepassword            → token response
    POST /auth/forgotpassword            → mails a reset link
    PUT  /auth/resetpassword/{token}     → token response

Token response:
    body   {"success": true, "token": "<jwt>"}
    cookie token=<jwt>; HttpOnly; Max-Age=JWT_COOKIE_EXPIRE days; Secure in production
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.config import Settings
from devcamper.context import AppContext
from devcamper.database import get_db_session
from devcamper.dependencies import get_context, get_current_user
from devcamper.models.user import User
from devcamper.schemas.common import DataResponse, ErrorResponse
from devcamper.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserResponse,
)
from devcamper.security import create_access_token

router = APIRouter(prefix="/auth", tags=["Auth"])

LOGOUT_COOKIE_SECONDS = 10


def token_response(user: User, settings: Settings, status_code: int = 200) -> JSONResponse:
    token = create_access_token(user.id, settings)
    response = JSONResponse(
        status_code=status_code,
        content=TokenResponse(token=token).model_dump(),
    )
    response.set_cookie(
        "token",
        token,
        max_age=settings.jwt_cookie_expire * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
    )
    return response


@router.post("/register", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> JSONResponse:
    user = await ctx.auth.register(db, payload)
    return token_response(user, ctx.settings)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> JSONResponse:
    user = await ctx.auth.login(db, payload)
    return token_response(user, ctx.settings)


@router.get("/logout")
async def logout(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    response = JSONResponse(content={"success": True, "data": {}})
    response.set_cookie(
        "token",
        "none",
        max_age=LOGOUT_COOKIE_SECONDS,
        httponly=True,
        secure=ctx.settings.is_production,
    )
    return response


@router.get("/me", response_model=DataResponse[UserResponse], responses={401: {"model": ErrorResponse}})
async def me(user: User = Depends(get_current_user)) -> DataResponse[UserResponse]:
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.put("/updatedetails", response_model=DataResponse[UserResponse])
async def update_details(
    payload: UpdateDetailsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[UserResponse]:
    user = await ctx.auth.update_details(db, user, payload)
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.put("/updatepassword", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
async def update_password(
    payload: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> JSONResponse:
    user = await ctx.auth.update_password(db, user, payload)
    return token_response(user, ctx.settings)


@router.post(
    "/forgotpassword",
    response_model=DataResponse[str],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> DataResponse[str]:
    base = f"{request.url.scheme}://{request.headers.get('host', request.url.netloc)}"

    def reset_url_for(raw_token: str) -> str:
        return f"{base}{ctx.settings.api_prefix}/auth/resetpassword/{raw_token}"

    await ctx.auth.forgot_password(db, payload.email, reset_url_for)
    return DataResponse[str](data="Email sent")


@router.put(
    "/resetpassword/{resettoken}",
    response_model=TokenResponse,
    responses={400: {"model": ErrorResponse}},
)
async def reset_password(
    resettoken: str,
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> JSONResponse:
    user = await ctx.auth.reset_password(db, resettoken, payload.password)
    return token_response(user, ctx.settings)
