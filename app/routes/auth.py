"""
LearnLoop Backend - Auth Routes
===============================

Registration, both login flows, logout, the current user, profile updates
and the per-user stats summary. Login responses set the access token as an
http-only cookie and also return it in the body for non-browser clients.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.middleware.auth import get_current_user
from app.models.user import User
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.stats import StatsResponse
from app.schemas.user import (
    GoogleLoginRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from app.services.auth_service import auth_service
from app.services.stats_service import stats_service

router = APIRouter(prefix="/auth", tags=["Auth"])

ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Not authenticated", "model": ErrorResponse},
}


def _set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.cookie_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none",
    )


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[UserResponse],
    responses=ERROR_RESPONSES,
    summary="Register a local account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
):
    user = await auth_service.register(db, payload)
    return ApiResponse[UserResponse].build(user, "User registered successfully", 201)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    responses=ERROR_RESPONSES,
    summary="Log in with email and password",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    result = await auth_service.login(db, payload)
    _set_token_cookie(response, result.token)
    return ApiResponse[LoginResponse].build(result, "User logged in successfully")


@router.post(
    "/google-login",
    response_model=ApiResponse[LoginResponse],
    responses=ERROR_RESPONSES,
    summary="Log in with a Google authorization code",
)
async def google_login(
    payload: GoogleLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
):
    result = await auth_service.google_login(db, payload)
    _set_token_cookie(response, result.token)
    return ApiResponse[LoginResponse].build(result, "User logged in successfully")


@router.post("/logout", response_model=ApiResponse[None], summary="Clear the session cookie")
async def logout(response: Response, user: User = Depends(get_current_user)):
    response.delete_cookie(
        key=settings.cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none",
    )
    return ApiResponse[None].build(None, "User logged out successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse], responses=ERROR_RESPONSES)
async def current_user(user: User = Depends(get_current_user)):
    return ApiResponse[UserResponse].build(
        UserResponse.model_validate(user), "Current user fetched successfully"
    )


@router.patch("/update-profile", response_model=ApiResponse[UserResponse], responses=ERROR_RESPONSES)
async def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    updated = await auth_service.update_profile(db, user, payload)
    return ApiResponse[UserResponse].build(updated, "Profile updated successfully")


@router.get("/stats", response_model=ApiResponse[StatsResponse], responses=ERROR_RESPONSES)
async def stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    result = await stats_service.get_stats(db, user.id)
    return ApiResponse[StatsResponse].build(result, "Stats fetched successfully")
