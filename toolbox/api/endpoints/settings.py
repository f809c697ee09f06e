import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse
from toolbox.schemas.profile import ProfileResponse
from toolbox.schemas.settings import (
    AvatarUploadResponse,
    SettingsResponse,
    UpdateSettingsRequest,
)
from toolbox.services.settings_service import SettingsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["Settings"])


def get_settings_service(db: Annotated[AsyncSession, Depends(get_db)]) -> SettingsService:
    """SettingsService 의존성"""
    return SettingsService(db)


@router.get(
    "",
    response_model=ApiResponse[SettingsResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_settings(
    current_user: CurrentUser,
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
) -> ApiResponse[SettingsResponse]:
    """내 프로필 + 인증 정보"""
    try:
        data = await settings_service.get_settings(current_user)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=data)


@router.put(
    "",
    response_model=ApiResponse[ProfileResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_settings(
    data: UpdateSettingsRequest,
    current_user: CurrentUser,
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
) -> ApiResponse[ProfileResponse]:
    """내 프로필 수정"""
    try:
        profile = await settings_service.update_settings(current_user.id, data)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=profile, message="Settings updated successfully")


@router.post(
    "",
    response_model=ApiResponse[AvatarUploadResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def upload_avatar(
    current_user: CurrentUser,
    settings_service: Annotated[SettingsService, Depends(get_settings_service)],
    avatar: UploadFile = File(..., description="아바타 이미지"),
) -> ApiResponse[AvatarUploadResponse]:
    """아바타 업로드 (multipart/form-data)"""
    content = await avatar.read()
    try:
        data = await settings_service.upload_avatar(
            current_user.id,
            avatar.filename,
            avatar.content_type,
            content,
        )
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=data, message="Avatar uploaded successfully")
