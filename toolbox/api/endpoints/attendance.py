import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.attendance import (
    AttendanceListResponse,
    AttendanceResponse,
    CheckInRequest,
    QRCodeResponse,
)
from toolbox.schemas.common import ApiResponse, ErrorResponse
from toolbox.services.attendance_service import AttendanceService
from toolbox.services.qr_code_service import QRCodeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/meetings/{meeting_id}", tags=["Attendance"])


def get_attendance_service(db: Annotated[AsyncSession, Depends(get_db)]) -> AttendanceService:
    """AttendanceService 의존성"""
    return AttendanceService(db)


def get_qr_code_service(db: Annotated[AsyncSession, Depends(get_db)]) -> QRCodeService:
    """QRCodeService 의존성"""
    return QRCodeService(db)


@router.get(
    "/attendance",
    response_model=ApiResponse[AttendanceListResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_attendance(
    meeting_id: UUID,
    current_user: CurrentUser,
    attendance_service: Annotated[AttendanceService, Depends(get_attendance_service)],
) -> ApiResponse[AttendanceListResponse]:
    """출석 목록"""
    try:
        data = await attendance_service.list_attendance(meeting_id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=data)


@router.post(
    "/attendance",
    response_model=ApiResponse[AttendanceResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def check_in(
    meeting_id: UUID,
    data: CheckInRequest,
    current_user: CurrentUser,
    attendance_service: Annotated[AttendanceService, Depends(get_attendance_service)],
) -> ApiResponse[AttendanceResponse]:
    """체크인"""
    try:
        attendance = await attendance_service.check_in(meeting_id, data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=attendance, message="Successfully checked in")


@router.get(
    "/qr-code",
    response_model=ApiResponse[QRCodeResponse],
    response_model_exclude_none=True,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_qr_code(
    meeting_id: UUID,
    current_user: CurrentUser,
    qr_code_service: Annotated[QRCodeService, Depends(get_qr_code_service)],
) -> ApiResponse[QRCodeResponse]:
    """체크인 QR 코드 (유효하면 재사용)"""
    try:
        qr_code, generated = await qr_code_service.get_or_create(meeting_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(
        data=qr_code,
        message="QR code generated successfully" if generated else None,
    )


@router.post(
    "/qr-code",
    response_model=ApiResponse[QRCodeResponse],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def regenerate_qr_code(
    meeting_id: UUID,
    current_user: CurrentUser,
    qr_code_service: Annotated[QRCodeService, Depends(get_qr_code_service)],
) -> ApiResponse[QRCodeResponse]:
    """체크인 QR 코드 강제 재생성"""
    try:
        qr_code = await qr_code_service.regenerate(meeting_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=qr_code, message="QR code regenerated successfully")
