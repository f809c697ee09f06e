import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse, PaginatedData
from toolbox.schemas.meeting import (
    CreateMeetingRequest,
    MeetingDetailResponse,
    MeetingResponse,
    MonthlyAttendanceStats,
    UpdateMeetingRequest,
)
from toolbox.services.meeting_service import MeetingService
from toolbox.utils.dates import utcnow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/meetings", tags=["Meetings"])


def get_meeting_service(db: Annotated[AsyncSession, Depends(get_db)]) -> MeetingService:
    """MeetingService 의존성"""
    return MeetingService(db)


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[MeetingResponse]],
    responses={401: {"model": ErrorResponse}},
)
async def list_meetings(
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: str | None = Query(default=None),
    meeting_type: str | None = Query(default=None),
    created_by: UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
) -> ApiResponse[PaginatedData[MeetingResponse]]:
    """회의 목록"""
    data = await meeting_service.list_meetings(
        page=page,
        limit=limit,
        status=status,
        meeting_type=meeting_type,
        created_by=created_by,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    return ApiResponse(data=data)


@router.post(
    "",
    response_model=ApiResponse[MeetingDetailResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_meeting(
    data: CreateMeetingRequest,
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
) -> ApiResponse[MeetingDetailResponse]:
    """회의 생성"""
    meeting = await meeting_service.create_meeting(data, current_user.id)
    return ApiResponse(data=meeting, message="Meeting created successfully")


# /{meeting_id} 보다 먼저 등록
@router.get(
    "/attendance-stats",
    response_model=ApiResponse[list[MonthlyAttendanceStats]],
    responses={401: {"model": ErrorResponse}},
)
async def get_attendance_stats(
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
    year: int | None = Query(default=None, ge=1970, le=9999),
) -> ApiResponse[list[MonthlyAttendanceStats]]:
    """월별 출석 통계"""
    stats = await meeting_service.get_attendance_stats(year or utcnow().year)
    return ApiResponse(data=stats)


@router.get(
    "/{meeting_id}",
    response_model=ApiResponse[MeetingDetailResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_meeting(
    meeting_id: UUID,
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
) -> ApiResponse[MeetingDetailResponse]:
    """회의 상세"""
    try:
        meeting = await meeting_service.get_meeting(meeting_id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=meeting)


@router.put(
    "/{meeting_id}",
    response_model=ApiResponse[MeetingDetailResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_meeting(
    meeting_id: UUID,
    data: UpdateMeetingRequest,
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
) -> ApiResponse[MeetingDetailResponse]:
    """회의 수정"""
    try:
        meeting = await meeting_service.update_meeting(meeting_id, data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=meeting, message="Meeting updated successfully")


@router.delete(
    "/{meeting_id}",
    response_model=ApiResponse[None],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def delete_meeting(
    meeting_id: UUID,
    current_user: CurrentUser,
    meeting_service: Annotated[MeetingService, Depends(get_meeting_service)],
) -> ApiResponse[None]:
    """회의 삭제"""
    try:
        title = await meeting_service.delete_meeting(meeting_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(message=f'Meeting "{title}" deleted successfully')
