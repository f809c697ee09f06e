import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse
from toolbox.schemas.participant import (
    AddParticipantsRequest,
    ParticipantResponse,
    UpdateParticipantRequest,
)
from toolbox.services.participant_service import ParticipantService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/meetings/{meeting_id}/participants", tags=["Meeting Participants"])


def get_participant_service(db: Annotated[AsyncSession, Depends(get_db)]) -> ParticipantService:
    """ParticipantService 의존성"""
    return ParticipantService(db)


@router.get(
    "",
    response_model=ApiResponse[list[ParticipantResponse]],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def list_participants(
    meeting_id: UUID,
    current_user: CurrentUser,
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse[list[ParticipantResponse]]:
    """참여자 목록"""
    try:
        participants = await participant_service.list_participants(meeting_id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=participants)


@router.post(
    "",
    response_model=ApiResponse[list[ParticipantResponse]],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def add_participants(
    meeting_id: UUID,
    data: AddParticipantsRequest,
    current_user: CurrentUser,
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse[list[ParticipantResponse]]:
    """참여자 추가"""
    try:
        participants = await participant_service.add_participants(
            meeting_id, data.user_ids, data.status, current_user.id
        )
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(
        data=participants,
        message=f"{len(participants)} participant(s) added successfully",
    )


@router.put(
    "/{user_id}",
    response_model=ApiResponse[ParticipantResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_participant(
    meeting_id: UUID,
    user_id: UUID,
    data: UpdateParticipantRequest,
    current_user: CurrentUser,
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse[ParticipantResponse]:
    """참여자 응답 상태 변경"""
    try:
        participant = await participant_service.update_participant_status(
            meeting_id, user_id, data.status, current_user.id
        )
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=participant, message="Participant status updated successfully")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def remove_participant(
    meeting_id: UUID,
    user_id: UUID,
    current_user: CurrentUser,
    participant_service: Annotated[ParticipantService, Depends(get_participant_service)],
) -> ApiResponse[None]:
    """참여자 제거"""
    try:
        name = await participant_service.remove_participant(meeting_id, user_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(message=f'Participant "{name}" removed successfully')
