import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse, PaginatedData
from toolbox.schemas.notulensi import (
    CreateNotulensiRequest,
    NotulensiDetailResponse,
    NotulensiResponse,
    UpdateNotulensiRequest,
)
from toolbox.services.notulensi_export import export_filename, render_notulensi_html
from toolbox.services.notulensi_service import NotulensiService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notulensi", tags=["Notulensi"])


def get_notulensi_service(db: Annotated[AsyncSession, Depends(get_db)]) -> NotulensiService:
    """NotulensiService 의존성"""
    return NotulensiService(db)


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[NotulensiResponse]],
    responses={401: {"model": ErrorResponse}},
)
async def list_notulensi(
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    approved: bool | None = Query(default=None),
    created_by: UUID | None = Query(default=None),
    meeting_id: UUID | None = Query(default=None),
    is_draft: bool | None = Query(default=None),
    search: str | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
) -> ApiResponse[PaginatedData[NotulensiResponse]]:
    """회의록 목록"""
    data = await notulensi_service.list_notulensi(
        page=page,
        limit=limit,
        approved=approved,
        created_by=created_by,
        meeting_id=meeting_id,
        is_draft=is_draft,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    return ApiResponse(data=data)


@router.post(
    "",
    response_model=ApiResponse[NotulensiResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def create_notulensi(
    data: CreateNotulensiRequest,
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
) -> ApiResponse[NotulensiResponse]:
    """회의록 생성"""
    try:
        notulensi = await notulensi_service.create_notulensi(data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=notulensi, message="Notulensi created successfully")


@router.get(
    "/{notulensi_id}",
    response_model=ApiResponse[NotulensiDetailResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_notulensi(
    notulensi_id: UUID,
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
) -> ApiResponse[NotulensiDetailResponse]:
    """회의록 상세"""
    try:
        notulensi = await notulensi_service.get_notulensi(notulensi_id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=notulensi)


@router.get(
    "/{notulensi_id}/export",
    response_class=HTMLResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def export_notulensi(
    notulensi_id: UUID,
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
) -> HTMLResponse:
    """회의록 HTML 문서 내보내기 (브라우저 인쇄용)"""
    try:
        notulensi = await notulensi_service.get_notulensi_model(notulensi_id)
    except ValueError as e:
        handle_service_error(e)

    filename = export_filename(notulensi)
    logger.info("Notulensi exported: id=%s user=%s", notulensi_id, current_user.id)
    return HTMLResponse(
        content=render_notulensi_html(notulensi),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.put(
    "/{notulensi_id}",
    response_model=ApiResponse[NotulensiResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_notulensi(
    notulensi_id: UUID,
    data: UpdateNotulensiRequest,
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
) -> ApiResponse[NotulensiResponse]:
    """회의록 수정 / 승인"""
    try:
        notulensi = await notulensi_service.update_notulensi(notulensi_id, data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=notulensi, message="Notulensi updated successfully")


@router.delete(
    "/{notulensi_id}",
    response_model=ApiResponse[None],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def delete_notulensi(
    notulensi_id: UUID,
    current_user: CurrentUser,
    notulensi_service: Annotated[NotulensiService, Depends(get_notulensi_service)],
) -> ApiResponse[None]:
    """회의록 삭제"""
    try:
        await notulensi_service.delete_notulensi(notulensi_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(message="Notulensi deleted successfully")
