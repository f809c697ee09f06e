import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.database import get_db
from toolbox.schemas.common import ApiResponse, ErrorResponse, PaginatedData
from toolbox.schemas.task import (
    CreateTaskRequest,
    TaskResponse,
    UpdateTaskRequest,
    UpdateTaskStatusRequest,
)
from toolbox.services.task_service import TaskService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(db: Annotated[AsyncSession, Depends(get_db)]) -> TaskService:
    """TaskService 의존성"""
    return TaskService(db)


@router.get(
    "",
    response_model=ApiResponse[PaginatedData[TaskResponse]],
    responses={401: {"model": ErrorResponse}},
)
async def list_tasks(
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    assignee_id: UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    tags: str | None = Query(default=None, description="쉼표로 구분된 태그"),
) -> ApiResponse[PaginatedData[TaskResponse]]:
    """작업 목록"""
    data = await task_service.list_tasks(
        page=page,
        limit=limit,
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        search=search,
        tags=tags,
    )
    return ApiResponse(data=data)


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_task(
    data: CreateTaskRequest,
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
) -> ApiResponse[TaskResponse]:
    """작업 생성"""
    try:
        task = await task_service.create_task(data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=task, message="Task created successfully")


@router.get(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_task(
    task_id: UUID,
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
) -> ApiResponse[TaskResponse]:
    """작업 상세"""
    try:
        task = await task_service.get_task(task_id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=task)


@router.put(
    "/{task_id}",
    response_model=ApiResponse[TaskResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_task(
    task_id: UUID,
    data: UpdateTaskRequest,
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
) -> ApiResponse[TaskResponse]:
    """작업 수정"""
    try:
        task = await task_service.update_task(task_id, data, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=task, message="Task updated successfully")


@router.patch(
    "/{task_id}/status",
    response_model=ApiResponse[TaskResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def update_task_status(
    task_id: UUID,
    data: UpdateTaskStatusRequest,
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
) -> ApiResponse[TaskResponse]:
    """작업 상태 변경"""
    try:
        task = await task_service.update_task_status(task_id, data.status, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(data=task, message=f"Task status updated to {data.status}")


@router.delete(
    "/{task_id}",
    response_model=ApiResponse[None],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def delete_task(
    task_id: UUID,
    current_user: CurrentUser,
    task_service: Annotated[TaskService, Depends(get_task_service)],
) -> ApiResponse[None]:
    """작업 삭제"""
    try:
        await task_service.delete_task(task_id, current_user.id)
    except ValueError as e:
        handle_service_error(e)
    return ApiResponse(message="Task deleted successfully")
