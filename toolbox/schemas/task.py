from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from toolbox.models.task import TaskPriority, TaskStatus
from toolbox.schemas.profile import ProfileBrief


class CreateTaskRequest(BaseModel):
    """작업 생성 요청"""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority
    assignee_id: UUID | None = None
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)


class UpdateTaskRequest(BaseModel):
    """작업 수정 요청 (부분 수정, 명시적 null은 값 제거)"""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    assignee_id: UUID | None = None
    due_date: datetime | None = None
    tags: list[str] | None = None
    status: TaskStatus | None = None


class UpdateTaskStatusRequest(BaseModel):
    """작업 상태 변경 요청"""

    status: str | None = None


class TaskResponse(BaseModel):
    """작업 응답"""

    id: UUID
    title: str
    description: str | None
    priority: str
    status: str
    assignee_id: UUID | None
    created_by: UUID
    due_date: datetime | None
    completed_at: datetime | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime
    assignee: ProfileBrief | None = None
    creator: ProfileBrief | None = None

    class Config:
        from_attributes = True
