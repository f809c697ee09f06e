import logging
import math
from enum import Enum
from uuid import UUID

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toolbox.core.realtime import record_change, row_to_dict
from toolbox.models.task import Task, TaskStatus
from toolbox.schemas.common import PaginatedData, PaginationMeta
from toolbox.schemas.task import CreateTaskRequest, TaskResponse, UpdateTaskRequest
from toolbox.services.permissions import (
    get_profile,
    is_admin_or_manager,
    is_assignee,
    is_creator,
)
from toolbox.utils.dates import utcnow

logger = logging.getLogger(__name__)

# null로 지울 수 없는 컬럼
_NON_NULLABLE_FIELDS = {"title", "priority", "status", "tags"}


def apply_status(task: Task, status: str) -> None:
    """상태 변경 (completed면 completed_at 기록, 그 외에는 제거)"""
    task.status = status
    task.completed_at = utcnow() if status == TaskStatus.COMPLETED.value else None


class TaskService:
    """작업 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tasks(
        self,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        priority: str | None = None,
        assignee_id: UUID | None = None,
        search: str | None = None,
        tags: str | None = None,
    ) -> PaginatedData[TaskResponse]:
        """작업 목록 조회"""
        conditions = []
        if status:
            conditions.append(Task.status == status)
        if priority:
            conditions.append(Task.priority == priority)
        if assignee_id:
            conditions.append(Task.assignee_id == assignee_id)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
        if tags:
            tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()]
            if tag_list:
                # JSON 배열 텍스트에서 "tag" 형태로 매칭
                tags_text = cast(Task.tags, String)
                conditions.append(or_(*[tags_text.like(f'%"{tag}"%') for tag in tag_list]))

        count_query = select(func.count()).select_from(Task).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        query = (
            self._task_query()
            .where(*conditions)
            .order_by(Task.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        tasks = result.scalars().all()

        return PaginatedData[TaskResponse](
            data=[TaskResponse.model_validate(t) for t in tasks],
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total > 0 else 0,
            ),
        )

    async def get_task(self, task_id: UUID) -> TaskResponse:
        """작업 상세 조회"""
        task = await self._get_task_or_raise(task_id)
        return TaskResponse.model_validate(task)

    async def create_task(self, data: CreateTaskRequest, user_id: UUID) -> TaskResponse:
        """작업 생성 (상태는 항상 pending으로 시작)"""
        if data.assignee_id is not None:
            await self._ensure_profile_exists(data.assignee_id)

        task = Task(
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            status=TaskStatus.PENDING.value,
            assignee_id=data.assignee_id,
            created_by=user_id,
            due_date=data.due_date,
            tags=data.tags,
        )
        self.db.add(task)
        await self.db.flush()
        record_change(self.db, "tasks", "INSERT", row_to_dict(task))

        task = await self._get_task_or_raise(task.id, refresh=True)
        return TaskResponse.model_validate(task)

    async def update_task(
        self, task_id: UUID, data: UpdateTaskRequest, user_id: UUID
    ) -> TaskResponse:
        """작업 수정 (작성자, 담당자, admin/manager)"""
        task = await self._get_task_or_raise(task_id)
        await self._check_edit_permission(task, user_id)

        updates = data.model_dump(exclude_unset=True)
        if "assignee_id" in updates and updates["assignee_id"] is not None:
            await self._ensure_profile_exists(updates["assignee_id"])

        for field, value in updates.items():
            if value is None and field in _NON_NULLABLE_FIELDS:
                continue
            if isinstance(value, Enum):
                value = value.value
            if field == "status":
                apply_status(task, value)
            else:
                setattr(task, field, value)

        await self.db.flush()
        record_change(self.db, "tasks", "UPDATE", row_to_dict(task))

        task = await self._get_task_or_raise(task.id, refresh=True)
        return TaskResponse.model_validate(task)

    async def update_task_status(self, task_id: UUID, status: str, user_id: UUID) -> TaskResponse:
        """작업 상태 변경"""
        if status not in {s.value for s in TaskStatus}:
            raise ValueError("INVALID_TASK_STATUS")

        task = await self._get_task_or_raise(task_id)
        await self._check_edit_permission(task, user_id)

        apply_status(task, status)
        await self.db.flush()
        record_change(self.db, "tasks", "UPDATE", row_to_dict(task))

        task = await self._get_task_or_raise(task.id, refresh=True)
        return TaskResponse.model_validate(task)

    async def delete_task(self, task_id: UUID, user_id: UUID) -> None:
        """작업 삭제 (작성자 또는 admin/manager)"""
        task = await self._get_task_or_raise(task_id)

        if not is_creator(task, user_id):
            profile = await get_profile(self.db, user_id)
            if not is_admin_or_manager(profile):
                raise ValueError("PERMISSION_DENIED")

        record = row_to_dict(task)
        await self.db.delete(task)
        await self.db.flush()
        record_change(self.db, "tasks", "DELETE", record)

    def _task_query(self):
        return select(Task).options(selectinload(Task.assignee), selectinload(Task.creator))

    async def _get_task_or_raise(self, task_id: UUID, refresh: bool = False) -> Task:
        query = self._task_query().where(Task.id == task_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        task = result.scalar_one_or_none()

        if not task:
            raise ValueError("TASK_NOT_FOUND")

        return task

    async def _check_edit_permission(self, task: Task, user_id: UUID) -> None:
        """수정 권한 확인 (작성자, 담당자, admin/manager)"""
        if is_creator(task, user_id) or is_assignee(task, user_id):
            return
        profile = await get_profile(self.db, user_id)
        if not is_admin_or_manager(profile):
            raise ValueError("PERMISSION_DENIED")

    async def _ensure_profile_exists(self, user_id: UUID) -> None:
        if await get_profile(self.db, user_id) is None:
            raise ValueError("ASSIGNEE_NOT_FOUND")
