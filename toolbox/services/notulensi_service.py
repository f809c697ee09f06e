import logging
import math
from datetime import datetime
from uuid import UUID

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toolbox.core.realtime import record_change, row_to_dict
from toolbox.models.meeting import Meeting, MeetingParticipant
from toolbox.models.notulensi import ActionItem, ActionItemStatus, Notulensi
from toolbox.schemas.common import PaginatedData, PaginationMeta
from toolbox.schemas.notulensi import (
    ActionItemRequest,
    CreateNotulensiRequest,
    NotulensiDetailResponse,
    NotulensiResponse,
    UpdateNotulensiRequest,
)
from toolbox.services.permissions import is_creator
from toolbox.utils.dates import utcnow

logger = logging.getLogger(__name__)

_CONTENT_FIELDS = ("content", "decisions", "next_meeting_date", "is_draft")


class NotulensiService:
    """회의록(notulensi) 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notulensi(
        self,
        page: int = 1,
        limit: int = 10,
        approved: bool | None = None,
        created_by: UUID | None = None,
        meeting_id: UUID | None = None,
        is_draft: bool | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> PaginatedData[NotulensiResponse]:
        """회의록 목록 조회 (최신순)"""
        conditions = []
        if approved is True:
            conditions.append(Notulensi.approved_at.is_not(None))
        elif approved is False:
            conditions.append(Notulensi.approved_at.is_(None))
        if created_by:
            conditions.append(Notulensi.created_by == created_by)
        if meeting_id:
            conditions.append(Notulensi.meeting_id == meeting_id)
        if is_draft is not None:
            conditions.append(Notulensi.is_draft == is_draft)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    Notulensi.content.ilike(pattern),
                    cast(Notulensi.decisions, String).ilike(pattern),
                )
            )
        if date_from:
            conditions.append(Notulensi.created_at >= date_from)
        if date_to:
            conditions.append(Notulensi.created_at <= date_to)

        count_query = select(func.count()).select_from(Notulensi).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        query = (
            select(Notulensi)
            .options(*self._notulensi_options())
            .where(*conditions)
            .order_by(Notulensi.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        items = result.scalars().all()

        return PaginatedData[NotulensiResponse](
            data=[NotulensiResponse.model_validate(n) for n in items],
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total > 0 else 0,
            ),
        )

    async def get_notulensi(self, notulensi_id: UUID) -> NotulensiDetailResponse:
        """회의록 상세 조회 (회의 안건, 참여자 포함)"""
        notulensi = await self.get_notulensi_model(notulensi_id)
        return NotulensiDetailResponse.model_validate(notulensi)

    async def get_notulensi_model(self, notulensi_id: UUID) -> Notulensi:
        """상세 관계를 모두 로드한 회의록 (export용)"""
        return await self._get_notulensi_or_raise(notulensi_id, detail=True)

    async def create_notulensi(
        self, data: CreateNotulensiRequest, user_id: UUID
    ) -> NotulensiResponse:
        """회의록 생성"""
        meeting = (
            await self.db.execute(select(Meeting.id).where(Meeting.id == data.meeting_id))
        ).scalar_one_or_none()
        if meeting is None:
            raise ValueError("MEETING_NOT_FOUND")

        notulensi = Notulensi(
            meeting_id=data.meeting_id,
            content=data.content,
            decisions=data.decisions,
            next_meeting_date=data.next_meeting_date,
            is_draft=data.is_draft,
            created_by=user_id,
        )
        self.db.add(notulensi)
        await self.db.flush()
        record_change(self.db, "notulensi", "INSERT", row_to_dict(notulensi))

        await self._add_action_items(notulensi.id, data.action_items)

        notulensi = await self._get_notulensi_or_raise(notulensi.id, refresh=True)
        return NotulensiResponse.model_validate(notulensi)

    async def update_notulensi(
        self, notulensi_id: UUID, data: UpdateNotulensiRequest, user_id: UUID
    ) -> NotulensiResponse:
        """회의록 수정

        작성자만 내용을 수정할 수 있습니다. 승인/승인 취소는 누구나 가능하며,
        작성자가 아닌 경우 승인 관련 필드만 반영됩니다.
        """
        notulensi = await self._get_notulensi_or_raise(notulensi_id)

        fields = data.model_fields_set
        is_approval_action = "approved_by" in fields or "approved_at" in fields
        owner = is_creator(notulensi, user_id)
        if not owner and not is_approval_action:
            raise ValueError("NOTULENSI_EDIT_FORBIDDEN")

        if owner:
            for field in _CONTENT_FIELDS:
                if field not in fields:
                    continue
                value = getattr(data, field)
                if value is None and field != "next_meeting_date":
                    continue
                setattr(notulensi, field, value)

        if is_approval_action:
            if data.approved_by is not None:
                notulensi.approved_by = data.approved_by
                notulensi.approved_at = utcnow()
            elif "approved_at" in fields and data.approved_at is None:
                notulensi.approved_by = None
                notulensi.approved_at = None

        notulensi.updated_at = utcnow()
        await self.db.flush()
        record_change(self.db, "notulensi", "UPDATE", row_to_dict(notulensi))

        if owner and data.action_items is not None:
            for item in list(notulensi.action_items):
                record_change(self.db, "action_items", "DELETE", row_to_dict(item))
                notulensi.action_items.remove(item)
            await self.db.flush()
            await self._add_action_items(notulensi.id, data.action_items)

        notulensi = await self._get_notulensi_or_raise(notulensi.id, refresh=True)
        return NotulensiResponse.model_validate(notulensi)

    async def delete_notulensi(self, notulensi_id: UUID, user_id: UUID) -> None:
        """회의록 삭제 (작성자만, 승인된 회의록은 불가)"""
        notulensi = await self._get_notulensi_or_raise(notulensi_id)

        if not is_creator(notulensi, user_id):
            raise ValueError("NOTULENSI_DELETE_FORBIDDEN")
        if notulensi.approved_at is not None:
            raise ValueError("NOTULENSI_APPROVED")

        # 액션 아이템 먼저 삭제
        for item in list(notulensi.action_items):
            record_change(self.db, "action_items", "DELETE", row_to_dict(item))
            notulensi.action_items.remove(item)
        await self.db.flush()

        record = row_to_dict(notulensi)
        await self.db.delete(notulensi)
        await self.db.flush()
        record_change(self.db, "notulensi", "DELETE", record)

    async def _add_action_items(self, notulensi_id: UUID, items: list[ActionItemRequest]) -> None:
        for item in items:
            status = item.status.value
            action_item = ActionItem(
                notulensi_id=notulensi_id,
                description=item.description,
                assignee_id=item.assignee_id,
                due_date=item.due_date,
                priority=item.priority.value,
                status=status,
                completed_at=utcnow() if status == ActionItemStatus.COMPLETED.value else None,
            )
            self.db.add(action_item)
            await self.db.flush()
            record_change(self.db, "action_items", "INSERT", row_to_dict(action_item))

    def _notulensi_options(self, detail: bool = False) -> list:
        meeting_loader = selectinload(Notulensi.meeting)
        options = [
            meeting_loader.selectinload(Meeting.creator),
            selectinload(Notulensi.creator),
            selectinload(Notulensi.approver),
            selectinload(Notulensi.action_items).selectinload(ActionItem.assignee),
        ]
        if detail:
            options.append(
                selectinload(Notulensi.meeting)
                .selectinload(Meeting.participants)
                .selectinload(MeetingParticipant.user)
            )
        return options

    async def _get_notulensi_or_raise(
        self, notulensi_id: UUID, detail: bool = False, refresh: bool = False
    ) -> Notulensi:
        query = (
            select(Notulensi)
            .options(*self._notulensi_options(detail))
            .where(Notulensi.id == notulensi_id)
        )
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        notulensi = result.scalar_one_or_none()

        if not notulensi:
            raise ValueError("NOTULENSI_NOT_FOUND")

        return notulensi
