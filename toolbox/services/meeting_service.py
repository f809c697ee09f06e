import logging
import math
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toolbox.core.realtime import record_change, row_to_dict
from toolbox.models.meeting import (
    Meeting,
    MeetingAttendance,
    MeetingParticipant,
    MeetingStatus,
    ParticipantStatus,
)
from toolbox.models.notulensi import Notulensi
from toolbox.models.profile import Profile
from toolbox.schemas.common import PaginatedData, PaginationMeta
from toolbox.schemas.meeting import (
    CreateMeetingRequest,
    MeetingDetailResponse,
    MeetingResponse,
    MonthlyAttendanceStats,
    UpdateMeetingRequest,
)
from toolbox.services.permissions import get_profile, is_admin_or_manager, is_creator
from toolbox.utils.dates import ensure_aware

logger = logging.getLogger(__name__)

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# null로 지울 수 없는 컬럼
_NON_NULLABLE_FIELDS = {"title", "date_time", "duration", "status", "meeting_type", "agenda"}


def attendance_rate(attendees: int, participants: int) -> int:
    """출석률 (%) - 0.5는 올림"""
    if participants <= 0:
        return 0
    return math.floor(attendees / participants * 100 + 0.5)


class MeetingService:
    """회의 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_meetings(
        self,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        meeting_type: str | None = None,
        created_by: UUID | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> PaginatedData[MeetingResponse]:
        """회의 목록 조회 (일시 오름차순)"""
        conditions = []
        if status:
            conditions.append(Meeting.status == status)
        if meeting_type:
            conditions.append(Meeting.meeting_type == meeting_type)
        if created_by:
            conditions.append(Meeting.created_by == created_by)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(Meeting.title.ilike(pattern), Meeting.description.ilike(pattern))
            )
        if date_from:
            conditions.append(Meeting.date_time >= date_from)
        if date_to:
            conditions.append(Meeting.date_time <= date_to)

        count_query = select(func.count()).select_from(Meeting).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        query = (
            select(Meeting)
            .options(*self._meeting_options())
            .where(*conditions)
            .order_by(Meeting.date_time.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        meetings = result.scalars().all()

        return PaginatedData[MeetingResponse](
            data=[MeetingResponse.model_validate(m) for m in meetings],
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total > 0 else 0,
            ),
        )

    async def get_meeting(self, meeting_id: UUID) -> MeetingDetailResponse:
        """회의 상세 조회 (작성자, 참여자, 출석 포함)"""
        meeting = await self._get_meeting_or_raise(meeting_id, detail=True)
        return MeetingDetailResponse.model_validate(meeting)

    async def create_meeting(self, data: CreateMeetingRequest, user_id: UUID) -> MeetingDetailResponse:
        """회의 생성 (participant_ids는 invited 상태로 추가)"""
        meeting = Meeting(
            title=data.title,
            description=data.description,
            date_time=data.date_time,
            duration=data.duration,
            status=MeetingStatus.SCHEDULED.value,
            location=data.location,
            meeting_type=data.meeting_type.value,
            meeting_link=data.meeting_link,
            agenda=data.agenda,
            created_by=user_id,
        )
        self.db.add(meeting)
        await self.db.flush()
        record_change(self.db, "meetings", "INSERT", row_to_dict(meeting))

        if data.participant_ids:
            for participant_user_id in await self._existing_user_ids(data.participant_ids):
                participant = MeetingParticipant(
                    meeting_id=meeting.id,
                    user_id=participant_user_id,
                    status=ParticipantStatus.INVITED.value,
                )
                self.db.add(participant)
                await self.db.flush()
                record_change(self.db, "meeting_participants", "INSERT", row_to_dict(participant))

        meeting = await self._get_meeting_or_raise(meeting.id, detail=True, refresh=True)
        return MeetingDetailResponse.model_validate(meeting)

    async def update_meeting(
        self, meeting_id: UUID, data: UpdateMeetingRequest, user_id: UUID
    ) -> MeetingDetailResponse:
        """회의 수정 (작성자 또는 admin/manager)"""
        meeting = await self._get_meeting_or_raise(meeting_id)
        await self._check_manage_permission(meeting, user_id)

        updates = data.model_dump(exclude_unset=True, exclude={"participant_ids"})
        for field, value in updates.items():
            if value is None and field in _NON_NULLABLE_FIELDS:
                continue
            if isinstance(value, Enum):
                value = value.value
            setattr(meeting, field, value)

        await self.db.flush()
        record_change(self.db, "meetings", "UPDATE", row_to_dict(meeting))

        if data.participant_ids is not None:
            await self._sync_participants(meeting, data.participant_ids)

        meeting = await self._get_meeting_or_raise(meeting.id, detail=True, refresh=True)
        return MeetingDetailResponse.model_validate(meeting)

    async def delete_meeting(self, meeting_id: UUID, user_id: UUID) -> str:
        """회의 삭제 (참여자, 출석, 회의록 함께 삭제)

        Returns:
            삭제된 회의 제목
        """
        query = (
            select(Meeting)
            .options(
                selectinload(Meeting.participants),
                selectinload(Meeting.attendance),
                selectinload(Meeting.notulensi).selectinload(Notulensi.action_items),
            )
            .where(Meeting.id == meeting_id)
        )
        result = await self.db.execute(query)
        meeting = result.scalar_one_or_none()

        if not meeting:
            raise ValueError("MEETING_NOT_FOUND")

        await self._check_manage_permission(meeting, user_id)

        title = meeting.title
        record = row_to_dict(meeting)
        await self.db.delete(meeting)
        await self.db.flush()
        record_change(self.db, "meetings", "DELETE", record)

        return title

    async def get_attendance_stats(self, year: int) -> list[MonthlyAttendanceStats]:
        """연도별 월간 출석 통계 (참여자가 있는 완료 회의 기준)"""
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        end = datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

        query = (
            select(Meeting)
            .options(selectinload(Meeting.participants), selectinload(Meeting.attendance))
            .where(
                Meeting.status == MeetingStatus.COMPLETED.value,
                Meeting.date_time >= start,
                Meeting.date_time <= end,
            )
        )
        result = await self.db.execute(query)
        meetings = result.scalars().all()

        buckets = [{"meetings": 0, "participants": 0, "attendees": 0} for _ in MONTH_NAMES]
        for meeting in meetings:
            if not meeting.participants:
                continue
            bucket = buckets[ensure_aware(meeting.date_time).month - 1]
            bucket["meetings"] += 1
            bucket["participants"] += sum(
                1 for p in meeting.participants if p.status == ParticipantStatus.ACCEPTED.value
            )
            bucket["attendees"] += len(meeting.attendance)

        return [
            MonthlyAttendanceStats(
                month=month,
                total_meetings=bucket["meetings"],
                total_participants=bucket["participants"],
                total_attendees=bucket["attendees"],
                attendance_rate=attendance_rate(bucket["attendees"], bucket["participants"]),
            )
            for month, bucket in zip(MONTH_NAMES, buckets)
        ]

    def _meeting_options(self, detail: bool = False) -> list:
        options = [
            selectinload(Meeting.creator),
            selectinload(Meeting.participants).selectinload(MeetingParticipant.user),
        ]
        if detail:
            options.append(selectinload(Meeting.attendance).selectinload(MeetingAttendance.user))
        return options

    async def _get_meeting_or_raise(
        self, meeting_id: UUID, detail: bool = False, refresh: bool = False
    ) -> Meeting:
        query = select(Meeting).options(*self._meeting_options(detail)).where(Meeting.id == meeting_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        meeting = result.scalar_one_or_none()

        if not meeting:
            raise ValueError("MEETING_NOT_FOUND")

        return meeting

    async def _check_manage_permission(self, meeting: Meeting, user_id: UUID) -> None:
        """회의 관리 권한 확인 (작성자 또는 admin/manager)"""
        if is_creator(meeting, user_id):
            return
        profile = await get_profile(self.db, user_id)
        if not is_admin_or_manager(profile):
            raise ValueError("PERMISSION_DENIED")

    async def _existing_user_ids(self, user_ids: list[UUID]) -> list[UUID]:
        """존재하는 사용자 ID만 (입력 순서 유지, 중복 제거)"""
        unique_ids = list(dict.fromkeys(user_ids))
        result = await self.db.execute(select(Profile.id).where(Profile.id.in_(unique_ids)))
        existing = set(result.scalars().all())

        missing = [str(uid) for uid in unique_ids if uid not in existing]
        if missing:
            logger.warning("Skipping unknown participant ids: %s", ", ".join(missing))

        return [uid for uid in unique_ids if uid in existing]

    async def _sync_participants(self, meeting: Meeting, user_ids: list[UUID]) -> None:
        """참여자 목록 동기화 (유지되는 참여자는 응답 상태 보존)"""
        desired = await self._existing_user_ids(user_ids)
        current = {p.user_id: p for p in meeting.participants}

        # delete-orphan cascade로 제거
        for participant_user_id, participant in current.items():
            if participant_user_id not in desired:
                record_change(self.db, "meeting_participants", "DELETE", row_to_dict(participant))
                meeting.participants.remove(participant)
        await self.db.flush()

        for participant_user_id in desired:
            if participant_user_id in current:
                continue
            participant = MeetingParticipant(
                meeting_id=meeting.id,
                user_id=participant_user_id,
                status=ParticipantStatus.INVITED.value,
            )
            meeting.participants.append(participant)
            await self.db.flush()
            record_change(self.db, "meeting_participants", "INSERT", row_to_dict(participant))
