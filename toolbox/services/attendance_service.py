import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toolbox.core.realtime import record_change, row_to_dict
from toolbox.core.telemetry import get_toolbox_metrics
from toolbox.models.meeting import CheckInMethod, Meeting, MeetingAttendance, MeetingParticipant
from toolbox.schemas.attendance import (
    AttendanceListResponse,
    AttendanceMeetingBrief,
    AttendanceResponse,
    CheckInRequest,
)
from toolbox.services.permissions import get_profile, is_admin_or_manager, is_creator
from toolbox.utils.dates import utcnow

logger = logging.getLogger(__name__)

VALID_CHECK_IN_METHODS = [m.value for m in CheckInMethod]


class AttendanceService:
    """회의 출석(체크인) 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_attendance(self, meeting_id: UUID) -> AttendanceListResponse:
        """회의 출석 목록 (체크인 시각 순)"""
        meeting = await self._get_meeting_or_raise(meeting_id)

        query = (
            select(MeetingAttendance)
            .options(selectinload(MeetingAttendance.user))
            .where(MeetingAttendance.meeting_id == meeting_id)
            .order_by(MeetingAttendance.checked_in_at.asc())
        )
        result = await self.db.execute(query)

        return AttendanceListResponse(
            meeting=AttendanceMeetingBrief.model_validate(meeting),
            attendance=[AttendanceResponse.model_validate(a) for a in result.scalars().all()],
        )

    async def check_in(
        self, meeting_id: UUID, data: CheckInRequest, current_user_id: UUID
    ) -> AttendanceResponse:
        """체크인 (다른 사용자 체크인은 작성자 또는 admin/manager만)"""
        if data.check_in_method not in VALID_CHECK_IN_METHODS:
            raise ValueError("INVALID_CHECK_IN_METHOD")

        meeting = await self._get_meeting_or_raise(meeting_id)
        target_user_id = data.user_id or current_user_id

        if target_user_id != current_user_id and not is_creator(meeting, current_user_id):
            profile = await get_profile(self.db, current_user_id)
            if not is_admin_or_manager(profile):
                raise ValueError("CHECK_IN_PERMISSION_DENIED")

        participant_query = select(MeetingParticipant.id).where(
            MeetingParticipant.meeting_id == meeting_id,
            MeetingParticipant.user_id == target_user_id,
        )
        if (await self.db.execute(participant_query)).scalar_one_or_none() is None:
            raise ValueError("NOT_A_PARTICIPANT")

        existing_query = select(MeetingAttendance.id).where(
            MeetingAttendance.meeting_id == meeting_id,
            MeetingAttendance.user_id == target_user_id,
        )
        if (await self.db.execute(existing_query)).scalar_one_or_none() is not None:
            raise ValueError("ALREADY_CHECKED_IN")

        attendance = MeetingAttendance(
            meeting_id=meeting_id,
            user_id=target_user_id,
            checked_in_at=utcnow(),
            check_in_method=data.check_in_method,
            location_lat=data.location_lat,
            location_lng=data.location_lng,
            device_info=data.device_info,
        )
        self.db.add(attendance)
        try:
            await self.db.flush()
        except IntegrityError:
            # 동시 체크인: unique (meeting_id, user_id)
            raise ValueError("ALREADY_CHECKED_IN")

        record_change(self.db, "meeting_attendance", "INSERT", row_to_dict(attendance))
        get_toolbox_metrics().check_ins_total.add(1, {"method": data.check_in_method})
        logger.info(
            "Checked in: meeting=%s user=%s method=%s",
            meeting_id,
            target_user_id,
            data.check_in_method,
        )

        query = (
            select(MeetingAttendance)
            .options(selectinload(MeetingAttendance.user))
            .where(MeetingAttendance.id == attendance.id)
            .execution_options(populate_existing=True)
        )
        attendance = (await self.db.execute(query)).scalar_one()
        return AttendanceResponse.model_validate(attendance)

    async def _get_meeting_or_raise(self, meeting_id: UUID) -> Meeting:
        result = await self.db.execute(select(Meeting).where(Meeting.id == meeting_id))
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise ValueError("MEETING_NOT_FOUND")
        return meeting
