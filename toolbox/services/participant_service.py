import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toolbox.core.realtime import record_change, row_to_dict
from toolbox.models.meeting import Meeting, MeetingParticipant, ParticipantStatus
from toolbox.models.profile import Profile
from toolbox.schemas.participant import ParticipantResponse
from toolbox.services.permissions import (
    get_profile,
    is_admin_or_manager,
    is_creator,
    is_participant,
)

logger = logging.getLogger(__name__)

VALID_PARTICIPANT_STATUSES = [s.value for s in ParticipantStatus]


class ParticipantService:
    """회의 참여자 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_participants(self, meeting_id: UUID) -> list[ParticipantResponse]:
        """참여자 목록 (등록 순)"""
        await self._get_meeting_or_raise(meeting_id)

        query = (
            select(MeetingParticipant)
            .options(selectinload(MeetingParticipant.user))
            .where(MeetingParticipant.meeting_id == meeting_id)
            .order_by(MeetingParticipant.created_at.asc())
        )
        result = await self.db.execute(query)
        return [ParticipantResponse.model_validate(p) for p in result.scalars().all()]

    async def add_participants(
        self,
        meeting_id: UUID,
        user_ids: list[UUID],
        status: str,
        current_user_id: UUID,
    ) -> list[ParticipantResponse]:
        """참여자 추가 (이미 있으면 상태 덮어쓰기)"""
        if not user_ids:
            raise ValueError("USER_IDS_REQUIRED")
        if status not in VALID_PARTICIPANT_STATUSES:
            raise ValueError("INVALID_PARTICIPANT_STATUS")

        meeting = await self._get_meeting_or_raise(meeting_id)
        if not is_creator(meeting, current_user_id):
            profile = await get_profile(self.db, current_user_id)
            if not is_admin_or_manager(profile):
                raise ValueError("PERMISSION_DENIED")

        requested_ids = list(dict.fromkeys(user_ids))
        known = set(
            (await self.db.execute(select(Profile.id).where(Profile.id.in_(requested_ids))))
            .scalars()
            .all()
        )
        unique_ids = [uid for uid in requested_ids if uid in known]
        if len(unique_ids) != len(requested_ids):
            logger.warning(
                "Skipping unknown participant ids for meeting %s: %s",
                meeting_id,
                ", ".join(str(uid) for uid in requested_ids if uid not in known),
            )

        existing_query = select(MeetingParticipant).where(
            MeetingParticipant.meeting_id == meeting_id,
            MeetingParticipant.user_id.in_(unique_ids),
        )
        existing = {
            p.user_id: p for p in (await self.db.execute(existing_query)).scalars().all()
        }

        participant_ids = []
        for user_id in unique_ids:
            participant = existing.get(user_id)
            if participant:
                participant.status = status
                event = "UPDATE"
            else:
                participant = MeetingParticipant(
                    meeting_id=meeting_id,
                    user_id=user_id,
                    status=status,
                )
                self.db.add(participant)
                event = "INSERT"
            await self.db.flush()
            record_change(self.db, "meeting_participants", event, row_to_dict(participant))
            participant_ids.append(participant.id)

        query = (
            select(MeetingParticipant)
            .options(selectinload(MeetingParticipant.user))
            .where(MeetingParticipant.id.in_(participant_ids))
            .order_by(MeetingParticipant.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [ParticipantResponse.model_validate(p) for p in result.scalars().all()]

    async def update_participant_status(
        self,
        meeting_id: UUID,
        user_id: UUID,
        status: str,
        current_user_id: UUID,
    ) -> ParticipantResponse:
        """참여자 응답 상태 변경 (작성자, 본인, admin/manager)"""
        if status not in VALID_PARTICIPANT_STATUSES:
            raise ValueError("INVALID_PARTICIPANT_STATUS")

        meeting = await self._get_meeting_or_raise(meeting_id)
        participant = await self._get_participant_or_raise(meeting_id, user_id)
        await self._check_permission(meeting, user_id, current_user_id)

        participant.status = status
        await self.db.flush()
        record_change(self.db, "meeting_participants", "UPDATE", row_to_dict(participant))

        participant = await self._get_participant_or_raise(meeting_id, user_id, refresh=True)
        return ParticipantResponse.model_validate(participant)

    async def remove_participant(
        self, meeting_id: UUID, user_id: UUID, current_user_id: UUID
    ) -> str:
        """참여자 제거

        Returns:
            제거된 참여자 이름
        """
        meeting = await self._get_meeting_or_raise(meeting_id)
        participant = await self._get_participant_or_raise(meeting_id, user_id)
        await self._check_permission(meeting, user_id, current_user_id)

        name = participant.user.name if participant.user else str(user_id)
        record = row_to_dict(participant)
        await self.db.delete(participant)
        await self.db.flush()
        record_change(self.db, "meeting_participants", "DELETE", record)

        return name

    async def _get_meeting_or_raise(self, meeting_id: UUID) -> Meeting:
        result = await self.db.execute(select(Meeting).where(Meeting.id == meeting_id))
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise ValueError("MEETING_NOT_FOUND")
        return meeting

    async def _get_participant_or_raise(
        self, meeting_id: UUID, user_id: UUID, refresh: bool = False
    ) -> MeetingParticipant:
        query = (
            select(MeetingParticipant)
            .options(selectinload(MeetingParticipant.user))
            .where(
                MeetingParticipant.meeting_id == meeting_id,
                MeetingParticipant.user_id == user_id,
            )
        )
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        participant = result.scalar_one_or_none()
        if not participant:
            raise ValueError("PARTICIPANT_NOT_FOUND")
        return participant

    async def _check_permission(
        self, meeting: Meeting, target_user_id: UUID, current_user_id: UUID
    ) -> None:
        """작성자, 참여자 본인, admin/manager만 허용"""
        if is_creator(meeting, current_user_id) or is_participant(target_user_id, current_user_id):
            return
        profile = await get_profile(self.db, current_user_id)
        if not is_admin_or_manager(profile):
            raise ValueError("PERMISSION_DENIED")
