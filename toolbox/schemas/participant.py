from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from toolbox.schemas.profile import ProfileBrief


class AddParticipantsRequest(BaseModel):
    """참여자 추가 요청"""

    user_ids: list[UUID]
    status: str = "invited"


class UpdateParticipantRequest(BaseModel):
    """참여자 응답 상태 변경 요청"""

    status: str


class ParticipantResponse(BaseModel):
    """회의 참여자 응답"""

    id: UUID
    meeting_id: UUID
    user_id: UUID
    status: str
    created_at: datetime
    user: ProfileBrief | None = None

    class Config:
        from_attributes = True
