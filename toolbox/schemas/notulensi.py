from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from toolbox.models.notulensi import ActionItemPriority, ActionItemStatus
from toolbox.schemas.participant import ParticipantResponse
from toolbox.schemas.profile import ProfileBrief


class ActionItemRequest(BaseModel):
    """액션 아이템 입력"""

    description: str = Field(min_length=1)
    assignee_id: UUID | None = None
    due_date: datetime | None = None
    priority: ActionItemPriority = ActionItemPriority.MEDIUM
    status: ActionItemStatus = ActionItemStatus.PENDING


class CreateNotulensiRequest(BaseModel):
    """회의록 생성 요청"""

    meeting_id: UUID
    content: str = Field(min_length=1)
    decisions: list[str] = Field(default_factory=list)
    next_meeting_date: datetime | None = None
    is_draft: bool = False
    action_items: list[ActionItemRequest] = Field(default_factory=list)


class UpdateNotulensiRequest(BaseModel):
    """회의록 수정 요청

    approved_by가 있으면 승인, approved_at을 명시적으로 null로 보내면 승인 취소.
    """

    content: str | None = Field(default=None, min_length=1)
    decisions: list[str] | None = None
    next_meeting_date: datetime | None = None
    is_draft: bool | None = None
    approved_by: UUID | None = None
    approved_at: datetime | None = None
    action_items: list[ActionItemRequest] | None = None


class ActionItemResponse(BaseModel):
    """액션 아이템 응답"""

    id: UUID
    notulensi_id: UUID
    description: str
    assignee_id: UUID | None
    due_date: datetime | None
    priority: str
    status: str
    completed_at: datetime | None
    created_at: datetime
    assignee: ProfileBrief | None = None

    class Config:
        from_attributes = True


class NotulensiMeetingSummary(BaseModel):
    """회의록에 포함되는 회의 정보"""

    id: UUID
    title: str
    description: str | None
    date_time: datetime
    duration: int
    location: str | None
    meeting_type: str
    status: str
    creator: ProfileBrief | None = None

    class Config:
        from_attributes = True


class NotulensiMeetingDetail(NotulensiMeetingSummary):
    """회의록 상세에 포함되는 회의 정보 (안건, 참여자 포함)"""

    agenda: list[str] = []
    participants: list[ParticipantResponse] = []


class NotulensiResponse(BaseModel):
    """회의록 응답"""

    id: UUID
    meeting_id: UUID
    content: str
    decisions: list[str]
    next_meeting_date: datetime | None
    created_by: UUID
    approved_by: UUID | None
    approved_at: datetime | None
    is_draft: bool
    created_at: datetime
    updated_at: datetime
    meeting: NotulensiMeetingSummary | None = None
    creator: ProfileBrief | None = None
    approver: ProfileBrief | None = None
    action_items: list[ActionItemResponse] = []

    class Config:
        from_attributes = True


class NotulensiDetailResponse(NotulensiResponse):
    """회의록 상세 응답"""

    meeting: NotulensiMeetingDetail | None = None
