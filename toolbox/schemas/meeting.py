from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from toolbox.models.meeting import MeetingStatus, MeetingType
from toolbox.schemas.attendance import AttendanceResponse
from toolbox.schemas.participant import ParticipantResponse
from toolbox.schemas.profile import ProfileBrief


class CreateMeetingRequest(BaseModel):
    """회의 생성 요청"""

    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    date_time: datetime
    duration: int = Field(gt=0)
    location: str | None = Field(default=None, max_length=255)
    meeting_type: MeetingType = MeetingType.ONSITE
    meeting_link: str | None = Field(default=None, max_length=500)
    agenda: list[str] = Field(default_factory=list)
    participant_ids: list[UUID] = Field(default_factory=list)


class UpdateMeetingRequest(BaseModel):
    """회의 수정 요청"""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    date_time: datetime | None = None
    duration: int | None = Field(default=None, gt=0)
    status: MeetingStatus | None = None
    location: str | None = Field(default=None, max_length=255)
    meeting_type: MeetingType | None = None
    meeting_link: str | None = Field(default=None, max_length=500)
    agenda: list[str] | None = None
    participant_ids: list[UUID] | None = None


class MeetingResponse(BaseModel):
    """회의 응답 (작성자, 참여자 포함)"""

    id: UUID
    title: str
    description: str | None
    date_time: datetime
    duration: int
    status: str
    location: str | None
    meeting_type: str
    meeting_link: str | None
    agenda: list[str]
    qr_code_url: str | None
    qr_code_expires_at: datetime | None
    created_by: UUID
    created_at: datetime
    updated_at: datetime
    creator: ProfileBrief | None = None
    participants: list[ParticipantResponse] = []

    class Config:
        from_attributes = True


class MeetingDetailResponse(MeetingResponse):
    """회의 상세 응답 (출석 포함)"""

    attendance: list[AttendanceResponse] = []


class MonthlyAttendanceStats(BaseModel):
    """월별 출석 통계"""

    month: str
    total_meetings: int = Field(alias="totalMeetings")
    total_participants: int = Field(alias="totalParticipants")
    total_attendees: int = Field(alias="totalAttendees")
    attendance_rate: int = Field(alias="attendanceRate")

    class Config:
        populate_by_name = True
