from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from toolbox.schemas.profile import ProfileBrief


class CheckInRequest(BaseModel):
    """체크인 요청 (user_id 생략 시 본인)"""

    user_id: UUID | None = None
    check_in_method: str = "manual"
    location_lat: float | None = None
    location_lng: float | None = None
    device_info: str | None = None


class AttendanceResponse(BaseModel):
    """출석 응답"""

    id: UUID
    meeting_id: UUID
    user_id: UUID
    checked_in_at: datetime
    check_in_method: str
    location_lat: float | None
    location_lng: float | None
    device_info: str | None
    created_at: datetime
    user: ProfileBrief | None = None

    class Config:
        from_attributes = True


class AttendanceMeetingBrief(BaseModel):
    id: UUID
    title: str
    date_time: datetime

    class Config:
        from_attributes = True


class AttendanceListResponse(BaseModel):
    """회의별 출석 목록"""

    meeting: AttendanceMeetingBrief
    attendance: list[AttendanceResponse]


class QRCodeResponse(BaseModel):
    """체크인 QR 코드 응답"""

    qr_code_url: str
    expires_at: datetime
    check_in_url: str
    meeting: AttendanceMeetingBrief | None = None
