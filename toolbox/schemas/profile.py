from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ProfileBrief(BaseModel):
    """응답에 포함되는 사용자 간략 정보"""

    id: UUID
    name: str
    department: str | None = None
    role: str
    avatar_url: str | None = None

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    """사용자 프로필 응답"""

    id: UUID
    email: str | None = None
    name: str
    role: str
    department: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
