from pydantic import BaseModel, Field

from toolbox.models.profile import UserRole
from toolbox.schemas.auth import AuthUser
from toolbox.schemas.profile import ProfileResponse


class SettingsResponse(BaseModel):
    """설정 조회 응답"""

    profile: ProfileResponse
    user: AuthUser


class UpdateSettingsRequest(BaseModel):
    """설정 수정 요청"""

    avatar_url: str | None = Field(default=None, max_length=500)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=100)
    role: UserRole | None = None


class AvatarUploadResponse(BaseModel):
    """아바타 업로드 응답"""

    avatar_url: str
    profile: ProfileResponse
