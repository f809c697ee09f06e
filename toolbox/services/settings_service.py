import asyncio
import logging
import mimetypes
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.core.config import get_settings
from toolbox.core.storage import StorageService, storage_service
from toolbox.models.profile import Profile
from toolbox.schemas.auth import AuthUser
from toolbox.schemas.profile import ProfileResponse
from toolbox.schemas.settings import (
    AvatarUploadResponse,
    SettingsResponse,
    UpdateSettingsRequest,
)
from toolbox.services.permissions import get_profile, is_admin
from toolbox.utils.dates import utcnow

logger = logging.getLogger(__name__)


def avatar_extension(filename: str | None, content_type: str) -> str:
    """아바타 파일 확장자 (파일명 우선, 없으면 content type에서 추정)"""
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    guessed = mimetypes.guess_extension(content_type or "")
    return guessed.lstrip(".") if guessed else "png"


class SettingsService:
    """사용자 설정 서비스"""

    def __init__(self, db: AsyncSession, storage: StorageService | None = None):
        self.db = db
        self.storage = storage or storage_service

    async def get_settings(self, user: AuthUser) -> SettingsResponse:
        """프로필 + 인증 사용자 정보"""
        profile = await self._get_profile_or_raise(user.id)
        return SettingsResponse(
            profile=ProfileResponse.model_validate(profile),
            user=user,
        )

    async def update_settings(
        self, user_id: UUID, data: UpdateSettingsRequest
    ) -> ProfileResponse:
        """프로필 수정 (역할 변경은 admin만)"""
        profile = await self._get_profile_or_raise(user_id)

        updates = data.model_dump(exclude_unset=True)
        if updates.get("role") is not None and updates["role"].value != profile.role:
            if not is_admin(profile):
                raise ValueError("ROLE_CHANGE_FORBIDDEN")

        for field, value in updates.items():
            if value is None and field in ("name", "role"):
                continue
            if field == "role":
                value = value.value
            setattr(profile, field, value)

        await self.db.flush()
        await self.db.refresh(profile)
        return ProfileResponse.model_validate(profile)

    async def upload_avatar(
        self,
        user_id: UUID,
        filename: str | None,
        content_type: str | None,
        data: bytes,
    ) -> AvatarUploadResponse:
        """아바타 업로드 후 프로필 avatar_url 갱신"""
        if not content_type or not content_type.startswith("image/"):
            raise ValueError("INVALID_AVATAR_TYPE")
        if len(data) > get_settings().avatar_max_bytes:
            raise ValueError("AVATAR_TOO_LARGE")

        profile = await self._get_profile_or_raise(user_id)

        timestamp = int(utcnow().timestamp() * 1000)
        object_name = f"{user_id}-{timestamp}.{avatar_extension(filename, content_type)}"

        # MinIO 클라이언트는 동기식
        await asyncio.to_thread(self.storage.upload_avatar, object_name, data, content_type)
        avatar_url = self.storage.get_public_url(StorageService.BUCKET_AVATARS, object_name)

        profile.avatar_url = avatar_url
        await self.db.flush()
        await self.db.refresh(profile)
        logger.info("Avatar uploaded: user=%s object=%s", user_id, object_name)

        return AvatarUploadResponse(
            avatar_url=avatar_url,
            profile=ProfileResponse.model_validate(profile),
        )

    async def _get_profile_or_raise(self, user_id: UUID) -> Profile:
        profile = await get_profile(self.db, user_id)
        if not profile:
            raise ValueError("PROFILE_NOT_FOUND")
        return profile
