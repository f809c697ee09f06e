"""체크인 QR 코드 서비스

QR 이미지는 외부 QR 서비스 URL로만 표현합니다. 유효한 QR이 있으면 재사용하고,
만료되었거나 없으면 새로 만듭니다.
"""

import logging
from datetime import timedelta
from urllib.parse import quote
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.core.config import get_settings
from toolbox.core.realtime import record_change, row_to_dict
from toolbox.core.telemetry import get_toolbox_metrics
from toolbox.models.meeting import Meeting
from toolbox.schemas.attendance import AttendanceMeetingBrief, QRCodeResponse
from toolbox.services.permissions import get_profile, is_admin_or_manager, is_creator
from toolbox.utils.dates import ensure_aware, utcnow

logger = logging.getLogger(__name__)


def build_check_in_url(meeting_id: UUID) -> str:
    """체크인 페이지 URL"""
    base = get_settings().app_url.rstrip("/")
    return f"{base}/meetings/{meeting_id}/check-in"


def build_qr_code_url(check_in_url: str, cache_buster: int | None = None) -> str:
    """QR 이미지 URL (cache_buster는 재생성 시 epoch ms)"""
    settings = get_settings()
    url = f"{settings.qr_code_service_url}?size={settings.qr_code_size}&data={quote(check_in_url, safe='')}"
    if cache_buster is not None:
        url += f"&t={cache_buster}"
    return url


class QRCodeService:
    """회의 체크인 QR 코드 서비스"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create(self, meeting_id: UUID, user_id: UUID) -> tuple[QRCodeResponse, bool]:
        """유효한 QR 코드 반환, 없거나 만료되었으면 생성

        Returns:
            (QR 코드 응답, 새로 생성했는지 여부)
        """
        meeting = await self._get_meeting_for_manager(meeting_id, user_id)
        check_in_url = build_check_in_url(meeting.id)

        expires_at = ensure_aware(meeting.qr_code_expires_at)
        if meeting.qr_code_url and expires_at and expires_at > utcnow():
            get_toolbox_metrics().qr_code_requests_total.add(1, {"result": "reused"})
            return (
                QRCodeResponse(
                    qr_code_url=meeting.qr_code_url,
                    expires_at=expires_at,
                    check_in_url=check_in_url,
                ),
                False,
            )

        response = await self._issue(meeting, check_in_url, cache_buster=False)
        get_toolbox_metrics().qr_code_requests_total.add(1, {"result": "generated"})
        return response, True

    async def regenerate(self, meeting_id: UUID, user_id: UUID) -> QRCodeResponse:
        """QR 코드 강제 재생성"""
        meeting = await self._get_meeting_for_manager(meeting_id, user_id)
        check_in_url = build_check_in_url(meeting.id)

        response = await self._issue(meeting, check_in_url, cache_buster=True)
        get_toolbox_metrics().qr_code_requests_total.add(1, {"result": "regenerated"})
        return response

    async def _issue(self, meeting: Meeting, check_in_url: str, cache_buster: bool) -> QRCodeResponse:
        now = utcnow()
        expires_at = now + timedelta(hours=get_settings().qr_code_ttl_hours)
        qr_code_url = build_qr_code_url(
            check_in_url,
            cache_buster=int(now.timestamp() * 1000) if cache_buster else None,
        )

        meeting.qr_code_url = qr_code_url
        meeting.qr_code_expires_at = expires_at
        await self.db.flush()
        record_change(self.db, "meetings", "UPDATE", row_to_dict(meeting))
        logger.info("QR code issued: meeting=%s expires_at=%s", meeting.id, expires_at.isoformat())

        return QRCodeResponse(
            qr_code_url=qr_code_url,
            expires_at=expires_at,
            check_in_url=check_in_url,
            meeting=AttendanceMeetingBrief.model_validate(meeting),
        )

    async def _get_meeting_for_manager(self, meeting_id: UUID, user_id: UUID) -> Meeting:
        """회의 조회 + 작성자/admin/manager 권한 확인"""
        result = await self.db.execute(select(Meeting).where(Meeting.id == meeting_id))
        meeting = result.scalar_one_or_none()
        if not meeting:
            raise ValueError("MEETING_NOT_FOUND")

        if not is_creator(meeting, user_id):
            profile = await get_profile(self.db, user_id)
            if not is_admin_or_manager(profile):
                raise ValueError("QR_CODE_PERMISSION_DENIED")

        return meeting
