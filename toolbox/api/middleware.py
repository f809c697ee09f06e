"""세션 비활성 타임아웃 미들웨어

세션 쿠키가 유효한 요청마다 last_activity 쿠키를 갱신하고,
마지막 활동 이후 타임아웃이 지났으면 세션을 종료합니다.
"""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from toolbox.api.dependencies import auth_user_from_token
from toolbox.core.config import get_settings
from toolbox.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def clear_session_cookies(response: Response) -> None:
    """세션/활동 쿠키 삭제"""
    settings = get_settings()
    response.delete_cookie(settings.session_cookie_name)
    response.delete_cookie(settings.activity_cookie_name)


def _is_expired(last_activity: str | None, now_ms: int, timeout_ms: int) -> bool:
    if not last_activity:
        return False
    try:
        return now_ms - int(last_activity) > timeout_ms
    except ValueError:
        return False


async def session_activity_middleware(request: Request, call_next) -> Response:
    settings = get_settings()
    token = request.cookies.get(settings.session_cookie_name)
    if not token or auth_user_from_token(token) is None:
        return await call_next(request)

    now_ms = int(time.time() * 1000)
    timeout_ms = settings.session_idle_timeout_minutes * 60 * 1000
    last_activity = request.cookies.get(settings.activity_cookie_name)

    if _is_expired(last_activity, now_ms, timeout_ms):
        logger.info("Session expired due to inactivity: path=%s", request.url.path)
        # 만료된 세션은 경로와 관계없이 종료 (last_activity 갱신 없음)
        if request.url.path.startswith("/api"):
            response = JSONResponse(
                status_code=401,
                content=ErrorResponse(
                    error="Session expired due to inactivity",
                    code="SESSION_EXPIRED",
                ).model_dump(),
            )
        else:
            response = await call_next(request)
        clear_session_cookies(response)
        return response

    response = await call_next(request)
    if request.url.path.endswith("/auth/logout"):
        return response
    response.set_cookie(
        settings.activity_cookie_name,
        str(now_ms),
        max_age=settings.session_idle_timeout_minutes * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return response
