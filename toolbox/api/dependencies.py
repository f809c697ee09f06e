"""공유 API dependencies - 엔드포인트 간 중복 제거"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from toolbox.core.config import get_settings
from toolbox.core.security import decode_token
from toolbox.schemas.auth import AuthUser

security = HTTPBearer(auto_error=False)


# ===== Auth Dependencies =====


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": code, "message": message},
    )


def get_session_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    """Bearer 헤더 우선, 없으면 세션 쿠키"""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name)


def auth_user_from_token(token: str) -> AuthUser | None:
    """토큰 검증 후 인증 사용자 반환 (실패 시 None)"""
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        return None
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        return None
    return AuthUser(
        id=user_id,
        email=payload.get("email"),
        user_metadata=payload.get("user_metadata") or {},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthUser:
    """현재 사용자 조회"""
    token = get_session_token(request, credentials)
    if not token:
        raise _unauthorized("UNAUTHORIZED", "Unauthorized")

    user = auth_user_from_token(token)
    if user is None:
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")
    return user


CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


# ===== Service Error Handling =====

# 서비스 레이어에서 발생하는 에러 코드와 HTTP 응답 매핑
# (status_code, error_code, message)
SERVICE_ERROR_MAPPING: dict[str, tuple[int, str, str]] = {
    # 조회 실패
    "TASK_NOT_FOUND": (404, "NOT_FOUND", "Task not found"),
    "MEETING_NOT_FOUND": (404, "NOT_FOUND", "Meeting not found"),
    "PARTICIPANT_NOT_FOUND": (404, "NOT_FOUND", "Participant not found"),
    "NOTULENSI_NOT_FOUND": (404, "NOT_FOUND", "Notulensi not found"),
    "PROFILE_NOT_FOUND": (404, "NOT_FOUND", "Profile not found"),
    # 권한
    "PERMISSION_DENIED": (403, "FORBIDDEN", "Insufficient permissions"),
    "CHECK_IN_PERMISSION_DENIED": (
        403,
        "FORBIDDEN",
        "Insufficient permissions to check in other users",
    ),
    "QR_CODE_PERMISSION_DENIED": (
        403,
        "FORBIDDEN",
        "Insufficient permissions to generate QR code",
    ),
    "NOTULENSI_EDIT_FORBIDDEN": (403, "FORBIDDEN", "You can only edit your own notulensi"),
    "NOTULENSI_DELETE_FORBIDDEN": (403, "FORBIDDEN", "You can only delete your own notulensi"),
    "NOTULENSI_APPROVED": (403, "FORBIDDEN", "Cannot delete approved notulensi"),
    "ROLE_CHANGE_FORBIDDEN": (403, "FORBIDDEN", "Only admins can change roles"),
    # 입력 검증
    "INVALID_TASK_STATUS": (
        400,
        "VALIDATION_ERROR",
        "Invalid status. Must be one of: pending, in-progress, completed, cancelled",
    ),
    "INVALID_PARTICIPANT_STATUS": (
        400,
        "VALIDATION_ERROR",
        "Invalid status. Must be one of: invited, accepted, declined, tentative",
    ),
    "INVALID_CHECK_IN_METHOD": (400, "VALIDATION_ERROR", "Invalid check_in_method"),
    "USER_IDS_REQUIRED": (400, "VALIDATION_ERROR", "user_ids must be a non-empty array"),
    "ASSIGNEE_NOT_FOUND": (400, "VALIDATION_ERROR", "Assignee not found"),
    "NOT_A_PARTICIPANT": (400, "BAD_REQUEST", "User is not a participant of this meeting"),
    "ALREADY_CHECKED_IN": (400, "BAD_REQUEST", "User already checked in"),
    "INVALID_AVATAR_TYPE": (400, "VALIDATION_ERROR", "File must be an image"),
    "AVATAR_TOO_LARGE": (400, "VALIDATION_ERROR", "File size must be less than 5MB"),
    "INVALID_REALTIME_TABLE": (400, "VALIDATION_ERROR", "Unknown realtime table"),
}


def handle_service_error(error: ValueError, default_message: str = "Validation error") -> None:
    """서비스 레이어 에러를 HTTPException으로 변환

    Args:
        error: 서비스에서 발생한 ValueError (에러 코드가 str로 전달됨)
        default_message: 매핑되지 않은 에러의 기본 메시지

    Raises:
        HTTPException: 매핑된 HTTP 에러 응답
    """
    error_code = str(error)

    if error_code in SERVICE_ERROR_MAPPING:
        status_code, code, message = SERVICE_ERROR_MAPPING[error_code]
        raise HTTPException(
            status_code=status_code,
            detail={"error": code, "message": message},
        )

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "VALIDATION_ERROR", "message": default_message},
    )
