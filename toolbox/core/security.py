"""세션 토큰 검증

토큰은 외부 인증 서비스가 발급합니다. 이 모듈은 공유 시크릿으로 서명을
검증하고, 테스트/로컬 도구를 위해 같은 형식의 토큰을 만들 수 있습니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from toolbox.core.config import get_settings


def create_access_token(
    subject: str,
    email: str | None = None,
    user_metadata: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Access token 생성 (인증 서비스와 동일한 클레임 구조)"""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {
        "sub": subject,
        "email": email,
        "user_metadata": user_metadata or {},
        "aud": settings.jwt_audience,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict | None:
    """토큰 디코딩 (검증 포함)"""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
        return payload
    except JWTError:
        return None
