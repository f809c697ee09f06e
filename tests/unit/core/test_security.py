"""세션 토큰 생성/검증 단위 테스트"""

from datetime import timedelta
from uuid import uuid4

from jose import jwt

from toolbox.core.config import get_settings
from toolbox.core.security import create_access_token, decode_token


def test_create_and_decode_token():
    """생성한 토큰의 클레임 확인"""
    user_id = str(uuid4())
    token = create_access_token(
        user_id, email="siti@example.com", user_metadata={"name": "Siti"}
    )

    payload = decode_token(token)

    assert payload is not None
    assert payload["sub"] == user_id
    assert payload["email"] == "siti@example.com"
    assert payload["user_metadata"] == {"name": "Siti"}
    assert payload["aud"] == "authenticated"


def test_decode_expired_token():
    """만료된 토큰은 None"""
    token = create_access_token(str(uuid4()), expires_delta=timedelta(seconds=-10))

    assert decode_token(token) is None


def test_decode_wrong_audience():
    """audience가 다르면 None"""
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(uuid4()), "aud": "anon"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )

    assert decode_token(token) is None


def test_decode_wrong_secret():
    """다른 시크릿으로 서명한 토큰은 None"""
    token = jwt.encode(
        {"sub": str(uuid4()), "aud": "authenticated"},
        "another-secret",
        algorithm="HS256",
    )

    assert decode_token(token) is None


def test_decode_garbage():
    assert decode_token("not-a-token") is None
