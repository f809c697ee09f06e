"""pytest 설정 및 공유 fixture

테스트 인프라:
- 테스트 DB 세션 (기본: 인메모리 SQLite)
- FastAPI AsyncClient
- Mock 서비스 (MinIO, Redis)
- 테스트 데이터 fixture
"""

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from toolbox.core.config import Settings
from toolbox.core.database import Base, get_db
from toolbox.core.security import create_access_token
from toolbox.main import app
from toolbox.models.meeting import Meeting, MeetingParticipant, MeetingStatus, ParticipantStatus
from toolbox.models.profile import Profile, UserRole
from toolbox.models.task import Task, TaskPriority, TaskStatus


# ===== 테스트 설정 =====


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """테스트용 설정

    환경변수 TEST_DATABASE_URL이 있으면 사용, 없으면 인메모리 SQLite 사용
    """
    test_db_url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

    return Settings(
        app_env="test",
        debug=True,
        database_url=test_db_url,
        redis_url="redis://localhost:6379/1",  # 테스트용 DB 1 사용
        minio_endpoint="localhost:9000",
        minio_access_key="minioadmin",
        minio_secret_key="minioadmin",
        minio_secure=False,
    )


# ===== 데이터베이스 Fixture =====


@pytest.fixture
async def test_engine(test_settings: Settings):
    """테스트용 비동기 엔진

    각 테스트마다 새 엔진 생성 (인메모리 DB는 엔진마다 새로 만들어짐)
    """
    engine_kwargs: dict[str, Any] = {"echo": False}
    if test_settings.database_url.startswith("sqlite"):
        # 인메모리 DB를 하나의 커넥션으로 공유
        engine_kwargs.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    engine = create_async_engine(test_settings.database_url, **engine_kwargs)

    # 테이블 생성
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # 테이블 삭제
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """테스트용 DB 세션 (function scope)"""
    session_maker = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def override_get_db(db_session: AsyncSession):
    """FastAPI 의존성 오버라이드용 DB fixture"""

    async def _override_get_db():
        yield db_session

    return _override_get_db


# ===== FastAPI Client Fixture =====


@pytest.fixture
async def async_client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """비동기 FastAPI 클라이언트"""
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ===== Mock Services =====


@pytest.fixture
def mock_storage_service():
    """MinIO 스토리지 서비스 Mock (아바타 업로드)"""
    with patch("toolbox.services.settings_service.storage_service") as mock:
        mock.upload_avatar.return_value = "avatar.png"
        mock.get_public_url.side_effect = (
            lambda bucket, object_name: f"http://storage.test/{bucket}/{object_name}"
        )
        yield mock


@pytest.fixture
def mock_redis():
    """Redis Mock (publish/pubsub)"""
    mock = MagicMock()
    mock.publish = AsyncMock(return_value=1)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)

    with patch("toolbox.core.realtime.get_redis", AsyncMock(return_value=mock)):
        yield mock


# ===== 테스트 데이터 Fixture =====


async def _create_profile(
    db_session: AsyncSession, name: str, email: str, role: str, department: str | None
) -> Profile:
    profile = Profile(
        id=uuid4(),
        email=email,
        name=name,
        role=role,
        department=department,
    )
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Profile:
    """admin 역할 사용자"""
    return await _create_profile(db_session, "Admin Utama", "admin@example.com", UserRole.ADMIN.value, "IT")


@pytest.fixture
async def manager_user(db_session: AsyncSession) -> Profile:
    """manager 역할 사용자"""
    return await _create_profile(
        db_session, "Budi Manager", "budi@example.com", UserRole.MANAGER.value, "Operasional"
    )


@pytest.fixture
async def test_user(db_session: AsyncSession) -> Profile:
    """employee 역할 사용자"""
    return await _create_profile(
        db_session, "Siti Rahma", "siti@example.com", UserRole.EMPLOYEE.value, "Keuangan"
    )


@pytest.fixture
async def test_user2(db_session: AsyncSession) -> Profile:
    """두 번째 employee 사용자"""
    return await _create_profile(
        db_session, "Andi Pratama", "andi@example.com", UserRole.EMPLOYEE.value, "Keuangan"
    )


@pytest.fixture
async def test_task(db_session: AsyncSession, test_user: Profile) -> Task:
    """테스트용 작업 (작성자: test_user)"""
    task = Task(
        id=uuid4(),
        title="Laporan bulanan",
        description="Susun laporan keuangan bulan ini",
        priority=TaskPriority.HIGH.value,
        status=TaskStatus.PENDING.value,
        created_by=test_user.id,
        tags=["laporan", "keuangan"],
    )
    db_session.add(task)
    await db_session.commit()
    await db_session.refresh(task)
    return task


@pytest.fixture
async def test_meeting(db_session: AsyncSession, test_user: Profile, test_user2: Profile) -> Meeting:
    """테스트용 회의 (작성자: test_user, 참여자: test_user, test_user2)"""
    meeting = Meeting(
        id=uuid4(),
        title="Rapat Koordinasi",
        description="Koordinasi mingguan",
        date_time=datetime.now(timezone.utc) + timedelta(days=1),
        duration=90,
        status=MeetingStatus.SCHEDULED.value,
        location="Ruang Rapat 1",
        agenda=["Evaluasi", "Rencana"],
        created_by=test_user.id,
    )
    db_session.add(meeting)
    await db_session.flush()

    for user in (test_user, test_user2):
        db_session.add(
            MeetingParticipant(
                meeting_id=meeting.id,
                user_id=user.id,
                status=ParticipantStatus.ACCEPTED.value,
            )
        )

    await db_session.commit()
    await db_session.refresh(meeting)
    return meeting


def make_auth_headers(user: Profile) -> dict[str, str]:
    """사용자용 Bearer 인증 헤더"""
    token = create_access_token(
        str(user.id), email=user.email, user_metadata={"name": user.name}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_for():
    """임의 사용자용 인증 헤더 생성 함수"""
    return make_auth_headers


@pytest.fixture
def auth_headers(test_user: Profile) -> dict[str, str]:
    """test_user 인증 헤더"""
    return make_auth_headers(test_user)


@pytest.fixture
def auth_headers2(test_user2: Profile) -> dict[str, str]:
    """test_user2 인증 헤더"""
    return make_auth_headers(test_user2)


@pytest.fixture
def admin_headers(admin_user: Profile) -> dict[str, str]:
    """admin 인증 헤더"""
    return make_auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user: Profile) -> dict[str, str]:
    """manager 인증 헤더"""
    return make_auth_headers(manager_user)


# ===== 유틸리티 함수 =====


def assert_uuid(value: Any) -> UUID:
    """UUID 검증 및 변환"""
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value)
    raise ValueError(f"Invalid UUID: {value}")
