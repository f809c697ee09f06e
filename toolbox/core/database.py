import json
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from toolbox.core.config import get_settings
from toolbox.core.realtime import publish_pending_changes

settings = get_settings()


def _json_serializer(value) -> str:
    return json.dumps(value, ensure_ascii=False)


# 비동기 엔진 생성
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    json_serializer=_json_serializer,
)

# 세션 팩토리
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """모든 모델의 기본 클래스"""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """DB 세션 의존성

    커밋이 끝난 뒤 세션에 쌓인 변경 이벤트를 실시간 채널로 발행합니다.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await publish_pending_changes(session)
