"""행 변경 알림을 위한 Redis Pub/Sub 모듈

서비스는 변경된 행을 세션에 기록하고, 커밋이 끝난 뒤 테이블별 채널로
발행합니다. SSE 엔드포인트는 같은 채널을 구독합니다.
Redis 연결은 프로세스당 하나를 지연 생성해 공유합니다.
"""

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

import redis.asyncio as aioredis
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from toolbox.core.config import get_settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None

# Redis 채널 이름 패턴
CHANGE_CHANNEL_PREFIX = "changes:"

# 구독 가능한 테이블
REALTIME_TABLES = frozenset(
    {
        "tasks",
        "meetings",
        "meeting_participants",
        "meeting_attendance",
        "notulensi",
        "action_items",
    }
)

PENDING_CHANGES_KEY = "pending_changes"


def get_change_channel(table: str) -> str:
    """테이블별 채널 이름 생성"""
    return f"{CHANGE_CHANNEL_PREFIX}{table}"


async def get_redis() -> aioredis.Redis:
    """공유 Redis 클라이언트 (최초 호출 시 생성)"""
    global _client

    if _client is None:
        _client = aioredis.from_url(
            get_settings().redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.info("Redis 클라이언트 생성")

    return _client


async def close_redis() -> None:
    """애플리케이션 종료 시 Redis 연결 정리"""
    global _client

    if _client is None:
        return
    await _client.aclose()
    _client = None


def row_to_dict(row: Any) -> dict[str, Any]:
    """ORM 객체의 컬럼 값만 dict로 변환"""
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


def record_change(session: AsyncSession, table: str, event: str, record: dict[str, Any]) -> None:
    """커밋 후 발행할 변경 이벤트 기록

    Args:
        session: 현재 요청의 DB 세션
        table: 테이블 이름
        event: INSERT / UPDATE / DELETE
        record: 변경된 행 (DELETE는 id 등 최소 정보)
    """
    pending = session.info.setdefault(PENDING_CHANGES_KEY, [])
    pending.append({"table": table, "event": event, "record": record})


async def publish_change(table: str, event: str, record: dict[str, Any]) -> None:
    """변경 이벤트 발행"""
    try:
        redis = await get_redis()
        channel = get_change_channel(table)
        message = json.dumps(
            {"table": table, "event": event, "record": record},
            ensure_ascii=False,
            default=str,
        )
        await redis.publish(channel, message)
        logger.debug("변경 이벤트 발행: channel=%s event=%s", channel, event)
    except Exception as e:
        logger.warning("변경 이벤트 발행 실패 (비치명적): %s", e)


async def publish_pending_changes(session: AsyncSession) -> None:
    """세션에 쌓인 변경 이벤트를 모두 발행"""
    pending = session.info.pop(PENDING_CHANGES_KEY, [])
    for change in pending:
        await publish_change(change["table"], change["event"], change["record"])


def _matches_meeting(change: dict, meeting_id: str | None) -> bool:
    if meeting_id is None:
        return True
    record = change.get("record") or {}
    return str(record.get("meeting_id")) == meeting_id or (
        change.get("table") == "meetings" and str(record.get("id")) == meeting_id
    )


async def subscribe_changes(
    table: str,
    meeting_id: str | None = None,
) -> AsyncGenerator[dict, None]:
    """변경 이벤트 구독 (SSE용 제너레이터)

    Args:
        table: 구독할 테이블
        meeting_id: 지정하면 해당 회의에 속한 행의 변경만 전달

    Yields:
        {"type": "heartbeat"} 또는 {"type": "change", "data": {...}}
    """
    redis = await get_redis()
    channel = get_change_channel(table)
    pubsub = redis.pubsub()

    try:
        await pubsub.subscribe(channel)
        logger.info("변경 구독 시작: channel=%s", channel)

        while True:
            try:
                # get_message는 최대 1초 대기, wait_for는 연결 무응답 대비
                message = await asyncio.wait_for(
                    pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0),
                    timeout=30.0,
                )

                if message is None:
                    yield {"type": "heartbeat"}
                    continue

                if message["type"] == "message":
                    data = json.loads(message["data"])
                    if _matches_meeting(data, meeting_id):
                        yield {"type": "change", "data": data}

            except asyncio.TimeoutError:
                yield {"type": "heartbeat"}

    except asyncio.CancelledError:
        logger.info("변경 구독 취소: channel=%s", channel)
        raise
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.close()
        logger.info("변경 구독 종료: channel=%s", channel)
