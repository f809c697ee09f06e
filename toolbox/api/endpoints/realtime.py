import asyncio
import json
import logging
from uuid import UUID

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from toolbox.api.dependencies import CurrentUser, handle_service_error
from toolbox.core.realtime import REALTIME_TABLES, subscribe_changes
from toolbox.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/realtime", tags=["Realtime"])


@router.get(
    "/{table}/stream",
    summary="테이블 변경 스트리밍 (SSE)",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def stream_changes(
    table: str,
    request: Request,
    current_user: CurrentUser,
    meeting_id: UUID | None = Query(default=None, description="특정 회의의 변경만 수신"),
) -> StreamingResponse:
    """테이블 행 변경을 SSE로 스트리밍합니다.

    **이벤트 타입:**
    - `change`: INSERT / UPDATE / DELETE 발생 시 `{table, event, record}`
    - heartbeat 주석: 연결 유지용

    **사용 예시:**
    ```javascript
    const es = new EventSource('/api/realtime/meeting_attendance/stream?meeting_id={id}');
    es.addEventListener('change', (e) => refetch(JSON.parse(e.data)));
    ```
    """
    if table not in REALTIME_TABLES:
        handle_service_error(ValueError("INVALID_REALTIME_TABLE"))

    meeting_filter = str(meeting_id) if meeting_id else None

    async def event_generator():
        try:
            async for message in subscribe_changes(table, meeting_filter):
                if await request.is_disconnected():
                    logger.info("SSE 클라이언트 연결 끊김: table=%s", table)
                    break

                if message["type"] == "heartbeat":
                    yield ": heartbeat\n\n"
                elif message["type"] == "change":
                    data = json.dumps(message["data"], ensure_ascii=False)
                    yield f"event: change\ndata: {data}\n\n"

        except asyncio.CancelledError:
            logger.info("SSE 스트림 취소: table=%s", table)
        except Exception as e:
            logger.error("SSE 스트림 오류: table=%s, error=%s", table, e)
            yield f"event: error\ndata: {json.dumps({'error': str(e)})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Nginx buffering 비활성화
        },
    )
