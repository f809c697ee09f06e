import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from toolbox.api.middleware import session_activity_middleware
from toolbox.api.router import api_router
from toolbox.core.config import get_settings
from toolbox.core.database import engine
from toolbox.core.realtime import close_redis
from toolbox.core.telemetry import instrument_fastapi, setup_telemetry
from toolbox.schemas.common import ErrorResponse

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)
settings = get_settings()

# HTTP 상태 코드별 기본 에러 코드
DEFAULT_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """애플리케이션 라이프사이클"""
    if settings.otel_enabled:
        setup_telemetry("toolbox-api", "0.1.0")
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Toolbox - Internal productivity API (tasks, meetings, attendance, notulensi)",
    lifespan=lifespan,
)

# OpenTelemetry FastAPI 계측
if settings.otel_enabled:
    instrument_fastapi(app)

# 세션 비활성 타임아웃
app.middleware("http")(session_activity_middleware)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== Exception Handlers =====


def _error_response(status_code: int, error: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException을 공통 에러 envelope으로 변환"""
    if isinstance(exc.detail, dict):
        code = exc.detail.get("error", DEFAULT_ERROR_CODES.get(exc.status_code, "ERROR"))
        message = exc.detail.get("message", str(exc.detail))
    else:
        code = DEFAULT_ERROR_CODES.get(exc.status_code, "ERROR")
        message = str(exc.detail)
    response = _error_response(exc.status_code, message, code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """요청 검증 실패는 400으로 응답"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Validation error"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, "VALIDATION_ERROR")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error: %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"
    )


# API 라우터 등록
app.include_router(api_router)


@app.get("/health")
async def health_check() -> dict:
    """헬스 체크"""
    return {"status": "ok"}
