"""OpenTelemetry 계측 설정

otel_enabled 설정이 켜진 경우 lifespan에서 초기화됩니다.
초기화되지 않았을 때는 noop meter를 돌려줍니다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.semconv.resource import ResourceAttributes

from toolbox.core.config import get_settings

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


def init_telemetry(
    service_name: str,
    service_version: str = "0.1.0",
    otlp_endpoint: str | None = None,
) -> tuple[trace.Tracer, metrics.Meter]:
    """OpenTelemetry 초기화

    Args:
        service_name: 서비스 이름
        service_version: 서비스 버전
        otlp_endpoint: OTLP 수신 엔드포인트 (기본값: 설정의 otel_exporter_otlp_endpoint)

    Returns:
        (Tracer, Meter) 튜플
    """
    settings = get_settings()
    endpoint = otlp_endpoint or settings.otel_exporter_otlp_endpoint

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: service_name,
            ResourceAttributes.SERVICE_VERSION: service_version,
            ResourceAttributes.DEPLOYMENT_ENVIRONMENT: settings.app_env,
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=True),
        export_interval_millis=10000,  # 10초마다 export
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)

    tracer = trace.get_tracer(service_name, service_version)
    meter = metrics.get_meter(service_name, service_version)

    logger.info(
        "Telemetry initialized: service=%s, endpoint=%s",
        service_name,
        endpoint,
    )

    return tracer, meter


def instrument_fastapi(app: FastAPI) -> None:
    """FastAPI 자동 계측"""
    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumentation enabled")
    except Exception as e:
        logger.warning("Failed to instrument FastAPI: %s", e)


# ===========================================
# 커스텀 메트릭
# ===========================================


class ToolboxMetrics:
    """도메인 커스텀 메트릭"""

    def __init__(self, meter: metrics.Meter):
        self.meter = meter
        self.check_ins_total = self.meter.create_counter(
            name="toolbox_check_ins_total",
            description="회의 체크인 수 (method별)",
        )
        self.qr_code_requests_total = self.meter.create_counter(
            name="toolbox_qr_code_requests_total",
            description="QR 코드 요청 수 (result=reused/generated/regenerated)",
        )


_meter: metrics.Meter | None = None
_toolbox_metrics: ToolboxMetrics | None = None
_initialized: bool = False


def get_meter() -> metrics.Meter:
    """Meter 인스턴스 반환 (초기화 안 된 경우 noop meter 반환)"""
    if _meter is None:
        return metrics.get_meter("toolbox-noop")
    return _meter


def get_toolbox_metrics() -> ToolboxMetrics:
    """커스텀 메트릭 반환 (초기화 전에는 noop meter 기반)"""
    global _toolbox_metrics
    if _toolbox_metrics is None:
        _toolbox_metrics = ToolboxMetrics(get_meter())
    return _toolbox_metrics


def setup_telemetry(service_name: str, service_version: str = "0.1.0") -> None:
    """전역 telemetry 설정 (애플리케이션 시작 시 호출)"""
    global _meter, _toolbox_metrics, _initialized

    if _initialized:
        logger.warning("Telemetry already initialized, skipping")
        return

    _, _meter = init_telemetry(service_name, service_version)
    _toolbox_metrics = ToolboxMetrics(_meter)
    _initialized = True
