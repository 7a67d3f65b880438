"""
Telemetry bootstrap: stdlib logging plus OpenTelemetry traces and logs.

Spans and log records are always produced; they are only shipped to Axiom
(OTLP over HTTP) when ``settings.axiom_token`` is set. Import ``get_logger``
and ``trace_span`` from here rather than touching ``logging`` directly.
"""

from typing import Dict, Optional
import functools
import asyncio
import logging
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, Tracer
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from common.core.config import settings

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)

AXIOM_TRACES_ENDPOINT = "https://api.axiom.co/v1/traces"
AXIOM_LOGS_ENDPOINT = "https://api.axiom.co/v1/logs"

axiom_tracer: Optional[Tracer] = None
_tracer_provider: Optional[TracerProvider] = None
_logger_provider: Optional[LoggerProvider] = None


def _axiom_headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.axiom_token}",
        "X-Axiom-Dataset": settings.axiom_dataset,
    }


def initialize_telemetry() -> None:
    """Set up tracer (and, with a token, log export). Idempotent."""
    global axiom_tracer, _tracer_provider, _logger_provider

    if axiom_tracer is not None:
        return

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.otel_service_name,
            SERVICE_VERSION: settings.otel_service_version,
            "deployment.environment": settings.environment.value,
        }
    )

    _tracer_provider = TracerProvider(resource=resource)
    if settings.axiom_token:
        _tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=AXIOM_TRACES_ENDPOINT, headers=_axiom_headers())
            )
        )
        _logger_provider = LoggerProvider(resource=resource)
        _logger_provider.add_log_record_processor(
            BatchLogRecordProcessor(
                OTLPLogExporter(endpoint=AXIOM_LOGS_ENDPOINT, headers=_axiom_headers())
            )
        )
        set_logger_provider(_logger_provider)
        logging.getLogger().addHandler(
            LoggingHandler(level=logging.INFO, logger_provider=_logger_provider)
        )

    trace.set_tracer_provider(_tracer_provider)
    axiom_tracer = trace.get_tracer(settings.otel_service_name)
    logging.getLogger(__name__).info(
        f"Telemetry initialized (export={'axiom' if settings.axiom_token else 'off'})"
    )


def shutdown_telemetry() -> None:
    """Flush pending spans and log records before the process exits."""
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    if _logger_provider is not None:
        _logger_provider.shutdown()


def get_logger(name: str) -> logging.Logger:
    initialize_telemetry()
    return logging.getLogger(name)


def _span_name(func, args) -> str:
    if args and not isinstance(args[0], (str, int, float, bytes)):
        return f"{type(args[0]).__name__}.{func.__name__}"
    return func.__name__


def _mark_failed_result(span, result) -> None:
    # Services return Err instead of raising; surface those on the span
    is_err = getattr(result, "is_err", None)
    if callable(is_err) and is_err():
        error = result.error
        span.set_attribute("app.error_code", getattr(error, "code", type(error).__name__))
        span.set_status(Status(StatusCode.ERROR, str(error)))


def trace_span(func):
    """Run the wrapped function inside a span named ``Class.method``."""

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        with axiom_tracer.start_as_current_span(_span_name(func, args)) as span:
            result = func(*args, **kwargs)
            _mark_failed_result(span, result)
            return result

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        with axiom_tracer.start_as_current_span(_span_name(func, args)) as span:
            result = await func(*args, **kwargs)
            _mark_failed_result(span, result)
            return result

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper
