"""Logging helpers with optional OpenTelemetry export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import TelemetryConfig

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_LOGGERS: dict[str, logging.Logger] = {}
_HANDLER_INSTALLED = False


class _OtelContextFilter(logging.Filter):
    """Fills in trace/span placeholders when no span is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = "salvo") -> logging.Logger:
    logger = _LOGGERS.get(name)
    if logger is None:
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        _LOGGERS[name] = logger
    return logger


def init_logging(config: TelemetryConfig) -> logging.Logger:
    logger = get_logger(config.service_name)
    try:
        from opentelemetry._logs import set_logger_provider
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
        from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
        from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    except ImportError:  # pragma: no cover
        return logger

    from .tracer import build_resource

    provider = LoggerProvider(resource=build_resource(config))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    set_logger_provider(provider)
    _install_root_handler(LoggingHandler(level=logging.INFO, logger_provider=provider))
    return logger


def _install_root_handler(handler: logging.Handler) -> None:
    """Attach the OTLP handler to the root logger once."""
    global _HANDLER_INSTALLED
    if _HANDLER_INSTALLED:
        return

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    for existing in root_logger.handlers:
        existing.addFilter(_OtelContextFilter())

    handler.addFilter(_OtelContextFilter())
    root_logger.addHandler(handler)
    _HANDLER_INSTALLED = True
