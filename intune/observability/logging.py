import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import g, has_request_context, request

try:
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.sdk.resources import Resource
except Exception:  # pragma: no cover - Opentelemetry optional
    LoggerProvider = None  # type: ignore
    LoggingHandler = None  # type: ignore

_CONTEXT_FIELDS = ("request_id", "path", "method", "remote_addr")


class RequestContextFilter(logging.Filter):
    """Attach request-scoped metadata to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = getattr(g, "request_id", None)
            record.path = request.path
            record.method = request.method
            record.remote_addr = request.remote_addr
        else:
            for field in _CONTEXT_FIELDS:
                setattr(record, field, None)
        return True


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            payload[field] = getattr(record, field, None)
        # Domain extras passed via ``extra=`` (asset/music ids, outcomes)
        for field in ("music_id", "asset", "outcome", "policy"):
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_otlp_handler(app) -> Optional[logging.Handler]:
    if LoggerProvider is None or LoggingHandler is None:
        return None

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return None

    resource = Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "intune-backend")})
    provider = LoggerProvider(resource=resource)
    provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint)))
    return LoggingHandler(level=logging.INFO, logger_provider=provider)


def configure_structured_logging(app) -> None:
    """Attach JSON stdout logging (+ optional OTLP export) to the root logger.

    Safe to call once per app instance; an existing JSON stream handler is reused.
    """
    root = logging.getLogger()

    context_filter = RequestContextFilter()
    json_formatter = JsonFormatter()

    has_json_stream = any(
        isinstance(handler, logging.StreamHandler)
        and isinstance(getattr(handler, "formatter", None), JsonFormatter)
        for handler in root.handlers
    )
    if not has_json_stream:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(json_formatter)
        stream_handler.addFilter(context_filter)
        root.addHandler(stream_handler)

    otlp_handler = _build_otlp_handler(app)
    if otlp_handler:
        otlp_handler.setFormatter(json_formatter)
        otlp_handler.addFilter(context_filter)
        root.addHandler(otlp_handler)
