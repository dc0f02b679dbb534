import logging

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - optional dependency
    FlaskInstrumentor = None  # type: ignore

logger = logging.getLogger(__name__)

# Media byte-range requests and scrapes would drown out API spans
_EXCLUDED_URLS = "uploads/.*,metrics,healthz,readyz"


def init_tracing(app: Flask) -> bool:
    """Instrument ``app`` with OpenTelemetry when an OTLP endpoint is configured.

    Returns True when instrumentation was installed.
    """
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return False

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return False

    resource = Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "intune-backend")})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=endpoint,
                headers=app.config.get("OTEL_EXPORTER_OTLP_HEADERS"),
                insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
            )
        )
    )
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app, excluded_urls=_EXCLUDED_URLS)
    logger.info("OpenTelemetry tracing enabled, exporting to %s", endpoint)
    return True
