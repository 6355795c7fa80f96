"""
Optional tracing for the API process, switched on with OTEL_ENABLED.

init_otel() installs a tracer provider exporting over OTLP/HTTP and must run
before the routers are imported. Without it, spans opened by the ingestion
code go to the API's no-op provider.
"""
import logging
import os

OTEL_ENABLED_ENV = "OTEL_ENABLED"
OTEL_EXPORTER_OTLP_ENDPOINT_ENV = "OTEL_EXPORTER_OTLP_ENDPOINT"
OTEL_SERVICE_NAME_ENV = "OTEL_SERVICE_NAME"
OTEL_SAMPLE_RATIO_ENV = "OTEL_SAMPLE_RATIO"

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"
# Probes would otherwise dominate the trace volume
EXCLUDED_URLS = "api/health"

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.environ.get(name, "").strip().lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    return default


def _env_ratio(name: str, default: float = 1.0) -> float:
    try:
        ratio = float(os.environ.get(name, default))
    except ValueError:
        logger.warning("Ignoring non-numeric %s", name)
        return default
    return min(max(ratio, 0.0), 1.0)


def tracing_enabled() -> bool:
    return _env_bool(OTEL_ENABLED_ENV, False)


def init_otel(service_name: str, environment: str | None = None) -> bool:
    """
    Install a TracerProvider with a batched OTLP/HTTP exporter.
    Env: OTEL_ENABLED (default false), OTEL_EXPORTER_OTLP_ENDPOINT,
    OTEL_SERVICE_NAME, OTEL_SAMPLE_RATIO (0..1, default 1).
    Returns True if tracing was initialized.
    """
    if not tracing_enabled():
        return False

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    endpoint = os.environ.get(OTEL_EXPORTER_OTLP_ENDPOINT_ENV, DEFAULT_OTLP_ENDPOINT).strip()
    name = os.environ.get(OTEL_SERVICE_NAME_ENV, service_name).strip() or service_name
    ratio = _env_ratio(OTEL_SAMPLE_RATIO_ENV)

    attributes = {"service.name": name}
    if environment:
        attributes["deployment.environment"] = environment
    provider = TracerProvider(
        resource=Resource.create(attributes),
        sampler=ParentBased(TraceIdRatioBased(ratio)),
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint.rstrip('/')}/v1/traces")))
    trace.set_tracer_provider(provider)

    logger.info("Tracing on: service=%s endpoint=%s sample_ratio=%.2f", name, endpoint, ratio)
    return True


def instrument_app(app) -> None:
    """Attach request spans to the FastAPI app when tracing is on."""
    if not tracing_enabled():
        return
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)
