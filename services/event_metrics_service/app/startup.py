from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .metrics import metrics_exporter
from .settings import event_metrics_settings


def setup_logging() -> None:
    """Configure Loguru for consistent, structured service logs."""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end=""),
        level=event_metrics_settings().log_level.upper(),
        backtrace=False,
        diagnose=False,
        colorize=False,
        serialize=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
    )
    logger.info("🪵 Logging configured successfully.")


def setup_instrumentation(app: FastAPI) -> None:
    """Attach OpenTelemetry tracing when an OTLP endpoint is configured. This function is idempotent."""
    settings = event_metrics_settings()
    if not settings.otel_endpoint:
        logger.info("📈 No OTLP endpoint configured; tracing disabled.")
        return
    if getattr(app.state, "tracer_provider", None) is not None:
        logger.info("📈 OpenTelemetry instrumentation already initialized. Skipping reconfiguration.")
        return

    resource = Resource(attributes={SERVICE_NAME: settings.service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_endpoint)))
    trace.set_tracer_provider(tracer_provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    app.state.tracer_provider = tracer_provider
    logger.info("📈 OpenTelemetry instrumentation configured.")


async def init_service_startup(app: FastAPI) -> None:
    """Build the counter registry before any event is accepted."""
    app.state.is_ready = False
    settings = event_metrics_settings()
    logger.info(f"🚀 Initializing {settings.service_name} ({settings.environment})...")

    for key, value in settings.safe_dict().items():
        logger.info(f"    {key}: {value}")

    # Counter registration errors are fatal and abort startup
    metrics_exporter()

    app.state.is_ready = True
    logger.info(f"✅ {settings.service_name} startup completed successfully.")


async def shutdown_instrumentation(app: FastAPI) -> None:
    """Flush and shut down the tracer provider, if one was configured."""
    tracer_provider = getattr(app.state, "tracer_provider", None)
    if tracer_provider:
        tracer_provider.shutdown()
        logger.info("🧹 OpenTelemetry instrumentation shut down gracefully.")
