"""
Ride-hailing API - entry point

Configures logging and OpenTelemetry, then serves the FastAPI app with uvicorn.
"""

import logging
import os

import uvicorn
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ridehail import __version__
from ridehail.api.app import create_app
from ridehail.ride_logging import setup_logging
from ridehail.settings import get_settings

logger = logging.getLogger(__name__)


def init_otel_sdk(endpoint: str, environment: str) -> None:
    """Install SDK tracer and meter providers exporting over OTLP gRPC.

    Must run before the app is created so auto-instrumentation picks up the providers.
    """
    resource = Resource.create(
        {
            "service.name": "ridehail-api",
            "service.version": __version__,
            "deployment.environment": environment,
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
    )
    trace.set_tracer_provider(trace_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=True),
        export_interval_millis=15_000,
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[metric_reader]))
    logger.info("OpenTelemetry initialized (endpoint=%s)", endpoint)


def main() -> None:
    settings = get_settings()

    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        environment=settings.logging.environment,
    )

    # Without a collector the API meters stay no-ops
    otlp_endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        init_otel_sdk(otlp_endpoint, settings.logging.environment)

    app = create_app(settings)

    logger.info("Starting ride-hailing API on %s:%d", settings.server.host, settings.server.port)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        proxy_headers=True,
        forwarded_allow_ips=settings.server.forwarded_allow_ips,
        log_level=settings.logging.level.lower(),
        # Keep the handlers installed by setup_logging
        log_config=None,
    )


if __name__ == "__main__":
    main()
