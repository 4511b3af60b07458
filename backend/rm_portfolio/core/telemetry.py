"""OpenTelemetry wiring and aggregation instrumentation."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace import Span
from sqlalchemy.ext.asyncio import AsyncEngine

from rm_portfolio.config import AppSettings

logger = logging.getLogger(__name__)

SERVICE_NAMESPACE = "rm-dashboard"
METRIC_EXPORT_INTERVAL_MS = 10000

_instrumented = False

# Proxies until setup_telemetry installs real providers.
tracer = trace.get_tracer("rm_portfolio")
meter = metrics.get_meter("rm_portfolio")
aggregated_rows = meter.create_histogram(
    "rm_portfolio.aggregation.rows",
    unit="1",
    description="Transactions folded per aggregation call",
)


@contextmanager
def aggregation_span(operation: str, row_count: int, **attributes: Any) -> Iterator[Span]:
    """Trace one engine call and record how many rows it aggregated."""

    with tracer.start_as_current_span(f"rm_portfolio.{operation}") as span:
        span.set_attribute("rm_portfolio.transaction_count", row_count)
        for key, value in attributes.items():
            span.set_attribute(f"rm_portfolio.{key}", value)
        aggregated_rows.record(row_count, {"operation": operation})
        yield span


def setup_telemetry(app: FastAPI, settings: AppSettings, engine: AsyncEngine | None = None) -> bool:
    """Export traces, metrics and logs over OTLP when enabled in settings.

    FastAPI and, when an engine is given, SQLAlchemy are instrumented once
    per process. Returns whether instrumentation is active.
    """

    global _instrumented  # noqa: PLW0603

    if _instrumented:
        return True
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: SERVICE_NAMESPACE,
        }
    )
    exporter_options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        exporter_options["endpoint"] = settings.telemetry_otlp_endpoint

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_options)))
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[
            PeriodicExportingMetricReader(
                OTLPMetricExporter(**exporter_options),
                export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
            )
        ],
    )
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**exporter_options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider, meter_provider=meter_provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=tracer_provider)

    _instrumented = True
    logger.info(
        "Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint"
    )
    return True


__all__ = ["aggregated_rows", "aggregation_span", "setup_telemetry", "tracer"]
