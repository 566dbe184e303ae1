"""Tracer setup for the engine and the targeting opponent."""

from __future__ import annotations

from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Tracer

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import TelemetryConfig


_TRACER: Tracer | None = None
_TRACER_PROVIDER: TracerProvider | None = None


def build_resource(config: TelemetryConfig) -> Resource:
    """Service identity attached to traces, metrics and logs alike."""
    return Resource.create(
        {
            **config.resource_attributes,
            "service.name": config.service_name,
            "service.namespace": config.service_namespace,
        }
    )


def get_tracer(name: str = "salvo") -> Tracer:
    """Tracer shared by every instrumented module; a no-op proxy until init_tracing."""
    global _TRACER
    if _TRACER is None:
        _TRACER = trace.get_tracer(name)
    return _TRACER


def _span_processor(config: TelemetryConfig) -> SpanProcessor:
    # Without a collector, spans go to stdout one at a time.
    if not config.otlp_traces_endpoint:
        return SimpleSpanProcessor(ConsoleSpanExporter())
    return BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otlp_traces_endpoint, insecure=True))


def init_tracing(config: TelemetryConfig) -> Tracer:
    """Install the SDK provider and swap the shared tracer for a real one."""
    global _TRACER, _TRACER_PROVIDER

    _TRACER_PROVIDER = TracerProvider(resource=build_resource(config))
    _TRACER_PROVIDER.add_span_processor(_span_processor(config))
    trace.set_tracer_provider(_TRACER_PROVIDER)
    _TRACER = _TRACER_PROVIDER.get_tracer(config.service_name)
    return _TRACER
