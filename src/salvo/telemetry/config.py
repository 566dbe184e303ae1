"""Telemetry configuration for the Salvo engine and opponent."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


class TelemetryConfig(BaseModel):
    """Which OpenTelemetry signals to export, and where."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "salvo"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`SALVO_*` + `OTEL_*`)."""

        data: Dict[str, Any] = cls().model_dump()

        switches = {
            "enable_tracing": ("SALVO_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("SALVO_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("SALVO_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }
        for name, env_names in switches.items():
            for env_name in env_names:
                value = os.getenv(env_name)
                if value is not None:
                    data[name] = value.strip().lower() in _TRUTHY
                    break

        base = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").rstrip("/")
        for signal in ("traces", "metrics", "logs"):
            explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{signal.upper()}_ENDPOINT")
            data[f"otlp_{signal}_endpoint"] = explicit or (f"{base}/v1/{signal}" if base else None)

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            attrs = dict(data["resource_attributes"])
            for part in resource_env.split(","):
                key, sep, value = part.partition("=")
                if sep:
                    attrs[key.strip()] = value.strip()
            data["resource_attributes"] = attrs

        data.update(overrides)

        # A configured endpoint turns its exporter on.
        for signal, switch in (
            ("traces", "enable_tracing"),
            ("metrics", "enable_metrics"),
            ("logs", "enable_logging"),
        ):
            if data.get(f"otlp_{signal}_endpoint"):
                data[switch] = True

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise the enabled telemetry signals."""

    from .logger import init_logging
    from .metrics import init_metrics
    from .tracer import init_tracing

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
