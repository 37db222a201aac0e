"""Resolved tracing options handed to the chart values builder."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fleet_observability.config import TracesOptions
from fleet_observability.traces.collector import OpenTelemetryCollector


class Options(BaseModel):
    """Result of one tracing resolution pass.

    Attributes:
        enabled: False when trace collection is off; nothing else is set then.
        user_workloads: The tracing options the pass ran with.
        subscription_channel: Operator subscription channel.
        collector: The user-provided collector.
        secrets: Secrets the collector references, re-homed to the cluster namespace.
        config_maps: Config maps the collector references, re-homed likewise.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    user_workloads: TracesOptions = Field(default_factory=TracesOptions)
    subscription_channel: str = ""
    collector: OpenTelemetryCollector | None = None
    secrets: list[dict[str, Any]] = Field(default_factory=list)
    config_maps: list[dict[str, Any]] = Field(default_factory=list)


__all__ = ["Options"]
