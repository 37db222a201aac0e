"""Chart values for the tracing signal."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleet_observability.logs.values import ResourceValue
from fleet_observability.traces.options import Options


class TracingValues(BaseModel):
    """Top-level tracing values.

    Attributes:
        enabled: Trace collection is deployed.
        subscription_channel: Operator subscription channel.
        otel_spec: Collector spec as a JSON string.
        otel_annotations: Collector annotations as a JSON string.
        secrets: Referenced secrets, name plus data.
        config_maps: Referenced config maps, name plus data.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )

    enabled: bool = False
    subscription_channel: str = ""
    otel_spec: str = ""
    otel_annotations: str = ""
    secrets: list[ResourceValue] = Field(default_factory=list)
    config_maps: list[ResourceValue] = Field(default_factory=list)


def build_values(opts: Options) -> TracingValues:
    """Serialise resolved tracing options into chart values."""
    if not opts.enabled or opts.collector is None:
        return TracingValues()

    return TracingValues(
        enabled=True,
        subscription_channel=opts.subscription_channel,
        otel_spec=json.dumps(opts.collector.spec_dict(), sort_keys=True, separators=(",", ":")),
        otel_annotations=json.dumps(
            opts.collector.metadata.annotations, sort_keys=True, separators=(",", ":")
        ),
        secrets=[ResourceValue.from_manifest(s) for s in opts.secrets],
        config_maps=[ResourceValue.from_manifest(c) for c in opts.config_maps],
    )


__all__ = ["TracingValues", "build_values"]
