"""Pydantic model for a user-provided OpenTelemetryCollector.

The collector spec is handed to the chart untouched. Only metadata is
modelled; the reference extractor walks the pod-level parts of the spec
(volumes, env, envFrom) directly.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fleet_observability.logs.pipeline import ObjectMeta


class OpenTelemetryCollector(BaseModel):
    """A trace collection pipeline.

    Attributes:
        metadata: Object metadata.
        spec: Collector spec as served by the store.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        """Return the collector name."""
        return self.metadata.name

    @property
    def namespace(self) -> str:
        """Return the collector namespace."""
        return self.metadata.namespace

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> OpenTelemetryCollector:
        """Parse an OpenTelemetryCollector object served by the store."""
        return cls.model_validate(manifest)

    def spec_dict(self) -> dict[str, Any]:
        """Return a copy of the spec."""
        return copy.deepcopy(self.spec)


__all__ = ["OpenTelemetryCollector"]
