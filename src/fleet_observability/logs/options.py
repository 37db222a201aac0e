"""Resolved logging options handed to the chart values builder.

Options is the single result of a resolution pass: the effective pipeline,
the bodies of every secret and config map it references, and the managed
stack sub-structures. It is built once per pass and never mutated.

Models:
    TopologyFlags: which collection path runs, and where
    ResolutionMode: the branch selected by a set of flags
    Collection / Storage / ManagedStack / Unmanaged: per-path results
    Options: the aggregate
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fleet_observability.config import LogsOptions
from fleet_observability.logs.pipeline import ClusterLogForwarder


class ResolutionMode(str, Enum):
    """The branch a resolution pass takes."""

    DISABLED = "disabled"
    UNMANAGED = "unmanaged"
    MANAGED_SPOKE = "managed_spoke"
    MANAGED_HUB = "managed_hub"


class TopologyFlags(BaseModel):
    """Deployment topology of one installation for one signal.

    Attributes:
        is_hub_cluster: The installation runs on the hub cluster.
        managed_stack_enabled: The addon provisions collection and storage.
        unmanaged_collection_enabled: A user-provided pipeline is forwarded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_hub_cluster: bool = False
    managed_stack_enabled: bool = False
    unmanaged_collection_enabled: bool = False

    @classmethod
    def from_logs_options(
        cls, platform: LogsOptions, user_workloads: LogsOptions, *, is_hub_cluster: bool
    ) -> TopologyFlags:
        """Derive the flags from the per-audience logging options."""
        return cls(
            is_hub_cluster=is_hub_cluster,
            managed_stack_enabled=platform.storage_enabled,
            unmanaged_collection_enabled=(
                platform.collection_enabled or user_workloads.collection_enabled
            ),
        )

    @property
    def mode(self) -> ResolutionMode:
        """Return the branch to take.

        The managed stack wins over unmanaged collection when both are set.
        """
        if self.managed_stack_enabled:
            if self.is_hub_cluster:
                return ResolutionMode.MANAGED_HUB
            return ResolutionMode.MANAGED_SPOKE
        if self.unmanaged_collection_enabled:
            return ResolutionMode.UNMANAGED
        return ResolutionMode.DISABLED


class Collection(BaseModel):
    """Collector side of a path: the pipeline and what it references."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cluster_log_forwarder: ClusterLogForwarder | None = None
    secrets: list[dict[str, Any]] = Field(default_factory=list)
    config_maps: list[dict[str, Any]] = Field(default_factory=list)


class Storage(BaseModel):
    """Hub storage side of the managed stack."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    loki_stack: dict[str, Any] | None = None
    obj_storage_secret: dict[str, Any] | None = None
    mtls_secret: dict[str, Any] | None = None
    tenants: list[str] = Field(default_factory=list)


class ManagedStack(BaseModel):
    """Results of the managed path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    loki_url: str = ""
    collection: Collection = Field(default_factory=Collection)
    storage: Storage = Field(default_factory=Storage)


class Unmanaged(BaseModel):
    """Results of the unmanaged path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    collection: Collection = Field(default_factory=Collection)


class Options(BaseModel):
    """Resolved logging options of one installation.

    Attributes:
        enabled: False when neither collection path is configured.
        platform: Options for platform logs.
        user_workloads: Options for user workload logs.
        is_hub_cluster: The installation runs on the hub.
        hub_hostname: Base domain of the hub cluster.
        subscription_channel: Collector operator subscription channel.
        unmanaged: Results of the unmanaged path.
        managed_stack: Results of the managed path.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = True
    platform: LogsOptions = Field(default_factory=LogsOptions)
    user_workloads: LogsOptions = Field(default_factory=LogsOptions)
    is_hub_cluster: bool = False
    hub_hostname: str = ""
    subscription_channel: str = ""
    unmanaged: Unmanaged = Field(default_factory=Unmanaged)
    managed_stack: ManagedStack = Field(default_factory=ManagedStack)

    @property
    def topology(self) -> TopologyFlags:
        """Return the topology flags these options were resolved for."""
        return TopologyFlags.from_logs_options(
            self.platform, self.user_workloads, is_hub_cluster=self.is_hub_cluster
        )

    def managed_stack_enabled(self) -> bool:
        """Check whether the managed path applies."""
        return self.topology.managed_stack_enabled

    def unmanaged_collection_enabled(self) -> bool:
        """Check whether the unmanaged path applies."""
        return self.topology.unmanaged_collection_enabled


__all__ = [
    "Collection",
    "ManagedStack",
    "Options",
    "ResolutionMode",
    "Storage",
    "TopologyFlags",
    "Unmanaged",
]
