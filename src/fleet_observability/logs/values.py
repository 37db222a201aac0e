"""Chart values for the logging signal.

build_values serialises resolved Options into the key-value structure the
addon chart templates against: camelCase keys, pipeline specs as JSON
strings, and secrets/config maps reduced to name plus data.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleet_observability.logs.options import Collection, Options


class _ValuesModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )


class ResourceValue(_ValuesModel):
    """A secret or config map as the chart sees it."""

    name: str
    data: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> ResourceValue:
        """Reduce a stored object to its name and data."""
        metadata = manifest.get("metadata") or {}
        return cls(name=metadata.get("name", ""), data=dict(manifest.get("data") or {}))


class UnmanagedCollectionValues(_ValuesModel):
    """Values for the user-provided pipeline."""

    enabled: bool = False
    clf_spec: str = ""
    clf_annotations: str = ""
    secrets: list[ResourceValue] = Field(default_factory=list)
    config_maps: list[ResourceValue] = Field(default_factory=list)


class ManagedCollectionValues(_ValuesModel):
    """Values for the managed collector on a spoke."""

    enabled: bool = False
    loki_url: str = ""
    clf_spec: str = ""
    secrets: list[ResourceValue] = Field(default_factory=list)


class ManagedStorageValues(_ValuesModel):
    """Values for the managed storage on the hub."""

    enabled: bool = False
    ls_spec: str = ""
    tenants: list[str] = Field(default_factory=list)
    obj_storage_secret: ResourceValue | None = None
    mtls_secret: ResourceValue | None = None


class UnmanagedValues(_ValuesModel):
    collection: UnmanagedCollectionValues = Field(default_factory=UnmanagedCollectionValues)


class ManagedValues(_ValuesModel):
    collection: ManagedCollectionValues = Field(default_factory=ManagedCollectionValues)
    storage: ManagedStorageValues = Field(default_factory=ManagedStorageValues)


class LoggingValues(_ValuesModel):
    """Top-level logging values."""

    enabled: bool = False
    subscription_channel: str = ""
    unmanaged: UnmanagedValues = Field(default_factory=UnmanagedValues)
    managed: ManagedValues = Field(default_factory=ManagedValues)


def build_values(opts: Options) -> LoggingValues:
    """Serialise resolved options into chart values.

    Args:
        opts: Options returned by build_options.

    Returns:
        Logging values; ``enabled`` is False for disabled options.
    """
    if not opts.enabled:
        return LoggingValues()

    unmanaged = UnmanagedValues()
    managed = ManagedValues()
    if opts.managed_stack_enabled():
        stack = opts.managed_stack
        if opts.is_hub_cluster:
            storage = stack.storage
            managed = ManagedValues(
                storage=ManagedStorageValues(
                    enabled=True,
                    ls_spec=_dumps((storage.loki_stack or {}).get("spec") or {}),
                    tenants=list(storage.tenants),
                    obj_storage_secret=_resource_or_none(storage.obj_storage_secret),
                    mtls_secret=_resource_or_none(storage.mtls_secret),
                )
            )
        else:
            managed = ManagedValues(
                collection=ManagedCollectionValues(
                    enabled=True,
                    loki_url=stack.loki_url,
                    clf_spec=_clf_spec(stack.collection),
                    secrets=[ResourceValue.from_manifest(s) for s in stack.collection.secrets],
                )
            )
    elif opts.unmanaged_collection_enabled():
        collection = opts.unmanaged.collection
        clf = collection.cluster_log_forwarder
        unmanaged = UnmanagedValues(
            collection=UnmanagedCollectionValues(
                enabled=True,
                clf_spec=_clf_spec(collection),
                clf_annotations=_dumps(clf.metadata.annotations if clf else {}),
                secrets=[ResourceValue.from_manifest(s) for s in collection.secrets],
                config_maps=[ResourceValue.from_manifest(c) for c in collection.config_maps],
            )
        )

    return LoggingValues(
        enabled=True,
        subscription_channel=opts.subscription_channel,
        unmanaged=unmanaged,
        managed=managed,
    )


def _clf_spec(collection: Collection) -> str:
    if collection.cluster_log_forwarder is None:
        return ""
    return _dumps(collection.cluster_log_forwarder.spec_dict())


def _dumps(value: Any) -> str:
    # Key order is stable across passes
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _resource_or_none(manifest: dict[str, Any] | None) -> ResourceValue | None:
    if manifest is None:
        return None
    return ResourceValue.from_manifest(manifest)


__all__ = [
    "LoggingValues",
    "ManagedCollectionValues",
    "ManagedStorageValues",
    "ManagedValues",
    "ResourceValue",
    "UnmanagedCollectionValues",
    "UnmanagedValues",
    "build_values",
]
