"""Resource kinds and addon installation models.

This module names every resource kind the resolver touches and models the
parts of a ManagedClusterAddOn (an "addon installation") the resolver reads:
its name, its namespace (the spoke cluster namespace on the hub) and the
config references the fleet-management framework attached to it.

Example:
    >>> from fleet_observability.resources import AddonInstallation, CLUSTER_LOG_FORWARDERS
    >>> installation = AddonInstallation.from_manifest(manifest)
    >>> installation.object_keys(CLUSTER_LOG_FORWARDERS)
    [ObjectKey(namespace='open-cluster-management-observability', name='mcoa-instance')]
"""

from __future__ import annotations

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(NamedTuple):
    """A Kubernetes resource kind, addressed by group, version and plural.

    Attributes:
        group: API group, empty string for the core group.
        version: API version within the group.
        resource: Plural resource name (e.g. "secrets").
        kind: Object kind (e.g. "Secret").
    """

    group: str
    version: str
    resource: str
    kind: str

    @property
    def api_version(self) -> str:
        """Return the apiVersion string of objects of this kind."""
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


class ObjectKey(NamedTuple):
    """Namespace and name of a stored object."""

    namespace: str
    name: str


SECRETS = ResourceKind("", "v1", "secrets", "Secret")
CONFIG_MAPS = ResourceKind("", "v1", "configmaps", "ConfigMap")
CLUSTER_LOG_FORWARDERS = ResourceKind(
    "observability.openshift.io", "v1", "clusterlogforwarders", "ClusterLogForwarder"
)
LOKI_STACKS = ResourceKind("loki.grafana.io", "v1", "lokistacks", "LokiStack")
CERTIFICATES = ResourceKind("cert-manager.io", "v1", "certificates", "Certificate")
OPENTELEMETRY_COLLECTORS = ResourceKind(
    "opentelemetry.io", "v1beta1", "opentelemetrycollectors", "OpenTelemetryCollector"
)
ADDON_INSTALLATIONS = ResourceKind(
    "addon.open-cluster-management.io",
    "v1alpha1",
    "managedclusteraddons",
    "ManagedClusterAddOn",
)
ADDON_DEPLOYMENT_CONFIGS = ResourceKind(
    "addon.open-cluster-management.io",
    "v1alpha1",
    "addondeploymentconfigs",
    "AddOnDeploymentConfig",
)


class ConfigReference(BaseModel):
    """A config object the fleet-management framework bound to an installation.

    Attributes:
        group: API group of the referenced object.
        resource: Plural resource name of the referenced object.
        namespace: Namespace of the referenced object.
        name: Name of the referenced object.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    group: str = Field(default="", description="API group of the referent")
    resource: str = Field(..., min_length=1, description="Plural resource name")
    namespace: str = Field(default="", description="Namespace of the referent")
    name: str = Field(..., min_length=1, description="Name of the referent")

    def matches(self, kind: ResourceKind) -> bool:
        """Check whether this reference points at an object of ``kind``."""
        return self.group == kind.group and self.resource == kind.resource

    @property
    def key(self) -> ObjectKey:
        """Return the object key of the referent."""
        return ObjectKey(self.namespace, self.name)


class AddonInstallation(BaseModel):
    """The addon installed on one managed cluster.

    Attributes:
        name: Addon name, shared by every installation of the same addon.
        namespace: Namespace of the installation, i.e. the managed cluster name.
        config_references: Config objects bound to the installation, in the
            order the framework reported them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Addon name")
    namespace: str = Field(..., min_length=1, description="Installation namespace")
    config_references: list[ConfigReference] = Field(
        default_factory=list,
        description="Config references reported on the installation status",
    )

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> AddonInstallation:
        """Build an installation from a ManagedClusterAddOn object.

        Args:
            manifest: ManagedClusterAddOn as returned by the resource store.

        Returns:
            The parsed installation.
        """
        metadata = manifest.get("metadata") or {}
        status = manifest.get("status") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            config_references=[
                ConfigReference.model_validate(ref)
                for ref in status.get("configReferences") or []
            ],
        )

    def object_keys(self, kind: ResourceKind) -> list[ObjectKey]:
        """Return the keys of every referenced object of ``kind``, in order."""
        return [ref.key for ref in self.config_references if ref.matches(kind)]


__all__ = [
    "ADDON_DEPLOYMENT_CONFIGS",
    "ADDON_INSTALLATIONS",
    "CERTIFICATES",
    "CLUSTER_LOG_FORWARDERS",
    "CONFIG_MAPS",
    "LOKI_STACKS",
    "OPENTELEMETRY_COLLECTORS",
    "SECRETS",
    "AddonInstallation",
    "ConfigReference",
    "ObjectKey",
    "ResourceKind",
]
