"""Signal abstraction over per-signal options resolution.

A signal (logs or traces) decides whether a cluster's configuration is
supported, resolves its options and turns them into chart values. The
chart-level builder in ``fleet_observability.values`` drives every signal
through this protocol.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import structlog

from fleet_observability.config import AddonDeploymentOptions, AddonSettings
from fleet_observability.constants import LOCAL_CLUSTER_LABEL
from fleet_observability.errors import MissingReferenceError
from fleet_observability.logs.handlers import SIGNAL as LOGS_SIGNAL
from fleet_observability.logs.handlers import build_options
from fleet_observability.logs.options import Options
from fleet_observability.logs.values import LoggingValues, build_values
from fleet_observability.resources import ADDON_DEPLOYMENT_CONFIGS, AddonInstallation
from fleet_observability.store import ResourceStore
from fleet_observability.traces import handlers as traces_handlers
from fleet_observability.traces import values as traces_values
from fleet_observability.traces.options import Options as TracingOptions
from fleet_observability.traces.values import TracingValues

logger = structlog.get_logger(__name__)


@runtime_checkable
class Signal(Protocol):
    """One observability signal handled by the addon."""

    name: str

    def supported_configuration(self, cluster: dict[str, Any]) -> bool:
        """Check whether the signal applies to ``cluster``."""
        ...

    def build_options(
        self, store: ResourceStore, cluster: dict[str, Any], installation: AddonInstallation
    ) -> Any:
        """Resolve the signal options of one installation."""
        ...

    def build_values(self, opts: Any) -> Any:
        """Turn resolved options into chart values."""
        ...


def is_hub_cluster(cluster: dict[str, Any]) -> bool:
    """Check whether a ManagedCluster object is the hub itself."""
    labels = (cluster.get("metadata") or {}).get("labels") or {}
    return labels.get(LOCAL_CLUSTER_LABEL) == "true"


def load_deployment_options(
    store: ResourceStore, installation: AddonInstallation
) -> AddonDeploymentOptions:
    """Fetch and parse the AddOnDeploymentConfig bound to the installation.

    The first referenced deployment config is used.

    Raises:
        MissingReferenceError: If the installation references none.
        InvalidConfigurationError: If a known variable has an unsupported value.
        UpstreamFetchError: If the store fails.
    """
    keys = installation.object_keys(ADDON_DEPLOYMENT_CONFIGS)
    if not keys:
        raise MissingReferenceError(ADDON_DEPLOYMENT_CONFIGS.resource)
    key = keys[0]
    return AddonDeploymentOptions.from_deployment_config(
        store.get(ADDON_DEPLOYMENT_CONFIGS, key.namespace, key.name)
    )


class LogsSignal:
    """The logging signal.

    Args:
        deployment: Parsed deployment options of the installation.
        settings: Process-level addon settings.
    """

    name = LOGS_SIGNAL

    def __init__(self, deployment: AddonDeploymentOptions, settings: AddonSettings) -> None:
        self._deployment = deployment
        self._settings = settings

    def supported_configuration(self, cluster: dict[str, Any]) -> bool:
        """Logging runs on spokes, and on the hub only for managed storage."""
        if not self._deployment.logs_enabled:
            return False
        if is_hub_cluster(cluster):
            return self._deployment.platform.storage_enabled
        return True

    def build_options(
        self, store: ResourceStore, cluster: dict[str, Any], installation: AddonInstallation
    ) -> Options:
        return build_options(
            store,
            installation,
            self._deployment.platform,
            self._deployment.user_workloads,
            is_hub_cluster=is_hub_cluster(cluster),
            hub_hostname=self._settings.hub_hostname,
            addon_name=self._settings.addon_name,
        )

    def build_values(self, opts: Options) -> LoggingValues:
        return build_values(opts)


class TracesSignal:
    """The tracing signal.

    Args:
        deployment: Parsed deployment options of the installation.
    """

    name = traces_handlers.SIGNAL

    def __init__(self, deployment: AddonDeploymentOptions) -> None:
        self._deployment = deployment

    def supported_configuration(self, cluster: dict[str, Any]) -> bool:
        """Trace collection runs on spokes only."""
        return self._deployment.traces.enabled and not is_hub_cluster(cluster)

    def build_options(
        self, store: ResourceStore, cluster: dict[str, Any], installation: AddonInstallation
    ) -> TracingOptions:
        return traces_handlers.build_options(store, installation, self._deployment.traces)

    def build_values(self, opts: TracingOptions) -> TracingValues:
        return traces_values.build_values(opts)


__all__ = [
    "LogsSignal",
    "Signal",
    "TracesSignal",
    "is_hub_cluster",
    "load_deployment_options",
]
