"""Addon values provider.

AddonValuesProvider is what the addon manager holds for the lifetime of
the controller process: startup configures logging and connects to the
hub, then get_values is called once per managed cluster and installation
on every reconciliation pass.

Example:
    >>> provider = AddonValuesProvider(AddonSettings(hub_hostname="myhub.foo.com"))
    >>> provider.startup()
    >>> values = provider.get_values(managed_cluster, managed_cluster_addon)
    >>> provider.shutdown()
"""

from __future__ import annotations

from typing import Any

import structlog

from fleet_observability.config import AddonSettings
from fleet_observability.resources import AddonInstallation
from fleet_observability.store import KubernetesResourceStore, ResourceStore
from fleet_observability.telemetry import configure_logging
from fleet_observability.values import get_values

logger = structlog.get_logger(__name__)


class AddonValuesProvider:
    """Chart values provider bound to one hub.

    Args:
        settings: Process settings. Defaults to settings loaded from the
            ``FLEET_OBS_*`` environment.
        store: Resource store to use. Defaults to a KubernetesResourceStore,
            which the provider then starts and shuts down itself.
    """

    def __init__(
        self, settings: AddonSettings | None = None, store: ResourceStore | None = None
    ) -> None:
        self.settings = settings if settings is not None else AddonSettings()
        self._kube = KubernetesResourceStore(self.settings) if store is None else None
        self.store: ResourceStore = store if store is not None else self._kube

    def startup(self) -> None:
        """Configure logging and connect the owned store.

        Raises:
            UpstreamFetchError: If the Kubernetes configuration cannot be loaded.
        """
        configure_logging(self.settings)
        if self._kube is not None:
            self._kube.startup()
        logger.info(
            "provider.started",
            hub_hostname=self.settings.hub_hostname,
            log_level=self.settings.log_level,
        )

    def shutdown(self) -> None:
        """Release the owned store."""
        if self._kube is not None:
            self._kube.shutdown()
        logger.info("provider.stopped")

    def get_values(self, cluster: dict[str, Any], addon: dict[str, Any]) -> dict[str, Any]:
        """Build the chart values of one installation.

        Args:
            cluster: ManagedCluster object.
            addon: ManagedClusterAddOn object installed on ``cluster``.

        Returns:
            camelCase values dictionary for the addon chart.

        Raises:
            AddonOptionsError: If resolving any enabled signal fails.
        """
        installation = AddonInstallation.from_manifest(addon)
        return get_values(self.store, cluster, installation, self.settings).to_values()


__all__ = ["AddonValuesProvider"]
