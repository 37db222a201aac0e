"""Tenant discovery for the hub-side managed storage.

Every spoke running the addon writes its logs to the shared hub storage as
its own tenant, named after the installation namespace. The tenant list is
rebuilt from a live, fleet-wide listing of addon installations on every
pass; nothing is cached.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from fleet_observability.resources import ADDON_INSTALLATIONS, AddonInstallation
from fleet_observability.store import ResourceStore

logger = structlog.get_logger(__name__)


def accumulate_tenants(
    installations: Iterable[AddonInstallation],
    self_namespace: str,
    addon_name: str,
) -> list[str]:
    """Return the namespaces of every sibling installation of ``addon_name``.

    Args:
        installations: Fleet-wide addon installations.
        self_namespace: Namespace of the requesting installation, excluded
            from the result.
        addon_name: Only installations of this addon count.

    Returns:
        Sorted, de-duplicated tenant namespaces.
    """
    return sorted(
        {
            installation.namespace
            for installation in installations
            if installation.name == addon_name and installation.namespace != self_namespace
        }
    )


def list_tenants(store: ResourceStore, self_namespace: str, addon_name: str) -> list[str]:
    """List addon installations fleet-wide and accumulate the tenants.

    The listing is linear in fleet size and unpaginated.

    Raises:
        UpstreamFetchError: If the listing fails.
    """
    installations = [
        AddonInstallation.from_manifest(item) for item in store.list(ADDON_INSTALLATIONS)
    ]
    tenants = accumulate_tenants(installations, self_namespace, addon_name)
    logger.debug(
        "tenants.accumulated",
        installations=len(installations),
        tenants=len(tenants),
        namespace=self_namespace,
    )
    return tenants


__all__ = ["accumulate_tenants", "list_tenants"]
