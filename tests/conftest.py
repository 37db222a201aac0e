"""Pytest configuration for fleet-observability-addon tests.

Fixtures:
    - store: In-memory resource store
    - clf_manifest: ClusterLogForwarder with one Loki output
    - installation: Addon installation in cluster-1 referencing the pipeline
    - settings: AddonSettings with test defaults
"""

from __future__ import annotations

from typing import Any

import pytest

from fleet_observability.resources import (
    ADDON_DEPLOYMENT_CONFIGS,
    CLUSTER_LOG_FORWARDERS,
    AddonInstallation,
)
from testing.fixtures.manifests import (
    ADDON_NAME,
    CLUSTER_NAMESPACE,
    HUB_HOSTNAME,
    HUB_NAMESPACE,
    loki_output,
    make_cluster_log_forwarder,
    make_installation,
    make_reference,
)
from testing.fixtures.store import FakeResourceStore


@pytest.fixture
def store() -> FakeResourceStore:
    """Create an empty in-memory resource store."""
    return FakeResourceStore()


@pytest.fixture
def clf_manifest() -> dict[str, Any]:
    """Create the user pipeline: one Loki output, token secret, CA config map."""
    return make_cluster_log_forwarder(
        "instance",
        outputs=[loki_output()],
        annotations={"observability.openshift.io/tech-preview-otlp-output": "enabled"},
    )


@pytest.fixture
def installation_manifest() -> dict[str, Any]:
    """Create a cluster-1 installation referencing the pipeline."""
    return make_installation(
        CLUSTER_NAMESPACE,
        [
            make_reference(CLUSTER_LOG_FORWARDERS, HUB_NAMESPACE, "instance"),
            make_reference(ADDON_DEPLOYMENT_CONFIGS, HUB_NAMESPACE, ADDON_NAME),
        ],
    )


@pytest.fixture
def installation(installation_manifest: dict[str, Any]) -> AddonInstallation:
    """Parse the installation fixture."""
    return AddonInstallation.from_manifest(installation_manifest)


@pytest.fixture
def settings() -> Any:
    """Create AddonSettings with test defaults."""
    from fleet_observability.config import AddonSettings

    return AddonSettings(hub_hostname=HUB_HOSTNAME, json_logs=False)


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test as covering a specific requirement",
    )
