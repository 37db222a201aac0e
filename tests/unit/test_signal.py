"""Unit tests for the signal abstraction."""

from __future__ import annotations

import pytest

from fleet_observability.config import AddonDeploymentOptions, AddonSettings, LogsOptions
from fleet_observability.signal import LogsSignal, Signal, is_hub_cluster

HUB = {"metadata": {"name": "local-cluster", "labels": {"local-cluster": "true"}}}
SPOKE = {"metadata": {"name": "cluster-1", "labels": {}}}


def _signal(platform: LogsOptions, user_workloads: LogsOptions | None = None) -> LogsSignal:
    deployment = AddonDeploymentOptions(
        platform=platform, user_workloads=user_workloads or LogsOptions()
    )
    return LogsSignal(deployment, AddonSettings(hub_hostname="myhub.foo.com"))


class TestIsHubCluster:
    """Tests for hub detection."""

    @pytest.mark.requirement("SIG-001")
    def test_local_cluster_label(self) -> None:
        """Test the local-cluster label marks the hub."""
        assert is_hub_cluster(HUB) is True

    @pytest.mark.requirement("SIG-001")
    @pytest.mark.parametrize(
        "cluster",
        [
            SPOKE,
            {"metadata": {"labels": {"local-cluster": "false"}}},
            {"metadata": {"name": "bare"}},
            {},
        ],
    )
    def test_other_clusters(self, cluster: dict) -> None:
        """Test clusters without the label are spokes."""
        assert is_hub_cluster(cluster) is False


class TestLogsSignal:
    """Tests for LogsSignal."""

    @pytest.mark.requirement("SIG-002")
    def test_implements_protocol(self) -> None:
        """Test LogsSignal satisfies the Signal protocol."""
        signal = _signal(LogsOptions())
        assert isinstance(signal, Signal)
        assert signal.name == "logs"

    @pytest.mark.requirement("SIG-002")
    def test_disabled_is_unsupported(self) -> None:
        """Test nothing is supported without logging features."""
        assert _signal(LogsOptions()).supported_configuration(SPOKE) is False

    @pytest.mark.requirement("SIG-002")
    def test_collection_supported_on_spoke_only(self) -> None:
        """Test unmanaged collection does not run on the hub."""
        signal = _signal(LogsOptions(), LogsOptions(collection_enabled=True))

        assert signal.supported_configuration(SPOKE) is True
        assert signal.supported_configuration(HUB) is False

    @pytest.mark.requirement("SIG-002")
    def test_managed_storage_supported_on_hub(self) -> None:
        """Test the managed stack runs on both hub and spokes."""
        signal = _signal(LogsOptions(storage_enabled=True))

        assert signal.supported_configuration(HUB) is True
        assert signal.supported_configuration(SPOKE) is True
