"""Unit tests for cert-manager Certificate provisioning."""

from __future__ import annotations

import pytest

from fleet_observability.certificates import (
    CLIENT_USAGES,
    SERVER_USAGES,
    CertificateConfig,
    X509Subject,
    build_client_certificate,
    build_server_certificate,
    ensure_certificates,
)
from fleet_observability.errors import ResourceAccessDeniedError
from fleet_observability.resources import CERTIFICATES, ObjectKey
from fleet_observability.store import OperationResult
from testing.fixtures.store import FakeResourceStore

KEY = ObjectKey("cluster-1", "mcoa-logging-managed-collection-tls")
CONFIG = CertificateConfig(
    common_name="mcoa-logging-managed-collection",
    subject=X509Subject(organizational_units=["cluster-1"]),
    dns_names=["mcoa-logging-managed-collection"],
)


class TestBuildCertificate:
    """Tests for the Certificate builders."""

    @pytest.mark.requirement("CERT-001")
    def test_client_certificate(self) -> None:
        """Test the client certificate carries identity and client usages."""
        cert = build_client_certificate(KEY, CONFIG)

        assert cert["apiVersion"] == "cert-manager.io/v1"
        assert cert["kind"] == "Certificate"
        assert cert["metadata"]["name"] == "mcoa-logging-managed-collection-tls"
        assert cert["metadata"]["namespace"] == "cluster-1"
        spec = cert["spec"]
        assert spec["secretName"] == "mcoa-logging-managed-collection-tls"
        assert spec["commonName"] == "mcoa-logging-managed-collection"
        assert spec["subject"] == {"organizationalUnits": ["cluster-1"]}
        assert spec["dnsNames"] == ["mcoa-logging-managed-collection"]
        assert spec["usages"] == CLIENT_USAGES
        assert spec["issuerRef"]["kind"] == "ClusterIssuer"

    @pytest.mark.requirement("CERT-001")
    def test_server_certificate_without_subject(self) -> None:
        """Test empty subject and DNS names are left out."""
        cert = build_server_certificate(
            ObjectKey("local-cluster", "mcoa-logging-managed-storage-tls"),
            CertificateConfig(common_name="mcoa-logging-managed-storage"),
        )

        assert cert["spec"]["usages"] == SERVER_USAGES
        assert "subject" not in cert["spec"]
        assert "dnsNames" not in cert["spec"]


class TestEnsureCertificates:
    """Tests for ensure_certificates."""

    @pytest.mark.requirement("CERT-002")
    def test_create_then_unchanged(self, store: FakeResourceStore) -> None:
        """Test the first call creates and the second one is a no-op."""
        cert = build_client_certificate(KEY, CONFIG)

        assert ensure_certificates(store, [cert]) == [OperationResult.CREATED]
        assert ensure_certificates(store, [cert]) == [OperationResult.UNCHANGED]
        assert len(store.created) == 1
        assert store.updated == []

    @pytest.mark.requirement("CERT-002")
    def test_drifted_spec_is_updated(self, store: FakeResourceStore) -> None:
        """Test a drifted spec is restored while foreign labels survive."""
        cert = build_client_certificate(KEY, CONFIG)
        drifted = build_client_certificate(KEY, CertificateConfig(common_name="other"))
        drifted["metadata"]["labels"]["team"] = "platform"
        store.add(CERTIFICATES, drifted)

        assert ensure_certificates(store, [cert]) == [OperationResult.UPDATED]

        _, updated = store.updated[0]
        assert updated["spec"] == cert["spec"]
        assert updated["metadata"]["labels"]["team"] == "platform"
        assert (
            updated["metadata"]["labels"]["app.kubernetes.io/managed-by"]
            == "multicluster-observability-addon"
        )

    @pytest.mark.requirement("CERT-003")
    def test_store_failure_propagates(self, store: FakeResourceStore) -> None:
        """Test a failed write surfaces to the caller."""

        def deny(*args: object, **kwargs: object) -> dict[str, object]:
            raise ResourceAccessDeniedError("certificates", namespace="cluster-1", name="x")

        store.create = deny  # type: ignore[method-assign]

        with pytest.raises(ResourceAccessDeniedError):
            ensure_certificates(store, [build_client_certificate(KEY, CONFIG)])
