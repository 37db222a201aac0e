"""cert-manager Certificate objects for the managed logging stack.

The managed stack authenticates spoke collectors against the hub storage
with mTLS. This module builds the cert-manager ``Certificate`` objects for
both ends and create-or-updates them through the resource store; issuing the
certificates and writing the resulting secrets is cert-manager's job.

Example:
    >>> from fleet_observability.certificates import CertificateConfig, build_client_certificate
    >>> cert = build_client_certificate(
    ...     ObjectKey("cluster-1", "mcoa-logging-managed-collection-tls"),
    ...     CertificateConfig(common_name="mcoa-logging-managed-collection"),
    ... )
    >>> cert["spec"]["usages"]
    ['digital signature', 'key encipherment', 'client auth']
"""

from __future__ import annotations

import copy
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from fleet_observability.constants import (
    ADDON_NAME,
    CERTIFICATE_DURATION,
    CERTIFICATE_ISSUER_KIND,
    CERTIFICATE_ISSUER_NAME,
    CERTIFICATE_RENEW_BEFORE,
)
from fleet_observability.resources import CERTIFICATES, ObjectKey
from fleet_observability.store import MutateFn, OperationResult, ResourceStore, create_or_update

logger = structlog.get_logger(__name__)

CLIENT_USAGES = ["digital signature", "key encipherment", "client auth"]
SERVER_USAGES = ["digital signature", "key encipherment", "server auth"]


class X509Subject(BaseModel):
    """Subject fields of a certificate beyond the common name.

    Attributes:
        organizational_units: OU entries. The hub gateway reads the tenant
            of a spoke collector from its first OU.
        organizations: O entries.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    organizational_units: list[str] = Field(default_factory=list)
    organizations: list[str] = Field(default_factory=list)

    def to_manifest(self) -> dict[str, Any]:
        """Return the cert-manager ``subject`` block."""
        subject: dict[str, Any] = {}
        if self.organizational_units:
            subject["organizationalUnits"] = list(self.organizational_units)
        if self.organizations:
            subject["organizations"] = list(self.organizations)
        return subject


class CertificateConfig(BaseModel):
    """What to put in a certificate.

    Attributes:
        common_name: Certificate common name.
        subject: Additional subject fields.
        dns_names: Subject alternative DNS names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    common_name: str = Field(..., min_length=1)
    subject: X509Subject = Field(default_factory=X509Subject)
    dns_names: list[str] = Field(default_factory=list)


def build_client_certificate(key: ObjectKey, config: CertificateConfig) -> dict[str, Any]:
    """Build a client-auth Certificate whose secret is named after ``key``."""
    return _build_certificate(key, config, CLIENT_USAGES)


def build_server_certificate(key: ObjectKey, config: CertificateConfig) -> dict[str, Any]:
    """Build a server-auth Certificate whose secret is named after ``key``."""
    return _build_certificate(key, config, SERVER_USAGES)


def _build_certificate(
    key: ObjectKey, config: CertificateConfig, usages: list[str]
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "commonName": config.common_name,
        "secretName": key.name,
        "duration": CERTIFICATE_DURATION,
        "renewBefore": CERTIFICATE_RENEW_BEFORE,
        "usages": list(usages),
        "privateKey": {
            "algorithm": "RSA",
            "encoding": "PKCS8",
            "size": 4096,
            "rotationPolicy": "Always",
        },
        "issuerRef": {
            "name": CERTIFICATE_ISSUER_NAME,
            "kind": CERTIFICATE_ISSUER_KIND,
            "group": CERTIFICATES.group,
        },
    }
    subject = config.subject.to_manifest()
    if subject:
        spec["subject"] = subject
    if config.dns_names:
        spec["dnsNames"] = list(config.dns_names)

    return {
        "apiVersion": CERTIFICATES.api_version,
        "kind": CERTIFICATES.kind,
        "metadata": {
            "name": key.name,
            "namespace": key.namespace,
            "labels": {"app.kubernetes.io/managed-by": ADDON_NAME},
        },
        "spec": spec,
    }


def mutate_func_for(desired: dict[str, Any]) -> MutateFn:
    """Return a mutate function copying the owned fields of ``desired``.

    Owned fields are the spec, the labels and the annotations. Labels and
    annotations are merged so keys set by other controllers survive.
    """

    def mutate(existing: dict[str, Any]) -> None:
        metadata = existing.setdefault("metadata", {})
        desired_metadata = desired.get("metadata") or {}
        for field in ("labels", "annotations"):
            wanted = desired_metadata.get(field)
            if wanted:
                merged = dict(metadata.get(field) or {})
                merged.update(wanted)
                metadata[field] = merged
        existing["spec"] = copy.deepcopy(desired.get("spec") or {})

    return mutate


def ensure_certificates(
    store: ResourceStore, certificates: list[dict[str, Any]]
) -> list[OperationResult]:
    """Create or update each certificate.

    Safe to call on every reconciliation pass and concurrently for the same
    object: the last writer wins on spec fields.

    Args:
        store: Resource store to write to.
        certificates: Certificates built by build_client_certificate or
            build_server_certificate.

    Returns:
        One result per certificate, in input order.

    Raises:
        UpstreamFetchError: If the store fails to read or write a certificate.
    """
    results: list[OperationResult] = []
    for certificate in certificates:
        metadata = certificate["metadata"]
        result = create_or_update(store, CERTIFICATES, certificate, mutate_func_for(certificate))
        logger.info(
            "certificate.configured",
            name=metadata["name"],
            namespace=metadata["namespace"],
            operation=result.value,
        )
        results.append(result)
    return results


__all__ = [
    "CLIENT_USAGES",
    "SERVER_USAGES",
    "CertificateConfig",
    "X509Subject",
    "build_client_certificate",
    "build_server_certificate",
    "ensure_certificates",
    "mutate_func_for",
]
