"""Builders for the manifests the resolver reads."""

from __future__ import annotations

from typing import Any

from fleet_observability.resources import (
    ADDON_DEPLOYMENT_CONFIGS,
    ADDON_INSTALLATIONS,
    CLUSTER_LOG_FORWARDERS,
    LOKI_STACKS,
    OPENTELEMETRY_COLLECTORS,
    ResourceKind,
)

ADDON_NAME = "multicluster-observability-addon"
HUB_NAMESPACE = "open-cluster-management-observability"
CLUSTER_NAMESPACE = "cluster-1"
HUB_HOSTNAME = "myhub.foo.com"


def make_secret(name: str, namespace: str, data: dict[str, str] | None = None) -> dict[str, Any]:
    """Build a Secret manifest."""
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": namespace},
        "type": "Opaque",
        "data": data or {},
    }


def make_config_map(
    name: str, namespace: str, data: dict[str, str] | None = None
) -> dict[str, Any]:
    """Build a ConfigMap manifest."""
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": name, "namespace": namespace},
        "data": data or {},
    }


def make_reference(kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
    """Build a config reference as reported on an installation status."""
    return {"group": kind.group, "resource": kind.resource, "namespace": namespace, "name": name}


def make_installation(
    namespace: str,
    references: list[dict[str, Any]] | None = None,
    name: str = ADDON_NAME,
) -> dict[str, Any]:
    """Build a ManagedClusterAddOn manifest."""
    return {
        "apiVersion": ADDON_INSTALLATIONS.api_version,
        "kind": ADDON_INSTALLATIONS.kind,
        "metadata": {"name": name, "namespace": namespace},
        "status": {"configReferences": references or []},
    }


def make_deployment_config(
    variables: dict[str, str], name: str = ADDON_NAME, namespace: str = HUB_NAMESPACE
) -> dict[str, Any]:
    """Build an AddOnDeploymentConfig manifest."""
    return {
        "apiVersion": ADDON_DEPLOYMENT_CONFIGS.api_version,
        "kind": ADDON_DEPLOYMENT_CONFIGS.kind,
        "metadata": {"name": name, "namespace": namespace},
        "spec": {
            "customizedVariables": [{"name": k, "value": v} for k, v in variables.items()],
        },
    }


def make_cluster_log_forwarder(
    name: str,
    namespace: str = HUB_NAMESPACE,
    outputs: list[dict[str, Any]] | None = None,
    labels: dict[str, str] | None = None,
    annotations: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build a ClusterLogForwarder manifest."""
    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = labels
    if annotations:
        metadata["annotations"] = annotations
    return {
        "apiVersion": CLUSTER_LOG_FORWARDERS.api_version,
        "kind": CLUSTER_LOG_FORWARDERS.kind,
        "metadata": metadata,
        "spec": {
            "serviceAccount": {"name": "collector"},
            "outputs": outputs or [],
            "pipelines": [
                {
                    "name": "app-logs",
                    "inputRefs": ["application"],
                    "outputRefs": [o["name"] for o in outputs or []],
                }
            ],
        },
    }


def make_loki_stack(
    name: str,
    namespace: str = HUB_NAMESPACE,
    secret_name: str | None = "mcoa-managed-instance-storage",
    labels: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build a LokiStack manifest."""
    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if labels:
        metadata["labels"] = labels
    storage: dict[str, Any] = {"schemas": [{"version": "v13", "effectiveDate": "2024-10-25"}]}
    if secret_name is not None:
        storage["secret"] = {"name": secret_name, "type": "s3"}
    return {
        "apiVersion": LOKI_STACKS.api_version,
        "kind": LOKI_STACKS.kind,
        "metadata": metadata,
        "spec": {"size": "1x.extra-small", "storage": storage},
    }


def make_opentelemetry_collector(
    name: str,
    namespace: str = HUB_NAMESPACE,
    spec: dict[str, Any] | None = None,
    annotations: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Build an OpenTelemetryCollector manifest.

    The default spec mounts a TLS secret and a CA config map, and reads an
    exporter token from a second secret.
    """
    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if annotations:
        metadata["annotations"] = annotations
    if spec is None:
        spec = {
            "mode": "deployment",
            "config": {
                "receivers": {"otlp": {"protocols": {"grpc": {}}}},
                "exporters": {"otlp": {"endpoint": "tempo.example.com:4317"}},
                "service": {
                    "pipelines": {"traces": {"receivers": ["otlp"], "exporters": ["otlp"]}}
                },
            },
            "volumes": [
                {"name": "tls", "secret": {"secretName": "otel-tls"}},
                {"name": "ca", "configMap": {"name": "otel-ca"}},
            ],
            "env": [
                {
                    "name": "TEMPO_TOKEN",
                    "valueFrom": {"secretKeyRef": {"name": "tempo-token", "key": "token"}},
                }
            ],
        }
    return {
        "apiVersion": OPENTELEMETRY_COLLECTORS.api_version,
        "kind": OPENTELEMETRY_COLLECTORS.kind,
        "metadata": metadata,
        "spec": spec,
    }


def loki_output(name: str = "app-logs") -> dict[str, Any]:
    """Build a Loki output with a secret token and a config map CA."""
    return {
        "name": name,
        "type": "loki",
        "loki": {
            "url": "https://loki.example.com",
            "authentication": {
                "token": {
                    "from": "secret",
                    "secret": {"name": "static-authentication", "key": "pass"},
                }
            },
        },
        "tls": {"ca": {"key": "ca.crt", "configMapName": "foo"}},
    }


__all__ = [
    "ADDON_NAME",
    "CLUSTER_NAMESPACE",
    "HUB_HOSTNAME",
    "HUB_NAMESPACE",
    "loki_output",
    "make_cluster_log_forwarder",
    "make_config_map",
    "make_deployment_config",
    "make_installation",
    "make_loki_stack",
    "make_opentelemetry_collector",
    "make_reference",
    "make_secret",
]
