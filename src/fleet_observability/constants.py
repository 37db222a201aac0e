"""Names shared between the resolver, the certificate provisioner and the chart.

The object names below are part of the contract with the addon chart and
the addon health checks; changing one requires changing the chart.
"""

from __future__ import annotations

ADDON_NAME = "multicluster-observability-addon"

# Namespaces
HUB_NAMESPACE = "open-cluster-management-observability"
INSTALL_NAMESPACE = "open-cluster-management-agent-addon"

# Managed stack
DEFAULT_STACK_PREFIX = "mcoa-managed"
DEFAULT_STACK_LABEL = "observability.openshift.io/default-stack"

MANAGED_COLLECTION_CERT_COMMON_NAME = "mcoa-logging-managed-collection"
MANAGED_COLLECTION_SECRET_NAME = "mcoa-logging-managed-collection-tls"
MANAGED_STORAGE_CERT_COMMON_NAME = "mcoa-logging-managed-storage"
MANAGED_STORAGE_MTLS_SECRET_NAME = "mcoa-logging-managed-storage-tls"

# Format arguments: hub hostname, tenant
MANAGED_LOKI_URL_TEMPLATE = (
    "https://mcoa-managed-instance-openshift-logging.apps.{hub_hostname}"
    "/api/logs/v1/{tenant}/otlp/v1/logs"
)
DEFAULT_TENANT = "tenant"

# Certificates
CERTIFICATE_ISSUER_NAME = "mcoa-ca-issuer"
CERTIFICATE_ISSUER_KIND = "ClusterIssuer"
CERTIFICATE_DURATION = "8760h"
CERTIFICATE_RENEW_BEFORE = "720h"

# Cluster labels
LOCAL_CLUSTER_LABEL = "local-cluster"

__all__ = [
    "ADDON_NAME",
    "CERTIFICATE_DURATION",
    "CERTIFICATE_ISSUER_KIND",
    "CERTIFICATE_ISSUER_NAME",
    "CERTIFICATE_RENEW_BEFORE",
    "DEFAULT_STACK_LABEL",
    "DEFAULT_STACK_PREFIX",
    "DEFAULT_TENANT",
    "HUB_NAMESPACE",
    "INSTALL_NAMESPACE",
    "LOCAL_CLUSTER_LABEL",
    "MANAGED_COLLECTION_CERT_COMMON_NAME",
    "MANAGED_COLLECTION_SECRET_NAME",
    "MANAGED_LOKI_URL_TEMPLATE",
    "MANAGED_STORAGE_CERT_COMMON_NAME",
    "MANAGED_STORAGE_MTLS_SECRET_NAME",
]
