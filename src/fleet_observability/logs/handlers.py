"""Logging options resolution.

build_options turns an addon installation plus its deployment options into a
fully populated Options value. Depending on the topology it takes one of four
branches:

- disabled: no logging configured, nothing is fetched.
- unmanaged: the single user-provided ClusterLogForwarder referenced by the
  installation is fetched, together with every secret and config map its
  outputs depend on.
- managed at a spoke: the collector client certificate is ensured, the
  default-stack ClusterLogForwarder and the collector mTLS secret are fetched,
  and the hub ingestion URL is computed for the spoke's tenant.
- managed at the hub: the storage server certificate is ensured, the
  default-stack LokiStack, its object storage secret and the storage mTLS
  secret are fetched, and the tenant list is rebuilt from the fleet.

Resolution is all-or-nothing: the first failure propagates and no partial
Options is returned. Callers retry on the next reconciliation pass.

Example:
    >>> opts = build_options(
    ...     store,
    ...     installation,
    ...     deployment.platform,
    ...     deployment.user_workloads,
    ...     is_hub_cluster=False,
    ...     hub_hostname="myhub.foo.com",
    ... )
    >>> [s["metadata"]["name"] for s in opts.unmanaged.collection.secrets]
    ['static-authentication']
"""

from __future__ import annotations

from typing import Any

import structlog

from fleet_observability.certificates import (
    CertificateConfig,
    X509Subject,
    build_client_certificate,
    build_server_certificate,
    ensure_certificates,
)
from fleet_observability.config import LogsOptions
from fleet_observability.constants import (
    ADDON_NAME,
    DEFAULT_STACK_LABEL,
    DEFAULT_STACK_PREFIX,
    DEFAULT_TENANT,
    HUB_NAMESPACE,
    INSTALL_NAMESPACE,
    MANAGED_COLLECTION_CERT_COMMON_NAME,
    MANAGED_COLLECTION_SECRET_NAME,
    MANAGED_LOKI_URL_TEMPLATE,
    MANAGED_STORAGE_CERT_COMMON_NAME,
    MANAGED_STORAGE_MTLS_SECRET_NAME,
)
from fleet_observability.errors import (
    MissingDefaultReferenceError,
    MissingFieldError,
    MissingReferenceError,
    MultipleReferencesError,
    ResourceNotFoundError,
)
from fleet_observability.logs.options import (
    Collection,
    ManagedStack,
    Options,
    ResolutionMode,
    Storage,
    TopologyFlags,
    Unmanaged,
)
from fleet_observability.logs.pipeline import ClusterLogForwarder
from fleet_observability.logs.references import extract_pipeline_references
from fleet_observability.logs.tenants import list_tenants
from fleet_observability.resources import (
    CLUSTER_LOG_FORWARDERS,
    LOKI_STACKS,
    SECRETS,
    AddonInstallation,
    ObjectKey,
    ResourceKind,
)
from fleet_observability.store import ResourceStore, fetch_config_maps, fetch_secrets
from fleet_observability.tracing import get_tracer, options_span

logger = structlog.get_logger(__name__)

SIGNAL = "logs"


def build_options(
    store: ResourceStore,
    installation: AddonInstallation,
    platform: LogsOptions,
    user_workloads: LogsOptions,
    *,
    is_hub_cluster: bool,
    hub_hostname: str,
    addon_name: str = ADDON_NAME,
) -> Options:
    """Resolve the logging options of one installation.

    Args:
        store: Resource store to read from and write certificates to.
        installation: The requesting addon installation.
        platform: Platform logs options.
        user_workloads: User workload logs options.
        is_hub_cluster: The installation runs on the hub cluster.
        hub_hostname: Base domain of the hub cluster.
        addon_name: Addon name used to discover sibling installations.

    Returns:
        Fully populated options.

    Raises:
        MissingReferenceError: Unmanaged path, no pipeline referenced.
        MultipleReferencesError: Unmanaged path, several pipelines referenced.
        MissingDefaultReferenceError: Managed path, no default-stack object referenced.
        MissingFieldError: An output or the storage lacks a mandatory field.
        MissingImplementationError: An output has an unsupported type.
        UpstreamFetchError: The store failed or a referenced object is missing.
    """
    flags = TopologyFlags.from_logs_options(platform, user_workloads, is_hub_cluster=is_hub_cluster)
    mode = flags.mode
    base: dict[str, Any] = {
        "platform": platform,
        "user_workloads": user_workloads,
        "is_hub_cluster": is_hub_cluster,
        "hub_hostname": hub_hostname,
        "subscription_channel": platform.subscription_channel
        or user_workloads.subscription_channel,
    }

    with options_span(
        get_tracer(),
        "build_options",
        namespace=installation.namespace,
        mode=mode.value,
        signal=SIGNAL,
    ):
        logger.info("build_options.started", namespace=installation.namespace, mode=mode.value)

        if mode == ResolutionMode.DISABLED:
            opts = Options(enabled=False, **base)
        elif mode == ResolutionMode.UNMANAGED:
            opts = Options(unmanaged=_build_unmanaged(store, installation), **base)
        elif mode == ResolutionMode.MANAGED_SPOKE:
            opts = Options(
                managed_stack=_build_managed_collection(store, installation, hub_hostname),
                **base,
            )
        else:
            opts = Options(
                managed_stack=_build_managed_storage(store, installation, addon_name),
                **base,
            )

        logger.info(
            "build_options.completed",
            namespace=installation.namespace,
            mode=mode.value,
            enabled=opts.enabled,
        )
        return opts


def build_default_options(
    store: ResourceStore,
    installation: AddonInstallation,
    platform: LogsOptions,
    user_workloads: LogsOptions,
    *,
    is_hub_cluster: bool,
    hub_hostname: str,
    addon_name: str = ADDON_NAME,
) -> Options:
    """Build placeholder options for rendering the default stack.

    Used before the managed resources exist: secret names are pre-filled
    with the well-known managed names, the ingestion URL points at the
    default tenant, and the tenant list is taken from a live listing.

    Raises:
        UpstreamFetchError: If listing the addon installations fails.
    """
    collection_secret = _placeholder(MANAGED_COLLECTION_SECRET_NAME, INSTALL_NAMESPACE)
    return Options(
        platform=platform,
        user_workloads=user_workloads,
        is_hub_cluster=is_hub_cluster,
        hub_hostname=hub_hostname,
        subscription_channel=platform.subscription_channel or user_workloads.subscription_channel,
        managed_stack=ManagedStack(
            loki_url=MANAGED_LOKI_URL_TEMPLATE.format(
                hub_hostname=hub_hostname, tenant=DEFAULT_TENANT
            ),
            collection=Collection(secrets=[collection_secret]),
            storage=Storage(
                obj_storage_secret=_placeholder(
                    MANAGED_STORAGE_MTLS_SECRET_NAME, INSTALL_NAMESPACE
                ),
                mtls_secret=_placeholder(MANAGED_STORAGE_MTLS_SECRET_NAME, HUB_NAMESPACE),
                tenants=list_tenants(store, installation.namespace, addon_name),
            ),
        ),
    )


# =============================================================================
# Unmanaged path
# =============================================================================


def _build_unmanaged(store: ResourceStore, installation: AddonInstallation) -> Unmanaged:
    keys = installation.object_keys(CLUSTER_LOG_FORWARDERS)
    if not keys:
        raise MissingReferenceError(CLUSTER_LOG_FORWARDERS.resource)
    if len(keys) > 1:
        raise MultipleReferencesError(CLUSTER_LOG_FORWARDERS.resource, count=len(keys))

    key = keys[0]
    clf = ClusterLogForwarder.from_manifest(
        store.get(CLUSTER_LOG_FORWARDERS, key.namespace, key.name)
    )
    refs = extract_pipeline_references(clf.spec.outputs)
    logger.debug(
        "unmanaged.references_extracted",
        pipeline=clf.name,
        outputs=len(clf.spec.outputs),
        secrets=refs.secret_names,
        config_maps=refs.config_map_names,
    )

    secrets = fetch_secrets(store, clf.namespace, installation.namespace, refs.secret_names)
    config_maps = fetch_config_maps(
        store, clf.namespace, installation.namespace, refs.config_map_names
    )
    return Unmanaged(
        collection=Collection(
            cluster_log_forwarder=clf,
            secrets=secrets,
            config_maps=config_maps,
        )
    )


# =============================================================================
# Managed path
# =============================================================================


def _build_managed_collection(
    store: ResourceStore, installation: AddonInstallation, hub_hostname: str
) -> ManagedStack:
    # The hub gateway identifies the tenant by the organizational unit
    certificate = build_client_certificate(
        ObjectKey(installation.namespace, MANAGED_COLLECTION_SECRET_NAME),
        CertificateConfig(
            common_name=MANAGED_COLLECTION_CERT_COMMON_NAME,
            subject=X509Subject(organizational_units=[installation.namespace]),
            dns_names=[MANAGED_COLLECTION_CERT_COMMON_NAME],
        ),
    )
    ensure_certificates(store, [certificate])

    clf = ClusterLogForwarder.from_manifest(
        _get_default_stack_object(store, installation, CLUSTER_LOG_FORWARDERS)
    )
    secret = store.get(SECRETS, installation.namespace, MANAGED_COLLECTION_SECRET_NAME)

    return ManagedStack(
        loki_url=MANAGED_LOKI_URL_TEMPLATE.format(
            hub_hostname=hub_hostname, tenant=installation.namespace
        ),
        collection=Collection(cluster_log_forwarder=clf, secrets=[secret]),
    )


def _build_managed_storage(
    store: ResourceStore, installation: AddonInstallation, addon_name: str
) -> ManagedStack:
    certificate = build_server_certificate(
        ObjectKey(installation.namespace, MANAGED_STORAGE_MTLS_SECRET_NAME),
        CertificateConfig(
            common_name=MANAGED_STORAGE_CERT_COMMON_NAME,
            dns_names=[MANAGED_STORAGE_CERT_COMMON_NAME],
        ),
    )
    ensure_certificates(store, [certificate])

    loki_stack = _get_default_stack_object(store, installation, LOKI_STACKS)
    metadata = loki_stack.get("metadata") or {}
    storage_secret_name = (
        ((loki_stack.get("spec") or {}).get("storage") or {}).get("secret") or {}
    ).get("name")
    if not storage_secret_name:
        raise MissingFieldError("spec.storage.secret.name", output_name=metadata.get("name", ""))

    obj_storage_secret = store.get(SECRETS, metadata.get("namespace", ""), storage_secret_name)
    mtls_secret = store.get(SECRETS, installation.namespace, MANAGED_STORAGE_MTLS_SECRET_NAME)

    return ManagedStack(
        storage=Storage(
            loki_stack=loki_stack,
            obj_storage_secret=obj_storage_secret,
            mtls_secret=mtls_secret,
            tenants=list_tenants(store, installation.namespace, addon_name),
        )
    )


def _get_default_stack_object(
    store: ResourceStore, installation: AddonInstallation, kind: ResourceKind
) -> dict[str, Any]:
    """Fetch the default-stack object of ``kind`` referenced by the installation.

    The first reference whose name carries the default-stack prefix wins.
    Without one, the first referenced object labelled as the default stack
    is used; referenced objects that do not exist are skipped.

    Raises:
        MissingDefaultReferenceError: If no reference qualifies.
    """
    keys = installation.object_keys(kind)
    for key in keys:
        if key.name.startswith(DEFAULT_STACK_PREFIX):
            return store.get(kind, key.namespace, key.name)

    for key in keys:
        try:
            obj = store.get(kind, key.namespace, key.name)
        except ResourceNotFoundError:
            logger.debug(
                "default_stack.reference_not_found",
                resource=kind.resource,
                namespace=key.namespace,
                name=key.name,
            )
            continue
        labels = (obj.get("metadata") or {}).get("labels") or {}
        if labels.get(DEFAULT_STACK_LABEL) == "true":
            return obj

    raise MissingDefaultReferenceError(kind.resource)


def _placeholder(name: str, namespace: str) -> dict[str, Any]:
    return {
        "apiVersion": SECRETS.api_version,
        "kind": SECRETS.kind,
        "metadata": {"name": name, "namespace": namespace},
    }


__all__ = ["SIGNAL", "build_default_options", "build_options"]
