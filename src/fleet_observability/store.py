"""Resource store access.

The resolver never talks to the Kubernetes API directly: it goes through the
ResourceStore protocol defined here. KubernetesResourceStore implements the
protocol on top of the official ``kubernetes`` client; tests use an in-memory
double.

Objects cross the store boundary as plain manifest dictionaries (camelCase
keys, exactly as the API serves them).

Example:
    >>> from fleet_observability.config import AddonSettings
    >>> from fleet_observability.resources import SECRETS
    >>> store = KubernetesResourceStore(AddonSettings())
    >>> store.startup()
    >>> secret = store.get(SECRETS, "cluster-1", "static-authentication")
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException

from fleet_observability.errors import (
    ResourceAccessDeniedError,
    ResourceNotFoundError,
    UpstreamFetchError,
)
from fleet_observability.resources import CONFIG_MAPS, SECRETS, ResourceKind

if TYPE_CHECKING:
    from fleet_observability.config import AddonSettings

logger = structlog.get_logger(__name__)

MutateFn = Callable[[dict[str, Any]], None]


class OperationResult(str, Enum):
    """Outcome of a create-or-update call."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class ResourceStore(Protocol):
    """Typed access to stored objects, keyed by kind, namespace and name."""

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        """Return one object or raise ResourceNotFoundError."""
        ...

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        """Return every object of ``kind``, cluster-wide when namespace is None."""
        ...

    def create(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Create ``obj`` and return the stored object."""
        ...

    def update(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the stored object with ``obj`` and return it."""
        ...


def create_or_update(
    store: ResourceStore,
    kind: ResourceKind,
    obj: dict[str, Any],
    mutate: MutateFn,
) -> OperationResult:
    """Create ``obj`` or bring the stored copy in line with it.

    The stored object (or a copy of ``obj`` when none exists) is passed to
    ``mutate``, which must set every field the caller owns. The store is only
    written when the mutation changed something, so repeated calls with the
    same desired state are no-ops.

    Args:
        store: Resource store to write to.
        kind: Kind of ``obj``.
        obj: Desired object; only its metadata namespace and name are used
            to look up the stored copy.
        mutate: Function applying the desired state in place.

    Returns:
        Whether the object was created, updated or left unchanged.

    Raises:
        UpstreamFetchError: If the store fails to read or write the object.
    """
    metadata = obj.get("metadata") or {}
    namespace = metadata.get("namespace", "")
    name = metadata.get("name", "")

    try:
        existing = store.get(kind, namespace, name)
    except ResourceNotFoundError:
        created = copy.deepcopy(obj)
        mutate(created)
        store.create(kind, created)
        return OperationResult.CREATED

    before = copy.deepcopy(existing)
    mutate(existing)
    if existing == before:
        return OperationResult.UNCHANGED

    store.update(kind, existing)
    return OperationResult.UPDATED


def fetch_secrets(
    store: ResourceStore,
    default_namespace: str,
    cluster_namespace: str,
    names: list[str],
) -> list[dict[str, Any]]:
    """Fetch secrets by name, preferring per-cluster copies.

    Each secret is looked up in the cluster namespace first and, when absent
    there, in the default namespace. Returned secrets are re-homed to the
    cluster namespace so the chart renders them next to each other.

    Args:
        store: Resource store to read from.
        default_namespace: Namespace of the pipeline that references the secrets.
        cluster_namespace: Namespace of the requesting installation.
        names: Secret names; fetched in the given order.

    Returns:
        The resolved secrets.

    Raises:
        ResourceNotFoundError: If a secret exists in neither namespace.
        UpstreamFetchError: If the store fails for any other reason.
    """
    return [
        _fetch_rehomed(store, SECRETS, default_namespace, cluster_namespace, name)
        for name in names
    ]


def fetch_config_maps(
    store: ResourceStore,
    default_namespace: str,
    cluster_namespace: str,
    names: list[str],
) -> list[dict[str, Any]]:
    """Fetch config maps by name, preferring per-cluster copies.

    See fetch_secrets for the lookup order.
    """
    return [
        _fetch_rehomed(store, CONFIG_MAPS, default_namespace, cluster_namespace, name)
        for name in names
    ]


def _fetch_rehomed(
    store: ResourceStore,
    kind: ResourceKind,
    default_namespace: str,
    cluster_namespace: str,
    name: str,
) -> dict[str, Any]:
    try:
        obj = store.get(kind, cluster_namespace, name)
    except ResourceNotFoundError:
        if default_namespace == cluster_namespace:
            raise
        obj = store.get(kind, default_namespace, name)

    result: dict[str, Any] = {
        "apiVersion": kind.api_version,
        "kind": kind.kind,
        "metadata": {"name": name, "namespace": cluster_namespace},
    }
    for field in ("type", "data", "binaryData", "stringData"):
        if obj.get(field) is not None:
            result[field] = copy.deepcopy(obj[field])
    return result


class KubernetesResourceStore:
    """ResourceStore backed by the Kubernetes API.

    Core kinds (secrets, config maps) go through CoreV1Api; every other kind
    is treated as a custom resource and goes through CustomObjectsApi.

    Attributes:
        settings: Addon settings carrying the kubeconfig location.
    """

    def __init__(self, settings: AddonSettings) -> None:
        self.settings = settings
        self._api_client: Any = None
        self._core: Any = None
        self._custom: Any = None

    def startup(self) -> None:
        """Initialize the Kubernetes client.

        Loads the explicit kubeconfig when one is configured, otherwise tries
        in-cluster configuration and falls back to the default kubeconfig.

        Raises:
            UpstreamFetchError: If no configuration could be loaded.
        """
        try:
            if self.settings.kubeconfig_path:
                k8s_config.load_kube_config(
                    config_file=self.settings.kubeconfig_path,
                    context=self.settings.context,
                )
                logger.info(
                    "store.kubeconfig_loaded",
                    kubeconfig_path=self.settings.kubeconfig_path,
                    context=self.settings.context,
                )
            else:
                try:
                    k8s_config.load_incluster_config()
                    logger.info("store.incluster_config_loaded")
                except k8s_config.ConfigException:
                    k8s_config.load_kube_config(context=self.settings.context)
                    logger.info("store.default_kubeconfig_loaded", context=self.settings.context)
        except Exception as e:
            logger.exception("store.startup_failed")
            raise UpstreamFetchError("kubeconfig", reason=str(e)) from e

        self._api_client = client.ApiClient()
        self._core = client.CoreV1Api(self._api_client)
        self._custom = client.CustomObjectsApi(self._api_client)

    def shutdown(self) -> None:
        """Release the API client."""
        if self._api_client is not None:
            self._api_client.close()
        self._api_client = None
        self._core = None
        self._custom = None

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        """Return one object.

        Raises:
            ResourceNotFoundError: If the object does not exist.
            ResourceAccessDeniedError: If the API denies access.
            UpstreamFetchError: On any other API failure.
        """
        self._ensure_initialized()
        try:
            if kind == SECRETS:
                obj = self._core.read_namespaced_secret(name=name, namespace=namespace)
            elif kind == CONFIG_MAPS:
                obj = self._core.read_namespaced_config_map(name=name, namespace=namespace)
            else:
                return self._custom.get_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.resource,
                    name=name,
                )
        except ApiException as e:
            raise _translate(e, kind, namespace=namespace, name=name) from e
        return self._to_dict(obj)

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        """Return every object of ``kind``, cluster-wide when namespace is None."""
        self._ensure_initialized()
        try:
            if kind == SECRETS:
                result = (
                    self._core.list_namespaced_secret(namespace=namespace)
                    if namespace
                    else self._core.list_secret_for_all_namespaces()
                )
                return [self._to_dict(item) for item in result.items]
            if kind == CONFIG_MAPS:
                result = (
                    self._core.list_namespaced_config_map(namespace=namespace)
                    if namespace
                    else self._core.list_config_map_for_all_namespaces()
                )
                return [self._to_dict(item) for item in result.items]
            if namespace:
                response = self._custom.list_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.resource,
                )
            else:
                response = self._custom.list_cluster_custom_object(
                    group=kind.group,
                    version=kind.version,
                    plural=kind.resource,
                )
        except ApiException as e:
            raise _translate(e, kind, namespace=namespace or "") from e
        return list(response.get("items") or [])

    def create(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Create ``obj``."""
        self._ensure_initialized()
        namespace = obj["metadata"].get("namespace", "")
        try:
            if kind == SECRETS:
                created = self._core.create_namespaced_secret(namespace=namespace, body=obj)
            elif kind == CONFIG_MAPS:
                created = self._core.create_namespaced_config_map(namespace=namespace, body=obj)
            else:
                return self._custom.create_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.resource,
                    body=obj,
                )
        except ApiException as e:
            name = obj["metadata"].get("name", "")
            raise _translate(e, kind, namespace=namespace, name=name) from e
        return self._to_dict(created)

    def update(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the stored object with ``obj``."""
        self._ensure_initialized()
        namespace = obj["metadata"].get("namespace", "")
        name = obj["metadata"]["name"]
        try:
            if kind == SECRETS:
                updated = self._core.replace_namespaced_secret(
                    name=name, namespace=namespace, body=obj
                )
            elif kind == CONFIG_MAPS:
                updated = self._core.replace_namespaced_config_map(
                    name=name, namespace=namespace, body=obj
                )
            else:
                return self._custom.replace_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.resource,
                    name=name,
                    body=obj,
                )
        except ApiException as e:
            raise _translate(e, kind, namespace=namespace, name=name) from e
        return self._to_dict(updated)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _ensure_initialized(self) -> None:
        if self._core is None:
            raise UpstreamFetchError(
                "kubernetes", reason="store not initialized - call startup() first"
            )

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        return self._api_client.sanitize_for_serialization(obj)


def _translate(
    error: ApiException,
    kind: ResourceKind,
    *,
    namespace: str = "",
    name: str = "",
) -> UpstreamFetchError:
    """Map an ApiException onto the resolver error hierarchy."""
    if error.status == 404:
        return ResourceNotFoundError(kind.resource, namespace=namespace, name=name)
    if error.status == 403:
        return ResourceAccessDeniedError(
            kind.resource, namespace=namespace, name=name, reason=str(error.reason)
        )
    return UpstreamFetchError(
        kind.resource, namespace=namespace, name=name, reason=f"{error.status}: {error.reason}"
    )


__all__ = [
    "KubernetesResourceStore",
    "MutateFn",
    "OperationResult",
    "ResourceStore",
    "create_or_update",
    "fetch_config_maps",
    "fetch_secrets",
]
