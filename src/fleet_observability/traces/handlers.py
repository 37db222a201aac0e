"""Tracing options resolution.

Trace collection is always unmanaged: the installation references exactly
one OpenTelemetryCollector, which is fetched together with every secret and
config map it mounts or reads. Resolution follows the same rules as the
unmanaged logging path: one reference, all-or-nothing, per-cluster copies
of secrets and config maps first.
"""

from __future__ import annotations

import structlog

from fleet_observability.config import TracesOptions
from fleet_observability.errors import MissingReferenceError, MultipleReferencesError
from fleet_observability.resources import OPENTELEMETRY_COLLECTORS, AddonInstallation
from fleet_observability.store import ResourceStore, fetch_config_maps, fetch_secrets
from fleet_observability.traces.collector import OpenTelemetryCollector
from fleet_observability.traces.options import Options
from fleet_observability.traces.references import extract_collector_references
from fleet_observability.tracing import get_tracer, options_span

logger = structlog.get_logger(__name__)

SIGNAL = "traces"


def build_options(
    store: ResourceStore, installation: AddonInstallation, user_workloads: TracesOptions
) -> Options:
    """Resolve the tracing options of one installation.

    Args:
        store: Resource store to read from.
        installation: The requesting addon installation.
        user_workloads: Tracing options from the deployment config.

    Returns:
        Fully populated options, or disabled options when collection is off.

    Raises:
        MissingReferenceError: No collector referenced.
        MultipleReferencesError: Several collectors referenced.
        MissingFieldError: A collector volume names no secret or config map.
        UpstreamFetchError: The store failed or a referenced object is missing.
    """
    mode = "unmanaged" if user_workloads.enabled else "disabled"
    with options_span(
        get_tracer(),
        "build_options",
        namespace=installation.namespace,
        mode=mode,
        signal=SIGNAL,
    ):
        logger.info(
            "build_options.started", namespace=installation.namespace, mode=mode, signal=SIGNAL
        )
        if not user_workloads.enabled:
            return Options(enabled=False, user_workloads=user_workloads)

        keys = installation.object_keys(OPENTELEMETRY_COLLECTORS)
        if not keys:
            raise MissingReferenceError(OPENTELEMETRY_COLLECTORS.resource)
        if len(keys) > 1:
            raise MultipleReferencesError(OPENTELEMETRY_COLLECTORS.resource, count=len(keys))

        key = keys[0]
        collector = OpenTelemetryCollector.from_manifest(
            store.get(OPENTELEMETRY_COLLECTORS, key.namespace, key.name)
        )
        refs = extract_collector_references(collector)
        logger.debug(
            "unmanaged.references_extracted",
            collector=collector.name,
            secrets=refs.secret_names,
            config_maps=refs.config_map_names,
        )

        opts = Options(
            user_workloads=user_workloads,
            subscription_channel=user_workloads.subscription_channel,
            collector=collector,
            secrets=fetch_secrets(
                store, collector.namespace, installation.namespace, refs.secret_names
            ),
            config_maps=fetch_config_maps(
                store, collector.namespace, installation.namespace, refs.config_map_names
            ),
        )
        logger.info(
            "build_options.completed",
            namespace=installation.namespace,
            mode=mode,
            signal=SIGNAL,
            enabled=opts.enabled,
        )
        return opts


__all__ = ["SIGNAL", "build_options"]
