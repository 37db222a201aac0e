"""Chart values for the addon.

get_values is the entry point the addon framework calls per managed
cluster: it loads the installation's deployment options, runs each
supported signal and collects the results into HelmChartValues.

Example:
    >>> values = get_values(store, cluster, installation, settings)
    >>> values.to_values()["logging"]["enabled"]
    True
"""

from __future__ import annotations

from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleet_observability.config import AddonSettings
from fleet_observability.logs.values import LoggingValues
from fleet_observability.resources import AddonInstallation
from fleet_observability.signal import LogsSignal, TracesSignal, load_deployment_options
from fleet_observability.store import ResourceStore
from fleet_observability.traces.values import TracingValues
from fleet_observability.tracing import get_tracer, options_span

logger = structlog.get_logger(__name__)


class HelmChartValues(BaseModel):
    """Values rendered into the addon chart.

    Attributes:
        enabled: At least one signal is enabled.
        logging: Logging values.
        tracing: Tracing values.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )

    enabled: bool = False
    logging: LoggingValues = Field(default_factory=LoggingValues)
    tracing: TracingValues = Field(default_factory=TracingValues)

    def to_values(self) -> dict[str, Any]:
        """Return the values as a camelCase dictionary."""
        return self.model_dump(by_alias=True, mode="json")

    def to_yaml(self) -> str:
        """Render the values as a values.yaml document."""
        return yaml.safe_dump(self.to_values(), default_flow_style=False, sort_keys=False)


def get_values(
    store: ResourceStore,
    cluster: dict[str, Any],
    installation: AddonInstallation,
    settings: AddonSettings,
) -> HelmChartValues:
    """Build the chart values for one managed cluster.

    Args:
        store: Resource store.
        cluster: ManagedCluster object the installation runs on.
        installation: The addon installation.
        settings: Process-level addon settings.

    Returns:
        The chart values; empty when no signal applies.

    Raises:
        AddonOptionsError: If resolving any enabled signal fails.
    """
    with options_span(get_tracer(), "get_values", namespace=installation.namespace):
        deployment = load_deployment_options(store, installation)
        logs = LogsSignal(deployment, settings)
        traces = TracesSignal(deployment)

        logging_values = LoggingValues()
        tracing_values = TracingValues()
        if logs.supported_configuration(cluster):
            logging_values = logs.build_values(logs.build_options(store, cluster, installation))
        if traces.supported_configuration(cluster):
            tracing_values = traces.build_values(
                traces.build_options(store, cluster, installation)
            )

        if not logging_values.enabled and not tracing_values.enabled:
            logger.info("values.unsupported", namespace=installation.namespace)
            return HelmChartValues()

        return HelmChartValues(enabled=True, logging=logging_values, tracing=tracing_values)


__all__ = ["HelmChartValues", "get_values"]
