"""Configuration models for the addon options engine.

Two layers of configuration exist:

- AddonSettings: process-level settings of the addon controller (hub
  hostname, kubeconfig, logging). Loaded once at startup by pydantic-settings,
  from arguments or from ``FLEET_OBS_*`` environment variables.
- AddonDeploymentOptions: per-installation options parsed from the
  AddOnDeploymentConfig bound to an installation. Re-read on every
  reconciliation pass.

Example:
    >>> from fleet_observability.config import AddonDeploymentOptions
    >>> opts = AddonDeploymentOptions.from_deployment_config(aodc)
    >>> opts.platform.collection_enabled
    True
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fleet_observability.constants import ADDON_NAME
from fleet_observability.errors import InvalidConfigurationError

ENV_PREFIX = "FLEET_OBS_"

# AddOnDeploymentConfig customized variables
KEY_LOGGING_SUBSCRIPTION_CHANNEL = "loggingSubscriptionChannel"
KEY_PLATFORM_LOGS_COLLECTION = "platformLogsCollection"
KEY_USER_WORKLOAD_LOGS_COLLECTION = "userWorkloadLogsCollection"
KEY_PLATFORM_LOGS_STORAGE = "platformLogsStorage"
KEY_OPENTELEMETRY_SUBSCRIPTION_CHANNEL = "openTelemetrySubscriptionChannel"
KEY_USER_WORKLOAD_TRACES_COLLECTION = "userWorkloadTracesCollection"

# Accepted values are "<resource>.<version>.<group>" of the kind to deploy
CLUSTER_LOG_FORWARDERS_V1 = "clusterlogforwarders.v1.observability.openshift.io"
LOKI_STACKS_V1 = "lokistacks.v1.loki.grafana.io"
OPENTELEMETRY_COLLECTORS_V1BETA1 = "opentelemetrycollectors.v1beta1.opentelemetry.io"


class AddonSettings(BaseSettings):
    """Process-level settings of the addon controller.

    Attributes:
        addon_name: Name shared by every installation of this addon.
        hub_hostname: Base domain of the hub cluster, used to build the
            managed ingestion URL.
        kubeconfig_path: Path to a kubeconfig. None uses in-cluster config.
        context: Kubeconfig context. None uses the current context.
        log_level: Minimum log level.
        json_logs: Render logs as JSON instead of console output.

    Every field can be set from a ``FLEET_OBS_<FIELD>`` environment variable,
    e.g. ``FLEET_OBS_HUB_HOSTNAME``. Constructor arguments take precedence.

    Example:
        >>> settings = AddonSettings(hub_hostname="myhub.foo.com")
        >>> settings.addon_name
        'multicluster-observability-addon'
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True, extra="ignore")

    addon_name: str = Field(default=ADDON_NAME, min_length=1, description="Addon name")
    hub_hostname: str = Field(default="", description="Hub cluster base domain")
    kubeconfig_path: str | None = Field(
        default=None,
        description="Path to kubeconfig file. None uses in-cluster config.",
    )
    context: str | None = Field(default=None, description="Kubeconfig context")
    log_level: str = Field(default="INFO", description="Minimum log level")
    json_logs: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("kubeconfig_path")
    @classmethod
    def expand_kubeconfig_path(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if v is None:
            return None
        return str(Path(v).expanduser())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level


class LogsOptions(BaseModel):
    """Logging options for one audience (platform or user workloads).

    Attributes:
        collection_enabled: Forward logs with a user-provided pipeline.
        storage_enabled: Deploy the managed storage/collection stack.
        subscription_channel: Operator subscription channel for the collector.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    collection_enabled: bool = False
    storage_enabled: bool = False
    subscription_channel: str = ""

    @property
    def enabled(self) -> bool:
        """Check whether any logging feature is on for this audience."""
        return self.collection_enabled or self.storage_enabled


class TracesOptions(BaseModel):
    """Tracing options for user workloads.

    Attributes:
        collection_enabled: Forward traces with a user-provided collector.
        subscription_channel: Operator subscription channel for the collector.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    collection_enabled: bool = False
    subscription_channel: str = ""

    @property
    def enabled(self) -> bool:
        """Check whether trace collection is on."""
        return self.collection_enabled


class AddonDeploymentOptions(BaseModel):
    """Per-installation options parsed from an AddOnDeploymentConfig.

    Attributes:
        platform: Options for platform (infrastructure and audit) logs.
        user_workloads: Options for application logs.
        traces: Options for user workload traces.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    platform: LogsOptions = Field(default_factory=LogsOptions)
    user_workloads: LogsOptions = Field(default_factory=LogsOptions)
    traces: TracesOptions = Field(default_factory=TracesOptions)

    @property
    def logs_enabled(self) -> bool:
        """Check whether any audience has logging turned on."""
        return self.platform.enabled or self.user_workloads.enabled

    @property
    def enabled(self) -> bool:
        """Check whether any signal is turned on."""
        return self.logs_enabled or self.traces.enabled

    @classmethod
    def from_deployment_config(cls, manifest: dict[str, Any]) -> AddonDeploymentOptions:
        """Parse the customized variables of an AddOnDeploymentConfig.

        Unknown variables are ignored; known variables with an unsupported
        value are rejected.

        Args:
            manifest: AddOnDeploymentConfig object as served by the store.

        Returns:
            The parsed options.

        Raises:
            InvalidConfigurationError: If a known variable has an unsupported value.
        """
        spec = manifest.get("spec") or {}
        variables = {
            item.get("name", ""): item.get("value", "")
            for item in spec.get("customizedVariables") or []
        }

        channel = variables.get(KEY_LOGGING_SUBSCRIPTION_CHANNEL, "")
        platform_collection = _expect(
            variables, KEY_PLATFORM_LOGS_COLLECTION, CLUSTER_LOG_FORWARDERS_V1
        )
        user_collection = _expect(
            variables, KEY_USER_WORKLOAD_LOGS_COLLECTION, CLUSTER_LOG_FORWARDERS_V1
        )
        platform_storage = _expect(variables, KEY_PLATFORM_LOGS_STORAGE, LOKI_STACKS_V1)
        traces_collection = _expect(
            variables, KEY_USER_WORKLOAD_TRACES_COLLECTION, OPENTELEMETRY_COLLECTORS_V1BETA1
        )

        return cls(
            platform=LogsOptions(
                collection_enabled=platform_collection,
                storage_enabled=platform_storage,
                subscription_channel=channel,
            ),
            user_workloads=LogsOptions(
                collection_enabled=user_collection,
                subscription_channel=channel,
            ),
            traces=TracesOptions(
                collection_enabled=traces_collection,
                subscription_channel=variables.get(KEY_OPENTELEMETRY_SUBSCRIPTION_CHANNEL, ""),
            ),
        )


def _expect(variables: dict[str, str], key: str, supported: str) -> bool:
    """Return whether ``key`` is set, validating its value against ``supported``."""
    value = variables.get(key)
    if value is None or value == "":
        return False
    if value != supported:
        raise InvalidConfigurationError(key, value, reason=f"expected '{supported}'")
    return True


__all__ = [
    "CLUSTER_LOG_FORWARDERS_V1",
    "ENV_PREFIX",
    "KEY_LOGGING_SUBSCRIPTION_CHANNEL",
    "KEY_OPENTELEMETRY_SUBSCRIPTION_CHANNEL",
    "KEY_PLATFORM_LOGS_COLLECTION",
    "KEY_PLATFORM_LOGS_STORAGE",
    "KEY_USER_WORKLOAD_LOGS_COLLECTION",
    "KEY_USER_WORKLOAD_TRACES_COLLECTION",
    "LOKI_STACKS_V1",
    "OPENTELEMETRY_COLLECTORS_V1BETA1",
    "AddonDeploymentOptions",
    "AddonSettings",
    "LogsOptions",
    "TracesOptions",
]
