"""Pydantic models for log-forwarding pipelines (ClusterLogForwarder).

Only the parts the resolver interprets are modelled field by field: the
outputs, their type-specific authentication blocks and their TLS block.
Everything else (inputs, pipeline links, filters, output URLs, tuning) is
carried through untouched so the pipeline can be handed to the chart as-is.

Field names are snake_case in Python and camelCase on the wire; models accept
both and dump camelCase with ``by_alias=True``.

Example:
    >>> from fleet_observability.logs.pipeline import ClusterLogForwarder
    >>> clf = ClusterLogForwarder.from_manifest(manifest)
    >>> [output.name for output in clf.spec.outputs]
    ['app-logs', 'cluster-logs']
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from fleet_observability.errors import MissingFieldError


class OutputType(str, Enum):
    """Output kinds the resolver knows how to resolve references for."""

    CLOUDWATCH = "cloudwatch"
    GOOGLE_CLOUD_LOGGING = "googleCloudLogging"
    AZURE_MONITOR = "azureMonitor"
    LOKI = "loki"
    LOKI_STACK = "lokiStack"
    ELASTICSEARCH = "elasticsearch"
    HTTP = "http"
    KAFKA = "kafka"
    SPLUNK = "splunk"
    OTLP = "otlp"


class BearerTokenFrom(str, Enum):
    """Where a bearer token comes from."""

    SECRET = "secret"
    SERVICE_ACCOUNT = "serviceAccount"


class CloudwatchAuthType(str, Enum):
    """Cloudwatch authentication methods."""

    ACCESS_KEY = "awsAccessKey"
    IAM_ROLE = "iamRole"


class _WireModel(BaseModel):
    """Base for pipeline models: frozen, camelCase on the wire, lenient extras."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )


# =============================================================================
# References
# =============================================================================


class SecretReference(_WireModel):
    """A key inside a secret."""

    key: str = ""
    secret_name: str = ""


class ValueReference(_WireModel):
    """A key inside either a secret or a config map."""

    key: str = ""
    secret_name: str = ""
    config_map_name: str = ""


class BearerTokenSecretKey(_WireModel):
    """Secret holding a bearer token."""

    name: str = ""
    key: str = ""


class BearerToken(_WireModel):
    """A bearer token, read from a secret or from the collector service account."""

    from_: BearerTokenFrom | str = Field(default="", alias="from")
    secret: BearerTokenSecretKey | None = None


# =============================================================================
# TLS
# =============================================================================


class OutputTLS(_WireModel):
    """TLS settings of an output."""

    certificate: ValueReference | None = None
    key: SecretReference | None = None
    ca: ValueReference | None = None
    key_passphrase: SecretReference | None = None


# =============================================================================
# Authentication blocks
# =============================================================================


class HTTPAuthentication(_WireModel):
    """Authentication shared by HTTP-based outputs (loki, elasticsearch, http, otlp)."""

    token: BearerToken | None = None
    username: SecretReference | None = None
    password: SecretReference | None = None


class CloudwatchAccessKey(_WireModel):
    """Static AWS access key credentials."""

    key_id: SecretReference | None = None
    key_secret: SecretReference | None = None


class CloudwatchIAMRole(_WireModel):
    """IAM role credentials with an optional web-identity token."""

    role_arn: SecretReference | None = Field(default=None, alias="roleARN")
    token: BearerToken | None = None


class CloudwatchAuthentication(_WireModel):
    """Cloudwatch authentication."""

    type: CloudwatchAuthType | str = ""
    aws_access_key: CloudwatchAccessKey | None = None
    iam_role: CloudwatchIAMRole | None = None


class GoogleCloudLoggingAuthentication(_WireModel):
    """Google Cloud Logging authentication."""

    credentials: SecretReference | None = None


class AzureMonitorAuthentication(_WireModel):
    """Azure Monitor authentication."""

    shared_key: SecretReference | None = None


class LokiStackAuthentication(_WireModel):
    """LokiStack authentication."""

    token: BearerToken | None = None


class KafkaSASL(_WireModel):
    """Kafka SASL credentials."""

    username: SecretReference | None = None
    password: SecretReference | None = None


class KafkaAuthentication(_WireModel):
    """Kafka authentication."""

    sasl: KafkaSASL | None = None


class SplunkAuthentication(_WireModel):
    """Splunk authentication."""

    token: SecretReference | None = None


# =============================================================================
# Type-specific output blocks
# =============================================================================


class Cloudwatch(_WireModel):
    """Cloudwatch output settings."""

    authentication: CloudwatchAuthentication | None = None


class GoogleCloudLogging(_WireModel):
    """Google Cloud Logging output settings."""

    authentication: GoogleCloudLoggingAuthentication | None = None


class AzureMonitor(_WireModel):
    """Azure Monitor output settings."""

    authentication: AzureMonitorAuthentication | None = None


class HTTPOutput(_WireModel):
    """Settings of an HTTP-authenticated output (loki, elasticsearch, http, otlp)."""

    authentication: HTTPAuthentication | None = None


class LokiStack(_WireModel):
    """LokiStack output settings."""

    authentication: LokiStackAuthentication | None = None


class Kafka(_WireModel):
    """Kafka output settings."""

    authentication: KafkaAuthentication | None = None


class Splunk(_WireModel):
    """Splunk output settings."""

    authentication: SplunkAuthentication | None = None


class Output(_WireModel):
    """One declared destination of a pipeline.

    ``type`` is kept as a plain string because the wire format can carry
    kinds this package does not know; the reference extractor rejects them.

    Attributes:
        name: Output name, unique within the pipeline.
        type: Output kind, normally one of OutputType.
        tls: Optional TLS block.
    """

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    tls: OutputTLS | None = None

    cloudwatch: Cloudwatch | None = None
    google_cloud_logging: GoogleCloudLogging | None = None
    azure_monitor: AzureMonitor | None = None
    loki: HTTPOutput | None = None
    loki_stack: LokiStack | None = None
    elasticsearch: HTTPOutput | None = None
    http: HTTPOutput | None = None
    kafka: Kafka | None = None
    splunk: Splunk | None = None
    otlp: HTTPOutput | None = None


# =============================================================================
# ClusterLogForwarder
# =============================================================================


class ObjectMeta(_WireModel):
    """Object metadata."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class ClusterLogForwarderSpec(_WireModel):
    """Pipeline description: outputs plus opaque inputs and pipeline links."""

    service_account: dict[str, Any] | None = None
    inputs: list[dict[str, Any]] = Field(default_factory=list)
    outputs: list[Output] = Field(default_factory=list)
    pipelines: list[dict[str, Any]] = Field(default_factory=list)


class ClusterLogForwarder(BaseModel):
    """A log-forwarding pipeline.

    Attributes:
        metadata: Object metadata.
        spec: Pipeline description.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: ClusterLogForwarderSpec = Field(default_factory=ClusterLogForwarderSpec)

    @property
    def name(self) -> str:
        """Return the pipeline name."""
        return self.metadata.name

    @property
    def namespace(self) -> str:
        """Return the pipeline namespace."""
        return self.metadata.namespace

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> ClusterLogForwarder:
        """Parse a ClusterLogForwarder object served by the store.

        Raises:
            MissingFieldError: If an output lacks its name or type, or any
                modelled field does not validate.
        """
        try:
            return cls.model_validate(manifest)
        except ValidationError as e:
            raise _as_missing_field(manifest, e) from e

    def spec_dict(self) -> dict[str, Any]:
        """Return the spec as a camelCase dictionary without unset fields."""
        return self.spec.model_dump(
            by_alias=True, exclude_unset=True, exclude_none=True, mode="json"
        )


def _as_missing_field(manifest: dict[str, Any], error: ValidationError) -> MissingFieldError:
    """Name the first invalid field, relative to its output when inside one."""
    loc = error.errors()[0]["loc"]
    output_name = ((manifest.get("metadata") or {}).get("name")) or ""
    field = ".".join(str(part) for part in loc)

    if len(loc) > 3 and loc[:2] == ("spec", "outputs") and isinstance(loc[2], int):
        outputs = (manifest.get("spec") or {}).get("outputs") or []
        entry = outputs[loc[2]] if loc[2] < len(outputs) else {}
        output_name = (entry.get("name") if isinstance(entry, dict) else "") or ""
        field = ".".join(str(part) for part in loc[3:])

    return MissingFieldError(field, output_name=output_name)


__all__ = [
    "AzureMonitor",
    "BearerToken",
    "BearerTokenFrom",
    "Cloudwatch",
    "CloudwatchAuthType",
    "ClusterLogForwarder",
    "ClusterLogForwarderSpec",
    "GoogleCloudLogging",
    "HTTPAuthentication",
    "HTTPOutput",
    "Kafka",
    "KafkaSASL",
    "LokiStack",
    "ObjectMeta",
    "Output",
    "OutputTLS",
    "OutputType",
    "SecretReference",
    "Splunk",
    "ValueReference",
]
