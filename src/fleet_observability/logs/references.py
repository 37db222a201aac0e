"""Secret and config map reference extraction for pipeline outputs.

For every output of a pipeline, the resolver needs to know which secrets and
config maps must exist before the pipeline can be deployed to a spoke. The
answer depends on the output type and on its authentication method; this
module encodes those rules and, at the same time, enforces the sub-fields
each output type cannot do without.

The extraction is pure: no store access, no logging.

Example:
    >>> from fleet_observability.logs.references import extract_references
    >>> refs = extract_references(output)
    >>> refs.secret_names, refs.config_map_names
    (['static-authentication'], ['foo'])
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field

from fleet_observability.errors import MissingFieldError, MissingImplementationError
from fleet_observability.logs.pipeline import (
    BearerToken,
    BearerTokenFrom,
    CloudwatchAuthType,
    HTTPAuthentication,
    Output,
    OutputTLS,
    OutputType,
    SecretReference,
)

FIELD_AUTHENTICATION = "authentication"
FIELD_SASL = "sasl"


class ResolvedReferences(BaseModel):
    """Names of the secrets and config maps an output (or pipeline) needs.

    Both lists are de-duplicated and sorted so that manifests generated from
    them are deterministic.

    Attributes:
        secret_names: Sorted secret names.
        config_map_names: Sorted config map names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    secret_names: list[str] = Field(default_factory=list)
    config_map_names: list[str] = Field(default_factory=list)

    @classmethod
    def from_names(
        cls, secret_names: Iterable[str], config_map_names: Iterable[str]
    ) -> ResolvedReferences:
        """Build from arbitrary name iterables, dropping empty names and duplicates."""
        return cls(
            secret_names=sorted({name for name in secret_names if name}),
            config_map_names=sorted({name for name in config_map_names if name}),
        )

    def union(self, other: ResolvedReferences) -> ResolvedReferences:
        """Return the union of two reference sets."""
        return ResolvedReferences.from_names(
            [*self.secret_names, *other.secret_names],
            [*self.config_map_names, *other.config_map_names],
        )

    @property
    def is_empty(self) -> bool:
        """Check whether no reference was collected."""
        return not self.secret_names and not self.config_map_names


class _Collector:
    """Accumulates names while one output is being walked."""

    def __init__(self, output: Output) -> None:
        self.output = output
        self.secrets: set[str] = set()
        self.config_maps: set[str] = set()

    def require(self, value: object, field: str) -> None:
        if value is None:
            raise MissingFieldError(field, output_name=self.output.name)

    def require_secret(self, ref: SecretReference | None, field: str) -> None:
        self.require(ref, field)
        if not ref.secret_name:
            raise MissingFieldError(f"{field}.secretName", output_name=self.output.name)
        self.secret(ref.secret_name)

    def secret(self, name: str) -> None:
        if name:
            self.secrets.add(name)

    def config_map(self, name: str) -> None:
        if name:
            self.config_maps.add(name)

    def tls(self, tls: OutputTLS) -> None:
        if tls.certificate is not None:
            self.secret(tls.certificate.secret_name)
            self.config_map(tls.certificate.config_map_name)
        if tls.key is not None:
            self.secret(tls.key.secret_name)
        if tls.ca is not None:
            self.secret(tls.ca.secret_name)
            self.config_map(tls.ca.config_map_name)
        if tls.key_passphrase is not None:
            self.secret(tls.key_passphrase.secret_name)

    def bearer_token(self, token: BearerToken | None) -> None:
        # Service account tokens belong to the collector, nothing to fetch
        if token is None or token.from_ != BearerTokenFrom.SECRET:
            return
        if token.secret is None or not token.secret.name:
            raise MissingFieldError("token.secret.name", output_name=self.output.name)
        self.secret(token.secret.name)

    def http_authentication(self, auth: HTTPAuthentication) -> None:
        self.bearer_token(auth.token)
        if auth.username is not None:
            self.secret(auth.username.secret_name)
        if auth.password is not None:
            self.secret(auth.password.secret_name)


def _cloudwatch(c: _Collector) -> None:
    block = c.output.cloudwatch
    c.require(block, OutputType.CLOUDWATCH.value)
    auth = block.authentication
    c.require(auth, FIELD_AUTHENTICATION)

    if auth.type == CloudwatchAuthType.ACCESS_KEY:
        access_key = auth.aws_access_key
        c.require(access_key, CloudwatchAuthType.ACCESS_KEY.value)
        c.require_secret(access_key.key_id, "keyId")
        c.require_secret(access_key.key_secret, "keySecret")
    elif auth.type == CloudwatchAuthType.IAM_ROLE:
        role = auth.iam_role
        c.require(role, CloudwatchAuthType.IAM_ROLE.value)
        c.require_secret(role.role_arn, "roleARN")
        c.bearer_token(role.token)
    else:
        raise MissingFieldError(f"{FIELD_AUTHENTICATION}.type", output_name=c.output.name)


def _google_cloud_logging(c: _Collector) -> None:
    block = c.output.google_cloud_logging
    c.require(block, OutputType.GOOGLE_CLOUD_LOGGING.value)
    c.require(block.authentication, FIELD_AUTHENTICATION)
    c.require_secret(block.authentication.credentials, "credentials")


def _azure_monitor(c: _Collector) -> None:
    block = c.output.azure_monitor
    c.require(block, OutputType.AZURE_MONITOR.value)
    c.require(block.authentication, FIELD_AUTHENTICATION)
    c.require_secret(block.authentication.shared_key, "sharedKey")


def _http_like(output_type: OutputType) -> Callable[[_Collector], None]:
    attribute = {
        OutputType.LOKI: "loki",
        OutputType.ELASTICSEARCH: "elasticsearch",
        OutputType.HTTP: "http",
        OutputType.OTLP: "otlp",
    }[output_type]

    def collect(c: _Collector) -> None:
        block = getattr(c.output, attribute)
        c.require(block, output_type.value)
        c.require(block.authentication, FIELD_AUTHENTICATION)
        c.http_authentication(block.authentication)

    return collect


def _loki_stack(c: _Collector) -> None:
    block = c.output.loki_stack
    c.require(block, OutputType.LOKI_STACK.value)
    c.require(block.authentication, FIELD_AUTHENTICATION)
    c.bearer_token(block.authentication.token)


def _kafka(c: _Collector) -> None:
    block = c.output.kafka
    c.require(block, OutputType.KAFKA.value)
    c.require(block.authentication, FIELD_AUTHENTICATION)
    sasl = block.authentication.sasl
    c.require(sasl, FIELD_SASL)
    if sasl.username is not None:
        c.secret(sasl.username.secret_name)
    if sasl.password is not None:
        c.secret(sasl.password.secret_name)


def _splunk(c: _Collector) -> None:
    block = c.output.splunk
    c.require(block, OutputType.SPLUNK.value)
    c.require(block.authentication, FIELD_AUTHENTICATION)
    if block.authentication.token is not None:
        c.secret(block.authentication.token.secret_name)


_EXTRACTORS: dict[OutputType, Callable[[_Collector], None]] = {
    OutputType.CLOUDWATCH: _cloudwatch,
    OutputType.GOOGLE_CLOUD_LOGGING: _google_cloud_logging,
    OutputType.AZURE_MONITOR: _azure_monitor,
    OutputType.LOKI: _http_like(OutputType.LOKI),
    OutputType.LOKI_STACK: _loki_stack,
    OutputType.ELASTICSEARCH: _http_like(OutputType.ELASTICSEARCH),
    OutputType.HTTP: _http_like(OutputType.HTTP),
    OutputType.KAFKA: _kafka,
    OutputType.SPLUNK: _splunk,
    OutputType.OTLP: _http_like(OutputType.OTLP),
}


def extract_references(output: Output) -> ResolvedReferences:
    """Return the secrets and config maps ``output`` depends on.

    Args:
        output: One output of a pipeline.

    Returns:
        Sorted, de-duplicated secret and config map names.

    Raises:
        MissingFieldError: If the type-specific block, its authentication
            block, or another sub-field mandatory for the type is absent.
        MissingImplementationError: If the output type is not supported.

    Example:
        >>> output = Output.model_validate({
        ...     "name": "app-logs",
        ...     "type": "loki",
        ...     "loki": {"authentication": {"token": {
        ...         "from": "secret",
        ...         "secret": {"name": "static-authentication", "key": "pass"},
        ...     }}},
        ...     "tls": {"ca": {"configMapName": "foo"}},
        ... })
        >>> extract_references(output)
        ResolvedReferences(secret_names=['static-authentication'], config_map_names=['foo'])
    """
    try:
        output_type = OutputType(output.type)
    except ValueError:
        raise MissingImplementationError(output.type, output_name=output.name) from None

    collector = _Collector(output)
    if output.tls is not None:
        collector.tls(output.tls)
    _EXTRACTORS[output_type](collector)

    return ResolvedReferences.from_names(collector.secrets, collector.config_maps)


def extract_pipeline_references(outputs: Iterable[Output]) -> ResolvedReferences:
    """Return the union of the references of every output.

    Raises:
        MissingFieldError: See extract_references.
        MissingImplementationError: See extract_references.
    """
    result = ResolvedReferences()
    for output in outputs:
        result = result.union(extract_references(output))
    return result


__all__ = [
    "FIELD_AUTHENTICATION",
    "FIELD_SASL",
    "ResolvedReferences",
    "extract_pipeline_references",
    "extract_references",
]
