"""OpenTelemetry spans for options resolution.

Each resolution pass and each store-heavy step emits a span so slow or
failing reconciliations can be traced per installation.

Security:
    - Spans never carry secret data, only object names and namespaces.
    - Error messages are sanitized before being recorded.

Example:
    >>> from fleet_observability.tracing import get_tracer, options_span
    >>> with options_span(get_tracer(), "build_options", namespace="cluster-1") as span:
    ...     pass
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

TRACER_NAME = "fleet_observability.options"

ATTR_OPERATION = "addon.operation"
ATTR_NAMESPACE = "addon.namespace"
ATTR_MODE = "addon.mode"
ATTR_SIGNAL = "addon.signal"

MAX_MESSAGE_LENGTH = 500

_URL_USERINFO = re.compile(r"(://)[^/\s@]+@")
_CREDENTIAL_ASSIGNMENT = re.compile(
    r"\b(password|token|secret|credentials|sharedKey|keySecret)(\s*[=:]\s*)[^\s,;]+",
    re.IGNORECASE,
)


def get_tracer() -> trace.Tracer:
    """Get the tracer for options resolution.

    The global provider is looked up on every call, so a provider installed
    after import is honoured.
    """
    return trace.get_tracer(TRACER_NAME)


def sanitize_error_message(message: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Redact URL user info and credential assignments, then truncate.

    Example:
        >>> sanitize_error_message("push to https://u:p@loki.example.com failed")
        'push to https://<REDACTED>@loki.example.com failed'
    """
    redacted = _URL_USERINFO.sub(r"\1<REDACTED>@", message)
    redacted = _CREDENTIAL_ASSIGNMENT.sub(r"\1\2<REDACTED>", redacted)
    return redacted[:max_length]


@contextmanager
def options_span(
    tracer: trace.Tracer,
    operation: str,
    *,
    namespace: str | None = None,
    mode: str | None = None,
    signal: str | None = None,
    extra_attributes: dict[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Open a span named ``addon.<operation>`` with standard attributes.

    Args:
        tracer: OpenTelemetry tracer instance.
        operation: Operation name (e.g. "build_options").
        namespace: Namespace of the requesting installation.
        mode: Resolution mode (disabled, unmanaged, managed_spoke, managed_hub).
        signal: Signal being resolved (e.g. "logs").
        extra_attributes: Additional span attributes.

    Yields:
        The active span.
    """
    attributes: dict[str, Any] = {ATTR_OPERATION: operation}
    if namespace is not None:
        attributes[ATTR_NAMESPACE] = namespace
    if mode is not None:
        attributes[ATTR_MODE] = mode
    if signal is not None:
        attributes[ATTR_SIGNAL] = signal
    if extra_attributes:
        attributes.update(extra_attributes)

    with tracer.start_as_current_span(f"addon.{operation}", attributes=attributes) as span:
        try:
            yield span
            span.set_status(Status(StatusCode.OK))
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, type(e).__name__))
            span.set_attribute("exception.type", type(e).__name__)
            span.set_attribute("exception.message", sanitize_error_message(str(e)))
            raise


__all__ = [
    "ATTR_MODE",
    "ATTR_NAMESPACE",
    "ATTR_OPERATION",
    "ATTR_SIGNAL",
    "TRACER_NAME",
    "get_tracer",
    "options_span",
    "sanitize_error_message",
]
