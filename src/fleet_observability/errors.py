"""Custom exceptions for options resolution.

Every failure raised while resolving addon options derives from
AddonOptionsError so callers can catch the whole family with one except
clause and decide, through ``retryable``, whether the next reconciliation
pass may succeed.

Exception Hierarchy:
    AddonOptionsError (base)
    ├── MissingDefaultReferenceError
    ├── MissingReferenceError
    ├── MultipleReferencesError
    ├── MissingFieldError (also ValueError)
    ├── MissingImplementationError (not retryable)
    ├── InvalidConfigurationError (also ValueError, not retryable)
    └── UpstreamFetchError
        ├── ResourceNotFoundError
        └── ResourceAccessDeniedError (also PermissionError)

Example:
    >>> from fleet_observability.errors import MissingFieldError
    >>> raise MissingFieldError("authentication", output_name="app-logs")
    MissingFieldError: missing field needed by output type: field: authentication, outputName: app-logs
"""

from __future__ import annotations


class AddonOptionsError(Exception):
    """Base exception for all options resolution errors.

    Attributes:
        message: Human-readable error message.
    """

    retryable: bool = True

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class MissingDefaultReferenceError(AddonOptionsError):
    """Raised when no default-stack resource is referenced by the installation.

    Attributes:
        resource: The resource kind that was expected (e.g. "clusterlogforwarders").
    """

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(
            f"missing {resource} reference on addon installation for default stack"
        )


class MissingReferenceError(AddonOptionsError):
    """Raised when the installation references no resource of the required kind."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"missing {resource} reference on addon installation")


class MultipleReferencesError(AddonOptionsError):
    """Raised when the installation references more than one resource of a kind.

    The ambiguity has to be resolved by whoever configures the installation;
    the resolver never picks one of the candidates.
    """

    def __init__(self, resource: str, *, count: int) -> None:
        self.resource = resource
        self.count = count
        super().__init__(
            f"multiple {resource} references on addon installation: found {count}"
        )


class MissingFieldError(AddonOptionsError, ValueError):
    """Raised when an output lacks a sub-field mandatory for its type.

    Attributes:
        field: The missing field (e.g. "authentication", "sasl").
        output_name: Name of the offending output.
    """

    def __init__(self, field: str, *, output_name: str) -> None:
        self.field = field
        self.output_name = output_name
        AddonOptionsError.__init__(
            self,
            f"missing field needed by output type: field: {field}, outputName: {output_name}",
        )


class MissingImplementationError(AddonOptionsError):
    """Raised for output types outside the supported enumeration.

    This is a programmer-visible error: it does not heal on a later pass.

    Attributes:
        output_type: The unsupported type value.
        output_name: Name of the offending output.
    """

    retryable = False

    def __init__(self, output_type: str, *, output_name: str) -> None:
        self.output_type = output_type
        self.output_name = output_name
        super().__init__(
            f"missing secret implementation for output type: "
            f"secretType: {output_type}, outputName: {output_name}"
        )


class InvalidConfigurationError(AddonOptionsError, ValueError):
    """Raised when an addon deployment variable carries an unsupported value."""

    retryable = False

    def __init__(self, variable: str, value: str, *, reason: str = "") -> None:
        self.variable = variable
        self.value = value
        self.reason = reason
        message = f"unsupported value '{value}' for variable '{variable}'"
        if reason:
            message = f"{message}: {reason}"
        AddonOptionsError.__init__(self, message)


class UpstreamFetchError(AddonOptionsError):
    """Raised when the resource store fails to serve a request.

    Attributes:
        resource: Resource kind (e.g. "secrets").
        namespace: Namespace of the request, empty for cluster-scoped calls.
        name: Object name, empty for list calls.
        reason: Additional context from the store.
    """

    def __init__(
        self,
        resource: str,
        *,
        namespace: str = "",
        name: str = "",
        reason: str = "",
    ) -> None:
        self.resource = resource
        self.namespace = namespace
        self.name = name
        self.reason = reason
        super().__init__(self._format(self._describe(), reason))

    def _describe(self) -> str:
        target = self.resource
        if self.name:
            target = f"{target} '{self.name}'"
        if self.namespace:
            target = f"{target} in namespace '{self.namespace}'"
        return f"failed to fetch {target}"

    @staticmethod
    def _format(message: str, reason: str) -> str:
        if reason:
            return f"{message}: {reason}"
        return message


class ResourceNotFoundError(UpstreamFetchError):
    """Raised when a requested object does not exist in the store."""

    def _describe(self) -> str:
        target = f"{self.resource} '{self.name}'"
        if self.namespace:
            target = f"{target} not found in namespace '{self.namespace}'"
        else:
            target = f"{target} not found"
        return target


class ResourceAccessDeniedError(UpstreamFetchError, PermissionError):
    """Raised when the store denies access to an object."""

    def _describe(self) -> str:
        target = f"access denied to {self.resource}"
        if self.name:
            target = f"{target} '{self.name}'"
        if self.namespace:
            target = f"{target} in namespace '{self.namespace}'"
        return target


__all__ = [
    "AddonOptionsError",
    "InvalidConfigurationError",
    "MissingDefaultReferenceError",
    "MissingFieldError",
    "MissingImplementationError",
    "MissingReferenceError",
    "MultipleReferencesError",
    "ResourceAccessDeniedError",
    "ResourceNotFoundError",
    "UpstreamFetchError",
]
