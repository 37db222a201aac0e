"""In-memory ResourceStore for unit tests."""

from __future__ import annotations

import copy
from typing import Any

from fleet_observability.errors import ResourceNotFoundError
from fleet_observability.resources import ResourceKind


class FakeResourceStore:
    """ResourceStore keeping objects in a dictionary.

    Objects are keyed by (kind, namespace, name). Reads return deep copies
    so callers cannot mutate stored state by accident. Every call is
    recorded for assertions.
    """

    def __init__(self) -> None:
        self.objects: dict[tuple[ResourceKind, str, str], dict[str, Any]] = {}
        self.created: list[tuple[ResourceKind, dict[str, Any]]] = []
        self.updated: list[tuple[ResourceKind, dict[str, Any]]] = []
        self.gets: list[tuple[ResourceKind, str, str]] = []
        self.lists: list[tuple[ResourceKind, str | None]] = []

    def add(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        """Store ``obj`` without recording a create."""
        metadata = obj["metadata"]
        self.objects[(kind, metadata.get("namespace", ""), metadata["name"])] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        self.gets.append((kind, namespace, name))
        try:
            return copy.deepcopy(self.objects[(kind, namespace, name)])
        except KeyError:
            raise ResourceNotFoundError(kind.resource, namespace=namespace, name=name) from None

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[dict[str, Any]]:
        self.lists.append((kind, namespace))
        return [
            copy.deepcopy(obj)
            for (k, ns, _), obj in self.objects.items()
            if k == kind and (namespace is None or ns == namespace)
        ]

    def create(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        self.created.append((kind, copy.deepcopy(obj)))
        return self.add(kind, obj)

    def update(self, kind: ResourceKind, obj: dict[str, Any]) -> dict[str, Any]:
        self.updated.append((kind, copy.deepcopy(obj)))
        return self.add(kind, obj)


__all__ = ["FakeResourceStore"]
