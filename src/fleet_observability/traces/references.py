"""Secret and config map references of an OpenTelemetryCollector.

A collector reaches secrets and config maps the way any pod does: through
volumes (plain or projected), through ``env`` value references and through
``envFrom`` sources. Every name found there must be shipped to the spoke
alongside the collector.

Example:
    >>> refs = extract_collector_references(collector)
    >>> refs.secret_names, refs.config_map_names
    (['otel-tls'], ['otel-ca'])
"""

from __future__ import annotations

from typing import Any

from fleet_observability.errors import MissingFieldError
from fleet_observability.logs.references import ResolvedReferences
from fleet_observability.traces.collector import OpenTelemetryCollector


def extract_collector_references(collector: OpenTelemetryCollector) -> ResolvedReferences:
    """Return the secrets and config maps ``collector`` mounts or reads.

    Args:
        collector: The user-provided collector.

    Returns:
        Sorted, de-duplicated secret and config map names.

    Raises:
        MissingFieldError: If a secret or config map volume names nothing.
    """
    spec = collector.spec
    secrets: list[str] = []
    config_maps: list[str] = []

    for index, volume in enumerate(spec.get("volumes") or []):
        field = f"volumes[{index}]"
        if "secret" in volume:
            secrets.append(_required(volume["secret"], "secretName", field, collector))
        if "configMap" in volume:
            config_maps.append(_required(volume["configMap"], "name", field, collector))
        for source in (volume.get("projected") or {}).get("sources") or []:
            secrets.append((source.get("secret") or {}).get("name", ""))
            config_maps.append((source.get("configMap") or {}).get("name", ""))

    for env in spec.get("env") or []:
        value_from = env.get("valueFrom") or {}
        secrets.append((value_from.get("secretKeyRef") or {}).get("name", ""))
        config_maps.append((value_from.get("configMapKeyRef") or {}).get("name", ""))

    for source in spec.get("envFrom") or []:
        secrets.append((source.get("secretRef") or {}).get("name", ""))
        config_maps.append((source.get("configMapRef") or {}).get("name", ""))

    return ResolvedReferences.from_names(secrets, config_maps)


def _required(
    source: dict[str, Any] | None, key: str, field: str, collector: OpenTelemetryCollector
) -> str:
    name = (source or {}).get(key) or ""
    if not name:
        kind = "secret" if key == "secretName" else "configMap"
        raise MissingFieldError(f"{field}.{kind}.{key}", output_name=collector.name)
    return name


__all__ = ["extract_collector_references"]
