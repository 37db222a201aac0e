"""fleet-observability-addon: options resolution for the fleet observability addon.

This package resolves every secret and config map a log-forwarding pipeline
depends on, validates the pipeline outputs, and assembles the normalized
options consumed by the addon chart.

Example:
    >>> from fleet_observability import build_options, extract_references
    >>> refs = extract_references(output)
    >>> refs.secret_names
    ['static-authentication']
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    "AddonSettings",
    "AddonValuesProvider",
    "KubernetesResourceStore",
    "build_options",
    "extract_references",
    "get_values",
]


# Lazy imports keep `import fleet_observability` free of the kubernetes client
def __getattr__(name: str):
    """Lazy import of public components."""
    if name == "AddonSettings":
        from fleet_observability.config import AddonSettings

        return AddonSettings
    if name == "AddonValuesProvider":
        from fleet_observability.app import AddonValuesProvider

        return AddonValuesProvider
    if name == "KubernetesResourceStore":
        from fleet_observability.store import KubernetesResourceStore

        return KubernetesResourceStore
    if name == "build_options":
        from fleet_observability.logs.handlers import build_options

        return build_options
    if name == "extract_references":
        from fleet_observability.logs.references import extract_references

        return extract_references
    if name == "get_values":
        from fleet_observability.values import get_values

        return get_values
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
