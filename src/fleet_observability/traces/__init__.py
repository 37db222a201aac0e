"""Tracing signal: collector model, reference extraction and options resolution.

Example:
    >>> from fleet_observability.traces import build_options, build_values
"""

from __future__ import annotations

from fleet_observability.traces.collector import OpenTelemetryCollector
from fleet_observability.traces.handlers import build_options
from fleet_observability.traces.options import Options
from fleet_observability.traces.references import extract_collector_references
from fleet_observability.traces.values import TracingValues, build_values

__all__ = [
    "OpenTelemetryCollector",
    "Options",
    "TracingValues",
    "build_options",
    "build_values",
    "extract_collector_references",
]
