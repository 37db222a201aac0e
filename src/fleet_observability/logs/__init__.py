"""Logging signal: pipeline models, reference extraction and options resolution.

Example:
    >>> from fleet_observability.logs import build_options, extract_references
"""

from __future__ import annotations

from fleet_observability.logs.handlers import build_default_options, build_options
from fleet_observability.logs.options import Options, ResolutionMode, TopologyFlags
from fleet_observability.logs.pipeline import ClusterLogForwarder, Output, OutputType
from fleet_observability.logs.references import (
    ResolvedReferences,
    extract_pipeline_references,
    extract_references,
)
from fleet_observability.logs.tenants import accumulate_tenants, list_tenants
from fleet_observability.logs.values import LoggingValues, build_values

__all__ = [
    "ClusterLogForwarder",
    "LoggingValues",
    "Options",
    "Output",
    "OutputType",
    "ResolutionMode",
    "ResolvedReferences",
    "TopologyFlags",
    "accumulate_tenants",
    "build_default_options",
    "build_options",
    "build_values",
    "extract_pipeline_references",
    "extract_references",
    "list_tenants",
]
