"""
Composite Tracing Module
========================

Data structures and algorithms for combining sun map tracings that overlap
across different times of day, and for aggregating the sunlight duration each
overlap represents.

Assumptions:
- Tracings drawn on the same image (same time bucket) never combine directly
- Each tracing's points are relative to its own frame; combinations are
  evaluated in the frame of their first member
- A build always recomputes from the full tracing list
"""

from sunmap.composite.algorithm import (
    Chain,
    OverlapIndex,
    aggregate_duration,
    build_overlap_index,
    compute_combined_tracings,
    enumerate_chains,
    get_geometry_backend,
    make_combined_tracing,
    validate_tracings,
)
from sunmap.composite.builder import CompositeTracingBuilder
from sunmap.composite.dataclasses import (
    CombinedTracing,
    CompositeConfig,
    CompositeResult,
    ProfilingData,
    Tracing,
    ValidationError,
)

__all__ = [
    # Data structures
    "Tracing",
    "CombinedTracing",
    "CompositeConfig",
    "CompositeResult",
    "ProfilingData",
    "ValidationError",
    "Chain",
    "OverlapIndex",
    # Algorithm
    "build_overlap_index",
    "enumerate_chains",
    "aggregate_duration",
    "make_combined_tracing",
    "compute_combined_tracings",
    "get_geometry_backend",
    "validate_tracings",
    # Result holder
    "CompositeTracingBuilder",
]
