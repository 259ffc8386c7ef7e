"""
Sun Map Composite Tracings
==========================

Public API for combining time-stamped sunlight tracings that overlap across
times of day, and for aggregating the sunlight duration of each overlap.
"""

from sunmap.api import find_sunlit_overlaps, OverlapResult
from sunmap.backends import GeometryBackend, ShapelyGeometry, ConvexClipGeometry
from sunmap.debug import (
    log_overlap_index,
    log_result,
    format_chain,
    format_point,
    format_polygon,
    setup_debug_logging,
    disable_debug_logging,
)
from sunmap.geometry import rescale_points
from sunmap.composite import (
    Tracing,
    CombinedTracing,
    CompositeConfig,
    CompositeResult,
    ProfilingData,
    ValidationError,
    CompositeTracingBuilder,
    aggregate_duration,
    build_overlap_index,
    enumerate_chains,
    make_combined_tracing,
    compute_combined_tracings,
    get_geometry_backend,
)

__all__ = [
    # Main API
    'find_sunlit_overlaps',
    'OverlapResult',
    # Composite API
    'Tracing',
    'CombinedTracing',
    'CompositeConfig',
    'CompositeResult',
    'ProfilingData',
    'ValidationError',
    'CompositeTracingBuilder',
    'aggregate_duration',
    'build_overlap_index',
    'enumerate_chains',
    'make_combined_tracing',
    'compute_combined_tracings',
    'get_geometry_backend',
    # Geometry collaborators
    'GeometryBackend',
    'ShapelyGeometry',
    'ConvexClipGeometry',
    'rescale_points',
    # Debug utilities
    'log_overlap_index',
    'log_result',
    'format_chain',
    'format_point',
    'format_polygon',
    'setup_debug_logging',
    'disable_debug_logging',
]
__version__ = '0.1.0'
