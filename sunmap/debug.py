"""
Debug logging helpers for composite builds.

All library modules log through ``logging.getLogger(__name__)`` under the
``sunmap`` namespace and stay silent unless a handler is attached, e.g. via
``setup_debug_logging()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from sunmap.composite.dataclasses import CompositeResult, Tracing

logger = logging.getLogger("sunmap")

_DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_handler: Optional[logging.Handler] = None


def setup_debug_logging(level: int = logging.DEBUG) -> logging.Handler:
    """
    Attach a stream handler to the ``sunmap`` logger.

    Calling it again replaces the previous handler instead of adding a second.

    Parameters:
        level: Logging level for both logger and handler

    Returns:
        The attached handler
    """
    global _handler
    disable_debug_logging()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    _handler = handler
    return handler


def disable_debug_logging() -> None:
    """Detach the handler added by setup_debug_logging(), if any."""
    global _handler
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)


def format_point(point: NDArray[np.float64], precision: int = 2) -> str:
    """Format a 2D point as "(x, y)"."""
    return f"({point[0]:.{precision}f}, {point[1]:.{precision}f})"


def format_polygon(polygon: NDArray[np.float64], precision: int = 2, max_vertices: int = 6) -> str:
    """
    Format polygon vertices on one line, truncated after max_vertices.

    Parameters:
        polygon: Polygon vertices (N, 2)
        precision: Decimal places per coordinate
        max_vertices: Number of vertices shown before eliding the rest

    Returns:
        String such as "[(0.00, 0.00), (1.00, 0.00), ... +3 more]"
    """
    shown = [format_point(p, precision) for p in polygon[:max_vertices]]
    hidden = polygon.shape[0] - len(shown)
    if hidden > 0:
        shown.append(f"... +{hidden} more")
    return "[" + ", ".join(shown) + "]"


def format_chain(chain: Sequence[int], tracings: Optional[Sequence["Tracing"]] = None) -> str:
    """Format a chain of tracing indices, with time buckets when tracings are given."""
    if tracings is None:
        return " -> ".join(str(i) for i in chain)
    return " -> ".join(f"{i}@{tracings[i].time_bucket}" for i in chain)


def log_overlap_index(
    overlap_index: Sequence[Sequence[int]],
    tracings: Sequence["Tracing"],
) -> None:
    """Log the overlap index, one line per tracing with overlaps."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    pairs = sum(len(entry) for entry in overlap_index)
    logger.debug("Overlap index: %d tracings, %d overlapping pairs", len(tracings), pairs)
    for i, entry in enumerate(overlap_index):
        if entry:
            logger.debug(
                "  %d (bucket %d, %s) overlaps %s",
                i,
                tracings[i].time_bucket,
                format_polygon(tracings[i].points),
                list(entry),
            )


def log_result(result: "CompositeResult") -> None:
    """Log a summary of a composite build."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "Composite result: %d shapes (%d singletons, %d combinations), max duration %.1f min",
        len(result.combined_tracings),
        len(result.singletons),
        len(result.combinations),
        result.max_duration,
    )
    profiling = result.profiling_data
    if profiling is not None:
        logger.debug(
            "  index %.4fs, enumeration %.4fs, %d pair tests, %d/%d chains rejected",
            profiling.index_seconds,
            profiling.enumeration_seconds,
            profiling.pair_tests,
            profiling.chains_rejected,
            profiling.chains_generated,
        )
