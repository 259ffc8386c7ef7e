"""
Composite Algorithm
===================

Core functions for combining overlapping tracings:
- build_overlap_index: Pairwise overlap relation over earlier tracings
- enumerate_chains: Candidate combinations grown from one tracing
- make_combined_tracing: Exact validation and duration aggregation
- compute_combined_tracings: Full build, sorted ascending by duration

Candidate generation is deliberately optimistic: a chain only guarantees that
each new member overlaps the chain's first and most recent members. Every
chain is then validated against the true intersection of all its members.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from sunmap.backends import ConvexClipGeometry, GeometryBackend, ShapelyGeometry
from sunmap.debug import format_chain, log_overlap_index, log_result
from sunmap.composite.dataclasses import (
    CombinedTracing,
    CompositeConfig,
    CompositeResult,
    ProfilingData,
    Tracing,
    ValidationError,
)

logger = logging.getLogger(__name__)

OverlapIndex = tuple[tuple[int, ...], ...]
"""Position i holds the indices j < i overlapping tracing i, in descending order."""

Chain = tuple[int, ...]


def get_geometry_backend(config: CompositeConfig | None = None) -> GeometryBackend:
    """Create the geometry collaborator named by a config.

    Args:
        config: Build configuration; None uses the defaults

    Returns:
        A ShapelyGeometry or ConvexClipGeometry instance
    """
    if config is None:
        config = CompositeConfig()
    if config.backend == "convex":
        return ConvexClipGeometry(min_overlap_area=config.min_overlap_area)
    return ShapelyGeometry(min_overlap_area=config.min_overlap_area)


def validate_tracings(tracings: Sequence[Tracing]) -> list[Tracing]:
    """Check the input sequence and return it as a list.

    Raises:
        ValidationError: If tracings is not a sequence of Tracing objects
        ValidationError: If the same tracing appears twice
    """
    if isinstance(tracings, (str, bytes)) or not isinstance(tracings, Sequence):
        raise ValidationError(
            f"tracings must be a sequence of Tracing, got {type(tracings).__name__}"
        )

    seen: set[Any] = set()
    for i, tracing in enumerate(tracings):
        if not isinstance(tracing, Tracing):
            raise ValidationError(
                f"tracings[{i}] must be a Tracing, got {type(tracing).__name__}"
            )
        if tracing.id in seen:
            raise ValidationError(f"tracings[{i}] duplicates tracing id {tracing.id}")
        seen.add(tracing.id)

    return list(tracings)


# =============================================================================
# Pairwise Intersection Index
# =============================================================================


def build_overlap_index(
    tracings: Sequence[Tracing],
    geometry: GeometryBackend,
    profiling: ProfilingData | None = None,
) -> OverlapIndex:
    """Record, for every tracing, the earlier tracings it overlaps.

    For each i, scans j from i - 1 down to 0. Pairs sharing a time bucket
    come from the same image and are skipped without any geometry test.
    Tracing j is rescaled into tracing i's frame before testing.

    Args:
        tracings: Ordered input tracings
        geometry: Collaborator providing shapes, overlap test and rescaling
        profiling: If given, pair test count is accumulated here

    Returns:
        Immutable overlap index; entry i only holds indices strictly below i
    """
    index: list[tuple[int, ...]] = []

    for i, i_tracing in enumerate(tracings):
        i_shape = geometry.make_shape(i_tracing.points)
        overlaps: list[int] = []

        for j in range(i - 1, -1, -1):
            j_tracing = tracings[j]

            # Same image, never combined
            if j_tracing.time_bucket == i_tracing.time_bucket:
                continue

            j_points = geometry.rescale(
                j_tracing.points, j_tracing.relative_frame, i_tracing.relative_frame
            )
            if profiling is not None:
                profiling.pair_tests += 1
            if geometry.intersects(i_shape, geometry.make_shape(j_points)):
                overlaps.append(j)

        index.append(tuple(overlaps))

    return tuple(index)


# =============================================================================
# Chain Enumerator
# =============================================================================


def enumerate_chains(start: int, overlap_index: OverlapIndex) -> list[Chain]:
    """Find every candidate chain anchored on one tracing.

    Grows [start] one index at a time. The next index must overlap both the
    chain's first element and its current last element. Every extension is
    emitted, then extended further.

    Args:
        start: Index of the anchoring tracing
        overlap_index: Result of build_overlap_index

    Returns:
        Chains of length >= 2 in depth-first order. Indices strictly decrease
        along each chain.
    """
    return _extend_chain((start,), overlap_index)


def _extend_chain(chain: Chain, overlap_index: OverlapIndex) -> list[Chain]:
    anchor = set(overlap_index[chain[0]])
    result: list[Chain] = []

    for candidate in overlap_index[chain[-1]]:
        if candidate not in anchor:
            continue
        extended = chain + (candidate,)
        result.append(extended)
        result.extend(_extend_chain(extended, overlap_index))

    return result


# =============================================================================
# Combined-Tracing Builder
# =============================================================================


def aggregate_duration(members: Sequence[Tracing]) -> float:
    """Total sunlight minutes represented by a group of tracings.

    Members are grouped by time bucket. Each bucket contributes the mean
    duration of its members once, and the contributions are summed.

    Args:
        members: Tracings in a combination

    Returns:
        Aggregated duration in minutes, 0.0 for no members
    """
    by_bucket: dict[int, list[float]] = {}
    for tracing in members:
        by_bucket.setdefault(tracing.time_bucket, []).append(tracing.duration_minutes)

    return float(sum(sum(durations) / len(durations) for durations in by_bucket.values()))


def make_combined_tracing(
    members: Sequence[Tracing],
    geometry: GeometryBackend,
) -> CombinedTracing | None:
    """Validate a candidate combination and build its CombinedTracing.

    A single tracing is always valid. Two or more are valid only if the
    intersection of all their outlines, taken in the first member's frame,
    is non-empty.

    Args:
        members: Candidate tracings, in chain order
        geometry: Collaborator providing shapes, intersection and rescaling

    Returns:
        The CombinedTracing, or None if members is empty or the members do
        not share a common intersection
    """
    if len(members) == 0:
        return None

    frame = members[0].relative_frame
    shapes = [
        geometry.make_shape(geometry.rescale(t.points, t.relative_frame, frame))
        for t in members
    ]

    if len(shapes) == 1:
        shape = shapes[0]
    else:
        shape = geometry.intersection(shapes)
        if shape is None:
            return None

    return CombinedTracing(
        members=tuple(members),
        duration=aggregate_duration(members),
        shape=shape,
        area=geometry.area(shape),
    )


# =============================================================================
# Result Assembler
# =============================================================================


def _combine_from(
    start: int,
    tracings: Sequence[Tracing],
    overlap_index: OverlapIndex,
    geometry: GeometryBackend,
) -> tuple[list[CombinedTracing], int, int]:
    """Singleton plus every valid chain anchored on one tracing.

    Returns:
        (combined tracings, chains generated, chains rejected)
    """
    combined: list[CombinedTracing] = []

    single = make_combined_tracing([tracings[start]], geometry)
    if single is not None:
        combined.append(single)

    chains = enumerate_chains(start, overlap_index)
    rejected = 0
    for chain in chains:
        candidate = make_combined_tracing([tracings[k] for k in chain], geometry)
        if candidate is None:
            rejected += 1
            logger.debug("Rejected chain %s: no common intersection", format_chain(chain, tracings))
            continue
        combined.append(candidate)

    return combined, len(chains), rejected


def compute_combined_tracings(
    tracings: Sequence[Tracing],
    config: CompositeConfig | None = None,
    geometry: GeometryBackend | None = None,
    enable_profiling: bool = False,
) -> CompositeResult:
    """Build every combined tracing for a sun map.

    This is the main entry point. Each tracing is kept on its own, and every
    group of tracings whose outlines share a common intersection becomes a
    combined tracing carrying the aggregated duration. The result is sorted
    ascending by duration so the longest-lit shapes are drawn last.

    Args:
        tracings: Ordered tracings for one sun map
        config: Build configuration; None uses the defaults
        geometry: Geometry collaborator overriding the one named by config
        enable_profiling: If True, attach ProfilingData to the result

    Returns:
        CompositeResult with combined tracings ascending by duration. Ties keep
        their insertion order (tracing order, singleton before its chains).

    Raises:
        ValidationError: If tracings is not a sequence of distinct Tracing objects
        ValidationError: If the geometry backend rejects an outline (e.g. a
            concave tracing with the "convex" backend)

    Example:
        >>> a = Tracing(time_bucket=540, duration_minutes=60,
        ...             points=[[0, 0], [10, 0], [10, 10], [0, 10]], relative_frame=(100, 100))
        >>> b = Tracing(time_bucket=600, duration_minutes=60,
        ...             points=[[5, 5], [15, 5], [15, 15], [5, 15]], relative_frame=(100, 100))
        >>> result = compute_combined_tracings([a, b])
        >>> result.durations
        [60.0, 60.0, 120.0]
    """
    if config is None:
        config = CompositeConfig()
    tracing_list = validate_tracings(tracings)
    if geometry is None:
        geometry = get_geometry_backend(config)

    profiling = ProfilingData() if enable_profiling else None

    if not tracing_list:
        return CompositeResult(combined_tracings=[], total_tracings=0, profiling_data=profiling)

    start_time = time.perf_counter()
    try:
        overlap_index = build_overlap_index(tracing_list, geometry, profiling)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    index_time = time.perf_counter()
    log_overlap_index(overlap_index, tracing_list)

    indices = range(len(tracing_list))
    if config.is_parallel and len(tracing_list) > 1:
        # map() yields in submission order, so merging stays deterministic
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            per_start = list(
                executor.map(
                    lambda i: _combine_from(i, tracing_list, overlap_index, geometry),
                    indices,
                )
            )
    else:
        per_start = [_combine_from(i, tracing_list, overlap_index, geometry) for i in indices]

    combined: list[CombinedTracing] = []
    chains_generated = 0
    chains_rejected = 0
    for part, generated, rejected in per_start:
        combined.extend(part)
        chains_generated += generated
        chains_rejected += rejected

    # sorted() is stable: ties keep insertion order
    combined = sorted(combined, key=lambda c: c.duration)
    end_time = time.perf_counter()

    if profiling is not None:
        profiling.index_seconds = index_time - start_time
        profiling.enumeration_seconds = end_time - index_time
        profiling.chains_generated = chains_generated
        profiling.chains_rejected = chains_rejected

    result = CompositeResult(
        combined_tracings=combined,
        total_tracings=len(tracing_list),
        profiling_data=profiling,
    )
    log_result(result)
    return result
