"""
Composite Data Structures
=========================

Core data structures for combining sun map tracings:
- Tracing: One time-stamped polygon marking a sunlit region
- CombinedTracing: Overlapping tracings with their aggregated duration
- CompositeConfig: Immutable build configuration
- ProfilingData: Optional timing and counting instrumentation
- CompositeResult: Complete output of one build
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import Any, Literal

import numpy as np
from numpy.typing import NDArray

from sunmap.clipping import is_valid_polygon
from sunmap.geometry import rescale_points, validate_frame


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


def _validate_points(points: Any) -> NDArray[np.float64]:
    """Validate tracing outline points and return them as a float64 array.

    Args:
        points: Polygon vertices, array-like of shape (N, 2)

    Returns:
        Read-only float64 array of shape (N, 2)

    Raises:
        ValidationError: If points are malformed or fewer than 3 vertices
    """
    try:
        array = np.array(points, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Tracing points must be numeric, got {type(points).__name__}") from e

    if array.ndim != 2 or array.shape[1] != 2:
        raise ValidationError(
            f"Tracing points must have shape (N, 2) for N vertices, got shape {array.shape}"
        )

    if not is_valid_polygon(array):
        raise ValidationError(
            f"Tracing points must have at least 3 vertices to form a polygon, got {array.shape[0]}"
        )

    if not np.all(np.isfinite(array)):
        raise ValidationError("Tracing points must be finite")

    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class Tracing:
    """A tracing of sunlight over a garden image made by draggable nodes.

    Each tracing belongs to one sun map image taken at a given time of day
    (its time bucket). Tracings drawn on the same image never combine with
    each other directly.

    Attributes:
        time_bucket: Identifier of the source image / time of day (minute interval)
        duration_minutes: Sunlight duration this tracing represents
        points: Outline vertices as numpy array of shape (N, 2)
        relative_frame: (width, height) of the frame the points were laid out in
        shadow_pct: Shadow percentage recorded with the tracing, carried as is
        id: Unique identity; equality and hashing use it only

    Raises:
        ValidationError: If any field is malformed
    """

    time_bucket: int
    duration_minutes: float
    points: NDArray[np.float64]
    relative_frame: tuple[float, float]
    shadow_pct: float = 0.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        if isinstance(self.time_bucket, bool) or not isinstance(self.time_bucket, Integral):
            raise ValidationError(
                f"time_bucket must be an integer, got {type(self.time_bucket).__name__}"
            )

        if isinstance(self.duration_minutes, bool) or not isinstance(self.duration_minutes, Real):
            raise ValidationError(
                f"duration_minutes must be a number, got {type(self.duration_minutes).__name__}"
            )
        duration = float(self.duration_minutes)
        if not math.isfinite(duration) or duration < 0:
            raise ValidationError(
                f"duration_minutes must be finite and non-negative, got {self.duration_minutes}"
            )

        if isinstance(self.shadow_pct, bool) or not isinstance(self.shadow_pct, Real):
            raise ValidationError(
                f"shadow_pct must be a number, got {type(self.shadow_pct).__name__}"
            )
        if not 0.0 <= float(self.shadow_pct) <= 100.0:
            raise ValidationError(f"shadow_pct must be in [0, 100], got {self.shadow_pct}")

        try:
            frame = validate_frame(self.relative_frame)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"relative_frame is invalid: {e}") from e

        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "time_bucket", int(self.time_bucket))
        object.__setattr__(self, "duration_minutes", duration)
        object.__setattr__(self, "shadow_pct", float(self.shadow_pct))
        object.__setattr__(self, "points", _validate_points(self.points))
        object.__setattr__(self, "relative_frame", frame)

    @property
    def num_vertices(self) -> int:
        """Return the number of vertices in the outline."""
        return int(self.points.shape[0])

    def points_in(self, frame: tuple[float, float] | None = None) -> NDArray[np.float64]:
        """Outline vertices expressed in another frame.

        Args:
            frame: Target (width, height); None keeps the tracing's own frame

        Returns:
            New (N, 2) array of vertices
        """
        if frame is None:
            return self.points.copy()
        return rescale_points(self.points, self.relative_frame, frame)

    def __hash__(self) -> int:
        """Hash based on identity only (points are arrays)."""
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Equality based on identity only."""
        if not isinstance(other, Tracing):
            return NotImplemented
        return self.id == other.id


@dataclass(frozen=True)
class CombinedTracing:
    """One or more tracings whose outlines share a common intersection.

    Say a tracing on the 9:00 image overlaps a tracing on the 10:00 image: the
    overlap represents two hours of sunlight. Any number of tracings can
    combine, as long as all of their outlines intersect.

    Attributes:
        members: The combined tracings, in chain order
        duration: Aggregated sunlight duration in minutes
        shape: Common intersection in the first member's frame, as produced by
            the geometry backend
        area: Area of the common intersection in the first member's frame
        id: Unique identity of this combination
    """

    members: tuple[Tracing, ...]
    duration: float
    shape: Any = field(default=None, compare=False, repr=False)
    area: float = 0.0
    id: uuid.UUID = field(default_factory=uuid.uuid4, compare=False)

    def __post_init__(self) -> None:
        if len(self.members) == 0:
            raise ValidationError("CombinedTracing requires at least one member")
        if not isinstance(self.members, tuple):
            object.__setattr__(self, "members", tuple(self.members))

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_singleton(self) -> bool:
        return len(self.members) == 1

    @property
    def member_ids(self) -> tuple[uuid.UUID, ...]:
        return tuple(t.id for t in self.members)

    @property
    def time_buckets(self) -> tuple[int, ...]:
        """Distinct time buckets present, in first-seen order."""
        return tuple(dict.fromkeys(t.time_bucket for t in self.members))

    @property
    def reference_frame(self) -> tuple[float, float]:
        """Frame the intersection shape is expressed in."""
        return self.members[0].relative_frame

    def paths(self, frame: tuple[float, float] | None = None) -> list[NDArray[np.float64]]:
        """Member outlines for drawing.

        Args:
            frame: Target (width, height); None uses the reference frame

        Returns:
            One (N, 2) vertex array per member, all in the same frame
        """
        target = self.reference_frame if frame is None else frame
        return [t.points_in(target) for t in self.members]


@dataclass(frozen=True)
class CompositeConfig:
    """Immutable configuration for building composite tracings.

    Attributes:
        backend: Geometry collaborator to use. "shapely" handles any simple
            polygon; "convex" is numpy-only and requires convex outlines.
        min_overlap_area: Intersections with area at or below this value are
            treated as empty. The default 0.0 means touching edges or corners
            do not count as overlap.
        max_workers: Number of worker threads for per-tracing enumeration.
            1 runs serially.
        notes: Optional dictionary of free-form metadata.

    Raises:
        ValidationError: If any field is invalid
    """

    backend: Literal["shapely", "convex"] = "shapely"
    min_overlap_area: float = 0.0
    max_workers: int = 1
    notes: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        _validate_composite_config(self)
        object.__setattr__(self, "min_overlap_area", float(self.min_overlap_area))

    @property
    def is_parallel(self) -> bool:
        return self.max_workers > 1


def _validate_composite_config(config: CompositeConfig) -> None:
    """Validate a CompositeConfig instance.

    Raises:
        ValidationError: If any field is invalid
    """
    if config.backend not in ("shapely", "convex"):
        raise ValidationError(
            f"backend must be 'shapely' or 'convex', got '{config.backend}'"
        )

    if isinstance(config.min_overlap_area, bool) or not isinstance(config.min_overlap_area, Real):
        raise ValidationError(
            f"min_overlap_area must be a number, got {type(config.min_overlap_area).__name__}"
        )
    if not math.isfinite(float(config.min_overlap_area)) or config.min_overlap_area < 0:
        raise ValidationError(
            f"min_overlap_area must be finite and non-negative, got {config.min_overlap_area}"
        )

    if isinstance(config.max_workers, bool) or not isinstance(config.max_workers, int):
        raise ValidationError(
            f"max_workers must be an integer, got {type(config.max_workers).__name__}"
        )
    if config.max_workers < 1:
        raise ValidationError(f"max_workers must be at least 1, got {config.max_workers}")

    if config.notes is not None and not isinstance(config.notes, dict):
        raise ValidationError(
            f"notes must be a dict or None, got {type(config.notes).__name__}"
        )


@dataclass
class ProfilingData:
    """Timing and counting instrumentation for one build.

    Attributes:
        index_seconds: Time spent building the overlap index
        enumeration_seconds: Time spent enumerating and validating chains
        pair_tests: Number of geometric pair tests run while indexing
        chains_generated: Number of candidate chains produced
        chains_rejected: Number of chains whose true intersection was empty
    """

    index_seconds: float = 0.0
    enumeration_seconds: float = 0.0
    pair_tests: int = 0
    chains_generated: int = 0
    chains_rejected: int = 0

    @property
    def total_seconds(self) -> float:
        return self.index_seconds + self.enumeration_seconds

    @property
    def rejection_ratio(self) -> float:
        """Share of candidate chains rejected by validation."""
        if self.chains_generated == 0:
            return 0.0
        return self.chains_rejected / self.chains_generated


@dataclass
class CompositeResult:
    """Complete result of one composite build.

    Attributes:
        combined_tracings: All combined tracings, ascending by duration
        total_tracings: Number of input tracings
        profiling_data: Instrumentation, or None if profiling was disabled
    """

    combined_tracings: list[CombinedTracing]
    total_tracings: int = 0
    profiling_data: ProfilingData | None = None

    def __len__(self) -> int:
        return len(self.combined_tracings)

    @property
    def singletons(self) -> list[CombinedTracing]:
        return [c for c in self.combined_tracings if c.is_singleton]

    @property
    def combinations(self) -> list[CombinedTracing]:
        """Combined tracings with two or more members."""
        return [c for c in self.combined_tracings if not c.is_singleton]

    @property
    def durations(self) -> list[float]:
        return [c.duration for c in self.combined_tracings]

    @property
    def max_duration(self) -> float:
        """Largest aggregated duration, or 0.0 for an empty result."""
        if not self.combined_tracings:
            return 0.0
        return self.combined_tracings[-1].duration
