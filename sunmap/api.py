"""
Array-based interface for computing sunlit overlaps without building Tracing objects.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from sunmap.composite.algorithm import compute_combined_tracings
from sunmap.composite.dataclasses import CompositeConfig, Tracing


@dataclass
class OverlapResult:
    """
    One combined region of a sun map, addressed by input positions.

    Attributes:
        indices: Positions of the combined contours in the input list, in chain order
        duration: Aggregated sunlight duration in minutes
        area: Area of the common intersection, in the frame of indices[0]
    """
    indices: Tuple[int, ...]
    duration: float
    area: float

    @property
    def is_overlap(self) -> bool:
        """Returns True if more than one contour is combined."""
        return len(self.indices) > 1


def find_sunlit_overlaps(
    contours: List[NDArray[np.float64]],
    time_buckets: Sequence[int],
    durations_minutes: Sequence[float],
    relative_frames: Optional[Sequence[Tuple[float, float]]] = None,
    config: Optional[CompositeConfig] = None,
) -> List[OverlapResult]:
    """
    Compute every sunlit region and its aggregated duration from raw arrays.

    Parameters:
        contours: Tracing outlines, each an (N, 2) array of vertices
        time_buckets: Time bucket (minute interval) per contour
        durations_minutes: Sunlight duration per contour
        relative_frames: (width, height) per contour. If None, all contours
                         share one frame and are never rescaled.
        config: Build configuration; None uses the defaults

    Returns:
        One OverlapResult per singleton and per valid combination, ascending
        by duration

    Raises:
        ValueError: If the input lists have mismatched lengths

    Example:
        >>> contours = [
        ...     np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=np.float64),
        ...     np.array([[5, 5], [15, 5], [15, 15], [5, 15]], dtype=np.float64),
        ... ]
        >>> results = find_sunlit_overlaps(contours, [540, 600], [60.0, 60.0])
        >>> [r.indices for r in results]
        [(0,), (1,), (1, 0)]
    """
    n = len(contours)
    if len(time_buckets) != n:
        raise ValueError(f"time_buckets must have {n} entries, got {len(time_buckets)}")
    if len(durations_minutes) != n:
        raise ValueError(f"durations_minutes must have {n} entries, got {len(durations_minutes)}")
    if relative_frames is not None and len(relative_frames) != n:
        raise ValueError(f"relative_frames must have {n} entries, got {len(relative_frames)}")

    # A zero-sized frame makes rescaling the identity
    frames = relative_frames if relative_frames is not None else [(0.0, 0.0)] * n

    tracings = [
        Tracing(
            time_bucket=int(time_buckets[i]),
            duration_minutes=float(durations_minutes[i]),
            points=contours[i],
            relative_frame=frames[i],
        )
        for i in range(n)
    ]
    position_by_id = {t.id: i for i, t in enumerate(tracings)}

    result = compute_combined_tracings(tracings, config=config)

    return [
        OverlapResult(
            indices=tuple(position_by_id[t.id] for t in combined.members),
            duration=combined.duration,
            area=combined.area,
        )
        for combined in result.combined_tracings
    ]
