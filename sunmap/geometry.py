"""
Geometry utilities for frame rescaling, polygon area and orientation.
"""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray


def validate_frame(frame: Tuple[float, float]) -> Tuple[float, float]:
    """
    Validate a (width, height) frame and return it as a tuple of floats.

    Zero width or height is accepted: such a frame marks points that were
    never laid out against a real view and are left untouched by rescaling.

    Parameters:
        frame: (width, height) pair

    Returns:
        Normalized (width, height) tuple of floats

    Raises:
        ValueError: If frame is not a pair of finite, non-negative numbers
    """
    if len(frame) != 2:
        raise ValueError(f"frame must have exactly 2 elements (width, height), got {len(frame)}")
    width, height = float(frame[0]), float(frame[1])
    if not (np.isfinite(width) and np.isfinite(height)):
        raise ValueError(f"frame must be finite, got {frame}")
    if width < 0 or height < 0:
        raise ValueError(f"frame must be non-negative, got {frame}")
    return width, height


def rescale_points(
    points: NDArray[np.float64],
    from_frame: Tuple[float, float],
    to_frame: Tuple[float, float]
) -> NDArray[np.float64]:
    """
    Rescale points laid out in one frame into another frame.

    Each coordinate is scaled independently: x by to_w / from_w and y by
    to_h / from_h. If the source frame has zero width or height the points are
    returned unchanged.

    Parameters:
        points: Array of shape (N, 2) containing (x, y) coordinates
        from_frame: (width, height) the points are currently relative to
        to_frame: (width, height) to express the points in

    Returns:
        New array of shape (N, 2) in the target frame
    """
    points = np.asarray(points, dtype=np.float64)
    from_w, from_h = from_frame
    if from_w == 0 or from_h == 0:
        return points.copy()

    to_w, to_h = to_frame
    scale = np.array([to_w / from_w, to_h / from_h], dtype=np.float64)
    return points * scale


def signed_area(polygon: NDArray[np.float64]) -> float:
    """
    Signed polygon area via the shoelace formula.

    Positive for counter-clockwise vertex order, negative for clockwise.
    """
    if polygon.shape[0] < 3:
        return 0.0
    x = polygon[:, 0]
    y = polygon[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def polygon_area(polygon: NDArray[np.float64]) -> float:
    """Unsigned polygon area."""
    return abs(signed_area(polygon))


def ensure_counter_clockwise(polygon: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Return the polygon with counter-clockwise vertex order.

    Parameters:
        polygon: Polygon vertices (N, 2)

    Returns:
        The same vertices, reversed if they were clockwise
    """
    if signed_area(polygon) < 0:
        return polygon[::-1].copy()
    return polygon


def is_convex_polygon(polygon: NDArray[np.float64], tolerance: float = 1e-9) -> bool:
    """
    Check whether a polygon is convex.

    Collinear vertices are tolerated; the polygon is convex when every
    non-degenerate turn has the same sign.

    Parameters:
        polygon: Polygon vertices (N, 2)
        tolerance: Cross products with magnitude below this count as collinear

    Returns:
        True if the polygon is convex
    """
    n = polygon.shape[0]
    if n < 3:
        return False

    edges = np.roll(polygon, -1, axis=0) - polygon
    next_edges = np.roll(edges, -1, axis=0)
    cross = edges[:, 0] * next_edges[:, 1] - edges[:, 1] * next_edges[:, 0]

    turns = cross[np.abs(cross) > tolerance]
    if turns.size == 0:
        # All vertices collinear
        return False
    return bool(np.all(turns > 0) or np.all(turns < 0))


def is_collinear_polygon(polygon: NDArray[np.float64], tolerance: float = 1e-9) -> bool:
    """True if every vertex lies on one line, so the outline encloses no area."""
    if polygon.shape[0] < 3:
        return True

    edges = np.roll(polygon, -1, axis=0) - polygon
    next_edges = np.roll(edges, -1, axis=0)
    cross = edges[:, 0] * next_edges[:, 1] - edges[:, 1] * next_edges[:, 0]
    return bool(np.all(np.abs(cross) <= tolerance))
