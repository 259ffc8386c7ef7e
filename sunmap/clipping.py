"""
Polygon clipping operations for convex tracing outlines (edge half-planes).
"""

from typing import List
import numpy as np
from numpy.typing import NDArray

from sunmap.geometry import ensure_counter_clockwise

HALFPLANE_EPSILON = 1e-9


def clip_polygon_convex(
    subject: NDArray[np.float64],
    clip: NDArray[np.float64]
) -> NDArray[np.float64]:
    """
    Clip a polygon against a convex clip polygon.

    Applies one half-plane stage per edge of the clip polygon, keeping the
    region to the left of each edge once the clip polygon is oriented
    counter-clockwise. The subject may be any simple polygon; the clip
    polygon must be convex.

    Parameters:
        subject: Polygon vertices (N, 2) to be clipped
        clip: Convex polygon vertices (M, 2)

    Returns:
        Clipped polygon vertices (K, 2), may be empty array (0, 2)
    """
    if not is_valid_polygon(subject) or not is_valid_polygon(clip):
        return np.empty((0, 2), dtype=np.float64)

    # Cheap rejection before the per-edge stages
    if not bounding_boxes_overlap(subject, clip):
        return np.empty((0, 2), dtype=np.float64)

    clip = ensure_counter_clockwise(clip)
    result = subject
    n = clip.shape[0]

    for i in range(n):
        result = clip_polygon_halfplane(result, clip[i], clip[(i + 1) % n])
        if result.shape[0] < 3:
            return np.empty((0, 2), dtype=np.float64)

    return result


def clip_polygon_halfplane(
    polygon: NDArray[np.float64],
    edge_start: NDArray[np.float64],
    edge_end: NDArray[np.float64]
) -> NDArray[np.float64]:
    """
    Clip polygon against the half-plane to the left of a directed edge.

    Implements Sutherland-Hodgman algorithm for a single half-plane.
    The boundary is the infinite line through edge_start and edge_end.

    Parameters:
        polygon: Polygon vertices (N, 2)
        edge_start: Start point (2,) of the directed boundary edge
        edge_end: End point (2,) of the directed boundary edge

    Returns:
        Clipped polygon vertices (M, 2), may be empty array
    """
    if polygon.shape[0] == 0:
        return polygon.copy()

    direction = edge_end - edge_start

    # Normal to the edge: perpendicular pointing left (CCW)
    # For edge direction (dx, dy), left normal is (-dy, dx)
    normal = np.array([-direction[1], direction[0]], dtype=np.float64)

    def signed_distance(point: NDArray[np.float64]) -> float:
        """Signed distance (scaled by edge length) from point to the boundary."""
        # Positive means on the "keep" side, negative means on the "clip" side
        return float(np.dot(point - edge_start, normal))

    def compute_intersection(p1: NDArray[np.float64], p2: NDArray[np.float64]) -> NDArray[np.float64]:
        """Compute intersection of edge p1->p2 with the half-plane boundary."""
        d1 = signed_distance(p1)
        d2 = signed_distance(p2)

        # Parametric intersection: t where d1 + t*(d2-d1) = 0
        t = d1 / (d1 - d2)

        return p1 + t * (p2 - p1)

    tolerance = HALFPLANE_EPSILON * float(np.hypot(direction[0], direction[1]))
    output_vertices: List[NDArray[np.float64]] = []
    n = polygon.shape[0]

    for i in range(n):
        current = polygon[i]
        next_vertex = polygon[(i + 1) % n]

        current_inside = signed_distance(current) >= -tolerance
        next_inside = signed_distance(next_vertex) >= -tolerance

        if current_inside:
            output_vertices.append(current.copy())

            if not next_inside:
                # Edge exits the half-plane
                output_vertices.append(compute_intersection(current, next_vertex))
        elif next_inside:
            # Edge enters the half-plane
            output_vertices.append(compute_intersection(current, next_vertex))

    if len(output_vertices) == 0:
        return np.empty((0, 2), dtype=np.float64)

    return np.array(output_vertices, dtype=np.float64)


def is_valid_polygon(polygon: NDArray[np.float64]) -> bool:
    """
    Check if polygon has sufficient vertices to be valid.

    Parameters:
        polygon: Polygon vertices (N, 2)

    Returns:
        True if polygon has at least 3 vertices
    """
    return polygon.shape[0] >= 3


def compute_bounding_box(
    polygon: NDArray[np.float64]
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Compute axis-aligned bounding box for polygon.

    Parameters:
        polygon: Polygon vertices (N, 2)

    Returns:
        Tuple of (min_point, max_point), each shape (2,)
    """
    if polygon.shape[0] == 0:
        raise ValueError("polygon must contain at least one vertex")
    min_point = np.min(polygon, axis=0).astype(np.float64)
    max_point = np.max(polygon, axis=0).astype(np.float64)
    return min_point, max_point


def bounding_boxes_overlap(
    polygon_a: NDArray[np.float64],
    polygon_b: NDArray[np.float64]
) -> bool:
    """True if the axis-aligned bounding boxes of two polygons share any point."""
    min_a, max_a = compute_bounding_box(polygon_a)
    min_b, max_b = compute_bounding_box(polygon_b)
    return bool(np.all(min_a <= max_b) and np.all(min_b <= max_a))
