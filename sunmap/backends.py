"""
Geometry collaborators used by the composite algorithm.

The composite core never touches polygon math directly. It only needs a
backend that can turn points into a shape, test two shapes for overlap,
intersect an ordered list of shapes and rescale points between frames.
Two backends are provided:

- ShapelyGeometry: arbitrary simple (or repairable) polygons via shapely
- ConvexClipGeometry: convex polygons via numpy Sutherland-Hodgman clipping
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from sunmap.clipping import clip_polygon_convex
from sunmap.geometry import (
    ensure_counter_clockwise,
    is_collinear_polygon,
    is_convex_polygon,
    polygon_area,
    rescale_points,
)


class GeometryBackend(Protocol):
    """Interface the composite algorithm consumes."""

    min_overlap_area: float

    def make_shape(self, points: NDArray[np.float64]) -> Any: ...

    def intersects(self, shape_a: Any, shape_b: Any) -> bool: ...

    def intersection(self, shapes: Sequence[Any]) -> Optional[Any]: ...

    def area(self, shape: Any) -> float: ...

    def rescale(
        self,
        points: NDArray[np.float64],
        from_frame: Tuple[float, float],
        to_frame: Tuple[float, float],
    ) -> NDArray[np.float64]: ...


def reduce_intersection(
    shapes: Sequence[Any],
    intersect_pair: Callable[[Any, Any], Optional[Any]],
) -> Optional[Any]:
    """Intersect shapes right to left, stopping at the first empty result.

    Computes shapes[0] ∩ (shapes[1] ∩ (... ∩ shapes[-1])).

    Args:
        shapes: Ordered shapes to intersect
        intersect_pair: Returns the intersection of two shapes, or None if empty

    Returns:
        The common intersection, or None if it is empty or shapes is empty.
        A single shape is returned as is.
    """
    if len(shapes) == 0:
        return None

    result = shapes[-1]
    for shape in reversed(shapes[:-1]):
        result = intersect_pair(shape, result)
        if result is None:
            return None
    return result


class ShapelyGeometry:
    """Polygon backend built on shapely.

    Self-intersecting outlines (a node dragged across an edge) are repaired
    with ``make_valid`` instead of being rejected.

    Args:
        min_overlap_area: An intersection counts as non-empty only if its area
            is strictly greater than this value
    """

    def __init__(self, min_overlap_area: float = 0.0) -> None:
        self.min_overlap_area = float(min_overlap_area)

    def make_shape(self, points: NDArray[np.float64]) -> BaseGeometry:
        polygon = Polygon(np.asarray(points, dtype=np.float64))
        if not polygon.is_valid:
            return make_valid(polygon)
        return polygon

    def _intersect_pair(self, shape_a: BaseGeometry, shape_b: BaseGeometry) -> Optional[BaseGeometry]:
        result = shape_a.intersection(shape_b)
        if result.is_empty or result.area <= self.min_overlap_area:
            return None
        return result

    def intersects(self, shape_a: BaseGeometry, shape_b: BaseGeometry) -> bool:
        return self._intersect_pair(shape_a, shape_b) is not None

    def intersection(self, shapes: Sequence[BaseGeometry]) -> Optional[BaseGeometry]:
        return reduce_intersection(shapes, self._intersect_pair)

    def area(self, shape: BaseGeometry) -> float:
        return float(shape.area)

    def rescale(
        self,
        points: NDArray[np.float64],
        from_frame: Tuple[float, float],
        to_frame: Tuple[float, float],
    ) -> NDArray[np.float64]:
        return rescale_points(points, from_frame, to_frame)


class ConvexClipGeometry:
    """Numpy-only backend for convex tracings.

    Shapes are counter-clockwise (N, 2) vertex arrays. Intersections are
    computed by clipping one polygon against the edges of the other, which is
    exact only when the clip polygon is convex; ``make_shape`` therefore
    rejects concave outlines. Collinear outlines are accepted with zero area
    and never intersect anything.

    Args:
        min_overlap_area: An intersection counts as non-empty only if its area
            is strictly greater than this value
    """

    def __init__(self, min_overlap_area: float = 0.0) -> None:
        self.min_overlap_area = float(min_overlap_area)

    def make_shape(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        polygon = np.asarray(points, dtype=np.float64)
        if is_collinear_polygon(polygon):
            # Zero-area outline: kept as is, it overlaps nothing
            return polygon
        if not is_convex_polygon(polygon):
            raise ValueError(
                f"ConvexClipGeometry requires convex polygons, got {polygon.shape[0]} "
                "vertices forming a concave outline"
            )
        return ensure_counter_clockwise(polygon)

    def _intersect_pair(
        self, shape_a: NDArray[np.float64], shape_b: NDArray[np.float64]
    ) -> Optional[NDArray[np.float64]]:
        if is_collinear_polygon(shape_a) or is_collinear_polygon(shape_b):
            return None
        result = clip_polygon_convex(shape_a, shape_b)
        if result.shape[0] < 3 or polygon_area(result) <= self.min_overlap_area:
            return None
        return result

    def intersects(self, shape_a: NDArray[np.float64], shape_b: NDArray[np.float64]) -> bool:
        return self._intersect_pair(shape_a, shape_b) is not None

    def intersection(self, shapes: Sequence[NDArray[np.float64]]) -> Optional[NDArray[np.float64]]:
        return reduce_intersection(shapes, self._intersect_pair)

    def area(self, shape: NDArray[np.float64]) -> float:
        return polygon_area(shape)

    def rescale(
        self,
        points: NDArray[np.float64],
        from_frame: Tuple[float, float],
        to_frame: Tuple[float, float],
    ) -> NDArray[np.float64]:
        return rescale_points(points, from_frame, to_frame)
