"""Shared fixtures and helpers for sunmap tests."""

import numpy as np
import pytest

from sunmap.composite import Tracing


def square(x0: float, y0: float, x1: float, y1: float) -> np.ndarray:
    """Axis-aligned rectangle, counter-clockwise."""
    return np.array([[x0, y0], [x1, y0], [x1, y1], [x0, y1]], dtype=np.float64)


def make_tracing(
    bucket: int,
    duration: float,
    points: np.ndarray,
    frame: tuple[float, float] = (100.0, 100.0),
) -> Tracing:
    return Tracing(
        time_bucket=bucket,
        duration_minutes=duration,
        points=points,
        relative_frame=frame,
    )


def random_tracings(n: int, seed: int = 42, n_buckets: int = 4) -> list[Tracing]:
    """Random squares in a shared 100x100 frame."""
    rng = np.random.default_rng(seed)
    tracings = []
    for _ in range(n):
        x0 = rng.uniform(0, 60)
        y0 = rng.uniform(0, 60)
        size = rng.uniform(20, 40)
        tracings.append(
            make_tracing(
                bucket=int(rng.integers(0, n_buckets)),
                duration=float(rng.choice([30.0, 60.0, 90.0])),
                points=square(x0, y0, x0 + size, y0 + size),
            )
        )
    return tracings


@pytest.fixture
def example_tracings() -> list[Tracing]:
    """A and C share a bucket and an outline; B overlaps both."""
    return [
        make_tracing(1, 60.0, square(0, 0, 10, 10)),
        make_tracing(2, 60.0, square(5, 5, 15, 15)),
        make_tracing(1, 40.0, square(0, 0, 10, 10)),
    ]


@pytest.fixture
def helly_tracings() -> list[Tracing]:
    """Three convex strips that overlap pairwise but share no common point."""
    return [
        make_tracing(1, 10.0, square(0, 0, 10, 2)),
        make_tracing(2, 20.0, square(0, 0, 2, 10)),
        make_tracing(
            3,
            30.0,
            np.array([[8, 0], [10, 0], [0, 10], [0, 8]], dtype=np.float64),
        ),
    ]
