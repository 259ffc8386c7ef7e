#!/usr/bin/env python3
"""
Profile script for sunmap composite builds to identify performance bottlenecks.
"""

import cProfile
import pstats
import io
import numpy as np
from numpy.typing import NDArray
import time
from typing import List
from sunmap.composite import CompositeConfig, Tracing, compute_combined_tracings


def generate_random_polygon(
    center: NDArray[np.float64],
    radius: float,
    n_vertices: int = 5
) -> NDArray[np.float64]:
    """Generate a random star-shaped polygon roughly centered at center."""
    angles = np.sort(np.random.uniform(0, 2 * np.pi, n_vertices))
    radii = np.random.uniform(0.5 * radius, 1.5 * radius, n_vertices)
    x = center[0] + radii * np.cos(angles)
    y = center[1] + radii * np.sin(angles)
    return np.column_stack([x, y])


def generate_typical_workload(
    n_images: int = 6,
    tracings_per_image: int = 2,
    vertices_per_tracing: int = 6
) -> List[Tracing]:
    """
    Generate a typical sun map for profiling.
    Simulates a sunlit patch drifting across the garden from image to image.
    """
    frame = (400.0, 300.0)
    tracings = []
    for image in range(n_images):
        for _ in range(tracings_per_image):
            center = np.array([
                120.0 + image * 25.0 + np.random.uniform(-30, 30),
                150.0 + np.random.uniform(-40, 40),
            ])
            tracings.append(Tracing(
                time_bucket=360 + image * 60,
                duration_minutes=60.0,
                points=generate_random_polygon(center, 40.0, vertices_per_tracing),
                relative_frame=frame,
            ))
    return tracings


def run_typical_workload(n_iterations: int = 50) -> None:
    """Run typical workload multiple times for profiling."""
    np.random.seed(42)  # For reproducibility

    for _ in range(n_iterations):
        compute_combined_tracings(generate_typical_workload())


def run_parallel_workload(n_iterations: int = 10) -> None:
    """Run a larger sun map with per-tracing fan-out."""
    np.random.seed(42)
    config = CompositeConfig(max_workers=4)

    for _ in range(n_iterations):
        tracings = generate_typical_workload(n_images=10, tracings_per_image=2)
        compute_combined_tracings(tracings, config=config)


def profile_function(func, description: str) -> None:
    """Profile a function and print statistics."""
    print(f"\n{'=' * 60}")
    print(f"Profiling: {description}")
    print('=' * 60)

    start = time.perf_counter()

    profiler = cProfile.Profile()
    profiler.enable()
    func()
    profiler.disable()

    elapsed = time.perf_counter() - start

    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    ps.print_stats(30)
    print(s.getvalue())

    print(f"\nTotal time: {elapsed:.3f}s")


if __name__ == "__main__":
    print("Sun Map Composite Profiling")
    print("=" * 60)

    profile_function(
        lambda: run_typical_workload(50),
        "Typical sun map (6 images x 2 tracings, 50 iterations)"
    )

    profile_function(
        lambda: run_parallel_workload(10),
        "Parallel build (10 images x 2 tracings, 4 workers, 10 iterations)"
    )
