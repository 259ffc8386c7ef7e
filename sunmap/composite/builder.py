"""
Composite Tracing Builder - single owner of the latest composite result.

Thread Safety:
- build() calls are serialized by a build lock; the last call to start wins
- The result is computed outside the read lock, then swapped in under it
- current_result() and current_composite() return snapshot copies
- A newer build always replaces the previous result as a whole
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import replace

from sunmap.backends import GeometryBackend
from sunmap.composite.algorithm import compute_combined_tracings
from sunmap.composite.dataclasses import (
    CombinedTracing,
    CompositeConfig,
    CompositeResult,
    Tracing,
)

logger = logging.getLogger(__name__)


class CompositeTracingBuilder:
    """
    Holds the combined tracings for a sun map's composite view.

    Usage:
        builder = CompositeTracingBuilder()
        builder.build(tracings)
        for combined in builder.current_result():
            draw(combined.paths(view_size), shade=combined.duration)
    """

    def __init__(
        self,
        config: CompositeConfig | None = None,
        geometry: GeometryBackend | None = None,
    ) -> None:
        self._config = config if config is not None else CompositeConfig()
        self._geometry = geometry
        self._result = CompositeResult(combined_tracings=[])
        self._generation = 0
        self._lock = threading.Lock()
        self._build_lock = threading.Lock()

    @property
    def config(self) -> CompositeConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Number of completed builds."""
        with self._lock:
            return self._generation

    def build(self, tracings: Sequence[Tracing], enable_profiling: bool = False) -> None:
        """
        Recompute the composite from the full list of tracings.

        Args:
            tracings: Every tracing of the sun map, in order
            enable_profiling: If True, keep ProfilingData on the published result

        A build started while another is running waits for it to finish, so
        results are published in call order.

        Raises:
            ValidationError: If tracings are invalid; the previous result is kept
        """
        with self._build_lock:
            result = compute_combined_tracings(
                tracings,
                config=self._config,
                geometry=self._geometry,
                enable_profiling=enable_profiling,
            )

            with self._lock:
                self._result = result
                self._generation += 1
                generation = self._generation

        logger.debug("Published composite build %d with %d shapes", generation, len(result))

    def current_result(self) -> list[CombinedTracing]:
        """Snapshot of the latest combined tracings, ascending by duration."""
        with self._lock:
            return list(self._result.combined_tracings)

    def current_composite(self) -> CompositeResult:
        """Snapshot of the latest full CompositeResult, including profiling data."""
        with self._lock:
            profiling = self._result.profiling_data
            return replace(
                self._result,
                combined_tracings=list(self._result.combined_tracings),
                profiling_data=replace(profiling) if profiling is not None else None,
            )
