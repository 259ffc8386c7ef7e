"""
Tests for composite data structures.

Tests cover:
- Tracing: validation, normalization, identity semantics, rescaled points
- CombinedTracing: derived properties and member paths
- CompositeConfig: validation
- ProfilingData / CompositeResult: aggregate properties
"""

import uuid

import numpy as np
import pytest
from numpy.testing import assert_allclose

from sunmap.composite.dataclasses import (
    CombinedTracing,
    CompositeConfig,
    CompositeResult,
    ProfilingData,
    Tracing,
    ValidationError,
)

from conftest import make_tracing, square


# =============================================================================
# Tracing
# =============================================================================


class TestTracingValidation:
    """Tests for Tracing field validation."""

    def test_valid_tracing(self) -> None:
        tracing = make_tracing(540, 60, square(0, 0, 10, 10))
        assert tracing.time_bucket == 540
        assert tracing.duration_minutes == 60.0
        assert isinstance(tracing.duration_minutes, float)
        assert tracing.relative_frame == (100.0, 100.0)
        assert tracing.num_vertices == 4
        assert isinstance(tracing.id, uuid.UUID)

    def test_points_from_list(self) -> None:
        tracing = make_tracing(1, 10, [[0, 0], [1, 0], [0, 1]])
        assert tracing.points.dtype == np.float64
        assert tracing.points.shape == (3, 2)

    def test_points_are_read_only(self) -> None:
        tracing = make_tracing(1, 10, square(0, 0, 1, 1))
        with pytest.raises(ValueError):
            tracing.points[0, 0] = 5.0

    def test_source_array_not_aliased(self) -> None:
        points = square(0, 0, 1, 1)
        tracing = make_tracing(1, 10, points)
        points[0, 0] = 42.0
        assert tracing.points[0, 0] == 0.0

    def test_numpy_integer_bucket_normalized(self) -> None:
        tracing = make_tracing(np.int64(600), 10, square(0, 0, 1, 1))
        assert type(tracing.time_bucket) is int

    def test_too_few_vertices(self) -> None:
        with pytest.raises(ValidationError, match="at least 3 vertices"):
            make_tracing(1, 10, [[0, 0], [1, 1]])

    def test_wrong_shape(self) -> None:
        with pytest.raises(ValidationError, match="shape"):
            make_tracing(1, 10, np.zeros((4, 3)))

    def test_non_finite_points(self) -> None:
        with pytest.raises(ValidationError, match="finite"):
            make_tracing(1, 10, [[0, 0], [np.nan, 0], [0, 1]])

    def test_negative_duration(self) -> None:
        with pytest.raises(ValidationError, match="non-negative"):
            make_tracing(1, -5, square(0, 0, 1, 1))

    def test_infinite_duration(self) -> None:
        with pytest.raises(ValidationError, match="finite"):
            make_tracing(1, float("inf"), square(0, 0, 1, 1))

    def test_zero_duration_allowed(self) -> None:
        assert make_tracing(1, 0, square(0, 0, 1, 1)).duration_minutes == 0.0

    def test_non_integer_bucket(self) -> None:
        with pytest.raises(ValidationError, match="time_bucket"):
            make_tracing(1.5, 10, square(0, 0, 1, 1))

    def test_bool_bucket_rejected(self) -> None:
        with pytest.raises(ValidationError, match="time_bucket"):
            make_tracing(True, 10, square(0, 0, 1, 1))

    def test_negative_frame(self) -> None:
        with pytest.raises(ValidationError, match="relative_frame"):
            make_tracing(1, 10, square(0, 0, 1, 1), frame=(-1, 10))

    def test_malformed_frame(self) -> None:
        with pytest.raises(ValidationError, match="relative_frame"):
            make_tracing(1, 10, square(0, 0, 1, 1), frame=(10,))

    def test_shadow_pct_range(self) -> None:
        with pytest.raises(ValidationError, match="shadow_pct"):
            Tracing(
                time_bucket=1,
                duration_minutes=10,
                points=square(0, 0, 1, 1),
                relative_frame=(10, 10),
                shadow_pct=150,
            )

    def test_shadow_pct_rejects_bool(self) -> None:
        with pytest.raises(ValidationError, match="shadow_pct must be a number"):
            Tracing(
                time_bucket=1,
                duration_minutes=10,
                points=square(0, 0, 1, 1),
                relative_frame=(10, 10),
                shadow_pct=True,
            )


class TestTracingIdentity:
    """Equality and hashing are by id only."""

    def test_same_values_different_identity(self) -> None:
        a = make_tracing(1, 10, square(0, 0, 1, 1))
        b = make_tracing(1, 10, square(0, 0, 1, 1))
        assert a != b
        assert len({a, b}) == 2

    def test_same_id_equal(self) -> None:
        tracing_id = uuid.uuid4()
        a = Tracing(1, 10, square(0, 0, 1, 1), (10, 10), id=tracing_id)
        b = Tracing(2, 20, square(5, 5, 6, 6), (10, 10), id=tracing_id)
        assert a == b
        assert hash(a) == hash(b)

    def test_not_equal_to_other_types(self) -> None:
        assert make_tracing(1, 10, square(0, 0, 1, 1)) != "tracing"


class TestTracingPointsIn:
    """Tests for Tracing.points_in()."""

    def test_points_in_own_frame(self) -> None:
        tracing = make_tracing(1, 10, square(0, 0, 10, 10))
        assert_allclose(tracing.points_in(), square(0, 0, 10, 10))

    def test_points_in_other_frame(self) -> None:
        tracing = make_tracing(1, 10, square(0, 0, 10, 10), frame=(100, 100))
        assert_allclose(tracing.points_in((200, 50)), square(0, 0, 20, 5))

    def test_points_in_from_zero_frame(self) -> None:
        tracing = make_tracing(1, 10, square(0, 0, 10, 10), frame=(0, 0))
        assert_allclose(tracing.points_in((200, 50)), square(0, 0, 10, 10))


# =============================================================================
# CombinedTracing
# =============================================================================


class TestCombinedTracing:
    """Tests for CombinedTracing properties."""

    def test_requires_members(self) -> None:
        with pytest.raises(ValidationError):
            CombinedTracing(members=(), duration=0.0)

    def test_members_normalized_to_tuple(self) -> None:
        a = make_tracing(1, 10, square(0, 0, 1, 1))
        combined = CombinedTracing(members=[a], duration=10.0)
        assert combined.members == (a,)

    def test_properties(self) -> None:
        a = make_tracing(540, 60, square(0, 0, 10, 10), frame=(100, 100))
        b = make_tracing(600, 60, square(10, 10, 30, 30), frame=(200, 200))
        c = make_tracing(540, 40, square(2, 2, 8, 8), frame=(100, 100))
        combined = CombinedTracing(members=(a, b, c), duration=110.0)

        assert combined.size == 3
        assert combined.is_singleton is False
        assert combined.member_ids == (a.id, b.id, c.id)
        assert combined.time_buckets == (540, 600)
        assert combined.reference_frame == (100.0, 100.0)

    def test_paths_in_reference_frame(self) -> None:
        a = make_tracing(540, 60, square(0, 0, 10, 10), frame=(100, 100))
        b = make_tracing(600, 60, square(10, 10, 30, 30), frame=(200, 200))
        paths = CombinedTracing(members=(a, b), duration=120.0).paths()

        assert len(paths) == 2
        assert_allclose(paths[0], square(0, 0, 10, 10))
        assert_allclose(paths[1], square(5, 5, 15, 15))

    def test_paths_in_view_frame(self) -> None:
        a = make_tracing(540, 60, square(0, 0, 10, 10), frame=(100, 100))
        paths = CombinedTracing(members=(a,), duration=60.0).paths((300, 300))
        assert_allclose(paths[0], square(0, 0, 30, 30))


# =============================================================================
# CompositeConfig
# =============================================================================


class TestCompositeConfig:
    """Tests for CompositeConfig validation."""

    def test_defaults(self) -> None:
        config = CompositeConfig()
        assert config.backend == "shapely"
        assert config.min_overlap_area == 0.0
        assert config.max_workers == 1
        assert config.is_parallel is False

    def test_parallel(self) -> None:
        assert CompositeConfig(max_workers=4).is_parallel is True

    def test_min_overlap_area_normalized(self) -> None:
        config = CompositeConfig(min_overlap_area=2)
        assert isinstance(config.min_overlap_area, float)

    def test_is_frozen(self) -> None:
        config = CompositeConfig()
        with pytest.raises(AttributeError):
            config.max_workers = 3  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"backend": "cairo"}, "backend"),
            ({"min_overlap_area": -1.0}, "min_overlap_area"),
            ({"min_overlap_area": float("nan")}, "min_overlap_area"),
            ({"min_overlap_area": "big"}, "min_overlap_area"),
            ({"max_workers": 0}, "max_workers"),
            ({"max_workers": 2.5}, "max_workers"),
            ({"notes": ["not", "a", "dict"]}, "notes"),
        ],
    )
    def test_invalid(self, kwargs, message) -> None:
        with pytest.raises(ValidationError, match=message):
            CompositeConfig(**kwargs)


# =============================================================================
# ProfilingData / CompositeResult
# =============================================================================


class TestProfilingData:
    def test_totals(self) -> None:
        data = ProfilingData(
            index_seconds=0.25, enumeration_seconds=0.5, chains_generated=8, chains_rejected=2
        )
        assert data.total_seconds == pytest.approx(0.75)
        assert data.rejection_ratio == pytest.approx(0.25)

    def test_rejection_ratio_no_chains(self) -> None:
        assert ProfilingData().rejection_ratio == 0.0


class TestCompositeResult:
    def test_empty(self) -> None:
        result = CompositeResult(combined_tracings=[])
        assert len(result) == 0
        assert result.max_duration == 0.0
        assert result.singletons == []
        assert result.combinations == []

    def test_split_and_durations(self) -> None:
        a = make_tracing(1, 10, square(0, 0, 1, 1))
        b = make_tracing(2, 20, square(0, 0, 1, 1))
        single_a = CombinedTracing(members=(a,), duration=10.0)
        single_b = CombinedTracing(members=(b,), duration=20.0)
        both = CombinedTracing(members=(b, a), duration=30.0)
        result = CompositeResult(combined_tracings=[single_a, single_b, both], total_tracings=2)

        assert result.singletons == [single_a, single_b]
        assert result.combinations == [both]
        assert result.durations == [10.0, 20.0, 30.0]
        assert result.max_duration == 30.0
