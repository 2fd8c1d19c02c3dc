# File: tests/geometry/test_kernel.py
"""Tests for the geometry kernel."""

import math

import pytest

from src.mep_autoavoid.geometry.kernel import (
    BoundingBox,
    closest_points_between_segments,
    expand_box,
    is_nearly_horizontal,
    is_point_in_box,
    line_intersects_box,
    perpendicular_horizontal,
    point_to_segment_distance,
    points_almost_equal,
    project_on_plane,
    project_point_on_segment,
    segment_segment_min_distance,
    vector_normalize,
)


@pytest.fixture
def unit_box():
    return BoundingBox(min=(-1.0, -1.0, -1.0), max=(1.0, 1.0, 1.0))


class TestBoundingBox:
    """Test cases for BoundingBox."""

    def test_center_and_extents(self):
        box = BoundingBox(min=(0.0, 0.0, 0.0), max=(4.0, 2.0, 6.0))
        assert box.center == (2.0, 1.0, 3.0)
        assert box.half_extents == (2.0, 1.0, 3.0)
        assert box.max_half_extent == 3.0

    def test_expand_box(self, unit_box):
        """Both corners grow by the offset on every axis."""
        grown = expand_box(unit_box, 0.5)
        assert grown.min == (-1.5, -1.5, -1.5)
        assert grown.max == (1.5, 1.5, 1.5)
        assert unit_box.expanded(0.5) == grown

    def test_contains(self, unit_box):
        assert unit_box.contains((0.0, 0.0, 0.0))
        assert unit_box.contains((1.0, 1.0, 1.0))
        assert not is_point_in_box((1.01, 0.0, 0.0), unit_box)

    def test_dict_round_trip(self, unit_box):
        assert BoundingBox.from_dict(unit_box.to_dict()) == unit_box


class TestLineIntersectsBox:
    """Test cases for the slab intersection test."""

    def test_line_through_box(self, unit_box):
        assert line_intersects_box((-5.0, 0.0, 0.0), (5.0, 0.0, 0.0), unit_box)

    def test_line_misses_box(self, unit_box):
        assert not line_intersects_box((-5.0, 2.0, 0.0), (5.0, 2.0, 0.0), unit_box)

    def test_segment_stops_short(self, unit_box):
        """Only the [0, 1] parameter interval counts."""
        assert not line_intersects_box((-5.0, 0.0, 0.0), (-2.0, 0.0, 0.0), unit_box)

    def test_segment_inside_box(self, unit_box):
        assert line_intersects_box((-0.5, 0.0, 0.0), (0.5, 0.0, 0.0), unit_box)

    def test_axis_parallel_outside_slab(self, unit_box):
        """A zero direction component outside its slab rejects."""
        assert not line_intersects_box((-5.0, 0.0, 3.0), (5.0, 0.0, 3.0), unit_box)

    def test_touching_face(self, unit_box):
        assert line_intersects_box((-5.0, 1.0, 0.0), (5.0, 1.0, 0.0), unit_box)

    def test_diagonal(self, unit_box):
        assert line_intersects_box((-3.0, -3.0, -3.0), (3.0, 3.0, 3.0), unit_box)
        assert not line_intersects_box((-3.0, 0.0, 2.5), (0.0, 3.0, 2.5), unit_box)

    def test_degenerate_segment(self, unit_box):
        assert line_intersects_box((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), unit_box)
        assert not line_intersects_box((2.0, 0.0, 0.0), (2.0, 0.0, 0.0), unit_box)


class TestDistances:
    """Test cases for point and segment distances."""

    def test_point_to_segment_interior(self):
        assert point_to_segment_distance((5.0, 3.0, 0.0), (0.0, 0.0, 0.0), (10.0, 0.0, 0.0)) == 3.0

    def test_point_to_segment_clamped(self):
        """Projection beyond the end clamps to the endpoint."""
        d = point_to_segment_distance((13.0, 4.0, 0.0), (0.0, 0.0, 0.0), (10.0, 0.0, 0.0))
        assert d == pytest.approx(5.0)

    def test_project_point_on_segment(self):
        t, p = project_point_on_segment((2.5, 7.0, 0.0), (0.0, 0.0, 0.0), (10.0, 0.0, 0.0))
        assert t == pytest.approx(0.25)
        assert p == pytest.approx((2.5, 0.0, 0.0))

    def test_crossing_segments(self):
        """Perpendicular skew segments: distance is the vertical gap."""
        d = segment_segment_min_distance(
            (0.0, 0.0, 0.0), (10.0, 0.0, 0.0),
            (5.0, -5.0, 2.0), (5.0, 5.0, 2.0),
        )
        assert d == pytest.approx(2.0)

    def test_closest_points(self):
        s, t, c1, c2 = closest_points_between_segments(
            (0.0, 0.0, 0.0), (10.0, 0.0, 0.0),
            (5.0, -5.0, 2.0), (5.0, 5.0, 2.0),
        )
        assert s == pytest.approx(0.5)
        assert t == pytest.approx(0.5)
        assert c1 == pytest.approx((5.0, 0.0, 0.0))
        assert c2 == pytest.approx((5.0, 0.0, 2.0))

    def test_clamped_end_to_end(self):
        """Collinear disjoint segments measure the gap between their ends."""
        d = segment_segment_min_distance(
            (0.0, 0.0, 0.0), (1.0, 0.0, 0.0),
            (3.0, 0.0, 0.0), (5.0, 0.0, 0.0),
        )
        assert d == pytest.approx(2.0)

    def test_parallel_offset(self):
        d = segment_segment_min_distance(
            (0.0, 0.0, 0.0), (10.0, 0.0, 0.0),
            (2.0, 3.0, 0.0), (8.0, 3.0, 0.0),
        )
        assert d == pytest.approx(3.0)

    def test_clamp_forces_resolve(self):
        """Closest point lies at an end of the second segment."""
        d = segment_segment_min_distance(
            (0.0, 0.0, 0.0), (10.0, 0.0, 0.0),
            (5.0, 2.0, 0.0), (5.0, 6.0, 0.0),
        )
        assert d == pytest.approx(2.0)

    def test_degenerate_first_segment(self):
        d = segment_segment_min_distance(
            (5.0, 4.0, 0.0), (5.0, 4.0, 0.0),
            (0.0, 0.0, 0.0), (10.0, 0.0, 0.0),
        )
        assert d == pytest.approx(4.0)

    def test_degenerate_both(self):
        d = segment_segment_min_distance(
            (0.0, 0.0, 0.0), (0.0, 0.0, 0.0),
            (3.0, 4.0, 0.0), (3.0, 4.0, 0.0),
        )
        assert d == pytest.approx(5.0)


class TestOrientation:
    """Test cases for perpendiculars and horizontality."""

    def test_perpendicular_left_and_right(self):
        left = perpendicular_horizontal((1.0, 0.0, 0.0), left_side=True)
        right = perpendicular_horizontal((1.0, 0.0, 0.0), left_side=False)
        assert left == pytest.approx((0.0, 1.0, 0.0))
        assert right == pytest.approx((0.0, -1.0, 0.0))

    def test_perpendicular_ignores_slope(self):
        n = perpendicular_horizontal(vector_normalize((1.0, 0.0, 1.0)), left_side=True)
        assert n == pytest.approx((0.0, 1.0, 0.0))

    def test_perpendicular_of_vertical_defaults(self):
        """A vertical direction falls back to the default axis."""
        n = perpendicular_horizontal((0.0, 0.0, 1.0), left_side=True)
        assert n == pytest.approx((0.0, 1.0, 0.0))

    def test_is_nearly_horizontal(self):
        assert is_nearly_horizontal((1.0, 0.0, 0.0))
        assert is_nearly_horizontal((1.0, 0.0, 0.1))
        assert not is_nearly_horizontal((0.0, 0.0, 1.0))
        assert not is_nearly_horizontal((1.0, 0.0, 1.0))

    def test_is_nearly_horizontal_custom_tolerance(self):
        slope = (math.cos(0.1), 0.0, math.sin(0.1))
        assert is_nearly_horizontal(slope)
        assert not is_nearly_horizontal(slope, tolerance=0.05)

    def test_zero_vector_is_horizontal(self):
        assert is_nearly_horizontal((0.0, 0.0, 0.0))

    def test_project_on_plane(self):
        assert project_on_plane((1.0, 2.0, 3.0), (0.0, 0.0, 1.0)) == pytest.approx((1.0, 2.0, 0.0))

    def test_points_almost_equal(self):
        assert points_almost_equal((0.0, 0.0, 0.0), (0.001, 0.0, 0.0), 0.01)
        assert not points_almost_equal((0.0, 0.0, 0.0), (0.1, 0.0, 0.0), 0.01)
