# File: tests/reconstruction/test_stitching.py
"""Tests for bend stitching between new segments."""

import logging

from src.mep_autoavoid.core.memory_store import InMemoryModelStore
from src.mep_autoavoid.core.mep_system import CrossSection, RunKind
from src.mep_autoavoid.reconstruction.stitching import StitchResult, stitch_bends


def _segments(store, points):
    section = CrossSection(diameter=0.5)
    return [
        store.create_segment(RunKind.PIPE, section, points[i], points[i + 1])
        for i in range(len(points) - 1)
    ]


HUMP = [(0.0, 0.0, 0.0), (5.0, 0.0, 0.0), (6.0, 0.0, 1.0), (9.0, 0.0, 1.0),
        (10.0, 0.0, 0.0), (15.0, 0.0, 0.0)]


class TestStitchBends:
    """Test cases for stitch_bends."""

    def test_hump_gets_four_bends(self, store):
        segments = _segments(store, HUMP)
        result = stitch_bends(store, segments, 0.01, outward_points=(HUMP[0], HUMP[-1]))
        assert result.bends_created == 4
        assert result.expected_bends == 4
        assert result.unmatched_count == 0
        assert result.is_complete
        assert result.warnings == []

    def test_every_internal_connector_joined(self, store):
        segments = _segments(store, HUMP)
        stitch_bends(store, segments, 0.01)
        for segment in segments[1:-1]:
            assert all(c.is_connected for c in store.get_connectors(segment.id))

    def test_outward_ends_not_reported_without_points(self, store):
        segments = _segments(store, HUMP[:3])
        result = stitch_bends(store, segments, 0.01)
        assert result.bends_created == 1
        # Without outward points the two free ends count as unmatched
        assert result.unmatched_count == 2

    def test_gap_beyond_tolerance(self, store):
        section = CrossSection(diameter=0.5)
        a = store.create_segment(RunKind.PIPE, section, (0.0, 0.0, 0.0), (5.0, 0.0, 0.0))
        b = store.create_segment(RunKind.PIPE, section, (5.1, 0.0, 0.0), (5.1, 0.0, 3.0))
        result = stitch_bends(store, [a, b], 0.01, outward_points=((0.0, 0.0, 0.0), (5.1, 0.0, 3.0)))
        assert result.bends_created == 0
        assert result.unmatched_count == 2
        assert not result.is_complete

    def test_bend_failure_becomes_warning(self, caplog):
        store = InMemoryModelStore(fail_bend_fittings=True)
        segments = _segments(store, HUMP[:4])
        with caplog.at_level(logging.WARNING):
            result = stitch_bends(store, segments, 0.01, outward_points=(HUMP[0], HUMP[3]))
        assert result.bends_created == 0
        assert result.unmatched_count == 4
        assert len(result.warnings) == 3
        assert "Only 0 of 2 bends created" in result.warnings[-1]
        assert "failed" in caplog.text

    def test_single_segment_needs_no_bend(self, store):
        result = stitch_bends(store, _segments(store, HUMP[:2]), 0.01)
        assert result.bends_created == 0
        assert result.expected_bends == 0
        assert result.is_complete

    def test_custom_logger(self, store, caplog):
        log = logging.getLogger("mep_autoavoid.test_stitch")
        with caplog.at_level(logging.INFO):
            stitch_bends(store, _segments(store, HUMP[:3]), 0.01, log=log)
        assert any(r.name == "mep_autoavoid.test_stitch" for r in caplog.records)

    def test_empty_result(self):
        assert StitchResult().is_complete
