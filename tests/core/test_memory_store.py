# File: tests/core/test_memory_store.py
"""Tests for the in-memory model store and transactions."""

import pytest

from src.mep_autoavoid.core.errors import ModelStoreError
from src.mep_autoavoid.core.memory_store import InMemoryModelStore
from src.mep_autoavoid.core.mep_system import CrossSection, ObstacleCategory, RunKind
from src.mep_autoavoid.geometry.kernel import BoundingBox


class TestSceneBuilding:
    """Building scenes and querying them."""

    def test_add_run_creates_end_connectors(self, store):
        run = store.add_run("P1", RunKind.PIPE, (0, 0, 0), (10, 0, 0), CrossSection(diameter=0.5))
        connectors = store.get_connectors(run.element)
        assert [c.id for c in connectors] == ["P1:c0", "P1:c1"]
        assert connectors[0].origin == (0, 0, 0)
        assert connectors[0].direction == (-1.0, 0.0, 0.0)
        assert connectors[1].direction == (1.0, 0.0, 0.0)

    def test_run_box_includes_radius(self, store):
        run = store.add_run("P1", RunKind.PIPE, (0, 0, 0), (10, 0, 0), CrossSection(diameter=0.5))
        assert store.get_bounding_box(run) == BoundingBox((-0.25, -0.25, -0.25), (10.25, 0.25, 0.25))
        assert store.get_radius("P1") == 0.25

    def test_get_linear_run(self, store):
        store.add_run("D1", RunKind.DUCT, (0, 0, 0), (0, 5, 0), CrossSection(width=1.0, height=0.5))
        run = store.get_linear_run("D1")
        assert run.kind == RunKind.DUCT
        assert run.radius == 0.25
        assert run.level_id == "L1"

    def test_obstacle_is_not_a_run(self, store):
        store.add_obstacle("W1", ObstacleCategory.WALLS, BoundingBox((0, 0, 0), (1, 1, 1)))
        assert store.get_linear_run("W1") is None
        assert store.get_centerline_segment("W1") is None
        assert store.element_category("W1") == ObstacleCategory.WALLS

    def test_query_by_category_and_scope(self, store):
        store.add_obstacle("W1", ObstacleCategory.WALLS, BoundingBox((0, 0, 0), (1, 1, 1)))
        store.add_obstacle("W2", ObstacleCategory.WALLS, BoundingBox((5, 0, 0), (6, 1, 1)))
        store.add_obstacle("F1", ObstacleCategory.FLOORS, BoundingBox((0, 0, -1), (9, 9, 0)))
        assert [e.id for e in store.query_by_category(ObstacleCategory.WALLS)] == ["W1", "W2"]
        assert [e.id for e in store.query_by_category(ObstacleCategory.WALLS, scope=["W2"])] == ["W2"]

    def test_unknown_element_raises(self, store):
        with pytest.raises(ModelStoreError, match="does not exist"):
            store.get_bounding_box("nope")

    def test_from_dict(self):
        store = InMemoryModelStore.from_dict({
            "runs": [{
                "id": "P1", "kind": "pipe", "start": [0, 0, 0], "end": [10, 0, 0],
                "cross_section": {"diameter": 0.5},
            }],
            "obstacles": [{
                "id": "B1", "category": "structural_framing",
                "box": {"min": [4, -1, -1], "max": [6, 1, 1]},
            }],
            "fittings": [{"id": "F1", "origin": [10, 0, 0]}],
            "connections": [["P1:c1", "F1:c0"]],
        })
        assert store.has_element("B1")
        assert store.get_connector("P1:c1").connected_ids == ["F1:c0"]
        assert store.get_connector("F1:c0").connected_ids == ["P1:c1"]
        assert [r.id for r in store.runs()] == ["P1"]


class TestMutations:
    """Segment creation, deletion, fittings and connections."""

    def test_create_segment_copies_template(self, store):
        template = store.add_run("P1", RunKind.PIPE, (0, 0, 0), (10, 0, 0),
                                 CrossSection(diameter=0.5), level_id="L2", type_id="T9")
        segment = store.create_segment(RunKind.PIPE, template.cross_section, (0, 0, 0), (0, 0, 5), template)
        assert segment.id == "pipe-1"
        assert segment.level_id == "L2"
        assert segment.type_id == "T9"
        assert store.segments_created == 1

    def test_create_zero_length_segment_fails(self, store):
        with pytest.raises(ModelStoreError, match="zero-length"):
            store.create_segment(RunKind.PIPE, CrossSection(diameter=0.5), (1, 1, 1), (1, 1, 1))

    def test_failure_injection(self):
        store = InMemoryModelStore(fail_segment_creation_after=1)
        section = CrossSection(diameter=0.5)
        store.create_segment(RunKind.PIPE, section, (0, 0, 0), (1, 0, 0))
        with pytest.raises(ModelStoreError, match="refused"):
            store.create_segment(RunKind.PIPE, section, (1, 0, 0), (2, 0, 0))

    def test_connect_is_symmetric(self, store):
        a = store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        b = store.add_run("P2", RunKind.PIPE, (1, 0, 0), (2, 0, 0))
        c1 = store.get_connector("P1:c1")
        c2 = store.get_connector("P2:c0")
        store.connect(c1, c2)
        assert c1.is_connected and c2.is_connected
        store.disconnect(c2, c1)
        assert not c1.is_connected and not c2.is_connected
        assert a.id != b.id

    def test_delete_clears_back_references(self, store):
        store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        store.add_fitting("F1", (1, 0, 0))
        store.connect(store.get_connector("P1:c1"), store.get_connector("F1:c0"))
        store.delete_element("P1")
        assert not store.has_element("P1")
        assert store.get_connector("P1:c1") is None
        assert store.get_connector("F1:c0").connected_ids == []

    def test_create_bend_fitting_connects_both(self, store):
        store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        store.add_run("P2", RunKind.PIPE, (1, 0, 0), (1, 0, 1))
        a = store.get_connector("P1:c1")
        b = store.get_connector("P2:c0")
        bend = store.create_bend_fitting(a, b)
        assert bend.category == ObstacleCategory.FITTINGS
        assert a.connected_ids == [f"{bend.id}:c0"]
        assert b.connected_ids == [f"{bend.id}:c1"]

    def test_bend_failure_injection(self):
        store = InMemoryModelStore(fail_bend_fittings=True)
        store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        store.add_run("P2", RunKind.PIPE, (1, 0, 0), (1, 0, 1))
        with pytest.raises(ModelStoreError):
            store.create_bend_fitting(store.get_connector("P1:c1"), store.get_connector("P2:c0"))


class TestTransactions:
    """Commit and rollback semantics."""

    def test_commit_keeps_changes(self, store):
        with store.transaction("add segment") as tx:
            store.create_segment(RunKind.PIPE, CrossSection(diameter=0.5), (0, 0, 0), (1, 0, 0))
        assert tx.status == "committed"
        assert store.segments_created == 1
        assert store.transaction_log == [("add segment", "committed")]

    def test_explicit_rollback_restores_snapshot(self, store):
        store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        with store.transaction("replace") as tx:
            store.delete_element("P1")
            store.create_segment(RunKind.PIPE, CrossSection(diameter=0.5), (0, 0, 0), (1, 0, 1))
            tx.rollback()
        assert tx.status == "rolled_back"
        assert store.has_element("P1")
        assert store.segments_created == 0
        assert [e.id for e in store.elements] == ["P1"]
        assert store.transaction_log == [("replace", "rolled_back")]

    def test_exception_rolls_back_and_propagates(self, store):
        store.add_run("P1", RunKind.PIPE, (0, 0, 0), (1, 0, 0))
        with pytest.raises(RuntimeError):
            with store.transaction("broken"):
                store.delete_element("P1")
                raise RuntimeError("host crashed")
        assert store.has_element("P1")
        assert store.get_connector("P1:c0") is not None

    def test_rollback_is_idempotent(self, store):
        tx = store.begin_transaction("noop")
        tx.rollback()
        tx.rollback()
        tx.commit()
        assert tx.status == "rolled_back"
        assert store.transaction_log == [("noop", "rolled_back")]
