# File: src/mep_autoavoid/core/memory_store.py
"""
In-memory model store.

A self-contained implementation of ``ModelStore`` used by the test-suite and
for scripting outside a CAD host. Elements are plain dataclasses keyed by id;
transactions snapshot the whole store and restore it on rollback.

Example:
    >>> store = InMemoryModelStore()
    >>> run = store.add_run("P1", RunKind.PIPE, (0, 0, 0), (20, 0, 0),
    ...                     CrossSection(diameter=0.5))
    >>> store.add_obstacle("B1", ObstacleCategory.STRUCTURAL_FRAMING,
    ...                    BoundingBox((9, -1, -1), (11, 1, 1)))
"""

import copy
import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..geometry.kernel import (
    BoundingBox,
    Point3,
    expand_box,
    vector_normalize,
    vector_scale,
    vector_subtract,
    distance,
)
from .errors import ModelStoreError
from .mep_system import Connector, CrossSection, LinearRun, ObstacleCategory, RunKind
from .model_store import ModelStore, ModelTransaction
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ModelElement:
    """
    An element held by the in-memory store.

    Attributes:
        id: Unique element id
        category: Category the element is queried under
        box: Axis-aligned bounding box (None simulates a missing box)
        centerline: (start, end) for linear elements
        kind: Run kind when the element is a pipe, duct or conduit
        cross_section: Section of a linear run
        connector_ids: Ids of the element's connectors
        level_id: Reference level of a run
        type_id: Host type of a run
        metadata: Free-form attributes
    """
    id: str
    category: ObstacleCategory
    box: Optional[BoundingBox] = None
    centerline: Optional[Tuple[Point3, Point3]] = None
    kind: Optional[RunKind] = None
    cross_section: CrossSection = field(default_factory=CrossSection)
    connector_ids: List[str] = field(default_factory=list)
    level_id: Optional[str] = None
    type_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_run(self) -> bool:
        return self.kind is not None and self.centerline is not None


def _segment_box(start: Point3, end: Point3, radius: float) -> BoundingBox:
    box = BoundingBox(
        min=tuple(min(start[i], end[i]) for i in range(3)),
        max=tuple(max(start[i], end[i]) for i in range(3)),
    )
    return expand_box(box, radius)


class InMemoryModelStore(ModelStore):
    """
    Dictionary-backed model store.

    Args:
        fail_segment_creation_after: If set, ``create_segment`` raises
            ModelStoreError once this many segments have been created
        fail_bend_fittings: If True, ``create_bend_fitting`` always raises
    """

    def __init__(
        self,
        fail_segment_creation_after: Optional[int] = None,
        fail_bend_fittings: bool = False
    ):
        self._elements: Dict[str, ModelElement] = {}
        self._connectors: Dict[str, Connector] = {}
        self._ids = itertools.count(1)
        self.fail_segment_creation_after = fail_segment_creation_after
        self.fail_bend_fittings = fail_bend_fittings
        self.segments_created = 0
        self.mutation_count = 0
        self.transaction_log: List[Tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Scene building
    # ------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        candidate = f"{prefix}-{next(self._ids)}"
        while candidate in self._elements:
            candidate = f"{prefix}-{next(self._ids)}"
        return candidate

    def _add_end_connectors(self, element: ModelElement) -> None:
        start, end = element.centerline
        outward = vector_normalize(vector_subtract(end, start))
        for suffix, origin, direction in (
            ("c0", start, vector_scale(outward, -1.0)),
            ("c1", end, outward),
        ):
            connector = Connector(
                id=f"{element.id}:{suffix}",
                owner_id=element.id,
                origin=tuple(origin),
                direction=direction,
            )
            self._connectors[connector.id] = connector
            element.connector_ids.append(connector.id)

    def add_run(
        self,
        element_id: str,
        kind: RunKind,
        start: Point3,
        end: Point3,
        cross_section: Optional[CrossSection] = None,
        level_id: Optional[str] = "L1",
        type_id: Optional[str] = None,
        box: Optional[BoundingBox] = None
    ) -> LinearRun:
        """Add a pipe, duct or conduit with two end connectors."""
        section = cross_section or CrossSection()
        element = ModelElement(
            id=element_id,
            category=ObstacleCategory.MEP_CURVES,
            box=box or _segment_box(start, end, section.radius),
            centerline=(tuple(start), tuple(end)),
            kind=kind,
            cross_section=section,
            level_id=level_id,
            type_id=type_id,
        )
        self._elements[element.id] = element
        self._add_end_connectors(element)
        return self.get_linear_run(element)

    def add_obstacle(
        self,
        element_id: str,
        category: ObstacleCategory,
        box: Optional[BoundingBox],
        **metadata: Any
    ) -> ModelElement:
        """Add a non-linear obstacle (beam, wall, floor, fitting)."""
        element = ModelElement(id=element_id, category=category, box=box, metadata=metadata)
        self._elements[element.id] = element
        return element

    def add_fitting(self, element_id: str, origin: Point3, size: float = 0.5) -> ModelElement:
        """Add a fitting with one free connector at ``origin``."""
        half = size * 0.5
        element = self.add_obstacle(
            element_id,
            ObstacleCategory.FITTINGS,
            BoundingBox(
                min=(origin[0] - half, origin[1] - half, origin[2] - half),
                max=(origin[0] + half, origin[1] + half, origin[2] + half),
            ),
        )
        connector = Connector(
            id=f"{element_id}:c0", owner_id=element_id,
            origin=tuple(origin), direction=(0.0, 0.0, 1.0),
        )
        self._connectors[connector.id] = connector
        element.connector_ids.append(connector.id)
        return element

    def get_element(self, element_id: str) -> Optional[ModelElement]:
        return self._elements.get(element_id)

    @property
    def elements(self) -> List[ModelElement]:
        return list(self._elements.values())

    def runs(self) -> List[LinearRun]:
        return [self.get_linear_run(e) for e in self._elements.values() if e.is_run]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryModelStore":
        """
        Build a store from a scene dictionary.

        Expected shape::

            {
              "runs": [{"id", "kind", "start", "end", "cross_section", "level_id"}],
              "obstacles": [{"id", "category", "box": {"min", "max"}}],
              "connections": [["P1:c1", "F1:c0"], ...]
            }
        """
        store = cls()
        for run in data.get("runs", []):
            store.add_run(
                run["id"],
                RunKind.from_string(run["kind"]),
                tuple(run["start"]),
                tuple(run["end"]),
                CrossSection.from_dict(run.get("cross_section", {})),
                level_id=run.get("level_id", "L1"),
                type_id=run.get("type_id"),
            )
        for obs in data.get("obstacles", []):
            box = BoundingBox.from_dict(obs["box"]) if obs.get("box") else None
            store.add_obstacle(obs["id"], ObstacleCategory(obs["category"]), box)
        for fitting in data.get("fittings", []):
            store.add_fitting(fitting["id"], tuple(fitting["origin"]), fitting.get("size", 0.5))
        for a_id, b_id in data.get("connections", []):
            store.connect(store._connectors[a_id], store._connectors[b_id])
        return store

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _resolve(self, element: Any) -> ModelElement:
        element_id = self.element_id(element)
        resolved = self._elements.get(element_id)
        if resolved is None:
            raise ModelStoreError(f"Element '{element_id}' does not exist")
        return resolved

    def element_id(self, element: Any) -> str:
        # Accepts raw ids, ModelElements and LinearRuns alike
        if isinstance(element, str):
            return element
        return element.id

    def has_element(self, element: Any) -> bool:
        return self.element_id(element) in self._elements

    def element_category(self, element: Any) -> Optional[ObstacleCategory]:
        return self._resolve(element).category

    def get_bounding_box(self, element: Any) -> Optional[BoundingBox]:
        return self._resolve(element).box

    def get_centerline_segment(self, element: Any) -> Optional[Tuple[Point3, Point3]]:
        return self._resolve(element).centerline

    def get_radius(self, element: Any) -> float:
        return self._resolve(element).cross_section.radius

    def get_connectors(self, element: Any) -> List[Connector]:
        return [self._connectors[cid] for cid in self._resolve(element).connector_ids]

    def get_connector(self, connector_id: str) -> Optional[Connector]:
        return self._connectors.get(connector_id)

    def get_linear_run(self, element: Any) -> Optional[LinearRun]:
        resolved = self._resolve(element)
        if not resolved.is_run:
            return None
        start, end = resolved.centerline
        return LinearRun(
            id=resolved.id,
            kind=resolved.kind,
            start=start,
            end=end,
            cross_section=resolved.cross_section,
            element=resolved,
            level_id=resolved.level_id,
            type_id=resolved.type_id,
        )

    def query_by_category(self, category: ObstacleCategory, scope: Any = None) -> List[Any]:
        """
        Elements of a category.

        Args:
            category: Category to query
            scope: Optional collection of element ids (a "view"); None means
                the whole model
        """
        visible = set(scope) if scope is not None else None
        return [
            e for e in self._elements.values()
            if e.category == category and (visible is None or e.id in visible)
        ]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_segment(
        self,
        kind: RunKind,
        cross_section: CrossSection,
        start: Point3,
        end: Point3,
        template: Optional[LinearRun] = None
    ) -> LinearRun:
        if (
            self.fail_segment_creation_after is not None
            and self.segments_created >= self.fail_segment_creation_after
        ):
            raise ModelStoreError(
                f"Host refused to create {kind.value} segment",
                extra={"start": list(start), "end": list(end)},
            )
        if distance(start, end) <= 0.0:
            raise ModelStoreError(f"Cannot create zero-length {kind.value} segment")

        element = ModelElement(
            id=self._next_id(kind.value),
            category=ObstacleCategory.MEP_CURVES,
            box=_segment_box(start, end, cross_section.radius),
            centerline=(tuple(start), tuple(end)),
            kind=kind,
            cross_section=cross_section,
            level_id=template.level_id if template else None,
            type_id=template.type_id if template else None,
        )
        self._elements[element.id] = element
        self._add_end_connectors(element)
        self.segments_created += 1
        self.mutation_count += 1
        return self.get_linear_run(element)

    def set_cross_section(self, run: LinearRun, cross_section: CrossSection) -> None:
        element = self._resolve(run)
        element.cross_section = cross_section
        start, end = element.centerline
        element.box = _segment_box(start, end, cross_section.radius)
        self.mutation_count += 1

    def delete_element(self, element: Any) -> None:
        resolved = self._resolve(element)
        for cid in resolved.connector_ids:
            connector = self._connectors.pop(cid)
            for other_id in connector.connected_ids:
                other = self._connectors.get(other_id)
                if other and cid in other.connected_ids:
                    other.connected_ids.remove(cid)
        del self._elements[resolved.id]
        self.mutation_count += 1

    def create_bend_fitting(self, connector_a: Connector, connector_b: Connector) -> Any:
        if self.fail_bend_fittings:
            raise ModelStoreError("Host refused to create bend fitting")
        a = self._connectors[connector_a.id]
        b = self._connectors[connector_b.id]
        owner = self._elements.get(a.owner_id)
        radius = owner.cross_section.radius if owner else 0.0
        fitting = ModelElement(
            id=self._next_id("bend"),
            category=ObstacleCategory.FITTINGS,
            box=expand_box(BoundingBox(min=a.origin, max=a.origin), radius),
            metadata={"joins": [a.id, b.id]},
        )
        self._elements[fitting.id] = fitting
        for suffix, target in (("c0", a), ("c1", b)):
            port = Connector(
                id=f"{fitting.id}:{suffix}",
                owner_id=fitting.id,
                origin=target.origin,
                direction=vector_scale(target.direction, -1.0),
            )
            self._connectors[port.id] = port
            fitting.connector_ids.append(port.id)
            self.connect(port, target)
        self.mutation_count += 1
        return fitting

    def connect(self, connector_a: Connector, connector_b: Connector) -> None:
        a = self._connectors[connector_a.id]
        b = self._connectors[connector_b.id]
        if b.id not in a.connected_ids:
            a.connected_ids.append(b.id)
        if a.id not in b.connected_ids:
            b.connected_ids.append(a.id)
        self.mutation_count += 1

    def disconnect(self, connector_a: Connector, connector_b: Connector) -> None:
        a = self._connectors[connector_a.id]
        b = self._connectors[connector_b.id]
        if b.id in a.connected_ids:
            a.connected_ids.remove(b.id)
        if a.id in b.connected_ids:
            b.connected_ids.remove(a.id)
        self.mutation_count += 1

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin_transaction(self, name: str) -> ModelTransaction:
        snapshot = (
            copy.deepcopy(self._elements),
            copy.deepcopy(self._connectors),
            self.segments_created,
            self.mutation_count,
        )

        def restore() -> None:
            (
                self._elements,
                self._connectors,
                self.segments_created,
                self.mutation_count,
            ) = snapshot
            self.transaction_log.append((name, "rolled_back"))

        def record_commit() -> None:
            self.transaction_log.append((name, "committed"))

        return ModelTransaction(name, on_commit=record_commit, on_rollback=restore)
