# File: src/mep_autoavoid/core/model_store.py
"""
Model store interface.

The host CAD document owns elements, bounding boxes and connectors and
performs the actual solid creation and deletion. The engine only talks to it
through this interface, so a Revit adapter, a test double or the bundled
in-memory store can be swapped freely.

All mutations for one run are expected to happen inside a single
``transaction()``; the engine assumes it is the only writer for its duration.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

from ..geometry.kernel import BoundingBox, Point3
from .mep_system import Connector, CrossSection, LinearRun, ObstacleCategory, RunKind
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class ModelTransaction:
    """
    Handle for one exclusive mutation of the model.

    Commits when the ``transaction()`` block exits normally, rolls back when
    it raises or when ``rollback()`` was called explicitly inside the block.
    """

    def __init__(
        self,
        name: str,
        on_commit: Optional[Callable[[], None]] = None,
        on_rollback: Optional[Callable[[], None]] = None
    ):
        self.name = name
        self._on_commit = on_commit
        self._on_rollback = on_rollback
        self.status = "active"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def commit(self) -> None:
        if not self.is_active:
            return
        if self._on_commit:
            self._on_commit()
        self.status = "committed"
        logger.debug(f"Transaction '{self.name}' committed")

    def rollback(self) -> None:
        if not self.is_active:
            return
        if self._on_rollback:
            self._on_rollback()
        self.status = "rolled_back"
        logger.debug(f"Transaction '{self.name}' rolled back")


class ModelStore(ABC):
    """
    Abstract access to the host geometry model.

    Element arguments are opaque handles returned by the store itself
    (``query_by_category``, ``create_segment``, ``create_bend_fitting``).
    """

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @abstractmethod
    def element_id(self, element: Any) -> str:
        """Return the unique id of an element handle."""
        pass

    @abstractmethod
    def element_category(self, element: Any) -> Optional[ObstacleCategory]:
        """Category an element belongs to, or None if it is not collectable."""
        pass

    @abstractmethod
    def get_bounding_box(self, element: Any) -> Optional[BoundingBox]:
        """Axis-aligned bounding box of an element, or None."""
        pass

    @abstractmethod
    def get_centerline_segment(self, element: Any) -> Optional[Tuple[Point3, Point3]]:
        """Centerline of a linear element as (start, end), or None."""
        pass

    def get_radius(self, element: Any) -> float:
        """
        Approximate radius of a linear element.

        Defaults to 0.0 for stores that cannot report sections; clash
        thresholds then rely on the clearance alone.
        """
        return 0.0

    @abstractmethod
    def get_connectors(self, element: Any) -> List[Connector]:
        """Connectors of a run or fitting."""
        pass

    @abstractmethod
    def get_connector(self, connector_id: str) -> Optional[Connector]:
        """Look up a connector by id (used to follow connections)."""
        pass

    @abstractmethod
    def get_linear_run(self, element: Any) -> Optional[LinearRun]:
        """Describe a pipe, duct or conduit element as a LinearRun."""
        pass

    @abstractmethod
    def query_by_category(self, category: ObstacleCategory, scope: Any = None) -> List[Any]:
        """Elements of a category, optionally limited to a view or scope."""
        pass

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @abstractmethod
    def create_segment(
        self,
        kind: RunKind,
        cross_section: CrossSection,
        start: Point3,
        end: Point3,
        template: Optional[LinearRun] = None
    ) -> LinearRun:
        """
        Create a straight segment of the given kind and section.

        Args:
            kind: Run kind of the new segment
            cross_section: Section copied from the original run
            start: Segment start point
            end: Segment end point
            template: Original run whose type, level and system are copied

        Returns:
            The created segment

        Raises:
            ModelStoreError: If the host refuses to create the segment
        """
        pass

    @abstractmethod
    def set_cross_section(self, run: LinearRun, cross_section: CrossSection) -> None:
        """Apply a section to an existing segment."""
        pass

    @abstractmethod
    def delete_element(self, element: Any) -> None:
        pass

    @abstractmethod
    def create_bend_fitting(self, connector_a: Connector, connector_b: Connector) -> Any:
        """Create a bend fitting joining two free connectors."""
        pass

    @abstractmethod
    def connect(self, connector_a: Connector, connector_b: Connector) -> None:
        pass

    @abstractmethod
    def disconnect(self, connector_a: Connector, connector_b: Connector) -> None:
        pass

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @abstractmethod
    def begin_transaction(self, name: str) -> ModelTransaction:
        """Start an exclusive mutation; see ``transaction()``."""
        pass

    @contextmanager
    def transaction(self, name: str) -> Iterator[ModelTransaction]:
        """
        Run a block inside one all-or-nothing host transaction.

        Example:
            >>> with store.transaction("Avoid run 42") as tx:
            ...     if not engine.replace(store, run, plan).is_ok:
            ...         tx.rollback()
        """
        tx = self.begin_transaction(name)
        try:
            yield tx
        except Exception:
            tx.rollback()
            raise
        else:
            tx.commit()
