# File: src/mep_autoavoid/reconstruction/engine.py
"""
Reconstruction of a run along a detour plan.

Protocol, shared by every run kind:

1. Capture the run's end connectors and the neighbour connectors they join.
2. Disconnect both ends.
3. Create one segment per consecutive waypoint pair.
4. Delete the original run.
5. Stitch bend fittings between the new segments.
6. Reconnect the outward ends to the captured neighbours.

A failure while creating segments aborts before the original run is
deleted. Segments created up to that point are left in place; the caller is
expected to roll back the surrounding model transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..config.units import ProjectUnits, convert_from_feet, mm_to_model
from ..core.errors import AutoAvoidError, ErrorKind, ReconstructionError, Result
from ..core.mep_system import Connector, LinearRun
from ..core.model_store import ModelStore
from ..geometry.kernel import Point3, distance, points_almost_equal
from ..routing.detour_plan import DetourPlan
from ..utils.logging_config import get_logger
from .realizers import RunRealizer, realizer_for
from .stitching import STITCH_TOLERANCE_FT, stitch_bends

_logger = get_logger(__name__)

# End connectors are captured within this distance of the run endpoints
CAPTURE_TOLERANCE_MM = 1.0


@dataclass
class ReconstructionOutcome:
    """
    What a reconstruction produced.

    Attributes:
        segments: New segments in path order
        original_deleted: Whether the original run was removed
        bends_created: Bend fittings created between segments
        unmatched_connectors: Internal connectors left free after stitching
        reconnected: Neighbour connections restored at the outward ends
    """
    segments: List[LinearRun] = field(default_factory=list)
    original_deleted: bool = False
    bends_created: int = 0
    unmatched_connectors: int = 0
    reconnected: int = 0

    @property
    def segments_created(self) -> int:
        return len(self.segments)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segment_ids": [s.id for s in self.segments],
            "original_deleted": self.original_deleted,
            "bends_created": self.bends_created,
            "unmatched_connectors": self.unmatched_connectors,
            "reconnected": self.reconnected,
        }


def _handle(run: LinearRun) -> Any:
    return run.element if run.element is not None else run.id


def connector_at(
    connectors: Sequence[Connector],
    point: Point3,
    tolerance: float
) -> Optional[Connector]:
    """Return the first connector within ``tolerance`` of ``point``."""
    for connector in connectors:
        if distance(connector.origin, point) < tolerance:
            return connector
    return None


class ReconstructionEngine:
    """
    Replaces a run by the segments of a detour plan.

    Args:
        model_units: Length units of the model (tolerances are converted)
        logger: Component logger, defaults to the module logger

    Example:
        >>> engine = ReconstructionEngine(ProjectUnits.FEET)
        >>> result = engine.replace(store, run, plan)
        >>> result.value.bends_created
        3
    """

    def __init__(
        self,
        model_units: Union[ProjectUnits, str] = ProjectUnits.FEET,
        logger: Optional[logging.Logger] = None
    ):
        self.model_units = model_units
        self.logger = logger or _logger
        self.capture_tolerance = mm_to_model(CAPTURE_TOLERANCE_MM, model_units)
        self.stitch_tolerance = convert_from_feet(STITCH_TOLERANCE_FT, model_units)

    def replace(
        self,
        model: ModelStore,
        run: LinearRun,
        plan: DetourPlan
    ) -> Result[ReconstructionOutcome]:
        """
        Realize ``plan`` in place of ``run``.

        Args:
            model: Model store to mutate
            run: Run being replaced
            plan: Detour plan whose endpoints equal the run's endpoints

        Returns:
            Result carrying the outcome. On failure the outcome describes the
            partial work done so far.
        """
        realizer = realizer_for(run.kind)
        if realizer is None:
            return Result.fail(ErrorKind.UNSUPPORTED_RUN, f"No realizer for {run.kind.value} runs")
        try:
            realizer.check(run)
        except ReconstructionError as e:
            self.logger.warning(e.message)
            return Result.fail(e.error_kind, e.message)

        if not (
            points_almost_equal(plan.start, run.start, self.capture_tolerance)
            and points_almost_equal(plan.end, run.end, self.capture_tolerance)
        ):
            message = f"Plan endpoints do not match run {run.id}"
            self.logger.error(message)
            return Result.fail(ErrorKind.RECONSTRUCTION_FAILURE, message)

        outcome = ReconstructionOutcome()

        # 1-2. capture and detach the end connections
        start_link, end_link = self._capture_ends(model, realizer, run)
        for own, neighbours in (start_link, end_link):
            for neighbour in neighbours:
                model.disconnect(own, neighbour)
        self.logger.debug(
            f"Run {run.id} end links: start={len(start_link[1])}, end={len(end_link[1])}"
        )

        # 3. create segments
        for i in range(plan.segment_count):
            try:
                segment = realizer.create_segment(model, run, plan.path[i], plan.path[i + 1])
            except AutoAvoidError as e:
                message = f"Creating segment {i} of run {run.id} failed: {e.message}"
                self.logger.error(message)
                return Result.fail(ErrorKind.RECONSTRUCTION_FAILURE, message, value=outcome)
            outcome.segments.append(segment)
            self.logger.debug(f"Created segment {i}: {segment.id}")

        # 4. delete the original
        try:
            model.delete_element(_handle(run))
        except AutoAvoidError as e:
            message = f"Deleting run {run.id} failed: {e.message}"
            self.logger.error(message)
            return Result.fail(ErrorKind.RECONSTRUCTION_FAILURE, message, value=outcome)
        outcome.original_deleted = True

        # 5. bends
        stitch = stitch_bends(
            model,
            outcome.segments,
            self.stitch_tolerance,
            outward_points=(run.start, run.end),
            log=self.logger,
        )
        outcome.bends_created = stitch.bends_created
        outcome.unmatched_connectors = stitch.unmatched_count

        # 6. restore neighbour connections
        outcome.reconnected = self._reconnect(
            model, realizer, outcome.segments[0], run.start, start_link[1]
        )
        outcome.reconnected += self._reconnect(
            model, realizer, outcome.segments[-1], run.end, end_link[1]
        )

        self.logger.info(
            f"Replaced run {run.id} with {outcome.segments_created} segment(s), "
            f"{outcome.bends_created} bend(s)"
        )
        return Result.ok(outcome, warnings=stitch.warnings)

    def _capture_ends(
        self,
        model: ModelStore,
        realizer: RunRealizer,
        run: LinearRun
    ) -> Tuple[Tuple[Optional[Connector], List[Connector]], ...]:
        connectors = realizer.get_connectors(model, _handle(run))
        links = []
        for point in (run.start, run.end):
            own = connector_at(connectors, point, self.capture_tolerance)
            neighbours = []
            if own is not None:
                neighbours = [
                    n for n in (model.get_connector(cid) for cid in list(own.connected_ids))
                    if n is not None
                ]
            links.append((own, neighbours))
        return tuple(links)

    def _reconnect(
        self,
        model: ModelStore,
        realizer: RunRealizer,
        segment: LinearRun,
        point: Point3,
        neighbours: List[Connector]
    ) -> int:
        if not neighbours:
            return 0
        outward = connector_at(
            realizer.get_connectors(model, _handle(segment)), point, self.capture_tolerance
        )
        if outward is None:
            self.logger.warning(f"No outward connector on {segment.id} to reconnect")
            return 0
        for neighbour in neighbours:
            model.connect(outward, neighbour)
        return len(neighbours)
