# File: src/mep_autoavoid/processing/processor.py
"""
Run processing: collect → detect → plan → reconstruct.

Each run is processed end to end before the next one is considered. Every
exception raised while processing a run is caught at the run boundary and
turned into a failed ReportEntry, so one run cannot abort a batch.
"""

import logging
import time
from typing import Any, Iterable, List, Optional, Set, Tuple

from ..clash.clash_detector import ClashDetector
from ..clash.obstacle import ClashRecord, Obstacle
from ..clash.obstacle_collector import ObstacleCollector
from ..config.options import AvoidanceOptions
from ..core.errors import AutoAvoidError, ErrorKind, GeometryQueryError
from ..core.mep_system import DirectionMode, LinearRun
from ..core.model_store import ModelStore
from ..geometry.kernel import Point3
from ..reconstruction.engine import ReconstructionEngine
from ..routing.detour_plan import DetourPlan
from ..routing.planner import RoutingPlanner
from ..utils.logging_config import get_logger
from .report import BatchReport, ReportEntry

_logger = get_logger(__name__)


class AvoidanceProcessor:
    """
    Drives the avoidance cycle for single runs and batches.

    Args:
        model: Model store holding the runs and obstacles
        options: Avoidance options
        scope: View or scope limiting obstacle queries (None = whole model)
        logger: Logger for this processor; components log to its children.
            Defaults to the module loggers.

    Example:
        >>> with DiagnosticsSession(to_file=True) as session:
        ...     processor = AvoidanceProcessor(store, options,
        ...                                    logger=session.get_logger("processing"))
        ...     report = processor.process_runs(store.runs())
    """

    def __init__(
        self,
        model: ModelStore,
        options: AvoidanceOptions,
        scope: Any = None,
        logger: Optional[logging.Logger] = None
    ):
        self.model = model
        self.options = options
        self.scope = scope
        self.logger = logger or _logger

        def child(name: str) -> Optional[logging.Logger]:
            return logger.getChild(name) if logger else None

        self.collector = ObstacleCollector(child("collector"))
        self.detector = ClashDetector(child("detector"))
        self.planner = RoutingPlanner(child("planner"))
        self.engine = ReconstructionEngine(options.model_units, child("engine"))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_run(self, run: Any, excluded: Optional[Iterable[str]] = None) -> ReportEntry:
        """
        Process one run end to end.

        Args:
            run: LinearRun, element handle or element id
            excluded: Additional element ids never treated as obstacles
                (typically the other runs of a batch)

        Returns:
            ReportEntry describing the outcome
        """
        entry = ReportEntry(run_id=self._run_id(run))
        try:
            self._process(self._resolve_run(run), entry, set(excluded or ()))
        except AutoAvoidError as e:
            self.logger.error(f"Run {entry.run_id} failed: {e.message}")
            entry.fail(e.error_kind, e.message)
        except Exception as e:
            self.logger.exception(f"Unexpected error processing run {entry.run_id}")
            entry.fail(ErrorKind.UNEXPECTED_ERROR, str(e))
        return entry

    def process_run_between_points(self, run: Any, point_a: Point3, point_b: Point3) -> ReportEntry:
        """
        Bend a run between two picked points, without clash detection.

        Args:
            run: LinearRun, element handle or element id
            point_a: First picked point
            point_b: Second picked point

        Returns:
            ReportEntry describing the outcome
        """
        entry = ReportEntry(run_id=self._run_id(run))
        try:
            resolved = self._resolve_run(run)
            if not self._check_kind(resolved, entry):
                return entry
            entry.attempts = 1
            plan = self.planner.plan_between_points(resolved, point_a, point_b, self.options)
            if plan is None:
                return entry.fail(
                    ErrorKind.NO_FEASIBLE_PLAN,
                    "Picked points do not allow a bend on this run",
                )
            self._record_plan(entry, plan)
            self._commit(resolved, plan, entry)
        except AutoAvoidError as e:
            self.logger.error(f"Run {entry.run_id} failed: {e.message}")
            entry.fail(e.error_kind, e.message)
        except Exception as e:
            self.logger.exception(f"Unexpected error bending run {entry.run_id}")
            entry.fail(ErrorKind.UNEXPECTED_ERROR, str(e))
        return entry

    def process_runs(self, runs: Iterable[Any]) -> BatchReport:
        """
        Process runs sequentially.

        Runs of the batch are excluded from each other's obstacle sets.

        Returns:
            BatchReport with one entry per run
        """
        runs = list(runs)
        batch_ids = {self._run_id(r) for r in runs}
        report = BatchReport(metadata={"options": self.options.to_dict()})
        self.logger.info(f"Processing {len(runs)} run(s)")

        started = time.perf_counter()
        for run in runs:
            run_id = self._run_id(run)
            entry = self.process_run(run, excluded=batch_ids - {run_id})
            report.add_entry(entry)
        report.statistics.processing_time_ms = (time.perf_counter() - started) * 1000.0

        stats = report.statistics
        self.logger.info(
            f"Batch done: {stats.succeeded} avoided, {stats.no_clash} without clash, "
            f"{stats.failed} failed"
        )
        return report

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def _process(self, run: LinearRun, entry: ReportEntry, excluded: Set[str]) -> None:
        if not self._check_kind(run, entry):
            return

        excluded = excluded | {run.id}
        if self.options.exclude_connected_neighbors:
            excluded |= self._connected_owner_ids(run)
        obstacles = self.collector.collect(self.model, self.scope, self.options, excluded)

        clash = self.detector.first_clash_along(run, obstacles, self.options)
        if clash is None:
            return
        entry.clash_found = True
        entry.obstacle_id = clash.obstacle.element_id

        plan, attempts = self._plan(run, clash, obstacles)
        entry.attempts = attempts
        if plan is None:
            entry.fail(ErrorKind.NO_FEASIBLE_PLAN, f"No feasible detour around {entry.obstacle_id}")
            self.logger.warning(f"Run {run.id}: {entry.failure_reason}")
            return

        self._record_plan(entry, plan)
        self._commit(run, plan, entry)

    def _plan(
        self,
        run: LinearRun,
        clash: ClashRecord,
        obstacles: List[Obstacle]
    ) -> Tuple[Optional[DetourPlan], int]:
        if not self.options.revalidate_plan:
            return self.planner.plan_detour(run, clash, self.options), 1

        rejected: List[DirectionMode] = []
        for attempt in range(1, self.options.max_tries + 1):
            plan = self.planner.plan_detour(run, clash, self.options, exclude=rejected)
            if plan is None:
                return None, attempt
            if self.detector.validate_path(plan.path, obstacles, self.options):
                return plan, attempt
            self.logger.info(
                f"Run {run.id}: {plan.direction.value} detour rejected on attempt {attempt}"
            )
            rejected.append(plan.direction)
        return None, self.options.max_tries

    def _commit(self, run: LinearRun, plan: DetourPlan, entry: ReportEntry) -> None:
        with self.model.transaction(f"Avoid run {run.id}") as tx:
            result = self.engine.replace(self.model, run, plan)
            if not result.is_ok:
                tx.rollback()

        if not result.is_ok:
            entry.fail(result.error_kind, result.message)
            self.logger.error(f"Run {run.id} rolled back: {result.message}")
            return

        outcome = result.value
        entry.reconstructed = True
        entry.segments_created = outcome.segments_created
        entry.bends_created = outcome.bends_created
        entry.unmatched_connectors = outcome.unmatched_connectors
        entry.warnings.extend(result.warnings)
        if outcome.bends_created < outcome.segments_created - 1:
            # Partial success: the run is rebuilt but some bends are missing
            entry.error_kind = ErrorKind.CONNECTOR_STITCH_FAILURE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_kind(self, run: LinearRun, entry: ReportEntry) -> bool:
        if run.kind in self.options.enabled_kinds():
            return True
        entry.fail(ErrorKind.UNSUPPORTED_RUN, f"{run.kind.value} runs are not targeted")
        self.logger.info(f"Skipping run {run.id}: {entry.failure_reason}")
        return False

    @staticmethod
    def _record_plan(entry: ReportEntry, plan: DetourPlan) -> None:
        entry.plan_found = True
        entry.strategy = plan.strategy.value
        entry.direction = plan.direction.value

    def _run_id(self, run: Any) -> str:
        if isinstance(run, LinearRun):
            return run.id
        return self.model.element_id(run)

    def _resolve_run(self, run: Any) -> LinearRun:
        if isinstance(run, LinearRun):
            return run
        resolved = self.model.get_linear_run(run)
        if resolved is None:
            raise GeometryQueryError(self._run_id(run), "straight centerline")
        return resolved

    def _connected_owner_ids(self, run: LinearRun) -> Set[str]:
        handle = run.element if run.element is not None else run.id
        owners = set()
        for connector in self.model.get_connectors(handle):
            for other_id in connector.connected_ids:
                other = self.model.get_connector(other_id)
                if other is not None:
                    owners.add(other.owner_id)
        return owners
