# File: src/mep_autoavoid/clash/clash_detector.py
"""
Clash detection along a run's centerline.

Only the nearest conflict is reported: one planning pass resolves exactly one
clash. Clearance is approximated by growing obstacle boxes, so non axis
aligned obstacles may produce false negatives near their corners.
"""

import logging
from typing import Optional, Sequence

from ..config.options import AvoidanceOptions
from ..core.mep_system import LinearRun
from ..geometry.kernel import (
    Point3,
    closest_points_between_segments,
    distance,
    expand_box,
    line_intersects_box,
    midpoint,
    point_to_segment_distance,
)
from ..utils.logging_config import get_logger
from .obstacle import ClashRecord, Obstacle

_logger = get_logger(__name__)


class ClashDetector:
    """
    Finds conflicts between runs and obstacles.

    Args:
        logger: Component logger, defaults to the module logger
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or _logger

    def first_clash_along(
        self,
        run: LinearRun,
        obstacles: Sequence[Obstacle],
        options: AvoidanceOptions
    ) -> Optional[ClashRecord]:
        """
        Find the nearest obstacle conflicting with a run.

        Every obstacle is tested by intersecting the run centerline with its
        box grown by the clearance, scoring it by the distance from the box
        center to the run. Linear obstacles are also tested with the true
        segment distance against ``run.radius + obstacle.radius + clearance``,
        and the smaller qualifying distance is kept for that obstacle.

        Args:
            run: Run to test
            obstacles: Candidate obstacles
            options: Avoidance options (clearance)

        Returns:
            ClashRecord for the obstacle with the smallest distance, or None
        """
        clearance = options.clearance
        best: Optional[ClashRecord] = None

        for obstacle in obstacles:
            candidate = self._test_obstacle(run, obstacle, clearance)
            if candidate is None:
                continue
            # Strict comparison keeps the first obstacle on ties
            if best is None or candidate.distance < best.distance:
                best = candidate

        if best is None:
            self.logger.info(f"No clash found for run {run.id}")
        else:
            self.logger.info(
                f"Run {run.id} clashes with {best.obstacle.element_id} "
                f"(distance {best.distance:.4f}, precise={best.precise})"
            )
        return best

    def _test_obstacle(
        self,
        run: LinearRun,
        obstacle: Obstacle,
        clearance: float
    ) -> Optional[ClashRecord]:
        record: Optional[ClashRecord] = None

        expanded = expand_box(obstacle.box, clearance)
        if line_intersects_box(run.start, run.end, expanded):
            center = obstacle.box.center
            d = point_to_segment_distance(center, run.start, run.end)
            self.logger.debug(f"Box test: {obstacle.element_id} intersects, center distance {d:.4f}")
            record = ClashRecord(run, obstacle, d, center, precise=False)

        if obstacle.centerline is not None:
            start, end = obstacle.centerline
            _, _, c1, c2 = closest_points_between_segments(run.start, run.end, start, end)
            d = distance(c1, c2)
            threshold = run.radius + obstacle.radius + clearance
            # The segment hit replaces the box hit only when strictly nearer
            if d <= threshold and (record is None or d < record.distance):
                self.logger.debug(
                    f"Segment test: {obstacle.element_id} at {d:.4f} <= {threshold:.4f}"
                )
                record = ClashRecord(run, obstacle, d, midpoint(c1, c2), precise=True)

        return record

    def validate_path(
        self,
        path: Sequence[Point3],
        obstacles: Sequence[Obstacle],
        options: AvoidanceOptions
    ) -> bool:
        """
        Check every leg of a path against every obstacle's expanded box.

        Args:
            path: Waypoints of a candidate detour
            obstacles: Obstacles the path must avoid
            options: Avoidance options (clearance)

        Returns:
            False on the first leg that enters an expanded box, True otherwise
        """
        if len(path) < 2:
            self.logger.warning("Cannot validate a path with fewer than 2 points")
            return False

        expanded = [(o, expand_box(o.box, options.clearance)) for o in obstacles]
        for i in range(len(path) - 1):
            a, b = path[i], path[i + 1]
            for obstacle, box in expanded:
                if line_intersects_box(a, b, box):
                    self.logger.warning(
                        f"Path leg {i} intersects obstacle {obstacle.element_id}"
                    )
                    return False
        return True


def first_clash_along(
    run: LinearRun,
    obstacles: Sequence[Obstacle],
    options: AvoidanceOptions
) -> Optional[ClashRecord]:
    """Convenience wrapper around ClashDetector.first_clash_along."""
    return ClashDetector().first_clash_along(run, obstacles, options)


def validate_path(
    path: Sequence[Point3],
    obstacles: Sequence[Obstacle],
    options: AvoidanceOptions
) -> bool:
    """Convenience wrapper around ClashDetector.validate_path."""
    return ClashDetector().validate_path(path, obstacles, options)
