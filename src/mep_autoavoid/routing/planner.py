# File: src/mep_autoavoid/routing/planner.py
"""
Detour planning for clashing runs.

Converts one ClashRecord into a DetourPlan by walking an ordered list of
direction candidates:

- Rectangular detour: a 4-point path shifted sideways or vertically by the
  obstacle's half-thickness plus clearance plus extra offset.
- Vertical hump: a 6-point path rising (or dropping) over the obstacle with
  bends at the configured angle. Horizontal runs only.
- Picked points: a 6-point hump between two user-selected points, without
  clash detection.

Each pass resolves exactly one clash. The produced path is not checked
against other obstacles here; see ``ClashDetector.validate_path``.
"""

import logging
import math
from typing import Iterable, List, Optional

from ..clash.obstacle import ClashRecord
from ..config.options import AvoidanceOptions
from ..config.units import mm_to_model
from ..core.mep_system import DirectionMode, LinearRun
from ..geometry.kernel import (
    BASIS_Z,
    TOLERANCE,
    ZERO,
    Point3,
    Vector3,
    dot,
    is_nearly_horizontal,
    is_zero_length,
    perpendicular_horizontal,
    project_point_on_segment,
    vector_add,
    vector_scale,
    vector_subtract,
)
from ..utils.logging_config import get_logger
from .detour_plan import DetourPlan, DetourStrategy

_logger = get_logger(__name__)

# Straight length (model units) that must remain between a run end and a bend
MIN_STRAIGHT_MARGIN = 0.5

# Minimum extension (model units) of a rectangular detour past the clash point
FAR_POINT_MIN_EXTENSION = 2.0


def direction_vector(mode: DirectionMode, run_direction: Vector3) -> Vector3:
    """
    Offset direction for a non-flip direction mode.

    Args:
        mode: Direction mode
        run_direction: Unit direction of the run

    Returns:
        Unit offset vector, or the zero vector for modes without one
    """
    if mode == DirectionMode.UP:
        return BASIS_Z
    if mode == DirectionMode.DOWN:
        return vector_scale(BASIS_Z, -1.0)
    if mode == DirectionMode.LEFT:
        return perpendicular_horizontal(run_direction, left_side=True)
    if mode == DirectionMode.RIGHT:
        return perpendicular_horizontal(run_direction, left_side=False)
    return ZERO


def build_direction_order(
    run: LinearRun,
    clash: ClashRecord,
    mode: DirectionMode
) -> List[DirectionMode]:
    """
    Ordered direction candidates for a clash.

    An explicit mode yields a single candidate. AUTO orders candidates from
    the run orientation and the obstacle position relative to the run
    midpoint: horizontal runs try the vertical hump first, then the vertical
    side away from the obstacle, then the horizontal sides; other runs try
    the horizontal sides before Up and Down.
    """
    if mode != DirectionMode.AUTO:
        return [mode]

    run_dir = run.direction
    to_obstacle = vector_subtract(clash.clash_point, run.midpoint)
    left = perpendicular_horizontal(run_dir, left_side=True)
    if dot(to_obstacle, left) > 0:
        sides = [DirectionMode.RIGHT, DirectionMode.LEFT]
    else:
        sides = [DirectionMode.LEFT, DirectionMode.RIGHT]

    if is_nearly_horizontal(run_dir):
        if to_obstacle[2] > 0:
            vertical = [DirectionMode.DOWN, DirectionMode.UP]
        else:
            vertical = [DirectionMode.UP, DirectionMode.DOWN]
        return [DirectionMode.VERTICAL_FLIP] + vertical + sides

    return sides + [DirectionMode.UP, DirectionMode.DOWN]


class RoutingPlanner:
    """
    Produces detour plans for clashes.

    Args:
        logger: Component logger, defaults to the module logger

    Example:
        >>> planner = RoutingPlanner()
        >>> plan = planner.plan_detour(run, clash, options)
        >>> plan.path[0] == run.start
        True
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or _logger

    def plan_detour(
        self,
        run: LinearRun,
        clash: ClashRecord,
        options: AvoidanceOptions,
        exclude: Iterable[DirectionMode] = ()
    ) -> Optional[DetourPlan]:
        """
        Plan a detour around the obstacle of ``clash``.

        Args:
            run: The clashing run
            clash: Nearest clash found on the run
            options: Avoidance options
            exclude: Direction modes that must not be tried (used when a
                previous plan failed validation)

        Returns:
            The first feasible plan, or None when every candidate fails
        """
        excluded = set(exclude)
        if run.length <= TOLERANCE:
            self.logger.warning(f"Run {run.id} has zero length, cannot plan a detour")
            return None

        candidates = build_direction_order(run, clash, options.direction)
        self.logger.debug(
            f"Direction order for run {run.id}: {', '.join(m.value for m in candidates)}"
        )

        for mode in candidates:
            if mode in excluded:
                continue
            if mode == DirectionMode.VERTICAL_FLIP:
                plan = self.plan_vertical_hump(run, clash, options)
            else:
                plan = self._plan_rectangular(run, clash, mode, options)
            if plan is not None:
                return plan

        self.logger.warning(f"No feasible detour for run {run.id}")
        return None

    def _plan_rectangular(
        self,
        run: LinearRun,
        clash: ClashRecord,
        mode: DirectionMode,
        options: AvoidanceOptions
    ) -> Optional[DetourPlan]:
        run_dir = run.direction
        off_dir = direction_vector(mode, run_dir)
        if is_zero_length(off_dir):
            return None

        offset = clash.obstacle.box.max_half_extent + options.clearance + options.extra_offset
        shift = vector_scale(off_dir, offset)
        if is_zero_length(shift):
            return None

        p0, p3 = run.start, run.end
        walk = mm_to_model(options.auto_walk_distance_mm, options.model_units)
        t = dot(vector_subtract(clash.clash_point, p0), run_dir)
        t_end = max(run.length, t + FAR_POINT_MIN_EXTENSION + walk)

        p1 = vector_add(vector_add(p0, vector_scale(run_dir, t - walk)), shift)
        p2 = vector_add(vector_add(p0, vector_scale(run_dir, t_end)), shift)

        self.logger.debug(f"Rectangular detour {mode.value}: offset {offset:.4f}")
        return DetourPlan(
            path=[p0, p1, p2, p3],
            direction=mode,
            strategy=DetourStrategy.RECTANGULAR,
            offset=offset,
        )

    def plan_vertical_hump(
        self,
        run: LinearRun,
        clash: ClashRecord,
        options: AvoidanceOptions
    ) -> Optional[DetourPlan]:
        """
        Plan a vertical hump over or under the obstacle.

        The hump rises when the run sits below the obstacle's vertical
        midpoint and drops otherwise. The required height ``h`` is the
        distance to the obstacle top (or bottom) plus clearance and extra
        offset; each ramp consumes ``h / tan(bend_angle)`` of run length.

        Returns:
            A 6-waypoint plan, or None for non-horizontal runs, runs too
            short to host the hump, and square bends that leave no top span
        """
        run_dir = run.direction
        if not is_nearly_horizontal(run_dir):
            self.logger.debug(f"Run {run.id} is not horizontal, vertical hump not applicable")
            return None

        box = clash.obstacle.box
        top, bottom = box.max[2], box.min[2]
        run_z = run.start[2]
        flip_up = run_z < (top + bottom) / 2.0
        if flip_up:
            h = top - run_z + options.clearance + options.extra_offset
        else:
            h = run_z - bottom + options.clearance + options.extra_offset

        run_up = h / math.tan(math.radians(options.bend_angle))
        if run_up <= TOLERANCE:
            self.logger.debug(
                f"Bend angle {options.bend_angle} leaves no top span for a hump on run {run.id}"
            )
            return None
        _, projected = project_point_on_segment(clash.clash_point, run.start, run.end)
        before = vector_add(projected, vector_scale(run_dir, -run_up))
        after = vector_add(projected, vector_scale(run_dir, run_up))

        t_before = dot(vector_subtract(before, run.start), run_dir)
        t_after = dot(vector_subtract(after, run.start), run_dir)
        if t_before < MIN_STRAIGHT_MARGIN or t_after > run.length - MIN_STRAIGHT_MARGIN:
            self.logger.debug(
                f"Run {run.id} too short for vertical hump: needs {2 * run_up:.4f} "
                f"of {run.length:.4f}"
            )
            return None

        lift = (0.0, 0.0, h if flip_up else -h)
        path = [
            run.start,
            before,
            vector_add(before, lift),
            vector_add(after, lift),
            after,
            run.end,
        ]
        self.logger.debug(
            f"Vertical hump {'up' if flip_up else 'down'}: height {h:.4f}, run-up {run_up:.4f}"
        )
        return DetourPlan(
            path=path,
            direction=DirectionMode.VERTICAL_FLIP,
            strategy=DetourStrategy.VERTICAL_HUMP,
            offset=h,
            metadata={"run_up": run_up, "flip_up": flip_up},
        )

    def plan_between_points(
        self,
        run: LinearRun,
        point_a: Point3,
        point_b: Point3,
        options: AvoidanceOptions
    ) -> Optional[DetourPlan]:
        """
        Plan a hump between two picked points.

        Both points are projected onto the run and ordered along it. The
        section between them is lifted by the extra offset (lowered when the
        direction is DOWN), with ramps inset by ``offset / tan(bend_angle)``.

        Args:
            run: Run to bend
            point_a: First picked point
            point_b: Second picked point
            options: Avoidance options (extra offset, bend angle, direction)

        Returns:
            A 6-waypoint plan, or None if the points coincide, fall on the run
            ends, or are too close for the ramps
        """
        run_dir = run.direction
        t_a, a = project_point_on_segment(point_a, run.start, run.end)
        t_b, b = project_point_on_segment(point_b, run.start, run.end)
        if t_a > t_b:
            t_a, t_b = t_b, t_a
            a, b = b, a

        length = run.length
        if (t_b - t_a) * length <= TOLERANCE:
            self.logger.warning(f"Picked points coincide on run {run.id}")
            return None
        if t_a * length <= TOLERANCE or (1.0 - t_b) * length <= TOLERANCE:
            self.logger.warning(f"Picked points must lie strictly inside run {run.id}")
            return None

        offset = options.extra_offset
        if offset <= TOLERANCE:
            self.logger.warning("Extra offset is zero, nothing to bend")
            return None
        flip_up = options.direction != DirectionMode.DOWN
        inset = abs(offset / math.tan(math.radians(options.bend_angle)))
        if (t_b - t_a) * length - 2 * inset <= TOLERANCE:
            self.logger.warning(
                f"Picked points on run {run.id} are too close for a {options.bend_angle} degree bend"
            )
            return None

        lift = (0.0, 0.0, offset if flip_up else -offset)
        raised_a = vector_add(vector_add(a, lift), vector_scale(run_dir, inset))
        raised_b = vector_add(vector_add(b, lift), vector_scale(run_dir, -inset))

        path = [run.start, a, raised_a, raised_b, b, run.end]
        self.logger.info(
            f"Picked-point bend on run {run.id}: offset {offset:.4f} "
            f"{'up' if flip_up else 'down'}, inset {inset:.4f}"
        )
        return DetourPlan(
            path=path,
            direction=DirectionMode.DOWN if not flip_up else DirectionMode.UP,
            strategy=DetourStrategy.PICKED_POINTS,
            offset=offset,
            metadata={"inset": inset},
        )
