# File: src/mep_autoavoid/reconstruction/stitching.py
"""
Bend stitching between regenerated segments.

Free connectors of the new segments are paired when they belong to different
segments and coincide within tolerance; each pair receives a bend fitting.
Pairing is quadratic in the number of connectors, which stays small (two per
segment, a handful of segments per run).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ..core.errors import AutoAvoidError
from ..core.mep_system import Connector, LinearRun
from ..core.model_store import ModelStore
from ..geometry.kernel import Point3, points_almost_equal
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

# Connector coincidence tolerance, in feet
STITCH_TOLERANCE_FT = 0.01


@dataclass
class StitchResult:
    """
    Outcome of bend stitching.

    Attributes:
        bends: Bend fittings created
        unmatched: Internal connectors left free
        expected_bends: Bends needed to join every segment (segments - 1)
        warnings: Non-fatal issues
    """
    bends: List[Any] = field(default_factory=list)
    unmatched: List[Connector] = field(default_factory=list)
    expected_bends: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def bends_created(self) -> int:
        return len(self.bends)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)

    @property
    def is_complete(self) -> bool:
        return self.bends_created >= self.expected_bends


def stitch_bends(
    model: ModelStore,
    segments: Sequence[LinearRun],
    tolerance: float,
    outward_points: Sequence[Point3] = (),
    log: Optional[logging.Logger] = None
) -> StitchResult:
    """
    Join coincident free connectors of new segments with bend fittings.

    Args:
        model: Model store creating the fittings
        segments: Newly created segments, in path order
        tolerance: Coincidence tolerance in model units
        outward_points: Positions of the run's outward ends; free connectors
            there are expected and not reported as unmatched
        log: Logger to report to

    Returns:
        StitchResult with created bends and unmatched connectors
    """
    log = log or logger
    result = StitchResult(expected_bends=max(len(segments) - 1, 0))
    if len(segments) < 2:
        log.debug("Fewer than 2 segments, no bends needed")
        return result

    free: List[Connector] = []
    for segment in segments:
        handle = segment.element if segment.element is not None else segment.id
        free.extend(c for c in model.get_connectors(handle) if not c.is_connected)
    log.debug(f"Collected {len(free)} free connector(s) on {len(segments)} segment(s)")

    consumed = set()
    for i, first in enumerate(free):
        if first.id in consumed:
            continue
        for second in free[i + 1:]:
            if second.id in consumed or second.owner_id == first.owner_id:
                continue
            if not points_almost_equal(first.origin, second.origin, tolerance):
                continue
            try:
                bend = model.create_bend_fitting(first, second)
            except AutoAvoidError as e:
                message = f"Bend fitting between {first.id} and {second.id} failed: {e.message}"
                log.warning(message)
                result.warnings.append(message)
                continue
            consumed.update((first.id, second.id))
            result.bends.append(bend)
            log.debug(f"Bend #{len(result.bends)} joins {first.owner_id} and {second.owner_id}")
            break

    result.unmatched = [
        c for c in free
        if c.id not in consumed
        and not any(points_almost_equal(c.origin, p, tolerance) for p in outward_points)
    ]

    log.info(f"Created {result.bends_created} bend(s), expected {result.expected_bends}")
    if not result.is_complete:
        message = (
            f"Only {result.bends_created} of {result.expected_bends} bends created, "
            f"{result.unmatched_count} connector(s) left unmatched"
        )
        log.warning(message)
        result.warnings.append(message)
    return result
