# File: src/mep_autoavoid/routing/detour_plan.py
"""
Detour plan representation.

A plan is the polyline that replaces a conflicting run: consecutive waypoints
become straight segments and bends occur only at waypoints.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from ..core.mep_system import DirectionMode
from ..geometry.kernel import TOLERANCE, Point3, distance


class DetourStrategy(Enum):
    """How a detour path was produced."""
    RECTANGULAR = "rectangular"
    VERTICAL_HUMP = "vertical_hump"
    PICKED_POINTS = "picked_points"


@dataclass
class DetourPlan:
    """
    An ordered waypoint polyline replacing a run.

    Attributes:
        path: Waypoints; the first and last equal the run's endpoints
        direction: Direction mode the plan was built for
        strategy: Strategy that produced the plan
        offset: Perpendicular (or vertical) offset distance in model units
        metadata: Additional planning details
    """
    path: List[Point3]
    direction: DirectionMode
    strategy: DetourStrategy = DetourStrategy.RECTANGULAR
    offset: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.path) < 3:
            raise ValueError(f"A detour plan needs at least 3 waypoints, got {len(self.path)}")
        if self.offset < 0:
            raise ValueError(f"Offset must be non-negative, got {self.offset}")
        for i in range(len(self.path) - 1):
            if distance(self.path[i], self.path[i + 1]) <= TOLERANCE:
                raise ValueError(f"Waypoints {i} and {i + 1} coincide")

    @property
    def start(self) -> Point3:
        return self.path[0]

    @property
    def end(self) -> Point3:
        return self.path[-1]

    @property
    def segment_count(self) -> int:
        """Number of straight segments the plan will be realized with."""
        return len(self.path) - 1

    def get_length(self) -> float:
        """Total polyline length."""
        return sum(
            distance(self.path[i], self.path[i + 1])
            for i in range(len(self.path) - 1)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": [list(p) for p in self.path],
            "direction": self.direction.value,
            "strategy": self.strategy.value,
            "offset": self.offset,
            "segment_count": self.segment_count,
            "length": self.get_length(),
            "metadata": self.metadata,
        }
