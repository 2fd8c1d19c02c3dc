# File: src/mep_autoavoid/clash/obstacle.py
"""
Obstacle and clash records.

Both are ephemeral: obstacles are re-queried for every detection pass and a
ClashRecord only lives through one detection→planning cycle.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.mep_system import LinearRun, ObstacleCategory
from ..geometry.kernel import BoundingBox, Point3


@dataclass
class Obstacle:
    """
    A model element tested for conflicts against a run.

    Attributes:
        element_id: Id of the owning element
        category: Category the element was collected under
        box: Axis-aligned bounding box
        centerline: (start, end) when the obstacle is itself a linear run
        radius: Section radius of a linear obstacle (0 otherwise)
        element: Handle of the element in the model store
    """
    element_id: str
    category: ObstacleCategory
    box: BoundingBox
    centerline: Optional[Tuple[Point3, Point3]] = None
    radius: float = 0.0
    element: Any = None

    @property
    def is_linear(self) -> bool:
        return self.centerline is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "element_id": self.element_id,
            "category": self.category.value,
            "box": self.box.to_dict(),
            "centerline": [list(p) for p in self.centerline] if self.centerline else None,
            "radius": self.radius,
        }


@dataclass
class ClashRecord:
    """
    The nearest conflict found along a run.

    Attributes:
        run: The conflicting run
        obstacle: The nearest conflicting obstacle
        distance: Computed minimum distance (model units)
        clash_point: Approximate location of the conflict
        precise: True if produced by the segment-to-segment test
    """
    run: LinearRun
    obstacle: Obstacle
    distance: float
    clash_point: Point3
    precise: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run.id,
            "obstacle_id": self.obstacle.element_id,
            "distance": self.distance,
            "clash_point": list(self.clash_point),
            "precise": self.precise,
        }
