# File: src/mep_autoavoid/core/mep_system.py
"""
MEP run abstractions for the auto-avoid engine.

This module defines the core types shared by every stage of the engine:
- RunKind: Enum for linear run kinds (pipe, duct, conduit)
- ObstacleCategory: Enum for model categories queried as obstacles
- DirectionMode: Enum for detour direction preferences
- CrossSection: Round or rectangular section of a run
- Connector: Logical join point at the end of a run or fitting
- LinearRun: A straight run of constant cross-section
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Tuple, Optional

from ..geometry.kernel import (
    Point3,
    Vector3,
    distance,
    midpoint,
    vector_normalize,
    vector_subtract,
)


class RunKind(Enum):
    """
    Kinds of linear runs handled by the engine.

    Attributes:
        PIPE: Pressure/gravity pipe
        DUCT: Air duct (round or rectangular)
        CONDUIT: Electrical conduit
    """
    PIPE = "pipe"
    DUCT = "duct"
    CONDUIT = "conduit"

    def __str__(self) -> str:
        """Return the string value for display."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> "RunKind":
        """
        Create RunKind from string value.

        Args:
            value: String value (e.g., "pipe", "Duct")

        Returns:
            Corresponding RunKind enum member

        Raises:
            ValueError: If value doesn't match any kind
        """
        value_lower = value.lower()
        for member in cls:
            if member.value == value_lower:
                return member
        raise ValueError(
            f"Unknown run kind: {value}. "
            f"Valid kinds: {[m.value for m in cls]}"
        )


class ObstacleCategory(Enum):
    """Model categories that can be collected as obstacles."""
    STRUCTURAL_FRAMING = "structural_framing"
    WALLS = "walls"
    FLOORS = "floors"
    MEP_CURVES = "mep_curves"
    FITTINGS = "fittings"


class DirectionMode(Enum):
    """
    Detour direction preference.

    AUTO lets the planner order candidates from the run orientation and the
    obstacle position. VERTICAL_FLIP requests the vertical hump strategy.
    """
    AUTO = "auto"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    VERTICAL_FLIP = "vertical_flip"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CrossSection:
    """
    Cross-section of a linear run, in model units.

    Round sections carry a diameter; rectangular duct sections carry
    width and height.
    """
    diameter: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_round(self) -> bool:
        return self.diameter is not None

    @property
    def radius(self) -> float:
        """
        Approximate radius used for clash distance thresholds.

        Rectangular sections use half of the smaller side.
        """
        if self.diameter is not None and self.diameter > 0:
            return self.diameter * 0.5
        if self.width and self.height:
            return 0.5 * min(self.width, self.height)
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"diameter": self.diameter, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrossSection":
        return cls(
            diameter=data.get("diameter"),
            width=data.get("width"),
            height=data.get("height"),
        )


@dataclass
class Connector:
    """
    Logical endpoint interface of a run or fitting.

    Attributes:
        id: Unique identifier for this connector
        owner_id: Id of the owning run or fitting
        origin: (x, y, z) position in model coordinates
        direction: (x, y, z) unit vector pointing outward
        connected_ids: Ids of connectors this one is joined to
    """
    id: str
    owner_id: str
    origin: Point3
    direction: Vector3
    connected_ids: List[str] = field(default_factory=list)

    @property
    def is_connected(self) -> bool:
        return len(self.connected_ids) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "origin": list(self.origin),
            "direction": list(self.direction),
            "connected_ids": list(self.connected_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connector":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            origin=tuple(data["origin"]),
            direction=tuple(data.get("direction", (0.0, 0.0, 1.0))),
            connected_ids=list(data.get("connected_ids", [])),
        )


@dataclass
class LinearRun:
    """
    A straight run of constant cross-section.

    Attributes:
        id: Unique identifier of the run's element
        kind: Pipe, duct or conduit
        start: Start point of the centerline
        end: End point of the centerline
        cross_section: Section shared by every segment regenerated from it
        element: Handle of the owning element in the model store
        level_id: Reference level (required to recreate conduits)
        type_id: Host type of the run, copied onto new segments
    """
    id: str
    kind: RunKind
    start: Point3
    end: Point3
    cross_section: CrossSection = field(default_factory=CrossSection)
    element: Any = None
    level_id: Optional[str] = None
    type_id: Optional[str] = None

    @property
    def direction(self) -> Vector3:
        return vector_normalize(vector_subtract(self.end, self.start))

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    @property
    def radius(self) -> float:
        return self.cross_section.radius

    @property
    def midpoint(self) -> Point3:
        return midpoint(self.start, self.end)

    @property
    def centerline(self) -> Tuple[Point3, Point3]:
        return self.start, self.end

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "start": list(self.start),
            "end": list(self.end),
            "cross_section": self.cross_section.to_dict(),
            "level_id": self.level_id,
            "type_id": self.type_id,
        }
