# File: src/mep_autoavoid/config/options.py
"""
Avoidance options.

Immutable parameter set consumed by the collector, detector, planner and
processor. Lengths are entered in millimetres and converted to model units
on demand through ``model_units``.
"""

import json
from typing import Any, Dict, List, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..core.mep_system import DirectionMode, ObstacleCategory, RunKind
from .units import ProjectUnits, mm_to_model

# Bend angles offered by standard elbow families (degrees)
ALLOWED_BEND_ANGLES = (22.5, 45.0, 90.0)
DEFAULT_BEND_ANGLE = 45.0


class AvoidanceOptions(BaseModel):
    """Validated, immutable avoidance parameters."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    clearance_mm: float = Field(
        default=50.0, ge=0, le=1000,
        description="Minimum distance between a run and an obstacle",
    )
    extra_offset_mm: float = Field(
        default=500.0, ge=0, le=5000,
        description="Additional safety offset applied to the detour",
    )
    bend_angle: float = Field(
        default=DEFAULT_BEND_ANGLE,
        description="Elbow angle in degrees (22.5, 45 or 90)",
    )
    auto_walk_distance_mm: float = Field(
        default=0.0, ge=0, le=10000,
        description="Extra extension on both sides of the obstacle",
    )
    direction: DirectionMode = Field(default=DirectionMode.AUTO)

    target_pipes: bool = True
    target_ducts: bool = False
    target_conduits: bool = False

    include_walls: bool = True
    include_floors: bool = True
    include_framing: bool = True
    include_mep: bool = True
    include_fittings: bool = True

    max_tries: int = Field(default=4, ge=1, le=10)
    model_units: ProjectUnits = Field(default=ProjectUnits.FEET)
    revalidate_plan: bool = Field(
        default=False,
        description="Check each plan against all obstacles and retry on conflict",
    )
    exclude_connected_neighbors: bool = Field(
        default=True,
        description="Do not treat elements attached to the run's ends as obstacles",
    )

    @field_validator("bend_angle", mode="before")
    @classmethod
    def normalize_bend_angle(cls, v: Any) -> float:
        """Unsupported bend angles fall back to 45 degrees."""
        try:
            value = float(v)
        except (TypeError, ValueError):
            return DEFAULT_BEND_ANGLE
        return value if value in ALLOWED_BEND_ANGLES else DEFAULT_BEND_ANGLE

    @field_validator("direction", mode="before")
    @classmethod
    def parse_direction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return DirectionMode(v.lower())
        return v

    @field_validator("model_units", mode="before")
    @classmethod
    def parse_units(cls, v: Any) -> Any:
        if isinstance(v, str):
            return ProjectUnits(v.lower())
        return v

    @model_validator(mode="after")
    def validate_selection(self) -> "AvoidanceOptions":
        """At least one target kind and one obstacle category must be selected."""
        if not (self.target_pipes or self.target_ducts or self.target_conduits):
            raise ValueError("At least one target element kind must be selected")
        if not (self.include_walls or self.include_floors or self.include_framing or self.include_mep):
            raise ValueError("At least one obstacle category must be selected")
        return self

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def clearance(self) -> float:
        """Clearance in model units."""
        return mm_to_model(self.clearance_mm, self.model_units)

    @property
    def extra_offset(self) -> float:
        """Extra offset in model units."""
        return mm_to_model(self.extra_offset_mm, self.model_units)

    def enabled_kinds(self) -> List[RunKind]:
        kinds = []
        if self.target_pipes:
            kinds.append(RunKind.PIPE)
        if self.target_ducts:
            kinds.append(RunKind.DUCT)
        if self.target_conduits:
            kinds.append(RunKind.CONDUIT)
        return kinds

    def enabled_categories(self) -> List[ObstacleCategory]:
        flags = [
            (self.include_framing, ObstacleCategory.STRUCTURAL_FRAMING),
            (self.include_walls, ObstacleCategory.WALLS),
            (self.include_floors, ObstacleCategory.FLOORS),
            (self.include_mep, ObstacleCategory.MEP_CURVES),
            (self.include_fittings, ObstacleCategory.FITTINGS),
        ]
        return [category for enabled, category in flags if enabled]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvoidanceOptions":
        return cls.model_validate(data)

    @classmethod
    def from_json_file(cls, path: str) -> "AvoidanceOptions":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


def validate_options(data: Union[Dict[str, Any], AvoidanceOptions]) -> Tuple[bool, List[str]]:
    """
    Validate raw option values without raising.

    Args:
        data: Raw option dictionary (or already-built options)

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    if isinstance(data, AvoidanceOptions):
        return True, []
    try:
        AvoidanceOptions.model_validate(data)
    except ValidationError as e:
        errors = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            errors.append(f"{location}: {err['msg']}" if location else err["msg"])
        return False, errors
    return True, []
