# File: src/mep_autoavoid/config/__init__.py
"""
Configuration for the MEP auto-avoid engine.

- AvoidanceOptions: validated avoidance parameters
- ProjectUnits and conversions between millimetres and model units
- Settings: environment-driven runtime settings
"""

from .units import (
    ProjectUnits,
    convert_to_feet,
    convert_from_feet,
    mm_to_model,
    model_to_mm,
)
from .options import (
    AvoidanceOptions,
    validate_options,
    ALLOWED_BEND_ANGLES,
    DEFAULT_BEND_ANGLE,
)
from .settings import Settings

__all__ = [
    "ProjectUnits",
    "convert_to_feet",
    "convert_from_feet",
    "mm_to_model",
    "model_to_mm",
    "AvoidanceOptions",
    "validate_options",
    "ALLOWED_BEND_ANGLES",
    "DEFAULT_BEND_ANGLE",
    "Settings",
]
