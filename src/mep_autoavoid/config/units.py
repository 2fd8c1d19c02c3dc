# File: src/mep_autoavoid/config/units.py

"""
Unit conversion for the MEP auto-avoid engine.

Avoidance parameters are entered in millimetres while the host model stores
lengths in its own internal units (decimal feet for Revit documents). This
module converts between the two.
"""

from enum import Enum
from typing import Union, Dict


class ProjectUnits(Enum):
    """
    Enumeration of supported model length units.
    """
    FEET = "feet"
    METERS = "meters"
    INCHES = "inches"
    MILLIMETERS = "millimeters"


# Conversion factors to feet
_CONVERSION_TO_FEET: Dict[ProjectUnits, float] = {
    ProjectUnits.FEET: 1.0,
    ProjectUnits.METERS: 1 / 0.3048,
    ProjectUnits.INCHES: 1 / 12.0,
    ProjectUnits.MILLIMETERS: 1 / 304.8,
}

# Conversion factors from feet
_CONVERSION_FROM_FEET: Dict[ProjectUnits, float] = {
    ProjectUnits.FEET: 1.0,
    ProjectUnits.METERS: 0.3048,
    ProjectUnits.INCHES: 12.0,
    ProjectUnits.MILLIMETERS: 304.8,
}


def _coerce_units(units: Union[ProjectUnits, str]) -> ProjectUnits:
    if isinstance(units, ProjectUnits):
        return units
    if isinstance(units, str):
        try:
            return ProjectUnits(units.lower())
        except ValueError:
            raise ValueError(f"Unsupported unit: {units}")
    raise ValueError(f"Units must be ProjectUnits enum or string, got {type(units)}")


def convert_to_feet(value: float, current_units: Union[ProjectUnits, str]) -> float:
    """
    Converts a value from the specified units to feet.

    Args:
        value: The numeric value to convert
        current_units: The units to convert from (ProjectUnits enum or string)

    Returns:
        The value converted to feet

    Raises:
        ValueError: If the provided units are not supported
    """
    return value * _CONVERSION_TO_FEET[_coerce_units(current_units)]


def convert_from_feet(value: float, target_units: Union[ProjectUnits, str]) -> float:
    """
    Converts a value from feet to the specified target units.

    Args:
        value: The numeric value in feet to convert
        target_units: The units to convert to (ProjectUnits enum or string)

    Returns:
        The converted value in the target units

    Raises:
        ValueError: If the provided units are not supported
    """
    return value * _CONVERSION_FROM_FEET[_coerce_units(target_units)]


def mm_to_model(value_mm: float, model_units: Union[ProjectUnits, str]) -> float:
    """Convert a millimetre length into model units."""
    units = _coerce_units(model_units)
    if units is ProjectUnits.MILLIMETERS:
        return value_mm
    return convert_from_feet(convert_to_feet(value_mm, ProjectUnits.MILLIMETERS), units)


def model_to_mm(value: float, model_units: Union[ProjectUnits, str]) -> float:
    """Convert a model-unit length into millimetres (used for log output)."""
    units = _coerce_units(model_units)
    if units is ProjectUnits.MILLIMETERS:
        return value
    return convert_from_feet(convert_to_feet(value, units), ProjectUnits.MILLIMETERS)
