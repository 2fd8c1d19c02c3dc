# File: tests/config/test_options.py

"""Tests for avoidance options.

Tests cover:
- Defaults and derived model-unit values
- Range validation and selection rules
- Bend angle normalization
- Non-raising validation helper
- Loading from dict and JSON file
"""

import json

import pytest
from pydantic import ValidationError

from src.mep_autoavoid.config.options import (
    ALLOWED_BEND_ANGLES,
    AvoidanceOptions,
    validate_options,
)
from src.mep_autoavoid.config.units import ProjectUnits
from src.mep_autoavoid.core.mep_system import DirectionMode, ObstacleCategory, RunKind


class TestDefaults:
    """Default option values."""

    def test_defaults(self):
        options = AvoidanceOptions()
        assert options.clearance_mm == 50.0
        assert options.extra_offset_mm == 500.0
        assert options.bend_angle == 45.0
        assert options.direction == DirectionMode.AUTO
        assert options.max_tries == 4
        assert options.model_units == ProjectUnits.FEET
        assert options.revalidate_plan is False
        assert options.exclude_connected_neighbors is True

    def test_enabled_kinds_default_to_pipes(self):
        assert AvoidanceOptions().enabled_kinds() == [RunKind.PIPE]

    def test_enabled_categories(self):
        options = AvoidanceOptions(include_walls=False, include_fittings=False)
        assert options.enabled_categories() == [
            ObstacleCategory.STRUCTURAL_FRAMING,
            ObstacleCategory.FLOORS,
            ObstacleCategory.MEP_CURVES,
        ]

    def test_clearance_in_feet(self):
        options = AvoidanceOptions(clearance_mm=304.8, extra_offset_mm=609.6)
        assert options.clearance == pytest.approx(1.0)
        assert options.extra_offset == pytest.approx(2.0)

    def test_clearance_in_millimeters(self):
        options = AvoidanceOptions(clearance_mm=50, model_units="millimeters")
        assert options.clearance == 50.0

    def test_options_are_frozen(self):
        options = AvoidanceOptions()
        with pytest.raises(ValidationError):
            options.clearance_mm = 10.0


class TestValidation:
    """Range checks and selection rules."""

    @pytest.mark.parametrize("field,value", [
        ("clearance_mm", -1.0),
        ("clearance_mm", 1000.1),
        ("extra_offset_mm", -5.0),
        ("extra_offset_mm", 5001.0),
        ("auto_walk_distance_mm", 10001.0),
        ("max_tries", 0),
        ("max_tries", 11),
    ])
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            AvoidanceOptions(**{field: value})

    def test_boundaries_accepted(self):
        options = AvoidanceOptions(clearance_mm=1000, extra_offset_mm=0, max_tries=10)
        assert options.clearance_mm == 1000

    def test_no_target_kind_rejected(self):
        with pytest.raises(ValidationError, match="target element kind"):
            AvoidanceOptions(target_pipes=False)

    def test_no_obstacle_category_rejected(self):
        """Fittings alone do not count as an obstacle selection."""
        with pytest.raises(ValidationError, match="obstacle category"):
            AvoidanceOptions(
                include_walls=False,
                include_floors=False,
                include_framing=False,
                include_mep=False,
                include_fittings=True,
            )

    def test_unknown_direction_rejected(self):
        with pytest.raises(ValidationError):
            AvoidanceOptions(direction="sideways")


class TestBendAngle:
    """Bend angle normalization."""

    @pytest.mark.parametrize("angle", ALLOWED_BEND_ANGLES)
    def test_allowed_angles_kept(self, angle):
        assert AvoidanceOptions(bend_angle=angle).bend_angle == angle

    @pytest.mark.parametrize("angle", [0, 30, 60, 89.9, "steep"])
    def test_other_angles_normalize_to_45(self, angle):
        assert AvoidanceOptions(bend_angle=angle).bend_angle == 45.0


class TestLoading:
    """Parsing and non-raising validation."""

    def test_from_dict_parses_strings(self):
        options = AvoidanceOptions.from_dict({
            "direction": "Vertical_Flip",
            "model_units": "MILLIMETERS",
            "target_ducts": True,
        })
        assert options.direction == DirectionMode.VERTICAL_FLIP
        assert options.model_units == ProjectUnits.MILLIMETERS
        assert options.enabled_kinds() == [RunKind.PIPE, RunKind.DUCT]

    def test_to_dict_is_json_ready(self):
        data = AvoidanceOptions(direction="up").to_dict()
        assert data["direction"] == "up"
        assert data["model_units"] == "feet"
        json.dumps(data)

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "options.json"
        path.write_text(json.dumps({"clearance_mm": 75, "bend_angle": 90}), encoding="utf-8")
        options = AvoidanceOptions.from_json_file(str(path))
        assert options.clearance_mm == 75
        assert options.bend_angle == 90.0

    def test_validate_options_valid(self):
        assert validate_options({"clearance_mm": 10}) == (True, [])
        assert validate_options(AvoidanceOptions()) == (True, [])

    def test_validate_options_collects_errors(self):
        is_valid, errors = validate_options({"clearance_mm": -1, "max_tries": 50})
        assert is_valid is False
        assert len(errors) == 2
        assert any(e.startswith("clearance_mm") for e in errors)
        assert any(e.startswith("max_tries") for e in errors)
