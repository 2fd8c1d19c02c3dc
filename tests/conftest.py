# tests/conftest.py
import sys
import os

# Add project root to path so that ``src.mep_autoavoid`` resolves
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from src.mep_autoavoid.config.options import AvoidanceOptions
from src.mep_autoavoid.core.memory_store import InMemoryModelStore
from src.mep_autoavoid.core.mep_system import CrossSection, ObstacleCategory, RunKind
from src.mep_autoavoid.geometry.kernel import BoundingBox


def box_around(center, half):
    """Axis-aligned box from a center and per-axis half extents."""
    if isinstance(half, (int, float)):
        half = (half, half, half)
    return BoundingBox(
        min=tuple(center[i] - half[i] for i in range(3)),
        max=tuple(center[i] + half[i] for i in range(3)),
    )


@pytest.fixture
def make_box():
    """Factory for axis-aligned boxes."""
    return box_around


@pytest.fixture
def mm_options():
    """Default options for a model drawn in millimetres."""
    return AvoidanceOptions(model_units="millimeters")


@pytest.fixture
def store():
    """Empty in-memory model store."""
    return InMemoryModelStore()


@pytest.fixture
def beam_scene(store):
    """
    A 4000 mm pipe along +X at z=0 crossing a 600 mm beam at its middle.

    Returns:
        (store, run, beam element)
    """
    run = store.add_run(
        "P1", RunKind.PIPE, (0.0, 0.0, 0.0), (4000.0, 0.0, 0.0),
        CrossSection(diameter=100.0),
    )
    beam = store.add_obstacle(
        "B1", ObstacleCategory.STRUCTURAL_FRAMING,
        box_around((2000.0, 0.0, 0.0), 300.0),
    )
    return store, run, beam


@pytest.fixture
def thin_beam_scene(store):
    """
    A 4000 mm pipe crossing a 400 mm deep beam at its middle.

    With clearance 50 and extra offset 250 a hump needs h = 500.
    """
    run = store.add_run(
        "P1", RunKind.PIPE, (0.0, 0.0, 0.0), (4000.0, 0.0, 0.0),
        CrossSection(diameter=100.0),
    )
    beam = store.add_obstacle(
        "B1", ObstacleCategory.STRUCTURAL_FRAMING,
        box_around((2000.0, 0.0, 0.0), (100.0, 200.0, 200.0)),
    )
    return store, run, beam

