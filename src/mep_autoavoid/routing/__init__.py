# File: src/mep_autoavoid/routing/__init__.py
"""
Detour planning: direction ordering, rectangular detours, vertical humps
and picked-point bends.
"""

from .detour_plan import DetourPlan, DetourStrategy
from .planner import (
    RoutingPlanner,
    build_direction_order,
    direction_vector,
    MIN_STRAIGHT_MARGIN,
    FAR_POINT_MIN_EXTENSION,
)

__all__ = [
    "DetourPlan",
    "DetourStrategy",
    "RoutingPlanner",
    "build_direction_order",
    "direction_vector",
    "MIN_STRAIGHT_MARGIN",
    "FAR_POINT_MIN_EXTENSION",
]
