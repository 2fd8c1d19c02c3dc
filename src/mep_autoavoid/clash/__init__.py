# File: src/mep_autoavoid/clash/__init__.py
"""
Obstacle collection and clash detection.
"""

from .obstacle import Obstacle, ClashRecord
from .obstacle_collector import ObstacleCollector, collect_obstacles
from .clash_detector import ClashDetector, first_clash_along, validate_path

__all__ = [
    "Obstacle",
    "ClashRecord",
    "ObstacleCollector",
    "collect_obstacles",
    "ClashDetector",
    "first_clash_along",
    "validate_path",
]
