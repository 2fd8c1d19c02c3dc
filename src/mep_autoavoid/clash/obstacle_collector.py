# File: src/mep_autoavoid/clash/obstacle_collector.py
"""
Obstacle collection.

Queries the model store once per enabled category, unions the results and
drops the runs being processed. Nothing is cached between calls because the
model may have been mutated by the previous run's reconstruction.
"""

import logging
from typing import Any, Iterable, List, Optional, Set

from ..config.options import AvoidanceOptions
from ..core.errors import AutoAvoidError, GeometryQueryError
from ..core.mep_system import LinearRun, ObstacleCategory
from ..core.model_store import ModelStore
from ..utils.logging_config import get_logger
from .obstacle import Obstacle

_logger = get_logger(__name__)


class ObstacleCollector:
    """
    Collects candidate obstacles for clash detection.

    Example:
        >>> collector = ObstacleCollector()
        >>> obstacles = collector.collect(store, None, options, excluded=[run])
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or _logger

    def collect(
        self,
        model: ModelStore,
        scope: Any,
        options: AvoidanceOptions,
        excluded: Optional[Iterable[Any]] = None
    ) -> List[Obstacle]:
        """
        Gather obstacles for every category enabled in ``options``.

        Args:
            model: Model store to query
            scope: View or scope passed through to the store (None = model)
            options: Avoidance options holding the category flags
            excluded: Runs, element handles or ids that must not be returned

        Returns:
            Obstacles in query order, deduplicated by element id
        """
        excluded_ids = self._excluded_ids(model, excluded or [])
        self.logger.info(f"Collecting obstacles, excluding {len(excluded_ids)} element(s)")

        seen: Set[str] = set()
        obstacles: List[Obstacle] = []
        for category in options.enabled_categories():
            try:
                elements = model.query_by_category(category, scope)
            except AutoAvoidError as e:
                self.logger.error(f"Query for category {category.value} failed: {e.message}")
                continue
            self.logger.debug(f"Collected {len(elements)} element(s) of {category.value}")

            for element in elements:
                element_id = model.element_id(element)
                if element_id in excluded_ids or element_id in seen:
                    continue
                seen.add(element_id)
                try:
                    obstacles.append(self._to_obstacle(model, element, element_id, category))
                except GeometryQueryError as e:
                    self.logger.warning(f"Skipping obstacle: {e.message}")

        self.logger.info(f"Collected {len(obstacles)} obstacle(s)")
        return obstacles

    @staticmethod
    def _excluded_ids(model: ModelStore, excluded: Iterable[Any]) -> Set[str]:
        ids = set()
        for item in excluded:
            if isinstance(item, str):
                ids.add(item)
            elif isinstance(item, LinearRun):
                ids.add(item.id)
            else:
                ids.add(model.element_id(item))
        return ids

    @staticmethod
    def _to_obstacle(
        model: ModelStore,
        element: Any,
        element_id: str,
        category: ObstacleCategory
    ) -> Obstacle:
        box = model.get_bounding_box(element)
        if box is None:
            raise GeometryQueryError(element_id, "bounding box")

        centerline = model.get_centerline_segment(element)
        radius = model.get_radius(element) if centerline is not None else 0.0
        return Obstacle(
            element_id=element_id,
            category=category,
            box=box,
            centerline=centerline,
            radius=radius,
            element=element,
        )


def collect_obstacles(
    model: ModelStore,
    scope: Any,
    options: AvoidanceOptions,
    excluded: Optional[Iterable[Any]] = None
) -> List[Obstacle]:
    """Convenience wrapper around ObstacleCollector.collect."""
    return ObstacleCollector().collect(model, scope, options, excluded)
