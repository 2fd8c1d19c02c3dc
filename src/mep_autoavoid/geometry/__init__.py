# File: src/mep_autoavoid/geometry/__init__.py
"""
Geometry kernel.

Vector math, box/segment intersection and distance primitives used by
clash detection and detour planning.
"""

from .kernel import (
    Point3,
    Vector3,
    BoundingBox,
    TOLERANCE,
    HORIZONTAL_TOLERANCE,
    vector_add,
    vector_subtract,
    vector_scale,
    vector_length,
    vector_normalize,
    dot,
    distance,
    midpoint,
    is_zero_length,
    points_almost_equal,
    expand_box,
    is_point_in_box,
    line_intersects_box,
    project_point_on_segment,
    point_to_segment_distance,
    closest_points_between_segments,
    segment_segment_min_distance,
    perpendicular_horizontal,
    is_nearly_horizontal,
    project_on_plane,
)

__all__ = [
    "Point3",
    "Vector3",
    "BoundingBox",
    "TOLERANCE",
    "HORIZONTAL_TOLERANCE",
    "vector_add",
    "vector_subtract",
    "vector_scale",
    "vector_length",
    "vector_normalize",
    "dot",
    "distance",
    "midpoint",
    "is_zero_length",
    "points_almost_equal",
    "expand_box",
    "is_point_in_box",
    "line_intersects_box",
    "project_point_on_segment",
    "point_to_segment_distance",
    "closest_points_between_segments",
    "segment_segment_min_distance",
    "perpendicular_horizontal",
    "is_nearly_horizontal",
    "project_on_plane",
]
