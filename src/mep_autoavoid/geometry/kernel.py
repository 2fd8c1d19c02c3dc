# File: src/mep_autoavoid/geometry/kernel.py
"""
Geometry kernel for clash detection and detour planning.

Pure functions over 3D points and vectors represented as (x, y, z) tuples:
- Vector helpers (add, subtract, scale, normalize, ...)
- Line / axis-aligned box intersection (slab method)
- Point-to-segment and segment-to-segment distances
- Horizontal perpendiculars and orientation tests
"""

import math
from dataclasses import dataclass
from typing import Tuple, Dict, Any

Point3 = Tuple[float, float, float]
Vector3 = Tuple[float, float, float]


# =============================================================================
# Constants
# =============================================================================

TOLERANCE = 1e-9

# Runs whose unit direction has |z| below this are treated as horizontal
HORIZONTAL_TOLERANCE = 0.2

BASIS_X: Vector3 = (1.0, 0.0, 0.0)
BASIS_Z: Vector3 = (0.0, 0.0, 1.0)
ZERO: Vector3 = (0.0, 0.0, 0.0)


# =============================================================================
# Vector Helper Functions
# =============================================================================

def vector_subtract(a: Point3, b: Point3) -> Vector3:
    """Subtract vector b from vector a."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vector_add(a: Point3, b: Vector3) -> Point3:
    """Add vectors a and b."""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vector_scale(v: Vector3, s: float) -> Vector3:
    """Scale vector v by scalar s."""
    return (v[0] * s, v[1] * s, v[2] * s)


def dot(a: Vector3, b: Vector3) -> float:
    """Dot product of a and b."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vector_length(v: Vector3) -> float:
    """Calculate vector length."""
    return math.sqrt(dot(v, v))


def vector_normalize(v: Vector3) -> Vector3:
    """Normalize vector to unit length (zero vector for degenerate input)."""
    length = vector_length(v)
    if length < TOLERANCE:
        return ZERO
    return (v[0] / length, v[1] / length, v[2] / length)


def is_zero_length(v: Vector3) -> bool:
    return vector_length(v) < TOLERANCE


def distance(a: Point3, b: Point3) -> float:
    """Euclidean distance between two points."""
    return vector_length(vector_subtract(a, b))


def midpoint(a: Point3, b: Point3) -> Point3:
    return ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5, (a[2] + b[2]) * 0.5)


def points_almost_equal(a: Point3, b: Point3, tolerance: float) -> bool:
    """True if the two points are within ``tolerance`` of each other."""
    return distance(a, b) <= tolerance


# =============================================================================
# Bounding Boxes
# =============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned bounding box.

    Attributes:
        min: Minimum corner (x, y, z)
        max: Maximum corner (x, y, z)
    """
    min: Point3
    max: Point3

    @property
    def center(self) -> Point3:
        return midpoint(self.min, self.max)

    @property
    def half_extents(self) -> Vector3:
        return vector_scale(vector_subtract(self.max, self.min), 0.5)

    @property
    def max_half_extent(self) -> float:
        """Largest half-extent over the three axes (obstacle half-thickness)."""
        return max(self.half_extents)

    def expanded(self, offset: float) -> "BoundingBox":
        return expand_box(self, offset)

    def contains(self, point: Point3) -> bool:
        return is_point_in_box(point, self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"min": list(self.min), "max": list(self.max)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundingBox":
        return cls(min=tuple(data["min"]), max=tuple(data["max"]))


def expand_box(box: BoundingBox, offset: float) -> BoundingBox:
    """Grow both corners symmetrically by ``offset`` on every axis."""
    return BoundingBox(
        min=(box.min[0] - offset, box.min[1] - offset, box.min[2] - offset),
        max=(box.max[0] + offset, box.max[1] + offset, box.max[2] + offset),
    )


def is_point_in_box(point: Point3, box: BoundingBox) -> bool:
    return all(box.min[i] <= point[i] <= box.max[i] for i in range(3))


# =============================================================================
# Intersection
# =============================================================================

def _clip_axis(p: float, d: float, lo: float, hi: float, tmin: float, tmax: float):
    """
    Clip the parametric interval [tmin, tmax] against one slab.

    Returns:
        (tmin, tmax) after clipping, or None if the interval became empty.
    """
    if abs(d) < TOLERANCE:
        # Parallel to the slab: inside it or no intersection at all
        if p < lo or p > hi:
            return None
        return tmin, tmax

    t1 = (lo - p) / d
    t2 = (hi - p) / d
    if t1 > t2:
        t1, t2 = t2, t1
    tmin = max(tmin, t1)
    tmax = min(tmax, t2)
    if tmin > tmax:
        return None
    return tmin, tmax


def line_intersects_box(start: Point3, end: Point3, box: BoundingBox) -> bool:
    """
    Test whether the segment start→end touches an axis-aligned box.

    Uses the slab method: the parametric interval [0, 1] of the segment is
    clipped against the [min, max] slab of each axis. The segment intersects
    the box iff the clipped interval remains non-empty.

    Args:
        start: Segment start point
        end: Segment end point
        box: Axis-aligned box

    Returns:
        True if the segment intersects the box
    """
    d = vector_subtract(end, start)
    interval = (0.0, 1.0)
    for axis in range(3):
        interval = _clip_axis(
            start[axis], d[axis], box.min[axis], box.max[axis],
            interval[0], interval[1]
        )
        if interval is None:
            return False
    return interval[1] >= max(0.0, interval[0])


# =============================================================================
# Distances
# =============================================================================

def project_point_on_segment(point: Point3, start: Point3, end: Point3) -> Tuple[float, Point3]:
    """
    Project a point onto a segment.

    Returns:
        (t, projected_point) with t clamped to [0, 1]
    """
    d = vector_subtract(end, start)
    length_sq = dot(d, d)
    if length_sq < TOLERANCE:
        return 0.0, start
    t = dot(vector_subtract(point, start), d) / length_sq
    t = max(0.0, min(1.0, t))
    return t, vector_add(start, vector_scale(d, t))


def point_to_segment_distance(point: Point3, start: Point3, end: Point3) -> float:
    """Shortest distance from a point to the segment start→end."""
    _, closest = project_point_on_segment(point, start, end)
    return distance(point, closest)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def closest_points_between_segments(
    p1: Point3, q1: Point3, p2: Point3, q2: Point3
) -> Tuple[float, float, Point3, Point3]:
    """
    Closest points between segments p1→q1 and p2→q2.

    Solves the 2x2 linear system in the segment parameters (s, t), clamping
    each to [0, 1] and re-solving the other parameter when a clamp pushes it
    out of range. Degenerate (zero-length) segments reduce to point-segment
    or point-point cases.

    Returns:
        (s, t, c1, c2) where c1 = p1 + s*(q1-p1) and c2 = p2 + t*(q2-p2)
    """
    d1 = vector_subtract(q1, p1)
    d2 = vector_subtract(q2, p2)
    r = vector_subtract(p1, p2)
    a = dot(d1, d1)
    e = dot(d2, d2)
    f = dot(d2, r)

    if a <= TOLERANCE and e <= TOLERANCE:
        return 0.0, 0.0, p1, p2

    if a <= TOLERANCE:
        s = 0.0
        t = _clamp01(f / e)
    else:
        c = dot(d1, r)
        if e <= TOLERANCE:
            t = 0.0
            s = _clamp01(-c / a)
        else:
            b = dot(d1, d2)
            denom = a * e - b * b
            # Parallel segments: pick s = 0 and solve for t
            s = _clamp01((b * f - c * e) / denom) if abs(denom) > TOLERANCE else 0.0
            t = (b * s + f) / e
            if t < 0.0:
                t = 0.0
                s = _clamp01(-c / a)
            elif t > 1.0:
                t = 1.0
                s = _clamp01((b - c) / a)

    c1 = vector_add(p1, vector_scale(d1, s))
    c2 = vector_add(p2, vector_scale(d2, t))
    return s, t, c1, c2


def segment_segment_min_distance(p1: Point3, q1: Point3, p2: Point3, q2: Point3) -> float:
    """Minimum distance between segments p1→q1 and p2→q2."""
    _, _, c1, c2 = closest_points_between_segments(p1, q1, p2, q2)
    return distance(c1, c2)


# =============================================================================
# Orientation
# =============================================================================

def perpendicular_horizontal(direction: Vector3, left_side: bool) -> Vector3:
    """
    Horizontal-plane normal to ``direction``.

    The left normal is the horizontal projection rotated +90 degrees about Z;
    the right normal is its negation. Falls back to the X axis when the input
    has no horizontal component (vertical runs).
    """
    v = vector_normalize((direction[0], direction[1], 0.0))
    if is_zero_length(v):
        v = BASIS_X
    n = (-v[1], v[0], 0.0)
    return n if left_side else vector_scale(n, -1.0)


def is_nearly_horizontal(direction: Vector3, tolerance: float = HORIZONTAL_TOLERANCE) -> bool:
    """True if the unit direction's vertical component is below ``tolerance``."""
    if is_zero_length(direction):
        return True
    u = vector_normalize(direction)
    return abs(u[2]) < tolerance


def project_on_plane(vector: Vector3, plane_normal: Vector3) -> Vector3:
    """Remove the component of ``vector`` along ``plane_normal``."""
    n = vector_normalize(plane_normal)
    if is_zero_length(n):
        return vector
    return vector_subtract(vector, vector_scale(n, dot(vector, n)))
