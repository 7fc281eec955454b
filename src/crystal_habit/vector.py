"""
Vector and half-space primitives.

Vectors are plain ``numpy`` float64 arrays of length 3. Fuzzy comparisons
live in :mod:`crystal_habit.tolerance`; this module holds the geometry.
"""

from dataclasses import dataclass, field

import numpy as np

from .errors import MismatchedInputError
from .tolerance import (
    DENOMINATOR_TOLERANCE,
    PLANE_TOLERANCE,
    SQUARED_DISTANCE_TOLERANCE,
    is_zero_approx,
)


def as_vector(value) -> np.ndarray:
    """Coerce a 3-sequence into a float64 array.

    Raises:
        MismatchedInputError: If the value does not have exactly 3 components
        ValueError: If any component is NaN
    """
    v = np.asarray(value, dtype=np.float64).reshape(-1)
    if v.shape != (3,):
        raise MismatchedInputError(f"Expected a 3-component vector, got {value!r}")
    if np.isnan(v).any():
        raise ValueError(f"Vector has NaN components: {value!r}")
    return v


def normalized(v: np.ndarray) -> np.ndarray:
    """Return ``v`` scaled to unit length, or ``v`` unchanged if it is (near) zero."""
    length = float(np.linalg.norm(v))
    if length < SQUARED_DISTANCE_TOLERANCE:
        return v
    return v / length


@dataclass(frozen=True, eq=False)
class Plane:
    """Half-space ``{p : dot(normal, p) <= distance}``.

    Attributes:
        normal: Unit outward normal
        distance: Signed perpendicular distance from the origin along ``normal``
        original_normal: The unnormalised vector this plane was built from
    """

    normal: np.ndarray
    distance: float
    original_normal: np.ndarray = field(repr=False)

    @classmethod
    def from_seed(cls, vector, distance: float) -> "Plane":
        """Build the plane ``{x : dot(vector, x) = distance}``.

        The distance is measured in units of ``vector``: for a unit vector it
        is the perpendicular distance, for (1, 1, 1) the face cuts each axis
        at ``distance``.
        """
        v = as_vector(vector)
        length = float(np.linalg.norm(v))
        if is_zero_approx(v):
            raise ValueError("Cannot build a plane from a zero vector")
        return cls(v / length, float(distance) / length, v.copy())

    def distance_to(self, point: np.ndarray) -> float:
        """Signed distance of ``point`` from the plane, positive in front."""
        return float(np.dot(self.normal, point)) - self.distance

    def is_point_in_front(self, point: np.ndarray, tolerance: float = PLANE_TOLERANCE) -> bool:
        """True when ``point`` is strictly outside this half-space."""
        return self.distance_to(point) > tolerance

    def project(self, point: np.ndarray) -> np.ndarray:
        """Closest point on the plane to ``point``."""
        return point - self.normal * self.distance_to(point)

    def is_equal_approx(self, other: "Plane", tolerance: float = SQUARED_DISTANCE_TOLERANCE) -> bool:
        d = self.normal - other.normal
        return (
            float(np.dot(d, d)) < tolerance
            and abs(self.distance - other.distance) < tolerance
        )

    def __repr__(self) -> str:
        n = self.normal
        return f"Plane(({n[0]:.6g}, {n[1]:.6g}, {n[2]:.6g}), {self.distance:.6g})"


def intersect3(
    p0: Plane,
    p1: Plane,
    p2: Plane,
    denominator_tolerance: float = DENOMINATOR_TOLERANCE
) -> np.ndarray | None:
    """Point shared by three planes, or None if they do not meet in one point.

    Uses ``(n1×n2·d0 + n2×n0·d1 + n0×n1·d2) / (n0×n1·n2)``.
    """
    n0, n1, n2 = p0.normal, p1.normal, p2.normal
    n01 = np.cross(n0, n1)
    denom = float(np.dot(n01, n2))
    if denom * denom < denominator_tolerance:
        return None
    return (
        np.cross(n1, n2) * p0.distance
        + np.cross(n2, n0) * p1.distance
        + n01 * p2.distance
    ) / denom


def is_inside_all(
    planes: list[Plane],
    point: np.ndarray,
    tolerance: float = PLANE_TOLERANCE
) -> bool:
    """True when ``point`` is not in front of any plane."""
    for plane in planes:
        if plane.is_point_in_front(point, tolerance):
            return False
    return True


def triangle_area(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return float(np.linalg.norm(np.cross(b - a, c - a))) / 2


def polygon_area(vertices: np.ndarray) -> float:
    """Area of a convex planar polygon by fan triangulation from the first vertex."""
    if len(vertices) < 3:
        return 0.0
    total = 0.0
    for i in range(1, len(vertices) - 1):
        total += triangle_area(vertices[0], vertices[i], vertices[i + 1])
    return total


def winding_normal(vertices: np.ndarray) -> np.ndarray:
    """Area-weighted right-hand normal of a planar loop.

    For a convex loop this points the same way as ``(v1 - v0) × (v2 - v0)``
    but does not vanish when the first three points are nearly collinear.
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    following = np.roll(vertices, -1, axis=0)
    return np.cross(vertices, following).sum(axis=0) / 2
