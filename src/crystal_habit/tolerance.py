"""
Tolerance constants and fuzzy spatial lookup.

Every container keyed by a position goes through :class:`ToleranceIndex`
so that orbit deduplication, vertex merging and face lookup all agree on
what "the same point" means.
"""

import math
from collections import defaultdict
from collections.abc import Iterator

import numpy as np

# Two vectors are equal when their squared distance is below this.
SQUARED_DISTANCE_TOLERANCE = 1e-10

# dot(n1, n2) > 1 - eps counts as parallel, < -1 + eps as antiparallel.
PARALLEL_TOLERANCE = 1e-10

# Squared triple product below which three planes have no single meeting point.
DENOMINATOR_TOLERANCE = 1e-6

# Slack allowed when testing whether a point is behind a plane.
PLANE_TOLERANCE = 1e-8

_NEIGHBOUR_OFFSETS = [
    (i, j, k) for i in (-1, 0, 1) for j in (-1, 0, 1) for k in (-1, 0, 1)
]


def round_zero(value: float, tolerance: float = SQUARED_DISTANCE_TOLERANCE) -> float:
    """Snap a component to 0.0 when its square is below tolerance."""
    return 0.0 if value * value < tolerance else float(value)


def is_zero_approx(v: np.ndarray, tolerance: float = SQUARED_DISTANCE_TOLERANCE) -> bool:
    """True when ``v`` lies within tolerance of the origin."""
    return float(np.dot(v, v)) < tolerance


def is_equal_approx(
    a: np.ndarray,
    b: np.ndarray,
    tolerance: float = SQUARED_DISTANCE_TOLERANCE
) -> bool:
    """True when the squared distance between ``a`` and ``b`` is below tolerance."""
    d = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(d, d)) < tolerance


class ToleranceIndex:
    """Hash grid for fuzzy point lookup.

    Points are bucketed into cubic cells whose edge equals the match radius,
    so any match of a query point lies in one of the 27 cells around it.

    Args:
        tolerance: Squared distance under which two points are equal
    """

    def __init__(self, tolerance: float = SQUARED_DISTANCE_TOLERANCE):
        self.tolerance = tolerance
        self._cell = math.sqrt(tolerance)
        self._buckets: dict[tuple[int, int, int], list[tuple[np.ndarray, int]]] = defaultdict(list)
        self._count = 0

    def _key(self, point: np.ndarray) -> tuple[int, int, int]:
        return tuple(int(math.floor(c / self._cell)) for c in point)

    def find(self, point: np.ndarray) -> int | None:
        """Return the id stored for a point within tolerance, or None."""
        point = np.asarray(point, dtype=np.float64)
        kx, ky, kz = self._key(point)
        for dx, dy, dz in _NEIGHBOUR_OFFSETS:
            bucket = self._buckets.get((kx + dx, ky + dy, kz + dz))
            if not bucket:
                continue
            for stored, ident in bucket:
                d = stored - point
                if float(np.dot(d, d)) < self.tolerance:
                    return ident
        return None

    def add(self, point: np.ndarray, ident: int) -> None:
        """Store ``ident`` under ``point``. Does not check for existing matches."""
        point = np.asarray(point, dtype=np.float64)
        self._buckets[self._key(point)].append((point, ident))
        self._count += 1

    def __contains__(self, point) -> bool:
        return self.find(point) is not None

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[tuple[np.ndarray, int]]:
        for bucket in self._buckets.values():
            yield from bucket
