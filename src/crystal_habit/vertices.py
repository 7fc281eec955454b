"""
Vertex generation by intersecting plane triples.

Every unordered triple of planes is intersected. A candidate point is
merged into an existing vertex at the same position, or accepted as a new
vertex if it lies behind every plane. Work is split by the first plane of
each triple and may run on worker threads; all of them write into one
:class:`VertexMap` whose ``insert`` does the accept-or-merge step under a
single lock.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .settings import DEFAULT_SETTINGS, GenerationSettings
from .tolerance import SQUARED_DISTANCE_TOLERANCE, ToleranceIndex, is_zero_approx
from .vector import Plane

LOG = logging.getLogger(__name__)


@dataclass
class Vertex:
    """A corner of the crystal.

    Attributes:
        position: Point in space
        planes: Ids of every plane through this point
        origin: The plane triple that first produced the point
    """

    position: np.ndarray
    planes: set[int] = field(default_factory=set)
    origin: tuple[int, int, int] = (-1, -1, -1)

    def shared_planes(self, other: "Vertex") -> list[int]:
        """Plane ids both vertices lie on, in ascending order."""
        return sorted(self.planes & other.planes)

    def merge(self, other: "Vertex") -> None:
        """Absorb the planes of a coincident vertex."""
        self.planes |= other.planes


class InsertResult(Enum):
    ACCEPTED = "accepted"
    MERGED = "merged"
    REJECTED = "rejected"


class VertexMap:
    """Thread-safe map of vertices keyed by fuzzy position.

    ``insert`` is atomic: the lookup, the merge into an existing vertex and
    the insertion of a new one all happen while holding the same lock, so
    two workers can never both accept a point at the same position.
    """

    def __init__(self, tolerance: float = SQUARED_DISTANCE_TOLERANCE):
        self._lock = threading.Lock()
        self._index = ToleranceIndex(tolerance)
        self._vertices: list[Vertex] = []

    def insert(
        self,
        position: np.ndarray,
        planes,
        inside: bool,
        origin: tuple[int, int, int] = (-1, -1, -1)
    ) -> InsertResult:
        """Merge ``planes`` into the vertex at ``position``, or add a new vertex.

        Args:
            position: Candidate point
            planes: Plane ids meeting at the point
            inside: Whether the point lies behind every plane. Only consulted
                when no vertex exists at ``position`` yet.
            origin: Triple that produced the candidate

        Returns:
            What happened to the candidate
        """
        with self._lock:
            ident = self._index.find(position)
            if ident is not None:
                existing = self._vertices[ident]
                existing.planes.update(planes)
                if origin < existing.origin:
                    existing.origin = origin
                return InsertResult.MERGED
            if not inside:
                return InsertResult.REJECTED
            self._index.add(position, len(self._vertices))
            self._vertices.append(Vertex(np.array(position, dtype=np.float64), set(planes), origin))
            return InsertResult.ACCEPTED

    def vertices(self) -> list[Vertex]:
        """Snapshot of the accepted vertices, ordered by producing triple."""
        with self._lock:
            return sorted(self._vertices, key=lambda v: v.origin)

    def __len__(self) -> int:
        with self._lock:
            return len(self._vertices)


def generate_vertices(
    planes: list[Plane],
    settings: GenerationSettings = DEFAULT_SETTINGS
) -> list[Vertex]:
    """Intersect every plane triple and keep the points on the crystal.

    Triples with an antiparallel pair or a vanishing triple product are
    skipped silently. Points at the origin are discarded.

    Args:
        planes: Flat list of accepted planes; a plane's id is its position
        settings: Tolerances and fan-out

    Returns:
        Unique vertices with all their incident plane ids
    """
    count = len(planes)
    if count < 3:
        return []

    normals = np.array([p.normal for p in planes], dtype=np.float64)
    distances = np.array([p.distance for p in planes], dtype=np.float64)
    crosses = np.cross(normals[:, None, :], normals[None, :, :])
    antiparallel = normals @ normals.T < -1.0 + settings.parallel_tolerance

    vertex_map = VertexMap(settings.tolerance)

    def intersect_from(i: int) -> None:
        for j in range(i + 1, count - 1):
            if antiparallel[i, j]:
                continue
            ks = np.arange(j + 1, count)
            ks = ks[~antiparallel[i, ks] & ~antiparallel[j, ks]]
            if len(ks) == 0:
                continue

            denominators = normals[ks] @ crosses[i, j]
            usable = denominators * denominators >= settings.denominator_tolerance
            ks, denominators = ks[usable], denominators[usable]
            if len(ks) == 0:
                continue

            points = (
                crosses[j, ks] * distances[i]
                + crosses[ks, i] * distances[j]
                + crosses[i, j][None, :] * distances[ks][:, None]
            ) / denominators[:, None]
            inside = np.all(points @ normals.T - distances <= settings.plane_tolerance, axis=1)

            for k, point, is_inside in zip(ks, points, inside, strict=True):
                if is_zero_approx(point, settings.tolerance):
                    continue
                triple = (i, j, int(k))
                vertex_map.insert(point, triple, bool(is_inside), triple)

    if settings.allow_parallel and count > settings.parallel_threshold:
        LOG.debug("Intersecting %d planes on worker threads", count)
        with ThreadPoolExecutor(settings.max_workers) as executor:
            list(executor.map(intersect_from, range(count - 2)))
    else:
        for i in range(count - 2):
            intersect_from(i)

    vertices = vertex_map.vertices()
    LOG.debug("Generated %d vertices from %d planes", len(vertices), count)
    return vertices
