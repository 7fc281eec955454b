"""
Edge graph and face tracing.

Two vertices that share exactly two planes are joined by an edge lying on
both. Per plane, every vertex keeps at most two neighbours; walking those
neighbours without backtracking yields the plane's boundary loop.

Anomalies (vertex pairs sharing more than two planes, slot overflow,
traces that dead-end) are recovered from and counted in a
:class:`TopologyReport`, or raised as :class:`~crystal_habit.errors.TopologyError`
when strict generation is requested.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .errors import TopologyError
from .settings import DEFAULT_SETTINGS, GenerationSettings
from .tolerance import is_equal_approx
from .vector import Plane, winding_normal
from .vertices import Vertex

LOG = logging.getLogger(__name__)

MINIMUM_FACE_VERTICES = 3


class SlotResult(Enum):
    ADDED = "added"
    DUPLICATE = "duplicate"
    FULL = "full"


class NeighborSlots:
    """The (at most two) neighbours of a vertex on one plane's boundary."""

    __slots__ = ("first", "second")

    def __init__(self):
        self.first: int | None = None
        self.second: int | None = None

    def add(self, vertex_id: int) -> SlotResult:
        """Record a neighbour.

        When both slots are taken the second one is overwritten and
        ``SlotResult.FULL`` is returned.
        """
        if vertex_id == self.first or vertex_id == self.second:
            return SlotResult.DUPLICATE
        if self.first is None:
            self.first = vertex_id
            return SlotResult.ADDED
        if self.second is None:
            self.second = vertex_id
            return SlotResult.ADDED
        self.second = vertex_id
        return SlotResult.FULL

    def next_after(self, previous: int) -> int | None:
        """The neighbour that is not ``previous``, or None at a dead end."""
        if self.first != previous:
            return self.first
        return self.second

    def __len__(self) -> int:
        return (self.first is not None) + (self.second is not None)

    def __repr__(self) -> str:
        return f"NeighborSlots({self.first}, {self.second})"


@dataclass
class TopologyReport:
    """Data lost while turning vertices into faces.

    Attributes:
        pruned_planes: Planes with fewer than three vertices, removed before edges
        discarded_planes: Planes left with fewer than three connected vertices
        dropped_pairs: Vertex pairs sharing more than two planes
        merged_vertices: Coincident vertices merged while building edges
        slot_overflows: Neighbour additions beyond two on a plane
        truncated_faces: Planes whose boundary walk did not close
        short_faces: Planes whose boundary walk gave fewer than three vertices
    """

    pruned_planes: list[int] = field(default_factory=list)
    discarded_planes: list[int] = field(default_factory=list)
    dropped_pairs: int = 0
    merged_vertices: int = 0
    slot_overflows: int = 0
    truncated_faces: list[int] = field(default_factory=list)
    short_faces: list[int] = field(default_factory=list)

    @property
    def has_anomalies(self) -> bool:
        """True if any face lost data through a dropped pair, overflow or bad trace."""
        return bool(
            self.dropped_pairs
            or self.slot_overflows
            or self.truncated_faces
            or self.short_faces
        )


def remove_invalid_planes(vertices: list[Vertex]) -> list[int]:
    """Strip planes touching fewer than three vertices from every vertex.

    Vertices are kept even if they lose planes.

    Returns:
        Ids of the removed planes, ascending
    """
    members: dict[int, list[Vertex]] = {}
    for vertex in vertices:
        for plane in vertex.planes:
            members.setdefault(plane, []).append(vertex)

    removed = []
    for plane, plane_vertices in members.items():
        if len(plane_vertices) < MINIMUM_FACE_VERTICES:
            for vertex in plane_vertices:
                vertex.planes.discard(plane)
            removed.append(plane)
    return sorted(removed)


def _anomaly(settings: GenerationSettings, message: str, *args) -> None:
    if settings.strict:
        raise TopologyError(message % args)
    LOG.warning(message, *args)


def generate_edges(
    vertices: list[Vertex],
    settings: GenerationSettings = DEFAULT_SETTINGS,
    report: TopologyReport | None = None
) -> dict[int, dict[int, NeighborSlots]]:
    """Build per-plane adjacency between vertices.

    Args:
        vertices: Vertex arena; a vertex id is its position in this list
        settings: Tolerance and strictness
        report: Collects recovered anomalies

    Returns:
        ``{plane_id: {vertex_id: NeighborSlots}}`` for planes with at least
        three connected vertices
    """
    if report is None:
        report = TopologyReport()

    faces: dict[int, dict[int, NeighborSlots]] = {}
    absorbed: set[int] = set()
    dropped = overflows = 0

    # Merge coincident vertices before any edge can refer to the absorbed one.
    for i in range(len(vertices) - 1):
        if i in absorbed:
            continue
        for j in range(i + 1, len(vertices)):
            if j not in absorbed and is_equal_approx(
                vertices[i].position, vertices[j].position, settings.tolerance
            ):
                vertices[i].merge(vertices[j])
                absorbed.add(j)
                report.merged_vertices += 1

    survivors = [i for i in range(len(vertices)) if i not in absorbed]
    for position, i in enumerate(survivors):
        for j in survivors[position + 1:]:
            a, b = vertices[i], vertices[j]
            shared = a.shared_planes(b)
            if len(shared) < 2:
                continue
            if len(shared) > 2:
                dropped += 1
                if settings.strict:
                    raise TopologyError(
                        f"Vertices {i} and {j} share {len(shared)} planes: {shared}"
                    )
                continue

            for plane in shared:
                adjacency = faces.setdefault(plane, {})
                for here, there in ((i, j), (j, i)):
                    result = adjacency.setdefault(here, NeighborSlots()).add(there)
                    if result is SlotResult.FULL:
                        overflows += 1
                        if settings.strict:
                            raise TopologyError(
                                f"Vertex {here} has more than two neighbours on plane {plane}"
                            )

    report.dropped_pairs += dropped
    report.slot_overflows += overflows
    if dropped:
        LOG.warning("Dropped %d vertex pairs sharing more than two planes", dropped)
    if overflows:
        LOG.warning("%d neighbour slots overflowed; affected faces may be malformed", overflows)

    for plane in sorted(faces):
        if len(faces[plane]) < MINIMUM_FACE_VERTICES:
            del faces[plane]
            report.discarded_planes.append(plane)
    return faces


def trace_face(
    adjacency: dict[int, NeighborSlots],
    limit: int = 100
) -> tuple[list[int], bool]:
    """Walk a plane's adjacency into a loop of vertex ids.

    Starts at the first vertex and its first neighbour and never steps back
    to the vertex it just came from.

    Args:
        adjacency: ``{vertex_id: NeighborSlots}`` for one plane
        limit: Maximum number of steps

    Returns:
        ``(loop, closed)``; ``closed`` is False when the walk hit a dead end,
        revisited a vertex or ran out of steps, in which case ``loop`` holds
        the distinct vertices visited so far
    """
    if not adjacency:
        return [], False
    start = next(iter(adjacency))
    here = adjacency[start].first
    if here is None:
        return [], False

    loop = [start]
    visited = {start}
    previous = start
    steps = 0
    while here != start:
        if here in visited or steps >= limit:
            return loop, False
        loop.append(here)
        visited.add(here)
        steps += 1
        slots = adjacency.get(here)
        following = slots.next_after(previous) if slots is not None else None
        previous, here = here, following
        if here is None:
            return loop, False
    return loop, True


def orient_loop(positions: np.ndarray, normal: np.ndarray, clockwise: bool = False) -> np.ndarray:
    """Order a loop counter-clockwise (or clockwise) seen from the side ``normal`` points to."""
    counter_clockwise = float(np.dot(winding_normal(positions), normal)) > 0
    if counter_clockwise == clockwise:
        return positions[::-1].copy()
    return positions


@dataclass
class TracedFace:
    """A wound boundary loop on one plane.

    Attributes:
        plane_id: Generating plane
        vertex_ids: Loop as vertex ids, in winding order
        positions: Loop as an (n, 3) array, in winding order
        closed: False if the walk was truncated
    """

    plane_id: int
    vertex_ids: list[int]
    positions: np.ndarray
    closed: bool = True


def trace_faces(
    edges: dict[int, dict[int, NeighborSlots]],
    vertices: list[Vertex],
    planes: list[Plane],
    settings: GenerationSettings = DEFAULT_SETTINGS,
    report: TopologyReport | None = None
) -> list[TracedFace]:
    """Trace every surviving plane into a wound face, in plane-id order."""
    if report is None:
        report = TopologyReport()

    traced = []
    for plane_id in sorted(edges):
        loop, closed = trace_face(edges[plane_id], settings.trace_limit)
        if len(loop) < MINIMUM_FACE_VERTICES:
            report.short_faces.append(plane_id)
            _anomaly(settings, "Plane %d traced to only %d vertices", plane_id, len(loop))
            continue
        if not closed:
            report.truncated_faces.append(plane_id)
            _anomaly(settings, "Boundary of plane %d did not close after %d vertices", plane_id, len(loop))

        positions = np.array([vertices[v].position for v in loop], dtype=np.float64)
        oriented = orient_loop(positions, planes[plane_id].normal, settings.clockwise)
        if oriented is not positions:
            loop = loop[::-1]
        traced.append(TracedFace(plane_id, loop, oriented, closed))
    return traced
