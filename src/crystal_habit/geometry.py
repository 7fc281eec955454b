"""
Crystal Habit Engine.

Computes a crystal's polyhedron from seed face normals, their distances
and a point group. Each seed is expanded into its symmetry orbit, the
orbits become half-spaces, and the crystal is everything behind every
face.
"""

import logging

import numpy as np
from scipy.optimize import linprog
from scipy.spatial import HalfspaceIntersection, cKDTree

from .diagnostics import DiagnosticNames
from .errors import MismatchedInputError
from .halfspace import generate_planes
from .models import Face, FaceGroup, Polyhedron
from .point_groups import PointGroup, get_point_group, point_group_name
from .settings import DEFAULT_SETTINGS, GenerationSettings
from .symmetry import generate_symmetry_groups
from .tolerance import is_zero_approx, round_zero
from .topology import TopologyReport, generate_edges, remove_invalid_planes, trace_faces
from .vector import Plane, as_vector
from .vertices import generate_vertices

LOG = logging.getLogger(__name__)


def _find_interior_point(
    normals: np.ndarray,
    distances: np.ndarray
) -> np.ndarray | None:
    """Centre of the largest ball behind every face, found with linprog.

    Qhull needs a point strictly inside the crystal to start from.

    Args:
        normals: Unit face normals, one row per half-space
        distances: Face distances from the origin

    Returns:
        The ball centre, or None if the faces enclose no volume
    """
    n_constraints = len(normals)

    # Unknowns are the centre and radius r; maximise r with n_i . x + r <= d_i
    c = np.array([0.0, 0.0, 0.0, -1.0])
    A_ub = np.hstack([normals, np.ones((n_constraints, 1))])
    b_ub = distances

    limit = 10.0 * max(1.0, float(np.abs(distances).max()))
    bounds = [(-limit, limit), (-limit, limit), (-limit, limit), (0.0, None)]

    result = linprog(c, A_ub=A_ub, b_ub=b_ub, bounds=bounds, method='highs')
    if result.success and result.x[3] > 1e-10:
        return result.x[:3]
    return None


def _deduplicate_vertices(
    vertices: np.ndarray,
    tolerance: float = 1e-8
) -> np.ndarray:
    """Collapse corners Qhull reports once per incident facet.

    The first point of each cluster within ``tolerance`` is kept.
    """
    if len(vertices) == 0:
        return vertices

    tree = cKDTree(vertices)
    unique_indices = []
    visited = set()
    for i in range(len(vertices)):
        if i in visited:
            continue
        visited.update(tree.query_ball_point(vertices[i], tolerance))
        unique_indices.append(i)

    return vertices[unique_indices]


def qhull_vertices(planes: list[Plane]) -> np.ndarray:
    """Vertices of the half-space intersection computed by Qhull.

    Independent of the combinatorial generator, so the two can be checked
    against each other.

    Args:
        planes: Half-spaces ``normal . x <= distance``

    Returns:
        Array of unique vertices

    Raises:
        ValueError: If the half-spaces have no interior
    """
    normals = np.array([p.normal for p in planes])
    distances = np.array([p.distance for p in planes])

    interior_point = _find_interior_point(normals, distances)
    if interior_point is None:
        raise ValueError("Half-spaces have no common interior")

    # Format: [A | -b] where Ax <= b becomes Ax - b <= 0
    halfspaces = np.hstack([normals, -distances.reshape(-1, 1)])
    hs = HalfspaceIntersection(halfspaces, interior_point)
    return _deduplicate_vertices(hs.intersections)


def _log_faces(faces: list[Face]) -> None:
    names = DiagnosticNames()
    for face in faces:
        LOG.debug(
            "Face %s on %s (seed %d): %d vertices",
            names.vector(face.plane.original_normal),
            names.components(face.plane.original_normal),
            face.seed_index,
            len(face),
        )


def generate_polyhedron(
    normals,
    distances,
    point_group=PointGroup.NONE,
    settings: GenerationSettings = DEFAULT_SETTINGS
) -> Polyhedron:
    """Generate a crystal from seed normals and distances.

    The face of seed ``s`` at distance ``d`` is the plane ``s . x = d``;
    for a unit seed ``d`` is the distance from the centre. Seeds that are
    zero vectors or have zero distance are dropped; the remaining seeds
    keep their input index for face-group attribution.

    Args:
        normals: N seed vectors
        distances: N distances, paired with the seeds
        point_group: ``PointGroup``, table index or Hermann-Mauguin symbol
        settings: Tolerances, threading and strictness

    Returns:
        Polyhedron with faces grouped by seed

    Raises:
        MismatchedInputError: If normals and distances differ in length
        InsufficientHalfspacesError: If fewer than four half-spaces remain
        EmptyOrbitError: If a seed repeats an earlier direction in strict mode
        UnknownPointGroupError: If the point group is not in the table
        TopologyError: On topological anomalies in strict mode
    """
    normals = list(normals)
    distances = list(distances)
    if len(normals) != len(distances):
        raise MismatchedInputError(
            f"Got {len(normals)} normals but {len(distances)} distances"
        )
    group = get_point_group(point_group)

    seeds = []
    seed_distances = []
    seed_indices = []
    for index, (normal, distance) in enumerate(zip(normals, distances, strict=True)):
        seed = as_vector(normal)
        if is_zero_approx(seed, settings.tolerance) or round_zero(distance, settings.tolerance) == 0:
            LOG.debug("Dropping seed %d: zero normal or distance", index)
            continue
        seeds.append(seed)
        seed_distances.append(float(distance))
        seed_indices.append(index)

    orbits = generate_symmetry_groups(
        seeds, group, strict=settings.strict, tolerance=settings.tolerance
    )
    plane_groups = generate_planes(
        orbits, seed_distances, seed_indices, settings.parallel_tolerance
    )

    planes = []
    plane_seeds = []
    for plane_group in plane_groups:
        planes.extend(plane_group.planes)
        plane_seeds.extend([plane_group.seed_index] * len(plane_group))
    LOG.debug(
        "%d seeds under %s gave %d planes in %d groups",
        len(seeds), point_group_name(group), len(planes), len(plane_groups)
    )

    vertices = generate_vertices(planes, settings)

    report = TopologyReport()
    report.pruned_planes = remove_invalid_planes(vertices)
    edges = generate_edges(vertices, settings, report)
    traced = trace_faces(edges, vertices, planes, settings, report)

    face_groups = {
        plane_group.seed_index: FaceGroup(plane_group.seed_index)
        for plane_group in plane_groups
    }
    for face in traced:
        seed_index = plane_seeds[face.plane_id]
        face_groups[seed_index].faces.append(
            Face(face.plane_id, planes[face.plane_id], face.positions, seed_index, face.closed)
        )

    polyhedron = Polyhedron(
        face_groups=[g for g in face_groups.values() if g.faces],
        planes=planes,
        seed_planes={
            index: Plane.from_seed(orbit[0], distance)
            for index, orbit, distance in zip(seed_indices, orbits, seed_distances, strict=True)
        },
        point_group=group,
        report=report,
    )

    LOG.debug(
        "Generated %d faces from %d vertices", len(polyhedron.faces), len(vertices)
    )
    if LOG.isEnabledFor(logging.DEBUG):
        _log_faces(polyhedron.faces)
    return polyhedron


def create_octahedron(scale: float = 1.0) -> Polyhedron:
    """Octahedron from the {111} form of m-3m, corners at ``scale`` on each axis."""
    return generate_polyhedron([(1, 1, 1)], [scale], PointGroup.M_BAR_THREE_M)


def create_cube(scale: float = 1.0) -> Polyhedron:
    """Cube from the {100} form of m-3m, faces at ``scale`` from the centre."""
    return generate_polyhedron([(1, 0, 0)], [scale], PointGroup.M_BAR_THREE_M)


def create_dodecahedron(scale: float = 1.0) -> Polyhedron:
    """Rhombic dodecahedron from the {110} form of m-3m.

    The seed is scaled so ``scale`` is the distance to each face.
    """
    return generate_polyhedron(
        [(1, 1, 0)], [scale * np.sqrt(2)], PointGroup.M_BAR_THREE_M
    )


def create_truncated_octahedron(
    octahedron_scale: float = 1.0,
    cube_scale: float = 0.75
) -> Polyhedron:
    """Octahedron {111} with its corners cut by the cube {100}.

    Args:
        octahedron_scale: Axis intercept of the octahedron faces
        cube_scale: Distance of the cube faces; below ``octahedron_scale``
            they truncate, at or above it they miss the crystal

    Returns:
        Polyhedron with an octahedron group and, when it cuts, a cube group
    """
    return generate_polyhedron(
        [(1, 1, 1), (1, 0, 0)],
        [octahedron_scale, cube_scale],
        PointGroup.M_BAR_THREE_M
    )
