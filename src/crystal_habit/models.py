"""
Data models for crystal habits.

Defines lattice parameters and the generated polyhedron with its faces.
"""

from dataclasses import dataclass, field

import numpy as np
from scipy.spatial import cKDTree

from .point_groups import PointGroup, default_cell_parameters, point_group_name
from .topology import TopologyReport
from .vector import Plane, polygon_area, winding_normal


@dataclass
class LatticeParams:
    """Crystal lattice parameters.

    Attributes:
        a, b, c: Unit cell edge lengths
        alpha: Angle between b and c (radians)
        beta: Angle between a and c (radians)
        gamma: Angle between a and b (radians)
    """
    a: float = 1.0
    b: float = 1.0
    c: float = 1.0
    alpha: float = np.pi / 2
    beta: float = np.pi / 2
    gamma: float = np.pi / 2

    @classmethod
    def cubic(cls) -> 'LatticeParams':
        """Create cubic lattice (a=b=c, all angles 90 degrees)."""
        return cls(1.0, 1.0, 1.0, np.pi / 2, np.pi / 2, np.pi / 2)

    @classmethod
    def tetragonal(cls, c_ratio: float = 1.0) -> 'LatticeParams':
        """Create tetragonal lattice (a=b!=c, all angles 90 degrees)."""
        return cls(1.0, 1.0, c_ratio, np.pi / 2, np.pi / 2, np.pi / 2)

    @classmethod
    def orthorhombic(cls, b_ratio: float = 1.0, c_ratio: float = 1.0) -> 'LatticeParams':
        """Create orthorhombic lattice (a!=b!=c, all angles 90 degrees)."""
        return cls(1.0, b_ratio, c_ratio, np.pi / 2, np.pi / 2, np.pi / 2)

    @classmethod
    def hexagonal(cls, c_ratio: float = 1.0) -> 'LatticeParams':
        """Create hexagonal lattice (a=b!=c, gamma=120 degrees)."""
        return cls(1.0, 1.0, c_ratio, np.pi / 2, np.pi / 2, 2 * np.pi / 3)

    @classmethod
    def rhombohedral(cls, alpha: float = np.pi / 3) -> 'LatticeParams':
        """Create rhombohedral lattice (a=b=c, alpha=beta=gamma)."""
        return cls(1.0, 1.0, 1.0, alpha, alpha, alpha)

    @classmethod
    def monoclinic(
        cls,
        b_ratio: float = 1.0,
        c_ratio: float = 1.0,
        beta: float = np.pi / 3
    ) -> 'LatticeParams':
        """Create monoclinic lattice (unique axis b)."""
        return cls(1.0, b_ratio, c_ratio, np.pi / 2, beta, np.pi / 2)

    @classmethod
    def triclinic(
        cls,
        a: float,
        b: float,
        c: float,
        alpha: float,
        beta: float,
        gamma: float
    ) -> 'LatticeParams':
        """Create triclinic lattice (no constraints)."""
        return cls(a, b, c, alpha, beta, gamma)

    @classmethod
    def from_degrees(
        cls,
        a: float,
        b: float,
        c: float,
        alpha: float,
        beta: float,
        gamma: float
    ) -> 'LatticeParams':
        """Create a lattice with the angles given in degrees."""
        return cls(a, b, c, np.radians(alpha), np.radians(beta), np.radians(gamma))

    def basis(self) -> np.ndarray:
        """Lattice vectors as the rows of a 3x3 matrix.

        ``a`` lies along x and ``b`` in the xy plane.
        """
        cos_alpha, cos_beta, cos_gamma = np.cos([self.alpha, self.beta, self.gamma])
        sin_gamma = np.sin(self.gamma)
        c_y = (cos_alpha - cos_beta * cos_gamma) / sin_gamma
        c_z = np.sqrt(max(0.0, 1.0 - cos_beta * cos_beta - c_y * c_y))
        return np.array([
            [self.a, 0.0, 0.0],
            [self.b * cos_gamma, self.b * sin_gamma, 0.0],
            [self.c * cos_beta, self.c * c_y, self.c * c_z],
        ])

    def unit_cell_volume(self) -> float:
        """Volume of the unit cell, ``a . (b x c)``."""
        a, b, c = self.basis()
        return float(np.dot(a, np.cross(b, c)))


# Default lattice for cubic system
DEFAULT_LATTICE = LatticeParams.cubic()


def get_lattice_for_point_group(point_group) -> LatticeParams:
    """Default display lattice for a point group's crystal system.

    Args:
        point_group: Any selector accepted by ``get_point_group``

    Returns:
        LatticeParams with the system's characteristic axes and angles
    """
    return LatticeParams.from_degrees(*default_cell_parameters(point_group))


def _transform(points: np.ndarray, basis: np.ndarray | None) -> np.ndarray:
    if basis is None:
        return points
    return points @ np.asarray(basis, dtype=np.float64)


@dataclass
class Face:
    """A wound boundary polygon on one plane.

    Attributes:
        plane_id: Index into ``Polyhedron.planes``
        plane: The generating half-space
        vertices: (n, 3) loop, counter-clockwise seen from outside unless
            clockwise winding was requested
        seed_index: Input seed whose orbit produced the plane
        closed: False if the boundary walk was cut short
    """
    plane_id: int
    plane: Plane
    vertices: np.ndarray
    seed_index: int
    closed: bool = True

    @property
    def normal(self) -> np.ndarray:
        return self.plane.normal

    def __len__(self) -> int:
        return len(self.vertices)


@dataclass
class FaceGroup:
    """Faces descended from one seed."""
    seed_index: int
    faces: list[Face] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.faces)


@dataclass
class Polyhedron:
    """A generated crystal.

    Measurements are computed from the face loops on every call. A basis
    matrix passed to them maps each vertex ``v`` to ``v @ basis``, so the
    rows of the basis are the images of the x, y and z axes.

    Attributes:
        face_groups: Faces partitioned by originating seed, in acceptance order
        planes: Every accepted half-space; ``Face.plane_id`` indexes this
        seed_planes: The plane of each surviving input seed, by seed index,
            in the same axes as ``planes``
        point_group: Symmetry the crystal was generated with
        report: Anomalies recovered from during face tracing
    """
    face_groups: list[FaceGroup]
    planes: list[Plane] = field(default_factory=list)
    seed_planes: dict[int, Plane] = field(default_factory=dict)
    point_group: PointGroup = PointGroup.NONE
    report: TopologyReport = field(default_factory=TopologyReport)

    @property
    def faces(self) -> list[Face]:
        """All faces, group by group."""
        return [face for group in self.face_groups for face in group.faces]

    @property
    def face_normals(self) -> list[np.ndarray]:
        return [face.normal for face in self.faces]

    @property
    def vertices(self) -> np.ndarray:
        """Unique vertex positions, (n, 3)."""
        return self.faces_as_indices()[0]

    def find_face_group(self, seed_index: int) -> int | None:
        """Index of the face group for a seed, or None if it has no faces.

        A seed whose planes were rejected as duplicates of another seed's
        resolves to the group holding a face on its plane.
        """
        for position, group in enumerate(self.face_groups):
            if group.seed_index == seed_index:
                return position
        plane = self.seed_planes.get(seed_index)
        if plane is None:
            return None
        for position, group in enumerate(self.face_groups):
            for face in group.faces:
                if face.plane.is_equal_approx(plane):
                    return position
        return None

    def transformed_faces(self, basis: np.ndarray | None = None) -> list[np.ndarray]:
        """Face loops with every vertex mapped through ``basis``."""
        return [_transform(face.vertices, basis) for face in self.faces]

    def face_area(self, face: Face, basis: np.ndarray | None = None) -> float:
        return polygon_area(_transform(face.vertices, basis))

    def surface_area(self, basis: np.ndarray | None = None) -> float:
        """Total face area."""
        return float(sum(polygon_area(loop) for loop in self.transformed_faces(basis)))

    def volume(self, basis: np.ndarray | None = None) -> float:
        """Enclosed volume by the divergence theorem over the face loops.

        Each face contributes ``centroid . area_normal / 3``. The absolute
        value is taken, so a basis with negative determinant is fine.
        """
        total = 0.0
        for loop in self.transformed_faces(basis):
            total += float(np.dot(loop.mean(axis=0), winding_normal(loop)))
        return abs(total) / 3

    def faces_as_indices(self, tolerance: float = 1e-8) -> tuple[np.ndarray, list[list[int]]]:
        """Indexed mesh form of the faces.

        Positions closer than ``tolerance`` share one index.

        Returns:
            (vertices, faces) where faces are lists of vertex indices
        """
        loops = [face.vertices for face in self.faces]
        if not loops:
            return np.zeros((0, 3)), []
        points = np.vstack(loops)
        tree = cKDTree(points)

        # Map every point to the first point of its cluster
        representative = np.full(len(points), -1, dtype=np.int64)
        unique = []
        for i in range(len(points)):
            if representative[i] >= 0:
                continue
            for n in tree.query_ball_point(points[i], tolerance):
                if representative[n] < 0:
                    representative[n] = len(unique)
            unique.append(i)

        faces = []
        offset = 0
        for loop in loops:
            faces.append([int(representative[offset + k]) for k in range(len(loop))])
            offset += len(loop)
        return points[unique], faces

    def get_edges(self) -> list[tuple[int, int]]:
        """Get unique edges as vertex index pairs (smaller index first)."""
        _, faces = self.faces_as_indices()
        edges = set()
        for face in faces:
            n = len(face)
            for i in range(n):
                v1, v2 = face[i], face[(i + 1) % n]
                edges.add((min(v1, v2), max(v1, v2)))
        return sorted(edges)

    def euler_characteristic(self) -> int:
        """Calculate Euler characteristic V - E + F."""
        vertices, faces = self.faces_as_indices()
        return len(vertices) - len(self.get_edges()) + len(faces)

    def center(self) -> np.ndarray:
        """Mean of the unique vertex positions."""
        vertices = self.vertices
        if len(vertices) == 0:
            return np.zeros(3)
        return vertices.mean(axis=0)

    def is_valid(self) -> bool:
        """Check if this is a closed convex polyhedron.

        Requires at least 4 closed faces, Euler characteristic 2 and no
        recovered topology anomalies.
        """
        faces = self.faces
        if len(faces) < 4:
            return False
        if not all(face.closed for face in faces):
            return False
        if self.report.has_anomalies:
            return False
        return self.euler_characteristic() == 2

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        vertices, faces = self.faces_as_indices()
        return {
            'point_group': point_group_name(self.point_group),
            'vertices': vertices.tolist(),
            'faces': faces,
            'face_normals': [n.tolist() for n in self.face_normals],
            'face_seeds': [face.seed_index for face in self.faces],
            'surface_area': self.surface_area(),
            'volume': self.volume(),
        }
