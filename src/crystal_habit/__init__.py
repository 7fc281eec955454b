"""
Crystal Habit - Convex Crystal Polyhedron Generator.

Computes the closed boundary of a crystal from a few symmetrically unique
face normals, their distances and one of the crystallographic point groups.
Each seed face is expanded into its symmetry orbit and the crystal is the
intersection of the resulting half-spaces.

Example:
    >>> from crystal_habit import generate_polyhedron
    >>>
    >>> crystal = generate_polyhedron([(1, 1, 1), (1, 0, 0)], [1.0, 0.75], 'm-3m')
    >>> print(len(crystal.faces), len(crystal.vertices))
    14 24

    >>> # Faces are grouped by the seed they came from
    >>> crystal.find_face_group(1)
    1
"""

__version__ = "1.0.0"

# Core generation
from .geometry import (
    create_cube,
    create_dodecahedron,
    create_octahedron,
    create_truncated_octahedron,
    generate_polyhedron,
    qhull_vertices,
)

# Errors
from .errors import (
    CrystalConfigurationError,
    EmptyOrbitError,
    InsufficientHalfspacesError,
    MismatchedInputError,
    TopologyError,
    UnknownPointGroupError,
)

# Data classes
from .models import (
    DEFAULT_LATTICE,
    Face,
    FaceGroup,
    LatticeParams,
    Polyhedron,
    get_lattice_for_point_group,
)

# Point groups and symmetry
from .point_groups import (
    POINT_GROUP_NAMES,
    PointGroup,
    get_point_group,
    get_point_group_operations,
    point_group_name,
    point_group_order,
)
from .settings import DEFAULT_SETTINGS, GenerationSettings
from .symmetry import expand_orbit, generate_equivalent_faces
from .topology import TopologyReport
from .vector import Plane

__all__ = [
    # Version
    "__version__",
    # Core functions
    "generate_polyhedron",
    "qhull_vertices",
    # Convenience constructors
    "create_octahedron",
    "create_cube",
    "create_dodecahedron",
    "create_truncated_octahedron",
    # Data classes
    "Polyhedron",
    "Face",
    "FaceGroup",
    "Plane",
    "TopologyReport",
    "LatticeParams",
    "DEFAULT_LATTICE",
    "get_lattice_for_point_group",
    # Settings
    "GenerationSettings",
    "DEFAULT_SETTINGS",
    # Errors
    "CrystalConfigurationError",
    "MismatchedInputError",
    "InsufficientHalfspacesError",
    "EmptyOrbitError",
    "UnknownPointGroupError",
    "TopologyError",
    # Symmetry
    "PointGroup",
    "POINT_GROUP_NAMES",
    "get_point_group",
    "get_point_group_operations",
    "point_group_name",
    "point_group_order",
    "expand_orbit",
    "generate_equivalent_faces",
]
