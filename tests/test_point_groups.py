"""
Tests for the point-group table and symmetry expansion.
"""

import logging

import numpy as np
import pytest

from crystal_habit import (
    POINT_GROUP_NAMES,
    EmptyOrbitError,
    PointGroup,
    UnknownPointGroupError,
    expand_orbit,
    generate_equivalent_faces,
    get_lattice_for_point_group,
    get_point_group,
    get_point_group_operations,
    point_group_name,
    point_group_order,
)
from crystal_habit.point_groups import (
    HEXAGONAL_AXES,
    crystal_system,
    symmetry_operation,
    uses_hexagonal_axes,
)
from crystal_habit.symmetry import apply_operation, generate_symmetry_groups
from crystal_habit.tolerance import ToleranceIndex

GENERAL_VECTOR = (0.123, 0.456, 0.789)


def _contains(vectors, target):
    return any(np.allclose(v, target, atol=1e-9) for v in vectors)


# =============================================================================
# Point Group Table Tests
# =============================================================================

class TestPointGroupTable:
    """Test point-group lookup and metadata."""

    def test_table_size(self):
        """41 entries including the identity sentinel."""
        assert len(POINT_GROUP_NAMES) == 41
        assert len(PointGroup) == 41
        assert POINT_GROUP_NAMES[0] == "none"
        assert POINT_GROUP_NAMES[40] == "m-3m"

    @pytest.mark.parametrize("selector", [
        PointGroup.M_BAR_THREE_M, 40, "m-3m", "m3m", "M_BAR_THREE_M",
    ])
    def test_get_point_group(self, selector):
        """Enum members, indices, symbols and aliases resolve."""
        assert get_point_group(selector) is PointGroup.M_BAR_THREE_M

    def test_rhombohedral_symbols(self):
        """Rhombohedral settings carry an R suffix."""
        assert get_point_group("-3mR") is PointGroup.BAR_THREE_M_R
        assert get_point_group("-3m") is PointGroup.BAR_THREE_M_ONE

    @pytest.mark.parametrize("selector", ["p42", 41, -1, True, 2.5, None])
    def test_unknown_point_group(self, selector):
        """Anything outside the table raises."""
        with pytest.raises(UnknownPointGroupError):
            get_point_group(selector)

    def test_point_group_name(self):
        """Names round-trip through the table."""
        for index, name in enumerate(POINT_GROUP_NAMES):
            assert point_group_name(index) == name

    def test_orders(self):
        """Spot-check full group orders."""
        assert point_group_order("1") == 1
        assert point_group_order("mmm") == 8
        assert point_group_order("4/mmm") == 16
        assert point_group_order("6/mmm") == 24
        assert point_group_order("m-3m") == 48

    def test_crystal_system(self):
        """Groups map to their crystal systems."""
        assert crystal_system("2/m") == "monoclinic"
        assert crystal_system("-3mR") == "trigonal"
        assert crystal_system("-3m1") == "trigonal"
        assert crystal_system("6mm") == "hexagonal"
        assert crystal_system("23") == "cubic"

    def test_hexagonal_axes(self):
        """Indices 21-35 are written in hexagonal axes."""
        assert uses_hexagonal_axes("3")
        assert uses_hexagonal_axes("6/mmm")
        assert not uses_hexagonal_axes("3R")
        assert not uses_hexagonal_axes("m-3m")

    def test_symmetry_operation(self):
        """Jones-faithful strings decode to integer matrices."""
        assert symmetry_operation("-y,x-y,z").tolist() == [[0, -1, 0], [1, -1, 0], [0, 0, 1]]
        assert np.array_equal(symmetry_operation("x,y,z"), np.eye(3, dtype=int))

    def test_symmetry_operation_malformed(self):
        """Rows must be three and each must mention an axis."""
        with pytest.raises(ValueError):
            symmetry_operation("x,y")
        with pytest.raises(ValueError):
            symmetry_operation("x,1,z")

    @pytest.mark.parametrize("group", [
        g for g in PointGroup if g not in HEXAGONAL_AXES
    ])
    def test_cartesian_generators_are_orthogonal(self, group):
        """Outside hexagonal axes every generator is a rotation or roto-inversion."""
        for op in get_point_group_operations(group):
            assert np.allclose(op @ op.T, np.eye(3))

    def test_default_lattices(self):
        """Default display lattices follow the crystal system."""
        hexagonal = get_lattice_for_point_group("6/mmm")
        assert hexagonal.gamma == pytest.approx(2 * np.pi / 3)
        rhombohedral = get_lattice_for_point_group("-3mR")
        assert rhombohedral.alpha == pytest.approx(np.pi / 3)
        cubic = get_lattice_for_point_group("m-3m")
        assert cubic.a == cubic.b == cubic.c


# =============================================================================
# Symmetry Expansion Tests
# =============================================================================

class TestSymmetry:
    """Test orbit expansion."""

    @pytest.mark.parametrize("group", list(PointGroup))
    def test_general_orbit_matches_order(self, group):
        """A general vector has one image per group operation."""
        orbit = expand_orbit(GENERAL_VECTOR, group)
        assert len(orbit) == point_group_order(group)

    def test_equivalent_faces_octahedron(self):
        """{111} in m-3m has 8 faces."""
        faces = generate_equivalent_faces((1, 1, 1), "m-3m")
        assert len(faces) == 8

    def test_equivalent_faces_cube(self):
        """{100} in m-3m has 6 faces."""
        faces = generate_equivalent_faces((1, 0, 0), "m-3m")
        assert len(faces) == 6
        for axis in np.vstack([np.eye(3), -np.eye(3)]):
            assert _contains(faces, axis)

    def test_equivalent_faces_dodecahedron(self):
        """{110} in m-3m has 12 faces."""
        faces = generate_equivalent_faces((1, 1, 0), "m-3m")
        assert len(faces) == 12

    def test_seed_first(self):
        """The seed leads its orbit."""
        orbit = expand_orbit((1, 2, 3), "mmm")
        assert np.allclose(orbit[0], [1, 2, 3])
        assert len(orbit) == 8

    def test_identity_sentinel(self):
        """Group 0 leaves the seed alone."""
        orbit = expand_orbit((1, 2, 3), 0)
        assert len(orbit) == 1

    def test_hexagonal_y_negated(self):
        """Hexagonal-axis orbits are mirrored in Y."""
        orbit = expand_orbit((1, 0, 0), "3")
        assert len(orbit) == 3
        assert np.allclose(orbit[0], [1, 0, 0])
        assert _contains(orbit, [0, -1, 0])
        assert _contains(orbit, [-1, 1, 0])

    def test_zero_seed(self):
        """A zero seed has no orbit."""
        with pytest.raises(EmptyOrbitError):
            expand_orbit((0, 0, 0), "m-3m")

    def test_apply_operation_snapshot(self):
        """Images added during a step are not transformed in that step."""
        vectors = [np.array([1.0, 0.0, 0.0])]
        index = ToleranceIndex()
        index.add(vectors[0], 0)
        fourfold = get_point_group_operations("4")[1]
        assert apply_operation(vectors, index, fourfold) == 1
        assert np.allclose(vectors[1], [0, 1, 0])
        # (1,0,0) maps onto (0,1,0), which is already present
        assert apply_operation(vectors, index, fourfold) == 1
        assert apply_operation(vectors, index, fourfold) == 1
        assert len(vectors) == 4
        assert apply_operation(vectors, index, fourfold) == 0

    def test_shared_registry_lenient(self, caplog):
        """A repeated direction is expanded again with a warning."""
        with caplog.at_level(logging.WARNING, logger="crystal_habit.symmetry"):
            orbits = generate_symmetry_groups([(1, 0, 0), (0, 1, 0)], "m-3m")
        assert [len(o) for o in orbits] == [6, 6]
        assert "repeats a direction" in caplog.text

    def test_shared_registry_strict(self):
        """In strict mode a repeated direction is an empty orbit."""
        with pytest.raises(EmptyOrbitError):
            generate_symmetry_groups([(1, 0, 0), (0, 0, 1)], "m-3m", strict=True)

    def test_distinct_seeds_strict(self):
        """Distinct directions pass strict mode."""
        orbits = generate_symmetry_groups([(1, 0, 0), (1, 1, 1)], "m-3m", strict=True)
        assert [len(o) for o in orbits] == [6, 8]

    @pytest.mark.parametrize("group", ["23", "m-3", "432", "-43m", "m-3m", "4/mmm", "mmm", "-3mR"])
    def test_orbit_closed_under_generators(self, group):
        """Every generator maps the orbit onto itself."""
        orbit = expand_orbit(GENERAL_VECTOR, group)
        for op in get_point_group_operations(group):
            for v in orbit:
                assert _contains(orbit, op @ v)
