"""
Symmetry expansion of seed normals.

A seed normal is expanded into its orbit by applying the point group's
generator operations until no new vectors appear.
"""

import logging

import numpy as np

from .errors import EmptyOrbitError
from .point_groups import get_point_group, get_point_group_operations, uses_hexagonal_axes
from .tolerance import SQUARED_DISTANCE_TOLERANCE, ToleranceIndex, is_zero_approx, round_zero
from .vector import as_vector, normalized

LOG = logging.getLogger(__name__)


def _transform(operation: np.ndarray, v: np.ndarray) -> np.ndarray:
    image = operation @ v
    return np.array([round_zero(c) for c in image], dtype=np.float64)


def apply_operation(
    vectors: list[np.ndarray],
    index: ToleranceIndex,
    operation: np.ndarray
) -> int:
    """Apply one operation to every vector and append the images not seen yet.

    Only the vectors present when the step starts are transformed; images
    appended during the step wait for the next pass.

    Args:
        vectors: Orbit under construction, extended in place
        index: Fuzzy lookup over ``vectors``, kept in sync
        operation: 3x3 symmetry matrix

    Returns:
        Number of vectors appended
    """
    count = len(vectors)
    added = 0
    for i in range(count):
        image = _transform(operation, vectors[i])
        if index.find(image) is None:
            index.add(image, len(vectors))
            vectors.append(image)
            added += 1
    return added


def expand_orbit(
    seed,
    point_group,
    seen: ToleranceIndex | None = None,
    strict: bool = False,
    tolerance: float = SQUARED_DISTANCE_TOLERANCE
) -> list[np.ndarray]:
    """Expand one seed vector into its orbit under a point group.

    The seed is always the first member. Generators run in table order and
    the passes repeat until a full pass adds nothing. Groups written in
    hexagonal axes get the Y component of every member negated afterwards,
    which maps their orbits into the display basis convention.

    Args:
        seed: Nonzero seed vector
        point_group: Any selector accepted by ``get_point_group``
        seen: Directions already claimed by earlier seeds of the same
            crystal. The orbit's directions are added to it.
        strict: Treat a seed whose direction is already in ``seen`` as an
            empty orbit instead of expanding it again
        tolerance: Squared distance for vector equality

    Returns:
        List of orbit vectors, seed first

    Raises:
        EmptyOrbitError: If the seed is zero, or is a repeated direction in
            strict mode
    """
    v = as_vector(seed)
    if is_zero_approx(v, tolerance):
        raise EmptyOrbitError("A zero seed vector has no orbit")

    group = get_point_group(point_group)
    hexagonal = uses_hexagonal_axes(group)
    display_seed = v * np.array([1.0, -1.0, 1.0]) if hexagonal else v

    if seen is not None and seen.find(normalized(display_seed)) is not None:
        if strict:
            raise EmptyOrbitError(
                f"Seed {v.tolist()} repeats a direction already generated by an earlier seed"
            )
        LOG.warning("Seed %s repeats a direction already generated by an earlier seed", v.tolist())

    vectors = [v]
    index = ToleranceIndex(tolerance)
    index.add(v, 0)
    operations = get_point_group_operations(group)
    while True:
        added = 0
        for operation in operations:
            added += apply_operation(vectors, index, operation)
        if added == 0:
            break

    if hexagonal:
        vectors = [u * np.array([1.0, -1.0, 1.0]) for u in vectors]

    if seen is not None:
        for u in vectors:
            direction = normalized(u)
            if seen.find(direction) is None:
                seen.add(direction, len(seen))

    LOG.debug("Seed %s expanded to %d vectors under %s", v.tolist(), len(vectors), group.name)
    return vectors


def generate_symmetry_groups(
    seeds,
    point_group,
    strict: bool = False,
    tolerance: float = SQUARED_DISTANCE_TOLERANCE
) -> list[list[np.ndarray]]:
    """Expand every seed, sharing one registry of seen directions.

    Returns:
        One orbit per seed, in seed order

    Raises:
        EmptyOrbitError: If any seed yields no orbit
    """
    seen = ToleranceIndex(tolerance)
    orbits = []
    for seed in seeds:
        orbit = expand_orbit(seed, point_group, seen, strict=strict, tolerance=tolerance)
        if not orbit:
            raise EmptyOrbitError(f"Seed {list(seed)} produced an empty orbit")
        orbits.append(orbit)
    return orbits


def generate_equivalent_faces(seed, point_group) -> list[np.ndarray]:
    """All symmetry-equivalent vectors of one seed, seed first."""
    return expand_orbit(seed, point_group)
