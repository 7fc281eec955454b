"""
Half-space construction from symmetry orbits.

Each seed's orbit becomes a group of planes sharing the seed's distance.
Parallel planes are resolved so that only the innermost one survives; the
decision is taken once per group because symmetry makes every member of an
orbit stand in the same relation to the other groups.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .errors import InsufficientHalfspacesError, MismatchedInputError
from .tolerance import PARALLEL_TOLERANCE
from .vector import Plane

LOG = logging.getLogger(__name__)

MINIMUM_HALFSPACES = 4


@dataclass
class PlaneGroup:
    """The planes generated from one seed.

    Attributes:
        seed_index: Position of the seed in the caller's input
        planes: One plane per orbit member, the seed's plane first
    """

    seed_index: int
    planes: list[Plane]

    @property
    def leading_plane(self) -> Plane:
        return self.planes[0]

    def __len__(self) -> int:
        return len(self.planes)


def planes_overlap(a: Plane, b: Plane, tolerance: float = PARALLEL_TOLERANCE) -> bool:
    """True when two planes face the same direction."""
    return float(np.dot(a.normal, b.normal)) > 1.0 - tolerance


def find_overlapping_plane(
    planes: list[Plane],
    plane: Plane,
    tolerance: float = PARALLEL_TOLERANCE
) -> Plane | None:
    """First plane in ``planes`` parallel to and facing the same way as ``plane``."""
    for candidate in planes:
        if planes_overlap(candidate, plane, tolerance):
            return candidate
    return None


def generate_planes(
    orbits: list[list[np.ndarray]],
    distances: list[float],
    seed_indices: list[int] | None = None,
    tolerance: float = PARALLEL_TOLERANCE
) -> list[PlaneGroup]:
    """Turn orbits into deduplicated plane groups.

    A new group whose leading plane is strictly closer to the centre than a
    parallel plane of an accepted group evicts that whole group. Otherwise
    the new group is the redundant one and is rejected whole. Ties keep the
    earlier group.

    Args:
        orbits: One orbit per seed
        distances: One distance per seed, shared by its orbit
        seed_indices: Index to tag each group with, defaults to the orbit position
        tolerance: Slack on the parallel test

    Returns:
        Accepted groups in acceptance order

    Raises:
        MismatchedInputError: If orbits and distances differ in length
        InsufficientHalfspacesError: If fewer than four planes are accepted
    """
    if len(orbits) != len(distances):
        raise MismatchedInputError(
            f"Got {len(orbits)} orbits but {len(distances)} distances"
        )
    if seed_indices is None:
        seed_indices = list(range(len(orbits)))

    accepted: list[PlaneGroup] = []
    for orbit, distance, seed_index in zip(orbits, distances, seed_indices, strict=True):
        if not orbit:
            continue
        candidate = Plane.from_seed(orbit[0], distance)

        valid = True
        survivors = []
        for position, group in enumerate(accepted):
            overlap = find_overlapping_plane(group.planes, candidate, tolerance)
            if overlap is None:
                survivors.append(group)
                continue
            if candidate.distance < overlap.distance:
                LOG.debug(
                    "Seed %d lies inside seed %d, dropping %d planes",
                    seed_index, group.seed_index, len(group)
                )
                continue
            LOG.debug("Seed %d is outside seed %d, skipping it", seed_index, group.seed_index)
            valid = False
            survivors.extend(accepted[position:])
            break

        accepted = survivors
        if valid:
            accepted.append(
                PlaneGroup(seed_index, [Plane.from_seed(v, distance) for v in orbit])
            )

    total = sum(len(group) for group in accepted)
    if total < MINIMUM_HALFSPACES:
        raise InsufficientHalfspacesError(
            f"Only {total} half-spaces remain; at least {MINIMUM_HALFSPACES} are needed "
            "to bound a solid"
        )
    return accepted
