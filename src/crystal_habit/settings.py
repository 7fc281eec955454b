"""
Generation settings.

All tunables of the pipeline live in one frozen dataclass so that a single
call to :func:`crystal_habit.generate_polyhedron` is fully described by its
arguments.
"""

from dataclasses import dataclass, replace

from .tolerance import (
    DENOMINATOR_TOLERANCE,
    PARALLEL_TOLERANCE,
    PLANE_TOLERANCE,
    SQUARED_DISTANCE_TOLERANCE,
)


@dataclass(frozen=True)
class GenerationSettings:
    """Tolerances, fan-out and strictness for polyhedron generation.

    Attributes:
        tolerance: Squared distance under which two points are the same
        parallel_tolerance: Slack on dot products for (anti)parallel normals
        denominator_tolerance: Minimum squared triple product of a plane triple
        plane_tolerance: How far in front of a plane a point may sit and
            still count as inside
        parallel_threshold: Plane count above which vertex generation fans
            out over worker threads
        allow_parallel: Set False to always generate vertices on the caller's thread
        max_workers: Worker thread count, None for the executor default
        trace_limit: Maximum steps when walking a face boundary
        clockwise: Wind faces clockwise seen from outside instead of
            counter-clockwise
        strict: Raise :class:`~crystal_habit.errors.TopologyError` on
            topological anomalies instead of recovering
    """

    tolerance: float = SQUARED_DISTANCE_TOLERANCE
    parallel_tolerance: float = PARALLEL_TOLERANCE
    denominator_tolerance: float = DENOMINATOR_TOLERANCE
    plane_tolerance: float = PLANE_TOLERANCE
    parallel_threshold: int = 40
    allow_parallel: bool = True
    max_workers: int | None = None
    trace_limit: int = 100
    clockwise: bool = False
    strict: bool = False

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")
        if self.trace_limit < 3:
            raise ValueError("trace_limit must allow at least a triangle")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    def replace(self, **changes) -> "GenerationSettings":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


DEFAULT_SETTINGS = GenerationSettings()
