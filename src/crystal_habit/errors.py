"""Exceptions raised while building a crystal."""


class CrystalConfigurationError(ValueError):
    """The input cannot describe a bounded crystal. No polyhedron is produced."""


class MismatchedInputError(CrystalConfigurationError):
    """Normals and distances do not pair up."""


class InsufficientHalfspacesError(CrystalConfigurationError):
    """Fewer than four half-spaces survived deduplication."""


class EmptyOrbitError(CrystalConfigurationError):
    """A seed produced no orbit members."""


class UnknownPointGroupError(CrystalConfigurationError):
    """The point-group selector is not in the table."""


class TopologyError(RuntimeError):
    """A topological anomaly was found while ``strict`` generation was requested."""
