"""
Readable labels for debug output.

Orbit members of a general seed are full of irrational-looking components
that are hard to compare in a log. :class:`DiagnosticNames` hands out short
letters instead: each distinct magnitude gets a lowercase letter, each
distinct vector an uppercase one. A fresh instance is made per generation
call, so labels never leak between crystals.
"""

import string

import numpy as np

from .tolerance import SQUARED_DISTANCE_TOLERANCE, ToleranceIndex, is_zero_approx


def _label(position: int, alphabet: str) -> str:
    letters = ""
    position += 1
    while position:
        position, remainder = divmod(position - 1, len(alphabet))
        letters = alphabet[remainder] + letters
    return letters


class DiagnosticNames:
    """Letter labels for scalars and vectors, scoped to one generation call."""

    def __init__(self, tolerance: float = SQUARED_DISTANCE_TOLERANCE):
        self.tolerance = tolerance
        self._scalars: list[float] = []
        self._vectors = ToleranceIndex(tolerance)

    def scalar(self, value: float) -> str:
        """'0', '1', '-1', or a sign followed by the letter for ``|value|``."""
        value = float(value)
        if value * value < self.tolerance:
            return " 0"
        if abs(value - 1.0) ** 2 < self.tolerance:
            return " 1"
        if abs(value + 1.0) ** 2 < self.tolerance:
            return "-1"
        magnitude = abs(value)
        for position, known in enumerate(self._scalars):
            if (known - magnitude) ** 2 < self.tolerance:
                break
        else:
            position = len(self._scalars)
            self._scalars.append(magnitude)
        sign = "-" if value < 0 else " "
        return sign + _label(position, string.ascii_lowercase)

    def components(self, vector) -> str:
        """Vector written with scalar letters, e.g. ``( a, -b,  1)``."""
        return "(" + ", ".join(self.scalar(c) for c in vector) + ")"

    def vector(self, vector) -> str:
        """Single uppercase label for a vector, stable within this instance."""
        v = np.asarray(vector, dtype=np.float64)
        if is_zero_approx(v, self.tolerance):
            return "0"
        ident = self._vectors.find(v)
        if ident is None:
            ident = len(self._vectors)
            self._vectors.add(v, ident)
        return _label(ident, string.ascii_uppercase)
