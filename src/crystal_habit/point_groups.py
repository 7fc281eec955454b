"""
Point-group table.

The 32 crystallographic point groups, with the trigonal ones listed in both
rhombohedral and hexagonal axes, plus an identity-only sentinel at index 0:
41 entries in all. Each entry stores a minimal list of generator operations.
Applying the generators repeatedly to a vector produces its full orbit.

Operations are integer 3x3 matrices acting on column vectors, written in
Jones-faithful notation (``'-y,x-y,z'`` is the threefold about c in
hexagonal axes).
"""

import re
from enum import IntEnum

import numpy as np

from .errors import UnknownPointGroupError

_TERM_REGEX = re.compile(r"([+-]?)([xyz])")


def symmetry_operation(symbol: str) -> np.ndarray:
    """Decode a Jones-faithful string into an integer rotation matrix.

    >>> symmetry_operation('-y,x-y,z').tolist()
    [[0, -1, 0], [1, -1, 0], [0, 0, 1]]
    """
    rows = symbol.replace(" ", "").lower().split(",")
    if len(rows) != 3:
        raise ValueError(f"Expected three comma separated rows: {symbol!r}")
    matrix = np.zeros((3, 3), dtype=np.int64)
    for i, row in enumerate(rows):
        terms = _TERM_REGEX.findall(row)
        if not terms:
            raise ValueError(f"Row {i} of {symbol!r} has no x, y or z term")
        for sign, axis in terms:
            matrix[i, "xyz".index(axis)] = -1 if sign == "-" else 1
    return matrix


# Seitz-style names: 2[uvw] diad, m[uvw] mirror normal, n+[uvw] rotation,
# -n+[uvw] rotoinversion.
OPERATIONS: dict[str, np.ndarray] = {
    "1": symmetry_operation("x,y,z"),
    "-1": symmetry_operation("-x,-y,-z"),
    "2[001]": symmetry_operation("-x,-y,z"),
    "2[010]": symmetry_operation("-x,y,-z"),
    "2[100]": symmetry_operation("x,-y,-z"),
    "2[110]": symmetry_operation("y,x,-z"),
    "2[1-10]": symmetry_operation("-y,-x,-z"),
    "m[001]": symmetry_operation("x,y,-z"),
    "m[010]": symmetry_operation("x,-y,z"),
    "m[100]": symmetry_operation("-x,y,z"),
    "m[110]": symmetry_operation("-y,-x,z"),
    "m[1-10]": symmetry_operation("y,x,z"),
    "4+[001]": symmetry_operation("-y,x,z"),
    "-4+[001]": symmetry_operation("y,-x,-z"),
    "3+[111]": symmetry_operation("z,x,y"),
    "3+[001]": symmetry_operation("-y,x-y,z"),
}


class PointGroup(IntEnum):
    NONE = 0
    # Triclinic
    ONE = 1
    BAR_ONE = 2
    # Monoclinic, unique axis b
    TWO = 3
    M = 4
    TWO_M = 5
    # Orthorhombic
    TWO_TWO_TWO = 6
    MM_TWO = 7
    MMM = 8
    # Tetragonal
    FOUR = 9
    BAR_FOUR = 10
    FOUR_M = 11
    FOUR_TWO_TWO = 12
    FOUR_MM = 13
    BAR_FOUR_TWO_M = 14
    FOUR_MMM = 15
    # Trigonal, rhombohedral axes
    THREE_R = 16
    BAR_THREE_R = 17
    THREE_TWO_R = 18
    THREE_M_R = 19
    BAR_THREE_M_R = 20
    # Trigonal, hexagonal axes
    THREE = 21
    BAR_THREE = 22
    THREE_ONE_TWO = 23
    THREE_TWO_ONE = 24
    THREE_M_ONE = 25
    THREE_ONE_M = 26
    BAR_THREE_ONE_M = 27
    BAR_THREE_M_ONE = 28
    # Hexagonal
    SIX = 29
    BAR_SIX = 30
    SIX_M = 31
    SIX_TWO_TWO = 32
    SIX_MM = 33
    BAR_SIX_M_TWO = 34
    SIX_MMM = 35
    # Cubic
    TWO_THREE = 36
    M_BAR_THREE = 37
    FOUR_THREE_TWO = 38
    BAR_FOUR_THREE_M = 39
    M_BAR_THREE_M = 40


POINT_GROUP_NAMES: tuple[str, ...] = (
    "none",
    "1", "-1",
    "2", "m", "2/m",
    "222", "mm2", "mmm",
    "4", "-4", "4/m", "422", "4mm", "-42m", "4/mmm",
    "3R", "-3R", "32R", "3mR", "-3mR",
    "3", "-3", "312", "321", "3m1", "31m", "-31m", "-3m1",
    "6", "-6", "6/m", "622", "6mm", "-6m2", "6/mmm",
    "23", "m-3", "432", "-43m", "m-3m",
)

# Common short forms resolved to the table's settings.
POINT_GROUP_ALIASES: dict[str, str] = {
    "32": "321",
    "3m": "3m1",
    "-3m": "-3m1",
    "m3": "m-3",
    "m3m": "m-3m",
}

_GENERATORS: tuple[tuple[str, ...], ...] = (
    ("1",),                                  # none
    ("1",),                                  # 1
    ("-1",),                                 # -1
    ("2[010]",),                             # 2
    ("m[010]",),                             # m
    ("2[010]", "-1"),                        # 2/m
    ("2[001]", "2[010]"),                    # 222
    ("2[001]", "m[010]"),                    # mm2
    ("2[001]", "2[010]", "-1"),              # mmm
    ("2[001]", "4+[001]"),                   # 4
    ("2[001]", "-4+[001]"),                  # -4
    ("2[001]", "4+[001]", "-1"),             # 4/m
    ("2[001]", "4+[001]", "2[010]"),         # 422
    ("2[001]", "4+[001]", "m[010]"),         # 4mm
    ("2[001]", "-4+[001]", "2[010]"),        # -42m
    ("2[001]", "4+[001]", "2[010]", "-1"),   # 4/mmm
    ("3+[111]",),                            # 3R
    ("3+[111]", "-1"),                       # -3R
    ("3+[111]", "2[1-10]"),                  # 32R
    ("3+[111]", "m[1-10]"),                  # 3mR
    ("3+[111]", "2[1-10]", "-1"),            # -3mR
    ("3+[001]",),                            # 3
    ("3+[001]", "-1"),                       # -3
    ("3+[001]", "2[1-10]"),                  # 312
    ("3+[001]", "2[110]"),                   # 321
    ("3+[001]", "m[110]"),                   # 3m1
    ("3+[001]", "m[1-10]"),                  # 31m
    ("3+[001]", "2[1-10]", "-1"),            # -31m
    ("3+[001]", "2[110]", "-1"),             # -3m1
    ("3+[001]", "2[001]"),                   # 6
    ("3+[001]", "m[001]"),                   # -6
    ("3+[001]", "2[001]", "-1"),             # 6/m
    ("3+[001]", "2[001]", "2[110]"),         # 622
    ("3+[001]", "2[001]", "m[110]"),         # 6mm
    ("3+[001]", "m[001]", "m[110]"),         # -6m2
    ("3+[001]", "2[001]", "2[110]", "-1"),   # 6/mmm
    ("2[001]", "2[010]", "3+[111]"),         # 23
    ("2[001]", "2[010]", "3+[111]", "-1"),   # m-3
    ("2[001]", "2[010]", "3+[111]", "2[110]"),         # 432
    ("2[001]", "2[010]", "3+[111]", "m[1-10]"),        # -43m
    ("2[001]", "2[010]", "3+[111]", "2[110]", "-1"),   # m-3m
)

POINT_GROUP_ORDERS: tuple[int, ...] = (
    1,
    1, 2,
    2, 2, 4,
    4, 4, 8,
    4, 4, 8, 8, 8, 8, 16,
    3, 6, 6, 6, 12,
    3, 6, 6, 6, 6, 6, 12, 12,
    6, 6, 12, 12, 12, 12, 24,
    12, 24, 24, 24, 48,
)

# Table indices whose operations are written in hexagonal axes.
HEXAGONAL_AXES = range(21, 36)

_SYSTEMS = (
    (range(0, 1), "none"),
    (range(1, 3), "triclinic"),
    (range(3, 6), "monoclinic"),
    (range(6, 9), "orthorhombic"),
    (range(9, 16), "tetragonal"),
    (range(16, 21), "trigonal"),
    (range(21, 29), "trigonal"),
    (range(29, 36), "hexagonal"),
    (range(36, 41), "cubic"),
)

# (a, b, c, alpha, beta, gamma) in length units and degrees. The values are
# arbitrary but keep each system's distinguishing axes visibly different.
_DEFAULT_CELLS = {
    "none": (1.0, 1.0, 1.0, 90.0, 90.0, 90.0),
    "triclinic": (1.0, 1.5, 2.0, 30.0, 60.0, 80.0),
    "monoclinic": (1.0, 2.0, 1.5, 90.0, 60.0, 90.0),
    "orthorhombic": (1.0, 1.5, 2.0, 90.0, 90.0, 90.0),
    "tetragonal": (1.0, 1.0, 1.5, 90.0, 90.0, 90.0),
    "rhombohedral": (1.0, 1.0, 1.0, 60.0, 60.0, 60.0),
    "hexagonal": (1.0, 1.0, 1.5, 90.0, 90.0, 120.0),
    "cubic": (1.0, 1.0, 1.0, 90.0, 90.0, 90.0),
}


def get_point_group(selector) -> PointGroup:
    """Resolve a ``PointGroup``, table index or Hermann-Mauguin symbol.

    Raises:
        UnknownPointGroupError: If the selector is not in the table
    """
    if isinstance(selector, PointGroup):
        return selector
    if isinstance(selector, str):
        symbol = selector.strip()
        symbol = POINT_GROUP_ALIASES.get(symbol, symbol)
        try:
            return PointGroup(POINT_GROUP_NAMES.index(symbol))
        except ValueError:
            pass
        try:
            return PointGroup[symbol.upper()]
        except KeyError:
            raise UnknownPointGroupError(f"Unknown point group: {selector!r}") from None
    if isinstance(selector, (int, np.integer)) and not isinstance(selector, bool):
        try:
            return PointGroup(int(selector))
        except ValueError:
            raise UnknownPointGroupError(
                f"Point group index {selector} is outside 0..{len(POINT_GROUP_NAMES) - 1}"
            ) from None
    raise UnknownPointGroupError(f"Cannot interpret {selector!r} as a point group")


def get_point_group_operations(selector) -> list[np.ndarray]:
    """Generator matrices of a point group, in table order."""
    group = get_point_group(selector)
    return [OPERATIONS[name] for name in _GENERATORS[group]]


def point_group_name(selector) -> str:
    return POINT_GROUP_NAMES[get_point_group(selector)]


def point_group_order(selector) -> int:
    """Number of operations in the full group."""
    return POINT_GROUP_ORDERS[get_point_group(selector)]


def uses_hexagonal_axes(selector) -> bool:
    return get_point_group(selector) in HEXAGONAL_AXES


def crystal_system(selector) -> str:
    """Crystal system name, with rhombohedral settings reported as 'trigonal'."""
    group = get_point_group(selector)
    for indices, name in _SYSTEMS:
        if group in indices:
            return name
    raise UnknownPointGroupError(f"No crystal system for {group!r}")


def default_cell_parameters(selector) -> tuple[float, float, float, float, float, float]:
    """Display cell ``(a, b, c, alpha, beta, gamma)`` for a group, angles in degrees."""
    group = get_point_group(selector)
    if 16 <= group <= 20:
        return _DEFAULT_CELLS["rhombohedral"]
    if group in HEXAGONAL_AXES:
        return _DEFAULT_CELLS["hexagonal"]
    return _DEFAULT_CELLS[crystal_system(group)]
