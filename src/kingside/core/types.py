"""Coordinate type and square-name helpers.

Board layout (row-major, white at the bottom)::

    row 0 = rank 8   a8 b8 ... h8
    ...
    row 7 = rank 1   a1 b1 ... h1

``col`` 0–7 maps to files a–h.
"""

from __future__ import annotations

from typing import NamedTuple

_FILES = "abcdefgh"
_RANKS = "12345678"


class Coord(NamedTuple):
    """Board coordinate, ``(row, col)`` with row 0 at the top (rank 8)."""

    row: int
    col: int


def is_on_board(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8


def square_name(coord: tuple[int, int]) -> str:
    """Human-readable name, e.g. ``(6, 4)`` → ``'e2'``."""
    row, col = coord
    return _FILES[col] + str(8 - row)


def parse_square(name: str) -> Coord:
    """Parse square name, e.g. ``'e4'`` → ``Coord(4, 4)``."""
    if len(name) != 2 or name[0] not in _FILES or name[1] not in _RANKS:
        raise ValueError(f"Invalid square name: {name!r}")
    return Coord(8 - int(name[1]), _FILES.index(name[0]))
