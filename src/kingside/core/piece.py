"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass, replace

from kingside.core.enums import Color, PieceType
from kingside.core.types import Coord

_LETTERS = "PNBRQK"  # indexed by PieceType - 1

_FEN_CHARS: dict[tuple[Color, PieceType], str] = {}
for _ptype in PieceType:
    _letter = _LETTERS[_ptype - 1]
    _FEN_CHARS[(Color.WHITE, _ptype)] = _letter
    _FEN_CHARS[(Color.BLACK, _ptype)] = _letter.lower()

_CHAR_MAP: dict[str, tuple[Color, PieceType]] = {v: k for k, v in _FEN_CHARS.items()}


@dataclass(frozen=True, slots=True)
class Piece:
    """Immutable chess piece standing on ``position``.

    ``has_moved`` only matters for castling. A piece that moves is replaced
    by a new value (see :meth:`moved_to`), so one value never sits on two
    squares.
    """

    piece_type: PieceType
    color: Color
    position: Coord
    has_moved: bool = False

    def __str__(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        return _FEN_CHARS[(self.color, self.piece_type)]

    @classmethod
    def from_char(
        cls, char: str, position: Coord, *, has_moved: bool = False
    ) -> Piece:
        """Piece for FEN letter *char* on *position*, e.g. ``'n'`` is a black knight."""
        try:
            color, ptype = _CHAR_MAP[char]
        except KeyError:
            raise ValueError(f"Invalid piece character: {char!r}") from None
        return cls(ptype, color, Coord(*position), has_moved)

    # ── Movement ─────────────────────────────────────────────────────────

    def moved_to(self, position: tuple[int, int]) -> Piece:
        """Copy of this piece standing on *position*, marked as moved."""
        return replace(self, position=Coord(*position), has_moved=True)

    def placed_at(self, position: tuple[int, int]) -> Piece:
        """Copy on *position* keeping its ``has_moved`` flag."""
        return replace(self, position=Coord(*position))
