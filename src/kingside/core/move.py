"""Move log entry and UCI move-string helpers."""

from __future__ import annotations

from dataclasses import dataclass

from kingside.core.enums import PieceType
from kingside.core.piece import Piece
from kingside.core.types import Coord, parse_square, square_name


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """Immutable history entry written when a move is applied.

    ``piece`` and ``captured`` are snapshots taken before the move. When
    castling relocates the rook, ``rook`` holds its pre-move snapshot and
    ``rook_to`` its destination so the move can be undone exactly.
    """

    piece: Piece
    from_pos: Coord
    to_pos: Coord
    captured: Piece | None = None
    is_check: bool = False
    is_checkmate: bool = False
    rook: Piece | None = None
    rook_to: Coord | None = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_castling(self) -> bool:
        return (
            self.piece.piece_type == PieceType.KING
            and abs(self.to_pos.col - self.from_pos.col) == 2
        )

    @property
    def uci(self) -> str:
        return move_to_uci(self.from_pos, self.to_pos)

    def __str__(self) -> str:
        return self.uci


def move_to_uci(from_pos: tuple[int, int], to_pos: tuple[int, int]) -> str:
    """``(6, 4), (4, 4)`` → ``'e2e4'``."""
    return square_name(from_pos) + square_name(to_pos)


def parse_uci(text: str) -> tuple[Coord, Coord]:
    """Parse a 4-character move string into ``(from, to)`` coordinates.

    Promotion suffixes are not supported and are rejected.
    """
    if len(text) != 4:
        raise ValueError(f"Invalid move string (expected 4 chars): {text!r}")
    return parse_square(text[0:2]), parse_square(text[2:4])
