"""Board - piece placement on an 8x8 grid of squares."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from kingside.core.enums import Color, PieceType
from kingside.core.piece import Piece
from kingside.core.types import Coord

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass(slots=True)
class Square:
    """One cell of the grid. Owns at most one piece."""

    row: int
    col: int
    piece: Piece | None = None

    @property
    def coord(self) -> Coord:
        return Coord(self.row, self.col)


class Board:
    """Mutable 8x8 board.

    Keeps ``board[(r, c)].position == (r, c)`` for every occupied square:
    assigning a piece whose position differs re-homes a copy of it.
    """

    __slots__ = ("_grid",)

    def __init__(self) -> None:
        self._grid: list[list[Square]] = [
            [Square(r, c) for c in range(8)] for r in range(8)
        ]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, coord: tuple[int, int]) -> Piece | None:
        row, col = coord
        return self._grid[row][col].piece

    def __setitem__(self, coord: tuple[int, int], piece: Piece | None) -> None:
        row, col = coord
        if piece is not None and piece.position != (row, col):
            piece = piece.placed_at((row, col))
        self._grid[row][col].piece = piece

    @property
    def rows(self) -> tuple[tuple[Square, ...], ...]:
        """Read-only view of the grid, row 0 (rank 8) first."""
        return tuple(tuple(row) for row in self._grid)

    def is_empty(self, coord: tuple[int, int]) -> bool:
        return self[coord] is None

    def place(self, piece: Piece) -> None:
        """Put *piece* on the square named by its own position."""
        self[piece.position] = piece

    def remove(self, coord: tuple[int, int]) -> Piece | None:
        """Clear *coord* and return whatever stood there."""
        piece = self[coord]
        self[coord] = None
        return piece

    # -- Query helpers ------------------------------------------------------

    def __iter__(self) -> Iterator[Piece]:
        """Occupied squares' pieces in scan order (row 0→7, col 0→7)."""
        for row in self._grid:
            for sq in row:
                if sq.piece is not None:
                    yield sq.piece

    def pieces(self, color: Color, piece_type: PieceType | None = None) -> list[Piece]:
        """*color*'s pieces, optionally restricted to *piece_type*."""
        return [
            p
            for p in self
            if p.color == color and (piece_type is None or p.piece_type == piece_type)
        ]

    def find_king(self, color: Color) -> Piece | None:
        """*color*'s king, or None on a degenerate board."""
        for piece in self:
            if piece.piece_type == PieceType.KING and piece.color == color:
                return piece
        return None

    def piece_count(self) -> int:
        return sum(1 for _ in self)

    # -- Mutation / copying -------------------------------------------------

    def copy(self) -> Board:
        """Isolated copy; mutating it never touches this board."""
        b = Board()
        for r in range(8):
            for c in range(8):
                b._grid[r][c].piece = self._grid[r][c].piece
        return b

    def clear(self) -> None:
        for row in self._grid:
            for sq in row:
                sq.piece = None

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position."""
        b = cls()
        for col in range(8):
            b.place(Piece(PieceType.PAWN, Color.BLACK, Coord(1, col)))
            b.place(Piece(PieceType.PAWN, Color.WHITE, Coord(6, col)))

        for col, pt in enumerate(_BACK_RANK):
            b.place(Piece(pt, Color.BLACK, Coord(0, col)))
            b.place(Piece(pt, Color.WHITE, Coord(7, col)))
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return all(
            self._grid[r][c].piece == other._grid[r][c].piece
            for r in range(8)
            for c in range(8)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        rows: list[str] = []
        for r in range(8):
            row = []
            for c in range(8):
                p = self._grid[r][c].piece
                row.append(str(p) if p else ".")
            rows.append(f"{8 - r} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
