"""Pseudo-legal and legal move generation + attack detection.

Two generation forms are kept apart:

* the *attack surface* (:meth:`MoveGenerator.attack_targets`) answers "which
  squares could this piece capture on" and never looks at check, and
* *pseudo-legal* generation (:meth:`MoveGenerator.pseudo_legal_moves`) which
  is filtered afterwards by :meth:`MoveGenerator.would_leave_king_in_check`.

Check detection only ever uses the attack surface, so legality filtering
never recurses into the opponent's pseudo-legal moves.
"""

from __future__ import annotations

from kingside.core.board import Board
from kingside.core.enums import Color, PieceType
from kingside.core.piece import Piece
from kingside.core.types import Coord, is_on_board

# (row delta, col delta); order fixes generation order.
KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)

BISHOP_DIRS: tuple[tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
QUEEN_DIRS: tuple[tuple[int, int], ...] = ROOK_DIRS + BISHOP_DIRS

_KING_HOME_COL = 4
_KINGSIDE_ROOK_COL = 7
_QUEENSIDE_ROOK_COL = 0


# -- Precomputed lookup tables ---------------------------------------------

Targets = tuple[tuple[tuple[Coord, ...], ...], ...]
Rays = tuple[tuple[tuple[tuple[Coord, ...], ...], ...], ...]


def _build_targets(offsets: tuple[tuple[int, int], ...]) -> Targets:
    table: list[tuple[tuple[Coord, ...], ...]] = []
    for row in range(8):
        row_targets: list[tuple[Coord, ...]] = []
        for col in range(8):
            row_targets.append(
                tuple(
                    Coord(row + dr, col + dc)
                    for dr, dc in offsets
                    if is_on_board(row + dr, col + dc)
                )
            )
        table.append(tuple(row_targets))
    return tuple(table)


def _build_rays(directions: tuple[tuple[int, int], ...]) -> Rays:
    table: list[tuple[tuple[tuple[Coord, ...], ...], ...]] = []
    for row in range(8):
        row_rays: list[tuple[tuple[Coord, ...], ...]] = []
        for col in range(8):
            square_rays: list[tuple[Coord, ...]] = []
            for dr, dc in directions:
                r, c = row + dr, col + dc
                ray: list[Coord] = []
                while is_on_board(r, c):
                    ray.append(Coord(r, c))
                    r += dr
                    c += dc
                square_rays.append(tuple(ray))
            row_rays.append(tuple(square_rays))
        table.append(tuple(row_rays))
    return tuple(table)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)

_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_ROOK_RAYS = _build_rays(ROOK_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)

_SLIDER_RAYS: dict[PieceType, Rays] = {
    PieceType.BISHOP: _BISHOP_RAYS,
    PieceType.ROOK: _ROOK_RAYS,
    PieceType.QUEEN: _QUEEN_RAYS,
}


def pawn_start_row(color: Color) -> int:
    return 6 if color == Color.WHITE else 1


class MoveGenerator:
    """Generates moves for the pieces on a :class:`Board`.

    The generator never mutates the board it was given; speculative moves
    are played on :meth:`Board.copy` clones.
    """

    __slots__ = ("_board",)

    def __init__(self, board: Board) -> None:
        self._board = board

    @property
    def board(self) -> Board:
        return self._board

    # -- Public API ---------------------------------------------------------

    def legal_moves(self, piece: Piece) -> list[Coord]:
        """Destinations of *piece* that do not leave its own king in check."""
        return [
            dest
            for dest in self.pseudo_legal_moves(piece)
            if not self.would_leave_king_in_check(piece, dest)
        ]

    def pseudo_legal_moves(self, piece: Piece) -> list[Coord]:
        """Destinations of *piece* ignoring self-check."""
        pt = piece.piece_type
        if pt == PieceType.PAWN:
            return self._gen_pawn(piece)
        if pt == PieceType.KNIGHT:
            return self._gen_stepper(piece, _KNIGHT_TARGETS)
        if pt == PieceType.KING:
            moves = self._gen_stepper(piece, _KING_TARGETS)
            self._gen_castling(piece, moves)
            return moves
        return self._gen_sliding(piece, _SLIDER_RAYS[pt])

    def legal_moves_for(self, color: Color) -> list[tuple[Piece, Coord]]:
        """All legal ``(piece, destination)`` pairs for *color*, scan order."""
        return [
            (piece, dest)
            for piece in self._board.pieces(color)
            for dest in self.legal_moves(piece)
        ]

    def pseudo_legal_moves_for(self, color: Color) -> list[tuple[Piece, Coord]]:
        """All pseudo-legal ``(piece, destination)`` pairs for *color*."""
        return [
            (piece, dest)
            for piece in self._board.pieces(color)
            for dest in self.pseudo_legal_moves(piece)
        ]

    def has_legal_move(self, color: Color) -> bool:
        for piece in self._board.pieces(color):
            for dest in self.pseudo_legal_moves(piece):
                if not self.would_leave_king_in_check(piece, dest):
                    return True
        return False

    # -- Attack detection (public) -----------------------------------------

    def attack_targets(self, piece: Piece) -> list[Coord]:
        """Squares *piece* could capture on.

        Pawns contribute only their two diagonals; forward pushes are not
        attacks. Castling is never part of the attack surface.
        """
        pt = piece.piece_type
        if pt == PieceType.PAWN:
            row, col = piece.position
            step = piece.color.forward
            return [
                Coord(row + step, c)
                for c in (col - 1, col + 1)
                if is_on_board(row + step, c)
            ]
        if pt == PieceType.KNIGHT:
            return self._gen_stepper(piece, _KNIGHT_TARGETS)
        if pt == PieceType.KING:
            return self._gen_stepper(piece, _KING_TARGETS)
        return self._gen_sliding(piece, _SLIDER_RAYS[pt])

    def is_square_under_attack(
        self, coord: tuple[int, int], defending_color: Color
    ) -> bool:
        """Is *coord* attacked by any piece not of *defending_color*?"""
        target = Coord(*coord)
        for piece in self._board:
            if piece.color == defending_color:
                continue
            if target in self.attack_targets(piece):
                return True
        return False

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked? False when the king is missing."""
        king = self._board.find_king(color)
        if king is None:
            return False
        return self.is_square_under_attack(king.position, color)

    def would_leave_king_in_check(self, piece: Piece, dest: tuple[int, int]) -> bool:
        """Play *piece* → *dest* on a clone and test the mover's king."""
        scratch = self._board.copy()
        scratch.remove(piece.position)
        scratch[dest] = piece.moved_to(dest)
        return MoveGenerator(scratch).is_in_check(piece.color)

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, piece: Piece) -> list[Coord]:
        board = self._board
        row, col = piece.position
        step = piece.color.forward
        moves: list[Coord] = []

        one_step = Coord(row + step, col)
        if is_on_board(*one_step) and board.is_empty(one_step):
            moves.append(one_step)
            if row == pawn_start_row(piece.color):
                two_step = Coord(row + 2 * step, col)
                if board.is_empty(two_step):
                    moves.append(two_step)

        for c in (col - 1, col + 1):
            if not is_on_board(row + step, c):
                continue
            target = board[(row + step, c)]
            if target is not None and target.color != piece.color:
                moves.append(Coord(row + step, c))
        return moves

    def _gen_stepper(self, piece: Piece, table: Targets) -> list[Coord]:
        board = self._board
        row, col = piece.position
        moves: list[Coord] = []
        for to in table[row][col]:
            target = board[to]
            if target is None or target.color != piece.color:
                moves.append(to)
        return moves

    def _gen_sliding(self, piece: Piece, table: Rays) -> list[Coord]:
        board = self._board
        row, col = piece.position
        moves: list[Coord] = []
        for ray in table[row][col]:
            for to in ray:
                target = board[to]
                if target is None:
                    moves.append(to)
                    continue
                if target.color != piece.color:
                    moves.append(to)
                break
        return moves

    def _gen_castling(self, king: Piece, moves: list[Coord]) -> None:
        row = king.color.home_row
        if king.has_moved or king.position != (row, _KING_HOME_COL):
            return
        if self.is_in_check(king.color):
            return

        if self._can_castle(king, _KINGSIDE_ROOK_COL):
            moves.append(Coord(row, _KING_HOME_COL + 2))
        if self._can_castle(king, _QUEENSIDE_ROOK_COL):
            moves.append(Coord(row, _KING_HOME_COL - 2))

    def _can_castle(self, king: Piece, rook_col: int) -> bool:
        board = self._board
        row = king.position.row
        rook = board[(row, rook_col)]
        if (
            rook is None
            or rook.piece_type != PieceType.ROOK
            or rook.color != king.color
            or rook.has_moved
        ):
            return False

        direction = 1 if rook_col > _KING_HOME_COL else -1
        for col in range(_KING_HOME_COL + direction, rook_col, direction):
            if not board.is_empty((row, col)):
                return False

        end_col = _KING_HOME_COL + 2 * direction
        for col in range(_KING_HOME_COL, end_col + direction, direction):
            if self.is_square_under_attack((row, col), king.color):
                return False
        return True
