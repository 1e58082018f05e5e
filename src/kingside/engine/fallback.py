"""Deterministic heuristic move selection used when the engine is unavailable.

Moves are ranked by MVV-LVA capture value, a small preference for central
destinations and a bonus for developing off a back rank. Self-check
filtering is skipped on this path, so the chosen move may leave the
mover's king in check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kingside.core.board import Board
from kingside.core.enums import Color, PieceType
from kingside.core.move import move_to_uci
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import FenError, board_from_fen, parse_fen_record
from kingside.core.piece import Piece
from kingside.core.types import Coord

_LOGGER = logging.getLogger(__name__)

PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 0,
}

_CENTER = 3.5
_MAX_CENTER_DISTANCE = 7
_CENTER_WEIGHT = 0.1
_DEVELOPMENT_BONUS = 0.2
_VICTIM_MULTIPLIER = 10


@dataclass(frozen=True, slots=True)
class ScoredMove:
    piece: Piece
    to_pos: Coord
    score: float

    @property
    def from_pos(self) -> Coord:
        return self.piece.position

    @property
    def uci(self) -> str:
        return move_to_uci(self.piece.position, self.to_pos)


def mvv_lva(attacker: Piece, victim: Piece | None) -> int:
    """``10 × victim − attacker``; zero when nothing is captured."""
    if victim is None:
        return 0
    return (
        PIECE_VALUES[victim.piece_type] * _VICTIM_MULTIPLIER
        - PIECE_VALUES[attacker.piece_type]
    )


def center_preference(dest: tuple[int, int]) -> float:
    row, col = dest
    distance = abs(col - _CENTER) + abs(row - _CENTER)
    return (_MAX_CENTER_DISTANCE - distance) * _CENTER_WEIGHT


def development_bonus(origin: tuple[int, int]) -> float:
    return _DEVELOPMENT_BONUS if origin[0] in (0, 7) else 0.0


class HeuristicEvaluator:
    """Ranks the side to move's pseudo-legal moves; first found wins ties."""

    __slots__ = ()

    def score_move(self, board: Board, piece: Piece, dest: tuple[int, int]) -> float:
        return (
            mvv_lva(piece, board[dest])
            + center_preference(dest)
            + development_bonus(piece.position)
        )

    def rank_moves(self, board: Board, color: Color) -> list[ScoredMove]:
        """All pseudo-legal moves for *color*, best first (stable sort)."""
        scored = [
            ScoredMove(piece, dest, self.score_move(board, piece, dest))
            for piece, dest in MoveGenerator(board).pseudo_legal_moves_for(color)
        ]
        return sorted(scored, key=lambda m: m.score, reverse=True)

    def select_move(self, board: Board, color: Color) -> str | None:
        """Best move as a 4-character string, or None when there is none."""
        ranked = self.rank_moves(board, color)
        if not ranked:
            _LOGGER.error("Fallback found no moves for %s", color)
            return None
        return ranked[0].uci

    def select_move_from_fen(self, fen: str) -> str | None:
        """Decode a full FEN record and pick a move for its side to move."""
        try:
            record = parse_fen_record(fen)
            board = board_from_fen(record.placement)
        except FenError as exc:
            _LOGGER.error("Fallback could not parse position: %s", exc)
            return None
        return self.select_move(board, record.side_to_move)
