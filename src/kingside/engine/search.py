"""Search request parameters and the engine request/response models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from kingside.core.board import Board
from kingside.core.enums import Color, GameStage, PieceType
from kingside.core.notation import position_to_fen

_ENDGAME_MAX_PIECES = 12
_MIDDLEGAME_MIN_MOVED_PIECES = 6
_MIDDLEGAME_MIN_LOG_LENGTH = 20
_OPENING_MAX_DEPTH = 12
_ENDGAME_EXTRA_DEPTH = 3
_MAX_TIMEOUT_CAP_MS = 8000

_BASE_TIMEOUT_MS: dict[GameStage, int] = {
    GameStage.OPENING: 800,
    GameStage.MIDDLEGAME: 1500,
    GameStage.ENDGAME: 2000,
}


class Difficulty(IntEnum):
    """Difficulty presets; the value is the requested search depth."""

    EASY = 1
    MEDIUM = 2
    HARD = 4
    EXPERT = 16

    @property
    def depth(self) -> int:
        return int(self)


# ── Stage-dependent parameters ───────────────────────────────────────────────


def classify_stage(board: Board, move_count: int) -> GameStage:
    """Endgame by material, middlegame by development or game length."""
    if board.piece_count() <= _ENDGAME_MAX_PIECES:
        return GameStage.ENDGAME
    moved_pieces = sum(
        1 for p in board if p.has_moved and p.piece_type != PieceType.PAWN
    )
    if (
        moved_pieces >= _MIDDLEGAME_MIN_MOVED_PIECES
        or move_count > _MIDDLEGAME_MIN_LOG_LENGTH
    ):
        return GameStage.MIDDLEGAME
    return GameStage.OPENING


def adapt_depth(base_depth: int, stage: GameStage) -> int:
    if stage == GameStage.OPENING:
        return min(base_depth, _OPENING_MAX_DEPTH)
    if stage == GameStage.ENDGAME:
        return base_depth + _ENDGAME_EXTRA_DEPTH
    return base_depth


def base_timeout_ms(stage: GameStage) -> int:
    return _BASE_TIMEOUT_MS[stage]


def max_timeout_ms(base_ms: int, depth: int) -> int:
    """Overall time cap, scaled by difficulty and capped at 8 s."""
    return int(min(_MAX_TIMEOUT_CAP_MS, base_ms * depth / 3))


# ── Wire models ──────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class SearchRequest:
    """One evaluation request sent to the external engine."""

    position: str
    depth: int
    move_time_ms: int
    max_timeout_ms: int
    request_id: str


@dataclass(slots=True, frozen=True)
class BestMoveResponse:
    move: str
    source: str = "engine"


@dataclass(slots=True, frozen=True)
class EvaluationResponse:
    """Informational search progress.

    ``score`` is in pawns, or the signed mate distance when ``is_mate``.
    """

    depth: int
    score: float
    is_mate: bool = False
    elapsed_ms: int | None = None
    nodes: int | None = None
    principal_variation: str | None = None


@dataclass(slots=True, frozen=True)
class ErrorResponse:
    reason: str


EngineResponse = BestMoveResponse | EvaluationResponse | ErrorResponse


def build_request(
    board: Board,
    side_to_move: Color,
    move_count: int,
    base_depth: int,
    request_id: str,
) -> SearchRequest:
    """Adapt *base_depth* and timeouts to the position's stage."""
    stage = classify_stage(board, move_count)
    depth = adapt_depth(base_depth, stage)
    base_ms = base_timeout_ms(stage)
    return SearchRequest(
        position=position_to_fen(board, side_to_move, move_count),
        depth=depth,
        move_time_ms=base_ms,
        max_timeout_ms=max_timeout_ms(base_ms, depth),
        request_id=request_id,
    )
