"""Bot move selection: opening book, external UCI engine, heuristic fallback.

The Qt pieces (:mod:`kingside.engine.qt_bridge`, :mod:`kingside.engine.session`)
are imported from their modules directly.
"""

from kingside.engine.fallback import HeuristicEvaluator, ScoredMove
from kingside.engine.opening_book import OPENING_BOOK, default_move_for, lookup
from kingside.engine.retry import Attempt, LadderAction, LadderState, RetryLadder
from kingside.engine.search import (
    BestMoveResponse,
    Difficulty,
    EngineResponse,
    ErrorResponse,
    EvaluationResponse,
    SearchRequest,
    build_request,
)
from kingside.engine.uci import UciChannel, parse_engine_line

__all__ = [
    "OPENING_BOOK",
    "Attempt",
    "BestMoveResponse",
    "Difficulty",
    "EngineResponse",
    "ErrorResponse",
    "EvaluationResponse",
    "HeuristicEvaluator",
    "LadderAction",
    "LadderState",
    "RetryLadder",
    "ScoredMove",
    "SearchRequest",
    "UciChannel",
    "build_request",
    "default_move_for",
    "lookup",
    "parse_engine_line",
]
