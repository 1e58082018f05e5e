"""Core domain layer: pure chess logic with zero external dependencies.

Quick start::

    from kingside.core import Board, Color, MoveGenerator, move_to_uci

    board = Board.initial()
    gen = MoveGenerator(board)
    for piece, dest in gen.legal_moves_for(Color.WHITE):
        print(move_to_uci(piece.position, dest))
"""

from kingside.core.board import Board, Square
from kingside.core.enums import Color, GameStage, GameStatus, PieceType
from kingside.core.move import MoveRecord, move_to_uci, parse_uci
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import (
    STARTING_FEN,
    FenError,
    FenRecord,
    board_from_fen,
    board_to_fen,
    parse_fen_record,
    position_to_fen,
)
from kingside.core.piece import Piece
from kingside.core.rules import Rules
from kingside.core.types import Coord, parse_square, square_name

__all__ = [
    # Enums
    "Color",
    "GameStage",
    "GameStatus",
    "PieceType",
    # Types / helpers
    "Coord",
    "parse_square",
    "square_name",
    # Domain objects
    "Board",
    "MoveGenerator",
    "MoveRecord",
    "Piece",
    "Rules",
    "Square",
    # Notation
    "STARTING_FEN",
    "FenError",
    "FenRecord",
    "board_from_fen",
    "board_to_fen",
    "move_to_uci",
    "parse_fen_record",
    "parse_uci",
    "position_to_fen",
]
