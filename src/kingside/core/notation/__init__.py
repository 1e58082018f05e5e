"""Notation package: FEN placement codec and full FEN records."""

from kingside.core.notation.fen import (
    STARTING_FEN,
    FenError,
    FenRecord,
    board_from_fen,
    board_to_fen,
    castling_field,
    format_fen_record,
    parse_fen_record,
    position_to_fen,
)

__all__ = [
    "STARTING_FEN",
    "FenError",
    "FenRecord",
    "board_from_fen",
    "board_to_fen",
    "castling_field",
    "format_fen_record",
    "parse_fen_record",
    "position_to_fen",
]
