"""High-level chess rules: check, checkmate, stalemate."""

from __future__ import annotations

from kingside.core.board import Board
from kingside.core.enums import Color, GameStatus
from kingside.core.move_generator import MoveGenerator


class Rules:
    """Static rule-checker that operates on a :class:`Board`."""

    @staticmethod
    def is_in_check(board: Board, color: Color) -> bool:
        return MoveGenerator(board).is_in_check(color)

    @staticmethod
    def has_legal_move(board: Board, color: Color) -> bool:
        return MoveGenerator(board).has_legal_move(color)

    @staticmethod
    def is_checkmate(board: Board, color: Color) -> bool:
        gen = MoveGenerator(board)
        if not gen.is_in_check(color):
            return False
        return not gen.has_legal_move(color)

    @staticmethod
    def is_stalemate(board: Board, color: Color) -> bool:
        gen = MoveGenerator(board)
        if gen.is_in_check(color):
            return False
        return not gen.has_legal_move(color)

    @staticmethod
    def status(board: Board, color: Color, *, report_check: bool = True) -> GameStatus:
        """Status of the game with *color* to move.

        With ``report_check=False`` a plain check is reported as PLAYING,
        matching the historical behavior where only mate was detected.
        """
        gen = MoveGenerator(board)
        in_check = gen.is_in_check(color)
        if not gen.has_legal_move(color):
            return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
        if in_check and report_check:
            return GameStatus.CHECK
        return GameStatus.PLAYING
