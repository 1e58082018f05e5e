"""Static opening book: canned replies for well-known early positions."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from kingside.core.board import Board
from kingside.core.enums import Color
from kingside.core.move import parse_uci
from kingside.core.move_generator import MoveGenerator

# Keys are FEN prefixes of decreasing specificity; see :func:`lookup`.
OPENING_BOOK: MappingProxyType[str, str] = MappingProxyType(
    {
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w": "e2e4",
        # 1.d4
        "rnbqkbnr/pppppppp/8/8/3P4/8/PPP1PPPP/RNBQKBNR b": "g8f6",
        "rnbqkbnr/pppppppp/8/8/3P4/8/PPP1PPPP/RNBQKBNR b KQkq": "d7d5",
        # 1.e4
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b": "e7e5",
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq": "c7c5",
        # 1.c4, 1.b4, 1.Nf3
        "rnbqkbnr/pppppppp/8/8/2P5/8/PP1PPPPP/RNBQKBNR b": "g8f6",
        "rnbqkbnr/pppppppp/8/8/1P6/8/P1PPPPPP/RNBQKBNR b": "e7e5",
        "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b": "d7d5",
        # 1.e4 e5 2.Nf3 Nc6 3.Bb5
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w": "g1f3",
        "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b": "b8c6",
        "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w": "f1b5",
    }
)


def lookup(fen: str) -> str | None:
    """Book reply for *fen*, or None.

    Tries the full record, then the placement alone, then placement + turn,
    then placement + turn + castling rights; the first hit wins.
    """
    fields = fen.split()
    candidates = (
        fen,
        " ".join(fields[:1]),
        " ".join(fields[:2]),
        " ".join(fields[:3]),
    )
    for key in candidates:
        move = OPENING_BOOK.get(key)
        if move is not None:
            return move
    return None


@dataclass(frozen=True, slots=True)
class DefaultMoves:
    """Stock moves for a side when neither book nor engine can answer."""

    opening: str
    fallback: str
    alternatives: tuple[str, ...]

    def candidates(self) -> tuple[str, ...]:
        seen: dict[str, None] = dict.fromkeys(
            (self.opening, self.fallback, *self.alternatives)
        )
        return tuple(seen)


DEFAULT_MOVES: MappingProxyType[Color, DefaultMoves] = MappingProxyType(
    {
        Color.WHITE: DefaultMoves(
            opening="e2e4",
            fallback="g1f3",
            alternatives=("d2d4", "c2c4", "g1f3", "b1c3", "f2f4"),
        ),
        Color.BLACK: DefaultMoves(
            opening="d7d5",
            fallback="e7e5",
            alternatives=("e7e5", "c7c5", "g8f6", "b8c6", "e7e6"),
        ),
    }
)


def default_move_for(board: Board, color: Color) -> str | None:
    """First stock move for *color* that is legal on *board*."""
    gen = MoveGenerator(board)
    for text in DEFAULT_MOVES[color].candidates():
        from_pos, to_pos = parse_uci(text)
        piece = board[from_pos]
        if piece is None or piece.color != color:
            continue
        if to_pos in gen.legal_moves(piece):
            return text
    return None
