"""FEN parsing and serialization.

Only the piece-placement field drives the rules engine. The remaining fields
of a full record are carried for the external engine and the opening book;
castling legality comes from each piece's ``has_moved`` flag, never from the
castling-rights text.
"""

from __future__ import annotations

from dataclasses import dataclass

from kingside.core.board import Board
from kingside.core.enums import Color, PieceType
from kingside.core.move_generator import pawn_start_row
from kingside.core.piece import Piece
from kingside.core.types import Coord

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class FenError(ValueError):
    """Raised for malformed FEN input. No partial board is ever returned."""


# ── Placement field ──────────────────────────────────────────────────────────


def board_to_fen(board: Board) -> str:
    """Serialise the piece placement of *board* (first FEN field only)."""
    rows: list[str] = []
    for r in range(8):
        empty = 0
        row = ""
        for c in range(8):
            piece = board[(r, c)]
            if piece is None:
                empty += 1
            else:
                if empty:
                    row += str(empty)
                    empty = 0
                row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)
    return "/".join(rows)


def board_from_fen(fen: str) -> Board:
    """Decode the placement field of *fen* into a fresh :class:`Board`.

    *fen* may be a bare placement field or a full record; only the first
    field is read. Pieces standing off their home squares are marked as
    moved so that two-step pushes and castling follow the placement.
    """
    parts = fen.split()
    if not parts:
        raise FenError(f"Invalid FEN (empty): {fen!r}")
    placement = parts[0]

    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FenError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for row, rank_text in enumerate(ranks):
        col = 0
        for ch in rank_text:
            if ch.isdigit():
                step = int(ch)
                if not (1 <= step <= 8):
                    raise FenError(f"Invalid FEN digit {ch!r}: {fen!r}")
                col += step
            else:
                if col >= 8:
                    raise FenError(f"Invalid FEN rank width: {fen!r}")
                try:
                    piece = Piece.from_char(ch, Coord(row, col))
                except ValueError as exc:
                    raise FenError(f"{exc}: {fen!r}") from exc
                board.place(_with_inferred_moved_flag(piece))
                col += 1
            if col > 8:
                raise FenError(f"Invalid FEN rank width: {fen!r}")
        if col != 8:
            raise FenError(f"Invalid FEN rank width: {fen!r}")
    return board


def _with_inferred_moved_flag(piece: Piece) -> Piece:
    row, col = piece.position
    home = piece.color.home_row
    if piece.piece_type == PieceType.PAWN:
        moved = row != pawn_start_row(piece.color)
    elif piece.piece_type == PieceType.KING:
        moved = (row, col) != (home, 4)
    elif piece.piece_type == PieceType.ROOK:
        moved = row != home or col not in (0, 7)
    else:
        return piece
    if not moved:
        return piece
    return Piece(piece.piece_type, piece.color, piece.position, True)


def castling_field(board: Board) -> str:
    """Castling-rights text derived from ``has_moved`` flags ("-" if none)."""
    text = ""
    for color, letters in ((Color.WHITE, "KQ"), (Color.BLACK, "kq")):
        home = color.home_row
        king = board[(home, 4)]
        if (
            king is None
            or king.piece_type != PieceType.KING
            or king.color != color
            or king.has_moved
        ):
            continue
        for letter, rook_col in zip(letters, (7, 0)):
            rook = board[(home, rook_col)]
            if (
                rook is not None
                and rook.piece_type == PieceType.ROOK
                and rook.color == color
                and not rook.has_moved
            ):
                text += letter
    return text or "-"


# ── Full records ─────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FenRecord:
    """All six FEN fields, kept as parsed."""

    placement: str
    side_to_move: Color = Color.WHITE
    castling: str = "-"
    en_passant: str = "-"
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @property
    def turn(self) -> str:
        return "w" if self.side_to_move == Color.WHITE else "b"

    def __str__(self) -> str:
        return format_fen_record(self)


def parse_fen_record(fen: str) -> FenRecord:
    """Parse a full FEN record (4–6 fields) and validate its placement."""
    parts = fen.split()
    if not (4 <= len(parts) <= 6):
        raise FenError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    placement, side_part, castling_part, ep_part = parts[:4]
    board_from_fen(placement)

    if side_part == "w":
        side = Color.WHITE
    elif side_part == "b":
        side = Color.BLACK
    else:
        raise FenError(f"Invalid FEN side-to-move field: {side_part!r}")

    if castling_part != "-" and (
        any(ch not in "KQkq" for ch in castling_part)
        or len(set(castling_part)) != len(castling_part)
    ):
        raise FenError(f"Invalid FEN castling field: {castling_part!r}")

    try:
        halfmove = int(parts[4]) if len(parts) > 4 else 0
        fullmove = int(parts[5]) if len(parts) > 5 else 1
    except ValueError:
        raise FenError(f"Invalid FEN clock fields: {fen!r}") from None
    if halfmove < 0:
        raise FenError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    if fullmove < 1:
        raise FenError(f"Invalid FEN fullmove number: {parts[5]!r}")

    return FenRecord(placement, side, castling_part, ep_part, halfmove, fullmove)


def format_fen_record(record: FenRecord) -> str:
    return (
        f"{record.placement} {record.turn} {record.castling} "
        f"{record.en_passant} {record.halfmove_clock} {record.fullmove_number}"
    )


def position_to_fen(board: Board, side_to_move: Color, ply_count: int = 0) -> str:
    """Full record for *board*; clocks beyond the move number are not tracked."""
    record = FenRecord(
        placement=board_to_fen(board),
        side_to_move=side_to_move,
        castling=castling_field(board),
        fullmove_number=ply_count // 2 + 1,
    )
    return format_fen_record(record)
