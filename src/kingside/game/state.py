"""Mutable game state: board, turn, selection, log, status."""

from __future__ import annotations

from dataclasses import dataclass, field

from kingside.core.board import Board
from kingside.core.enums import Color, GameStatus, PieceType
from kingside.core.move import MoveRecord, parse_uci
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import board_from_fen, parse_fen_record, position_to_fen
from kingside.core.piece import Piece
from kingside.core.rules import Rules
from kingside.core.types import Coord
from kingside.settings import GameSettings


def _empty_captures() -> dict[Color, list[Piece]]:
    return {Color.WHITE: [], Color.BLACK: []}


@dataclass
class GameState:
    """Full game state.

    Changed only through :meth:`select`, :meth:`apply_move`, :meth:`undo`
    and :meth:`reset`. ``captured`` is keyed by the color of the captured
    piece: ``captured[Color.BLACK]`` lists the black pieces white has taken.
    """

    settings: GameSettings = field(default_factory=GameSettings)
    board: Board = field(default_factory=Board.initial)
    current_player: Color = Color.WHITE
    selected_piece: Piece | None = None
    valid_moves: list[Coord] = field(default_factory=list)
    status: GameStatus = GameStatus.PLAYING
    captured: dict[Color, list[Piece]] = field(default_factory=_empty_captures)
    move_log: list[MoveRecord] = field(default_factory=list)
    board_flipped: bool = False

    def __post_init__(self) -> None:
        self.board_flipped = self.settings.board_flipped
        self._refresh_status()

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def is_game_over(self) -> bool:
        return self.status.is_terminal

    @property
    def ply_count(self) -> int:
        return len(self.move_log)

    @property
    def last_move(self) -> MoveRecord | None:
        return self.move_log[-1] if self.move_log else None

    def fen(self) -> str:
        return position_to_fen(self.board, self.current_player, self.ply_count)

    def legal_moves(self) -> list[tuple[Piece, Coord]]:
        """Every legal ``(piece, destination)`` pair for the side to move."""
        return MoveGenerator(self.board).legal_moves_for(self.current_player)

    # ── Setup ────────────────────────────────────────────────────────────

    def reset(self, fen: str | None = None) -> None:
        """Back to the starting position, or to the position in *fen*.

        Raises:
            FenError: *fen* is malformed.
        """
        if fen is None:
            board = Board.initial()
            side = Color.WHITE
        else:
            record = parse_fen_record(fen)
            board = board_from_fen(record.placement)
            side = record.side_to_move

        self.board = board
        self.current_player = side
        self.captured = _empty_captures()
        self.move_log = []
        self.board_flipped = self.settings.board_flipped
        self._clear_selection()
        self._refresh_status()

    def flip_board(self) -> None:
        self.board_flipped = not self.board_flipped

    # ── Selection ────────────────────────────────────────────────────────

    def select(self, target: Piece | tuple[int, int] | None) -> list[Coord]:
        """Select a piece of the side to move and compute its legal moves.

        ``None`` or an empty square clears the selection. Selecting an
        opponent's piece leaves the current selection untouched.
        """
        if target is None:
            self._clear_selection()
            return []

        coord = target.position if isinstance(target, Piece) else Coord(*target)
        piece = self.board[coord]
        if piece is None:
            self._clear_selection()
            return []
        if piece.color != self.current_player:
            return list(self.valid_moves)

        self.selected_piece = piece
        self.valid_moves = MoveGenerator(self.board).legal_moves(piece)
        return list(self.valid_moves)

    # ── Moves ────────────────────────────────────────────────────────────

    def apply_move(self, to_pos: tuple[int, int]) -> MoveRecord | None:
        """Move the selected piece to *to_pos*.

        Returns the logged record, or None (state untouched) when nothing is
        selected or *to_pos* is not among the selection's legal moves.
        """
        piece = self.selected_piece
        if piece is None or self.is_game_over:
            return None
        dest = Coord(*to_pos)
        if dest not in self.valid_moves:
            return None

        from_pos = piece.position
        captured = self.board.remove(dest)
        self.board.remove(from_pos)
        self.board.place(piece.moved_to(dest))

        rook, rook_to = self._relocate_castling_rook(piece, dest)

        if captured is not None:
            self.captured[captured.color].append(captured)

        mover = self.current_player
        self.current_player = mover.opposite
        self._clear_selection()
        self._refresh_status()

        record = MoveRecord(
            piece=piece,
            from_pos=from_pos,
            to_pos=dest,
            captured=captured,
            is_check=self.status in (GameStatus.CHECK, GameStatus.CHECKMATE)
            and self.settings.report_check,
            is_checkmate=self.status == GameStatus.CHECKMATE,
            rook=rook,
            rook_to=rook_to,
        )
        self.move_log.append(record)
        return record

    def move(self, from_pos: tuple[int, int], to_pos: tuple[int, int]) -> MoveRecord | None:
        """Select the piece on *from_pos* and move it to *to_pos*."""
        piece = self.board[from_pos]
        if piece is None or piece.color != self.current_player:
            return None
        self.select(piece)
        record = self.apply_move(to_pos)
        if record is None:
            self._clear_selection()
        return record

    def apply_uci(self, text: str) -> MoveRecord | None:
        """Play a four-character move string such as ``'e2e4'``.

        Raises:
            ValueError: *text* is not a well-formed move string.
        """
        from_pos, to_pos = parse_uci(text)
        return self.move(from_pos, to_pos)

    def undo(self) -> MoveRecord | None:
        """Take back the last move, restoring the exact prior state."""
        if not self.move_log:
            return None
        record = self.move_log.pop()

        self.board.remove(record.to_pos)
        self.board.place(record.piece)
        if record.captured is not None:
            self.board.place(record.captured)
            self.captured[record.captured.color].pop()
        if record.rook is not None and record.rook_to is not None:
            self.board.remove(record.rook_to)
            self.board.place(record.rook)

        self.current_player = record.piece.color
        self._clear_selection()
        self._refresh_status()
        return record

    # ── Internal ─────────────────────────────────────────────────────────

    def _relocate_castling_rook(
        self, king: Piece, dest: Coord
    ) -> tuple[Piece | None, Coord | None]:
        if not self.settings.relocate_castling_rook:
            return None, None
        if king.piece_type != PieceType.KING or abs(dest.col - king.position.col) != 2:
            return None, None

        row = dest.row
        if dest.col > king.position.col:
            rook_from, rook_to = Coord(row, 7), Coord(row, 5)
        else:
            rook_from, rook_to = Coord(row, 0), Coord(row, 3)
        rook = self.board.remove(rook_from)
        if rook is None:
            return None, None
        self.board.place(rook.moved_to(rook_to))
        return rook, rook_to

    def _clear_selection(self) -> None:
        self.selected_piece = None
        self.valid_moves = []

    def _refresh_status(self) -> None:
        self.status = Rules.status(
            self.board,
            self.current_player,
            report_check=self.settings.report_check,
        )
