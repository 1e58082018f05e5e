"""Tests for GameState."""

import pytest

from kingside.core.enums import Color, GameStatus, PieceType
from kingside.core.notation import STARTING_FEN, FenError
from kingside.core.types import parse_square
from kingside.game.state import GameState
from kingside.settings import GameSettings

CASTLING_READY = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1"


def _state(fen: str | None = None, **settings: bool) -> GameState:
    gs = GameState(settings=GameSettings(**settings))
    gs.reset(fen)
    return gs


def _play(gs: GameState, *moves: str) -> None:
    for text in moves:
        assert gs.apply_uci(text) is not None, text


class TestSetup:
    def test_defaults(self) -> None:
        gs = GameState()
        assert gs.current_player == Color.WHITE
        assert gs.status == GameStatus.PLAYING
        assert gs.move_log == []
        assert gs.captured == {Color.WHITE: [], Color.BLACK: []}
        assert gs.fen() == STARTING_FEN

    def test_custom_fen(self) -> None:
        gs = _state("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1")
        assert gs.current_player == Color.BLACK
        assert gs.board[parse_square("e4")] is not None

    def test_bad_fen_raises(self) -> None:
        with pytest.raises(FenError):
            _state("not a fen")

    def test_reset_clears_everything(self) -> None:
        gs = GameState()
        _play(gs, "e2e4", "d7d5", "e4d5")
        gs.reset()
        assert gs.ply_count == 0
        assert gs.current_player == Color.WHITE
        assert gs.captured[Color.BLACK] == []
        assert gs.fen() == STARTING_FEN

    def test_flip_board(self) -> None:
        gs = GameState()
        gs.flip_board()
        assert gs.board_flipped
        gs.reset()
        assert not gs.board_flipped


class TestSelection:
    def test_select_own_piece(self) -> None:
        gs = GameState()
        moves = gs.select(parse_square("g1"))
        assert set(moves) == {parse_square("f3"), parse_square("h3")}
        assert gs.selected_piece is not None

    def test_select_opponent_piece_keeps_selection(self) -> None:
        gs = GameState()
        gs.select(parse_square("e2"))
        gs.select(parse_square("e7"))
        assert gs.selected_piece is not None
        assert gs.selected_piece.position == parse_square("e2")

    def test_select_empty_square_clears(self) -> None:
        gs = GameState()
        gs.select(parse_square("e2"))
        assert gs.select(parse_square("e4")) == []
        assert gs.selected_piece is None
        assert gs.valid_moves == []

    def test_select_none_clears(self) -> None:
        gs = GameState()
        gs.select(parse_square("e2"))
        gs.select(None)
        assert gs.selected_piece is None


class TestApplyMove:
    def test_apply_switches_turn_and_logs(self) -> None:
        gs = GameState()
        gs.select(parse_square("e2"))
        record = gs.apply_move(parse_square("e4"))
        assert record is not None
        assert record.uci == "e2e4"
        assert record.piece.has_moved is False
        assert gs.board[parse_square("e4")].has_moved is True
        assert gs.current_player == Color.BLACK
        assert gs.selected_piece is None
        assert gs.move_log == [record]

    def test_illegal_destination_is_noop(self) -> None:
        gs = GameState()
        gs.select(parse_square("e2"))
        before = gs.board.copy()
        assert gs.apply_move(parse_square("e5")) is None
        assert gs.board == before
        assert gs.current_player == Color.WHITE
        assert gs.move_log == []

    def test_apply_without_selection_is_noop(self) -> None:
        gs = GameState()
        assert gs.apply_move(parse_square("e4")) is None

    def test_capture_recorded_by_captured_color(self) -> None:
        gs = GameState()
        _play(gs, "e2e4", "d7d5", "e4d5")
        record = gs.last_move
        assert record is not None and record.is_capture
        assert [p.piece_type for p in gs.captured[Color.BLACK]] == [PieceType.PAWN]
        assert gs.captured[Color.WHITE] == []

    def test_malformed_move_string(self) -> None:
        gs = GameState()
        with pytest.raises(ValueError):
            gs.apply_uci("e2e")

    def test_moving_opponent_piece_is_rejected(self) -> None:
        gs = GameState()
        assert gs.apply_uci("e7e5") is None


class TestStatus:
    def test_check_is_reported(self) -> None:
        gs = GameState()
        _play(gs, "e2e4", "f7f6", "d1h5")
        assert gs.status == GameStatus.CHECK
        assert gs.last_move is not None and gs.last_move.is_check

    def test_check_hidden_when_reporting_disabled(self) -> None:
        gs = _state(report_check=False)
        _play(gs, "e2e4", "f7f6", "d1h5")
        assert gs.status == GameStatus.PLAYING
        assert gs.last_move is not None and not gs.last_move.is_check

    def test_fools_mate(self) -> None:
        gs = GameState()
        _play(gs, "f2f3", "e7e5", "g2g4", "d8h4")
        assert gs.status == GameStatus.CHECKMATE
        assert gs.is_game_over
        assert gs.last_move is not None and gs.last_move.is_checkmate
        assert gs.legal_moves() == []

    def test_checkmate_from_position(self) -> None:
        gs = _state("r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 4 4")
        gs.select(parse_square("h5"))
        record = gs.apply_move(parse_square("f7"))
        assert record is not None
        assert gs.status == GameStatus.CHECKMATE

    def test_no_moves_after_game_over(self) -> None:
        gs = GameState()
        _play(gs, "f2f3", "e7e5", "g2g4", "d8h4")
        assert gs.apply_uci("e1f2") is None

    def test_stalemate(self) -> None:
        gs = _state("7k/8/5K2/6Q1/8/8/8/8 w - - 0 1")
        _play(gs, "g5g6")
        assert gs.status == GameStatus.STALEMATE


class TestCastling:
    def test_king_only_by_default(self) -> None:
        gs = _state(CASTLING_READY)
        record = gs.apply_uci("e1g1")
        assert record is not None and record.is_castling
        assert gs.board[parse_square("g1")].piece_type == PieceType.KING
        assert gs.board[parse_square("h1")].piece_type == PieceType.ROOK
        assert gs.board[parse_square("f1")] is None
        assert record.rook is None

    def test_rook_relocation(self) -> None:
        gs = _state(CASTLING_READY, relocate_castling_rook=True)
        record = gs.apply_uci("e1c1")
        assert record is not None
        assert gs.board[parse_square("d1")].piece_type == PieceType.ROOK
        assert gs.board[parse_square("d1")].has_moved is True
        assert gs.board[parse_square("a1")] is None
        assert record.rook_to == parse_square("d1")


class TestUndo:
    def test_undo_on_empty_log(self) -> None:
        assert GameState().undo() is None

    @pytest.mark.parametrize(
        "moves",
        [
            ("e2e4",),
            ("e2e4", "d7d5", "e4d5"),
            ("g1f3", "g8f6", "f3g5", "f6e4"),
        ],
    )
    def test_undo_inverts_apply(self, moves: tuple[str, ...]) -> None:
        gs = GameState()
        _play(gs, *moves[:-1])
        board = gs.board.copy()
        player = gs.current_player
        captured = {color: list(pieces) for color, pieces in gs.captured.items()}
        status = gs.status

        _play(gs, moves[-1])
        gs.undo()

        assert gs.board == board
        assert gs.current_player == player
        assert gs.captured == captured
        assert gs.status == status
        assert gs.ply_count == len(moves) - 1

    def test_undo_restores_has_moved(self) -> None:
        gs = GameState()
        _play(gs, "e2e4")
        gs.undo()
        assert gs.board[parse_square("e2")].has_moved is False
        assert gs.select(parse_square("e2")) == [parse_square("e3"), parse_square("e4")]

    def test_undo_castling_with_rook_relocation(self) -> None:
        gs = _state(CASTLING_READY, relocate_castling_rook=True)
        before = gs.board.copy()
        _play(gs, "e1g1")
        assert gs.board[parse_square("f1")] is not None
        gs.undo()
        assert gs.board == before
        assert gs.current_player == Color.WHITE

    def test_undo_checkmate(self) -> None:
        gs = GameState()
        _play(gs, "f2f3", "e7e5", "g2g4", "d8h4")
        gs.undo()
        assert gs.status == GameStatus.PLAYING
        assert gs.current_player == Color.BLACK
