"""Tests for GameController, the turn orchestrator."""

from kingside.core.enums import Color, GameStatus
from kingside.core.move import MoveRecord
from kingside.core.types import parse_square
from kingside.engine.search import SearchRequest
from kingside.game.controller import GameController
from kingside.game.interfaces import GamePhase
from kingside.game.player import AIPlayer, HumanPlayer
from kingside.game.state import GameState
from kingside.settings import GameSettings


def _make_hh_controller(fen: str | None = None) -> GameController:
    ctrl = GameController()
    ctrl.new_game(HumanPlayer(Color.WHITE, "W"), HumanPlayer(Color.BLACK, "B"), fen=fen)
    return ctrl


def _make_bot_controller(
    requests: list[SearchRequest], cancels: list[bool] | None = None
) -> GameController:
    ctrl = GameController()
    bot = AIPlayer(
        Color.BLACK,
        depth=2,
        on_request_move=requests.append,
        on_cancel=(lambda: cancels.append(True)) if cancels is not None else None,
    )
    ctrl.new_game(HumanPlayer(Color.WHITE), bot)
    return ctrl


class TestNewGame:
    def test_phase_awaiting(self) -> None:
        assert _make_hh_controller().phase == GamePhase.AWAITING_MOVE

    def test_players_assigned(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.player(Color.WHITE) is not None
        assert ctrl.player(Color.BLACK) is not None
        cp = ctrl.current_player
        assert cp is not None and cp.color == Color.WHITE

    def test_custom_fen(self) -> None:
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
        ctrl = _make_hh_controller(fen=fen)
        assert ctrl.state.current_player == Color.BLACK

    def test_settings_reach_state(self) -> None:
        ctrl = GameController(GameSettings(report_check=False))
        assert ctrl.state.settings.report_check is False


class TestSubmitMove:
    def test_legal_move_accepted(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.submit_move(parse_square("e2"), parse_square("e4"))
        assert ctrl.state.current_player == Color.BLACK

    def test_illegal_move_rejected(self) -> None:
        ctrl = _make_hh_controller()
        assert not ctrl.submit_move(parse_square("e2"), parse_square("e5"))
        assert ctrl.state.current_player == Color.WHITE

    def test_submit_uci(self) -> None:
        ctrl = _make_hh_controller()
        assert ctrl.submit_uci("g1f3")
        assert not ctrl.submit_uci("garbage")

    def test_move_event_fires(self) -> None:
        ctrl = _make_hh_controller()
        moves: list[str] = []
        ctrl.events.on_move.append(lambda record, _state: moves.append(record.uci))
        ctrl.submit_uci("e2e4")
        assert moves == ["e2e4"]

    def test_checkmate_ends_game(self) -> None:
        ctrl = _make_hh_controller()
        statuses: list[GameStatus] = []
        ctrl.events.on_status_changed.append(statuses.append)
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            assert ctrl.submit_uci(text)
        assert statuses[-1] == GameStatus.CHECKMATE
        assert ctrl.phase == GamePhase.GAME_OVER
        assert not ctrl.submit_uci("e1f2")

    def test_moves_rejected_before_new_game(self) -> None:
        assert not GameController().submit_uci("e2e4")


class TestUndo:
    def test_undo_restores_turn(self) -> None:
        ctrl = _make_hh_controller()
        ctrl.submit_uci("e2e4")
        assert ctrl.undo_move()
        assert ctrl.state.current_player == Color.WHITE
        assert ctrl.state.move_log == []

    def test_undo_empty(self) -> None:
        assert not _make_hh_controller().undo_move()

    def test_undo_after_checkmate(self) -> None:
        ctrl = _make_hh_controller()
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            ctrl.submit_uci(text)
        assert ctrl.undo_move()
        assert ctrl.phase == GamePhase.AWAITING_MOVE
        assert ctrl.state.status == GameStatus.PLAYING


class TestBotTurns:
    def test_bot_is_prompted_after_human_move(self) -> None:
        requests: list[SearchRequest] = []
        ctrl = _make_bot_controller(requests)
        ctrl.submit_uci("e2e4")
        assert ctrl.phase == GamePhase.THINKING
        assert len(requests) == 1
        assert " b " in requests[0].position

    def test_human_cannot_move_for_bot(self) -> None:
        ctrl = _make_bot_controller([])
        ctrl.submit_uci("e2e4")
        assert not ctrl.submit_uci("e7e5")

    def test_bot_move_applied(self) -> None:
        ctrl = _make_bot_controller([])
        ctrl.submit_uci("e2e4")
        assert ctrl.apply_bot_move("e7e5", "book")
        assert ctrl.phase == GamePhase.AWAITING_MOVE
        assert ctrl.state.current_player == Color.WHITE

    def test_bot_move_outside_bot_turn_ignored(self) -> None:
        ctrl = _make_bot_controller([])
        assert not ctrl.apply_bot_move("e2e4")
        assert ctrl.state.move_log == []

    def test_illegal_bot_move_is_substituted(self) -> None:
        ctrl = _make_bot_controller([])
        ctrl.submit_uci("e2e4")
        assert ctrl.apply_bot_move("e7e8", "fallback")
        record = ctrl.state.last_move
        assert isinstance(record, MoveRecord)
        assert record.uci == "d7d5"

    def test_malformed_bot_move_is_substituted(self) -> None:
        ctrl = _make_bot_controller([])
        ctrl.submit_uci("e2e4")
        assert ctrl.apply_bot_move("e7e8q", "engine")
        assert ctrl.state.current_player == Color.WHITE

    def test_bot_not_prompted_when_game_is_over(self) -> None:
        requests: list[SearchRequest] = []
        ctrl = GameController()
        bot = AIPlayer(Color.BLACK, on_request_move=requests.append)
        # Black to move and already checkmated.
        ctrl.new_game(
            HumanPlayer(Color.WHITE),
            bot,
            fen="r1bqkb1r/pppp1Qpp/2n2n2/4p3/2B1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 0 4",
        )
        assert ctrl.state.status == GameStatus.CHECKMATE
        assert ctrl.phase == GamePhase.GAME_OVER
        assert requests == []

    def test_undo_cancels_thinking_bot(self) -> None:
        cancels: list[bool] = []
        requests: list[SearchRequest] = []
        ctrl = _make_bot_controller(requests, cancels)
        ctrl.submit_uci("e2e4")
        assert ctrl.undo_move()
        assert cancels == [True]
        assert ctrl.phase == GamePhase.AWAITING_MOVE

    def test_bot_starts_as_white(self) -> None:
        requests: list[SearchRequest] = []
        ctrl = GameController()
        ctrl.new_game(
            AIPlayer(Color.WHITE, on_request_move=requests.append),
            HumanPlayer(Color.BLACK),
        )
        assert ctrl.phase == GamePhase.THINKING
        assert requests[0].request_id == "0"
        assert isinstance(ctrl.state, GameState)
