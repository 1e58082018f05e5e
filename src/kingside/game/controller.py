"""Turn orchestration between players and the game state.

Emits events via simple callbacks so a UI or tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from kingside.core.enums import Color, GameStatus
from kingside.core.move import MoveRecord, move_to_uci, parse_uci
from kingside.engine.opening_book import default_move_for
from kingside.game.interfaces import GamePhase, IPlayer
from kingside.game.state import GameState
from kingside.settings import GameSettings

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, GameState], None]
StatusCallback = Callable[[GameStatus], None]
PhaseCallback = Callable[[GamePhase], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_status_changed: list[StatusCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController:
    """Validates and applies moves, switches turns, prompts bot players.

    Single-threaded: bot answers are delivered on the Qt main thread through
    :meth:`apply_bot_move`.
    """

    __slots__ = ("_state", "_players", "_phase", "events")

    def __init__(self, settings: GameSettings | None = None) -> None:
        self._state = GameState(settings=settings or GameSettings())
        self._players: dict[Color, IPlayer] = {}
        self._phase = GamePhase.NOT_STARTED
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def current_player(self) -> IPlayer | None:
        return self._players.get(self._state.current_player)

    def player(self, color: Color) -> IPlayer | None:
        return self._players.get(color)

    # ── Game lifecycle ───────────────────────────────────────────────────

    def new_game(self, white: IPlayer, black: IPlayer, fen: str | None = None) -> None:
        """Start a game; *fen* (full record) sets a custom start position."""
        self._cancel_bot()
        self._players = {Color.WHITE: white, Color.BLACK: black}
        self._state.reset(fen)
        self._emit_status()
        self._prompt_current_player()

    def reset(self) -> None:
        """Restart from the initial position with the same players."""
        self._cancel_bot()
        self._state.reset()
        self._emit_status()
        self._prompt_current_player()

    # ── Moves ────────────────────────────────────────────────────────────

    def submit_move(self, from_pos: tuple[int, int], to_pos: tuple[int, int]) -> bool:
        """Play a human move. Returns True if it was legal and applied."""
        if self._phase != GamePhase.AWAITING_MOVE:
            return False
        return self._play(from_pos, to_pos)

    def submit_uci(self, text: str) -> bool:
        """Play a human move given as a move string such as ``'e2e4'``."""
        if self._phase != GamePhase.AWAITING_MOVE:
            return False
        return self._play_uci(text)

    def apply_bot_move(self, move: str, source: str = "engine") -> bool:
        """Apply a bot's answer, substituting a legal move if it is illegal.

        Heuristic answers are not checked for self-check, and engine answers
        may be malformed; either way the bot still has to move.
        """
        cp = self.current_player
        if self._phase != GamePhase.THINKING or cp is None or cp.is_human:
            _LOGGER.debug("Ignoring %s move %s outside a bot turn", source, move)
            return False
        if self._play_uci(move):
            return True

        _LOGGER.warning("Bot %s move %s is illegal here, substituting", source, move)
        substitute = self._substitute_move()
        if substitute is None:
            _LOGGER.error("No legal move for %s", cp.color)
            return False
        return self._play_uci(substitute)

    def undo_move(self) -> bool:
        """Take back the last move (the bot's search, if any, is abandoned)."""
        if not self._state.move_log:
            return False
        self._cancel_bot()
        self._state.undo()
        self._emit_status()
        self._prompt_current_player()
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _play(self, from_pos: tuple[int, int], to_pos: tuple[int, int]) -> bool:
        record = self._state.move(from_pos, to_pos)
        if record is None:
            return False
        self._after_move(record)
        return True

    def _play_uci(self, text: str) -> bool:
        try:
            from_pos, to_pos = parse_uci(text)
        except ValueError as exc:
            _LOGGER.warning("Rejected move string: %s", exc)
            return False
        return self._play(from_pos, to_pos)

    def _substitute_move(self) -> str | None:
        color = self._state.current_player
        stock = default_move_for(self._state.board, color)
        if stock is not None:
            return stock
        legal = self._state.legal_moves()
        if not legal:
            return None
        piece, dest = legal[0]
        return move_to_uci(piece.position, dest)

    def _after_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record, self._state)
        self._emit_status()
        self._prompt_current_player()

    def _prompt_current_player(self) -> None:
        if self._state.is_game_over:
            self._set_phase(GamePhase.GAME_OVER)
            return
        cp = self.current_player
        if cp is None:
            return
        if cp.is_human:
            self._set_phase(GamePhase.AWAITING_MOVE)
            return
        self._set_phase(GamePhase.THINKING)
        cp.request_move(self._state)

    def _cancel_bot(self) -> None:
        if self._phase != GamePhase.THINKING:
            return
        cp = self.current_player
        if cp is not None and not cp.is_human:
            cp.cancel()

    def _emit_status(self) -> None:
        for cb in self.events.on_status_changed:
            cb(self._state.status)

    def _set_phase(self, phase: GamePhase) -> None:
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
