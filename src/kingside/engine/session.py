"""Bot-turn orchestration: opening book, external engine, heuristic fallback."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from PyQt6.QtCore import QObject, QTimer

from kingside.core.enums import Color
from kingside.engine.fallback import HeuristicEvaluator
from kingside.engine.opening_book import lookup
from kingside.engine.qt_bridge import EngineUnavailable, UciEngineWorker
from kingside.engine.retry import LadderAction, RetryLadder
from kingside.engine.search import EvaluationResponse, SearchRequest
from kingside.game.player import AIPlayer
from kingside.settings import EngineSettings

_LOGGER = logging.getLogger(__name__)

_MOVE_DELIVERY_DELAY_MS = 0

MoveCallback = Callable[[str, str], None]  # move, source
FailureCallback = Callable[[str], None]  # reason
EvaluationCallback = Callable[[EvaluationResponse], None]


class SignalLike(Protocol):
    def connect(self, slot: Callable[..., object]) -> object: ...


class EngineWorkerLike(Protocol):
    """Minimal worker interface used by :class:`EngineSession`."""

    best_move_ready: SignalLike
    evaluation_ready: SignalLike
    search_error: SignalLike

    @property
    def is_available(self) -> bool: ...

    def start(self) -> None: ...

    def shutdown(self) -> None: ...

    def evaluate(
        self, request_id: str, fen: str, depth: int, move_time_ms: int
    ) -> None: ...

    def stop(self) -> None: ...


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class EngineSession:
    """Answers one bot turn at a time.

    The opening book is consulted first. Otherwise the position goes to the
    external engine under a :class:`RetryLadder`; when the ladder gives up,
    or no engine is running, the heuristic evaluator picks the move.
    Exactly one of ``on_move`` / ``on_failure`` fires per request unless it
    is cancelled.
    """

    __slots__ = (
        "__weakref__",
        "_settings",
        "_worker",
        "_evaluator",
        "_ladder",
        "_clock",
        "_on_move",
        "_on_failure",
        "_on_evaluation",
        "_attempt_timer",
        "_watchdog_timer",
        "_retry_timer",
        "_delivery_timer",
        "_pending_move",
        "_request_counter",
        "_is_started",
    )

    def __init__(
        self,
        *,
        on_move: MoveCallback,
        on_failure: FailureCallback | None = None,
        on_evaluation: EvaluationCallback | None = None,
        settings: EngineSettings | None = None,
        worker: EngineWorkerLike | None = None,
        clock: Callable[[], float] = _monotonic_ms,
        parent: QObject | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._worker: EngineWorkerLike = (
            worker if worker is not None else UciEngineWorker(self._settings, parent)
        )
        self._evaluator = HeuristicEvaluator()
        self._ladder = RetryLadder(
            max_attempts=self._settings.max_attempts,
            multiplier=self._settings.timeout_multiplier,
            min_timeout_ms=self._settings.min_timeout_ms,
            max_timeout_ms=self._settings.max_timeout_ms,
            watchdog_grace_ms=self._settings.watchdog_grace_ms,
        )
        self._clock = clock
        self._on_move = on_move
        self._on_failure = on_failure
        self._on_evaluation = on_evaluation

        self._attempt_timer = QTimer(parent)
        self._attempt_timer.setSingleShot(True)
        self._attempt_timer.timeout.connect(self._on_attempt_timeout)

        self._watchdog_timer = QTimer(parent)
        self._watchdog_timer.setSingleShot(True)
        self._watchdog_timer.timeout.connect(self._on_watchdog)

        self._retry_timer = QTimer(parent)
        self._retry_timer.setSingleShot(True)
        self._retry_timer.timeout.connect(self._dispatch_attempt)

        self._delivery_timer = QTimer(parent)
        self._delivery_timer.setSingleShot(True)
        self._delivery_timer.timeout.connect(self._deliver_pending_move)
        self._pending_move: tuple[str, str] | None = None

        self._request_counter = 0
        self._is_started = False

    @property
    def ladder(self) -> RetryLadder:
        return self._ladder

    @property
    def is_thinking(self) -> bool:
        return self._ladder.is_awaiting

    # ── Lifecycle ────────────────────────────────────────────────────────

    def setup(self) -> None:
        """Connect worker signals and launch the engine process."""
        if self._is_started:
            return
        self._worker.best_move_ready.connect(self._on_engine_best_move)
        self._worker.evaluation_ready.connect(self._on_engine_evaluation)
        self._worker.search_error.connect(self._on_engine_error)
        try:
            self._worker.start()
        except EngineUnavailable as exc:
            _LOGGER.warning("%s; bot moves use the built-in fallback", exc)
        self._is_started = True

    def shutdown(self) -> None:
        if not self._is_started:
            return
        self.cancel()
        self._worker.shutdown()
        self._is_started = False

    def next_request_id(self) -> str:
        self._request_counter += 1
        return str(self._request_counter)

    def create_ai_player(
        self, color: Color, depth: int | None = None, name: str = "Engine"
    ) -> AIPlayer:
        """Create an AI player whose turns are answered by this session."""
        return AIPlayer(
            color,
            name,
            depth=depth if depth is not None else self._settings.engine_depth,
            next_request_id=self.next_request_id,
            on_request_move=self.request_bot_move,
            on_cancel=self.cancel,
        )

    # ── Requests ─────────────────────────────────────────────────────────

    def request_bot_move(self, request: SearchRequest) -> None:
        """Answer *request*, superseding any request still in flight."""
        self.cancel()

        if self._settings.use_opening_book:
            book_move = lookup(request.position)
            if book_move is not None:
                _LOGGER.debug("Opening book move %s", book_move)
                self._deliver(book_move, "book")
                return

        if not self._worker.is_available:
            self._run_fallback(request)
            return

        self._ladder.start(request, self._clock())
        self._dispatch_attempt()

    def cancel(self) -> None:
        """Drop the in-flight request; late engine answers are ignored."""
        self._stop_timers()
        self._delivery_timer.stop()
        self._pending_move = None
        if self._ladder.is_awaiting and self._worker.is_available:
            self._worker.stop()
        self._ladder.cancel()

    # ── Ladder driving ───────────────────────────────────────────────────

    def _dispatch_attempt(self) -> None:
        request = self._ladder.request
        attempt = self._ladder.attempt
        if not self._ladder.is_awaiting or request is None or attempt is None:
            return
        # Armed first: a worker may report an error before evaluate() returns.
        self._attempt_timer.start(attempt.timeout_ms)
        self._watchdog_timer.start(self._ladder.watchdog_ms())
        self._worker.evaluate(
            request.request_id, request.position, attempt.depth, attempt.timeout_ms
        )

    def _apply_action(self, action: LadderAction) -> None:
        if action == LadderAction.IGNORE:
            return
        self._stop_timers()
        if self._worker.is_available:
            self._worker.stop()
        if action == LadderAction.RETRY:
            self._retry_timer.start(self._settings.retry_delay_ms)
            return
        request = self._ladder.request
        if request is not None:
            self._run_fallback(request)

    def _run_fallback(self, request: SearchRequest) -> None:
        move = self._evaluator.select_move_from_fen(request.position)
        if move is None:
            reason = f"No fallback move for {request.position!r}"
            _LOGGER.error(reason)
            if self._on_failure is not None:
                self._on_failure(reason)
            return
        _LOGGER.info("Fallback move %s for request %s", move, request.request_id)
        self._deliver(move, "fallback")

    def _deliver(self, move: str, source: str) -> None:
        # Delivered from the event loop, never re-entrantly.
        self._pending_move = (move, source)
        self._delivery_timer.start(_MOVE_DELIVERY_DELAY_MS)

    def _deliver_pending_move(self) -> None:
        pending = self._pending_move
        self._pending_move = None
        if pending is not None:
            self._on_move(*pending)

    def _stop_timers(self) -> None:
        self._attempt_timer.stop()
        self._watchdog_timer.stop()
        self._retry_timer.stop()

    # ── Timer / worker callbacks ─────────────────────────────────────────

    def _on_attempt_timeout(self) -> None:
        self._apply_action(self._ladder.on_timeout(self._clock()))

    def _on_watchdog(self) -> None:
        self._apply_action(self._ladder.expire())

    def _on_engine_best_move(self, request_id: str, move: str) -> None:
        if not self._ladder.on_best_move(request_id, move):
            _LOGGER.debug("Ignoring stale best move %s for %s", move, request_id)
            return
        self._stop_timers()
        self._deliver(move, "engine")

    def _on_engine_error(self, request_id: str, reason: str) -> None:
        self._apply_action(self._ladder.on_error(request_id, reason, self._clock()))

    def _on_engine_evaluation(self, request_id: str, info: object) -> None:
        request = self._ladder.request
        if not self._ladder.is_awaiting or request is None:
            return
        if request.request_id != request_id:
            return
        if self._on_evaluation is not None and isinstance(info, EvaluationResponse):
            self._on_evaluation(info)
