"""Progressive-timeout retry ladder for external engine requests.

The ladder is a plain state machine fed with caller-supplied timestamps::

    IDLE ──start──▶ AWAITING(attempt, deadline) ──best move──▶ RESOLVED
                       │  ▲
             timeout / │  │ retry (attempt + 1)
               error   ▼  │
                    FALLBACK

Timers live in the caller (see :mod:`kingside.engine.session`); nothing here
reads the clock, so retry counts and deadlines are testable without waiting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from kingside.engine.search import SearchRequest

_LOGGER = logging.getLogger(__name__)


class LadderState(StrEnum):
    IDLE = "idle"
    AWAITING = "awaiting"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


class LadderAction(StrEnum):
    """What the caller must do after a timeout or an error."""

    RETRY = "retry"  # send "stop", then re-issue the request
    FALLBACK = "fallback"  # give up on the engine, use the heuristic
    IGNORE = "ignore"  # stale event, nothing to do


@dataclass(slots=True, frozen=True)
class Attempt:
    number: int
    timeout_ms: int
    deadline_ms: float
    depth: int


class RetryLadder:
    """Tracks one in-flight engine request and its retries."""

    __slots__ = (
        "_max_attempts",
        "_multiplier",
        "_min_timeout_ms",
        "_max_timeout_ms",
        "_grace_ms",
        "_state",
        "_request",
        "_attempt",
        "_started_at_ms",
        "_best_move",
        "_last_error",
    )

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        multiplier: float = 1.5,
        min_timeout_ms: int = 500,
        max_timeout_ms: int = 10_000,
        watchdog_grace_ms: int = 1_000,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._multiplier = multiplier
        self._min_timeout_ms = min_timeout_ms
        self._max_timeout_ms = max_timeout_ms
        self._grace_ms = watchdog_grace_ms
        self._state = LadderState.IDLE
        self._request: SearchRequest | None = None
        self._attempt: Attempt | None = None
        self._started_at_ms = 0.0
        self._best_move: str | None = None
        self._last_error: str | None = None

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def state(self) -> LadderState:
        return self._state

    @property
    def request(self) -> SearchRequest | None:
        return self._request

    @property
    def attempt(self) -> Attempt | None:
        return self._attempt

    @property
    def best_move(self) -> str | None:
        return self._best_move

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def is_awaiting(self) -> bool:
        return self._state == LadderState.AWAITING

    def attempt_timeout_ms(self, attempt: int) -> int:
        """``min(base × multiplier^(attempt−1), max_timeout)``."""
        base = self._base_timeout_ms()
        timeout = base * self._multiplier ** (attempt - 1)
        return int(min(timeout, self._cap_ms()))

    def attempt_depth(self, attempt: int) -> int:
        """Search depth for *attempt*: deeper on each retry, never above target."""
        target = self._request.depth if self._request is not None else 1
        return max(1, min(target, attempt + 2))

    def watchdog_ms(self) -> int:
        """Hard deadline for the current attempt, including the grace period."""
        if self._attempt is None:
            return 0
        return self._attempt.timeout_ms + self._grace_ms

    # ── Transitions ──────────────────────────────────────────────────────

    def start(self, request: SearchRequest, now_ms: float) -> Attempt:
        """Begin the first attempt for *request*.

        Only one request may be outstanding; call :meth:`cancel` first.
        """
        if self._state == LadderState.AWAITING and self._request is not None:
            raise RuntimeError(
                f"Engine request {self._request.request_id!r} still in flight"
            )
        self._request = request
        self._started_at_ms = now_ms
        self._best_move = None
        self._last_error = None
        self._state = LadderState.AWAITING
        self._attempt = self._make_attempt(1, now_ms)
        return self._attempt

    def on_timeout(self, now_ms: float) -> LadderAction:
        """The current attempt's deadline passed without a best move."""
        if self._state != LadderState.AWAITING or self._attempt is None:
            return LadderAction.IGNORE

        elapsed = now_ms - self._started_at_ms
        number = self._attempt.number
        if number < self._max_attempts and elapsed < self._cap_ms():
            self._attempt = self._make_attempt(number + 1, now_ms)
            _LOGGER.info(
                "Engine attempt %d timed out, retrying with %d ms",
                number,
                self._attempt.timeout_ms,
            )
            return LadderAction.RETRY

        _LOGGER.warning(
            "Engine gave no move after %d attempt(s) / %.0f ms, falling back",
            number,
            elapsed,
        )
        self._state = LadderState.FALLBACK
        return LadderAction.FALLBACK

    def on_error(self, request_id: str, reason: str, now_ms: float) -> LadderAction:
        """An error for *request_id* is handled like a timeout."""
        if not self._matches(request_id):
            return LadderAction.IGNORE
        self._last_error = reason
        _LOGGER.warning("Engine error on %s: %s", request_id, reason)
        return self.on_timeout(now_ms)

    def on_best_move(self, request_id: str, move: str) -> bool:
        """Accept *move* if it answers the outstanding request."""
        if not self._matches(request_id):
            return False
        self._best_move = move
        self._state = LadderState.RESOLVED
        return True

    def expire(self) -> LadderAction:
        """The watchdog fired: abandon the engine regardless of attempts left."""
        if self._state != LadderState.AWAITING:
            return LadderAction.IGNORE
        _LOGGER.warning("Engine watchdog expired, falling back")
        self._state = LadderState.FALLBACK
        return LadderAction.FALLBACK

    def cancel(self) -> None:
        self._state = LadderState.IDLE
        self._request = None
        self._attempt = None

    # ── Internal ─────────────────────────────────────────────────────────

    def _matches(self, request_id: str) -> bool:
        return (
            self._state == LadderState.AWAITING
            and self._request is not None
            and self._request.request_id == request_id
        )

    def _base_timeout_ms(self) -> int:
        if self._request is not None and self._request.move_time_ms > 0:
            return self._request.move_time_ms
        return self._min_timeout_ms

    def _cap_ms(self) -> int:
        if self._request is not None and self._request.max_timeout_ms > 0:
            return self._request.max_timeout_ms
        return self._max_timeout_ms

    def _make_attempt(self, number: int, now_ms: float) -> Attempt:
        timeout = self.attempt_timeout_ms(number)
        return Attempt(
            number=number,
            timeout_ms=timeout,
            deadline_ms=now_ms + timeout,
            depth=self.attempt_depth(number),
        )
