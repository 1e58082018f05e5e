"""Tests for the progressive-timeout retry ladder."""

import pytest

from kingside.engine.retry import LadderAction, LadderState, RetryLadder
from kingside.engine.search import SearchRequest


def _request(
    request_id: str = "1",
    depth: int = 16,
    move_time_ms: int = 500,
    max_timeout_ms: int = 10_000,
) -> SearchRequest:
    return SearchRequest(
        position="rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        depth=depth,
        move_time_ms=move_time_ms,
        max_timeout_ms=max_timeout_ms,
        request_id=request_id,
    )


class TestTimeouts:
    def test_progressive_attempt_timeouts(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request(), now_ms=0)
        assert [ladder.attempt_timeout_ms(n) for n in (1, 2, 3)] == [500, 750, 1125]

    def test_timeouts_are_capped(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request(max_timeout_ms=600), now_ms=0)
        assert ladder.attempt_timeout_ms(1) == 500
        assert ladder.attempt_timeout_ms(2) == 600

    def test_watchdog_adds_grace(self) -> None:
        ladder = RetryLadder(watchdog_grace_ms=1000)
        ladder.start(_request(), now_ms=0)
        assert ladder.watchdog_ms() == 1500

    def test_attempt_depth_grows_up_to_target(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request(depth=4), now_ms=0)
        assert [ladder.attempt_depth(n) for n in (1, 2, 3)] == [3, 4, 4]
        ladder.cancel()
        ladder.start(_request(depth=1), now_ms=0)
        assert ladder.attempt_depth(1) == 1

    def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryLadder(max_attempts=0)


class TestTransitions:
    def test_three_attempts_then_fallback(self) -> None:
        ladder = RetryLadder()
        first = ladder.start(_request(), now_ms=0)
        assert (first.number, first.timeout_ms, first.deadline_ms) == (1, 500, 500)

        assert ladder.on_timeout(500) == LadderAction.RETRY
        assert ladder.attempt is not None
        assert (ladder.attempt.number, ladder.attempt.timeout_ms) == (2, 750)

        assert ladder.on_timeout(1250) == LadderAction.RETRY
        assert (ladder.attempt.number, ladder.attempt.timeout_ms) == (3, 1125)

        assert ladder.on_timeout(2375) == LadderAction.FALLBACK
        assert ladder.state == LadderState.FALLBACK

    def test_overall_cap_ends_retries_early(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request(max_timeout_ms=1000), now_ms=0)
        assert ladder.on_timeout(500) == LadderAction.RETRY
        assert ladder.on_timeout(1250) == LadderAction.FALLBACK

    def test_best_move_resolves(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("5"), now_ms=0)
        assert ladder.on_best_move("5", "e2e4") is True
        assert ladder.state == LadderState.RESOLVED
        assert ladder.best_move == "e2e4"

    def test_error_follows_timeout_path(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("5"), now_ms=0)
        assert ladder.on_error("5", "boom", 100) == LadderAction.RETRY
        assert ladder.last_error == "boom"
        assert ladder.attempt is not None and ladder.attempt.number == 2

    def test_watchdog_expiry_falls_back(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request(), now_ms=0)
        assert ladder.expire() == LadderAction.FALLBACK
        assert ladder.state == LadderState.FALLBACK

    def test_start_while_awaiting_raises(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("1"), now_ms=0)
        with pytest.raises(RuntimeError):
            ladder.start(_request("2"), now_ms=10)

    def test_restart_after_cancel(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("1"), now_ms=0)
        ladder.cancel()
        attempt = ladder.start(_request("2"), now_ms=10)
        assert attempt.number == 1
        assert ladder.request is not None and ladder.request.request_id == "2"


class TestStaleEvents:
    def test_wrong_request_id_is_ignored(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("2"), now_ms=0)
        assert ladder.on_best_move("1", "e2e4") is False
        assert ladder.on_error("1", "late", 10) == LadderAction.IGNORE
        assert ladder.state == LadderState.AWAITING

    def test_answer_after_fallback_is_ignored(self) -> None:
        ladder = RetryLadder(max_attempts=1)
        ladder.start(_request("3"), now_ms=0)
        assert ladder.on_timeout(500) == LadderAction.FALLBACK
        assert ladder.on_best_move("3", "e2e4") is False
        assert ladder.best_move is None

    def test_events_after_cancel_are_ignored(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("4"), now_ms=0)
        ladder.cancel()
        assert ladder.state == LadderState.IDLE
        assert ladder.on_timeout(500) == LadderAction.IGNORE
        assert ladder.expire() == LadderAction.IGNORE
        assert ladder.on_best_move("4", "e2e4") is False

    def test_second_answer_after_resolution_is_ignored(self) -> None:
        ladder = RetryLadder()
        ladder.start(_request("6"), now_ms=0)
        assert ladder.on_best_move("6", "e2e4") is True
        assert ladder.on_best_move("6", "d2d4") is False
        assert ladder.best_move == "e2e4"
