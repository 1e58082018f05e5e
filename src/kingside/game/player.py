"""Concrete player implementations."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from kingside.core.enums import Color
from kingside.engine.search import SearchRequest, build_request
from kingside.game.interfaces import IPlayer

if TYPE_CHECKING:
    from kingside.game.state import GameState


class HumanPlayer(IPlayer):
    """A human participant; moves arrive through ``controller.submit_move``."""

    __slots__ = ("_color", "_name")

    def __init__(self, color: Color, name: str = "") -> None:
        self._color = color
        self._name = name or f"Player ({color})"

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, state: GameState) -> None:
        pass

    def cancel(self) -> None:
        pass


class AIPlayer(IPlayer):
    """A bot participant that turns the game state into a search request.

    The answer comes back asynchronously; whoever handles
    ``on_request_move`` is expected to call ``controller.apply_bot_move``.

    Args:
        color: Side the bot plays.
        name: Display name.
        depth: Base search depth before stage adaptation.
        next_request_id: Issues a fresh id per turn.
        on_request_move: ``(SearchRequest) -> None``.
        on_cancel: ``() -> None``, abandons the in-flight request.
    """

    __slots__ = (
        "_color",
        "_name",
        "_depth",
        "_next_request_id",
        "_on_request_move",
        "_on_cancel",
        "_last_request",
    )

    def __init__(
        self,
        color: Color,
        name: str = "Engine",
        *,
        depth: int = 2,
        next_request_id: Callable[[], str] | None = None,
        on_request_move: Callable[[SearchRequest], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        self._color = color
        self._name = name
        self._depth = depth
        self._next_request_id = next_request_id
        self._on_request_move = on_request_move
        self._on_cancel = on_cancel
        self._last_request: SearchRequest | None = None

    @property
    def color(self) -> Color:
        return self._color

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return False

    @property
    def depth(self) -> int:
        return self._depth

    @depth.setter
    def depth(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"Search depth must be >= 1, got {value}")
        self._depth = value

    @property
    def last_request(self) -> SearchRequest | None:
        return self._last_request

    def request_move(self, state: GameState) -> None:
        if self._next_request_id is not None:
            request_id = self._next_request_id()
        else:
            request_id = str(state.ply_count)
        request = build_request(
            state.board,
            state.current_player,
            len(state.move_log),
            self._depth,
            request_id,
        )
        self._last_request = request
        if self._on_request_move is not None:
            self._on_request_move(request)

    def cancel(self) -> None:
        if self._on_cancel is not None:
            self._on_cancel()
