"""Abstract interfaces for the game layer.

The controller depends on these ABCs, not on concrete players.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from kingside.core.enums import Color

if TYPE_CHECKING:
    from kingside.game.state import GameState


class GamePhase(IntEnum):
    """Controller FSM states, orthogonal to the rules-level ``GameStatus``."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    THINKING = auto()  # bot is computing
    GAME_OVER = auto()


class IPlayer(ABC):
    """Interface for a game participant (human or bot)."""

    @property
    @abstractmethod
    def color(self) -> Color: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, state: GameState) -> None:
        """Begin move selection; a no-op for humans."""

    @abstractmethod
    def cancel(self) -> None:
        """Abandon an ongoing move computation."""
