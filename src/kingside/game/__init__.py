"""Game management layer: state, players, controller.

Quick start::

    from kingside.core import Color
    from kingside.game import GameController, HumanPlayer

    ctrl = GameController()
    ctrl.new_game(
        white=HumanPlayer(Color.WHITE, "Alice"),
        black=HumanPlayer(Color.BLACK, "Bob"),
    )
    ctrl.submit_uci("e2e4")
"""

from kingside.game.controller import GameController, GameEvents
from kingside.game.interfaces import GamePhase, IPlayer
from kingside.game.player import AIPlayer, HumanPlayer
from kingside.game.state import GameState

__all__ = [
    # Interfaces
    "GamePhase",
    "IPlayer",
    # Concrete
    "AIPlayer",
    "GameController",
    "GameEvents",
    "GameState",
    "HumanPlayer",
]
