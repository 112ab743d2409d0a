"""Abstract interfaces for the game layer.

The :class:`~chessbot.game.bridge.Bridge` talks to the outside world only
through :class:`Runner`; concrete runners (scripted, local self-play,
remote GUI automation) plug in behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chessbot.core.rules import GameState
    from chessbot.game.bridge import BotMove


# ── Bridge FSM states ────────────────────────────────────────────────────────


class BridgePhase(IntEnum):
    """Finite-state-machine states of a :class:`Bridge`."""

    AWAITING_OPPONENT_MOVE = auto()
    COMPUTING_OWN_MOVE = auto()
    AWAITING_SUBMISSION_ACK = auto()
    GAME_OVER = auto()


# ── Abstract interfaces ─────────────────────────────────────────────────────


class Runner(ABC):
    """The external side of a game: observes the opponent, submits our moves."""

    @abstractmethod
    def next_opponent_move(self) -> str | None:
        """Notation of the opponent's next move, or None if none will come."""

    @abstractmethod
    def submit_bot_move(self, bot_move: BotMove) -> bool:
        """Enter *bot_move* into the external game. Returns True on success."""

    @abstractmethod
    def report_game_state(self, state: GameState) -> None:
        """Told once when the game has ended."""
