"""Concrete runners and the synchronous game loop."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from chessbot.core.enums import Color
from chessbot.core.notation.coordinate import move_to_coordinate, parse_move
from chessbot.core.notation.fen import STARTING_FEN, position_from_fen
from chessbot.errors import UnrecognizedMoveError
from chessbot.game.interfaces import BridgePhase, Runner

if TYPE_CHECKING:
    from chessbot.core.position import Position
    from chessbot.core.rules import GameState
    from chessbot.game.bridge import Bridge, BotMove
    from chessbot.strategems.base import Strategem

_LOGGER = logging.getLogger(__name__)


class ScriptedRunner(Runner):
    """Replays a fixed list of opponent moves and records what the bot sends.

    Args:
        moves: Opponent moves in any notation the bridge accepts.
        rejections: How many of the first submissions to refuse, to mimic an
            external source that rejects input.
    """

    __slots__ = ("_moves", "_rejections", "submitted", "states")

    def __init__(self, moves: Iterable[str] = (), rejections: int = 0) -> None:
        self._moves: deque[str] = deque(moves)
        self._rejections = rejections
        self.submitted: list[BotMove] = []
        self.states: list[GameState] = []

    @property
    def remaining(self) -> int:
        return len(self._moves)

    def next_opponent_move(self) -> str | None:
        return self._moves.popleft() if self._moves else None

    def submit_bot_move(self, bot_move: BotMove) -> bool:
        if self._rejections > 0:
            self._rejections -= 1
            return False
        self.submitted.append(bot_move)
        return True

    def report_game_state(self, state: GameState) -> None:
        self.states.append(state)


class StrategemRunner(Runner):
    """An opponent played by another strategem on its own position.

    Used for self-play: the runner keeps an independent copy of the game,
    mirrors every bot move onto it and answers with its strategem's choice.
    """

    __slots__ = ("_strategem", "_color", "_position", "states")

    def __init__(self, strategem: Strategem, color: Color, fen: str = STARTING_FEN) -> None:
        self._strategem = strategem
        self._color = color
        self._position = position_from_fen(fen)
        self.states: list[GameState] = []

    @property
    def color(self) -> Color:
        return self._color

    @property
    def position(self) -> Position:
        return self._position

    def next_opponent_move(self) -> str | None:
        if self._position.side_to_move != self._color:
            return None
        legal = self._position.legal_moves()
        if not legal:
            return None
        move = self._strategem.decide(self._position.snapshot(), tuple(legal))
        self._position.apply(move)
        return move_to_coordinate(move)

    def submit_bot_move(self, bot_move: BotMove) -> bool:
        try:
            self._position.apply(parse_move(self._position, bot_move.notation))
        except UnrecognizedMoveError as exc:
            _LOGGER.warning("Opponent board refused %s: %s", bot_move.notation, exc)
            return False
        return True

    def report_game_state(self, state: GameState) -> None:
        self.states.append(state)


def run_game(bridge: Bridge, runner: Runner, max_plies: int | None = None) -> GameState | None:
    """Drive *bridge* with *runner* until the game ends.

    Returns the final :class:`GameState`, or None when the runner stops
    supplying moves, refuses a submission, or *max_plies* is reached first.
    A refused submission is reported to the bridge and not retried.
    """
    bridge.events.on_game_state.append(runner.report_game_state)
    try:
        bot_move = bridge.start()
        while True:
            if bot_move is not None:
                if not runner.submit_bot_move(bot_move):
                    bridge.report_submission_failure("runner refused the move")
                    return None
                bridge.confirm_submission()
            if bridge.phase == BridgePhase.GAME_OVER:
                return bridge.state
            if max_plies is not None and len(bridge.history) >= max_plies:
                _LOGGER.info("Stopping after %d plies", len(bridge.history))
                return None
            notation = runner.next_opponent_move()
            if notation is None:
                return None
            bot_move = bridge.submit_opponent_move(notation)
    finally:
        bridge.events.on_game_state.remove(runner.report_game_state)
