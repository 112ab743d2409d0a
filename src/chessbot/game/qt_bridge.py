"""Qt front for a :class:`Bridge`, for runners living in a Qt event loop.

Runners that scrape or automate an external GUI usually poll from their own
thread. Connecting their signals to the slots below with queued connections
serialises every call into the bridge on the worker's thread, so the
position is never touched concurrently.
"""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from chessbot.core.rules import GameState
from chessbot.errors import BridgeError
from chessbot.game.bridge import BotMove, Bridge
from chessbot.game.interfaces import BridgePhase


class BridgeWorker(QObject):
    """Thread-affine wrapper that turns bridge calls into slots and events into signals."""

    bot_move_ready = pyqtSignal(object)  # BotMove
    game_over = pyqtSignal(object)  # GameState
    phase_changed = pyqtSignal(int)  # BridgePhase value
    submission_failed = pyqtSignal(object, str)  # BotMove, reason
    bridge_error = pyqtSignal(str)

    __slots__ = ("_bridge",)

    def __init__(self, bridge: Bridge) -> None:
        super().__init__()
        self._bridge = bridge
        bridge.events.on_bot_move.append(self._emit_bot_move)
        bridge.events.on_game_state.append(self._emit_game_over)
        bridge.events.on_phase_changed.append(self._emit_phase)
        bridge.events.on_submission_failed.append(self._emit_submission_failed)

    @property
    def bridge(self) -> Bridge:
        return self._bridge

    @pyqtSlot()
    def start(self) -> None:
        self._call(self._bridge.start)

    @pyqtSlot(str)
    def submit_opponent_move(self, notation: str) -> None:
        self._call(self._bridge.submit_opponent_move, notation)

    @pyqtSlot()
    def confirm_submission(self) -> None:
        self._call(self._bridge.confirm_submission)

    @pyqtSlot(str)
    def report_submission_failure(self, reason: str) -> None:
        self._call(self._bridge.report_submission_failure, reason)

    @pyqtSlot(str)
    def resynchronize(self, fen: str) -> None:
        self._call(self._bridge.resynchronize, fen or None)

    # Exceptions cannot cross a queued connection; a bad FEN is a ValueError.
    def _call(self, func: Callable[..., object], *args: object) -> None:
        try:
            func(*args)
        except (BridgeError, ValueError) as exc:
            self.bridge_error.emit(str(exc))

    def _emit_bot_move(self, bot_move: BotMove) -> None:
        self.bot_move_ready.emit(bot_move)

    def _emit_game_over(self, state: GameState) -> None:
        self.game_over.emit(state)

    def _emit_phase(self, phase: BridgePhase) -> None:
        self.phase_changed.emit(int(phase))

    def _emit_submission_failed(self, bot_move: BotMove, reason: str) -> None:
        self.submission_failed.emit(bot_move, reason)
