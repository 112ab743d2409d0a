"""Game layer — the bridge between a runner's move stream and a strategem."""

from chessbot.game.bridge import BotMove, Bridge, BridgeEvents, MoveRecord
from chessbot.game.interfaces import BridgePhase, Runner
from chessbot.game.runner import ScriptedRunner, StrategemRunner, run_game

__all__ = [
    "BotMove",
    "Bridge",
    "BridgeEvents",
    "BridgePhase",
    "MoveRecord",
    "Runner",
    "ScriptedRunner",
    "StrategemRunner",
    "run_game",
]
