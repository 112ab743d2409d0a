"""chessbot — plays chess on its own through a pluggable runner.

Quick start::

    from chessbot.config import BotConfig, build_bridge
    from chessbot.game import ScriptedRunner, run_game

    bridge = build_bridge(BotConfig(strategem="ColeMiner", seed=3))
    state = run_game(bridge, ScriptedRunner(["e2e4", "g1f3"]))
"""

__version__ = "0.1.0"
