"""Strategems — pluggable move-decision policies and their registry.

Quick start::

    from chessbot.strategems import create_strategem

    bot = create_strategem("ColeMiner", seed=7)
    move = bot.decide(position, position.legal_moves())
"""

from __future__ import annotations

import re
from typing import Any

from chessbot.strategems.base import Strategem
from chessbot.strategems.cole_miner import ColeMiner
from chessbot.strategems.random_aggro import RandomAggro

STRATEGEMS: dict[str, type[Strategem]] = {
    RandomAggro.name: RandomAggro,
    ColeMiner.name: ColeMiner,
}


def normalise_name(name: str) -> str:
    """``"RandomAggro"`` / ``"random-aggro"`` / ``"random_aggro"`` → ``"random_aggro"``."""
    snake = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name.strip())
    return snake.replace("-", "_").lower()


def available_strategems() -> list[str]:
    return sorted(STRATEGEMS)


def create_strategem(name: str, seed: int | None = None, **options: Any) -> Strategem:
    """Instantiate the strategem registered under *name*."""
    try:
        cls = STRATEGEMS[normalise_name(name)]
    except KeyError:
        raise ValueError(
            f"Unknown strategem {name!r}; choose from {available_strategems()}"
        ) from None
    return cls(seed=seed, **options)


__all__ = [
    "STRATEGEMS",
    "ColeMiner",
    "RandomAggro",
    "Strategem",
    "available_strategems",
    "create_strategem",
    "normalise_name",
]
