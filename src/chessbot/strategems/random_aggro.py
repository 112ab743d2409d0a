"""RandomAggro — grab the most valuable piece on offer, otherwise move at random."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from chessbot.core.move_generator import MoveGenerator
from chessbot.strategems.base import Strategem

if TYPE_CHECKING:
    from chessbot.core.move import Move
    from chessbot.core.position import Position

_LOGGER = logging.getLogger(__name__)


class RandomAggro(Strategem):
    """Greedy capturer.

    Captures (en passant included) are ranked by the material value of the
    captured piece; the best value wins and equal-value captures are split
    uniformly at random. Without any capture a uniformly random legal move
    is played.
    """

    name = "random_aggro"

    def __init__(self, seed: int | None = None) -> None:
        super().__init__(seed)
        _LOGGER.info("RandomAggro strategem active (seed=%r)", seed)

    def decide(self, position: Position, legal_moves: Sequence[Move]) -> Move:
        gen = MoveGenerator(position)
        best_value = -1
        best: list[Move] = []
        for move in legal_moves:
            captured = gen.captured_piece(move)
            if captured is None:
                continue
            if captured.material > best_value:
                best_value = captured.material
                best = [move]
            elif captured.material == best_value:
                best.append(move)

        if best:
            choice = self._rng.choice(best)
            _LOGGER.debug("capture worth %d: %s", best_value, choice)
            return choice

        _LOGGER.debug("no capture among %d moves, picking at random", len(legal_moves))
        return self._rng.choice(list(legal_moves))
