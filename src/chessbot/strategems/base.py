"""Strategem interface — a pluggable move-decision policy."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chessbot.core.move import Move
    from chessbot.core.position import Position


class Strategem(ABC):
    """Chooses one move out of the legal moves of a position.

    A strategem lives for a whole game and may keep memory between turns
    (history, opening book progress). It borrows the position read-only for
    each decision; anything it wants to try out is played on
    ``position.snapshot()``.

    Randomness comes from a private ``random.Random`` seeded at construction
    so that games are reproducible.
    """

    name: str = "strategem"

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    @abstractmethod
    def decide(self, position: Position, legal_moves: Sequence[Move]) -> Move:
        """Return exactly one member of *legal_moves*.

        *legal_moves* is never empty; the caller handles positions without
        a legal move.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(seed={self._seed!r})"
