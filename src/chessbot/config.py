"""Bot configuration: which strategem plays which side from which position."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from chessbot.core.enums import Color
from chessbot.core.notation.fen import STARTING_FEN, position_from_fen
from chessbot.game.bridge import Bridge
from chessbot.strategems import available_strategems, create_strategem, normalise_name


@dataclass(frozen=True, slots=True)
class BotConfig:
    """Configuration for one bot game."""

    strategem: str = "random_aggro"
    side: Color = Color.BLACK
    seed: int | None = None
    start_fen: str = STARTING_FEN
    claim_draws: bool = True
    strategem_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalise the strategem name and validate."""
        name = normalise_name(self.strategem)
        if name not in available_strategems():
            msg = f"Unknown strategem {self.strategem!r}; choose from {available_strategems()}"
            raise ValueError(msg)
        object.__setattr__(self, "strategem", name)

        if not isinstance(self.side, Color):
            msg = f"side must be a Color, got {self.side!r}"
            raise TypeError(msg)
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            msg = f"seed must be an int or None, got {self.seed!r}"
            raise TypeError(msg)

        # Raises ValueError on a malformed FEN.
        position_from_fen(self.start_fen)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BotConfig:
        """Build a config from plain values, e.g. parsed JSON or YAML.

        ``side`` may be given as text (``"white"``, ``"b"``); ``seed`` as a
        numeric string. Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown configuration keys: {unknown}"
            raise ValueError(msg)

        values = dict(data)
        side = values.get("side")
        if isinstance(side, str):
            values["side"] = Color.parse(side)
        seed = values.get("seed")
        if isinstance(seed, str):
            values["seed"] = int(seed)
        if "strategem_options" in values:
            values["strategem_options"] = dict(values["strategem_options"] or {})
        return cls(**values)


def build_bridge(config: BotConfig) -> Bridge:
    """Wire the position, strategem and bridge described by *config*."""
    strategem = create_strategem(config.strategem, seed=config.seed, **config.strategem_options)
    return Bridge(
        strategem,
        side=config.side,
        position=position_from_fen(config.start_fen),
        claim_draws=config.claim_draws,
    )
