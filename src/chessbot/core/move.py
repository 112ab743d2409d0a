"""Move value object (coordinate-style representation)."""

from __future__ import annotations

from dataclasses import dataclass

from chessbot.core.enums import MoveFlag, PieceType
from chessbot.core.types import Square, square_name

PROMOTION_CHARS: dict[PieceType, str] = {
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
}


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable value object representing a single chess move.

    A move only means something relative to the position it was generated
    from; the flag records how the position must be updated.
    """

    from_sq: Square
    to_sq: Square
    flag: MoveFlag = MoveFlag.NORMAL
    promotion: PieceType | None = None

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += PROMOTION_CHARS.get(self.promotion, "")
        return base

    @property
    def uci(self) -> str:
        """Coordinate notation, e.g. ``e2e4`` or ``e7e8q``."""
        return str(self)

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION
