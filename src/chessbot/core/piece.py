"""Piece value object."""

from __future__ import annotations

from dataclasses import dataclass

from chessbot.core.enums import Color, PieceType

# Letters in PieceType order; white is upper case in FEN.
_LETTERS = "pnbrqk"


@dataclass(frozen=True, slots=True)
class Piece:
    """A coloured piece. Squares hold either a Piece or None."""

    color: Color
    piece_type: PieceType

    def __str__(self) -> str:
        letter = _LETTERS[self.piece_type - 1]
        return letter.upper() if self.color == Color.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> Piece:
        """Create a piece from its FEN letter, e.g. ``'N'`` is a white knight."""
        index = _LETTERS.find(char.lower()) if len(char) == 1 else -1
        if index < 0:
            raise ValueError(f"Invalid piece character: {char!r}")
        color = Color.WHITE if char.isupper() else Color.BLACK
        return cls(color, PieceType(index + 1))

    @property
    def material(self) -> int:
        return self.piece_type.material
