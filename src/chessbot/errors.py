"""Error taxonomy shared by the rules engine, strategems and the bridge.

None of these are retried by the library; recovery, where there is any,
belongs to the runner that feeds the bridge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chessbot.core.enums import Color
    from chessbot.core.move import Move


class ChessbotError(Exception):
    """Base class for every error raised on purpose by this package."""


class IllegalMoveError(ChessbotError, ValueError):
    """A move was applied that is not in the current legal-move set.

    Always a programming or desynchronisation error on the caller's side.
    """

    def __init__(self, move: Move, side_to_move: Color) -> None:
        super().__init__(f"Illegal move {move} for {side_to_move}")
        self.move = move
        self.side_to_move = side_to_move


class BridgeError(ChessbotError):
    """Base class for failures reported by the runner bridge."""


class UnrecognizedMoveError(BridgeError, ValueError):
    """External notation could not be parsed or matched to a legal move."""

    def __init__(self, notation: str, reason: str = "") -> None:
        message = f"Unrecognized move {notation!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.notation = notation
        self.reason = reason


class StrategemContractViolation(BridgeError, RuntimeError):
    """A strategem returned a move that was not among the legal moves offered."""

    def __init__(self, strategem: str, move: object) -> None:
        super().__init__(f"Strategem {strategem!r} returned non-legal move {move!r}")
        self.strategem = strategem
        self.move = move


class BridgeStateError(BridgeError, RuntimeError):
    """A bridge operation was requested in a phase that does not allow it."""
