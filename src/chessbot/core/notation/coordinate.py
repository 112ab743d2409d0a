"""Coordinate notation (``e2e4``, ``e7e8q``) as exchanged with runners."""

from __future__ import annotations

import re

from chessbot.core.enums import PieceType
from chessbot.core.move import Move
from chessbot.core.notation.san import parse_san
from chessbot.core.position import Position
from chessbot.core.types import parse_square
from chessbot.errors import IllegalMoveError, UnrecognizedMoveError

# source square, optional separator, destination square, optional promotion
_COORDINATE_RE = re.compile(
    r"^(?P<src>[a-h][1-8])\s*(?:-|->|x|\s)?\s*(?P<dst>[a-h][1-8])\s*=?(?P<promo>[nbrqNBRQ])?$"
)
_PROMOTION_LETTERS: dict[str, PieceType] = {
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
}


def move_to_coordinate(move: Move) -> str:
    """Coordinate notation for *move*: source, destination, promotion letter."""
    return move.uci


def parse_coordinate(text: str) -> Move:
    """Parse coordinate text into an unflagged :class:`Move`.

    The result still has to be resolved against a position; see
    :func:`parse_move`.
    """
    match = _COORDINATE_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid coordinate move: {text!r}")
    promo = match["promo"]
    return Move(
        parse_square(match["src"]),
        parse_square(match["dst"]),
        promotion=_PROMOTION_LETTERS[promo.lower()] if promo else None,
    )


def parse_move(position: Position, text: str) -> Move:
    """Match *text* (coordinate notation or SAN) to a legal move in *position*.

    Raises :class:`UnrecognizedMoveError` when the text is malformed or names
    a move that is not legal here.
    """
    notation = text.strip()
    if not notation:
        raise UnrecognizedMoveError(text, "empty notation")

    try:
        candidate = parse_coordinate(notation)
    except ValueError:
        candidate = None

    if candidate is not None:
        try:
            return position.resolve(candidate)
        except IllegalMoveError as exc:
            raise UnrecognizedMoveError(text, "not legal in the current position") from exc

    try:
        return parse_san(position, notation)
    except ValueError as exc:
        raise UnrecognizedMoveError(text, str(exc)) from exc
