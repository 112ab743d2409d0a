"""Notation package: FEN, SAN and coordinate parsing and serialization."""

from chessbot.core.notation.coordinate import move_to_coordinate, parse_coordinate, parse_move
from chessbot.core.notation.fen import STARTING_FEN, position_from_fen, position_to_fen
from chessbot.core.notation.san import move_to_san, parse_san

__all__ = [
    "STARTING_FEN",
    "position_from_fen",
    "position_to_fen",
    "move_to_san",
    "parse_san",
    "move_to_coordinate",
    "parse_coordinate",
    "parse_move",
]
