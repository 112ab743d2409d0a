"""Core domain layer — board model, move generation and rules, no I/O.

Quick start::

    from chessbot.core import Position, position_from_fen, STARTING_FEN

    pos = position_from_fen(STARTING_FEN)
    for move in pos.legal_moves():
        print(move)
    pos.apply(pos.legal_moves()[0])
"""

from chessbot.core.board import Board
from chessbot.core.enums import (
    CastlingRights,
    Color,
    DrawReason,
    GameStatus,
    MoveFlag,
    PieceType,
)
from chessbot.core.move import Move
from chessbot.core.move_generator import MoveGenerator
from chessbot.core.notation import (
    STARTING_FEN,
    move_to_coordinate,
    move_to_san,
    parse_move,
    parse_san,
    position_from_fen,
    position_to_fen,
)
from chessbot.core.piece import Piece
from chessbot.core.position import Position
from chessbot.core.rules import GameState, Rules
from chessbot.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums / flags
    "CastlingRights",
    "Color",
    "DrawReason",
    "GameStatus",
    "MoveFlag",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "Board",
    "GameState",
    "Move",
    "MoveGenerator",
    "Piece",
    "Position",
    "Rules",
    # Notation
    "STARTING_FEN",
    "move_to_coordinate",
    "move_to_san",
    "parse_move",
    "parse_san",
    "position_from_fen",
    "position_to_fen",
]
