"""SAN (Standard Algebraic Notation) conversion and parsing."""

from __future__ import annotations

import re

from chessbot.core.enums import MoveFlag, PieceType
from chessbot.core.move import Move
from chessbot.core.move_generator import MoveGenerator
from chessbot.core.position import Position
from chessbot.core.types import file_of, parse_square, rank_of, square_name

_SAN_PIECE: dict[PieceType, str] = {
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}
_SAN_PIECE_REV: dict[str, PieceType] = {v: k for k, v in _SAN_PIECE.items()}

_SAN_RE = re.compile(
    r"^(?P<piece>[NBRQK])?(?P<file>[a-h])?(?P<rank>[1-8])?x?"
    r"(?P<to>[a-h][1-8])(?:=?(?P<promo>[NBRQ]))?$"
)
_CASTLE_TOKENS: dict[str, MoveFlag] = {
    "O-O": MoveFlag.CASTLE_KINGSIDE,
    "0-0": MoveFlag.CASTLE_KINGSIDE,
    "O-O-O": MoveFlag.CASTLE_QUEENSIDE,
    "0-0-0": MoveFlag.CASTLE_QUEENSIDE,
}


def _disambiguation(position: Position, move: Move, legal: list[Move]) -> str:
    board = position.board
    piece = board[move.from_sq]
    assert piece is not None
    rivals = [
        m.from_sq
        for m in legal
        if m.to_sq == move.to_sq
        and m.from_sq != move.from_sq
        and board[m.from_sq] == piece
    ]
    if not rivals:
        return ""
    if all(file_of(sq) != file_of(move.from_sq) for sq in rivals):
        return square_name(move.from_sq)[0]
    if all(rank_of(sq) != rank_of(move.from_sq) for sq in rivals):
        return square_name(move.from_sq)[1]
    return square_name(move.from_sq)


def move_to_san(position: Position, move: Move) -> str:
    """Convert a legal *move* to SAN given the *position* before the move."""
    gen = MoveGenerator(position)
    piece = position.board[move.from_sq]
    assert piece is not None

    if move.flag == MoveFlag.CASTLE_KINGSIDE:
        san = "O-O"
    elif move.flag == MoveFlag.CASTLE_QUEENSIDE:
        san = "O-O-O"
    else:
        capture = gen.is_capture(move)
        if piece.piece_type == PieceType.PAWN:
            san = square_name(move.from_sq)[0] if capture else ""
        else:
            legal = gen.generate_legal_moves()
            san = _SAN_PIECE[piece.piece_type] + _disambiguation(position, move, legal)
        if capture:
            san += "x"
        san += square_name(move.to_sq)
        if move.promotion is not None:
            san += "=" + _SAN_PIECE[move.promotion]

    position.make_move(move)
    after = MoveGenerator(position)
    if after.is_in_check(position.side_to_move):
        san += "+" if after.generate_legal_moves() else "#"
    position.unmake_move(move)
    return san


def parse_san(position: Position, san: str) -> Move:
    """Parse a SAN string into a legal :class:`Move` for *position*."""
    legal = MoveGenerator(position).generate_legal_moves()
    clean = san.strip().rstrip("+#!?")

    flag = _CASTLE_TOKENS.get(clean)
    if flag is not None:
        for m in legal:
            if m.flag == flag:
                return m
        raise ValueError(f"Illegal move: {san}")

    match = _SAN_RE.match(clean)
    if match is None:
        raise ValueError(f"Invalid SAN: {san!r}")

    piece_type = _SAN_PIECE_REV[match["piece"]] if match["piece"] else PieceType.PAWN
    to_sq = parse_square(match["to"])
    promotion = _SAN_PIECE_REV[match["promo"]] if match["promo"] else None
    from_file = ord(match["file"]) - ord("a") if match["file"] else None
    from_rank = int(match["rank"]) - 1 if match["rank"] else None

    candidates: list[Move] = []
    for m in legal:
        piece = position.board[m.from_sq]
        if piece is None or piece.piece_type != piece_type or m.to_sq != to_sq:
            continue
        wanted = promotion
        if wanted is None and m.promotion is not None:
            wanted = PieceType.QUEEN  # bare "e8" promotes to a queen
        if m.promotion != wanted:
            continue
        if from_file is not None and file_of(m.from_sq) != from_file:
            continue
        if from_rank is not None and rank_of(m.from_sq) != from_rank:
            continue
        candidates.append(m)

    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise ValueError(f"Illegal move: {san}")
    raise ValueError(f"Ambiguous move: {san} → {[str(c) for c in candidates]}")
