"""FEN parsing and serialization."""

from __future__ import annotations

from chessbot.core.board import Board
from chessbot.core.enums import CastlingRights, Color, PieceType
from chessbot.core.piece import Piece
from chessbot.core.position import Position
from chessbot.core.types import Square, make_square, parse_square, rank_of, square_name

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_CHARS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)
_SIDES: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}


def _parse_placement(placement: str, fen: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError(f"Invalid FEN board (must contain 8 ranks): {fen!r}")
    board = Board()
    for rank, rank_text in zip(range(7, -1, -1), ranks):
        file = 0
        for ch in rank_text:
            if ch.isdigit():
                if not 1 <= int(ch) <= 8:
                    raise ValueError(f"Invalid FEN digit {ch!r}: {fen!r}")
                file += int(ch)
            else:
                if file >= 8:
                    raise ValueError(f"Invalid FEN rank width: {fen!r}")
                board[make_square(file, rank)] = Piece.from_char(ch)
                file += 1
            if file > 8:
                raise ValueError(f"Invalid FEN rank width: {fen!r}")
        if file != 8:
            raise ValueError(f"Invalid FEN rank width: {fen!r}")
    return board


def _parse_castling(text: str) -> CastlingRights:
    castling = CastlingRights.NONE
    if text == "-":
        return castling
    allowed = dict(_CASTLING_CHARS)
    if len(set(text)) != len(text) or any(ch not in allowed for ch in text):
        raise ValueError(f"Invalid FEN castling field: {text!r}")
    for ch in text:
        castling |= allowed[ch]
    return castling


def _parse_en_passant(text: str, side: Color) -> Square | None:
    if text == "-":
        return None
    ep = parse_square(text)
    expected_rank = 5 if side == Color.WHITE else 2
    if rank_of(ep) != expected_rank:
        raise ValueError(f"Invalid FEN en-passant square for side-to-move: {text!r}")
    return ep


def position_from_fen(fen: str) -> Position:
    """Parse a FEN string into a :class:`Position`.

    The two clock fields are optional. A fullmove number of ``0`` (written
    by some tools for the initial position) is read as ``1``.
    """
    parts = fen.split()
    if not 4 <= len(parts) <= 6:
        raise ValueError(f"Invalid FEN (need 4-6 fields): {fen!r}")

    board = _parse_placement(parts[0], fen)
    try:
        side = _SIDES[parts[1]]
    except KeyError:
        raise ValueError(f"Invalid FEN side-to-move field: {parts[1]!r}") from None
    castling = _parse_castling(parts[2])
    ep = _parse_en_passant(parts[3], side)

    halfmove = int(parts[4]) if len(parts) > 4 else 0
    if halfmove < 0:
        raise ValueError(f"Invalid FEN halfmove clock: {parts[4]!r}")
    fullmove = int(parts[5]) if len(parts) > 5 else 1
    if fullmove < 0:
        raise ValueError(f"Invalid FEN fullmove number: {parts[5]!r}")

    for color in Color:
        if board.pieces_bitboard(color, PieceType.KING).bit_count() != 1:
            raise ValueError(f"Invalid FEN (need exactly one {color.name.lower()} king): {fen!r}")

    return Position(board, side, castling, ep, halfmove, max(fullmove, 1))


def position_to_fen(pos: Position) -> str:
    """Serialise a :class:`Position` to FEN."""
    rows: list[str] = []
    for rank in range(7, -1, -1):
        row = ""
        empty = 0
        for file in range(8):
            piece = pos.board[make_square(file, rank)]
            if piece is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += str(piece)
        if empty:
            row += str(empty)
        rows.append(row)

    side = "w" if pos.side_to_move == Color.WHITE else "b"
    castling = "".join(ch for ch, right in _CASTLING_CHARS if pos.castling & right) or "-"
    ep = square_name(pos.en_passant) if pos.en_passant is not None else "-"
    return (
        f"{'/'.join(rows)} {side} {castling} {ep} "
        f"{pos.halfmove_clock} {pos.fullmove_number}"
    )
