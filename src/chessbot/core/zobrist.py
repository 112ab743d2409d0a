"""Zobrist keys used to identify positions for repetition tracking."""

from __future__ import annotations

from typing import Final

from chessbot.core.enums import CastlingRights
from chessbot.core.piece import Piece
from chessbot.core.types import Square

_MASK_64: Final = (1 << 64) - 1
_SEED: Final = 0x5DEECE66D_C0FFEE


def _splitmix64(state: int) -> int:
    z = (state + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


def _keys(offset: int, count: int) -> tuple[int, ...]:
    return tuple(_splitmix64(_SEED + offset + i) for i in range(count))


# 12 piece kinds x 64 squares, then side, castling (16 masks), en passant.
_PIECE_KEYS: Final = _keys(0, 12 * 64)
_SIDE_KEY: Final = _keys(12 * 64, 1)[0]
_CASTLING_KEYS: Final = _keys(12 * 64 + 1, 16)
_EN_PASSANT_KEYS: Final = _keys(12 * 64 + 17, 64)


def piece_key(piece: Piece, sq: Square) -> int:
    kind = int(piece.color) * 6 + int(piece.piece_type) - 1
    return _PIECE_KEYS[kind * 64 + sq]


def side_to_move_key() -> int:
    return _SIDE_KEY


def castling_key(castling: CastlingRights) -> int:
    return _CASTLING_KEYS[int(castling) & 0xF]


def en_passant_key(ep_square: Square) -> int:
    return _EN_PASSANT_KEYS[ep_square]
