"""Board - piece placement on an 8x8 board."""

from __future__ import annotations

from collections.abc import Iterator

from chessbot.core.enums import Color, PieceType
from chessbot.core.piece import Piece
from chessbot.core.types import Square, make_square

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def iter_bits(bitboard: int) -> Iterator[Square]:
    """Yield the set squares of *bitboard*, lowest first."""
    while bitboard:
        lsb = bitboard & -bitboard
        yield lsb.bit_length() - 1
        bitboard ^= lsb


class Board:
    """Sparse 64-square placement with per-color, per-kind occupancy masks.

    Squares are addressed with plain ints (see :mod:`chessbot.core.types`);
    one piece per square is guaranteed by construction since assignment
    replaces whatever was there.
    """

    __slots__ = ("_squares", "_masks", "_occupancy", "_kings")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * 64
        # _masks[color][piece_type] -> bitboard; index 0 is unused.
        self._masks: list[list[int]] = [[0] * 7, [0] * 7]
        self._occupancy: list[int] = [0, 0]
        self._kings: list[Square | None] = [None, None]

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        previous = self._squares[sq]
        if previous == piece:
            return
        bit = 1 << sq

        if previous is not None:
            side = int(previous.color)
            self._masks[side][previous.piece_type] &= ~bit
            self._occupancy[side] &= ~bit
            if previous.piece_type == PieceType.KING and self._kings[side] == sq:
                self._kings[side] = None

        self._squares[sq] = piece
        if piece is None:
            return

        side = int(piece.color)
        self._masks[side][piece.piece_type] |= bit
        self._occupancy[side] |= bit
        if piece.piece_type == PieceType.KING:
            self._kings[side] = sq

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    def items(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares and their pieces, a1 first."""
        for sq, piece in enumerate(self._squares):
            if piece is not None:
                yield sq, piece

    # -- Query helpers ------------------------------------------------------

    def pieces_bitboard(self, color: Color, piece_type: PieceType) -> int:
        return self._masks[int(color)][piece_type]

    def pieces(self, color: Color, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *color*'s *piece_type*."""
        return list(iter_bits(self.pieces_bitboard(color, piece_type)))

    def has_piece(self, color: Color, piece_type: PieceType) -> bool:
        return bool(self.pieces_bitboard(color, piece_type))

    def all_pieces_bitboard(self, color: Color) -> int:
        return self._occupancy[int(color)]

    def king_square(self, color: Color) -> Square:
        """Return the single king square for *color*."""
        sq = self._kings[int(color)]
        if sq is None:
            raise ValueError(f"No {color.name} king on board")
        return sq

    def material(self, color: Color) -> int:
        """Total material of *color* in pawn units."""
        return sum(
            self.pieces_bitboard(color, pt).bit_count() * pt.material
            for pt in PieceType
        )

    # -- Mutation / copying -------------------------------------------------

    def copy(self) -> Board:
        clone = Board()
        clone._squares = self._squares.copy()
        clone._masks = [row.copy() for row in self._masks]
        clone._occupancy = self._occupancy.copy()
        clone._kings = self._kings.copy()
        return clone

    @classmethod
    def initial(cls) -> Board:
        """Standard starting placement."""
        board = cls()
        for file, piece_type in enumerate(_BACK_RANK):
            board[make_square(file, 0)] = Piece(Color.WHITE, piece_type)
            board[make_square(file, 1)] = Piece(Color.WHITE, PieceType.PAWN)
            board[make_square(file, 6)] = Piece(Color.BLACK, PieceType.PAWN)
            board[make_square(file, 7)] = Piece(Color.BLACK, piece_type)
        return board

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __repr__(self) -> str:
        rows: list[str] = []
        for rank in range(7, -1, -1):
            cells = (self._squares[rank * 8 + file] for file in range(8))
            row = " ".join(str(p) if p is not None else "." for p in cells)
            rows.append(f"{rank + 1} {row}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
