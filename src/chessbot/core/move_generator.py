"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from chessbot.core.board import iter_bits
from chessbot.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chessbot.core.move import Move
from chessbot.core.piece import Piece
from chessbot.core.types import Square, make_square

if TYPE_CHECKING:
    from chessbot.core.position import Position


KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1),
)
KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1),
)
BISHOP_DIRS: tuple[tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
ROOK_DIRS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = BISHOP_DIRS + ROOK_DIRS

PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)

# Per color: (push direction, start rank, rank a pawn promotes *from*)
_PAWN_GEOMETRY: dict[Color, tuple[int, int, int]] = {
    Color.WHITE: (1, 1, 6),
    Color.BLACK: (-1, 6, 1),
}

# Per color: castle flag, right, king target, squares that must be empty,
# squares the king crosses (must not be attacked), rook home.
_CASTLES: dict[
    Color,
    tuple[tuple[MoveFlag, CastlingRights, Square, tuple[Square, ...], tuple[Square, ...], Square], ...],
] = {
    Color.WHITE: (
        (MoveFlag.CASTLE_KINGSIDE, CastlingRights.WHITE_KINGSIDE, 6, (5, 6), (5, 6), 7),
        (MoveFlag.CASTLE_QUEENSIDE, CastlingRights.WHITE_QUEENSIDE, 2, (1, 2, 3), (2, 3), 0),
    ),
    Color.BLACK: (
        (MoveFlag.CASTLE_KINGSIDE, CastlingRights.BLACK_KINGSIDE, 62, (61, 62), (61, 62), 63),
        (MoveFlag.CASTLE_QUEENSIDE, CastlingRights.BLACK_QUEENSIDE, 58, (57, 58, 59), (58, 59), 56),
    ),
}
_KING_HOME: dict[Color, Square] = {Color.WHITE: 4, Color.BLACK: 60}


# -- Precomputed lookup tables ---------------------------------------------


def _offset_targets(offsets: tuple[tuple[int, int], ...]) -> tuple[tuple[Square, ...], ...]:
    table: list[tuple[Square, ...]] = []
    for sq in range(64):
        file, rank = sq & 7, sq >> 3
        table.append(
            tuple(
                make_square(file + df, rank + dr)
                for df, dr in offsets
                if 0 <= file + df < 8 and 0 <= rank + dr < 8
            )
        )
    return tuple(table)


def _rays(directions: tuple[tuple[int, int], ...]) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    table: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(64):
        per_dir: list[tuple[Square, ...]] = []
        for df, dr in directions:
            ray: list[Square] = []
            file, rank = (sq & 7) + df, (sq >> 3) + dr
            while 0 <= file < 8 and 0 <= rank < 8:
                ray.append(make_square(file, rank))
                file += df
                rank += dr
            per_dir.append(tuple(ray))
        table.append(tuple(per_dir))
    return tuple(table)


def _pawn_captures(color: Color) -> tuple[tuple[Square, ...], ...]:
    """Squares a *color* pawn on each square attacks."""
    step = _PAWN_GEOMETRY[color][0]
    return _offset_targets(((-1, step), (1, step)))


def _mask(squares: tuple[Square, ...]) -> int:
    bits = 0
    for sq in squares:
        bits |= 1 << sq
    return bits


_KNIGHT_TARGETS = _offset_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _offset_targets(KING_OFFSETS)
_PAWN_ATTACKS: dict[Color, tuple[tuple[Square, ...], ...]] = {
    color: _pawn_captures(color) for color in Color
}
_KNIGHT_MASKS = tuple(_mask(t) for t in _KNIGHT_TARGETS)
_KING_MASKS = tuple(_mask(t) for t in _KING_TARGETS)
# A square is attacked by a *color* pawn if that pawn stands on one of the
# squares an opposite-colored pawn on the target would attack.
_PAWN_ATTACKER_MASKS: dict[Color, tuple[int, ...]] = {
    color: tuple(_mask(t) for t in _PAWN_ATTACKS[color.opposite]) for color in Color
}

_BISHOP_RAYS = _rays(BISHOP_DIRS)
_ROOK_RAYS = _rays(ROOK_DIRS)
_QUEEN_RAYS = _rays(QUEEN_DIRS)
_SLIDER_RAYS: dict[PieceType, tuple[tuple[tuple[Square, ...], ...], ...]] = {
    PieceType.BISHOP: _BISHOP_RAYS,
    PieceType.ROOK: _ROOK_RAYS,
    PieceType.QUEEN: _QUEEN_RAYS,
}
_DIAGONAL_SLIDERS = (PieceType.BISHOP, PieceType.QUEEN)
_STRAIGHT_SLIDERS = (PieceType.ROOK, PieceType.QUEEN)


class MoveGenerator:
    """Generates legal moves for a given :class:`Position`.

    Legality is checked by playing each pseudo-legal move with
    ``make_move``, asking whether the mover's king is attacked, and taking
    it back with ``unmake_move``. The position is always restored before a
    public method returns.
    """

    __slots__ = ("_pos", "_board")

    def __init__(self, position: Position) -> None:
        self._pos = position
        self._board = position.board

    # -- Public API ---------------------------------------------------------

    def generate_legal_moves(self) -> list[Move]:
        """All strictly legal moves for the side to move."""
        pos = self._pos
        mover = pos.side_to_move
        legal: list[Move] = []
        for move in self.generate_pseudo_legal_moves():
            pos.make_move(move)
            if not self.is_in_check(mover):
                legal.append(move)
            pos.unmake_move(move)
        return legal

    def generate_pseudo_legal_moves(self) -> list[Move]:
        """All pseudo-legal moves (may leave own king in check)."""
        color = self._pos.side_to_move
        board = self._board
        moves: list[Move] = []

        for sq in iter_bits(board.pieces_bitboard(color, PieceType.PAWN)):
            self._gen_pawn(sq, color, moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KNIGHT)):
            self._gen_steps(sq, color, _KNIGHT_TARGETS[sq], moves)
        for piece_type, rays in _SLIDER_RAYS.items():
            for sq in iter_bits(board.pieces_bitboard(color, piece_type)):
                self._gen_sliding(sq, color, rays[sq], moves)
        for sq in iter_bits(board.pieces_bitboard(color, PieceType.KING)):
            self._gen_steps(sq, color, _KING_TARGETS[sq], moves)
            self._gen_castling(sq, color, moves)
        return moves

    def captured_piece(self, move: Move) -> Piece | None:
        """Piece *move* would remove from the board (en passant included)."""
        if move.is_en_passant:
            return Piece(self._pos.side_to_move.opposite, PieceType.PAWN)
        return self._board[move.to_sq]

    def is_capture(self, move: Move) -> bool:
        return move.is_en_passant or self._board[move.to_sq] is not None

    # -- Attack detection (public) -----------------------------------------

    def is_in_check(self, color: Color) -> bool:
        """Is *color*'s king attacked by the opponent?"""
        return self.is_square_attacked(self._board.king_square(color), color.opposite)

    def is_square_attacked(self, sq: Square, by_color: Color) -> bool:
        """Is *sq* attacked by any piece of *by_color*?"""
        board = self._board
        if board.pieces_bitboard(by_color, PieceType.PAWN) & _PAWN_ATTACKER_MASKS[by_color][sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_MASKS[sq]:
            return True
        if board.pieces_bitboard(by_color, PieceType.KING) & _KING_MASKS[sq]:
            return True
        return bool(self._slider_attackers(sq, by_color, first_only=True))

    def attackers_of(self, sq: Square, by_color: Color) -> list[Square]:
        """Squares of every *by_color* piece attacking *sq*.

        Pawns attack diagonally whether or not *sq* is occupied; the king's
        own safety is ignored, so a king "attacks" a defended square too.
        """
        board = self._board
        found: list[Square] = []
        found.extend(
            iter_bits(
                board.pieces_bitboard(by_color, PieceType.PAWN)
                & _PAWN_ATTACKER_MASKS[by_color][sq]
            )
        )
        found.extend(
            iter_bits(board.pieces_bitboard(by_color, PieceType.KNIGHT) & _KNIGHT_MASKS[sq])
        )
        found.extend(self._slider_attackers(sq, by_color, first_only=False))
        found.extend(
            iter_bits(board.pieces_bitboard(by_color, PieceType.KING) & _KING_MASKS[sq])
        )
        return found

    def attacked_squares(self, by_color: Color) -> dict[Square, int]:
        """Map of every square *by_color* attacks to the number of attackers.

        Castling never attacks anything, which keeps check detection free of
        recursion.
        """
        board = self._board
        counts: dict[Square, int] = {}
        for sq, piece in board.items():
            if piece.color != by_color:
                continue
            for target in self._piece_attacks(sq, piece):
                counts[target] = counts.get(target, 0) + 1
        return counts

    # -- Attack helpers (private) ------------------------------------------

    def _piece_attacks(self, sq: Square, piece: Piece) -> list[Square]:
        pt = piece.piece_type
        if pt == PieceType.PAWN:
            return list(_PAWN_ATTACKS[piece.color][sq])
        if pt == PieceType.KNIGHT:
            return list(_KNIGHT_TARGETS[sq])
        if pt == PieceType.KING:
            return list(_KING_TARGETS[sq])
        board = self._board
        targets: list[Square] = []
        for ray in _SLIDER_RAYS[pt][sq]:
            for to_sq in ray:
                targets.append(to_sq)
                if board[to_sq] is not None:
                    break
        return targets

    def _slider_attackers(self, sq: Square, by_color: Color, *, first_only: bool) -> list[Square]:
        board = self._board
        found: list[Square] = []
        for rays, kinds in ((_BISHOP_RAYS, _DIAGONAL_SLIDERS), (_ROOK_RAYS, _STRAIGHT_SLIDERS)):
            if not any(board.pieces_bitboard(by_color, kind) for kind in kinds):
                continue
            for ray in rays[sq]:
                for to_sq in ray:
                    piece = board[to_sq]
                    if piece is None:
                        continue
                    if piece.color == by_color and piece.piece_type in kinds:
                        found.append(to_sq)
                        if first_only:
                            return found
                    break
        return found

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, color: Color, moves: list[Move]) -> None:
        board = self._board
        step, start_rank, promo_rank = _PAWN_GEOMETRY[color]
        rank = sq >> 3
        promotes = rank == promo_rank

        one_step = sq + 8 * step
        if 0 <= one_step < 64 and board.is_empty(one_step):
            if promotes:
                moves.extend(Move(sq, one_step, MoveFlag.PROMOTION, pt) for pt in PROMOTION_TYPES)
            else:
                moves.append(Move(sq, one_step))
                two_step = one_step + 8 * step
                if rank == start_rank and board.is_empty(two_step):
                    moves.append(Move(sq, two_step, MoveFlag.DOUBLE_PAWN))

        for cap_sq in _PAWN_ATTACKS[color][sq]:
            target = board[cap_sq]
            if target is not None and target.color != color:
                if promotes:
                    moves.extend(Move(sq, cap_sq, MoveFlag.PROMOTION, pt) for pt in PROMOTION_TYPES)
                else:
                    moves.append(Move(sq, cap_sq))
            elif target is None and cap_sq == self._pos.en_passant:
                moves.append(Move(sq, cap_sq, MoveFlag.EN_PASSANT))

    def _gen_steps(
        self, sq: Square, color: Color, targets: tuple[Square, ...], moves: list[Move]
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None or target.color != color:
                moves.append(Move(sq, to_sq))

    def _gen_sliding(
        self,
        sq: Square,
        color: Color,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq))
                    continue
                if target.color != color:
                    moves.append(Move(sq, to_sq))
                break

    def _gen_castling(self, king_sq: Square, color: Color, moves: list[Move]) -> None:
        rights = self._pos.castling
        if king_sq != _KING_HOME[color] or not rights:
            return
        if self.is_in_check(color):
            return

        board = self._board
        opponent = color.opposite
        own_rook = Piece(color, PieceType.ROOK)
        for flag, right, target, between, crossed, rook_home in _CASTLES[color]:
            if not rights & right or board[rook_home] != own_rook:
                continue
            if any(not board.is_empty(s) for s in between):
                continue
            if any(self.is_square_attacked(s, opponent) for s in crossed):
                continue
            moves.append(Move(king_sq, target, flag))
