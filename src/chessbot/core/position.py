"""Position — full game state (board + metadata) with validated apply and undo."""

from __future__ import annotations

from dataclasses import dataclass

from chessbot.core.board import Board
from chessbot.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chessbot.core.move import Move
from chessbot.core.move_generator import MoveGenerator
from chessbot.core.piece import Piece
from chessbot.core.types import Square, file_of, make_square, rank_of
from chessbot.core import zobrist
from chessbot.errors import IllegalMoveError

# Rook home square -> the right lost when anything moves from or to it.
_ROOK_HOMES: dict[Square, CastlingRights] = {
    make_square(0, 0): CastlingRights.WHITE_QUEENSIDE,
    make_square(7, 0): CastlingRights.WHITE_KINGSIDE,
    make_square(0, 7): CastlingRights.BLACK_QUEENSIDE,
    make_square(7, 7): CastlingRights.BLACK_KINGSIDE,
}
_KING_RIGHTS: dict[Color, CastlingRights] = {
    Color.WHITE: CastlingRights.WHITE_BOTH,
    Color.BLACK: CastlingRights.BLACK_BOTH,
}
# Castle flag -> (rook from file, rook to file)
_ROOK_SLIDES: dict[MoveFlag, tuple[int, int]] = {
    MoveFlag.CASTLE_KINGSIDE: (7, 5),
    MoveFlag.CASTLE_QUEENSIDE: (0, 3),
}


@dataclass(frozen=True, slots=True)
class _UndoRecord:
    """Everything :meth:`Position.make_move` destroys, saved so it can be restored."""

    move: Move
    castling: CastlingRights
    en_passant: Square | None
    halfmove_clock: int
    captured_piece: Piece | None


def _en_passant_victim(move: Move) -> Square:
    """Square of the pawn removed by an en-passant capture (behind the target)."""
    return make_square(file_of(move.to_sq), rank_of(move.from_sq))


class Position:
    """Full chess position: board + side to move + castling + en passant + clocks.

    Two levels of mutation are offered:

    * :meth:`apply` — the checked entry point. The move is re-validated
      against the freshly generated legal set and :class:`IllegalMoveError`
      is raised if it is not there.
    * :meth:`make_move` / :meth:`unmake_move` — unchecked primitives used by
      the move generator and by search-like code working on a snapshot.

    Every applied move is recorded on an undo stack so :meth:`undo` restores
    the exact prior state, and Zobrist keys are tracked for repetition.
    """

    __slots__ = (
        "board",
        "side_to_move",
        "castling",
        "en_passant",
        "halfmove_clock",
        "fullmove_number",
        "_hash",
        "_undo",
        "_keys",
        "_key_counts",
    )

    def __init__(
        self,
        board: Board | None = None,
        side_to_move: Color = Color.WHITE,
        castling: CastlingRights = CastlingRights.ALL,
        en_passant: Square | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.board = board if board is not None else Board.initial()
        self.side_to_move = side_to_move
        self.castling = castling
        self.en_passant = en_passant
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self._hash = self._full_hash()
        self._undo: list[_UndoRecord] = []
        self._keys: list[int] = [self._hash]
        self._key_counts: dict[int, int] = {self._hash: 1}

    # ── Checked operations ───────────────────────────────────────────────

    def legal_moves(self) -> list[Move]:
        return MoveGenerator(self).generate_legal_moves()

    def resolve(self, move: Move) -> Move:
        """Return the generated legal move matching *move*'s squares and promotion.

        Flags on *move* are ignored, so ``Move(E2, E4)`` resolves to the
        double push. A promoting move without a piece kind means a queen.
        """
        for candidate in self.legal_moves():
            if candidate.from_sq != move.from_sq or candidate.to_sq != move.to_sq:
                continue
            wanted = move.promotion
            if wanted is None and candidate.promotion is not None:
                wanted = PieceType.QUEEN
            if candidate.promotion == wanted:
                return candidate
        raise IllegalMoveError(move, self.side_to_move)

    def apply(self, move: Move) -> Move:
        """Validate and play *move*; returns the canonical move that was applied."""
        legal = self.resolve(move)
        self.make_move(legal)
        return legal

    def undo(self) -> Move:
        """Take back the most recent move and return it."""
        if not self._undo:
            raise IndexError("No move to undo")
        move = self._undo[-1].move
        self.unmake_move(move)
        return move

    def snapshot(self) -> Position:
        """Independent copy, including undo history and repetition keys."""
        clone = Position.__new__(Position)
        clone.board = self.board.copy()
        clone.side_to_move = self.side_to_move
        clone.castling = self.castling
        clone.en_passant = self.en_passant
        clone.halfmove_clock = self.halfmove_clock
        clone.fullmove_number = self.fullmove_number
        clone._hash = self._hash
        clone._undo = self._undo.copy()
        clone._keys = self._keys.copy()
        clone._key_counts = self._key_counts.copy()
        return clone

    copy = snapshot

    # ── Unchecked primitives ─────────────────────────────────────────────

    def make_move(self, move: Move) -> None:
        """Play *move* without a legality check, pushing an undo record."""
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        capture_sq = _en_passant_victim(move) if move.is_en_passant else move.to_sq
        captured = board[capture_sq]
        self._hash ^= self._en_passant_hash()

        self._undo.append(
            _UndoRecord(
                move=move,
                castling=self.castling,
                en_passant=self.en_passant,
                halfmove_clock=self.halfmove_clock,
                captured_piece=captured,
            )
        )

        self._lift(move.from_sq)
        if captured is not None:
            self._lift(capture_sq)

        placed = piece
        if move.promotion is not None:
            placed = Piece(piece.color, move.promotion)
        self._put(move.to_sq, placed)

        slide = _ROOK_SLIDES.get(move.flag)
        if slide is not None:
            rank = rank_of(move.from_sq)
            rook_from, rook_to = make_square(slide[0], rank), make_square(slide[1], rank)
            rook = self._lift(rook_from)
            assert rook is not None
            self._put(rook_to, rook)

        if move.flag == MoveFlag.DOUBLE_PAWN:
            self.en_passant = (move.from_sq + move.to_sq) // 2
        else:
            self.en_passant = None

        rights = self.castling
        if piece.piece_type == PieceType.KING:
            rights &= ~_KING_RIGHTS[piece.color]
        for sq in (move.from_sq, move.to_sq):
            if sq in _ROOK_HOMES:
                rights &= ~_ROOK_HOMES[sq]
        self._set_castling(rights)

        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if self.side_to_move == Color.BLACK:
            self.fullmove_number += 1

        self.side_to_move = self.side_to_move.opposite
        self._hash ^= zobrist.side_to_move_key()
        self._hash ^= self._en_passant_hash()
        self._keys.append(self._hash)
        self._key_counts[self._hash] = self._key_counts.get(self._hash, 0) + 1

    def unmake_move(self, move: Move) -> None:
        """Undo the last :meth:`make_move`, which must have played *move*."""
        record = self._undo.pop()
        key = self._keys.pop()
        remaining = self._key_counts[key] - 1
        if remaining:
            self._key_counts[key] = remaining
        else:
            del self._key_counts[key]

        self.side_to_move = self.side_to_move.opposite
        if self.side_to_move == Color.BLACK:
            self.fullmove_number -= 1

        board = self.board
        piece = board[move.to_sq]
        assert piece is not None
        if move.promotion is not None:
            piece = Piece(piece.color, PieceType.PAWN)

        board[move.from_sq] = piece
        if move.is_en_passant:
            board[move.to_sq] = None
            board[_en_passant_victim(move)] = record.captured_piece
        else:
            board[move.to_sq] = record.captured_piece

        slide = _ROOK_SLIDES.get(move.flag)
        if slide is not None:
            rank = rank_of(move.from_sq)
            rook_from, rook_to = make_square(slide[0], rank), make_square(slide[1], rank)
            board[rook_from] = board[rook_to]
            board[rook_to] = None

        self.castling = record.castling
        self.en_passant = record.en_passant
        self.halfmove_clock = record.halfmove_clock
        self._hash = self._keys[-1]

    # ── History / repetition ─────────────────────────────────────────────

    @property
    def moves(self) -> list[Move]:
        """Moves applied since this position was created, oldest first."""
        return [record.move for record in self._undo]

    @property
    def last_move(self) -> Move | None:
        return self._undo[-1].move if self._undo else None

    @property
    def zobrist_hash(self) -> int:
        return self._hash

    @property
    def root_hash(self) -> int:
        """Key of the position this game started from."""
        return self._keys[0]

    def repetition_count(self) -> int:
        """How many times the current position occurred in this game."""
        return self._key_counts.get(self._hash, 0)

    # ── Internal ─────────────────────────────────────────────────────────

    def _lift(self, sq: Square) -> Piece | None:
        piece = self.board[sq]
        if piece is not None:
            self._hash ^= zobrist.piece_key(piece, sq)
            self.board[sq] = None
        return piece

    def _put(self, sq: Square, piece: Piece) -> None:
        self.board[sq] = piece
        self._hash ^= zobrist.piece_key(piece, sq)

    def _set_castling(self, castling: CastlingRights) -> None:
        if castling != self.castling:
            self._hash ^= zobrist.castling_key(self.castling) ^ zobrist.castling_key(castling)
            self.castling = castling

    def _en_passant_hash(self) -> int:
        """En-passant key, counted only when the side to move has a pawn to take with."""
        ep = self.en_passant
        if ep is None:
            return 0
        rank = rank_of(ep) - 1 if self.side_to_move == Color.WHITE else rank_of(ep) + 1
        pawn = Piece(self.side_to_move, PieceType.PAWN)
        for file in (file_of(ep) - 1, file_of(ep) + 1):
            if 0 <= file < 8 and self.board[make_square(file, rank)] == pawn:
                return zobrist.en_passant_key(ep)
        return 0

    def _full_hash(self) -> int:
        key = zobrist.castling_key(self.castling)
        if self.side_to_move == Color.BLACK:
            key ^= zobrist.side_to_move_key()
        key ^= self._en_passant_hash()
        for sq, piece in self.board.items():
            key ^= zobrist.piece_key(piece, sq)
        return key
