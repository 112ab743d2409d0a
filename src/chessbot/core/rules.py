"""High-level chess rules: check, checkmate, stalemate, draw detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from chessbot.core.enums import Color, DrawReason, GameStatus, PieceType
from chessbot.core.move_generator import MoveGenerator
from chessbot.core.types import file_of, rank_of

if TYPE_CHECKING:
    from chessbot.core.position import Position


@dataclass(frozen=True, slots=True)
class GameState:
    """Derived status of a position; never stored on the position itself."""

    status: GameStatus
    draw_reason: DrawReason | None = None
    winner: Color | None = None

    @property
    def is_over(self) -> bool:
        return self.status in (GameStatus.CHECKMATE, GameStatus.STALEMATE, GameStatus.DRAW)

    def __str__(self) -> str:
        if self.status == GameStatus.CHECKMATE:
            return f"checkmate, {self.winner} wins"
        if self.status == GameStatus.DRAW and self.draw_reason is not None:
            return f"draw ({self.draw_reason.name.lower().replace('_', ' ')})"
        return self.status.name.lower()


class Rules:
    """Static rule-checker that operates on a :class:`Position`."""

    # Automatic draws end the game on their own: insufficient material,
    # 75-move rule, fivefold repetition. The 50-move rule and threefold
    # repetition only count when the caller asks for claimable draws.

    @staticmethod
    def is_in_check(position: Position) -> bool:
        return MoveGenerator(position).is_in_check(position.side_to_move)

    @staticmethod
    def is_checkmate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return gen.is_in_check(position.side_to_move) and not gen.generate_legal_moves()

    @staticmethod
    def is_stalemate(position: Position) -> bool:
        gen = MoveGenerator(position)
        return not gen.is_in_check(position.side_to_move) and not gen.generate_legal_moves()

    @staticmethod
    def is_insufficient_material(position: Position) -> bool:
        """K vs K, K+B vs K, K+N vs K, K+B vs K+B (same-color bishops)."""
        board = position.board
        remaining = (
            board.all_pieces_bitboard(Color.WHITE) | board.all_pieces_bitboard(Color.BLACK)
        ).bit_count()

        if remaining == 2:
            return True

        minors = (PieceType.KNIGHT, PieceType.BISHOP)
        if remaining == 3:
            return any(board.has_piece(c, pt) for c in Color for pt in minors)

        if remaining == 4:
            white_bishops = board.pieces(Color.WHITE, PieceType.BISHOP)
            black_bishops = board.pieces(Color.BLACK, PieceType.BISHOP)
            if len(white_bishops) == 1 and len(black_bishops) == 1:
                w_sq, b_sq = white_bishops[0], black_bishops[0]
                return (file_of(w_sq) + rank_of(w_sq)) % 2 == (file_of(b_sq) + rank_of(b_sq)) % 2

        return False

    @staticmethod
    def is_fifty_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= 100

    @staticmethod
    def is_seventy_five_move_rule(position: Position) -> bool:
        return position.halfmove_clock >= 150

    @staticmethod
    def is_threefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= 3

    @staticmethod
    def is_fivefold_repetition(position: Position) -> bool:
        return position.repetition_count() >= 5

    @staticmethod
    def automatic_draw_reason(position: Position) -> DrawReason | None:
        if Rules.is_insufficient_material(position):
            return DrawReason.INSUFFICIENT_MATERIAL
        if Rules.is_seventy_five_move_rule(position):
            return DrawReason.SEVENTY_FIVE_MOVE_RULE
        if Rules.is_fivefold_repetition(position):
            return DrawReason.FIVEFOLD_REPETITION
        return None

    @staticmethod
    def claimable_draw_reason(position: Position) -> DrawReason | None:
        if Rules.is_threefold_repetition(position):
            return DrawReason.THREEFOLD_REPETITION
        if Rules.is_fifty_move_rule(position):
            return DrawReason.FIFTY_MOVE_RULE
        return None

    @staticmethod
    def game_state(position: Position, *, claim_draws: bool = False) -> GameState:
        """Classify *position* for the side to move."""
        gen = MoveGenerator(position)
        side = position.side_to_move
        in_check = gen.is_in_check(side)

        if not gen.generate_legal_moves():
            if in_check:
                return GameState(GameStatus.CHECKMATE, winner=side.opposite)
            return GameState(GameStatus.STALEMATE)

        reason = Rules.automatic_draw_reason(position)
        if reason is None and claim_draws:
            reason = Rules.claimable_draw_reason(position)
        if reason is not None:
            return GameState(GameStatus.DRAW, draw_reason=reason)

        return GameState(GameStatus.CHECK if in_check else GameStatus.ONGOING)
