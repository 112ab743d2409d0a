"""ColeMiner: opening book, then tactical opportunism balanced with king safety.

Decision order for each turn:

1. A move that checkmates is played at once.
2. While the game still follows a planned opening line for our color, the
   next planned move is played.
3. Material decides how a drawn result is treated. When ahead, moves that
   end the game in a draw are dropped. When level or behind, a drawing move
   is taken.
4. Moves leading to a position already visited twice are set aside unless
   nothing else is left.
5. Favourable captures: the captured piece is worth more than the capturer,
   or no opponent piece of lower-or-equal value guards the square. The most
   valuable such capture is chosen.
6. Moves that reduce the opponent's attacks around our king, most reduction
   first.
7. A random move among those that do not weaken the king. Moves that leave
   the moved piece hanging are avoided, and moves rescuing a piece that was
   hanging are preferred.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chessbot.core.board import Board
from chessbot.core.enums import Color, GameStatus, PieceType
from chessbot.core.move import Move
from chessbot.core.move_generator import MoveGenerator
from chessbot.core.notation.fen import STARTING_FEN, position_from_fen
from chessbot.core.rules import Rules
from chessbot.core.types import Square, parse_square
from chessbot.strategems.base import Strategem

if TYPE_CHECKING:
    from chessbot.core.position import Position

_LOGGER = logging.getLogger(__name__)

_WILDCARD = "*"

# A king that can legally recapture is the cheapest possible guard.
_GUARD_VALUE: dict[PieceType, int] = {pt: pt.material for pt in PieceType}
_GUARD_VALUE[PieceType.KING] = 0


@dataclass(frozen=True, slots=True)
class PlannedLine:
    """A scripted opening: every ply from the initial position, ``*`` = any."""

    label: str
    plies: tuple[tuple[Square, Square] | None, ...]

    @classmethod
    def parse(cls, text: str) -> PlannedLine:
        plies: list[tuple[Square, Square] | None] = []
        for token in text.split():
            if token == _WILDCARD:
                plies.append(None)
            else:
                plies.append((parse_square(token[:2]), parse_square(token[2:4])))
        return cls(text, tuple(plies))

    def next_ply(self, played: Sequence[Move]) -> tuple[Square, Square] | None:
        """Planned squares for the next ply, or None if the game left this line."""
        if len(played) >= len(self.plies):
            return None
        for planned, actual in zip(self.plies, played):
            if planned is not None and planned != (actual.from_sq, actual.to_sq):
                return None
        return self.plies[len(played)]


OPENING_BOOK: dict[Color, tuple[PlannedLine, ...]] = {
    Color.WHITE: tuple(
        PlannedLine.parse(line)
        for line in (
            "e2e4 e7e5 c2c3 * d2d4",
            "e2e4 d7d5 f2f3",
            "e2e4 d7d5 d2d3 d5e4 d3e4 * f2f3",
            "e2e4 g8f6 d2d3",
            "e2e4 * d1e2 * d2d3",
        )
    ),
    Color.BLACK: tuple(
        PlannedLine.parse(line)
        for line in (
            "e2e4 e7e6 e4e5 f7f6",
            "e2e4 e7e6 * d8f6",
            "c2c4 e7e5",
            "* d7d5 * e7e6",
        )
    ),
}

_STARTING_HASH = position_from_fen(STARTING_FEN).zobrist_hash


def king_pressure(position: Position, color: Color) -> int:
    """Number of opponent attacks landing on squares next to *color*'s king."""
    gen = MoveGenerator(position)
    king_sq = position.board.king_square(color)
    attacks = gen.attacked_squares(color.opposite)
    kf, kr = king_sq & 7, king_sq >> 3
    total = 0
    for sq, count in attacks.items():
        if sq != king_sq and abs((sq & 7) - kf) <= 1 and abs((sq >> 3) - kr) <= 1:
            total += count
    return total


@dataclass(slots=True)
class _Assessment:
    move: Move
    key: int
    mates: bool
    draws: bool
    captured_value: int | None
    favourable: bool
    hangs: bool
    was_hanging: bool
    pressure: int


class ColeMiner(Strategem):
    """Heuristic policy balancing king safety and tactical opportunism."""

    name = "cole_miner"

    def __init__(self, seed: int | None = None, use_opening_book: bool = True) -> None:
        super().__init__(seed)
        self._in_book = use_opening_book
        self._visits: Counter[int] = Counter()
        _LOGGER.info("ColeMiner strategem active (seed=%r, book=%s)", seed, use_opening_book)

    @property
    def in_opening_book(self) -> bool:
        return self._in_book

    def observe(self, position: Position) -> None:
        """Remember *position* as visited once more."""
        self._visits[position.zobrist_hash] += 1

    def visits(self, position: Position) -> int:
        return self._visits[position.zobrist_hash]

    def decide(self, position: Position, legal_moves: Sequence[Move]) -> Move:
        self.observe(position)
        side = position.side_to_move
        assessments = [self._assess(position, move) for move in legal_moves]

        choice = self._choose(position, side, assessments)
        self._visits[next(a.key for a in assessments if a.move == choice)] += 1
        return choice

    # ── Tiers ────────────────────────────────────────────────────────────

    def _choose(self, position: Position, side: Color, assessments: list[_Assessment]) -> Move:
        mates = [a.move for a in assessments if a.mates]
        if mates:
            _LOGGER.debug("mate available: %s", mates)
            return self._rng.choice(mates)

        booked = self._book_move(position, side, assessments)
        if booked is not None:
            return booked

        balance = position.board.material(side) - position.board.material(side.opposite)
        candidates = assessments
        if balance > 0:
            candidates = [a for a in assessments if not a.draws] or assessments
        else:
            draws = [a.move for a in assessments if a.draws]
            if draws:
                _LOGGER.debug("material balance %d, settling for a draw via %s", balance, draws)
                return self._rng.choice(draws)

        fresh = [a for a in candidates if self._visits[a.key] < 2]
        pool = fresh or candidates

        captures = [a for a in pool if a.favourable]
        if captures:
            top = max(a.captured_value or 0 for a in captures)
            best = [a.move for a in captures if a.captured_value == top]
            _LOGGER.debug("favourable capture worth %d among %s", top, best)
            return self._rng.choice(best)

        safe = [a for a in pool if not a.hangs] or pool
        baseline = king_pressure(position, side)
        lowest = min(a.pressure for a in safe)
        if lowest < baseline:
            improving = [a for a in safe if a.pressure == lowest]
            _LOGGER.debug("king pressure %d -> %d", baseline, lowest)
            return self._pick_rescue(improving)

        steady = [a for a in safe if a.pressure == baseline]
        if not steady:
            steady = [a for a in safe if a.pressure == lowest]
        return self._pick_rescue(steady)

    def _pick_rescue(self, assessments: list[_Assessment]) -> Move:
        rescues = [a.move for a in assessments if a.was_hanging]
        if rescues:
            _LOGGER.debug("moving a hanging piece: %s", rescues)
            return self._rng.choice(rescues)
        return self._rng.choice([a.move for a in assessments])

    def _book_move(
        self, position: Position, side: Color, assessments: list[_Assessment]
    ) -> Move | None:
        if not self._in_book:
            return None
        if position.root_hash == _STARTING_HASH:
            played = position.moves
            by_squares = {(a.move.from_sq, a.move.to_sq): a.move for a in assessments}
            for line in OPENING_BOOK[side]:
                planned = line.next_ply(played)
                if planned is not None and planned in by_squares:
                    _LOGGER.debug("following opening line %r", line.label)
                    return by_squares[planned]
        self._in_book = False
        _LOGGER.info("ColeMiner leaves the opening book after %d plies", len(position.moves))
        return None

    # ── Evaluation ───────────────────────────────────────────────────────

    def _assess(self, position: Position, move: Move) -> _Assessment:
        side = position.side_to_move
        opponent = side.opposite
        trial = position.snapshot()
        gen = MoveGenerator(trial)

        mover = trial.board[move.from_sq]
        assert mover is not None
        moved_value = mover.material
        captured = gen.captured_piece(move)

        was_hanging = False
        if mover.piece_type != PieceType.KING:
            threats = self._guard_values(gen, trial.board, move.from_sq, opponent, side)
            defenders = gen.attackers_of(move.from_sq, side)
            was_hanging = bool(threats) and (not defenders or min(threats) < moved_value)

        trial.make_move(move)
        after = MoveGenerator(trial)
        state = Rules.game_state(trial, claim_draws=True)

        guards = self._guard_values(after, trial.board, move.to_sq, opponent, side)
        backers = after.attackers_of(move.to_sq, side)
        hangs = bool(guards) and (not backers or min(guards) < moved_value)

        favourable = False
        if captured is not None:
            favourable = captured.material > moved_value or all(g > moved_value for g in guards)

        return _Assessment(
            move=move,
            key=trial.zobrist_hash,
            mates=state.status == GameStatus.CHECKMATE,
            draws=state.status in (GameStatus.STALEMATE, GameStatus.DRAW),
            captured_value=captured.material if captured is not None else None,
            favourable=favourable,
            hangs=hangs,
            was_hanging=was_hanging,
            pressure=king_pressure(trial, side),
        )

    @staticmethod
    def _guard_values(
        gen: MoveGenerator, board: Board, sq: Square, guard: Color, owner: Color
    ) -> list[int]:
        """Values of *guard*'s pieces able to capture on *sq*.

        The king only counts when *owner* does not also cover the square.
        """
        values: list[int] = []
        for from_sq in gen.attackers_of(sq, guard):
            piece = board[from_sq]
            assert piece is not None
            if piece.piece_type == PieceType.KING and gen.is_square_attacked(sq, owner):
                continue
            values.append(_GUARD_VALUE[piece.piece_type])
        return values
