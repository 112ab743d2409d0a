"""Tests for the ColeMiner strategem."""

import pytest

from chessbot.core.enums import Color, GameStatus
from chessbot.core.move import Move
from chessbot.core.notation import position_from_fen
from chessbot.core.position import Position
from chessbot.core.rules import Rules
from chessbot.core.types import file_of, parse_square
from chessbot.strategems import ColeMiner, RandomAggro
from chessbot.strategems.cole_miner import OPENING_BOOK, PlannedLine, king_pressure


def _move(text: str) -> Move:
    return Move(parse_square(text[:2]), parse_square(text[2:4]))


def _play(*moves: str) -> Position:
    pos = Position()
    for text in moves:
        pos.apply(_move(text))
    return pos


def _rook_pawn_step(pos: Position) -> Move:
    """Filler for wildcard plies: a single step of the a-pawn."""
    return next(
        m for m in pos.legal_moves() if file_of(m.from_sq) == 0 and abs(m.to_sq - m.from_sq) == 8
    )


class TestTactics:
    def test_mate_beats_material(self) -> None:
        pos = position_from_fen("6k1/5ppp/8/7q/8/6N1/8/R5K1 w - - 0 1")
        legal = pos.legal_moves()
        for seed in range(5):
            assert ColeMiner(seed=seed).decide(pos, legal) == _move("a1a8")
        assert RandomAggro(seed=0).decide(pos, legal) == _move("g3h5")

    def test_prefers_free_pawn_over_defended_rook(self) -> None:
        # The rook on d5 is covered by the e6 pawn; the b7 pawn is loose
        pos = position_from_fen("4k3/1p6/B3p3/3r4/8/8/8/3Q2K1 w - - 0 1")
        legal = pos.legal_moves()
        assert ColeMiner(seed=0).decide(pos, legal) == _move("a6b7")
        assert RandomAggro(seed=0).decide(pos, legal) == _move("d1d5")

    def test_trades_up_even_when_defended(self) -> None:
        # Knight takes a pawn-defended queen
        pos = position_from_fen("4k3/8/4p3/3q4/8/2N5/8/4K3 w - - 0 1")
        assert ColeMiner(seed=3).decide(pos, pos.legal_moves()) == _move("c3d5")

    def test_steps_away_from_pressure(self) -> None:
        pos = position_from_fen("5rk1/8/8/8/8/8/8/R5K1 w - - 0 1")
        assert king_pressure(pos, Color.WHITE) == 2
        legal = pos.legal_moves()
        for seed in range(10):
            assert ColeMiner(seed=seed).decide(pos, legal) in {_move("g1h1"), _move("g1h2")}


class TestDrawHandling:
    def test_ahead_never_stalemates(self) -> None:
        # Qf7 would leave the lone king without a move
        pos = position_from_fen("7k/8/8/8/8/8/8/K4Q2 w - - 0 1")
        legal = pos.legal_moves()
        for seed in range(100):
            trial = pos.snapshot()
            trial.make_move(ColeMiner(seed=seed).decide(pos, legal))
            status = Rules.game_state(trial, claim_draws=True).status
            assert status not in (GameStatus.STALEMATE, GameStatus.DRAW)

    def test_behind_repeats_for_a_draw(self) -> None:
        pos = position_from_fen("7k/8/8/8/8/8/K7/1Q6 b - - 0 1")
        for text in ("h8g8", "a2a3", "g8h8", "a3a2", "h8g7", "a2a3", "g7h8", "a3b3", "h8g8", "b3a3"):
            pos.apply(_move(text))
        legal = pos.legal_moves()
        for seed in range(5):
            assert ColeMiner(seed=seed).decide(pos, legal) == _move("g8h8")

    def test_level_material_takes_the_draw(self) -> None:
        # Bxb2 leaves king and bishop against a bare king
        pos = position_from_fen("7k/8/8/8/8/8/1n6/2B1K3 w - - 0 1")
        for seed in range(5):
            assert ColeMiner(seed=seed).decide(pos, pos.legal_moves()) == _move("c1b2")

    def test_rescues_a_hanging_piece(self) -> None:
        pos = position_from_fen("k7/8/8/4p3/3N4/8/8/7K w - - 0 1")
        legal = pos.legal_moves()
        for seed in range(10):
            assert ColeMiner(seed=seed).decide(pos, legal).from_sq == parse_square("d4")


class TestRepetitionMemory:
    def test_avoids_positions_seen_twice(self) -> None:
        pos = Position()
        bot = ColeMiner(seed=0, use_opening_book=False)
        keep = _move("a2a3")
        for move in pos.legal_moves():
            if move == keep:
                continue
            trial = pos.snapshot()
            trial.make_move(move)
            bot.observe(trial)
            bot.observe(trial)

        assert bot.decide(pos, pos.legal_moves()) == keep

    def test_decision_is_remembered(self) -> None:
        pos = Position()
        bot = ColeMiner(seed=0, use_opening_book=False)
        choice = bot.decide(pos, pos.legal_moves())
        pos.apply(choice)
        assert bot.visits(pos) == 1

    def test_falls_back_when_everything_repeats(self) -> None:
        pos = position_from_fen("7k/8/8/8/8/8/8/K7 w - - 0 1")
        bot = ColeMiner(seed=0)
        for move in pos.legal_moves():
            trial = pos.snapshot()
            trial.make_move(move)
            bot.observe(trial)
            bot.observe(trial)
        assert bot.decide(pos, pos.legal_moves()) in pos.legal_moves()


class TestOpeningBook:
    def test_white_opens_e4(self) -> None:
        pos = Position()
        for seed in range(5):
            assert ColeMiner(seed=seed).decide(pos, pos.legal_moves()) == _move("e2e4")

    @pytest.mark.parametrize(
        ("played", "expected"),
        [
            (("e2e4",), "e7e6"),
            (("c2c4",), "e7e5"),
            (("d2d4",), "d7d5"),
            (("e2e4", "e7e6", "d2d4"), "d8f6"),
            (("e2e4", "e7e6", "e4e5"), "f7f6"),
        ],
    )
    def test_black_replies(self, played: tuple[str, ...], expected: str) -> None:
        pos = _play(*played)
        bot = ColeMiner(seed=0)
        assert bot.decide(pos, pos.legal_moves()) == _move(expected)
        assert bot.in_opening_book

    def test_white_wildcard_line(self) -> None:
        pos = _play("e2e4", "b8c6")
        assert ColeMiner(seed=0).decide(pos, pos.legal_moves()) == _move("d1e2")

    def test_leaves_book_for_good(self) -> None:
        pos = _play("e2e4", "e7e6", "e4e5", "f7f6", "e5f6")
        bot = ColeMiner(seed=0)
        assert bot.decide(pos, pos.legal_moves()) in pos.legal_moves()
        assert not bot.in_opening_book

    def test_not_used_from_custom_position(self) -> None:
        pos = position_from_fen("4k3/pppppppp/8/8/8/8/PPPPPPPP/4K3 w - - 0 1")
        bot = ColeMiner(seed=0)
        bot.decide(pos, pos.legal_moves())
        assert not bot.in_opening_book

    def test_book_can_be_disabled(self) -> None:
        bot = ColeMiner(seed=0, use_opening_book=False)
        assert not bot.in_opening_book


class TestPlannedLine:
    def test_parse_wildcards(self) -> None:
        line = PlannedLine.parse("e2e4 * d1e2")
        assert line.plies == (
            (parse_square("e2"), parse_square("e4")),
            None,
            (parse_square("d1"), parse_square("e2")),
        )

    def test_next_ply(self) -> None:
        line = PlannedLine.parse("e2e4 * d1e2")
        assert line.next_ply([]) == (parse_square("e2"), parse_square("e4"))
        assert line.next_ply([_move("e2e4")]) is None
        assert line.next_ply([_move("e2e4"), _move("a7a6")]) == (parse_square("d1"), parse_square("e2"))
        assert line.next_ply([_move("d2d4"), _move("a7a6")]) is None

    def test_book_lines_are_playable(self) -> None:
        for color, lines in OPENING_BOOK.items():
            for line in lines:
                pos = Position()
                for ply in line.plies:
                    if ply is None:
                        move = _rook_pawn_step(pos)
                    else:
                        move = pos.resolve(Move(*ply))
                    pos.make_move(move)
                assert len(pos.moves) == len(line.plies), f"{color} line {line.label!r}"


class TestContract:
    def test_always_returns_a_legal_move(self) -> None:
        pos = Position()
        white, black = ColeMiner(seed=1), ColeMiner(seed=2)
        for _ in range(30):
            legal = pos.legal_moves()
            if not legal:
                break
            bot = white if pos.side_to_move == Color.WHITE else black
            choice = bot.decide(pos, legal)
            assert choice in legal
            pos.apply(choice)
