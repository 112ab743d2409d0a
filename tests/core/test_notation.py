"""Tests for FEN, SAN and coordinate notation."""

import pytest

from chessbot.core.enums import CastlingRights, Color, MoveFlag, PieceType
from chessbot.core.move import Move
from chessbot.core.notation import (
    STARTING_FEN,
    move_to_coordinate,
    move_to_san,
    parse_coordinate,
    parse_move,
    parse_san,
    position_from_fen,
    position_to_fen,
)
from chessbot.core.piece import Piece
from chessbot.core.position import Position
from chessbot.core.types import D6, E1, E2, E3, E4, E7, E8, parse_square
from chessbot.errors import UnrecognizedMoveError


class TestFenParsing:
    def test_starting_position(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert pos.side_to_move == Color.WHITE
        assert pos.castling == CastlingRights.ALL
        assert pos.en_passant is None
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1
        assert pos.board[E1] == Piece(Color.WHITE, PieceType.KING)
        assert pos.board[E8] == Piece(Color.BLACK, PieceType.KING)

    def test_matches_default_position(self) -> None:
        assert position_from_fen(STARTING_FEN).zobrist_hash == Position().zobrist_hash

    def test_fullmove_zero_accepted(self) -> None:
        pos = position_from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 0")
        assert pos.fullmove_number == 1
        assert pos.zobrist_hash == Position().zobrist_hash

    def test_clock_fields_optional(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/8/8 b - -")
        assert pos.side_to_move == Color.BLACK
        assert pos.halfmove_clock == 0
        assert pos.fullmove_number == 1

    @pytest.mark.parametrize(
        "fen",
        [
            "8/8/8/8/8/8/8/8 w - - 0 1",
            "8/8/8/8/8/8/8/4K3 w - - 0 1",
            "4k3/8/8/8/8/8/8/K3K3 w - - 0 1",
            "4k2k/8/8/8/8/8/8/4K3 b - - 0 1",
        ],
    )
    def test_king_count_enforced(self, fen: str) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            position_from_fen(fen)

    def test_en_passant_square(self) -> None:
        pos = position_from_fen("rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 3")
        assert pos.en_passant == D6

    def test_black_en_passant_square(self) -> None:
        pos = position_from_fen("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
        assert pos.en_passant == E3

    def test_partial_castling(self) -> None:
        pos = position_from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w Kq - 0 1")
        assert pos.castling == CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_QUEENSIDE

    @pytest.mark.parametrize(
        "fen",
        [
            "This ain't no FEN string!",
            "YEET 1 2 3 4 5",
            "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR - - - - -",
            "Z7/8/8/8/8/8/8/8 w - - 0 0",
            "8/8/8/8/8/8/8/8",
            "",
        ],
    )
    def test_invalid_fen_raises(self, fen: str) -> None:
        with pytest.raises(ValueError):
            position_from_fen(fen)

    def test_invalid_side_to_move_raises(self) -> None:
        with pytest.raises(ValueError, match="side-to-move"):
            position_from_fen("8/8/8/8/8/8/8/8 x - - 0 1")

    def test_invalid_rank_count_raises(self) -> None:
        with pytest.raises(ValueError, match="8 ranks"):
            position_from_fen("8/8/8/8/8/8/8 w - - 0 1")

    @pytest.mark.parametrize("placement", ["9/8/8/8/8/8/8/8", "ppppppppp/8/8/8/8/8/8/8", "7/8/8/8/8/8/8/8"])
    def test_invalid_rank_width_raises(self, placement: str) -> None:
        with pytest.raises(ValueError, match="Invalid FEN"):
            position_from_fen(f"{placement} w - - 0 1")

    def test_invalid_castling_field_raises(self) -> None:
        with pytest.raises(ValueError, match="castling"):
            position_from_fen("8/8/8/8/8/8/8/8 w Kx - 0 1")

    def test_invalid_en_passant_for_side_raises(self) -> None:
        with pytest.raises(ValueError, match="en-passant"):
            position_from_fen("8/8/8/8/8/8/8/8 w - e3 0 1")

    def test_negative_clock_raises(self) -> None:
        with pytest.raises(ValueError):
            position_from_fen("8/8/8/8/8/8/8/8 w - - -1 1")


class TestFenSerialisation:
    @pytest.mark.parametrize(
        "fen",
        [
            STARTING_FEN,
            "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
            "1r2k1r1/1p5p/2pp2pn/p1b1p3/2PnP1b1/NB1Q2p1/PP1P3q/R1B1K3 b - - 12 40",
            "8/8/4k3/8/8/4K3/8/8 w - - 0 1",
        ],
    )
    def test_roundtrip(self, fen: str) -> None:
        assert position_to_fen(position_from_fen(fen)) == fen

    def test_after_moves(self) -> None:
        pos = Position()
        pos.apply(Move(E2, E4))
        assert position_to_fen(pos) == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


class TestSAN:
    def test_pawn_push(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert move_to_san(pos, Move(E2, E4, MoveFlag.DOUBLE_PAWN)) == "e4"

    def test_knight_move(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert move_to_san(pos, Move(parse_square("g1"), parse_square("f3"))) == "Nf3"

    def test_parse_san_e4(self) -> None:
        move = parse_san(position_from_fen(STARTING_FEN), "e4")
        assert move.to_sq == E4
        assert move.flag == MoveFlag.DOUBLE_PAWN

    def test_parse_san_illegal_raises(self) -> None:
        with pytest.raises(ValueError, match="Illegal"):
            parse_san(position_from_fen(STARTING_FEN), "Ke5")

    def test_parse_san_garbage_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid SAN"):
            parse_san(position_from_fen(STARTING_FEN), "hello")

    def test_san_roundtrip_kiwipete(self) -> None:
        pos = position_from_fen(
            "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
        )
        for move in pos.legal_moves():
            san = move_to_san(pos, move)
            assert parse_san(pos, san) == move, f"Roundtrip failed for {san}"

    def test_zero_castling_notation(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert parse_san(pos, "0-0").flag == MoveFlag.CASTLE_KINGSIDE
        assert parse_san(pos, "O-O-O").flag == MoveFlag.CASTLE_QUEENSIDE

    def test_knight_disambiguation(self) -> None:
        pos = position_from_fen("7k/8/8/8/8/8/8/K1N3N1 w - - 0 1")
        assert move_to_san(pos, Move(parse_square("c1"), parse_square("e2"))) == "Nce2"
        with pytest.raises(ValueError, match="Ambiguous"):
            parse_san(pos, "Ne2")

    def test_rank_disambiguation(self) -> None:
        pos = position_from_fen("7k/8/8/8/8/8/R7/4R2K w - - 0 1")
        move = parse_san(pos, "R1e2")
        assert move.from_sq == E1

    def test_promotion_with_check_suffix(self) -> None:
        pos = position_from_fen("7k/6P1/8/8/8/8/8/4K3 w - - 0 1")
        promo = Move(parse_square("g7"), parse_square("g8"), MoveFlag.PROMOTION, PieceType.QUEEN)
        assert move_to_san(pos, promo) == "g8=Q+"
        assert parse_san(pos, "g8=Q+") == promo
        assert parse_san(pos, "g8") == promo

    def test_checkmate_suffix(self) -> None:
        pos = position_from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
        assert move_to_san(pos, Move(parse_square("a1"), parse_square("a8"))) == "Ra8#"

    def test_pawn_capture(self) -> None:
        pos = position_from_fen("7k/8/8/4p3/3P4/8/8/4K3 w - - 0 1")
        assert move_to_san(pos, Move(parse_square("d4"), parse_square("e5"))) == "dxe5"


class TestCoordinate:
    def test_move_to_coordinate(self) -> None:
        assert move_to_coordinate(Move(E2, E4, MoveFlag.DOUBLE_PAWN)) == "e2e4"
        promo = Move(E7, E8, MoveFlag.PROMOTION, PieceType.KNIGHT)
        assert move_to_coordinate(promo) == "e7e8n"

    @pytest.mark.parametrize("text", ["e2e4", "e2-e4", "e2->e4", "e2 e4", " e2e4 ", "e2xe4"])
    def test_parse_coordinate_separators(self, text: str) -> None:
        assert parse_coordinate(text) == Move(E2, E4)

    @pytest.mark.parametrize("text", ["e7e8q", "e7e8=Q", "e7-e8Q"])
    def test_parse_coordinate_promotion(self, text: str) -> None:
        assert parse_coordinate(text).promotion == PieceType.QUEEN

    @pytest.mark.parametrize("text", ["e2", "e9e4", "i2e4", "e2e4k", "Nf3"])
    def test_parse_coordinate_rejects(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_coordinate(text)


class TestParseMove:
    def test_coordinate_resolves_to_legal_move(self) -> None:
        move = parse_move(Position(), "e2e4")
        assert move.flag == MoveFlag.DOUBLE_PAWN

    def test_san_fallback(self) -> None:
        move = parse_move(Position(), "Nf3")
        assert move == Move(parse_square("g1"), parse_square("f3"))

    def test_castling_from_king_squares(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert parse_move(pos, "e1g1").flag == MoveFlag.CASTLE_KINGSIDE
        assert parse_move(pos, "O-O-O").flag == MoveFlag.CASTLE_QUEENSIDE

    def test_promotion_defaults_to_queen(self) -> None:
        pos = position_from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")
        assert parse_move(pos, "e7e8").promotion == PieceType.QUEEN
        assert parse_move(pos, "e7e8=R").promotion == PieceType.ROOK

    def test_illegal_coordinate_is_unrecognized(self) -> None:
        with pytest.raises(UnrecognizedMoveError, match="not legal"):
            parse_move(Position(), "e2e5")

    @pytest.mark.parametrize("text", ["", "   ", "hello", "Qh5"])
    def test_garbage_is_unrecognized(self, text: str) -> None:
        with pytest.raises(UnrecognizedMoveError) as excinfo:
            parse_move(Position(), text)
        assert excinfo.value.notation == text
