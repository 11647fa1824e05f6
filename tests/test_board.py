"""Unit tests for the Board model."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from xiangqi import (
    Board, Color, Move, Piece, PieceKind, Position,
    initial_board, apply_move, in_palace, in_own_half, has_crossed_river,
)

INITIAL_FEN = "rnbakabnr/9/1c5c1/p1p1p1p1p/9/9/P1P1P1P1P/1C5C1/9/RNBAKABNR"


class TestInitialBoard:
    """Test the standard starting position."""

    def test_piece_counts(self):
        """Each side starts with 16 pieces."""
        board = initial_board()

        assert board.piece_count(Color.RED) == 16
        assert board.piece_count(Color.BLACK) == 16
        assert board.piece_count() == 32

    def test_one_general_per_side(self):
        board = initial_board()

        generals = [
            (pos, piece) for pos, piece in board.pieces()
            if piece.kind == PieceKind.GENERAL
        ]
        assert len(generals) == 2
        assert board.find_general(Color.BLACK) == Position(0, 4)
        assert board.find_general(Color.RED) == Position(9, 4)

    def test_cannons_and_soldiers(self):
        board = initial_board()

        assert board[(7, 1)] == Piece(PieceKind.CANNON, Color.RED)
        assert board[(7, 7)] == Piece(PieceKind.CANNON, Color.RED)
        assert board[(2, 1)] == Piece(PieceKind.CANNON, Color.BLACK)
        assert board[(2, 7)] == Piece(PieceKind.CANNON, Color.BLACK)
        for col in (0, 2, 4, 6, 8):
            assert board[(6, col)] == Piece(PieceKind.SOLDIER, Color.RED)
            assert board[(3, col)] == Piece(PieceKind.SOLDIER, Color.BLACK)

    def test_mirror_symmetry(self):
        """Mirroring rows and swapping colours gives the same board."""
        board = initial_board()

        for row in range(Board.ROWS):
            for col in range(Board.COLS):
                piece = board.get_piece(row, col)
                mirrored = board.get_piece(Board.ROWS - 1 - row, col)
                if piece is None:
                    assert mirrored is None
                else:
                    assert mirrored == Piece(piece.kind, piece.color.opponent)

    def test_empty_squares(self):
        """Test empty squares return None."""
        board = initial_board()
        assert board.get_piece(4, 4) is None
        assert board.get_piece(5, 4) is None

    def test_off_board_is_none(self):
        board = initial_board()
        assert board.get_piece(-1, 0) is None
        assert board.get_piece(10, 0) is None
        assert board.get_piece(0, 9) is None


class TestApplyMove:
    """Test move application."""

    def test_returns_new_board(self):
        """The original board is left untouched."""
        board = initial_board()
        after = apply_move(board, (7, 7), (7, 4))

        assert after is not board
        assert board[(7, 7)] == Piece(PieceKind.CANNON, Color.RED)
        assert board[(7, 4)] is None
        assert after[(7, 7)] is None
        assert after[(7, 4)] == Piece(PieceKind.CANNON, Color.RED)

    def test_move_object(self):
        board = initial_board()
        move = Move(Position(6, 4), Position(5, 4))

        assert apply_move(board, move) == board.apply_move(move)

    def test_capture_removes_one_piece(self):
        board = initial_board()
        # Red cannon takes the black horse over the black cannon
        after = board.apply_move(Move(Position(7, 1), Position(0, 1)))

        assert after.piece_count() == 31
        assert after.piece_count(Color.BLACK) == 15
        assert after[(0, 1)] == Piece(PieceKind.CANNON, Color.RED)

    def test_quiet_move_keeps_count(self):
        board = initial_board()
        after = board.apply_move(Move(Position(9, 0), Position(8, 0)))
        assert after.piece_count() == 32

    def test_boards_compare_by_value(self):
        first = initial_board().apply_move(Move(Position(6, 0), Position(5, 0)))
        second = initial_board().apply_move(Move(Position(6, 0), Position(5, 0)))

        assert first == second
        assert hash(first) == hash(second)
        assert first != initial_board()


class TestZones:
    """Test palace and river predicates."""

    def test_palace(self):
        assert in_palace(9, 4, Color.RED)
        assert in_palace(7, 3, Color.RED)
        assert not in_palace(6, 4, Color.RED)
        assert not in_palace(9, 2, Color.RED)
        assert in_palace(0, 5, Color.BLACK)
        assert not in_palace(3, 4, Color.BLACK)
        assert not in_palace(9, 4, Color.BLACK)

    def test_river(self):
        assert in_own_half(5, Color.RED)
        assert not in_own_half(4, Color.RED)
        assert in_own_half(4, Color.BLACK)
        assert not in_own_half(5, Color.BLACK)
        assert has_crossed_river(4, Color.RED)
        assert has_crossed_river(5, Color.BLACK)


class TestNotation:
    """Test square and move notation."""

    def test_square_roundtrip_corners(self):
        assert Position.from_square("a9") == Position(0, 0)
        assert Position.from_square("i0") == Position(9, 8)
        assert Position(9, 4).to_square() == "e0"

    def test_move_from_uci(self):
        """The central cannon opening."""
        move = Move.from_uci("h2e2")

        assert move.from_pos == Position(7, 7)
        assert move.to_pos == Position(7, 4)
        assert str(move) == "h2e2"

    @pytest.mark.parametrize("bad", ["", "j0", "a", "aa", "e10"])
    def test_invalid_square(self, bad):
        with pytest.raises(ValueError):
            Position.from_square(bad)

    def test_invalid_move(self):
        with pytest.raises(ValueError):
            Move.from_uci("h2e")


class TestFen:
    """Test FEN conversion."""

    def test_initial_fen(self):
        assert initial_board().to_fen() == INITIAL_FEN

    def test_parse_initial_fen(self):
        assert Board.from_fen(INITIAL_FEN + " w - - 0 1") == initial_board()

    def test_wrong_rank_count(self):
        with pytest.raises(ValueError):
            Board.from_fen("rnbakabnr/9/9")

    def test_unknown_piece(self):
        with pytest.raises(ValueError):
            Board.from_fen(INITIAL_FEN.replace("k", "x"))

    def test_short_rank(self):
        with pytest.raises(ValueError):
            Board.from_fen(INITIAL_FEN.replace("rnbakabnr", "rnbakabn", 1))


class TestCustomSetup:
    """Test custom position initialization."""

    def test_custom_position(self):
        board = Board.from_setup({"e0": "rK", "e9": "bK", "a0": "rR"})

        assert board[(9, 4)] == Piece(PieceKind.GENERAL, Color.RED)
        assert board[(0, 4)] == Piece(PieceKind.GENERAL, Color.BLACK)
        assert board[(9, 0)] == Piece(PieceKind.CHARIOT, Color.RED)
        assert board.piece_count() == 3

    def test_invalid_entries_skipped(self):
        board = Board.from_setup({"e0": "rK", "z9": "bK", "e9": "xK", "d9": "bQ"})
        assert board.piece_count() == 1

    def test_to_array(self):
        encoded = initial_board().to_array()

        assert encoded.shape == (10, 9)
        assert encoded[0, 4] > 0  # Black general
        assert encoded[9, 4] == -encoded[0, 4]
        assert np.count_nonzero(encoded) == 32
        assert encoded.sum() == 0
