"""Unit tests for check detection, legal moves and game-end detection."""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from xiangqi import (
    Board, Color, GameResult, Move, Piece, PieceKind, Position,
    initial_board, pseudo_moves,
    is_square_attacked, is_flying_general, is_in_check,
    legal_moves, legal_moves_for_color, is_checkmate, is_stalemate, game_result,
)


def make_board(pieces):
    """Build a board from ``{(row, col): "rK"}`` style codes."""
    colors = {"r": Color.RED, "b": Color.BLACK}
    return Board.from_pieces({
        pos: Piece(PieceKind(code[1]), colors[code[0]]) for pos, code in pieces.items()
    })


# Black to move, checkmated by two chariots
CHECKMATE = {(0, 4): "bK", (0, 0): "rR", (1, 8): "rR", (9, 3): "rK"}

# Black to move, not in check, with every general move covered
STALEMATE = {(0, 4): "bK", (1, 8): "rR", (5, 5): "rR", (9, 3): "rK"}


class TestAttacks:
    """Test square attack detection."""

    def test_chariot_attacks_file(self):
        board = make_board({(5, 0): "rR", (0, 4): "bK", (9, 3): "rK"})

        assert is_square_attacked(board, (0, 0), Color.RED)
        assert is_square_attacked(board, (5, 8), Color.RED)
        assert not is_square_attacked(board, (4, 1), Color.RED)

    def test_attacks_by_colour(self):
        board = initial_board()

        # Black horse guards (2, 2); red pieces do not
        assert is_square_attacked(board, (2, 2), Color.BLACK)
        assert not is_square_attacked(board, (2, 2), Color.RED)


class TestFlyingGeneral:
    """Test the facing-generals rule."""

    def test_open_file(self):
        """Generals alone on the e-file put both sides in check."""
        board = make_board({(0, 4): "bK", (9, 4): "rK"})

        assert is_flying_general(board)
        assert is_in_check(board, Color.RED)
        assert is_in_check(board, Color.BLACK)

    def test_blocked_file(self):
        board = make_board({(0, 4): "bK", (9, 4): "rK", (5, 4): "rP"})

        assert not is_flying_general(board)
        assert not is_in_check(board, Color.RED)
        assert not is_in_check(board, Color.BLACK)

    def test_different_files(self):
        board = make_board({(0, 3): "bK", (9, 4): "rK"})
        assert not is_flying_general(board)

    def test_initial_board(self):
        assert not is_flying_general(initial_board())

    def test_general_cannot_step_onto_open_file(self):
        board = make_board({(0, 4): "bK", (8, 3): "rK"})
        assert set(legal_moves(board, (8, 3))) == {(7, 3), (9, 3)}


class TestCheck:
    """Test check detection."""

    def test_initial_board(self):
        board = initial_board()
        assert not is_in_check(board, Color.RED)
        assert not is_in_check(board, Color.BLACK)

    def test_missing_general(self):
        board = make_board({(0, 4): "bK", (5, 0): "rR"})
        assert is_in_check(board, Color.RED)

    def test_cannon_check(self):
        board = make_board({(0, 4): "bK", (3, 4): "bP", (6, 4): "rC", (9, 3): "rK"})
        assert is_in_check(board, Color.BLACK)

    def test_horse_check_blocked_by_leg(self):
        board = make_board({(0, 4): "bK", (2, 3): "rH", (9, 3): "rK"})
        assert is_in_check(board, Color.BLACK)

        board = make_board({(0, 4): "bK", (2, 3): "rH", (1, 3): "bA", (9, 3): "rK"})
        assert not is_in_check(board, Color.BLACK)


class TestLegalMoves:
    """Test self-check filtering."""

    def test_pinned_chariot(self):
        """A pinned chariot may only move along the pin."""
        board = make_board({(9, 4): "rK", (5, 4): "rR", (0, 4): "bR", (1, 3): "bK"})

        pseudo = set(pseudo_moves(board, (5, 4)))
        legal = set(legal_moves(board, (5, 4)))

        assert (5, 0) in pseudo
        assert (5, 0) not in legal
        assert legal
        assert all(col == 4 for _, col in legal)
        assert (0, 4) in legal

    def test_must_answer_check(self):
        board = make_board({(9, 4): "rK", (9, 0): "bR", (6, 8): "rR", (0, 3): "bK"})

        assert is_in_check(board, Color.RED)
        for move in legal_moves_for_color(board, Color.RED):
            assert not is_in_check(board.apply_move(move), Color.RED)

    def test_empty_square(self):
        assert legal_moves(initial_board(), (4, 4)) == []

    def test_off_board_square(self):
        assert legal_moves(initial_board(), (12, 4)) == []

    @pytest.mark.parametrize("color", [Color.RED, Color.BLACK])
    def test_initial_moves_are_safe(self, color):
        board = initial_board()
        moves = legal_moves_for_color(board, color)

        assert len(moves) == 44
        for move in moves:
            after = board.apply_move(move)
            assert not is_in_check(after, color)
            assert after.piece_count() in (32, 31)

    def test_pieces_stay_in_zones(self):
        """Two plies of play never leave an elephant, advisor or general out of place."""
        board = initial_board()
        for red_move in legal_moves_for_color(board, Color.RED)[:10]:
            after_red = board.apply_move(red_move)
            for black_move in legal_moves_for_color(after_red, Color.BLACK)[:10]:
                after = after_red.apply_move(black_move)
                for (row, col), piece in after.pieces():
                    own_rows = range(5, 10) if piece.color == Color.RED else range(0, 5)
                    palace_rows = range(7, 10) if piece.color == Color.RED else range(0, 3)
                    if piece.kind == PieceKind.ELEPHANT:
                        assert row in own_rows
                    if piece.kind in (PieceKind.GENERAL, PieceKind.ADVISOR):
                        assert row in palace_rows and 3 <= col <= 5


class TestTerminalStates:
    """Test checkmate and stalemate detection."""

    def test_checkmate(self):
        board = make_board(CHECKMATE)

        assert is_in_check(board, Color.BLACK)
        assert legal_moves_for_color(board, Color.BLACK) == []
        assert is_checkmate(board, Color.BLACK)
        assert not is_stalemate(board, Color.BLACK)
        assert game_result(board, Color.BLACK) == (GameResult.RED_WINS, "checkmate")

    def test_stalemate(self):
        """No legal move while not in check still loses the game."""
        board = make_board(STALEMATE)

        assert not is_in_check(board, Color.BLACK)
        assert legal_moves_for_color(board, Color.BLACK) == []
        assert is_stalemate(board, Color.BLACK)
        assert is_checkmate(board, Color.BLACK)
        assert game_result(board, Color.BLACK) == (GameResult.RED_WINS, "stalemate")

    def test_checkmate_matches_empty_move_list(self):
        for pieces in (CHECKMATE, STALEMATE):
            board = make_board(pieces)
            for color in (Color.RED, Color.BLACK):
                empty = not legal_moves_for_color(board, color)
                assert is_checkmate(board, color) == empty

    def test_ongoing(self):
        board = initial_board()

        assert not is_checkmate(board, Color.RED)
        assert not is_stalemate(board, Color.RED)
        assert game_result(board, Color.RED) == (GameResult.ONGOING, None)

    def test_general_captured(self):
        board = make_board({(0, 4): "bK", (5, 0): "rR"})

        assert is_checkmate(board, Color.RED)
        assert game_result(board, Color.BLACK) == (GameResult.BLACK_WINS, "general_captured")
        assert game_result(board, Color.RED) == (GameResult.BLACK_WINS, "general_captured")
