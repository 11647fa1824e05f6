"""Check detection, legal move filtering and game-end classification."""

from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, Color, Move, Position
from .movegen import pseudo_moves


class GameResult(Enum):
    """Outcome of a position for the side to move."""

    ONGOING = "ongoing"
    RED_WINS = "red_wins"
    BLACK_WINS = "black_wins"

    @classmethod
    def win_for(cls, color: Color) -> "GameResult":
        return cls.RED_WINS if color == Color.RED else cls.BLACK_WINS


def is_square_attacked(board: Board, position: Tuple[int, int], by_color: Color) -> bool:
    """True if any piece of ``by_color`` could move to ``position``."""
    target = Position(*position)
    for square, _ in board.pieces(by_color):
        if target in pseudo_moves(board, square):
            return True
    return False


def is_flying_general(board: Board) -> bool:
    """True if both Generals face each other on an open file."""
    red = board.find_general(Color.RED)
    black = board.find_general(Color.BLACK)
    if red is None or black is None:
        return False
    if red.col != black.col:
        return False

    low, high = sorted((red.row, black.row))
    for row in range(low + 1, high):
        if not board.is_empty(row, red.col):
            return False
    return True


def is_in_check(board: Board, color: Color) -> bool:
    """Check if the given side's General is in check.

    A missing General counts as being in check, and so does the
    flying-general position regardless of which side created it.
    """
    general = board.find_general(color)
    if general is None:
        return True
    return is_square_attacked(board, general, color.opponent) or is_flying_general(board)


def legal_moves(board: Board, position: Tuple[int, int]) -> List[Position]:
    """Destinations for the piece at ``position`` that keep its own General safe.

    An empty square yields an empty list.
    """
    piece = board[position]
    if piece is None:
        return []

    origin = Position(*position)
    legal = []
    for dest in pseudo_moves(board, origin):
        after = board.apply_move(Move(origin, dest))
        if not is_in_check(after, piece.color):
            legal.append(dest)
    return legal


def legal_moves_for_color(board: Board, color: Color) -> List[Move]:
    """All legal moves for ``color``, in board scan order."""
    moves = []
    for square, _ in board.pieces(color):
        for dest in legal_moves(board, square):
            moves.append(Move(square, dest))
    return moves


def has_legal_move(board: Board, color: Color) -> bool:
    for square, _ in board.pieces(color):
        if legal_moves(board, square):
            return True
    return False


def is_checkmate(board: Board, color: Color) -> bool:
    """True when ``color`` has no legal move, in check or not.

    Xiangqi scores a side without a legal move as lost, so a position
    that ``is_stalemate`` also reports is a checkmate here.
    """
    return not has_legal_move(board, color)


def is_stalemate(board: Board, color: Color) -> bool:
    """True when ``color`` has no legal move while not in check."""
    return not is_in_check(board, color) and not has_legal_move(board, color)


def game_result(board: Board, to_move: Color) -> Tuple[GameResult, Optional[str]]:
    """Classify a position for the side about to move.

    Returns the result and a reason: ``"general_captured"``,
    ``"checkmate"``, ``"stalemate"`` or None while the game continues.
    """
    for color in (to_move, to_move.opponent):
        if board.find_general(color) is None:
            return GameResult.win_for(color.opponent), "general_captured"

    if has_legal_move(board, to_move):
        return GameResult.ONGOING, None
    reason = "checkmate" if is_in_check(board, to_move) else "stalemate"
    return GameResult.win_for(to_move.opponent), reason
