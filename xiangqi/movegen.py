"""Pseudo-move generation.

Moves produced here follow each piece's movement rule but ignore whether
they expose the mover's own General; see ``rules.legal_moves`` for that.
"""

from typing import List, Tuple

from .board import Board, Color, Piece, PieceKind, Position, in_bounds, in_own_half, in_palace


ORTHOGONAL = ((0, 1), (0, -1), (1, 0), (-1, 0))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))

# (row delta, col delta, leg row delta, leg col delta)
HORSE_JUMPS = (
    (2, 1, 1, 0), (2, -1, 1, 0), (-2, 1, -1, 0), (-2, -1, -1, 0),
    (1, 2, 0, 1), (1, -2, 0, -1), (-1, 2, 0, 1), (-1, -2, 0, -1),
)


def _can_land(board: Board, row: int, col: int, color: Color) -> bool:
    """On the board and not occupied by a friendly piece."""
    if not in_bounds(row, col):
        return False
    target = board.get_piece(row, col)
    return target is None or target.color != color


def pseudo_moves(board: Board, position: Tuple[int, int]) -> List[Position]:
    """Generate candidate destinations for the piece at ``position``."""
    row, col = position
    piece = board.get_piece(row, col)
    if piece is None:
        return []
    return _GENERATORS[piece.kind](board, row, col, piece)


def _generate_general_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """One orthogonal step, confined to the palace."""
    moves = []
    for dr, dc in ORTHOGONAL:
        to_row, to_col = row + dr, col + dc
        if in_palace(to_row, to_col, piece.color) and _can_land(board, to_row, to_col, piece.color):
            moves.append(Position(to_row, to_col))
    return moves


def _generate_advisor_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """One diagonal step, confined to the palace."""
    moves = []
    for dr, dc in DIAGONAL:
        to_row, to_col = row + dr, col + dc
        if in_palace(to_row, to_col, piece.color) and _can_land(board, to_row, to_col, piece.color):
            moves.append(Position(to_row, to_col))
    return moves


def _generate_elephant_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """Generate elephant moves.

    Elephant rules:
    - Moves exactly two points diagonally
    - Blocked if the intervening "eye" point is occupied
    - Never crosses the river
    """
    moves = []
    for dr, dc in DIAGONAL:
        to_row, to_col = row + 2 * dr, col + 2 * dc
        if not in_bounds(to_row, to_col) or not in_own_half(to_row, piece.color):
            continue
        if not board.is_empty(row + dr, col + dc):
            continue
        if _can_land(board, to_row, to_col, piece.color):
            moves.append(Position(to_row, to_col))
    return moves


def _generate_horse_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """L-shaped jump, blocked by a piece on the leg next to the origin."""
    moves = []
    for dr, dc, leg_r, leg_c in HORSE_JUMPS:
        to_row, to_col = row + dr, col + dc
        if not in_bounds(to_row, to_col):
            continue
        if not board.is_empty(row + leg_r, col + leg_c):
            continue
        if _can_land(board, to_row, to_col, piece.color):
            moves.append(Position(to_row, to_col))
    return moves


def _generate_chariot_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    moves = []
    for dr, dc in ORTHOGONAL:
        to_row, to_col = row + dr, col + dc
        while in_bounds(to_row, to_col):
            target = board.get_piece(to_row, to_col)
            if target is None:
                moves.append(Position(to_row, to_col))
            else:
                if target.color != piece.color:
                    moves.append(Position(to_row, to_col))
                break
            to_row, to_col = to_row + dr, to_col + dc
    return moves


def _generate_cannon_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """Generate cannon moves.

    Cannon rules:
    - Moves like a chariot through empty points without capturing
    - Captures only by jumping exactly one screen (either colour)
    """
    moves = []
    for dr, dc in ORTHOGONAL:
        jumped = False
        to_row, to_col = row + dr, col + dc
        while in_bounds(to_row, to_col):
            target = board.get_piece(to_row, to_col)
            if not jumped:
                if target is None:
                    moves.append(Position(to_row, to_col))
                else:
                    jumped = True
            elif target is not None:
                if target.color != piece.color:
                    moves.append(Position(to_row, to_col))
                break
            to_row, to_col = to_row + dr, to_col + dc
    return moves


def _generate_soldier_moves(board: Board, row: int, col: int, piece: Piece) -> List[Position]:
    """Forward one point; sideways as well once across the river."""
    moves = []
    forward = -1 if piece.color == Color.RED else 1
    candidates = [(row + forward, col)]
    if not in_own_half(row, piece.color):
        candidates.extend([(row, col - 1), (row, col + 1)])
    for to_row, to_col in candidates:
        if _can_land(board, to_row, to_col, piece.color):
            moves.append(Position(to_row, to_col))
    return moves


_GENERATORS = {
    PieceKind.GENERAL: _generate_general_moves,
    PieceKind.ADVISOR: _generate_advisor_moves,
    PieceKind.ELEPHANT: _generate_elephant_moves,
    PieceKind.HORSE: _generate_horse_moves,
    PieceKind.CHARIOT: _generate_chariot_moves,
    PieceKind.CANNON: _generate_cannon_moves,
    PieceKind.SOLDIER: _generate_soldier_moves,
}
