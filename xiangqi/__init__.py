"""Xiangqi (Chinese chess) rules engine and AI."""

from .board import (
    Board, Color, Move, Piece, PieceKind, Position,
    initial_board, apply_move,
    in_bounds, in_palace, in_own_half, has_crossed_river,
)
from .movegen import pseudo_moves
from .rules import (
    GameResult,
    is_square_attacked, is_flying_general, is_in_check,
    legal_moves, legal_moves_for_color, has_legal_move,
    is_checkmate, is_stalemate, game_result,
)
from .evaluation import Evaluator, evaluate
from .engine import (
    Engine, SearchCancelled, SearchTimeout, choose_ai_move,
    DEPTH_BY_DIFFICULTY, RANDOM_MOVE_PROBABILITY, MATE_SCORE,
)
from .labels import PIECE_LABELS, CUTE_LABELS, piece_label, piece_to_code, piece_from_code, piece_to_dict
from .game import GameSession, MoveRecord

__all__ = [
    # Board model
    'Board', 'Color', 'Move', 'Piece', 'PieceKind', 'Position',
    'initial_board', 'apply_move',
    'in_bounds', 'in_palace', 'in_own_half', 'has_crossed_river',
    # Rules
    'pseudo_moves',
    'GameResult',
    'is_square_attacked', 'is_flying_general', 'is_in_check',
    'legal_moves', 'legal_moves_for_color', 'has_legal_move',
    'is_checkmate', 'is_stalemate', 'game_result',
    # Evaluation and search
    'Evaluator', 'evaluate',
    'Engine', 'SearchCancelled', 'SearchTimeout', 'choose_ai_move',
    'DEPTH_BY_DIFFICULTY', 'RANDOM_MOVE_PROBABILITY', 'MATE_SCORE',
    # Display
    'PIECE_LABELS', 'CUTE_LABELS', 'piece_label', 'piece_to_code', 'piece_from_code', 'piece_to_dict',
    # Sessions
    'GameSession', 'MoveRecord',
]
