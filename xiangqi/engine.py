"""Xiangqi AI engine with minimax search."""

import logging
import random
import threading
import time
from typing import List, Optional

from .board import Board, Color, Move
from .evaluation import Evaluator
from .rules import has_legal_move, is_in_check, legal_moves_for_color

logger = logging.getLogger(__name__)

# Search depth in plies for each difficulty level
DEPTH_BY_DIFFICULTY = {1: 1, 2: 1, 3: 2, 4: 2, 5: 3}

# Chance of skipping the search and playing a random legal move
RANDOM_MOVE_PROBABILITY = {1: 0.7, 2: 0.7, 3: 0.35, 4: 0.0, 5: 0.0}

MATE_SCORE = 99999


class SearchCancelled(Exception):
    """Raised when a running search is cancelled by its caller."""


class SearchTimeout(SearchCancelled):
    """Raised when a search runs past its time limit."""


class Engine:
    """Xiangqi AI engine using alpha-beta minimax."""

    def __init__(
        self,
        difficulty: int = 3,
        rng: Optional[random.Random] = None,
        ai_color: Color = Color.BLACK,
        max_depth: Optional[int] = None,
        time_limit: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize engine.

        Args:
            difficulty: Level 1-5; selects search depth and randomness
            rng: Random source for the random-move branch (seed it for
                reproducible play)
            ai_color: Side the engine plays
            max_depth: Override for the difficulty's search depth
            time_limit: Seconds after which the search raises SearchTimeout
            cancel_event: Event that aborts the search with SearchCancelled
        """
        if difficulty not in DEPTH_BY_DIFFICULTY:
            raise ValueError(f"Difficulty must be 1-5, got {difficulty}")
        self.difficulty = difficulty
        self.depth = max_depth if max_depth is not None else DEPTH_BY_DIFFICULTY[difficulty]
        self.random_move_probability = RANDOM_MOVE_PROBABILITY[difficulty]
        self.rng = rng if rng is not None else random.Random()
        self.ai_color = ai_color
        self.time_limit = time_limit
        self.cancel_event = cancel_event
        self.evaluator = Evaluator()

        self.nodes_searched = 0
        self.used_random_move = False
        self.last_score: Optional[int] = None
        self._deadline: Optional[float] = None

    def search(self, board: Board) -> Optional[Move]:
        """Pick a move for the engine's side, or None if it has no legal move."""
        self.nodes_searched = 0
        self.used_random_move = False
        self.last_score = None

        moves = legal_moves_for_color(board, self.ai_color)
        if not moves:
            return None

        if self.random_move_probability > 0 and self.rng.random() < self.random_move_probability:
            self.used_random_move = True
            move = self.rng.choice(moves)
            logger.debug("Difficulty %d played random move %s", self.difficulty, move)
            return move

        self._deadline = (
            time.monotonic() + self.time_limit if self.time_limit is not None else None
        )
        maximizing = self.ai_color == Color.BLACK

        best_move = moves[0]
        alpha = float("-inf")
        beta = float("inf")
        best_value = alpha if maximizing else beta
        for move in moves:
            value = self._minimax(
                board.apply_move(move), self.depth - 1, 1, alpha, beta, not maximizing,
            )
            # Strict comparison keeps the first of equally scored moves
            if maximizing and value > best_value:
                best_value = alpha = value
                best_move = move
            elif not maximizing and value < best_value:
                best_value = beta = value
                best_move = move

        self.last_score = int(best_value)
        logger.debug(
            "Searched %d nodes at depth %d: %s scores %d",
            self.nodes_searched, self.depth, best_move, self.last_score,
        )
        return best_move

    def _check_interrupt(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SearchCancelled("Search cancelled")
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise SearchTimeout(f"Search exceeded {self.time_limit}s")

    @staticmethod
    def _terminal_score(board: Board, color: Color, ply: int) -> int:
        """Score for ``color`` having no legal move ``ply`` plies from the root."""
        if not is_in_check(board, color):
            return 0
        # Prefer quicker mates, delay being mated
        return -(MATE_SCORE - ply) if color == Color.BLACK else MATE_SCORE - ply

    def _minimax(
        self,
        board: Board,
        depth: int,
        ply: int,
        alpha: float,
        beta: float,
        maximizing: bool,
    ) -> float:
        """Minimax algorithm with alpha-beta pruning.

        Black is always the maximizing side, matching the evaluator's sign.
        """
        self.nodes_searched += 1
        self._check_interrupt()

        color = Color.BLACK if maximizing else Color.RED

        if depth <= 0:
            if has_legal_move(board, color):
                return self.evaluator.evaluate(board)
            return self._terminal_score(board, color, ply)

        moves: List[Move] = legal_moves_for_color(board, color)
        if not moves:
            return self._terminal_score(board, color, ply)

        if maximizing:
            max_eval = float("-inf")
            for move in moves:
                eval_score = self._minimax(board.apply_move(move), depth - 1, ply + 1, alpha, beta, False)
                max_eval = max(max_eval, eval_score)
                alpha = max(alpha, eval_score)
                if beta <= alpha:
                    break
            return max_eval
        else:
            min_eval = float("inf")
            for move in moves:
                eval_score = self._minimax(board.apply_move(move), depth - 1, ply + 1, alpha, beta, True)
                min_eval = min(min_eval, eval_score)
                beta = min(beta, eval_score)
                if beta <= alpha:
                    break
            return min_eval


def choose_ai_move(
    board: Board,
    difficulty: int,
    rng: Optional[random.Random] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Optional[Move]:
    """Choose Black's reply at the given difficulty.

    Returns None when Black has no legal move, meaning the game is over.
    """
    engine = Engine(difficulty=difficulty, rng=rng, cancel_event=cancel_event)
    return engine.search(board)
