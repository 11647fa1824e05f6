"""In-memory game session: one human against the engine."""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .board import Board, Color, Move, Piece, Position, initial_board
from .engine import Engine
from .labels import piece_to_code, piece_to_dict
from .rules import GameResult, game_result, is_in_check, legal_moves, legal_moves_for_color

logger = logging.getLogger(__name__)

MAX_UNDO = 50


@dataclass(frozen=True)
class MoveRecord:
    """A played move with the pieces involved."""

    move: Move
    piece: Piece
    captured: Optional[Piece]
    color: Color

    def to_dict(self, move_number: int) -> Dict[str, Any]:
        return {
            "move_number": move_number,
            "side": self.color.value,
            "piece": piece_to_code(self.piece),
            "from": self.move.from_pos.to_square(),
            "to": self.move.to_pos.to_square(),
            "captured": piece_to_code(self.captured),
        }


class GameSession:
    """Tracks board, turn and history for a single game.

    The board itself is immutable; undo simply restores an earlier board.
    """

    def __init__(
        self,
        difficulty: int = 3,
        human_color: Color = Color.RED,
        seed: Optional[int] = None,
        board: Optional[Board] = None,
        to_move: Color = Color.RED,
        time_limit: Optional[float] = None,
    ):
        self.human_color = human_color
        self.ai_color = human_color.opponent
        self.cancel_event = threading.Event()
        self.engine = Engine(
            difficulty=difficulty,
            rng=random.Random(seed),
            ai_color=self.ai_color,
            time_limit=time_limit,
            cancel_event=self.cancel_event,
        )
        self.board = board if board is not None else initial_board()
        self.to_move = to_move
        self.history: List[MoveRecord] = []
        self._undo_stack: List[Tuple[Board, Color]] = []
        self.result, self.reason = game_result(self.board, self.to_move)

    @property
    def difficulty(self) -> int:
        return self.engine.difficulty

    @property
    def game_over(self) -> bool:
        return self.result != GameResult.ONGOING

    @property
    def in_check(self) -> bool:
        return is_in_check(self.board, self.to_move)

    @property
    def captured(self) -> List[Piece]:
        return [record.captured for record in self.history if record.captured is not None]

    def selectable_moves(self, position: Tuple[int, int]) -> List[Position]:
        """Legal destinations if ``position`` holds a piece of the side to move."""
        piece = self.board[position]
        if self.game_over or piece is None or piece.color != self.to_move:
            return []
        return legal_moves(self.board, position)

    def make_move(self, move: Move) -> bool:
        """Play ``move`` for the side to move. Returns False if it is illegal."""
        if move.to_pos not in self.selectable_moves(move.from_pos):
            return False

        piece = self.board[move.from_pos]
        record = MoveRecord(move, piece, self.board[move.to_pos], self.to_move)

        self._undo_stack.append((self.board, self.to_move))
        if len(self._undo_stack) > MAX_UNDO:
            self._undo_stack.pop(0)

        self.board = self.board.apply_move(move)
        self.history.append(record)
        self.to_move = self.to_move.opponent
        self.result, self.reason = game_result(self.board, self.to_move)
        if self.game_over:
            logger.info("Game over: %s (%s)", self.result.value, self.reason)
        return True

    def ai_move(self) -> Optional[Move]:
        """Let the engine play for its side.

        Returns None when it is not the engine's turn, the game is over,
        or the engine has no legal move. Raises SearchCancelled if the
        session was cancelled mid-search.
        """
        if self.game_over or self.to_move != self.ai_color:
            return None
        move = self.engine.search(self.board)
        if move is None:
            return None
        self.make_move(move)
        return move

    def cancel(self) -> None:
        """Abort any search running for this session."""
        self.cancel_event.set()

    def undo(self, plies: int = 1) -> bool:
        """Take back ``plies`` moves. Returns False if there are not enough."""
        if plies < 1 or len(self._undo_stack) < plies:
            return False
        for _ in range(plies):
            self.board, self.to_move = self._undo_stack.pop()
            self.history.pop()
        self.result, self.reason = game_result(self.board, self.to_move)
        return True

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def to_fen(self) -> str:
        side = "w" if self.to_move == Color.RED else "b"
        return f"{self.board.to_fen()} {side}"

    @property
    def winner(self) -> Optional[Color]:
        if self.result == GameResult.RED_WINS:
            return Color.RED
        if self.result == GameResult.BLACK_WINS:
            return Color.BLACK
        return None

    def to_dict(self) -> Dict[str, Any]:
        winner = self.winner.value if self.winner else None

        legal = []
        if not self.game_over:
            legal = [
                {"from": m.from_pos.to_square(), "to": m.to_pos.to_square()}
                for m in legal_moves_for_color(self.board, self.to_move)
            ]

        return {
            "board": [[piece_to_code(p) for p in row] for row in self.board.rows()],
            "pieces": [[piece_to_dict(p) for p in row] for row in self.board.rows()],
            "fen": self.to_fen(),
            "side_to_move": self.to_move.value,
            "difficulty": self.difficulty,
            "game_over": self.game_over,
            "winner": winner,
            "reason": self.reason,
            "in_check": self.in_check,
            "legal_moves": legal,
            "move_history": [r.to_dict(i + 1) for i, r in enumerate(self.history)],
            "captured": [piece_to_code(p) for p in self.captured],
            "can_undo": self.can_undo,
        }
