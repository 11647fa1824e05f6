"""Static material evaluation."""

import numpy as np

from .board import Board, Color, COLS, KIND_INDEX, PieceKind, ROWS, has_crossed_river


class Evaluator:
    """Material evaluator with a bonus for soldiers across the river.

    Scores are from Black's point of view: Black material counts positive,
    Red material negative. The side to move plays no part.
    """

    PIECE_VALUES = {
        PieceKind.GENERAL: 10000,
        PieceKind.CHARIOT: 600,
        PieceKind.CANNON: 300,
        PieceKind.HORSE: 270,
        PieceKind.SOLDIER: 60,
        PieceKind.ADVISOR: 30,
        PieceKind.ELEPHANT: 30,
    }
    RIVER_BONUS = 40

    def __init__(self):
        # Lookup by encoded piece index; slot 0 is the empty square
        self._values = np.zeros(len(KIND_INDEX) + 1, dtype=np.int64)
        for kind, index in KIND_INDEX.items():
            self._values[index] = self.PIECE_VALUES[kind]

        # Soldiers have crossed the river on the opponent's half
        self._black_crossed = self._crossed_mask(Color.BLACK)
        self._red_crossed = self._crossed_mask(Color.RED)
        self._soldier = KIND_INDEX[PieceKind.SOLDIER]

    @staticmethod
    def _crossed_mask(color: Color) -> np.ndarray:
        rows = np.array([has_crossed_river(row, color) for row in range(ROWS)])
        return np.broadcast_to(rows.reshape(-1, 1), (ROWS, COLS))

    def material(self, encoded: np.ndarray) -> np.ndarray:
        """Per-colour material totals as ``[black, red]``."""
        black = self._values[np.where(encoded > 0, encoded, 0)].sum()
        red = self._values[np.where(encoded < 0, -encoded, 0)].sum()
        return np.array([black, red])

    def evaluate(self, board: Board) -> int:
        """Evaluate board position."""
        encoded = board.to_array()
        black, red = self.material(encoded)

        black_bonus = np.count_nonzero((encoded == self._soldier) & self._black_crossed)
        red_bonus = np.count_nonzero((encoded == -self._soldier) & self._red_crossed)

        score = (black - red) + self.RIVER_BONUS * (black_bonus - red_bonus)
        return int(score)


_default_evaluator = Evaluator()


def evaluate(board: Board) -> int:
    """Evaluate ``board`` with the shared default evaluator."""
    return _default_evaluator.evaluate(board)
