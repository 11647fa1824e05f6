"""Xiangqi board representation.

The board is an immutable value: every move produces a new ``Board`` so
positions can be shared freely between the UI, the legality filter and
the search without copying or undo bookkeeping.
"""

from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple, Union
from dataclasses import dataclass

import numpy as np


ROWS = 10
COLS = 9
FILES = "abcdefghi"


class Color(Enum):
    """Player sides."""

    RED = "red"  # Bottom side, moves first
    BLACK = "black"  # Top side, played by the computer

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.RED else Color.RED


class PieceKind(Enum):
    """Piece kinds, valued by their one-letter code."""

    GENERAL = "K"
    ADVISOR = "A"
    ELEPHANT = "E"
    HORSE = "H"
    CHARIOT = "R"
    CANNON = "C"
    SOLDIER = "P"


# Standard Xiangqi FEN letters (Red uppercase, Black lowercase)
FEN_LETTERS = {
    PieceKind.GENERAL: "k",
    PieceKind.ADVISOR: "a",
    PieceKind.ELEPHANT: "b",
    PieceKind.HORSE: "n",
    PieceKind.CHARIOT: "r",
    PieceKind.CANNON: "c",
    PieceKind.SOLDIER: "p",
}
_FEN_KINDS = {letter: kind for kind, letter in FEN_LETTERS.items()}

# Index of each kind in numpy encodings (1-based, 0 means empty)
KIND_INDEX = {kind: i + 1 for i, kind in enumerate(PieceKind)}


@dataclass(frozen=True)
class Piece:
    """Represents a piece on the board."""

    kind: PieceKind
    color: Color

    def __str__(self) -> str:
        return f"{self.color.value}_{self.kind.name.lower()}"


class Position(NamedTuple):
    """A board square; row 0 is Black's back rank, row 9 is Red's."""

    row: int
    col: int

    def to_square(self) -> str:
        """Coordinate notation, e.g. ``e0`` for Red's General square."""
        return f"{FILES[self.col]}{ROWS - 1 - self.row}"

    @classmethod
    def from_square(cls, square: str) -> "Position":
        """Parse coordinate notation (file a-i, rank 0-9 from Red's side)."""
        if len(square) != 2 or square[0] not in FILES or not square[1].isdigit():
            raise ValueError(f"Invalid square: {square!r}")
        return cls(ROWS - 1 - int(square[1]), FILES.index(square[0]))


@dataclass(frozen=True)
class Move:
    """Represents a move."""

    from_pos: Position
    to_pos: Position

    def __str__(self) -> str:
        return self.to_uci()

    def to_uci(self) -> str:
        """Convert to coordinate notation, e.g. ``h2e2``."""
        return self.from_pos.to_square() + self.to_pos.to_square()

    @classmethod
    def from_uci(cls, uci: str) -> "Move":
        """Parse coordinate notation."""
        if len(uci) != 4:
            raise ValueError(f"Invalid move notation: {uci!r}")
        return cls(Position.from_square(uci[:2]), Position.from_square(uci[2:]))


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < ROWS and 0 <= col < COLS


def in_palace(row: int, col: int, color: Color) -> bool:
    """Check if a square is in the palace for the given side."""
    if not 3 <= col <= 5:
        return False
    if color == Color.RED:
        return 7 <= row <= 9
    return 0 <= row <= 2


def in_own_half(row: int, color: Color) -> bool:
    """Check if a row lies on ``color``'s side of the river."""
    return row >= 5 if color == Color.RED else row <= 4


def has_crossed_river(row: int, color: Color) -> bool:
    """Check if a row lies on the far side of the river for ``color``."""
    return not in_own_half(row, color)


class Board:
    """Immutable 10x9 Xiangqi board stored as a flat 90-slot tuple."""

    ROWS = ROWS
    COLS = COLS

    __slots__ = ("_squares",)

    def __init__(self, squares: Optional[Tuple[Optional[Piece], ...]] = None):
        if squares is None:
            squares = (None,) * (ROWS * COLS)
        if len(squares) != ROWS * COLS:
            raise ValueError(f"Board needs {ROWS * COLS} squares, got {len(squares)}")
        self._squares = tuple(squares)

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def from_pieces(cls, placement: Dict[Tuple[int, int], Piece]) -> "Board":
        """Build a board from a ``{(row, col): Piece}`` mapping."""
        squares: List[Optional[Piece]] = [None] * (ROWS * COLS)
        for (row, col), piece in placement.items():
            if not in_bounds(row, col):
                raise ValueError(f"Square out of range: {(row, col)}")
            squares[row * COLS + col] = piece
        return cls(tuple(squares))

    @classmethod
    def from_setup(cls, setup: Dict[str, str]) -> "Board":
        """Initialize board with custom piece positions.

        Args:
            setup: Dictionary mapping squares (e.g., "e0") to piece codes
                (e.g., "rK" for the Red General, "bC" for a Black Cannon).
                Entries that cannot be parsed are skipped.
        """
        placement = {}
        for square, code in setup.items():
            try:
                pos = Position.from_square(square)
                color = {"r": Color.RED, "b": Color.BLACK}[code[0]]
                kind = PieceKind(code[1:])
            except (ValueError, KeyError, IndexError):
                continue
            placement[tuple(pos)] = Piece(kind, color)
        return cls.from_pieces(placement)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Parse the piece-placement field of a Xiangqi FEN string."""
        fields = fen.split()
        if not fields:
            raise ValueError("Empty FEN")
        ranks = fields[0].split("/")
        if len(ranks) != ROWS:
            raise ValueError(f"FEN needs {ROWS} ranks, got {len(ranks)}")

        squares: List[Optional[Piece]] = []
        for row, rank_str in enumerate(ranks):
            row_squares: List[Optional[Piece]] = []
            for ch in rank_str:
                if ch.isdigit():
                    row_squares.extend([None] * int(ch))
                elif ch.lower() in _FEN_KINDS:
                    color = Color.RED if ch.isupper() else Color.BLACK
                    row_squares.append(Piece(_FEN_KINDS[ch.lower()], color))
                else:
                    raise ValueError(f"Unknown FEN piece {ch!r} in rank {row}")
            if len(row_squares) != COLS:
                raise ValueError(f"FEN rank {row} has {len(row_squares)} squares")
            squares.extend(row_squares)
        return cls(tuple(squares))

    def to_fen(self) -> str:
        """Convert board to the piece-placement field of a Xiangqi FEN."""
        fen_parts = []
        for row in range(ROWS):
            rank_str = ""
            empty_count = 0
            for col in range(COLS):
                piece = self._squares[row * COLS + col]
                if piece is None:
                    empty_count += 1
                    continue
                if empty_count > 0:
                    rank_str += str(empty_count)
                    empty_count = 0
                letter = FEN_LETTERS[piece.kind]
                rank_str += letter.upper() if piece.color == Color.RED else letter
            if empty_count > 0:
                rank_str += str(empty_count)
            fen_parts.append(rank_str)
        return "/".join(fen_parts)

    def get_piece(self, row: int, col: int) -> Optional[Piece]:
        """Get piece at given coordinates (None when empty or off-board)."""
        if in_bounds(row, col):
            return self._squares[row * COLS + col]
        return None

    def __getitem__(self, pos: Tuple[int, int]) -> Optional[Piece]:
        return self.get_piece(pos[0], pos[1])

    def is_empty(self, row: int, col: int) -> bool:
        return self._squares[row * COLS + col] is None

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Position, Piece]]:
        """Iterate occupied squares in row-major order, optionally by colour."""
        for index, piece in enumerate(self._squares):
            if piece is None:
                continue
            if color is not None and piece.color != color:
                continue
            yield Position(*divmod(index, COLS)), piece

    def piece_count(self, color: Optional[Color] = None) -> int:
        return sum(1 for _ in self.pieces(color))

    def find_general(self, color: Color) -> Optional[Position]:
        """Get the General's position for the given side."""
        general = Piece(PieceKind.GENERAL, color)
        for index, piece in enumerate(self._squares):
            if piece == general:
                return Position(*divmod(index, COLS))
        return None

    def apply_move(self, move: Move) -> "Board":
        """Return a new board with ``move`` played.

        The destination's previous occupant, if any, is discarded. No
        legality checks are made.
        """
        squares = list(self._squares)
        src = move.from_pos.row * COLS + move.from_pos.col
        dst = move.to_pos.row * COLS + move.to_pos.col
        squares[dst] = squares[src]
        squares[src] = None
        return Board(tuple(squares))

    def to_array(self) -> np.ndarray:
        """Encode as a (10, 9) int8 array: Black pieces positive, Red negative."""
        encoded = np.zeros(ROWS * COLS, dtype=np.int8)
        for index, piece in enumerate(self._squares):
            if piece is not None:
                sign = 1 if piece.color == Color.BLACK else -1
                encoded[index] = sign * KIND_INDEX[piece.kind]
        return encoded.reshape(ROWS, COLS)

    def rows(self) -> List[List[Optional[Piece]]]:
        return [list(self._squares[r * COLS:(r + 1) * COLS]) for r in range(ROWS)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __hash__(self) -> int:
        return hash(self._squares)

    def __repr__(self) -> str:
        return f"Board({self.to_fen()!r})"

    def __str__(self) -> str:
        lines = []
        for row in range(ROWS):
            cells = []
            for col in range(COLS):
                piece = self._squares[row * COLS + col]
                if piece is None:
                    cells.append(".")
                else:
                    letter = FEN_LETTERS[piece.kind]
                    cells.append(letter.upper() if piece.color == Color.RED else letter)
            lines.append(f"{ROWS - 1 - row} " + " ".join(cells))
        lines.append("  " + " ".join(FILES))
        return "\n".join(lines)


_BACK_RANK = (
    PieceKind.CHARIOT,
    PieceKind.HORSE,
    PieceKind.ELEPHANT,
    PieceKind.ADVISOR,
    PieceKind.GENERAL,
    PieceKind.ADVISOR,
    PieceKind.ELEPHANT,
    PieceKind.HORSE,
    PieceKind.CHARIOT,
)


def initial_board() -> Board:
    """Set up the standard 32-piece starting position."""
    placement: Dict[Tuple[int, int], Piece] = {}
    for color, back_row, cannon_row, soldier_row in (
        (Color.BLACK, 0, 2, 3),
        (Color.RED, 9, 7, 6),
    ):
        for col, kind in enumerate(_BACK_RANK):
            placement[(back_row, col)] = Piece(kind, color)
        placement[(cannon_row, 1)] = Piece(PieceKind.CANNON, color)
        placement[(cannon_row, 7)] = Piece(PieceKind.CANNON, color)
        for col in (0, 2, 4, 6, 8):
            placement[(soldier_row, col)] = Piece(PieceKind.SOLDIER, color)
    return Board.from_pieces(placement)


def apply_move(
    board: Board,
    move_or_from: Union[Move, Tuple[int, int]],
    to_pos: Optional[Tuple[int, int]] = None,
) -> Board:
    """Apply a move given either as a ``Move`` or as ``(from, to)`` squares."""
    if isinstance(move_or_from, Move):
        move = move_or_from
    else:
        move = Move(Position(*move_or_from), Position(*to_pos))
    return board.apply_move(move)
