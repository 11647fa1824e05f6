"""Display labels and string codes for pieces."""

from typing import Dict, Optional, Tuple

from .board import Color, Piece, PieceKind


PIECE_LABELS: Dict[Tuple[PieceKind, Color], str] = {
    (PieceKind.GENERAL, Color.RED): "帥",
    (PieceKind.ADVISOR, Color.RED): "仕",
    (PieceKind.ELEPHANT, Color.RED): "相",
    (PieceKind.HORSE, Color.RED): "傌",
    (PieceKind.CHARIOT, Color.RED): "俥",
    (PieceKind.CANNON, Color.RED): "炮",
    (PieceKind.SOLDIER, Color.RED): "兵",
    (PieceKind.GENERAL, Color.BLACK): "將",
    (PieceKind.ADVISOR, Color.BLACK): "士",
    (PieceKind.ELEPHANT, Color.BLACK): "象",
    (PieceKind.HORSE, Color.BLACK): "馬",
    (PieceKind.CHARIOT, Color.BLACK): "車",
    (PieceKind.CANNON, Color.BLACK): "砲",
    (PieceKind.SOLDIER, Color.BLACK): "卒",
}

# Alternate skin for younger players
CUTE_LABELS: Dict[Tuple[PieceKind, Color], str] = {
    (PieceKind.GENERAL, Color.RED): "👑",
    (PieceKind.ADVISOR, Color.RED): "🛡️",
    (PieceKind.ELEPHANT, Color.RED): "🐘",
    (PieceKind.HORSE, Color.RED): "🐴",
    (PieceKind.CHARIOT, Color.RED): "🚗",
    (PieceKind.CANNON, Color.RED): "💥",
    (PieceKind.SOLDIER, Color.RED): "🐣",
    (PieceKind.GENERAL, Color.BLACK): "👑",
    (PieceKind.ADVISOR, Color.BLACK): "🛡️",
    (PieceKind.ELEPHANT, Color.BLACK): "🐘",
    (PieceKind.HORSE, Color.BLACK): "🐴",
    (PieceKind.CHARIOT, Color.BLACK): "🚗",
    (PieceKind.CANNON, Color.BLACK): "💥",
    (PieceKind.SOLDIER, Color.BLACK): "🐤",
}

_COLOR_CODES = {Color.RED: "r", Color.BLACK: "b"}
_CODE_COLORS = {code: color for color, code in _COLOR_CODES.items()}


def piece_label(piece: Piece, cute: bool = False) -> str:
    table = CUTE_LABELS if cute else PIECE_LABELS
    return table[(piece.kind, piece.color)]


def piece_to_code(piece: Optional[Piece]) -> Optional[str]:
    """Convert piece to its two-letter code, e.g. ``rK`` or ``bC``."""
    if piece is None:
        return None
    return f"{_COLOR_CODES[piece.color]}{piece.kind.value}"


def piece_from_code(code: str) -> Piece:
    """Parse a two-letter piece code; raises ValueError if malformed."""
    if len(code) != 2 or code[0] not in _CODE_COLORS:
        raise ValueError(f"Invalid piece code: {code!r}")
    return Piece(PieceKind(code[1]), _CODE_COLORS[code[0]])


def piece_to_dict(piece: Optional[Piece]) -> Optional[Dict[str, str]]:
    """Convert piece to label and colour info for rendering."""
    if piece is None:
        return None
    return {
        "code": piece_to_code(piece),
        "kind": piece.kind.name.lower(),
        "color": piece.color.value,
        "label": piece_label(piece),
        "cute_label": piece_label(piece, cute=True),
    }
