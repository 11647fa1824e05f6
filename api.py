"""FastAPI backend for the Xiangqi game."""

import os
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from typing import Optional, Dict
from time import time

from xiangqi import (
    Board, Color, Move, Piece, Position, GameSession, SearchCancelled,
    PIECE_LABELS, CUTE_LABELS,
)
from xiangqi.labels import piece_to_code

logger = logging.getLogger(__name__)

# Settings (override via environment)
AI_WORKERS = int(os.environ.get("XIANGQI_AI_WORKERS", "4"))
MAX_IDLE_SECONDS = float(os.environ.get("XIANGQI_MAX_IDLE_SECONDS", "3600"))
DEFAULT_DIFFICULTY = int(os.environ.get("XIANGQI_DEFAULT_DIFFICULTY", "3"))
_time_limit = os.environ.get("XIANGQI_AI_TIME_LIMIT")
AI_TIME_LIMIT = float(_time_limit) if _time_limit else None

# Thread pool for CPU-intensive AI operations
executor = ThreadPoolExecutor(max_workers=AI_WORKERS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    yield
    for state in games.values():
        state.session.cancel()
    executor.shutdown(wait=True)


app = FastAPI(title="Xiangqi AI Engine", lifespan=lifespan)


class GameState:
    """Game session plus the bookkeeping needed to serve it concurrently."""

    def __init__(self, session: GameSession):
        self.session = session
        self.lock = asyncio.Lock()
        self.last_access = time()
        self.is_processing = False  # AI search running


games: Dict[str, GameState] = {}
games_lock = asyncio.Lock()


async def get_game_state(game_id: str) -> GameState:
    """Get game state with proper error handling."""
    async with games_lock:
        if game_id not in games:
            raise HTTPException(status_code=404, detail="Game not found")
        game_state = games[game_id]
        game_state.last_access = time()
        return game_state


async def cleanup_old_games():
    """Drop games that haven't been accessed for a long time."""
    current_time = time()
    async with games_lock:
        to_remove = [
            game_id
            for game_id, state in games.items()
            if current_time - state.last_access > MAX_IDLE_SECONDS
        ]
        for game_id in to_remove:
            games.pop(game_id).session.cancel()
    if to_remove:
        logger.info("Removed %d idle games", len(to_remove))


class NewGameRequest(BaseModel):
    """Request model for creating a new game."""

    game_id: str
    difficulty: int = Field(default=DEFAULT_DIFFICULTY, ge=1, le=5)
    human_color: str = "red"
    seed: Optional[int] = None
    custom_setup: Optional[Dict[str, str]] = None  # e.g., {"e0": "rK", "e9": "bK"}
    fen: Optional[str] = None
    to_move: str = "red"


class MoveRequest(BaseModel):
    """Request model for making a move."""

    game_id: str
    from_square: str  # e.g., "h2"
    to_square: str  # e.g., "e2"


def _parse_color(value: str) -> Color:
    try:
        return Color(value.lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown side: {value}")


def _parse_square(square: str) -> Position:
    try:
        return Position.from_square(square)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid square notation: {e}")


def _run_ai_search(session: GameSession, board: Board):
    """CPU-bound AI search, run on the thread pool. Does not touch the session."""
    return session.engine.search(board)


@app.post("/api/new-game")
async def new_game(request: NewGameRequest):
    """Create a new game, replacing any game with the same id."""
    human_color = _parse_color(request.human_color)
    to_move = _parse_color(request.to_move)

    board = None
    try:
        if request.fen:
            board = Board.from_fen(request.fen)
        elif request.custom_setup:
            board = Board.from_setup(request.custom_setup)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid position: {e}")

    session = GameSession(
        difficulty=request.difficulty,
        human_color=human_color,
        seed=request.seed,
        board=board,
        to_move=to_move,
        time_limit=AI_TIME_LIMIT,
    )

    async with games_lock:
        previous = games.get(request.game_id)
        if previous is not None:
            # Stop the old game's AI if it is still thinking
            previous.session.cancel()
        games[request.game_id] = GameState(session)

    logger.info("New game %s at difficulty %d", request.game_id, request.difficulty)
    asyncio.create_task(cleanup_old_games())

    return {
        "status": "ok",
        "game_id": request.game_id,
        "difficulty": request.difficulty,
        "human_color": human_color.value,
    }


@app.get("/api/board/{game_id}")
async def get_board(game_id: str):
    """Get current board state."""
    game_state = await get_game_state(game_id)
    async with game_state.lock:
        data = game_state.session.to_dict()
    data["thinking"] = game_state.is_processing
    return data


@app.get("/api/legal-moves/{game_id}/{square}")
async def get_legal_moves(game_id: str, square: str):
    """Legal destinations for the piece on ``square`` (empty if none)."""
    game_state = await get_game_state(game_id)
    position = _parse_square(square)
    async with game_state.lock:
        destinations = game_state.session.selectable_moves(position)
    return {
        "square": square,
        "moves": [dest.to_square() for dest in destinations],
    }


@app.post("/api/move")
async def make_move(request: MoveRequest):
    """Make a move for the human player."""
    game_state = await get_game_state(request.game_id)
    move = Move(_parse_square(request.from_square), _parse_square(request.to_square))

    async with game_state.lock:
        session = game_state.session
        if game_state.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking. Please wait.")
        if session.to_move != session.human_color:
            raise HTTPException(status_code=400, detail="Not your turn")
        if not session.make_move(move):
            raise HTTPException(status_code=400, detail="Illegal move")
        record = session.history[-1]

        return {
            "status": "ok",
            "move": move.to_uci(),
            "captured": piece_to_code(record.captured),
            "in_check": session.in_check,
            "game_over": session.game_over,
            "winner": session.winner.value if session.winner else None,
            "reason": session.reason,
        }


@app.post("/api/ai-move/{game_id}")
async def ai_move(game_id: str):
    """Let the AI play its move."""
    game_state = await get_game_state(game_id)

    async with game_state.lock:
        if game_state.is_processing:
            raise HTTPException(
                status_code=409, detail="AI is already processing a move. Please wait."
            )
        session = game_state.session
        if session.game_over:
            raise HTTPException(status_code=400, detail="Game is over")
        if session.to_move != session.ai_color:
            raise HTTPException(status_code=400, detail="Not the AI's turn")
        game_state.is_processing = True
        board = session.board

    try:
        loop = asyncio.get_running_loop()
        try:
            best_move = await loop.run_in_executor(executor, _run_ai_search, session, board)
        except SearchCancelled as e:
            logger.info("AI search for game %s stopped: %s", game_id, e)
            raise HTTPException(status_code=409, detail="AI search was cancelled")

        if best_move is None:
            raise HTTPException(status_code=400, detail="No legal moves available")

        async with game_state.lock:
            if not session.make_move(best_move):
                logger.error("AI chose illegal move %s in game %s", best_move.to_uci(), game_id)
                raise HTTPException(status_code=500, detail="AI generated illegal move")
            record = session.history[-1]
            return {
                "status": "ok",
                "move": {
                    "from": best_move.from_pos.to_square(),
                    "to": best_move.to_pos.to_square(),
                },
                "captured": piece_to_code(record.captured),
                "nodes_searched": session.engine.nodes_searched,
                "random_move": session.engine.used_random_move,
                "in_check": session.in_check,
                "game_over": session.game_over,
                "winner": session.winner.value if session.winner else None,
                "reason": session.reason,
            }
    finally:
        async with game_state.lock:
            game_state.is_processing = False


@app.post("/api/undo/{game_id}")
async def undo_move(game_id: str):
    """Undo the last move."""
    return await _undo(game_id, 1)


@app.post("/api/undo-pair/{game_id}")
async def undo_move_pair(game_id: str):
    """Undo the last two moves (player's move and AI's move)."""
    return await _undo(game_id, 2)


async def _undo(game_id: str, plies: int):
    game_state = await get_game_state(game_id)
    async with game_state.lock:
        if game_state.is_processing:
            raise HTTPException(status_code=409, detail="AI is thinking. Please wait.")
        if not game_state.session.undo(plies):
            raise HTTPException(status_code=400, detail="Not enough moves to undo")
    return {"status": "ok", "undone": plies}


@app.get("/api/labels")
async def get_labels():
    """Display labels keyed by piece code, for rendering arbitrary boards."""
    classic: Dict[str, str] = {}
    cute: Dict[str, str] = {}
    for (kind, color), label in PIECE_LABELS.items():
        code = piece_to_code(Piece(kind, color))
        classic[code] = label
        cute[code] = CUTE_LABELS[(kind, color)]
    return {"classic": classic, "cute": cute}


@app.get("/api/health")
async def health():
    return {"status": "ok", "games": len(games)}
