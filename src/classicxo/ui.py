"""FastAPI session layer for playing ClassicXO against the AI or another human."""

from __future__ import annotations

import logging
import os
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import Difficulty, InvalidDifficultyError, MinimaxAI, NoAvailableCellError, choose_move
from .game import Board, GameStatus, Mark, evaluate

logger = logging.getLogger(__name__)


def _parse_delay(raw: str) -> Tuple[float, float]:
    low, _, high = raw.partition(",")
    low_value = float(low or 0.0)
    return low_value, float(high) if high else low_value


AI_THINK_DELAY: Tuple[float, float] = _parse_delay(
    os.environ.get("CLASSICXO_AI_DELAY", "0,0")
)
DEFAULT_DIFFICULTY = Difficulty.parse(
    os.environ.get("CLASSICXO_DEFAULT_DIFFICULTY", Difficulty.HARD.value)
)


@dataclass
class GameSession:
    """Container for an active game and, in PvE mode, its AI opponent."""

    board: Board
    ai: Optional[MinimaxAI]
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="ClassicXO", description="Tic-tac-toe with a minimax opponent")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Literal["pve", "pvp"] = "pve"
    difficulty: Difficulty = Field(
        default=DEFAULT_DIFFICULTY, description="AI strength in PvE mode"
    )
    ai_first: bool = Field(default=False, alias="aiFirst")

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, value: object) -> Difficulty:
        try:
            return Difficulty.parse(value)  # type: ignore[arg-type]
        except InvalidDifficultyError as exc:
            raise ValueError(str(exc)) from exc


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    row: int = Field(ge=0, le=2)
    col: int = Field(ge=0, le=2)


class SuggestRequest(BaseModel):
    """Stateless request: which cell should ``mark`` play on ``board``?"""

    board: List[List[str]]
    mark: Literal["X", "O"]
    difficulty: Difficulty = DEFAULT_DIFFICULTY

    @field_validator("board")
    @classmethod
    def ensure_board_shape(cls, value: List[List[str]]) -> List[List[str]]:
        Board.from_rows(value)
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, value: object) -> Difficulty:
        try:
            return Difficulty.parse(value)  # type: ignore[arg-type]
        except InvalidDifficultyError as exc:
            raise ValueError(str(exc)) from exc


def _create_session(request: NewGameRequest) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    ai: Optional[MinimaxAI] = None
    if request.mode == "pve":
        player = Mark.X if request.ai_first else Mark.O
        ai = MinimaxAI(player=player, difficulty=request.difficulty)
    session = GameSession(board=Board(), ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created %s game %s (difficulty=%s, ai=%s)",
        request.mode,
        session_id,
        ai.difficulty.value if ai else None,
        ai.player.value if ai else None,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _ai_should_move(session: GameSession) -> bool:
    return bool(
        session.ai
        and not evaluate(session.board).is_over
        and session.board.next_mark() is session.ai.player
    )


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if not session.ai or not _ai_should_move(session):
                return
            row, col = session.ai.choose(session.board)
            session.board.place(row, col, session.ai.player)
            session.move_log.append(
                {"player": session.ai.player.value, "row": row, "col": col}
            )
        finally:
            session.ai_pending = False


def _schedule_ai(
    game_id: str, session: GameSession, background_tasks: Optional[BackgroundTasks]
) -> None:
    # Caller holds session.lock
    if _ai_should_move(session):
        session.ai_pending = True
        if background_tasks is not None:
            background_tasks.add_task(_run_ai_turn, game_id)


def _status_message(session: GameSession, status: GameStatus) -> str:
    ai = session.ai
    if ai is None:
        if status is GameStatus.DRAW:
            return "DRAW"
        if status.is_over:
            return f"PLAYER {status.winner.value} WINS"  # type: ignore[union-attr]
        return f"PLAYER {session.board.next_mark().value} TURN"
    if status is GameStatus.DRAW:
        return "YOU MANAGED TO DRAW AGAINST THE AI."
    if status.is_over:
        if status.winner is ai.player:
            return "OH NO, THE AI DEFEATED YOU!"
        return "CONGRATS! YOU DEFEATED THE AI."
    return (
        f"PLAYING AGAINST AI DIFFICULTY {ai.difficulty.value.upper()} "
        f"({ai.player.value})"
    )


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        status = evaluate(board)
        winner = status.winner
        state: Dict[str, object] = {
            "id": game_id,
            "mode": "pve" if session.ai else "pvp",
            "difficulty": session.ai.difficulty.value if session.ai else None,
            "aiPlayer": session.ai.player.value if session.ai else None,
            "board": board.to_rows(),
            "currentPlayer": None if status.is_over else board.next_mark().value,
            "status": status.value,
            "winner": winner.value if winner else None,
            "drawn": status is GameStatus.DRAW,
            "availableMoves": [
                {"row": r, "col": c}
                for r, c in ([] if status.is_over else board.available_cells())
            ],
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "message": _status_message(session, status),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    row: int,
    col: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        board = session.board
        if evaluate(board).is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        player = board.next_mark()
        if session.ai and player is session.ai.player:
            raise HTTPException(status_code=400, detail="It is the AI's turn")

        if not board.is_available(row, col):
            raise HTTPException(status_code=400, detail="This cell is occupied")

        board.place(row, col, player)
        session.move_log.append({"player": player.value, "row": row, "col": col})
        _schedule_ai(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request)
    with session.lock:
        _schedule_ai(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.row, request.col, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str, background_tasks: BackgroundTasks) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.board.reset()
        session.move_log.clear()
        logger.info("Restarted game %s", game_id)
        _schedule_ai(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/move")
def suggest_move(request: SuggestRequest) -> Dict[str, int]:
    board = Board.from_rows(request.board)
    try:
        row, col = choose_move(board, Mark(request.mark), request.difficulty)
    except NoAvailableCellError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"row": row, "col": col}
