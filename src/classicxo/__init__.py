"""ClassicXO package exposing game rules, the minimax AI, and the web application."""

from .ai import (
    Difficulty,
    InvalidDifficultyError,
    MinimaxAI,
    NoAvailableCellError,
    best_move,
    choose_move,
    score_moves,
)
from .game import Board, GameStatus, Mark, evaluate, has_won
from .ui import app

__all__ = [
    "Board",
    "Difficulty",
    "GameStatus",
    "InvalidDifficultyError",
    "Mark",
    "MinimaxAI",
    "NoAvailableCellError",
    "app",
    "best_move",
    "choose_move",
    "evaluate",
    "has_won",
    "score_moves",
]
