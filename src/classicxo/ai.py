"""Exhaustive minimax AI with alpha-beta pruning and difficulty tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union
import logging
import math
import random

from .game import Board, GameStatus, Mark, Move, evaluate

logger = logging.getLogger(__name__)

# Root placement that wins on the spot scores 10 - 0
WIN_NOW_SCORE = 10
# Opponent completing a line on the reply right after our placement
LOSS_NEXT_PLY_SCORE = -20

CORNERS: Tuple[Move, ...] = ((0, 0), (0, 2), (2, 0), (2, 2))
FIRST_MARK = Mark.X

_rng = random.Random()


class InvalidDifficultyError(ValueError):
    """Raised for a difficulty outside easy/medium/hard."""


class NoAvailableCellError(RuntimeError):
    """Raised when asked for a move on a full or already decided board."""


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: Union["Difficulty", str, int]) -> "Difficulty":
        """Accept an enum member, its name/value in any case, or the codes 1-3."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            codes = {1: cls.EASY, 2: cls.MEDIUM, 3: cls.HARD}
            if value in codes:
                return codes[value]
        elif isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidDifficultyError(
            f"Unsupported difficulty {value!r}. "
            f"Choose one of {', '.join(d.value for d in cls)}."
        )


# ---- core search ----


def _terminal_score(status: GameStatus, mark: Mark, depth: int) -> int:
    winner = status.winner
    if winner is mark:
        return 10 - depth
    if winner is mark.opponent:
        return LOSS_NEXT_PLY_SCORE if depth == 1 else depth - 10
    return 0


def _minimax(
    board: Board,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    mark: Mark,
) -> float:
    status = evaluate(board)
    if status.is_over:
        return _terminal_score(status, mark, depth)

    depth += 1
    if maximizing:
        value = -math.inf
        for row, col in board.available_cells():
            with board.placed(row, col, mark):
                score = _minimax(board, depth, alpha, beta, False, mark)
            value = max(value, score)
            alpha = max(alpha, score)
            if alpha >= beta:
                break
    else:
        value = math.inf
        for row, col in board.available_cells():
            with board.placed(row, col, mark.opponent):
                score = _minimax(board, depth, alpha, beta, True, mark)
            value = min(value, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
    return value


def _ensure_playable(board: Board) -> None:
    status = evaluate(board)
    if status.is_over:
        raise NoAvailableCellError(f"No valid moves available: game is {status.value}")


def _iter_root_scores(board: Board, mark: Mark) -> Iterator[Tuple[Move, int]]:
    if mark is Mark.EMPTY:
        raise ValueError("EMPTY is not a player's mark")
    _ensure_playable(board)
    for row, col in board.available_cells():
        with board.placed(row, col, mark):
            score = _minimax(board, 0, -math.inf, math.inf, False, mark)
        yield (row, col), int(score)


def score_moves(board: Board, mark: Mark) -> List[Tuple[Move, int]]:
    """Minimax score of every available cell for ``mark``, in row-major order.

    The root placement is scored at depth 0, so taking a win immediately is
    worth exactly ``WIN_NOW_SCORE`` and allowing the opponent to win with its
    reply is worth ``LOSS_NEXT_PLY_SCORE``. Other outcomes are ``10 - depth``
    for a win, ``depth - 10`` for a loss and ``0`` for a draw.

    The board is mutated during the search and restored before returning.
    """

    return list(_iter_root_scores(board, mark))


def best_move(board: Board, mark: Mark) -> Move:
    """Optimal cell for ``mark``; ties go to the first cell in row-major order."""

    best: Optional[Move] = None
    best_score = -math.inf
    for move, score in _iter_root_scores(board, mark):
        if score > best_score:
            best, best_score = move, score
    assert best is not None
    return best


# ---- difficulty strategies ----


def _easy_move(board: Board, rng: random.Random) -> Move:
    return rng.choice(board.available_cells())


def _hard_move(board: Board, mark: Mark, rng: random.Random) -> Move:
    # All four corners score the same from an empty board
    if mark is FIRST_MARK and board.mark_count() == 0:
        return rng.choice(CORNERS)
    return best_move(board, mark)


def _medium_move(board: Board, mark: Mark, rng: random.Random) -> Move:
    best_score = -math.inf
    worst_score = math.inf
    for move, score in _iter_root_scores(board, mark):
        best_score = max(best_score, score)
        worst_score = min(worst_score, score)
        if best_score >= WIN_NOW_SCORE or worst_score <= LOSS_NEXT_PLY_SCORE:
            logger.debug(
                "Medium escalates to hard at %s (best=%s, worst=%s)",
                move,
                best_score,
                worst_score,
            )
            return _hard_move(board, mark, rng)
    return _easy_move(board, rng)


def choose_move(
    board: Board,
    mark: Mark,
    difficulty: Union[Difficulty, str, int],
    rng: Optional[random.Random] = None,
) -> Move:
    """Pick the cell ``mark`` should play on ``board`` at the given difficulty.

    ``rng`` drives the easy tier, medium's easy fallback and hard's opening
    corner; pass a seeded ``random.Random`` for reproducible choices.
    """

    tier = Difficulty.parse(difficulty)
    if mark is Mark.EMPTY:
        raise ValueError("EMPTY is not a player's mark")
    _ensure_playable(board)
    rng = rng or _rng

    if tier is Difficulty.EASY:
        move = _easy_move(board, rng)
    elif tier is Difficulty.MEDIUM:
        move = _medium_move(board, mark, rng)
    else:
        move = _hard_move(board, mark, rng)

    logger.debug("%s plays %s at %s on\n%s", mark.value, move, tier.value, board)
    return move


@dataclass
class MinimaxAI:
    """Computer player bound to a mark and a difficulty.

    Searches a private copy of the board it is given, so the caller's board
    is never touched:
      - MinimaxAI(player=Mark.O, difficulty=Difficulty.HARD)
      - choose(board) -> (row, col)
    """

    player: Mark
    difficulty: Difficulty = Difficulty.HARD
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        if self.player is Mark.EMPTY:
            raise ValueError("EMPTY is not a player's mark")
        self.difficulty = Difficulty.parse(self.difficulty)

    def choose(self, board: Board) -> Move:
        _ensure_playable(board)
        if board.next_mark() is not self.player:
            raise ValueError("It is not this AI player's turn")
        return choose_move(board.copy(), self.player, self.difficulty, self.rng)
