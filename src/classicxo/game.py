"""Core rules for classic 3x3 tic-tac-toe: board, marks and outcome evaluation."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

Move = Tuple[int, int]  # (row, col)

BOARD_SIZE = 3

WINNING_LINES: Tuple[Tuple[Move, Move, Move], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


class Mark(str, Enum):
    EMPTY = " "
    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        raise ValueError("EMPTY is not a player's mark")

    @classmethod
    def parse(cls, value: str) -> "Mark":
        """Accept 'X', 'O' (any case) and '', ' ', '.' or '-' for empty."""
        text = (value or "").strip().upper()
        if text in ("", ".", "-"):
            return cls.EMPTY
        try:
            return cls(text)
        except ValueError as exc:
            raise ValueError(f"Unknown mark {value!r}") from exc


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    X_WINS = "x_wins"
    O_WINS = "o_wins"
    DRAW = "draw"

    @property
    def is_over(self) -> bool:
        return self is not GameStatus.IN_PROGRESS

    @property
    def winner(self) -> Optional[Mark]:
        if self is GameStatus.X_WINS:
            return Mark.X
        if self is GameStatus.O_WINS:
            return Mark.O
        return None


def _check_coordinates(row: int, col: int) -> None:
    # bool is an int subclass but never a valid coordinate
    for value in (row, col):
        if isinstance(value, bool) or not isinstance(value, int):
            raise IndexError(f"Coordinate {value!r} is not an integer")
        if not 0 <= value < BOARD_SIZE:
            raise IndexError(f"Coordinate {value} outside 0..{BOARD_SIZE - 1}")


@dataclass
class Board:
    # Row-major: cells[row][col]
    cells: List[List[Mark]] = field(
        default_factory=lambda: [[Mark.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    )

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]]) -> "Board":
        """Build a board from three rows of three marks ('X', 'O', '' for empty)."""
        if len(rows) != BOARD_SIZE or any(len(r) != BOARD_SIZE for r in rows):
            raise ValueError("Board must have exactly 3 rows of 3 cells")
        return cls(cells=[[Mark.parse(c) for c in row] for row in rows])

    def to_rows(self) -> List[List[str]]:
        return [[c.value.strip() for c in row] for row in self.cells]

    def get(self, row: int, col: int) -> Mark:
        _check_coordinates(row, col)
        return self.cells[row][col]

    def place(self, row: int, col: int, mark: Mark) -> None:
        # Unconditional write; legality is the caller's job
        _check_coordinates(row, col)
        self.cells[row][col] = mark

    def is_available(self, row: int, col: int) -> bool:
        return self.get(row, col) is Mark.EMPTY

    def mark_count(self) -> int:
        return sum(1 for row in self.cells for c in row if c is not Mark.EMPTY)

    def is_full(self) -> bool:
        return self.mark_count() == BOARD_SIZE * BOARD_SIZE

    def available_cells(self) -> List[Move]:
        return [
            (r, c)
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if self.cells[r][c] is Mark.EMPTY
        ]

    def next_mark(self) -> Mark:
        """Whose turn it is, assuming X moved first and play alternated."""
        x = sum(row.count(Mark.X) for row in self.cells)
        o = sum(row.count(Mark.O) for row in self.cells)
        return Mark.X if x == o else Mark.O

    @contextmanager
    def placed(self, row: int, col: int, mark: Mark) -> Iterator["Board"]:
        """Temporarily place ``mark``; the previous cell value is always restored."""
        previous = self.get(row, col)
        self.cells[row][col] = mark
        try:
            yield self
        finally:
            self.cells[row][col] = previous

    def copy(self) -> "Board":
        return Board(cells=[row.copy() for row in self.cells])

    def reset(self) -> None:
        for row in self.cells:
            for c in range(BOARD_SIZE):
                row[c] = Mark.EMPTY

    def __str__(self) -> str:
        return "\n".join(
            "".join(c.value if c is not Mark.EMPTY else "." for c in row)
            for row in self.cells
        )


# ---------- Outcome evaluation ----------


def has_won(board: Board, mark: Mark) -> bool:
    if mark is Mark.EMPTY:
        return False
    cells = board.cells
    return any(all(cells[r][c] is mark for r, c in line) for line in WINNING_LINES)


def evaluate(board: Board) -> GameStatus:
    if has_won(board, Mark.X):
        return GameStatus.X_WINS
    if has_won(board, Mark.O):
        return GameStatus.O_WINS
    if board.is_full():
        return GameStatus.DRAW
    return GameStatus.IN_PROGRESS
