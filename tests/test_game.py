"""Unit tests for ClassicXO board and outcome evaluation."""

import pytest

from classicxo.game import WINNING_LINES, Board, GameStatus, Mark, evaluate, has_won


def test_initial_board_is_empty():
    board = Board()
    assert board.mark_count() == 0
    assert len(board.available_cells()) == 9
    assert evaluate(board) is GameStatus.IN_PROGRESS
    assert board.next_mark() is Mark.X


def test_every_line_is_a_win():
    assert len(WINNING_LINES) == 8
    for mark, expected in ((Mark.X, GameStatus.X_WINS), (Mark.O, GameStatus.O_WINS)):
        for line in WINNING_LINES:
            board = Board()
            for row, col in line:
                board.place(row, col, mark)
            assert has_won(board, mark)
            assert not has_won(board, mark.opponent)
            assert evaluate(board) is expected
            assert evaluate(board).winner is mark


def test_win_among_other_marks():
    board = Board.from_rows([["O", "X", "X"], ["O", "X", ""], ["X", "O", ""]])
    assert evaluate(board) is GameStatus.X_WINS


def test_no_false_positive():
    board = Board.from_rows([["X", "O", ""], ["", "X", ""], ["", "", "O"]])
    assert evaluate(board) is GameStatus.IN_PROGRESS
    assert not evaluate(board).is_over


def test_full_board_without_line_is_draw():
    board = Board.from_rows([["X", "O", "X"], ["X", "O", "O"], ["O", "X", "X"]])
    assert board.mark_count() == 9
    assert board.available_cells() == []
    assert evaluate(board) is GameStatus.DRAW
    assert evaluate(board).winner is None


def test_win_on_full_board_is_not_draw():
    board = Board.from_rows([["X", "X", "X"], ["O", "O", "X"], ["X", "O", "O"]])
    assert evaluate(board) is GameStatus.X_WINS


def test_place_and_query():
    board = Board()
    board.place(2, 1, Mark.O)
    assert board.get(2, 1) is Mark.O
    assert not board.is_available(2, 1)
    assert board.is_available(1, 2)
    assert board.mark_count() == 1
    assert (2, 1) not in board.available_cells()


def test_out_of_range_coordinates_fail_fast():
    board = Board()
    with pytest.raises(IndexError):
        board.place(3, 0, Mark.X)
    with pytest.raises(IndexError):
        board.get(0, -1)
    with pytest.raises(IndexError):
        board.is_available(True, 0)
    assert board.mark_count() == 0


def test_placed_restores_on_error():
    board = Board()
    board.place(0, 0, Mark.O)
    with pytest.raises(RuntimeError):
        with board.placed(1, 1, Mark.X):
            assert board.get(1, 1) is Mark.X
            raise RuntimeError("boom")
    assert board.get(1, 1) is Mark.EMPTY
    assert board.get(0, 0) is Mark.O


def test_next_mark_alternates():
    board = Board()
    board.place(0, 0, Mark.X)
    assert board.next_mark() is Mark.O
    board.place(1, 1, Mark.O)
    assert board.next_mark() is Mark.X


def test_rows_roundtrip_and_reset():
    rows = [["X", "", "O"], ["", "X", ""], ["O", "", ""]]
    board = Board.from_rows(rows)
    assert board.to_rows() == rows
    assert str(board) == "X.O\n.X.\nO.."
    copy = board.copy()
    board.reset()
    assert board.mark_count() == 0
    assert copy.to_rows() == rows


def test_from_rows_rejects_bad_input():
    with pytest.raises(ValueError):
        Board.from_rows([["X", "O"], ["", "", ""], ["", "", ""]])
    with pytest.raises(ValueError):
        Board.from_rows([["Z", "", ""], ["", "", ""], ["", "", ""]])


def test_empty_has_no_opponent():
    assert Mark.X.opponent is Mark.O
    with pytest.raises(ValueError):
        Mark.EMPTY.opponent
