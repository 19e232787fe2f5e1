"""
Правила поля 3x3: поиск выигрышной линии и ничьей.
"""
from typing import Sequence

from .constants import BOARD_CELLS, DRAW, WIN_LINES


def empty_board() -> list[str | None]:
    return [None] * BOARD_CELLS


def check_winner(board: Sequence[str | None]) -> str | None:
    """
    Возвращает метку победителя ("X"/"O"), "draw" если поле заполнено
    без линии, иначе None (игра продолжается).
    Линии проверяются в порядке WIN_LINES, берётся первая совпавшая.
    """
    for a, b, c in WIN_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    if all(cell is not None for cell in board):
        return DRAW
    return None


def is_valid_index(index: int) -> bool:
    return 0 <= index < BOARD_CELLS
