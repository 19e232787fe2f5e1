"""Константы игрового поля и имена событий."""
from typing import Literal

Mark = Literal["X", "O"]

MARK_X: Mark = "X"
MARK_O: Mark = "O"
# Порядок слотов: первый вошедший получает X, второй O.
SEAT_MARKS: tuple[Mark, Mark] = (MARK_X, MARK_O)
STARTING_MARK: Mark = MARK_X

BOARD_CELLS = 9
DRAW = "draw"

WIN_LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # строки
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # столбцы
    (0, 4, 8), (2, 4, 6),             # диагонали
)

# Входящие события
EV_JOIN_ROOM = "joinRoom"
EV_MAKE_MOVE = "makeMove"
EV_RESTART_GAME = "restartGame"

# Исходящие события
EV_ASSIGN_SYMBOL = "assignSymbol"
EV_ROOM_FULL = "roomFull"
EV_START_GAME = "startGame"
EV_UPDATE_GAME = "updateGame"
EV_OPPONENT_LEFT = "opponentLeft"


def other_mark(mark: Mark) -> Mark:
    return MARK_O if mark == MARK_X else MARK_X
