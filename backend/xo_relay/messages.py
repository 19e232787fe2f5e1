"""
Контракты событий WebSocket.
Входящие кадры — JSON-объекты с полем type; проверяются на границе
через pydantic. Исходящие собираются функциями ниже.
"""
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from .constants import (
    BOARD_CELLS,
    EV_ASSIGN_SYMBOL,
    EV_JOIN_ROOM,
    EV_MAKE_MOVE,
    EV_OPPONENT_LEFT,
    EV_RESTART_GAME,
    EV_ROOM_FULL,
    EV_START_GAME,
    EV_UPDATE_GAME,
    MARK_X,
    Mark,
)

if TYPE_CHECKING:
    from .rooms import Room

RoomKey = Annotated[str, Field(min_length=1, max_length=128)]


class JoinRoom(BaseModel):
    type: Literal["joinRoom"] = EV_JOIN_ROOM
    room: RoomKey
    name: Annotated[str, Field(max_length=32)] | None = None


class MakeMove(BaseModel):
    type: Literal["makeMove"] = EV_MAKE_MOVE
    room: RoomKey
    index: Annotated[int, Field(ge=0, lt=BOARD_CELLS)]


class RestartGame(BaseModel):
    type: Literal["restartGame"] = EV_RESTART_GAME
    room: RoomKey


InboundEvent = Annotated[
    Union[JoinRoom, MakeMove, RestartGame],
    Field(discriminator="type"),
]

inbound_adapter: TypeAdapter[InboundEvent] = TypeAdapter(InboundEvent)


def parse_inbound(data: Any) -> JoinRoom | MakeMove | RestartGame:
    """Бросает pydantic.ValidationError, если кадр не соответствует контракту."""
    return inbound_adapter.validate_python(data)


def assign_symbol_payload(room_key: str, mark: Mark) -> dict:
    return {"type": EV_ASSIGN_SYMBOL, "room": room_key, "symbol": mark}


def room_full_payload(room_key: str) -> dict:
    return {"type": EV_ROOM_FULL, "room": room_key}


def opponent_left_payload(room_key: str) -> dict:
    return {"type": EV_OPPONENT_LEFT, "room": room_key}


def _board_state(room: "Room") -> dict[str, Any]:
    return {
        "room": room.key,
        "board": list(room.board),
        "turn": room.turn,
        "isXTurn": room.turn == MARK_X,
    }


def start_game_payload(room: "Room") -> dict:
    return {
        "type": EV_START_GAME,
        **_board_state(room),
        "players": room.player_names(),
    }


def update_game_payload(room: "Room", winner: str | None = None) -> dict:
    payload = {
        "type": EV_UPDATE_GAME,
        **_board_state(room),
        "gameOver": room.game_over,
    }
    if winner is not None:
        payload["winner"] = winner
    return payload
