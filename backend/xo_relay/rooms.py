"""
Комнаты (in-memory): посадка игроков, ходы, сброс, уход по разрыву соединения.
Все операции синхронные и возвращают список исходящих событий (Outbound);
доставкой занимается слой WebSocket.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field

from .constants import DRAW, SEAT_MARKS, STARTING_MARK, Mark, other_mark
from .game import check_winner, empty_board, is_valid_index
from .messages import (
    assign_symbol_payload,
    opponent_left_payload,
    room_full_payload,
    start_game_payload,
    update_game_payload,
)

logger = logging.getLogger(__name__)


@dataclass
class Seat:
    conn_id: str
    mark: Mark
    name: str = ""


@dataclass
class Outbound:
    recipients: tuple[str, ...]
    payload: dict


@dataclass
class Room:
    key: str
    board: list[str | None] = field(default_factory=empty_board)
    turn: Mark = STARTING_MARK
    game_over: bool = False
    # Слот i закреплён за меткой SEAT_MARKS[i].
    seats: list[Seat | None] = field(default_factory=lambda: [None] * len(SEAT_MARKS))

    @property
    def players(self) -> dict[Mark, str]:
        """Метка -> id соединения."""
        return {s.mark: s.conn_id for s in self.seats if s is not None}

    @property
    def player_count(self) -> int:
        return sum(1 for s in self.seats if s is not None)

    @property
    def is_full(self) -> bool:
        return self.player_count == len(SEAT_MARKS)

    @property
    def status(self) -> str:
        if not self.is_full:
            return "waiting"
        return "finished" if self.game_over else "active"

    def seat_of(self, conn_id: str) -> Seat | None:
        for s in self.seats:
            if s is not None and s.conn_id == conn_id:
                return s
        return None

    def player_names(self) -> dict[str, str]:
        return {s.mark: s.name for s in self.seats if s is not None}

    def connection_ids(self) -> tuple[str, ...]:
        return tuple(s.conn_id for s in self.seats if s is not None)

    def clear(self) -> None:
        self.board = empty_board()
        self.turn = STARTING_MARK
        self.game_over = False


class RoomManager:
    """Владеет таблицей комнат процесса и обратным индексом соединение -> комнаты."""

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._joined: dict[str, set[str]] = defaultdict(set)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_key: str) -> bool:
        return room_key in self._rooms

    def get(self, room_key: str) -> Room | None:
        return self._rooms.get(room_key)

    def rooms_for(self, conn_id: str) -> set[str]:
        return set(self._joined.get(conn_id, ()))

    def snapshot(self) -> dict[str, int]:
        return {
            "rooms": len(self._rooms),
            "players": sum(r.player_count for r in self._rooms.values()),
        }

    def _to_room(self, room: Room, payload: dict) -> Outbound:
        return Outbound(room.connection_ids(), payload)

    def join(self, conn_id: str, room_key: str, name: str | None = None) -> list[Outbound]:
        room = self._rooms.get(room_key)
        if room is None:
            room = Room(key=room_key)
            self._rooms[room_key] = room
            logger.info("Room %s created", room_key)

        seat = room.seat_of(conn_id)
        if seat is not None:
            return [Outbound((conn_id,), assign_symbol_payload(room_key, seat.mark))]

        if room.is_full:
            logger.info("Room %s full, rejected %s", room_key, conn_id)
            return [Outbound((conn_id,), room_full_payload(room_key))]

        slot = room.seats.index(None)
        seat = Seat(conn_id=conn_id, mark=SEAT_MARKS[slot], name=name or f"Player {SEAT_MARKS[slot]}")
        room.seats[slot] = seat
        self._joined[conn_id].add(room_key)
        logger.info("Player %s (%s) joined room %s as %s", conn_id, seat.name, room_key, seat.mark)

        out = [Outbound((conn_id,), assign_symbol_payload(room_key, seat.mark))]
        if room.is_full:
            # полная комната всегда начинает с пустого поля
            room.clear()
            logger.info("Room %s: game started", room_key)
            out.append(self._to_room(room, start_game_payload(room)))
        return out

    def move(self, conn_id: str, room_key: str, index: int) -> list[Outbound]:
        room = self._rooms.get(room_key)
        if room is None or room.game_over or not room.is_full:
            return []
        seat = room.seat_of(conn_id)
        if seat is None or seat.mark != room.turn:
            return []
        if not is_valid_index(index) or room.board[index] is not None:
            return []

        room.board[index] = seat.mark
        result = check_winner(room.board)
        logger.info("Room %s: %s -> %d", room_key, seat.mark, index)

        if result is None:
            room.turn = other_mark(room.turn)
            return [self._to_room(room, update_game_payload(room))]

        room.game_over = True
        if result == DRAW:
            logger.info("Room %s: draw", room_key)
        else:
            logger.info("Room %s: %s wins", room_key, result)
        return [self._to_room(room, update_game_payload(room, winner=result))]

    def reset(self, room_key: str) -> list[Outbound]:
        room = self._rooms.get(room_key)
        if room is None:
            return []
        room.clear()
        logger.info("Room %s reset", room_key)
        return [self._to_room(room, start_game_payload(room))]

    def disconnect(self, conn_id: str) -> list[Outbound]:
        """
        Снимает соединение со всех его комнат. Пустая комната удаляется,
        оставшемуся игроку отправляется opponentLeft; комната и его место сохраняются.
        """
        out: list[Outbound] = []
        for room_key in sorted(self._joined.pop(conn_id, ())):
            room = self._rooms.get(room_key)
            if room is None:
                continue
            room.seats = [s if s is None or s.conn_id != conn_id else None for s in room.seats]
            if room.player_count == 0:
                del self._rooms[room_key]
                logger.info("Room %s deleted (empty)", room_key)
            else:
                logger.info("Player %s left room %s", conn_id, room_key)
                out.append(self._to_room(room, opponent_left_payload(room_key)))
        return out
