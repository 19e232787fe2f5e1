"""
Обработка сообщений WebSocket: joinRoom, makeMove, restartGame.
При разрыве соединения игрок снимается со всех своих комнат.
"""
import asyncio
import contextlib
import json
import logging

from fastapi import WebSocket
from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from .config import get_config
from .messages import JoinRoom, MakeMove, RestartGame, parse_inbound
from .rooms import Outbound, RoomManager
from .ws_manager import WSManager

logger = logging.getLogger(__name__)


class Relay:
    """
    Связка таблицы комнат и подключений. Событие применяется к комнатам и
    ставится в очереди получателей синхронно, без await, поэтому события
    обрабатываются по одному и рассылки идут в их порядке.
    """

    def __init__(self, rooms: RoomManager | None = None, manager: WSManager | None = None):
        self.rooms = rooms if rooms is not None else RoomManager()
        self.manager = manager if manager is not None else WSManager()

    def apply(self, conn_id: str, event: JoinRoom | MakeMove | RestartGame) -> list[Outbound]:
        if isinstance(event, JoinRoom):
            return self.rooms.join(conn_id, event.room, event.name)
        if isinstance(event, MakeMove):
            return self.rooms.move(conn_id, event.room, event.index)
        if isinstance(event, RestartGame):
            return self.rooms.reset(event.room)
        return []

    def handle_ws_message(self, raw: str, conn_id: str) -> None:
        """Битые и неизвестные кадры логируются и пропускаются, соединение не закрывается."""
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("WS: invalid JSON from %s: %s", conn_id, e)
            return
        try:
            event = parse_inbound(data)
        except ValidationError as e:
            logger.warning("WS: rejected frame from %s: %s", conn_id, e.errors(include_url=False))
            return
        if get_config().debug:
            logger.debug("WS: msg from %s %r", conn_id, event)
        outbox = self.apply(conn_id, event)
        if not outbox:
            logger.debug("WS: %s from %s ignored", event.type, conn_id)
        self.manager.deliver(outbox)

    def on_disconnect(self, conn_id: str) -> None:
        self.manager.disconnect(conn_id)
        self.manager.deliver(self.rooms.disconnect(conn_id))

    async def ws_loop(self, ws: WebSocket) -> None:
        conn_id = None
        pump = None
        try:
            await ws.accept()
            conn = self.manager.connect(ws)
            conn_id = conn.conn_id
            pump = asyncio.create_task(self.manager.pump(conn))
            logger.info("WS: connected conn_id=%s from %s", conn_id, ws.client)
            while True:
                message = await ws.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
                text = message.get("text")
                if text is None:
                    logger.warning("WS: binary frame from %s ignored", conn_id)
                    continue
                self.handle_ws_message(text, conn_id)
        except WebSocketDisconnect as e:
            logger.info("WS: client disconnected code=%s conn_id=%s", e.code, conn_id)
        except Exception as e:
            logger.exception("WS: error conn_id=%s: %s", conn_id, e)
        finally:
            if pump is not None:
                pump.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await pump
            if conn_id:
                self.on_disconnect(conn_id)
                logger.info("WS: disconnected conn_id=%s", conn_id)
