"""
Менеджер WebSocket: подключения по connection id и доставка исходящих событий.
У каждого подключения своя очередь и своя задача отправки, поэтому
медленный клиент не задерживает рассылку остальным.
"""
import asyncio
import logging
import uuid
from typing import Any, Iterable

from fastapi import WebSocket

from .rooms import Outbound

logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, ws: WebSocket, conn_id: str):
        self.ws = ws
        self.conn_id = conn_id
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()


class WSManager:
    def __init__(self):
        self._by_id: dict[str, Connection] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, conn_id: str) -> Connection | None:
        return self._by_id.get(conn_id)

    def connect(self, ws: WebSocket) -> Connection:
        conn = Connection(ws, uuid.uuid4().hex)
        self._by_id[conn.conn_id] = conn
        return conn

    def disconnect(self, conn_id: str) -> None:
        self._by_id.pop(conn_id, None)

    def send_to(self, conn_id: str, payload: dict[str, Any]) -> bool:
        conn = self._by_id.get(conn_id)
        if not conn:
            return False
        conn.queue.put_nowait(payload)
        return True

    def deliver(self, outbox: Iterable[Outbound]) -> None:
        """Рассылка без ожидания: события только ставятся в очереди подключений."""
        for item in outbox:
            for conn_id in item.recipients:
                self.send_to(conn_id, item.payload)

    async def pump(self, conn: Connection) -> None:
        """Отправляет очередь подключения в сокет, пока его не снимут."""
        while True:
            payload = await conn.queue.get()
            try:
                await conn.ws.send_json(payload)
            except Exception as e:
                logger.warning("send_to %s: %s", conn.conn_id, e)
                self.disconnect(conn.conn_id)
                return
