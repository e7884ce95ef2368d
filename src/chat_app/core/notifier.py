from dataclasses import dataclass
from typing import Any
import asyncio
import logging

from starlette.websockets import WebSocket


@dataclass
class _Connection:
    websocket: WebSocket
    outbox: asyncio.Queue


class ConnectionManager:
    """
    Registry of live websocket connections, one per user.

    Pushing never waits on the socket: events are put on the connection's
    bounded outbox and a per-connection ``forward`` task writes them out.
    A full outbox drops the event.
    """

    def __init__(self, logger: logging.Logger | None = None, outbox_size: int = 100):
        self.logger = logger or logging.getLogger(__name__)
        self.outbox_size = outbox_size
        self._connections: dict[int, _Connection] = {}

    def register(self, user_id: int, websocket: WebSocket) -> asyncio.Queue:
        outbox: asyncio.Queue = asyncio.Queue(maxsize=self.outbox_size)
        previous = self._connections.get(user_id)
        if previous is not None:
            self.logger.debug("Replacing connection for user %s", user_id)
        self._connections[user_id] = _Connection(websocket=websocket, outbox=outbox)
        self.logger.info("User connected: %s", user_id)
        return outbox

    def unregister(self, user_id: int, websocket: WebSocket) -> None:
        connection = self._connections.get(user_id)
        # A newer connection may already have replaced this one
        if connection is not None and connection.websocket is websocket:
            del self._connections[user_id]
            self.logger.info("User disconnected: %s", user_id)

    def is_connected(self, user_id: int) -> bool:
        return user_id in self._connections

    def get_online_users(self) -> list[int]:
        return list(self._connections)

    def push(self, user_id: int, event: str, payload: Any) -> bool:
        connection = self._connections.get(user_id)
        if connection is None:
            return False

        try:
            connection.outbox.put_nowait({"event": event, "data": payload})
        except asyncio.QueueFull:
            self.logger.warning("Outbox full for user %s, dropping %s event", user_id, event)
            return False
        return True

    def broadcast(self, event: str, payload: Any) -> None:
        for user_id in list(self._connections):
            self.push(user_id, event, payload)

    async def forward(self, websocket: WebSocket, outbox: asyncio.Queue) -> None:
        while True:
            frame = await outbox.get()
            try:
                await websocket.send_json(frame)
            except Exception as e:
                self.logger.warning("Failed to deliver %s event: %s", frame.get("event"), e)
                return
