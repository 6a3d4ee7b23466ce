# connection.py

import asyncio
import logging
from typing import Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection:
    """
    One live client session.

    Frames are never written to the socket directly: ``send`` puts them on a
    bounded outbox and ``pump`` (run as a task per connection) drains it.
    """

    def __init__(
        self,
        connection_id: str,
        websocket: Optional[WebSocket] = None,
        outbox_max_size: int = 0,
    ):
        self.connection_id = connection_id
        self.websocket = websocket
        self.username: Optional[str] = None
        self.rooms: Set[str] = set()
        self.outbox: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=outbox_max_size)
        self._open = True

    def __repr__(self) -> str:
        return f"Connection({self.connection_id!r}, username={self.username!r})"

    @property
    def is_open(self) -> bool:
        return self._open

    def set_username(self, username: str):
        self.username = username

    def add_room(self, room: str):
        self.rooms.add(room)

    def remove_room(self, room: str):
        self.rooms.discard(room)

    def in_room(self, room: str) -> bool:
        return room in self.rooms

    def send(self, frame: str) -> bool:
        """Queue an encoded frame. Returns False if it was not queued."""
        if not self._open:
            return False
        try:
            self.outbox.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for {self.connection_id}, dropping frame")
            return False
        return True

    def close(self):
        """Mark the connection closed and wake the writer so it can exit."""
        if not self._open:
            return
        self._open = False
        try:
            self.outbox.put_nowait(None)
        except asyncio.QueueFull:
            # writer is blocked on a slow socket; it is cancelled by the endpoint
            pass

    async def pump(self):
        """Write queued frames to the websocket until closed."""
        while True:
            frame = await self.outbox.get()
            if frame is None:
                break
            try:
                await self.websocket.send_text(frame)
            except Exception as e:
                logger.warning(f"Error sending to connection {self.connection_id}: {e}")
                self._open = False
                break
