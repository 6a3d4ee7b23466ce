import logging
from typing import Optional

from pydantic import BaseModel

from .codec import encode
from .model.connection import Connection
from .model.events import PresenceEvent, TypingEvent
from .room_directory import RoomDirectory
from .typing_tracker import TypingTracker

logger = logging.getLogger(__name__)


class Broadcaster:
    """
    Fans events out to the members of a room.

    Delivery only queues frames on each connection's outbox, so none of these
    calls wait on a peer. Closed connections are skipped, never removed here.
    """

    def __init__(self, directory: RoomDirectory, typing: TypingTracker):
        self.directory = directory
        self.typing = typing

    def send(self, connection: Connection, event: BaseModel) -> bool:
        return connection.send(encode(event))

    def broadcast_to_room(self, room: str, event: BaseModel, exclude: Optional[Connection] = None) -> int:
        """
        Deliver an event to every open member of a room.

        Args:
            room: Name of the room
            event: The event to deliver
            exclude: Optional connection that should not receive it

        Returns:
            Number of connections the event was queued for
        """
        if room not in self.directory:
            return 0

        frame = encode(event)
        delivered = 0
        for connection in self.directory.members(room):
            if connection is exclude or not connection.is_open:
                continue
            if connection.send(frame):
                delivered += 1
        return delivered

    def broadcast_presence(self, room: str) -> int:
        if room not in self.directory:
            return 0
        users = self.directory.presence(room)
        return self.broadcast_to_room(room, PresenceEvent(room=room, users=users))

    def broadcast_typing(self, room: str) -> int:
        users = self.typing.users(room)
        return self.broadcast_to_room(room, TypingEvent(room=room, typing_users=users))
