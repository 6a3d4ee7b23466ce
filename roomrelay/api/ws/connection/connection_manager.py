import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from roomrelay.core.settings import get_settings
from .broadcaster import Broadcaster
from .model.connection import Connection
from .model.events import SystemEvent, UserJoinedEvent, UserLeftEvent
from .registry import ConnectionRegistry
from .room_directory import RoomDirectory
from .typing_tracker import TypingTracker

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages connections, room membership and typing state for the relay.

    Every method is synchronous: state changes and the resulting broadcasts
    happen in one step on the event loop, and frames are only queued on the
    connections' outboxes.
    """

    def __init__(self, max_connections: int = 0, outbox_max_size: int = 0):
        self.registry = ConnectionRegistry(
            max_connections=max_connections,
            outbox_max_size=outbox_max_size,
        )
        self.directory = RoomDirectory()
        self.typing = TypingTracker()
        self.broadcaster = Broadcaster(self.directory, self.typing)

    @classmethod
    def from_settings(cls, settings=None) -> "ConnectionManager":
        settings = settings or get_settings()
        return cls(
            max_connections=settings.max_connections,
            outbox_max_size=settings.outbox_max_size,
        )

    def connect(self, websocket: Optional[WebSocket] = None) -> Optional[Connection]:
        """
        Register a new transport session.

        Args:
            websocket: The accepted WebSocket, if any

        Returns:
            The new Connection, or None if the server is full
        """
        connection = self.registry.register(websocket)
        if connection is not None:
            logger.info(f"Connection {connection.connection_id} opened")
        return connection

    def disconnect(self, connection: Connection):
        """
        Tear down a connection, leaving every room it belongs to.

        Safe to call more than once.
        """
        connection.close()
        for room in list(connection.rooms):
            self.leave(connection, room)
        if self.registry.unregister(connection):
            logger.info(f"Connection {connection.connection_id} disconnected")

    def identify(self, connection: Connection, username: str):
        """
        Set a connection's display identity.

        The previous identity is dropped from the typing sets of the rooms
        the connection is in.
        """
        previous = connection.username
        connection.set_username(username)
        # Names are not unique: a second connection typing under the old name is dropped too.
        if previous and previous != username:
            for room in list(connection.rooms):
                if self.typing.discard(room, previous):
                    self.broadcaster.broadcast_typing(room)

    def join(self, connection: Connection, room: str):
        """
        Add a connection to a room and announce it.

        Args:
            connection: The joining connection
            room: Name of the room, created if absent
        """
        self.directory.add(room, connection)
        connection.add_room(room)
        logger.debug(f"{connection.connection_id} ({connection.username}) joined {room!r}")

        self.broadcaster.broadcast_to_room(
            room, UserJoinedEvent(room=room, sender=connection.username), exclude=connection
        )
        self.broadcaster.send(connection, SystemEvent(content=f"Joined room: {room}"))
        self.broadcaster.broadcast_presence(room)

    def leave(self, connection: Connection, room: str):
        """
        Remove a connection from a room and announce it.

        A no-op when the connection is not a member of the room.
        """
        if not connection.in_room(room):
            return

        self.directory.remove(room, connection)
        connection.remove_room(room)
        logger.debug(f"{connection.connection_id} ({connection.username}) left {room!r}")

        if connection.username and self.typing.discard(room, connection.username):
            if room in self.typing:
                self.broadcaster.broadcast_typing(room)

        self.broadcaster.broadcast_to_room(
            room, UserLeftEvent(room=room, sender=connection.username), exclude=connection
        )
        self.broadcaster.send(connection, SystemEvent(content=f"Left room: {room}"))
        self.broadcaster.broadcast_presence(room)

    def set_typing(self, connection: Connection, room: str, is_typing: bool) -> bool:
        """
        Mark a member as typing or not, then broadcast the room's typing list.

        Ignored (returns False) unless the connection is identified and a
        member of the room.
        """
        if not connection.username or not connection.in_room(room):
            logger.debug(f"Ignoring typing update from {connection.connection_id} for {room!r}")
            return False

        if is_typing:
            self.typing.add(room, connection.username)
        else:
            self.typing.discard(room, connection.username)

        self.broadcaster.broadcast_typing(room)
        return True

    def is_member(self, connection: Connection, room: str) -> bool:
        return connection.in_room(room)

    def get_room_info(self, room: str) -> Optional[Dict[str, Any]]:
        """
        Get information about a room.

        Args:
            room: Name of the room

        Returns:
            Dictionary with room information or None if room doesn't exist
        """
        entry = self.directory.get(room)
        if entry is None:
            return None
        return {
            "room": room,
            "connection_count": entry.get_connection_count(),
            "users": entry.usernames(),
            "typing_users": self.typing.users(room),
            "created_at": entry.created_at.isoformat(),
            "last_activity": entry.last_activity.isoformat(),
        }

    def get_all_rooms_info(self) -> List[Dict[str, Any]]:
        return [self.get_room_info(room) for room in self.directory.names()]

    def get_total_connections(self) -> int:
        return len(self.registry)
