import logging
from typing import Dict, List, Optional

from .model.connection import Connection
from .model.room import Room

logger = logging.getLogger(__name__)


class RoomDirectory:
    """
    Room name -> Room.

    A room is created on its first member and deleted as soon as its last
    member is removed, so every entry has at least one member.
    """

    def __init__(self):
        self.rooms: Dict[str, Room] = {}

    def __contains__(self, room: str) -> bool:
        return room in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)

    def get(self, room: str) -> Optional[Room]:
        return self.rooms.get(room)

    def names(self) -> List[str]:
        return list(self.rooms.keys())

    def add(self, room: str, connection: Connection) -> Room:
        if room not in self.rooms:
            self.rooms[room] = Room(name=room)
            logger.info(f"Room {room!r} created")
        self.rooms[room].add_connection(connection)
        return self.rooms[room]

    def remove(self, room: str, connection: Connection) -> bool:
        """
        Remove a connection from a room.

        Returns True if the room was deleted because it became empty.
        """
        if room not in self.rooms:
            return False
        self.rooms[room].remove_connection(connection)
        if not self.rooms[room].members:
            del self.rooms[room]
            logger.info(f"Room {room!r} removed")
            return True
        return False

    def members(self, room: str) -> List[Connection]:
        if room in self.rooms:
            return self.rooms[room].connections()
        return []

    def presence(self, room: str) -> List[str]:
        if room in self.rooms:
            return self.rooms[room].usernames()
        return []
