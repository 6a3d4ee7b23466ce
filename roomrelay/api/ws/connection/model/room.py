# room.py

from datetime import datetime
from typing import Dict, List

from .connection import Connection


class Room:
    def __init__(self, name: str):
        self.name = name
        # connection_id -> Connection, kept in join order
        self.members: Dict[str, Connection] = {}
        self.created_at = datetime.now()
        self.last_activity = datetime.now()

    def add_connection(self, connection: Connection):
        """Add a connection to this room."""
        self.members.setdefault(connection.connection_id, connection)
        self.last_activity = datetime.now()

    def remove_connection(self, connection: Connection):
        """Remove a connection from this room."""
        self.members.pop(connection.connection_id, None)
        self.last_activity = datetime.now()

    def get_connection_count(self) -> int:
        """Get the number of connections in this room."""
        return len(self.members)

    def connections(self) -> List[Connection]:
        """Snapshot of the members in join order."""
        return list(self.members.values())

    def usernames(self) -> List[str]:
        """Display identities of the members, unset ones left out."""
        return [c.username for c in self.members.values() if c.username]

    def touch(self):
        self.last_activity = datetime.now()
