import logging
from typing import Dict, Iterator, Optional

from fastapi import WebSocket

from .model.connection import Connection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Live connections by id."""

    def __init__(self, max_connections: int = 0, outbox_max_size: int = 0):
        self.max_connections = max_connections
        self.outbox_max_size = outbox_max_size
        self.connections: Dict[str, Connection] = {}
        self._connection_counter = 0

    def __len__(self) -> int:
        return len(self.connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self.connections.values()))

    def register(self, websocket: Optional[WebSocket] = None) -> Optional[Connection]:
        """
        Create a record for a new transport session.

        Returns None when ``max_connections`` (if non-zero) is already reached.
        """
        if self.max_connections and len(self.connections) >= self.max_connections:
            logger.warning(f"Refusing connection, {len(self.connections)} already open")
            return None

        connection_id = f"conn_{self._connection_counter}"
        self._connection_counter += 1

        connection = Connection(connection_id, websocket, outbox_max_size=self.outbox_max_size)
        self.connections[connection_id] = connection
        return connection

    def unregister(self, connection: Connection) -> bool:
        return self.connections.pop(connection.connection_id, None) is not None

