import json
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from roomrelay.api.ws.connection.connection_manager import ConnectionManager
from roomrelay.api.ws.connection.model.connection import Connection
from roomrelay.api.ws.connection.router import EventRouter
from roomrelay.main import app


def drain(connection: Connection) -> List[Dict]:
    """Pop every queued frame off a connection's outbox, decoded."""
    frames = []
    while not connection.outbox.empty():
        frame = connection.outbox.get_nowait()
        if frame is not None:
            frames.append(json.loads(frame))
    return frames


@pytest.fixture
def manager():
    return ConnectionManager()


@pytest.fixture
def event_router(manager):
    return EventRouter(manager, clock=lambda: 1700000000000)


@pytest.fixture
def send(event_router):
    """Dispatch a dict (or raw text) from a connection."""
    def _send(connection, message):
        raw = message if isinstance(message, (str, bytes)) else json.dumps(message)
        event_router.dispatch(connection, raw)
    return _send


@pytest.fixture
def joined(manager, send):
    """Connect a client and join it to a room, discarding the join traffic."""
    def _joined(username, room="general"):
        connection = manager.connect()
        send(connection, {"type": "join", "room": room, "sender": username})
        return connection
    return _joined


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
