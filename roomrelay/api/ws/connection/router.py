import enum
import logging
import time
from typing import Any, Callable, Dict, List, Tuple, Union

from .codec import decode
from .connection_manager import ConnectionManager
from .model.connection import Connection
from .model.events import ChatMessageEvent, ErrorEvent, ReactionEvent

logger = logging.getLogger(__name__)


class MessageType(str, enum.Enum):
    JOIN = "join"
    LEAVE = "leave"
    MESSAGE = "message"
    REACTION = "reaction"
    PRESENCE_REQUEST = "presence_request"
    TYPING = "typing"


REQUIRED_FIELDS: Dict[MessageType, Tuple[str, ...]] = {
    MessageType.JOIN: ("room", "sender"),
    MessageType.LEAVE: ("room",),
    MessageType.MESSAGE: ("room", "content"),
    MessageType.REACTION: ("room", "target", "emoji"),
    MessageType.PRESENCE_REQUEST: ("room",),
    MessageType.TYPING: ("room",),
}


def now_ms() -> int:
    return int(time.time() * 1000)


def invalid_fields(data: Dict[str, Any], fields: Tuple[str, ...]) -> List[str]:
    """Names of fields that are missing, not strings or blank."""
    return [f for f in fields if not isinstance(data.get(f), str) or not data[f].strip()]


class EventRouter:
    """
    Decodes inbound frames and dispatches them by their ``type``.

    Malformed frames, unknown types and missing fields are answered with an
    ``error`` event. Requests for a room the sender is not in are dropped
    without a reply.
    """

    def __init__(self, manager: ConnectionManager, clock: Callable[[], Any] = now_ms):
        self.manager = manager
        self.clock = clock
        self.handlers: Dict[MessageType, Callable[[Connection, Dict[str, Any]], None]] = {
            MessageType.JOIN: self.handle_join,
            MessageType.LEAVE: self.handle_leave,
            MessageType.MESSAGE: self.handle_message,
            MessageType.REACTION: self.handle_reaction,
            MessageType.PRESENCE_REQUEST: self.handle_presence_request,
            MessageType.TYPING: self.handle_typing,
        }

    def reply_error(self, connection: Connection, message: str):
        self.manager.broadcaster.send(connection, ErrorEvent(message=message))

    def dispatch(self, connection: Connection, raw: Union[str, bytes]):
        data = decode(raw)
        if data is None:
            self.reply_error(connection, "Invalid JSON")
            return

        declared = data.get("type")
        try:
            message_type = MessageType(declared)
        except (ValueError, TypeError):
            self.reply_error(connection, f"Unknown message type: {declared}")
            return

        missing = invalid_fields(data, REQUIRED_FIELDS[message_type])
        if missing:
            self.reply_error(connection, f"Missing or invalid fields: {', '.join(missing)}")
            return

        self.handlers[message_type](connection, data)

    def _require_member(self, connection: Connection, data: Dict[str, Any]) -> bool:
        if self.manager.is_member(connection, data["room"]):
            return True
        logger.debug(
            f"Dropping {data['type']} from {connection.connection_id}: not in room {data['room']!r}"
        )
        return False

    def handle_join(self, connection: Connection, data: Dict[str, Any]):
        self.manager.identify(connection, data["sender"])
        self.manager.join(connection, data["room"])

    def handle_leave(self, connection: Connection, data: Dict[str, Any]):
        self.manager.leave(connection, data["room"])

    def handle_message(self, connection: Connection, data: Dict[str, Any]):
        if not self._require_member(connection, data):
            return
        room = data["room"]
        self.manager.directory.get(room).touch()
        self.manager.broadcaster.broadcast_to_room(
            room,
            ChatMessageEvent(
                room=room,
                sender=connection.username,
                content=data["content"],
                timestamp=data.get("timestamp") or self.clock(),
                reply=data.get("reply") or None,
            ),
        )

    def handle_reaction(self, connection: Connection, data: Dict[str, Any]):
        if not self._require_member(connection, data):
            return
        room = data["room"]
        self.manager.directory.get(room).touch()
        self.manager.broadcaster.broadcast_to_room(
            room,
            ReactionEvent(
                room=room,
                sender=connection.username,
                target=data["target"],
                emoji=data["emoji"],
                timestamp=data.get("timestamp") or self.clock(),
            ),
        )

    def handle_presence_request(self, connection: Connection, data: Dict[str, Any]):
        if self._require_member(connection, data):
            self.manager.broadcaster.broadcast_presence(data["room"])

    def handle_typing(self, connection: Connection, data: Dict[str, Any]):
        self.manager.set_typing(connection, data["room"], bool(data.get("typing")))
