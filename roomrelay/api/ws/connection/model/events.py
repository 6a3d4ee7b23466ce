# events.py

"""Outbound events sent from the server to clients."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


class SystemEvent(BaseModel):
    type: Literal["system"] = "system"
    content: str


class UserJoinedEvent(BaseModel):
    type: Literal["user_joined"] = "user_joined"
    room: str
    sender: Optional[str] = None


class UserLeftEvent(BaseModel):
    type: Literal["user_left"] = "user_left"
    room: str
    sender: Optional[str] = None


class PresenceEvent(BaseModel):
    type: Literal["presence"] = "presence"
    room: str
    users: List[str] = []


class TypingEvent(BaseModel):
    type: Literal["typing"] = "typing"
    room: str
    typing_users: List[str] = Field(default_factory=list, alias="typingUsers")

    model_config = {"populate_by_name": True}


class ChatMessageEvent(BaseModel):
    type: Literal["message"] = "message"
    room: str
    sender: Optional[str] = None
    content: str
    # Client supplied values are relayed as-is
    timestamp: Any
    reply: Any = None


class ReactionEvent(BaseModel):
    type: Literal["reaction"] = "reaction"
    room: str
    sender: Optional[str] = None
    target: str
    emoji: str
    timestamp: Any
