from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


class RoomInfo(BaseModel):
    """Current state of a room."""
    room: str
    connection_count: int
    users: List[str]
    typing_users: List[str]
    created_at: datetime
    last_activity: datetime


@router.get("", response_model=List[RoomInfo])
async def list_rooms(request: Request):
    """List every room that currently has members."""
    return request.app.state.connection_manager.get_all_rooms_info()


@router.get("/{room}", response_model=RoomInfo)
async def get_room(room: str, request: Request):
    """
    Get a single room.

    Args:
        room: Name of the room
    """
    info = request.app.state.connection_manager.get_room_info(room)
    if info is None:
        logger.debug(f"Room lookup for unknown room {room!r}")
        raise HTTPException(status_code=404, detail=f"Room not found: {room}")
    return info
