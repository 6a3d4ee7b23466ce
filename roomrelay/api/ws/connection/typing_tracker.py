from typing import Dict, List


class TypingTracker:
    """Room name -> display identities currently typing, in insertion order."""

    def __init__(self):
        self.rooms: Dict[str, Dict[str, None]] = {}

    def __contains__(self, room: str) -> bool:
        return room in self.rooms

    def add(self, room: str, username: str):
        self.rooms.setdefault(room, {})[username] = None

    def discard(self, room: str, username: str) -> bool:
        """Remove a user, dropping the room entry once empty. True if removed."""
        users = self.rooms.get(room)
        if users is None or username not in users:
            return False
        del users[username]
        if not users:
            del self.rooms[room]
        return True

    def users(self, room: str) -> List[str]:
        return list(self.rooms.get(room, ()))
