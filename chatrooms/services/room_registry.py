# chatrooms/services/room_registry.py

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from chatrooms.core.errors import DuplicateRoomCreation
from chatrooms.core.logging import get_logger
from chatrooms.models.models import RoomInfo
from chatrooms.services.room import Room

logger = get_logger(__name__)

# ============================================================================
# ROOM REGISTRY
# ============================================================================
class RoomRegistry:
    """
    Maps room identifiers to Room instances, creating rooms on first use.

    The registry is a plain value: build one and hand it to whatever needs
    room access. Rooms live as long as the registry; there is no delete.

    Attributes:
        rooms: Dictionary mapping room_id -> Room object
        delivery_timeout: Passed to every Room the registry creates

    Concurrency:
        Every lookup-and-insert runs under a threading.Lock with no await
        inside, so it is atomic for threads and for asyncio tasks alike.
        Exactly one Room is ever associated with a given identifier, and
        the rooms handed out are themselves safe to share between threads.

    Usage:
        registry = RoomRegistry()
        room = registry.get_or_create("general")
        assert registry.get_or_create("general") is room
    """

    def __init__(self, delivery_timeout: Optional[float] = None) -> None:
        self.rooms: Dict[str, Room] = {}
        self.delivery_timeout = delivery_timeout
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms

    def get_or_create(self, room_id: str) -> Room:
        """
        Get the room for ``room_id``, creating an empty one if needed.

        Args:
            room_id: Room identifier

        Returns:
            Room: The single Room instance for this identifier
        """
        with self._lock:
            room = self.rooms.get(room_id)
            if room is None:
                room = Room(room_id, delivery_timeout=self.delivery_timeout)
                self.rooms[room_id] = room
                logger.info("✓ Created room: %s", room_id)
            return room

    def add_room(self, room: Room) -> Room:
        """
        Register a pre-built room.

        Raises:
            DuplicateRoomCreation: A room with this identifier already exists
        """
        with self._lock:
            if room.room_id in self.rooms:
                raise DuplicateRoomCreation(room.room_id)
            self.rooms[room.room_id] = room
        logger.info("✓ Registered room: %s", room.room_id)
        return room

    def create_default_rooms(self, room_ids: Iterable[str]) -> List[Room]:
        """
        Create the startup rooms so users have somewhere to chat immediately.

        Rooms that already exist are left untouched.
        """
        created = []
        for room_id in room_ids:
            try:
                room = self.add_room(Room(room_id, delivery_timeout=self.delivery_timeout))
            except DuplicateRoomCreation:
                logger.info("Default room %s already exists, keeping it", room_id)
                continue
            created.append(room)
        if created:
            logger.info("✓ Created %d default rooms", len(created))
        return created

    def get(self, room_id: str) -> Optional[Room]:
        """
        Get a room by identifier without creating it.

        Returns:
            Room object if found, None otherwise
        """
        return self.rooms.get(room_id)

    def list_rooms(self) -> List[Room]:
        """Get all rooms in creation order."""
        with self._lock:
            return list(self.rooms.values())

    def rooms_info(self) -> Dict[str, RoomInfo]:
        """
        Get a snapshot of every room.

        Returns:
            Dict mapping room_id to RoomInfo (member and message counts)
        """
        return {room.room_id: room.info() for room in self.list_rooms()}
