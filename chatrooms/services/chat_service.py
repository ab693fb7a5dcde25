# chatrooms/services/chat_service.py

from __future__ import annotations

from typing import Dict, List, Optional

from chatrooms.core.config import Settings, settings as default_settings
from chatrooms.core.errors import InvalidInput
from chatrooms.models.models import Message, RoomInfo
from chatrooms.services.room import Room
from chatrooms.services.room_registry import RoomRegistry
from chatrooms.services.subscriber import DeliverFn, Subscriber
from chatrooms.services.user_directory import UserDirectory

# ============================================================================
# CHAT SESSION SERVICE
# ============================================================================

class ChatService:
    """
    The session layer between the console and the rooms.

    Rooms deal in Subscriber handles and raw text. This class deals in user
    names typed by a person: it checks them against the user directory,
    validates input, formats what users say and keeps a message counter.

    Data Structures:
        registry: RoomRegistry shared by every session of this process
        users: UserDirectory of everyone who may join or be messaged
        message_count: Number of user messages accepted (broadcast + private)

    Errors:
        InvalidInput: Blank names, room ids or message text
        UnknownParticipant: A user name missing from the directory
        UserAlreadyExists: create_user with a taken name
    """

    def __init__(
        self,
        registry: RoomRegistry,
        users: UserDirectory,
        settings: Optional[Settings] = None,
    ) -> None:
        self.registry = registry
        self.users = users
        self.settings = settings or default_settings
        self.message_count: int = 0

    def create_user(self, username: str, deliver: Optional[DeliverFn] = None) -> Subscriber:
        return self.users.register(username, deliver)

    async def join_room(self, username: str, room_id: str) -> Room:
        """
        Join (creating if needed) a room.

        After joining, the user receives the join notice, the room history
        and every message broadcast to the room until they leave.
        """
        user = self.users.require(username)
        room = self.registry.get_or_create(self._room_id(room_id))
        await room.join(user)
        return room

    async def leave_room(self, username: str, room_id: str) -> Room:
        user = self.users.require(username)
        room = self.registry.get_or_create(self._room_id(room_id))
        await room.leave(user)
        return room

    async def send_message(self, username: str, room_id: str, text: str) -> Message:
        """
        Broadcast ``"<username>: <text>"`` to a room.

        The sender does not have to be a member, same as a user posting to
        a room they only watch from the outside.
        """
        user = self.users.require(username)
        text = self._text(text)
        room = self.registry.get_or_create(self._room_id(room_id))
        message = await room.broadcast(f"{user.id}: {text}", sender=user.id)
        self.message_count += 1
        return message

    async def private_message(self, from_username: str, to_username: str, text: str) -> Message:
        """
        Send a private message between two known users.

        Both must exist in the directory; neither has to be in a room.
        The message goes through the private room and is never recorded in
        any history.
        """
        sender = self.users.require(from_username)
        recipient = self.users.require(to_username)
        text = self._text(text)
        room = self.registry.get_or_create(self.settings.PRIVATE_ROOM_ID)
        message = await room.direct_message(sender, recipient, text)
        self.message_count += 1
        return message

    def active_users(self, room_id: str) -> List[str]:
        """Names of the current members of a room, in join order."""
        room = self.registry.get_or_create(self._room_id(room_id))
        return room.member_ids()

    def rooms_info(self) -> Dict[str, RoomInfo]:
        return self.registry.rooms_info()

    @staticmethod
    def _room_id(room_id: str) -> str:
        room_id = (room_id or "").strip()
        if not room_id:
            raise InvalidInput("Chat Room ID must not be empty")
        return room_id

    @staticmethod
    def _text(text: str) -> str:
        if not text or not text.strip():
            raise InvalidInput("Message must not be empty")
        return text
