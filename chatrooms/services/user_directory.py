# chatrooms/services/user_directory.py

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from chatrooms.core.errors import InvalidInput, UnknownParticipant, UserAlreadyExists
from chatrooms.core.logging import get_logger
from chatrooms.services.subscriber import DeliverFn, Subscriber, console_sink

logger = get_logger(__name__)


class UserDirectory:
    """
    Every user known to the session, whether or not they are in a room.

    Rooms only know their current members; the directory is what decides
    whether a name is a real participant at all.
    """

    def __init__(self) -> None:
        self._users: Dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, username: str) -> bool:
        return username in self._users

    def register(self, username: str, deliver: Optional[DeliverFn] = None) -> Subscriber:
        """
        Create a user.

        Args:
            username: Unique name, also the subscriber id
            deliver: Delivery sink; defaults to printing to the console

        Raises:
            InvalidInput: Blank username
            UserAlreadyExists: The name is taken
        """
        username = (username or "").strip()
        if not username:
            raise InvalidInput("Username must not be empty")

        with self._lock:
            if username in self._users:
                raise UserAlreadyExists(username)
            user = Subscriber(username, deliver or console_sink(username))
            self._users[username] = user

        logger.info("✓ User %s created. Total: %d", username, len(self._users))
        return user

    def get(self, username: str) -> Optional[Subscriber]:
        return self._users.get(username)

    def require(self, username: str) -> Subscriber:
        """Like get(), but raises UnknownParticipant for an unknown name."""
        user = self._users.get(username)
        if user is None:
            raise UnknownParticipant(username)
        return user

    def usernames(self) -> List[str]:
        return list(self._users)
