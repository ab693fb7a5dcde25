# chatrooms/core/errors.py

from __future__ import annotations


class ChatError(Exception):
    """Base class for every error the chat core raises."""


class DuplicateRoomCreation(ChatError):
    """A second Room was offered for an identifier that already has one."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"Room '{room_id}' already exists")
        self.room_id = room_id


class UnknownParticipant(ChatError):
    """A user name or subscriber id is not known to the caller."""

    def __init__(self, participant_id: str) -> None:
        super().__init__(f"User '{participant_id}' does not exist")
        self.participant_id = participant_id


class UserAlreadyExists(ChatError):
    def __init__(self, username: str) -> None:
        super().__init__(f"User '{username}' already exists")
        self.username = username


class InvalidInput(ChatError):
    pass


class DeliveryFailure(ChatError):
    """
    Delivery to a single subscriber failed.

    Built by the room dispatcher and logged, never raised to the caller
    of a broadcast.
    """

    def __init__(self, subscriber_id: str, cause: BaseException) -> None:
        super().__init__(f"Delivery to '{subscriber_id}' failed: {cause!r}")
        self.subscriber_id = subscriber_id
        self.cause = cause
