# chatrooms/models/models.py
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageKind(str, Enum):
    BROADCAST = "broadcast"
    PRIVATE = "private"
    SYSTEM = "system"


class Message(BaseModel):
    """One entry of a room's history, or a private delivery.

    Only ``content`` is handed to subscribers; the rest is bookkeeping.
    """
    model_config = ConfigDict(frozen=True)

    content: str
    kind: MessageKind = MessageKind.BROADCAST
    room_id: str
    sender: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class RoomInfo(BaseModel):
    room_id: str
    member_count: int = 0
    message_count: int = 0
    delivery_failures: int = 0
    created_at: datetime
