# chatrooms/core/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from chatrooms.core.config import Settings, settings as default_settings
from chatrooms.services.chat_service import ChatService
from chatrooms.services.room_registry import RoomRegistry
from chatrooms.services.user_directory import UserDirectory


@dataclass
class AppState:
    """Everything one running chat process shares between its sessions."""

    registry: RoomRegistry
    users: UserDirectory
    chat: ChatService
    app_start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def build_state(settings: Optional[Settings] = None) -> AppState:
    """
    Wire up the registry, user directory and chat service.

    Default rooms from settings are created here so they show up in
    listings before anyone joins them.
    """
    settings = settings or default_settings

    registry = RoomRegistry(delivery_timeout=settings.delivery_timeout)
    registry.create_default_rooms(settings.DEFAULT_ROOMS)

    users = UserDirectory()
    chat = ChatService(registry=registry, users=users, settings=settings)
    return AppState(registry=registry, users=users, chat=chat)
