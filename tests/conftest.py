"""Shared test fixtures for the chat room tests."""
import pytest

from chatrooms.core.config import Settings
from chatrooms.services.chat_service import ChatService
from chatrooms.services.room import Room
from chatrooms.services.room_registry import RoomRegistry
from chatrooms.services.subscriber import Subscriber
from chatrooms.services.user_directory import UserDirectory


class Inbox:
    """Delivery sink that records every message it is handed."""

    def __init__(self) -> None:
        self.received = []

    def __call__(self, message: str) -> None:
        self.received.append(message)


class BrokenSink:
    def __call__(self, message: str) -> None:
        raise ConnectionError("subscriber went away")


@pytest.fixture
def make_subscriber():
    """Build a Subscriber with a recording inbox: ``sub, inbox = make_subscriber("U1")``."""

    def _make(subscriber_id: str):
        inbox = Inbox()
        return Subscriber(subscriber_id, inbox), inbox

    return _make


@pytest.fixture
def room():
    return Room("general")


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def test_settings():
    settings = Settings()
    settings.DELIVERY_TIMEOUT_SECONDS = 0
    settings.DEFAULT_ROOMS = ["general"]
    settings.PRIVATE_ROOM_ID = "Private"
    settings.DEFAULT_PROTOCOL = "websocket"
    return settings


@pytest.fixture
def chat(registry, test_settings):
    return ChatService(registry=registry, users=UserDirectory(), settings=test_settings)
