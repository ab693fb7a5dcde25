# chatrooms/services/protocols.py

from enum import Enum

from chatrooms.core.logging import get_logger

logger = get_logger(__name__)


class Protocol(str, Enum):
    WEBSOCKET = "websocket"
    HTTP = "http"


PROTOCOL_LABELS = {
    Protocol.WEBSOCKET: "WebSocket",
    Protocol.HTTP: "HTTP",
}


class CommunicationAdapter:
    """
    Announces the protocol a session was started with.

    Nothing is opened: rooms are delivered in-process, the protocol is a
    label the console shows to the user.
    """

    def __init__(self, protocol: Protocol) -> None:
        self.protocol = Protocol(protocol)

    @property
    def label(self) -> str:
        return PROTOCOL_LABELS[self.protocol]

    def connect(self) -> str:
        banner = f"Connected via {self.label}."
        logger.info("🔌 %s", banner)
        return banner
