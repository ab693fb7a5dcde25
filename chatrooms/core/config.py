# chatrooms/core/config.py
import os
from typing import List, Literal
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - DELIVERY_TIMEOUT_SECONDS upper bound for one awaitable delivery (0 disables it)
        - DEFAULT_ROOMS comma separated rooms created on startup
        - PRIVATE_ROOM_ID the room that carries private messages
        - DEFAULT_PROTOCOL the protocol announced when none is chosen: "websocket" or "http"
    """

    # Load environment variables from the .env file
    load_dotenv()

    DELIVERY_TIMEOUT_SECONDS: float = float(os.getenv("DELIVERY_TIMEOUT_SECONDS", "0"))

    DEFAULT_ROOMS: List[str] = [
        r.strip() for r in os.getenv("DEFAULT_ROOMS", "general").split(",") if r.strip()
    ]
    PRIVATE_ROOM_ID: str = os.getenv("PRIVATE_ROOM_ID", "Private")

    DEFAULT_PROTOCOL: Literal["websocket", "http"] = os.getenv("DEFAULT_PROTOCOL", "websocket")

    @property
    def delivery_timeout(self):
        """Delivery timeout in seconds, or None when unbounded."""
        return self.DELIVERY_TIMEOUT_SECONDS if self.DELIVERY_TIMEOUT_SECONDS > 0 else None

settings = Settings()
