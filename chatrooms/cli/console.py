# chatrooms/cli/console.py

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Optional

from chatrooms.core.errors import ChatError
from chatrooms.services.chat_service import ChatService
from chatrooms.services.protocols import CommunicationAdapter, Protocol
from chatrooms.services.subscriber import console_sink

logger = logging.getLogger(__name__)

MENU = (
    "\n1. Create User"
    "\n2. Create/Join Chat Room"
    "\n3. Send Message"
    "\n4. Private Message"
    "\n5. View Active Users"
    "\n6. Leave Chat Room"
    "\n7. List Rooms"
    "\n8. Exit"
)
EXIT_CHOICE = "8"

# ============================================================================
# CONSOLE SESSION
# ============================================================================

class ChatConsole:
    """
    Menu-driven console on top of ChatService.

    Protocol:
    =========
    On start the user picks a protocol (unless one is passed to run()),
    then loops over the menu:

        1. Create User         -> "User <name> created."
        2. Create/Join Room    -> join notice + history, delivered to the user
        3. Send Message        -> "<name>: <text>" to every member
        4. Private Message     -> "(Private) <from> to <to>: <text>" to both
        5. View Active Users   -> member names in join order
        6. Leave Chat Room     -> "<name> has left" to the remaining members
        7. List Rooms          -> one line per room with its counts
        8. Exit

    Deliveries to users created here are written through ``output_fn`` as
    "<name> received: <message>".

    Error Handling:
        - ChatError (unknown user, duplicate user, blank input): printed,
          loop continues
        - Unknown menu choice: "Invalid choice. Try again."
        - End of input: session ends as if Exit was chosen
    """

    def __init__(
        self,
        chat: ChatService,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self.chat = chat
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.actions: Dict[str, Callable[[], Awaitable[None]]] = {
            "1": self.create_user,
            "2": self.join_room,
            "3": self.send_message,
            "4": self.private_message,
            "5": self.view_active_users,
            "6": self.leave_room,
            "7": self.list_rooms,
        }

    async def run(self, protocol: Optional[Protocol] = None) -> None:
        try:
            adapter = CommunicationAdapter(protocol) if protocol else self.choose_protocol()
        except EOFError:
            return
        self.output_fn(adapter.connect())

        while True:
            self.output_fn(MENU)
            try:
                choice = self.input_fn("Choose an option: ").strip()
                if choice == EXIT_CHOICE:
                    break

                action = self.actions.get(choice)
                if action is None:
                    self.output_fn("Invalid choice. Try again.")
                    continue
                await action()

            except ChatError as e:
                self.output_fn(str(e))
            except EOFError:
                break

        logger.info("Console session ended")

    def choose_protocol(self) -> CommunicationAdapter:
        self.output_fn("Select communication protocol:")
        self.output_fn("1. WebSocket")
        self.output_fn("2. HTTP")
        choice = self.input_fn("").strip()
        if choice == "1":
            return CommunicationAdapter(Protocol.WEBSOCKET)
        return CommunicationAdapter(Protocol.HTTP)

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    async def create_user(self) -> None:
        username = self.input_fn("Enter username: ").strip()
        self.chat.create_user(username, console_sink(username, self.output_fn))
        self.output_fn(f"User {username} created.")

    async def join_room(self) -> None:
        username = self._known_user("Enter your username: ")
        room_id = self.input_fn("Enter Chat Room ID: ")
        await self.chat.join_room(username, room_id)

    async def send_message(self) -> None:
        username = self._known_user("Enter your username: ")
        room_id = self.input_fn("Enter Chat Room ID: ")
        text = self.input_fn("Enter your message: ")
        await self.chat.send_message(username, room_id, text)

    async def private_message(self) -> None:
        from_username = self._known_user("Enter your username: ")
        to_username = self._known_user("Enter recipient's username: ")
        text = self.input_fn("Enter your private message: ")
        await self.chat.private_message(from_username, to_username, text)

    async def view_active_users(self) -> None:
        room_id = self.input_fn("Enter Chat Room ID: ")
        active = self.chat.active_users(room_id)
        if not active:
            self.output_fn("No active users.")
            return
        self.output_fn(f"Active Users in Room {room_id.strip()}:")
        for username in active:
            self.output_fn(username)

    async def leave_room(self) -> None:
        username = self._known_user("Enter your username: ")
        room_id = self.input_fn("Enter Chat Room ID: ")
        await self.chat.leave_room(username, room_id)

    async def list_rooms(self) -> None:
        info = self.chat.rooms_info()
        if not info:
            self.output_fn("No rooms.")
            return
        for room_id, room in info.items():
            self.output_fn(
                f"{room_id} ({room.member_count} members, {room.message_count} messages)"
            )

    def _known_user(self, prompt: str) -> str:
        """Ask for a user name and fail early if nobody has that name."""
        username = self.input_fn(prompt).strip()
        self.chat.users.require(username)
        return username
