# chatrooms/services/subscriber.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

# A delivery sink takes the message content. It may return an awaitable,
# which the room awaits before moving on to the next member.
DeliverFn = Callable[[str], Union[None, Awaitable[Any]]]


@dataclass(frozen=True)
class Subscriber:
    """
    A participant that can be joined to any number of rooms.

    Identity is the ``id`` alone: two handles with the same id are the
    same participant, whatever their delivery sinks are.

    Usage:
        alice = Subscriber("alice", console_sink("alice"))
        await room.join(alice)
    """

    id: str
    deliver: DeliverFn = field(compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("Subscriber id must be a non-empty string")
        if not callable(self.deliver):
            raise TypeError("Subscriber deliver must be callable")


def console_sink(username: str, write: Callable[[str], Any] = print) -> DeliverFn:
    """Build a sink that writes ``"<username> received: <message>"``."""

    def deliver(message: str) -> None:
        write(f"{username} received: {message}")

    return deliver
