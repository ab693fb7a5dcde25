# chatrooms/services/room.py

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, Iterable, List, Optional, Tuple, Union

from chatrooms.core.errors import DeliveryFailure, UnknownParticipant
from chatrooms.models.models import Message, MessageKind, RoomInfo
from chatrooms.services.subscriber import Subscriber

logger = logging.getLogger(__name__)

Participant = Union[Subscriber, str]


class _Outbox:
    """Messages waiting for one subscriber, plus whether someone is draining them."""

    __slots__ = ("pending", "draining")

    def __init__(self) -> None:
        self.pending: Deque[Tuple[Subscriber, Message]] = deque()
        self.draining = False

# ============================================================================
# CHAT ROOM
# ============================================================================

class Room:
    """
    One named chat room: ordered membership plus append-only history.

    State mutation (join, leave, broadcast append) happens under ``_lock``,
    a threading.Lock with no await inside. The same critical section queues
    the message on every target's outbox, so a broadcast never sees a
    half-updated member list, a joiner's replay is exactly the history that
    preceded its own join notice, and every outbox fills in history order.

    Delivery runs outside the lock. Each subscriber has its own outbox and
    at most one caller drains it at a time; a caller that finds an outbox
    already being drained leaves its message there for the current drainer.
    As a result:
        - every member receives messages in history order
        - a slow or hung subscriber only delays itself
        - a sink may call back into the room (e.g. reply with broadcast)

    The room is safe to share between threads, each with its own event
    loop. An async sink is awaited on the loop of whichever caller drains
    its outbox, so sinks must not depend on a particular loop.

    Data Structures:
        _members: subscriber id -> Subscriber, in join order
        _history: every broadcast and system notice, in arrival order
        _outboxes: subscriber id -> _Outbox, only while messages are pending

    Usage:
        room = registry.get_or_create("general")
        await room.join(alice)
        await room.broadcast("alice: hello")
        await room.leave(alice)
    """

    def __init__(self, room_id: str, delivery_timeout: Optional[float] = None) -> None:
        self.room_id = room_id
        self.delivery_timeout = delivery_timeout
        self.created_at = datetime.now(timezone.utc)

        self._members: Dict[str, Subscriber] = {}
        self._history: List[Message] = []
        self._outboxes: Dict[str, _Outbox] = {}
        self._delivery_failures = 0

        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"Room({self.room_id!r}, members={len(self._members)}, history={len(self._history)})"

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def join(self, subscriber: Subscriber) -> None:
        """
        Add a subscriber, announce it and replay the history to it.

        Joining twice keeps a single membership entry but announces and
        replays again on every call.

        Process:
            1. Add to members (if not already there)
            2. Append "<id> has joined" and queue it for every member,
               the joiner included
            3. Queue the history that preceded the notice for the joiner
            4. Deliver
        """
        notice = self._system_message(f"{subscriber.id} has joined")

        with self._lock:
            if subscriber.id not in self._members:
                self._members[subscriber.id] = subscriber
            backlog = list(self._history)
            self._history.append(notice)
            targets = list(self._members.values())
            self._enqueue(notice, targets)
            for message in backlog:
                self._enqueue(message, [subscriber])

        await self._dispatch(targets)
        logger.info("→ %s joined '%s' (%d members)", subscriber.id, self.room_id, len(targets))

    async def leave(self, subscriber: Subscriber) -> None:
        """
        Remove a subscriber and tell the remaining members.

        Leaving when not a member is allowed; the notice still goes out.
        The leaver never receives its own notice.
        """
        notice = self._system_message(f"{subscriber.id} has left")

        with self._lock:
            was_member = self._members.pop(subscriber.id, None) is not None
            self._history.append(notice)
            targets = list(self._members.values())
            self._enqueue(notice, targets)

        await self._dispatch(targets)

        if was_member:
            logger.info("← %s left '%s' (%d members)", subscriber.id, self.room_id, len(targets))
        else:
            logger.info("%s left '%s' without being a member", subscriber.id, self.room_id)

    def members(self) -> List[Subscriber]:
        """Snapshot of current members in join order."""
        with self._lock:
            return list(self._members.values())

    def member_ids(self) -> List[str]:
        with self._lock:
            return list(self._members)

    def __contains__(self, participant: Participant) -> bool:
        key = participant.id if isinstance(participant, Subscriber) else participant
        return key in self._members

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    async def broadcast(self, text: str, sender: Optional[str] = None) -> Message:
        """
        Append a message to history and deliver it to every current member.

        Members are served in join order from a snapshot taken together
        with the append. A failing member is logged and skipped. A member
        whose outbox is being drained by another caller gets the message
        from that caller, after everything queued before it.

        Args:
            text: Message content, delivered as-is
            sender: Optional id of the author (bookkeeping only)

        Returns:
            Message: The history entry that was appended
        """
        message = Message(
            content=text,
            kind=MessageKind.BROADCAST,
            room_id=self.room_id,
            sender=sender,
        )

        with self._lock:
            self._history.append(message)
            targets = list(self._members.values())
            self._enqueue(message, targets)

        if not targets:
            logger.info("[routing] Skipped fan-out: room=%s has 0 members", self.room_id)
            return message

        await self._dispatch(targets)
        logger.info("📨 Broadcast to room %s: %d members", self.room_id, len(targets))
        return message

    async def direct_message(self, sender: Participant, recipient: Participant, text: str) -> Message:
        """
        Deliver a private message to its two parties only.

        The message is not appended to history. Parties given as ids must
        be current members; parties given as Subscriber handles are used
        directly (the caller vouches for them).

        Raises:
            UnknownParticipant: an id does not match any current member
        """
        with self._lock:
            source = self._resolve(sender)
            target = self._resolve(recipient)
            message = Message(
                content=f"(Private) {source.id} to {target.id}: {text}",
                kind=MessageKind.PRIVATE,
                room_id=self.room_id,
                sender=source.id,
            )
            self._enqueue(message, [source, target])

        await self._dispatch([source, target])
        logger.info("🔒 Private message %s -> %s in '%s'", source.id, target.id, self.room_id)
        return message

    def history(self) -> List[Message]:
        """Snapshot of the room history in arrival order."""
        with self._lock:
            return list(self._history)

    def info(self) -> RoomInfo:
        with self._lock:
            return RoomInfo(
                room_id=self.room_id,
                member_count=len(self._members),
                message_count=len(self._history),
                delivery_failures=self._delivery_failures,
                created_at=self.created_at,
            )

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _enqueue(self, message: Message, targets: Iterable[Subscriber]) -> None:
        # Caller holds self._lock.
        for subscriber in targets:
            outbox = self._outboxes.get(subscriber.id)
            if outbox is None:
                outbox = self._outboxes[subscriber.id] = _Outbox()
            outbox.pending.append((subscriber, message))

    async def _dispatch(self, targets: Iterable[Subscriber]) -> None:
        """
        Drain the outboxes of ``targets`` in order.

        Error Handling:
            A raising or timed-out delivery becomes a DeliveryFailure that
            is logged and counted; the remaining messages and targets are
            still served.
        """
        for subscriber in targets:
            await self._drain(subscriber.id)

    async def _drain(self, subscriber_id: str) -> None:
        with self._lock:
            outbox = self._outboxes.get(subscriber_id)
            if outbox is None or outbox.draining:
                return
            outbox.draining = True

        try:
            while True:
                with self._lock:
                    if not outbox.pending:
                        del self._outboxes[subscriber_id]
                        return
                    subscriber, message = outbox.pending.popleft()
                await self._deliver(subscriber, message.content)
        finally:
            # Cancelled mid-delivery: the next message queued for this
            # subscriber picks up whatever is left.
            with self._lock:
                outbox.draining = False

    async def _deliver(self, subscriber: Subscriber, content: str) -> None:
        try:
            result = subscriber.deliver(content)
            if inspect.isawaitable(result):
                if self.delivery_timeout:
                    await asyncio.wait_for(result, self.delivery_timeout)
                else:
                    await result
        except Exception as e:
            failure = DeliveryFailure(subscriber.id, e)
            with self._lock:
                self._delivery_failures += 1
            logger.warning("⚠ Room %s: %s", self.room_id, failure)

    def _resolve(self, participant: Participant) -> Subscriber:
        # Caller holds self._lock.
        if isinstance(participant, Subscriber):
            return participant
        member = self._members.get(participant)
        if member is None:
            raise UnknownParticipant(participant)
        return member

    def _system_message(self, text: str) -> Message:
        return Message(content=text, kind=MessageKind.SYSTEM, room_id=self.room_id)
