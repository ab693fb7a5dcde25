"""Tests for the ChatService session layer and the user directory."""
import pytest

from chatrooms.core.errors import InvalidInput, UnknownParticipant, UserAlreadyExists
from chatrooms.services.user_directory import UserDirectory

from conftest import Inbox


@pytest.fixture
def inboxes(chat):
    """Create alice and bob with recording inboxes."""
    boxes = {"alice": Inbox(), "bob": Inbox()}
    for name, inbox in boxes.items():
        chat.create_user(name, inbox)
    return boxes


class TestUserDirectory:
    def test_register_and_require(self):
        users = UserDirectory()
        alice = users.register("alice", print)

        assert users.require("alice") is alice
        assert "alice" in users
        assert users.usernames() == ["alice"]

    def test_duplicate_user_rejected(self):
        users = UserDirectory()
        users.register("alice", print)

        with pytest.raises(UserAlreadyExists):
            users.register("alice", print)

    def test_blank_username_rejected(self):
        with pytest.raises(InvalidInput):
            UserDirectory().register("   ")

    def test_require_unknown_raises(self):
        with pytest.raises(UnknownParticipant):
            UserDirectory().require("ghost")

    def test_default_sink_prints(self, capsys):
        user = UserDirectory().register("alice")

        user.deliver("hi")

        assert capsys.readouterr().out == "alice received: hi\n"


class TestChatService:
    @pytest.mark.asyncio
    async def test_send_message_prefixes_username(self, chat, inboxes):
        await chat.join_room("alice", "general")

        message = await chat.send_message("alice", "general", "hello")

        assert message.content == "alice: hello"
        assert message.sender == "alice"
        assert inboxes["alice"].received[-1] == "alice: hello"
        assert chat.message_count == 1

    @pytest.mark.asyncio
    async def test_join_unknown_user_raises(self, chat):
        with pytest.raises(UnknownParticipant):
            await chat.join_room("ghost", "general")

    @pytest.mark.asyncio
    async def test_join_creates_room_on_first_use(self, chat, inboxes):
        room = await chat.join_room("bob", "new-room")

        assert chat.registry.get("new-room") is room
        assert chat.active_users("new-room") == ["bob"]

    @pytest.mark.asyncio
    async def test_private_message_reaches_both_and_skips_history(self, chat, inboxes):
        """Private messages work between known users outside any room."""
        message = await chat.private_message("alice", "bob", "psst")

        assert inboxes["alice"].received == ["(Private) alice to bob: psst"]
        assert inboxes["bob"].received == ["(Private) alice to bob: psst"]
        assert chat.registry.get("Private").history() == []
        assert message.content == "(Private) alice to bob: psst"
        assert chat.message_count == 1

    @pytest.mark.asyncio
    async def test_private_message_unknown_recipient(self, chat, inboxes):
        with pytest.raises(UnknownParticipant) as exc_info:
            await chat.private_message("alice", "ghost", "hello?")

        assert exc_info.value.participant_id == "ghost"
        assert inboxes["alice"].received == []

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, chat, inboxes):
        with pytest.raises(InvalidInput):
            await chat.send_message("alice", "general", "  ")
        assert chat.message_count == 0

    @pytest.mark.asyncio
    async def test_blank_room_rejected(self, chat, inboxes):
        with pytest.raises(InvalidInput):
            await chat.join_room("alice", "")

    @pytest.mark.asyncio
    async def test_leave_room(self, chat, inboxes):
        await chat.join_room("alice", "general")
        await chat.join_room("bob", "general")

        await chat.leave_room("alice", "general")

        assert chat.active_users("general") == ["bob"]
        assert inboxes["bob"].received[-1] == "alice has left"
        assert "alice has left" not in inboxes["alice"].received

    @pytest.mark.asyncio
    async def test_rooms_info(self, chat, inboxes):
        await chat.join_room("alice", "general")

        info = chat.rooms_info()

        assert info["general"].member_count == 1
