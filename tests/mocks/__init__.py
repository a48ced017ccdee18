from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, contextmanager
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import discord

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator
    from types import ModuleType

    from discord.ext import commands

CLIENT_USER_ID = 1  # id of the test bot itself
OWNER_USER_ID = 2  # id of the test guild owner


@contextmanager
def mock_operations(module: ModuleType) -> Generator[None, None, None]:
    """
    Mock out all operations.py functions found in a given module.

    Example usage:

        from crossroads import signup_board

        with mock_operations(signup_board):
            signup_board.safe_channel_history.return_value = []
            await board.update_training(training.id)
            signup_board.safe_channel_reply.assert_called_once()

    """
    import pytest

    from crossroads import operations

    monkeypatch = pytest.MonkeyPatch()
    for name in operations.__dict__:
        if name in module.__dict__ and name.startswith("safe_"):
            monkeypatch.setattr(module, name, AsyncMock(name=name))
    try:
        yield
    finally:
        monkeypatch.undo()


@contextmanager
def mock_action(action_class: type) -> Generator[AsyncMock, None, None]:
    """Make `action_class.create()` yield a mock action, for testing cogs in isolation."""
    import pytest

    action = AsyncMock(name=action_class.__name__)

    @asynccontextmanager
    async def create(*args: Any, **kwargs: Any) -> AsyncGenerator[AsyncMock, None]:
        yield action

    monkeypatch = pytest.MonkeyPatch()
    monkeypatch.setattr(action_class, "create", create)
    try:
        yield action
    finally:
        monkeypatch.undo()


class FakeGateway:
    """
    Feeds events to a bot through `bot.dispatch()`, the way discord.py's websocket does.

    Events are delivered as soon as they are dispatched, whatever the bot is busy
    with. An event waits for something to listen to it, so a test can start a
    conversation in a task and talk to it right away.
    """

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    def listening(self, event: str) -> bool:
        return bool(self.bot.extra_events.get(f"on_{event}"))

    async def until_listening(self, event: str) -> None:
        for _ in range(2000):
            if self.listening(event):
                return
            await asyncio.sleep(0.001)
        raise AssertionError(f"nothing is listening for {event}")

    async def dispatch(self, event: str, payload: Any) -> None:
        await self.until_listening(event)
        self.bot.dispatch(event, payload)
        # let the scheduled listeners run
        await asyncio.sleep(0)


###########################################################
# Discord object builders that build from scratch
###########################################################


def build_author(offset: int = 1) -> discord.User:
    author = MagicMock(spec=discord.User)
    author.id = 1000 + offset
    author.display_name = f"user-{author.id}"
    author.mention = f"<@{author.id}>"
    author.send = AsyncMock()
    author.roles = []
    author.top_role = None
    author.dm_channel = None
    author.create_dm = AsyncMock(return_value=build_dm_channel(author, offset))
    return author


def build_dm_channel(author: discord.User, offset: int = 1) -> discord.DMChannel:
    channel = MagicMock(spec=discord.DMChannel)
    channel.id = 5000 + offset
    channel.type = discord.ChannelType.private
    channel.recipient = author
    anchor = MagicMock(spec=discord.Message)
    anchor.id = 6000 + offset
    anchor.channel = channel
    anchor.edit = AsyncMock(return_value=anchor)
    anchor.add_reaction = AsyncMock()
    channel.anchor = anchor
    channel.send = AsyncMock(return_value=anchor)
    return channel


def build_guild(offset: int = 1) -> discord.Guild:
    guild = MagicMock(spec=discord.Guild)
    guild.id = 2000 + offset
    guild.name = f"guild-{guild.id}"
    guild.owner_id = OWNER_USER_ID
    return guild


def build_channel(guild: discord.Guild, offset: int = 1) -> discord.TextChannel:
    channel = MagicMock(spec=discord.TextChannel)
    channel.id = 3000 + offset
    channel.name = f"channel-{channel.id}"
    channel.mention = f"<#{channel.id}>"
    channel.guild = guild
    channel.type = discord.ChannelType.text
    channel.permissions_for = MagicMock(
        return_value=discord.Permissions(read_messages=True, read_message_history=True),
    )
    return channel


def build_category(guild: discord.Guild, offset: int = 1) -> discord.CategoryChannel:
    category = MagicMock(spec=discord.CategoryChannel)
    category.id = 8000 + offset
    category.name = f"category-{category.id}"
    category.guild = guild
    category.text_channels = []
    return category


def build_message(
    guild: discord.Guild,
    channel: discord.TextChannel,
    author: discord.Member | discord.User,
    offset: int = 1,
) -> discord.Message:
    message = MagicMock(spec=discord.Message)
    message.id = 4000 + offset
    message.content = "content"
    message.guild = guild
    message.channel = channel
    message.author = author
    message.embeds = []
    message.reply = AsyncMock()
    message.delete = AsyncMock()
    message.edit = AsyncMock()
    return message


def build_reply(author: discord.User, channel: discord.DMChannel, content: str) -> discord.Message:
    message = MagicMock(spec=discord.Message)
    message.author = author
    message.channel = channel
    message.content = content
    return message


def build_reaction(
    user: discord.User,
    message: discord.Message,
    emoji: str,
    *,
    added: bool = True,
) -> discord.RawReactionActionEvent:
    event = MagicMock(spec=discord.RawReactionActionEvent)
    event.user_id = user.id
    event.message_id = message.id
    event.emoji = discord.PartialEmoji.from_str(emoji)
    event.event_type = "REACTION_ADD" if added else "REACTION_REMOVE"
    return event


def build_interaction(
    guild: discord.Guild,
    channel: discord.TextChannel,
    author: discord.User,
) -> discord.Interaction:
    stub = AsyncMock(spec=discord.Interaction)
    stub.id = 9001
    stub.response = AsyncMock()
    stub.response.is_done = MagicMock(return_value=True)
    stub.followup = AsyncMock()
    stub.guild = guild
    stub.guild_id = guild.id
    stub.channel = channel
    stub.channel_id = channel.id
    stub.user = author
    stub.command = None
    stub.message = None
    return stub
