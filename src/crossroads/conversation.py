"""
Interactive direct message conversations.

A conversation is a multi-step dialog with one user in their DM channel. Every
step edits a single "anchor" message that the bot sends when the conversation
starts, and waits for the user to reply or react to it.

A user can be in at most one conversation at a time. This is enforced by the
`ConversationLocks` registry owned by the bot, and the lock is always released
when the `Conversation.start()` context exits, whichever way it exits.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import discord
from aiohttp.client_exceptions import ClientOSError
from ddtrace.trace import tracer
from discord.errors import DiscordException

from .errors import (
    CanceledError,
    ConversationLockedError,
    DmBlockedError,
    NoDmChannelError,
    TimedOutError,
)
from .operations import is_bad_user, mark_bad_user, retry
from .settings import settings
from .utils import CANT_SEND_CODE, suppress

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterable

    from discord.ext.commands import Bot

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 180.0  # 3 minutes, applied to every single wait
LOADING_MESSAGE = "Loading ..."
TIMED_OUT_MESSAGE = "Conversation timed out"
CANCELED_MESSAGE = "Conversation got canceled"
UNEXPECTED_ERROR_MESSAGE = "Unexpected error, Sorry =("
CANCEL_KEYWORDS = frozenset({"cancel", "abort", "stop"})
REACTION_LISTENERS = ("on_raw_reaction_add", "on_raw_reaction_remove")


class ConversationLocks:
    """Process wide registry of the users that currently are in a conversation."""

    def __init__(self) -> None:
        self._held: set[int] = set()

    def acquire(self, user_xid: int) -> bool:
        # No await between the membership test and the insert, so this can not
        # interleave with another task on the event loop.
        if user_xid in self._held:
            return False
        self._held.add(user_xid)
        return True

    def release(self, user_xid: int) -> None:
        self._held.discard(user_xid)

    def clear(self) -> None:
        self._held.clear()

    def __contains__(self, user_xid: object) -> bool:
        return user_xid in self._held

    def __len__(self) -> int:
        return len(self._held)


def is_cancel_reply(message: discord.Message) -> bool:
    return message.content.strip().lower() in CANCEL_KEYWORDS


class Conversation:
    def __init__(
        self,
        bot: Bot,
        user: discord.User | discord.Member,
        channel: discord.DMChannel,
        message: discord.Message,
        *,
        timeout: float | None = None,
    ) -> None:
        self.bot = bot
        self.user = user
        self.channel = channel
        self.message = message
        self.timeout = timeout if timeout is not None else settings.DIALOG_TIMEOUT_S
        self.closed = False
        self.replies: asyncio.Queue[discord.Message] = asyncio.Queue()
        self.reactions: asyncio.Queue[discord.RawReactionActionEvent] = asyncio.Queue()

    @classmethod
    @asynccontextmanager
    async def start(
        cls,
        bot: Bot,
        user: discord.User | discord.Member,
        *,
        timeout: float | None = None,
    ) -> AsyncGenerator[Conversation, None]:
        """
        Start a conversation with the given user.

        Raises ConversationLockedError, NoDmChannelError or DmBlockedError if the
        conversation could not be set up. Once inside the context, dialog failures
        are reported to the user before being re-raised: TimedOutError and
        CanceledError with their own messages, anything else as an apology.
        """
        locks: ConversationLocks = bot.conversations  # type: ignore
        if not locks.acquire(user.id):
            raise ConversationLockedError
        conversation: Conversation | None = None
        try:
            if await is_bad_user(user.id):
                raise DmBlockedError
            channel = await cls._open_channel(user)
            message = await cls._send_anchor(channel, user)
            conversation = cls(bot, user, channel, message, timeout=timeout)
            conversation.listen()
            try:
                yield conversation
            except TimedOutError:
                await conversation.timeout_msg()
                raise
            except CanceledError:
                await conversation.canceled_msg()
                raise
            except Exception:
                await conversation.unexpected_error()
                raise
        finally:
            # A conversation that was closed early may already have given the
            # lock to a newer conversation of the same user, leave that one be.
            if conversation is None:
                locks.release(user.id)
            else:
                conversation.close()

    @staticmethod
    async def _open_channel(user: discord.User | discord.Member) -> discord.DMChannel:
        try:
            channel = user.dm_channel or await retry(user.create_dm)
        except (DiscordException, ClientOSError) as ex:
            logger.info("could not open dm channel for user %s: %s", user.id, ex)
            raise NoDmChannelError from ex
        if channel is None:
            raise NoDmChannelError
        return channel

    @staticmethod
    async def _send_anchor(
        channel: discord.DMChannel,
        user: discord.User | discord.Member,
    ) -> discord.Message:
        try:
            return await retry(lambda: channel.send(LOADING_MESSAGE))
        except (DiscordException, ClientOSError) as ex:
            logger.info("could not send dm to user %s: %s", user.id, ex)
            if isinstance(ex, discord.Forbidden) or getattr(ex, "code", None) == CANT_SEND_CODE:
                await mark_bad_user(user.id)
            raise DmBlockedError from ex

    @tracer.wrap()
    async def edit(self, content: str | None = None, **kwargs: Any) -> None:
        """Replace the anchor message with the next step of the dialog."""
        self.message = await retry(lambda: self.message.edit(content=content, **kwargs))

    @tracer.wrap()
    async def add_reactions(self, emojis: Iterable[str | discord.PartialEmoji]) -> None:
        for emoji in emojis:
            await retry(lambda emoji=emoji: self.message.add_reaction(emoji))

    def listen(self) -> None:
        """Start collecting the user's replies and reactions until the conversation closes."""
        self.bot.add_listener(self.on_message, "on_message")
        for name in REACTION_LISTENERS:
            self.bot.add_listener(self.on_reaction, name)

    async def on_message(self, message: discord.Message) -> None:
        if message.author.id == self.user.id and message.channel.id == self.channel.id:
            self.replies.put_nowait(message)

    async def on_reaction(self, event: discord.RawReactionActionEvent) -> None:
        if event.message_id != self.message.id:
            return
        if event.user_id != self.user.id:
            logger.debug("ignoring reaction by %s on conversation anchor", event.user_id)
            return
        self.reactions.put_nowait(event)

    @tracer.wrap()
    async def await_reply(self) -> discord.Message | None:
        """Take the user's next message in the DM channel, None if timed out."""
        try:
            return await asyncio.wait_for(self.replies.get(), self.timeout)
        except TimeoutError:
            return None

    @tracer.wrap()
    async def await_reaction(self) -> discord.RawReactionActionEvent | None:
        """
        Take the user's next added or removed reaction on the anchor, None if timed out.

        Reactions are collected from the moment the conversation starts, so the ones
        made while the bot was busy editing the anchor are handed out in order.
        Reactions by anyone else, the bot's own included, never reach this step
        and do not extend its deadline.
        """
        try:
            return await asyncio.wait_for(self.reactions.get(), self.timeout)
        except TimeoutError:
            return None

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.bot.remove_listener(self.on_message, "on_message")
            for name in REACTION_LISTENERS:
                self.bot.remove_listener(self.on_reaction, name)
            self.bot.conversations.release(self.user.id)  # type: ignore

    async def _final_reply(self, content: str) -> None:
        with suppress(
            DiscordException,
            ClientOSError,
            log="could not send final message to user %(user_xid)s",
            user_xid=self.user.id,
        ):
            await retry(lambda: self.channel.send(content))

    async def abort(self, content: str | None = None) -> None:
        if content:
            await self._final_reply(content)
        self.close()

    async def finish_with_msg(self, content: str) -> None:
        await self._final_reply(content)
        self.close()

    async def timeout_msg(self) -> None:
        await self._final_reply(TIMED_OUT_MESSAGE)
        self.close()

    async def canceled_msg(self) -> None:
        await self._final_reply(CANCELED_MESSAGE)
        self.close()

    async def unexpected_error(self) -> None:
        await self._final_reply(UNEXPECTED_ERROR_MESSAGE)
        self.close()
