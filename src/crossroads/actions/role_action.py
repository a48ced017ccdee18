from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer

from crossroads.embeds import truncate
from crossroads.errors import CrossroadsError, TimedOutError
from crossroads.role_select import CANCEL_EMOJI, CONFIRM_EMOJI, await_confirmation, role_line
from crossroads.settings import settings
from crossroads.utils import EMBED_DESCRIPTION_SIZE_LIMIT

from .base_action import SUCCESS, BaseAction

if TYPE_CHECKING:
    from crossroads.conversation import Conversation

logger = logging.getLogger(__name__)


class RoleAction(BaseAction):
    def usable_emoji(self, emoji: discord.PartialEmoji) -> bool:
        """
        Custom emoji can only be used when the bot is in a guild that has them.

        When an emoji guild is configured, custom emoji must come from it or the main guild.
        """
        if emoji.id is None:
            return True
        if (custom := self.bot.get_emoji(emoji.id)) is None:
            return False
        if not settings.EMOJI_GUILD_ID:
            return True
        return custom.guild_id in (settings.EMOJI_GUILD_ID, settings.MAIN_GUILD_ID)

    async def pick_emoji(self, conversation: Conversation, title: str) -> str:
        prompt = f"React to this message with the emoji for the role **{title}**."
        await conversation.edit(content=prompt, embed=None)
        while True:
            event = await conversation.await_reaction()
            if event is None:
                raise TimedOutError
            if event.event_type != "REACTION_ADD":
                continue
            if self.usable_emoji(event.emoji):
                return str(event.emoji)
            await conversation.edit(
                content=f"I can not use {event.emoji}, pick an emoji from the emoji server. "
                + prompt,
            )

    @tracer.wrap()
    async def add(self, title: str, repr: str) -> None:  # noqa: A002
        command = f"role add {repr}"

        async def dialog(conversation: Conversation) -> str:
            emoji = await self.pick_emoji(conversation, title)
            await conversation.edit(
                content=None,
                embed=discord.Embed(
                    title="Create this role?",
                    description=(
                        f"{emoji} `{repr}` {title}\n\n"
                        f"{CONFIRM_EMOJI} to create it, {CANCEL_EMOJI} to cancel."
                    ),
                    color=settings.INFO_EMBED_COLOR,
                ),
            )
            await await_confirmation(conversation)
            role = await self.services.roles.create(title=title, repr=repr, emoji=emoji)
            if role is None:
                message = f"A role with repr `{repr}` already exists"
                await conversation.finish_with_msg(message)
                return message
            await conversation.finish_with_msg(f"Created role {role_line(role)}")
            return SUCCESS

        async with self.flow(command):
            if (existing := await self.services.roles.select_by_repr(repr)) and existing["active"]:
                raise CrossroadsError(f"A role with repr `{repr}` already exists")
            await self.converse(command, dialog)

    @tracer.wrap()
    async def remove(self, repr: str) -> None:  # noqa: A002
        if not await self.services.roles.deactivate(repr):
            raise CrossroadsError(f"No active role with repr `{repr}`")
        await self.reply(f"Role `{repr}` was removed")
        await self.bot.log_result(self.user, f"role remove {repr}", SUCCESS)

    @tracer.wrap()
    async def list_roles(self) -> None:
        roles = await self.services.roles.active()
        embed = discord.Embed(title="Roles", color=settings.INFO_EMBED_COLOR)
        embed.description = truncate(
            "\n".join(role_line(role) for role in roles) or "_No roles yet_",
            EMBED_DESCRIPTION_SIZE_LIMIT,
        )
        await self.reply(embed=embed)
