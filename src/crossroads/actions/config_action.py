from __future__ import annotations

import discord
from ddtrace.trace import tracer

from crossroads.models.config import LOG_CHANNEL_KEY, SIGNUP_BOARD_KEY
from crossroads.settings import settings

from .base_action import BaseAction


class ConfigAction(BaseAction):
    @tracer.wrap()
    async def set_log_channel(self, channel: discord.TextChannel) -> None:
        await self.services.configs.save(LOG_CHANNEL_KEY, str(channel.id))
        self.bot.log_channel_xid = channel.id
        await self.reply(f"Results will be logged to {channel.mention}")

    @tracer.wrap()
    async def set_board_category(self, category: discord.CategoryChannel) -> None:
        await self.services.configs.save(SIGNUP_BOARD_KEY, str(category.id))
        await self.reply(
            f"The signup board now lives in **{category.name}**. "
            "Use `/config reset_board` to post the current trainings there.",
        )

    @tracer.wrap()
    async def show(self) -> None:
        embed = discord.Embed(title="Configuration", color=settings.INFO_EMBED_COLOR)
        configs = {config["name"]: config["value"] for config in await self.services.configs.all()}
        log_channel = configs.get(LOG_CHANNEL_KEY)
        board = configs.get(SIGNUP_BOARD_KEY)
        embed.add_field(
            name="Log channel",
            value=f"<#{log_channel}>" if log_channel else "_Disabled_",
            inline=False,
        )
        embed.add_field(
            name="Signup board category",
            value=f"<#{board}>" if board else "_Disabled_",
            inline=False,
        )
        await self.reply(embed=embed)

    @tracer.wrap()
    async def reset_board(self) -> None:
        posted = await self.bot.signup_board.reset()
        await self.reply(f"Signup board reset, {posted} training(s) posted")
        await self.bot.log_result(self.user, "config reset_board", "Success")
