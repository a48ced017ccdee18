import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import app_commands
from discord.ext import commands

from crossroads.actions import ConfigAction
from crossroads.metrics import add_span_context
from crossroads.operations import safe_defer_interaction
from crossroads.settings import settings
from crossroads.utils import for_all_callbacks, is_admin, is_guild

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


@for_all_callbacks(app_commands.check(is_admin))
@for_all_callbacks(app_commands.check(is_guild))
class ConfigCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    config_group = app_commands.Group(name="config", description="Configure the bot.")

    @config_group.command(name="log", description="Set the channel that command results go to.")
    @app_commands.describe(channel="Text channel for the log")
    @tracer.wrap(name="interaction", resource="config_log")
    async def log(self, interaction: discord.Interaction, channel: discord.TextChannel) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with ConfigAction.create(self.bot, interaction) as action:
            await action.set_log_channel(channel)

    @config_group.command(name="board", description="Set the category of the signup board.")
    @app_commands.describe(category="Category that holds the signup board channels")
    @tracer.wrap(name="interaction", resource="config_board")
    async def board(
        self,
        interaction: discord.Interaction,
        category: discord.CategoryChannel,
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with ConfigAction.create(self.bot, interaction) as action:
            await action.set_board_category(category)

    @config_group.command(name="show", description="Show the current configuration.")
    @tracer.wrap(name="interaction", resource="config_show")
    async def show(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with ConfigAction.create(self.bot, interaction) as action:
            await action.show()

    @config_group.command(name="reset_board", description="Rebuild the signup board.")
    @tracer.wrap(name="interaction", resource="config_reset_board")
    async def reset_board(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with ConfigAction.create(self.bot, interaction) as action:
            await action.reset_board()


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(ConfigCog(bot), guild=settings.GUILD_OBJECT)
