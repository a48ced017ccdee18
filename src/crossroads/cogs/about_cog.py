import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import Color, Embed, app_commands
from discord.ext import commands

from crossroads import __version__
from crossroads.metrics import add_span_context
from crossroads.operations import safe_send_channel
from crossroads.settings import settings

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


class AboutCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    @app_commands.command(name="ping", description="Check that the bot is alive.")
    @tracer.wrap(name="interaction", resource="ping")
    async def ping(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        await safe_send_channel(
            interaction,
            f"pong ({round(self.bot.latency * 1000)} ms)",
            ephemeral=True,
        )

    @app_commands.command(name="about", description="Get information about the bot.")
    @tracer.wrap(name="interaction", resource="about")
    async def about(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        embed = Embed(title="Crossroads")
        embed.add_field(name="Version", value=__version__)
        embed.add_field(name="Author", value="The Crossroads Inn staff")
        embed.description = (
            "_Signups and rosters for Guild Wars 2 trainings._\n"
            "\n"
            "Use `/register` once, then `/join` a training or use the buttons on the "
            "signup board."
        )
        embed.color = Color(settings.INFO_EMBED_COLOR)
        await safe_send_channel(interaction, embed=embed, ephemeral=True)


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(AboutCog(bot), guild=settings.GUILD_OBJECT)
