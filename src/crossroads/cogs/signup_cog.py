import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import app_commands
from discord.ext import commands

from crossroads.actions import SignupAction
from crossroads.metrics import add_span_context
from crossroads.operations import safe_defer_interaction
from crossroads.settings import settings

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


class SignupCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    @app_commands.command(name="register", description="Register your Guild Wars 2 account.")
    @app_commands.describe(gw2_id="Your account name, for example Name.1234")
    @tracer.wrap(name="interaction", resource="register")
    async def register(self, interaction: discord.Interaction, gw2_id: str) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with SignupAction.create(self.bot, interaction) as action:
            await action.register(gw2_id)

    @app_commands.command(name="join", description="Sign up for a training.")
    @app_commands.describe(training_id="The id of the training to join")
    @tracer.wrap(name="interaction", resource="join")
    async def join(self, interaction: discord.Interaction, training_id: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with SignupAction.create(self.bot, interaction) as action:
            await action.join(training_id)

    @app_commands.command(name="edit", description="Change the roles of one of your signups.")
    @app_commands.describe(training_id="The id of the training you signed up for")
    @tracer.wrap(name="interaction", resource="edit")
    async def edit(self, interaction: discord.Interaction, training_id: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with SignupAction.create(self.bot, interaction) as action:
            await action.edit(training_id)

    @app_commands.command(name="leave", description="Remove one of your signups.")
    @app_commands.describe(training_id="The id of the training to leave")
    @tracer.wrap(name="interaction", resource="leave")
    async def leave(self, interaction: discord.Interaction, training_id: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with SignupAction.create(self.bot, interaction) as action:
            await action.leave(training_id)

    @app_commands.command(name="list", description="List the trainings you are signed up for.")
    @tracer.wrap(name="interaction", resource="list")
    async def list_signups(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with SignupAction.create(self.bot, interaction) as action:
            await action.list_signups()


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(SignupCog(bot), guild=settings.GUILD_OBJECT)
