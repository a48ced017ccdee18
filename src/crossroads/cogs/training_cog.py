import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import app_commands
from discord.app_commands import Choice
from discord.ext import commands

from crossroads.actions import TrainingAction
from crossroads.enums import TrainingState
from crossroads.metrics import add_span_context
from crossroads.operations import safe_defer_interaction
from crossroads.settings import settings
from crossroads.utils import for_all_callbacks, is_guild, is_squadmaker

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)

STATE_CHOICES = [Choice(name=str(state), value=state.value) for state in TrainingState]


@for_all_callbacks(app_commands.check(is_squadmaker))
@for_all_callbacks(app_commands.check(is_guild))
class TrainingCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    training_group = app_commands.Group(name="training", description="Manage trainings.")

    @training_group.command(name="add", description="Create a new training, in your DMs.")
    @tracer.wrap(name="interaction", resource="training_add")
    async def add(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.add()

    @training_group.command(name="state", description="Move a training to another state.")
    @app_commands.describe(training_id="The id of the training")
    @app_commands.describe(state="The new state of the training")
    @app_commands.choices(state=STATE_CHOICES)
    @tracer.wrap(name="interaction", resource="training_state")
    async def state(self, interaction: discord.Interaction, training_id: int, state: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.set_state(training_id, TrainingState(state))

    @training_group.command(name="show", description="Show the details of a training.")
    @app_commands.describe(training_id="The id of the training")
    @tracer.wrap(name="interaction", resource="training_show")
    async def show(self, interaction: discord.Interaction, training_id: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.show(training_id)

    @training_group.command(name="list", description="List trainings.")
    @app_commands.describe(state="Only list trainings in this state")
    @app_commands.choices(state=STATE_CHOICES)
    @tracer.wrap(name="interaction", resource="training_list")
    async def list_trainings(
        self,
        interaction: discord.Interaction,
        state: int | None = None,
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.list_trainings(TrainingState(state) if state is not None else None)

    @training_group.command(name="tier", description="Set or clear the tier of a training.")
    @app_commands.describe(training_id="The id of the training")
    @app_commands.describe(tier="Name of the required tier, leave blank to clear it")
    @tracer.wrap(name="interaction", resource="training_tier")
    async def tier(
        self,
        interaction: discord.Interaction,
        training_id: int,
        tier: str | None = None,
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.set_tier(training_id, tier)

    @training_group.command(name="signups", description="List who signed up for a training.")
    @app_commands.describe(training_id="The id of the training")
    @tracer.wrap(name="interaction", resource="training_signups")
    async def signups(self, interaction: discord.Interaction, training_id: int) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TrainingAction.create(self.bot, interaction) as action:
            await action.signups(training_id)


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(TrainingCog(bot), guild=settings.GUILD_OBJECT)
