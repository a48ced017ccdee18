import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import app_commands
from discord.ext import commands

from crossroads.actions import TierAction
from crossroads.metrics import add_span_context
from crossroads.operations import safe_defer_interaction
from crossroads.settings import settings
from crossroads.utils import for_all_callbacks, is_admin, is_guild

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


@for_all_callbacks(app_commands.check(is_admin))
@for_all_callbacks(app_commands.check(is_guild))
class TierCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    tier_group = app_commands.Group(name="tier", description="Manage training tiers.")

    @tier_group.command(name="add", description="Create a tier.")
    @app_commands.describe(name="Name of the tier")
    @tracer.wrap(name="interaction", resource="tier_add")
    async def add(self, interaction: discord.Interaction, name: str) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TierAction.create(self.bot, interaction) as action:
            await action.add(name.strip())

    @tier_group.command(name="remove", description="Delete a tier.")
    @app_commands.describe(name="Name of the tier")
    @tracer.wrap(name="interaction", resource="tier_remove")
    async def remove(self, interaction: discord.Interaction, name: str) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TierAction.create(self.bot, interaction) as action:
            await action.remove(name.strip())

    @tier_group.command(name="list", description="List the tiers and the roles fulfilling them.")
    @tracer.wrap(name="interaction", resource="tier_list")
    async def list_tiers(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TierAction.create(self.bot, interaction) as action:
            await action.list_tiers()

    @tier_group.command(name="grant", description="Let members with a role fulfill a tier.")
    @app_commands.describe(name="Name of the tier")
    @app_commands.describe(role="Discord role that fulfills the tier")
    @tracer.wrap(name="interaction", resource="tier_grant")
    async def grant(
        self,
        interaction: discord.Interaction,
        name: str,
        role: discord.Role,
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TierAction.create(self.bot, interaction) as action:
            await action.grant(name.strip(), role)

    @tier_group.command(name="revoke", description="Stop a role from fulfilling a tier.")
    @app_commands.describe(name="Name of the tier")
    @app_commands.describe(role="Discord role that no longer fulfills the tier")
    @tracer.wrap(name="interaction", resource="tier_revoke")
    async def revoke(
        self,
        interaction: discord.Interaction,
        name: str,
        role: discord.Role,
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with TierAction.create(self.bot, interaction) as action:
            await action.revoke(name.strip(), role)


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(TierCog(bot), guild=settings.GUILD_OBJECT)
