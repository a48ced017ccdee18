import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer
from discord import app_commands
from discord.ext import commands

from crossroads.actions import RoleAction
from crossroads.metrics import add_span_context
from crossroads.operations import safe_defer_interaction
from crossroads.settings import settings
from crossroads.utils import for_all_callbacks, is_admin, is_guild

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


@for_all_callbacks(app_commands.check(is_admin))
@for_all_callbacks(app_commands.check(is_guild))
class RoleCog(commands.Cog):
    def __init__(self, bot: "CrossroadsBot") -> None:
        self.bot = bot

    role_group = app_commands.Group(name="role", description="Manage training roles.")

    @role_group.command(name="add", description="Create a role, you pick its emoji in your DMs.")
    @app_commands.describe(title="Display name of the role, like Healer")
    @app_commands.describe(repr="Short unique name of the role, like heal")
    @tracer.wrap(name="interaction", resource="role_add")
    async def add(
        self,
        interaction: discord.Interaction,
        title: str,
        repr: str,  # noqa: A002
    ) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with RoleAction.create(self.bot, interaction) as action:
            await action.add(title.strip(), repr.strip().lower())

    @role_group.command(name="remove", description="Remove a role from future trainings.")
    @app_commands.describe(repr="Short name of the role")
    @tracer.wrap(name="interaction", resource="role_remove")
    async def remove(self, interaction: discord.Interaction, repr: str) -> None:  # noqa: A002
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with RoleAction.create(self.bot, interaction) as action:
            await action.remove(repr.strip().lower())

    @role_group.command(name="list", description="List the available roles.")
    @tracer.wrap(name="interaction", resource="role_list")
    async def list_roles(self, interaction: discord.Interaction) -> None:
        add_span_context(interaction)
        if not await safe_defer_interaction(interaction, ephemeral=True):
            return
        async with RoleAction.create(self.bot, interaction) as action:
            await action.list_roles()


async def setup(bot: "CrossroadsBot") -> None:  # pragma: no cover
    await bot.add_cog(RoleCog(bot), guild=settings.GUILD_OBJECT)
