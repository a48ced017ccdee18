from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ddtrace.trace import tracer
from discord.ext import commands

from crossroads.metrics import add_span_context
from crossroads.operations import safe_send_user
from crossroads.settings import settings
from crossroads.utils import for_all_callbacks, load_extensions

if TYPE_CHECKING:
    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


@for_all_callbacks(commands.is_owner())
class OwnerCog(commands.Cog):
    def __init__(self, bot: CrossroadsBot) -> None:
        self.bot = bot

    @commands.command(name="sync")
    @tracer.wrap(name="interaction", resource="sync")
    async def sync(self, ctx: commands.Context[CrossroadsBot]) -> None:
        add_span_context(ctx)
        try:
            await load_extensions(self.bot, do_sync=True)
            names = sorted(c.name for c in self.bot.tree.get_commands(guild=settings.GUILD_OBJECT))
            await safe_send_user(
                ctx.message.author,
                f"Synced {len(names)} commands: {', '.join(names) or 'none'}",
            )
        except Exception as ex:
            await safe_send_user(ctx.message.author, f"Error: {ex}")
            logger.exception("failed to sync commands")
            raise


async def setup(bot: CrossroadsBot) -> None:  # pragma: no cover
    await bot.add_cog(OwnerCog(bot), guild=settings.GUILD_OBJECT)
