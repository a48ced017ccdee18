from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer

from crossroads.errors import CrossroadsError
from crossroads.settings import settings

from .base_action import BaseAction

if TYPE_CHECKING:
    from crossroads.models import TierDict


class TierAction(BaseAction):
    async def tier(self, name: str) -> TierDict:
        tier = await self.services.tiers.select_by_name(name)
        if tier is None:
            raise CrossroadsError(f"No tier named `{name}`")
        return tier

    @tracer.wrap()
    async def add(self, name: str) -> None:
        if await self.services.tiers.create(name) is None:
            raise CrossroadsError(f"Tier `{name}` already exists")
        await self.reply(f"Created tier `{name}`")

    @tracer.wrap()
    async def remove(self, name: str) -> None:
        if not await self.services.tiers.delete(name):
            raise CrossroadsError(f"No tier named `{name}`")
        await self.reply(f"Removed tier `{name}`")

    @tracer.wrap()
    async def list_tiers(self) -> None:
        tiers = await self.services.tiers.all()
        embed = discord.Embed(title="Tiers", color=settings.INFO_EMBED_COLOR)
        for tier in tiers[:25]:
            mentions = " ".join(f"<@&{role_id}>" for role_id in tier["discord_role_ids"])
            embed.add_field(name=tier["name"], value=mentions or "_No roles_", inline=False)
        if not tiers:
            embed.description = "_No tiers yet_"
        await self.reply(embed=embed)

    @tracer.wrap()
    async def grant(self, name: str, role: discord.Role) -> None:
        tier = await self.tier(name)
        if not await self.services.tiers.add_discord_role(tier["id"], role.id):
            raise CrossroadsError(f"{role.mention} already fulfills tier `{name}`")
        await self.reply(f"{role.mention} now fulfills tier `{name}`")

    @tracer.wrap()
    async def revoke(self, name: str, role: discord.Role) -> None:
        tier = await self.tier(name)
        if not await self.services.tiers.remove_discord_role(tier["id"], role.id):
            raise CrossroadsError(f"{role.mention} does not fulfill tier `{name}`")
        await self.reply(f"{role.mention} no longer fulfills tier `{name}`")
