"""
The signup board.

Every training that is Open, Closed or Started gets one message, in a channel
named after the training's date, under the category configured as the signup
board. The message's embed description carries the training id (as a spoiler)
so that the message can be found again after a restart.

The in-memory cache of message ids to trainings only saves the channel scan on
button clicks, the trainings table stays authoritative. Calling `reset()`
rebuilds the whole board from it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer

from .embeds import parse_board_description, training_embed
from .enums import BOARD_STATES, TrainingState
from .errors import SignupBoardError
from .models.config import SIGNUP_BOARD_KEY
from .operations import (
    safe_channel_history,
    safe_channel_reply,
    safe_create_text_channel,
    safe_delete_channel,
    safe_delete_message,
    safe_fetch_guild,
    safe_update_embed,
)
from .services import ServicesRegistry
from .settings import settings
from .utils import bot_can_read

if TYPE_CHECKING:
    from datetime import datetime

    from .client import CrossroadsBot
    from .models import TrainingDict

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


def board_channel_name(date: datetime) -> str:
    """Name of the channel holding the trainings of a day, like sat-24-apr-1982."""
    return f"{date:%a}-{date.day}-{date:%b}-{date.year}".replace(" ", "").lower()


class SignupBoard:
    def __init__(self, bot: CrossroadsBot) -> None:
        self.bot = bot
        self.cache: dict[int, TrainingDict] = {}

    def training_id_for(self, message: discord.Message | None) -> int | None:
        if message is None:
            return None
        if cached := self.cache.get(message.id):
            return cached["id"]
        for embed in message.embeds:
            if (training_id := parse_board_description(embed.description)) is not None:
                return training_id
        return None

    async def category(self, services: ServicesRegistry) -> discord.CategoryChannel | None:
        value = await services.configs.load(SIGNUP_BOARD_KEY)
        if value is None:
            return None
        guild = await safe_fetch_guild(self.bot, settings.MAIN_GUILD_ID)
        if guild is None:
            return None
        channel = guild.get_channel(int(value))
        if not isinstance(channel, discord.CategoryChannel):
            logger.warning("signup board category %s not found in main guild", value)
            return None
        return channel

    async def _date_channel(
        self,
        category: discord.CategoryChannel,
        date: datetime,
        *,
        create: bool,
    ) -> discord.TextChannel | None:
        name = board_channel_name(date)
        for channel in category.text_channels:
            if channel.name == name:
                return channel
        if not create:
            return None
        return await safe_create_text_channel(
            category.guild,
            name,
            category=category,
            topic=f"Trainings on {date:%A, %d %B %Y}",
        )

    async def _board_messages(
        self,
        channel: discord.TextChannel,
    ) -> list[tuple[int, discord.Message]]:
        found: list[tuple[int, discord.Message]] = []
        for message in await safe_channel_history(channel, limit=HISTORY_LIMIT):
            for embed in message.embeds:
                if (training_id := parse_board_description(embed.description)) is not None:
                    found.append((training_id, message))
                    break
        return found

    async def _embed(self, services: ServicesRegistry, training: TrainingDict) -> discord.Embed:
        roles = await services.trainings.roles(training["id"])
        role_counts = await services.trainings.role_counts(training["id"])
        signup_count = await services.trainings.signup_count(training["id"])
        tier = await services.tiers.select(training["tier_id"]) if training["tier_id"] else None
        return training_embed(
            training,
            roles,
            role_counts=role_counts,
            signup_count=signup_count,
            tier=tier,
        )

    @tracer.wrap()
    async def update_training(self, training_id: int) -> discord.Message | None:
        """
        Post or refresh the board message of the given training.

        Raises SignupBoardError, without touching any message, when the training
        does not exist or is not in a state that belongs on the board, and when
        its date channel can not be read since its message could not be found
        again. Returns None when no signup board is configured.
        """
        services = ServicesRegistry()
        training = await services.trainings.select(training_id)
        if training is None:
            raise SignupBoardError(f"No training found with id {training_id}")
        state = TrainingState(training["state"])
        if not state.on_board:
            raise SignupBoardError(f"Training {training_id} is {state} and not on the signup board")

        if (category := await self.category(services)) is None:
            logger.info("no signup board configured, not posting training %s", training_id)
            return None

        from .views import SignupBoardView

        async with self.bot.training_lock(training_id):
            channel = await self._date_channel(category, training["date"], create=True)
            if channel is None:
                raise SignupBoardError(
                    f"Unable to create the board channel for training {training_id}",
                )
            if not bot_can_read(channel):
                raise SignupBoardError(
                    f"Unable to read the board channel of training {training_id}",
                )

            embed = await self._embed(services, training)
            view = SignupBoardView(self.bot) if state == TrainingState.OPEN else None
            board_messages = await self._board_messages(channel)
            existing = next((m for tid, m in board_messages if tid == training_id), None)
            if existing is not None:
                message = await safe_update_embed(existing, embed=embed, view=view)
            else:
                message = await safe_channel_reply(channel, embed=embed, view=view)
            if message is not None:
                self.cache[message.id] = training
        return message

    @tracer.wrap()
    async def remove_training(self, training_id: int) -> bool:
        """Take the given training off the board, dropping its channel once empty."""
        services = ServicesRegistry()
        for message_xid in [xid for xid, data in self.cache.items() if data["id"] == training_id]:
            del self.cache[message_xid]

        training = await services.trainings.select(training_id)
        if training is None or (category := await self.category(services)) is None:
            return False

        removed = False
        async with self.bot.training_lock(training_id):
            channel = await self._date_channel(category, training["date"], create=False)
            if channel is None:
                return False
            remaining = 0
            for tid, message in await self._board_messages(channel):
                if tid == training_id:
                    removed = await safe_delete_message(message) or removed
                else:
                    remaining += 1
            if remaining == 0:
                await safe_delete_channel(channel, category.guild.id)
        return removed

    @tracer.wrap()
    async def reset(self) -> int:
        """Rebuild the board from scratch, returns how many trainings were posted."""
        self.cache.clear()
        services = ServicesRegistry()
        if (category := await self.category(services)) is None:
            return 0

        for channel in category.text_channels:
            await safe_delete_channel(channel, category.guild.id)

        posted = 0
        for training in await services.trainings.by_state(*BOARD_STATES):
            try:
                if await self.update_training(training["id"]) is not None:
                    posted += 1
            except SignupBoardError:
                logger.warning("could not post training %s to the signup board", training["id"])
        return posted
