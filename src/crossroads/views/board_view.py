from __future__ import annotations

import discord
from ddtrace.trace import tracer
from discord import ui

from crossroads.metrics import add_span_context, add_span_kv
from crossroads.operations import safe_defer_interaction
from crossroads.utils import reply_ephemeral

from . import BaseView

UNKNOWN_TRAINING = "This message does not belong to any training."


class SignupBoardView(BaseView):
    """Buttons shown on the signup board message of an open training."""

    async def _training_id(self, interaction: discord.Interaction) -> int | None:
        training_id = self.bot.signup_board.training_id_for(interaction.message)
        if training_id is None:
            await reply_ephemeral(interaction, UNKNOWN_TRAINING)
        else:
            add_span_kv("training_id", training_id)
        return training_id

    @ui.button(
        custom_id="board:join",
        emoji="✍",
        label="Join",
        style=discord.ButtonStyle.green,
    )
    async def join(
        self,
        interaction: discord.Interaction,
        button: ui.Button[SignupBoardView],
    ) -> None:
        from crossroads.actions import SignupAction

        with tracer.trace(name="interaction", resource="board_join"):
            add_span_context(interaction)
            if not await safe_defer_interaction(interaction, ephemeral=True):
                return
            if (training_id := await self._training_id(interaction)) is None:
                return
            async with SignupAction.create(self.bot, interaction) as action:
                await action.join(training_id)

    @ui.button(
        custom_id="board:edit",
        emoji="📝",
        label="Edit",
        style=discord.ButtonStyle.blurple,
    )
    async def edit(
        self,
        interaction: discord.Interaction,
        button: ui.Button[SignupBoardView],
    ) -> None:
        from crossroads.actions import SignupAction

        with tracer.trace(name="interaction", resource="board_edit"):
            add_span_context(interaction)
            if not await safe_defer_interaction(interaction, ephemeral=True):
                return
            if (training_id := await self._training_id(interaction)) is None:
                return
            async with SignupAction.create(self.bot, interaction) as action:
                await action.edit(training_id)

    @ui.button(
        custom_id="board:leave",
        emoji="🚫",
        label="Leave",
        style=discord.ButtonStyle.gray,
    )
    async def leave(
        self,
        interaction: discord.Interaction,
        button: ui.Button[SignupBoardView],
    ) -> None:
        from crossroads.actions import SignupAction

        with tracer.trace(name="interaction", resource="board_leave"):
            add_span_context(interaction)
            if not await safe_defer_interaction(interaction, ephemeral=True):
                return
            if (training_id := await self._training_id(interaction)) is None:
                return
            async with SignupAction.create(self.bot, interaction) as action:
                await action.leave(training_id)
