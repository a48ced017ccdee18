from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from dateutil import parser as date_parser
from ddtrace.trace import tracer

from crossroads.conversation import is_cancel_reply
from crossroads.embeds import roster_embed, training_embed, trainings_list_embed
from crossroads.enums import TrainingState
from crossroads.errors import CanceledError, CrossroadsError, TimedOutError
from crossroads.role_select import select_roles

from .base_action import SUCCESS, BaseAction

if TYPE_CHECKING:
    from crossroads.conversation import Conversation
    from crossroads.models import TrainingDict

logger = logging.getLogger(__name__)

TITLE_PROMPT = "What is the title of the new training? Reply `cancel` at any time to stop."
DATE_PROMPT = (
    "When does **{title}** take place? Reply with a UTC date and time like `2024-05-01 19:30`."
)
BAD_DATE_PROMPT = "I could not read `{text}` as a date. " + DATE_PROMPT


def parse_training_date(text: str) -> datetime | None:
    """Parse a date as given by a user, stored as naive UTC."""
    try:
        date = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    if date.tzinfo is not None:
        date = date.astimezone(UTC).replace(tzinfo=None)
    return date


async def ask(conversation: Conversation, question: str) -> str:
    await conversation.edit(content=question, embed=None)
    reply = await conversation.await_reply()
    if reply is None:
        raise TimedOutError
    if is_cancel_reply(reply):
        raise CanceledError
    return reply.content.strip()


class TrainingAction(BaseAction):
    async def training(self, training_id: int) -> TrainingDict:
        training = await self.services.trainings.select(training_id)
        if training is None:
            raise CrossroadsError(f"No training found with id {training_id}")
        return training

    @tracer.wrap()
    async def add(self) -> None:
        async def dialog(conversation: Conversation) -> str:
            title = ""
            while not title:
                title = await ask(conversation, TITLE_PROMPT)

            question = DATE_PROMPT.format(title=title)
            while True:
                text = await ask(conversation, question)
                if (date := parse_training_date(text)) is not None:
                    break
                question = BAD_DATE_PROMPT.format(text=text, title=title)

            roles = await self.services.roles.active()
            selected = await select_roles(conversation, roles, title=f"Roles for {title}")
            training = await self.services.trainings.create(
                title=title,
                date=date,
                role_ids=sorted(selected),
            )
            await conversation.finish_with_msg(
                f"Created training **{title}** with id {training['id']}. "
                "Use `/training state` to open it for signups.",
            )
            return SUCCESS

        async with self.flow("training add"):
            await self.converse("training add", dialog)

    @tracer.wrap()
    async def set_state(self, training_id: int, state: TrainingState) -> None:
        training = await self.services.trainings.set_state(training_id, state)
        if training is None:
            raise CrossroadsError(f"No training found with id {training_id}")
        if state.on_board:
            await self.refresh_board(training_id)
        else:
            await self.bot.signup_board.remove_training(training_id)
        await self.reply(f"Training **{training['title']}** is now {state.emoji} {state}")
        await self.bot.log_result(self.user, f"training state {training_id} {state}", "Success")

    @tracer.wrap()
    async def show(self, training_id: int) -> None:
        training = await self.training(training_id)
        roles = await self.services.trainings.roles(training_id)
        role_counts = await self.services.trainings.role_counts(training_id)
        signup_count = await self.services.trainings.signup_count(training_id)
        tier_id = training["tier_id"]
        tier = await self.services.tiers.select(tier_id) if tier_id else None
        embed = training_embed(
            training,
            roles,
            role_counts=role_counts,
            signup_count=signup_count,
            tier=tier,
        )
        await self.reply(embed=embed)

    @tracer.wrap()
    async def list_trainings(self, state: TrainingState | None = None) -> None:
        if state is None:
            trainings = await self.services.trainings.by_state()
            title = "Current trainings"
        else:
            trainings = await self.services.trainings.by_state(state)
            title = f"{state} trainings"
        await self.reply(embed=trainings_list_embed(trainings, title=title))

    @tracer.wrap()
    async def set_tier(self, training_id: int, tier_name: str | None = None) -> None:
        tier_id: int | None = None
        if tier_name:
            tier = await self.services.tiers.select_by_name(tier_name)
            if tier is None:
                raise CrossroadsError(f"No tier named `{tier_name}`")
            tier_id = tier["id"]
        training = await self.services.trainings.set_tier(training_id, tier_id)
        if training is None:
            raise CrossroadsError(f"No training found with id {training_id}")
        if TrainingState(training["state"]).on_board:
            await self.refresh_board(training_id)
        if tier_id is None:
            await self.reply(f"Training **{training['title']}** no longer requires a tier")
        else:
            await self.reply(f"Training **{training['title']}** now requires tier `{tier_name}`")

    @tracer.wrap()
    async def signups(self, training_id: int) -> None:
        training = await self.training(training_id)
        roster = await self.services.trainings.roster(training_id)
        await self.reply(embed=roster_embed(training, roster))
