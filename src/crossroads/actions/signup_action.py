from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import discord
from ddtrace.trace import tracer

from crossroads.embeds import user_signups_embed
from crossroads.enums import TrainingState
from crossroads.errors import AlreadySignedUpError, CrossroadsError, TierNotFulfilledError
from crossroads.operations import safe_fetch_member
from crossroads.role_select import CANCEL_EMOJI, CONFIRM_EMOJI, await_confirmation, select_roles
from crossroads.settings import settings
from crossroads.utils import member_role_ids

from .base_action import SUCCESS, BaseAction

if TYPE_CHECKING:
    from crossroads.conversation import Conversation
    from crossroads.models import SignupDict, TrainingDict, UserDict

logger = logging.getLogger(__name__)

GW2_ID_PATTERN = re.compile(r"^[A-Za-z ]+\.\d{4}$")


def valid_gw2_id(gw2_id: str) -> bool:
    return GW2_ID_PATTERN.match(gw2_id) is not None


class SignupAction(BaseAction):
    async def open_training(self, training_id: int) -> TrainingDict:
        training = await self.services.trainings.select(training_id, TrainingState.OPEN)
        if training is None:
            raise CrossroadsError(f"No **open** training found with id {training_id}")
        return training

    async def check_tier(self, training: TrainingDict) -> None:
        """Raise unless the user has one of the Discord roles of the training's tier."""
        if not training["tier_id"]:
            return
        tier = await self.services.tiers.select(training["tier_id"])
        if tier is None:
            return
        member = await safe_fetch_member(self.bot, settings.MAIN_GUILD_ID, self.user.id)
        if not set(tier["discord_role_ids"]) & member_role_ids(member):
            raise TierNotFulfilledError

    async def existing_signup(self, user: UserDict, training_id: int) -> SignupDict:
        signup = await self.services.signups.select(user["id"], training_id)
        if signup is None:
            raise CrossroadsError(f"You are not signed up for training {training_id}")
        return signup

    @tracer.wrap()
    async def register(self, gw2_id: str) -> None:
        gw2_id = gw2_id.strip()
        if not valid_gw2_id(gw2_id):
            await self.reply("Invalid GW2 account name, it should look like `Name.1234`")
            return
        user = await self.services.users.upsert(self.user.id, gw2_id)
        await self.reply(f"Registered as `{user['gw2_id']}`")

    @tracer.wrap()
    async def join(self, training_id: int) -> None:
        command = f"join {training_id}"
        async with self.flow(command):
            user = await self.registered_user()
            training = await self.open_training(training_id)
            await self.check_tier(training)
            if await self.services.signups.select(user["id"], training_id) is not None:
                raise AlreadySignedUpError
            roles = await self.services.trainings.roles(training_id)

            async def dialog(conversation: Conversation) -> str:
                selected = await select_roles(
                    conversation,
                    roles,
                    title=f"Join {training['title']}",
                )
                if await self.services.signups.create(user["id"], training_id, selected) is None:
                    await conversation.finish_with_msg(AlreadySignedUpError.default_message)
                    return AlreadySignedUpError.default_message
                await conversation.finish_with_msg(
                    f"You are signed up for **{training['title']}**",
                )
                return SUCCESS

            if await self.converse(command, dialog) == SUCCESS:
                await self.refresh_board(training_id)

    @tracer.wrap()
    async def edit(self, training_id: int) -> None:
        command = f"edit {training_id}"
        async with self.flow(command):
            user = await self.registered_user()
            training = await self.open_training(training_id)
            signup = await self.existing_signup(user, training_id)
            partition = await self.services.signups.role_partition(signup["id"])

            async def dialog(conversation: Conversation) -> str:
                selected = await select_roles(
                    conversation,
                    partition["roles"],
                    partition["selected"],
                    title=f"Edit your signup for {training['title']}",
                )
                await self.services.signups.set_roles(signup["id"], selected)
                await conversation.finish_with_msg(
                    f"Your signup for **{training['title']}** was updated",
                )
                return SUCCESS

            if await self.converse(command, dialog) == SUCCESS:
                await self.refresh_board(training_id)

    @tracer.wrap()
    async def leave(self, training_id: int) -> None:
        command = f"leave {training_id}"
        async with self.flow(command):
            user = await self.registered_user()
            training = await self.open_training(training_id)
            signup = await self.existing_signup(user, training_id)

            async def dialog(conversation: Conversation) -> str:
                await conversation.edit(
                    content=None,
                    embed=discord.Embed(
                        title=f"Leave {training['title']}?",
                        description=(
                            f"{CONFIRM_EMOJI} to remove your signup, {CANCEL_EMOJI} to keep it."
                        ),
                        color=settings.INFO_EMBED_COLOR,
                    ),
                )
                await await_confirmation(conversation)
                await self.services.signups.remove(signup["id"])
                await conversation.finish_with_msg(f"You left **{training['title']}**")
                return SUCCESS

            if await self.converse(command, dialog) == SUCCESS:
                await self.refresh_board(training_id)

    @tracer.wrap()
    async def list_signups(self) -> None:
        user = await self.registered_user()
        signups = await self.services.signups.for_user(user["id"])
        await self.reply(embed=user_signups_embed(signups))
