from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, NoReturn, Self

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer

from crossroads.conversation import UNEXPECTED_ERROR_MESSAGE, Conversation
from crossroads.database import DatabaseSession, db_session_manager
from crossroads.errors import (
    CanceledError,
    CrossroadsError,
    NotRegisteredError,
    SignupBoardError,
    TimedOutError,
)
from crossroads.metrics import alert_error, setup_ignored_errors
from crossroads.services import ServicesRegistry
from crossroads.utils import reply_ephemeral

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    import discord

    from crossroads import CrossroadsBot
    from crossroads.models import UserDict

logger = logging.getLogger(__name__)

CHECK_DMS_MESSAGE = "Check your DMs"
SUCCESS = "Success"


@sync_to_async()
def handle_exception(ex: Exception) -> NoReturn:
    if isinstance(ex, CrossroadsError):
        raise ex
    logger.exception(
        "error: rolling back database session due to unhandled exception: %s: %s",
        ex.__class__.__name__,
        ex,
    )
    alert_error("unhandled exception", f"{ex.__class__.__name__}: {ex}")
    DatabaseSession.rollback()
    raise ex


class BaseAction:
    bot: CrossroadsBot
    services: ServicesRegistry
    interaction: discord.Interaction
    user: discord.User | discord.Member

    def __init__(self, bot: CrossroadsBot, interaction: discord.Interaction) -> None:
        self.bot = bot
        self.services = ServicesRegistry()
        self.interaction = interaction
        self.user = interaction.user

    @classmethod
    @asynccontextmanager
    async def create(
        cls,
        bot: CrossroadsBot,
        interaction: discord.Interaction,
    ) -> AsyncGenerator[Self, None]:
        action = cls(bot, interaction)
        with tracer.trace(name=f"crossroads.interactions.{cls.__name__}.create") as span:
            setup_ignored_errors(span)
            async with db_session_manager():
                try:
                    yield action
                except Exception as ex:
                    await handle_exception(ex)

    async def reply(self, content: str | None = None, **kwargs: object) -> None:
        await reply_ephemeral(self.interaction, content, **kwargs)

    async def registered_user(self) -> UserDict:
        user = await self.services.users.select(self.user.id)
        if user is None:
            raise NotRegisteredError
        return user

    async def refresh_board(self, training_id: int) -> None:
        try:
            await self.bot.signup_board.update_training(training_id)
        except SignupBoardError as ex:
            logger.warning("could not refresh training %s on the signup board: %s", training_id, ex)

    @asynccontextmanager
    async def flow(self, command: str) -> AsyncGenerator[None, None]:
        """
        Post a flow that ends in an error to the log channel, then re-raise the error.

        Failed preconditions and conversations that could not be set up are posted
        with their message, anything unexpected with the apology the user got.
        """
        try:
            yield
        except CrossroadsError as ex:
            await self.bot.log_result(self.user, command, str(ex), failed=True)
            raise
        except Exception:
            await self.bot.log_result(self.user, command, UNEXPECTED_ERROR_MESSAGE, failed=True)
            raise

    async def converse(
        self,
        command: str,
        dialog: Callable[[Conversation], Awaitable[str]],
    ) -> str | None:
        """
        Run a dialog with the invoking user in their DMs.

        The dialog returns the result to report, which is posted to the log channel
        together with the command. A timed out or canceled dialog is reported the
        same way and gives None. Errors setting up the conversation propagate to
        the interaction's error handler.
        """
        try:
            async with Conversation.start(self.bot, self.user) as conversation:
                await self.reply(CHECK_DMS_MESSAGE)
                result = await dialog(conversation)
        except (TimedOutError, CanceledError) as ex:
            await self.bot.log_result(self.user, command, str(ex), failed=True)
            return None
        await self.bot.log_result(self.user, command, result, failed=result != SUCCESS)
        return result
