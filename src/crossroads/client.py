from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import discord
from cachetools import TTLCache
from ddtrace.trace import tracer
from discord.ext.commands import AutoShardedBot, CommandError, CommandNotFound, Context

from .conversation import ConversationLocks
from .database import db_session_manager, initialize_connection
from .embeds import log_embed
from .metrics import setup_metrics
from .models.config import LOG_CHANNEL_KEY
from .operations import safe_channel_reply, safe_fetch_text_channel
from .services import ServicesRegistry
from .settings import settings
from .signup_board import SignupBoard

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


logger = logging.getLogger(__name__)

# Disable pointless nacl warning log coming from discord.py.
if hasattr(discord.VoiceClient, "warn_nacl"):  # pragma: no cover
    discord.VoiceClient.warn_nacl = False


class CrossroadsBot(AutoShardedBot):
    def __init__(self, create_connection: bool = True) -> None:
        intents = discord.Intents().default()
        intents.members = True
        intents.message_content = True
        intents.messages = True
        intents.reactions = True
        logger.info("intents.value: %s", intents.value)
        kwargs = {}
        if settings.BOT_APPLICATION_ID is not None:
            kwargs["application_id"] = int(settings.BOT_APPLICATION_ID)
        if settings.OWNER_XID:
            kwargs["owner_id"] = int(settings.OWNER_XID)
        super().__init__(command_prefix="!", help_command=None, intents=intents, **kwargs)
        self.create_connection = create_connection
        self.conversations = ConversationLocks()
        self.signup_board = SignupBoard(self)
        self.training_locks = TTLCache[int, asyncio.Lock](maxsize=100, ttl=3600)  # 1 hr
        self.log_channel_xid: int | None = None

    async def on_ready(self) -> None:  # pragma: no cover
        logger.info("client ready")
        async with db_session_manager():
            await self.load_config()
            posted = await self.signup_board.reset()
            logger.info("signup board reset with %s trainings", posted)

    async def on_shard_ready(self, shard_id: int) -> None:  # pragma: no cover
        logger.info("shard %s ready", shard_id)

    async def setup_hook(self) -> None:  # pragma: no cover
        # Note: In tests we create the connection using fixtures.
        if self.create_connection:  # pragma: no cover
            logger.info("initializing database connection...")
            await initialize_connection("crossroads-bot")

        # register persistent views
        from .views import SignupBoardView

        self.add_view(SignupBoardView(self))

        # load all cog extensions and application commands
        from .utils import load_extensions

        await load_extensions(self)

    async def close(self) -> None:
        self.conversations.clear()
        self.signup_board.cache.clear()
        await super().close()

    async def load_config(self) -> None:
        services = ServicesRegistry()
        value = await services.configs.load(LOG_CHANNEL_KEY)
        self.log_channel_xid = int(value) if value else None

    @asynccontextmanager
    async def training_lock(self, training_id: int) -> AsyncGenerator[None, None]:
        if not self.training_locks.get(training_id):
            self.training_locks[training_id] = asyncio.Lock()
        async with self.training_locks[training_id]:
            yield

    @tracer.wrap()
    async def log_result(
        self,
        user: discord.User | discord.Member,
        command: str,
        result: str,
        *,
        failed: bool = False,
    ) -> None:
        """Post the outcome of a command to the log channel, if there is one."""
        if not self.log_channel_xid:
            return
        channel = await safe_fetch_text_channel(self, settings.MAIN_GUILD_ID, self.log_channel_xid)
        if channel is None:
            logger.warning("log channel %s is not a text channel I can see", self.log_channel_xid)
            return
        await safe_channel_reply(channel, embed=log_embed(user, command, result, failed=failed))

    async def on_command_error(
        self,
        context: Context[CrossroadsBot],
        exception: CommandError,
    ) -> None:
        if isinstance(exception, CommandNotFound):
            return None
        return await super().on_command_error(context, exception)


def build_bot(create_connection: bool = True) -> CrossroadsBot:
    bot = CrossroadsBot(create_connection=create_connection)
    setup_metrics()
    return bot
