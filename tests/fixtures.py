from __future__ import annotations

import asyncio
import contextvars
import logging
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from click.testing import CliRunner
from discord.ext import commands

from crossroads.client import build_bot
from crossroads.database import (
    DatabaseSession,
    db_session_maker,
    initialize_connection,
    rollback_transaction,
)
from crossroads.settings import Settings
from tests.factories import (
    ConfigFactory,
    RoleFactory,
    SignupFactory,
    TierFactory,
    TierMappingFactory,
    TrainingFactory,
    UserFactory,
)
from tests.mocks import (
    FakeGateway,
    build_author,
    build_channel,
    build_guild,
    build_interaction,
    build_message,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    import discord

    from crossroads import CrossroadsBot

logger = logging.getLogger(__name__)


class Factories:
    config = ConfigFactory
    role = RoleFactory
    signup = SignupFactory
    tier = TierFactory
    tier_mapping = TierMappingFactory
    training = TrainingFactory
    user = UserFactory


ALL_FACTORIES = (
    ConfigFactory,
    RoleFactory,
    SignupFactory,
    TierFactory,
    TierMappingFactory,
    TrainingFactory,
    UserFactory,
)


@pytest_asyncio.fixture()
async def factories() -> Factories:
    return Factories()


@pytest_asyncio.fixture
async def session_context(
    request: pytest.FixtureRequest,
    worker_id: str,
) -> AsyncGenerator[contextvars.Context, None]:
    test_session = None
    if "use_db" in request.keywords:
        await initialize_connection("crossroads-test", use_transaction=True, worker_id=worker_id)

        test_session = db_session_maker()
        DatabaseSession.set(test_session)

        for factory in ALL_FACTORIES:
            factory._meta.sqlalchemy_session = DatabaseSession  # type: ignore

    yield contextvars.copy_context()

    if test_session is not None:
        try:
            test_session.close()
            await rollback_transaction()
        except Exception:  # pragma: no cover
            logger.exception("Error rolling back transaction")


@pytest_asyncio.fixture(autouse=True)
async def use_session_context(
    request: pytest.FixtureRequest,
    session_context: contextvars.Context,
) -> None:
    if "use_db" in request.keywords:
        for cvar in session_context:
            cvar.set(session_context[cvar])


@pytest_asyncio.fixture
async def bot() -> CrossroadsBot:
    # In tests we create the connection using fixtures.
    return build_bot(create_connection=False)


@pytest_asyncio.fixture
async def gateway(bot: CrossroadsBot, monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    # listeners are scheduled on the bot's loop, which is only set once it logs in
    monkeypatch.setattr(bot, "loop", asyncio.get_running_loop())
    return FakeGateway(bot)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def dpy_author() -> discord.User:
    return build_author()


@pytest.fixture
def dpy_guild() -> discord.Guild:
    return build_guild()


@pytest.fixture
def dpy_channel(dpy_guild: discord.Guild) -> discord.TextChannel:
    return build_channel(dpy_guild)


@pytest.fixture
def dpy_message(
    dpy_guild: discord.Guild,
    dpy_channel: discord.TextChannel,
    dpy_author: discord.User,
) -> discord.Message:
    return build_message(dpy_guild, dpy_channel, dpy_author)


@pytest.fixture
def interaction(
    dpy_guild: discord.Guild,
    dpy_channel: discord.TextChannel,
    dpy_author: discord.User,
) -> discord.Interaction:
    return build_interaction(dpy_guild, dpy_channel, dpy_author)


@pytest.fixture
def context(
    dpy_guild: discord.Guild,
    dpy_channel: discord.TextChannel,
    dpy_author: discord.User,
    dpy_message: discord.Message,
) -> commands.Context[CrossroadsBot]:
    stub = AsyncMock(spec=commands.Context)
    stub.guild = dpy_guild
    stub.channel = dpy_channel
    stub.channel_id = dpy_channel.id
    stub.author = dpy_author
    stub.message = dpy_message
    return stub


@pytest.fixture
def cli() -> Generator[MagicMock, None, None]:
    with (
        patch("crossroads.cli.configure_logging") as mock_configure_logging,
        patch("crossroads.cli.hupper") as mock_hupper,
        patch("crossroads.client.build_bot") as mock_build_bot,
        patch("crossroads.cli.settings") as mock_settings,
    ):
        mock_bot = MagicMock(name="bot")
        mock_bot.run = MagicMock(name="run")
        mock_build_bot.return_value = mock_bot
        mock_hupper.start_reloader = MagicMock(name="start_reloader")
        mock_settings.BOT_TOKEN = "facedeadbeef"

        obj = MagicMock()
        obj.build_bot = mock_build_bot
        obj.configure_logging = mock_configure_logging
        obj.hupper = mock_hupper
        obj.settings = mock_settings
        obj.bot = mock_bot
        yield obj


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()
