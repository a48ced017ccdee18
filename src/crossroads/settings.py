from __future__ import annotations

from os import getenv
from typing import TYPE_CHECKING

from discord import Object

from .environment import running_in_pytest

if TYPE_CHECKING:
    from discord.abc import Snowflake


def getenv_int(name: str, default: int | None = None) -> int | None:
    value = getenv(name)
    if not value:
        return default
    return int(value)


class Settings:
    __slots__ = (
        "ADMIN_ROLE_ID",
        "BOARD_EMBED_COLOR",
        "BOT_APPLICATION_ID",
        "BOT_TOKEN",
        "CLOSED_EMBED_COLOR",
        "DATABASE_ECHO",
        "DATABASE_URL",
        "DD_API_KEY",
        "DD_APP_KEY",
        "DD_TRACE_ENABLED",
        "DEBUG_GUILD",
        "DIALOG_TIMEOUT_S",
        "EMOJI_GUILD_ID",
        "ERROR_EMBED_COLOR",
        "HOST",
        "INFO_EMBED_COLOR",
        "MAIN_GUILD_ID",
        "OWNER_XID",
        "REDIS_URL",
        "SQUADMAKER_ROLE_ID",
        "STARTED_EMBED_COLOR",
    )

    def __init__(self) -> None:
        # application
        self.BOT_TOKEN = getenv("BOT_TOKEN") or getenv("DISCORD_TOKEN")
        self.BOT_APPLICATION_ID = getenv("BOT_APPLICATION_ID") or getenv("APPLICATION_ID")
        self.HOST = getenv("HOST") or "localhost"
        self.DEBUG_GUILD = getenv("DEBUG_GUILD")
        self.OWNER_XID = getenv("OWNER_XID")

        # discord ids
        self.MAIN_GUILD_ID = getenv_int("MAIN_GUILD_ID", 0)
        self.EMOJI_GUILD_ID = getenv_int("EMOJI_GUILD_ID", 0)
        self.ADMIN_ROLE_ID = getenv_int("ADMIN_ROLE_ID", 0)
        self.SQUADMAKER_ROLE_ID = getenv_int("SQUADMAKER_ROLE_ID", 0)

        # datadog
        self.DD_API_KEY = getenv("DD_API_KEY")
        self.DD_APP_KEY = getenv("DD_APP_KEY")
        self.DD_TRACE_ENABLED = getenv("DD_TRACE_ENABLED", "true").lower() == "true"

        # database
        default_database_url = f"postgresql://postgres@{self.HOST}:5432/crossroads"
        if running_in_pytest():  # pragma: no cover
            default_database_url += "-test"
        database_url = getenv("DATABASE_URL") or default_database_url
        if database_url.startswith("postgres://"):  # pragma: no cover
            # SQLAlchemy 1.4.x removed support for the postgres:// URI scheme
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        if database_url.startswith("postgresql://"):  # pragma: no cover
            # Ensure that we're asking for the psycopg3+ driver (and not psycopg2)
            database_url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.DATABASE_URL = database_url
        self.DATABASE_ECHO = getenv("DATABASE_ECHO", "false").lower() == "true"

        # cache
        self.REDIS_URL = getenv("REDIS_URL")

        # conversations
        self.DIALOG_TIMEOUT_S = float(getenv("DIALOG_TIMEOUT_S", "180"))  # 3 minutes

        # embeds
        self.INFO_EMBED_COLOR = 0x5A3EFD
        self.BOARD_EMBED_COLOR = 0x2ECC71
        self.CLOSED_EMBED_COLOR = 0xCDCDCD
        self.STARTED_EMBED_COLOR = 0xF8AE4A
        self.ERROR_EMBED_COLOR = 0xE74C3C

    @property
    def GUILD_OBJECT(self) -> Snowflake | None:
        return Object(id=self.DEBUG_GUILD) if self.DEBUG_GUILD else None


settings = Settings()
