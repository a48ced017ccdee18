from __future__ import annotations

import asyncio
import logging
import traceback
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, cast

import discord
from ddtrace.constants import ERROR_MSG, ERROR_TYPE
from ddtrace.trace import tracer
from discord.app_commands import AppCommandError, NoPrivateMessage
from discord.app_commands import Command as AppCommand
from discord.ext.commands import AutoShardedBot
from discord.ext.commands import Command as ExtCommand

from .errors import AdminOnlyError, CrossroadsError, GuildOnlyError, SquadmakerOnlyError
from .metrics import add_span_error
from .settings import settings

if TYPE_CHECKING:
    from types import TracebackType

    from discord.abc import MessageableChannel
    from discord.ui import Item


logger = logging.getLogger(__name__)

# Discord API error code indicating that we can not send messages to this user.
CANT_SEND_CODE = 50007

EMBED_DESCRIPTION_SIZE_LIMIT = 4096
EMBED_FIELD_VALUE_SIZE_LIMIT = 1024


def log_warning(log: str, exec_info: bool = False, **kwargs: Any) -> None:
    message = f"warning: discord: {log}"
    logger.warning(message, kwargs, exc_info=exec_info)


def log_info(log: str, exec_info: bool = False, **kwargs: Any) -> None:
    message = f"info: discord: {log}"
    logger.info(message, kwargs, exc_info=exec_info)


def safe_permissions_for(obj: Any, *args: Any) -> discord.Permissions | None:
    try:
        return obj.permissions_for(*args)
    except Exception:
        log_info("failed to get permissions object", exec_info=True)
        return None


def bot_can_manage_channels(guild: discord.Guild) -> bool:
    if not guild.me:
        return False
    perms = guild.me.guild_permissions
    req = "manage_channels"
    return hasattr(perms, req) and getattr(perms, req)


def bot_can_read(channel: MessageableChannel) -> bool:
    if not hasattr(channel, "type"):
        return False
    if channel.type == discord.ChannelType.private:
        return True
    guild_channel = cast("discord.abc.GuildChannel", channel)
    if not hasattr(guild_channel, "guild"):
        return True
    perms = safe_permissions_for(guild_channel, guild_channel.guild.me)
    for req in ("read_messages", "read_message_history"):
        if not hasattr(perms, req) or not getattr(perms, req):
            return False
    return True


def bot_can_send_messages(channel: MessageableChannel) -> bool:
    if not hasattr(channel, "type"):
        return False
    if channel.type == discord.ChannelType.private:
        return True
    guild_channel = cast("discord.abc.GuildChannel", channel)
    if not hasattr(guild_channel, "guild"):
        return False
    perms = safe_permissions_for(guild_channel, guild_channel.guild.me)
    if perms is None:
        return False
    return bool(getattr(perms, "send_messages", False))


def bot_can_delete_channel(channel: MessageableChannel) -> bool:
    if not hasattr(channel, "type") or channel.type == discord.ChannelType.private:
        return False
    guild_channel = cast("discord.abc.GuildChannel", channel)
    if not hasattr(guild_channel, "guild"):
        return False
    perms = safe_permissions_for(guild_channel, guild_channel.guild.me)
    if perms is None:
        return False
    return bool(getattr(perms, "manage_channels", False))


def member_role_ids(user: discord.User | discord.Member | None) -> set[int]:
    roles = getattr(user, "roles", None) or []
    return {role.id for role in cast("list[discord.Role]", roles) if role is not None}


def is_guild(interaction: discord.Interaction) -> bool:
    if getattr(interaction, "guild", None) is None:
        raise GuildOnlyError
    return True


def user_is_admin(user: discord.User | discord.Member | None) -> bool:
    if user is None:
        return False
    guild = getattr(user, "guild", None)
    if guild is not None and user.id == guild.owner_id:
        return True
    perms = getattr(user, "guild_permissions", None)
    if perms is not None and getattr(perms, "administrator", False) is True:
        return True
    return bool(settings.ADMIN_ROLE_ID) and settings.ADMIN_ROLE_ID in member_role_ids(user)


def user_is_squadmaker(user: discord.User | discord.Member | None) -> bool:
    if user_is_admin(user):
        return True
    return bool(settings.SQUADMAKER_ROLE_ID) and settings.SQUADMAKER_ROLE_ID in member_role_ids(
        user,
    )


def is_admin(interaction: discord.Interaction) -> bool:
    if not user_is_admin(interaction.user):
        raise AdminOnlyError
    return True


def is_squadmaker(interaction: discord.Interaction) -> bool:
    if not user_is_squadmaker(interaction.user):
        raise SquadmakerOnlyError
    return True


class suppress(AbstractContextManager[None]):
    """
    Suppresses any exceptions from the given set.

    Logs the given message whenever an exception is suppressed. String interpolation
    parameters should be embedded into the log message as `%(name)s` and provided
    corresponding values via keyword argument. For example:

        with suppress(DiscordException, log="could not edit %(message_xid)s", message_xid=1):
            ...

    Do NOT `return` from within the context of `suppress()`, static analysis tools
    can not tell that the code following the context is reachable.
    """

    __slots__ = ("_exceptions", "_kwargs", "_log")

    def __init__(self, *exceptions: type[Exception], log: str, **kwargs: Any) -> None:
        self._exceptions = exceptions
        self._log = log
        self._kwargs = kwargs

    def __enter__(self) -> None:
        pass

    def __exit__(
        self,
        exctype: type[BaseException] | None,
        excinst: BaseException | None,
        exctb: TracebackType | None,
    ) -> bool:
        if captured := exctype is not None and issubclass(exctype, self._exceptions):
            log_warning(self._log, exec_info=True, **self._kwargs)
            if span := tracer.current_span():  # pragma: no cover
                span.set_exc_info(exctype, excinst, exctb)  # type: ignore
            if root := tracer.current_root_span():  # pragma: no cover
                root.set_tags(
                    {
                        ERROR_TYPE: "OperationalError",
                        ERROR_MSG: "An error occurred during bot operation",
                    },
                )
                root.error = 1
        return captured


def for_all_callbacks(decorator: Any) -> Any:
    def decorate(cls: Any) -> Any:
        for attr in cls.__dict__:
            method = getattr(cls, attr)
            if isinstance(method, AppCommand | ExtCommand):
                setattr(cls, attr, decorator(method))
        return cls

    return decorate


async def reply_ephemeral(
    interaction: discord.Interaction,
    content: str | None = None,
    **kwargs: Any,
) -> None:
    from .operations import safe_followup_channel, safe_send_channel

    if interaction.response.is_done():
        await safe_followup_channel(interaction, content, ephemeral=True, **kwargs)
    else:
        await safe_send_channel(interaction, content, ephemeral=True, **kwargs)


async def handle_interaction_errors(interaction: discord.Interaction, error: Exception) -> None:
    # discord.py wraps exceptions raised by command callbacks
    original = getattr(error, "original", None)
    if isinstance(original, CrossroadsError):
        error = original

    if isinstance(error, CrossroadsError):
        return await reply_ephemeral(interaction, str(error))
    if isinstance(error, NoPrivateMessage):
        return await reply_ephemeral(interaction, "This command is not supported in DMs.")

    add_span_error(error)
    ref = (
        f"command `{interaction.command.qualified_name}`"
        if interaction.command is not None
        else f"interaction `{interaction.id}`"
    )
    logger.error("error: unhandled exception in %s: %s: %s", ref, error.__class__.__name__, error)
    traceback.print_tb(error.__traceback__)
    return None


async def handle_view_errors(
    interaction: discord.Interaction,
    error: Exception,
    item: Item[Any],
) -> None:  # pragma: no cover
    return await handle_interaction_errors(interaction, error)


async def handle_command_errors(
    interaction: discord.Interaction,
    error: AppCommandError,
) -> None:  # pragma: no cover
    return await handle_interaction_errors(interaction, error)


async def load_extensions(bot: AutoShardedBot, do_sync: bool = False) -> None:  # pragma: no cover
    from .cogs import load_all_cogs

    guild = settings.GUILD_OBJECT

    if do_sync:
        if guild:
            logger.info("syncing commands to debug guild: %s", guild.id)
        else:
            logger.info("syncing global commands")

        logger.info("clearing commands...")
        bot.tree.clear_commands(guild=guild)
        await bot.tree.sync(guild=guild)

        logger.info("waiting to avoid rate limit...")
        await asyncio.sleep(1)

    logger.info("loading cogs...")
    await load_all_cogs(bot)
    commands = [c.name for c in bot.tree.get_commands(guild=guild)]
    logger.info("registered commands: %s", ", ".join(commands))

    if do_sync:
        logger.info("syncing commands...")
        await bot.tree.sync(guild=guild)

    bot.tree.on_error = handle_command_errors
