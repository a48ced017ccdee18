from __future__ import annotations

import logging
from asyncio import sleep
from typing import TYPE_CHECKING, Any

import discord
from aiohttp.client_exceptions import ClientOSError
from ddtrace.trace import tracer
from discord.errors import DiscordException, NotFound
from discord.utils import MISSING
from redis import asyncio as aioredis

from .metrics import add_span_error
from .settings import settings
from .utils import (
    CANT_SEND_CODE,
    bot_can_delete_channel,
    bot_can_manage_channels,
    bot_can_read,
    bot_can_send_messages,
    log_info,
    log_warning,
    suppress,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)
BAD_USER_EXPIRATION = 60 * 60 * 24  # 1 day


@tracer.wrap()
async def mark_bad_user(user_xid: int) -> None:
    if not settings.REDIS_URL:
        return

    redis = await aioredis.from_url(settings.REDIS_URL)
    key = f"bad_user:{user_xid}"

    try:
        await redis.set(key, 1, ex=BAD_USER_EXPIRATION)
    except Exception:
        logger.warning("redis error bad user cache", exc_info=True)


@tracer.wrap()
async def is_bad_user(user_xid: int | None) -> bool:
    if not settings.REDIS_URL or not user_xid:
        return False

    redis = await aioredis.from_url(settings.REDIS_URL)
    key = f"bad_user:{user_xid}"

    try:
        return bool(await redis.exists(key))
    except Exception:
        logger.warning("redis error bad user cache", exc_info=True)
    return False


@tracer.wrap()
async def retry(func: Callable[[], Awaitable[Any]]) -> Any:
    times = 0
    while True:
        try:
            times += 1
            return await func()
        except ClientOSError:
            if times > 3:
                raise
            await sleep(times / 100)  # 10ms, 20ms, 30ms, etc.


@tracer.wrap()
async def safe_defer_interaction(
    interaction: discord.Interaction,
    *,
    ephemeral: bool = False,
) -> bool:
    rvalue = False
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="could not defer interaction for user %(user_xid)s",
        user_xid=interaction.user.id,
    ):
        await retry(lambda: interaction.response.defer(ephemeral=ephemeral, thinking=ephemeral))
        rvalue = True
    return rvalue


@tracer.wrap()
async def safe_fetch_guild(client: discord.Client, guild_xid: int) -> discord.Guild | None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild_xid)})

    guild: discord.Guild | None
    if guild := client.get_guild(guild_xid):
        return guild

    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="could not fetch guild %(guild_xid)s",
        guild_xid=guild_xid,
    ):
        guild = await retry(lambda: client.fetch_guild(guild_xid))
    return guild


@tracer.wrap()
async def safe_fetch_member(
    client: discord.Client,
    guild_xid: int,
    user_xid: int,
) -> discord.Member | None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild_xid), "user_xid": str(user_xid)})

    if not (guild := await safe_fetch_guild(client, guild_xid)):
        return None

    member: discord.Member | None
    if member := guild.get_member(user_xid):
        return member

    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="in guild %(guild_xid)s, could not fetch member %(user_xid)s",
        guild_xid=guild_xid,
        user_xid=user_xid,
    ):
        member = await retry(lambda: guild.fetch_member(user_xid))
    return member


@tracer.wrap()
async def safe_fetch_text_channel(
    client: discord.Client,
    guild_xid: int,
    channel_xid: int,
) -> discord.TextChannel | None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild_xid), "channel_xid": str(channel_xid)})

    if got := client.get_channel(channel_xid):
        return got if isinstance(got, discord.TextChannel) else None

    channel: discord.TextChannel | None = None
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="in guild %(guild_xid)s, could not fetch channel %(channel_xid)s",
        guild_xid=guild_xid,
        channel_xid=channel_xid,
    ):
        fetched = await retry(lambda: client.fetch_channel(channel_xid))
        if isinstance(fetched, discord.TextChannel):
            channel = fetched
    return channel


@tracer.wrap()
async def safe_channel_history(
    channel: discord.TextChannel,
    limit: int = 100,
) -> list[discord.Message]:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"channel_xid": str(channel.id), "limit": str(limit)})

    if not bot_can_read(channel):
        log_info("could not read history of channel %(channel_xid)s", channel_xid=channel.id)
        return []

    messages: list[discord.Message] = []
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="could not read history of channel %(channel_xid)s",
        channel_xid=channel.id,
    ):
        messages = [message async for message in channel.history(limit=limit)]
    return messages


@tracer.wrap()
async def safe_create_text_channel(
    guild: discord.Guild,
    name: str,
    *,
    category: discord.CategoryChannel | None = None,
    topic: str | None = None,
) -> discord.TextChannel | None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild.id), "name": name})

    if not bot_can_manage_channels(guild):
        log_info("in guild %(guild_xid)s, no permissions to manage channels", guild_xid=guild.id)
        return None

    channel: discord.TextChannel | None = None
    with suppress(
        DiscordException,
        ClientOSError,
        log="in guild %(guild_xid)s, could not create text channel %(name)s",
        guild_xid=guild.id,
        name=name,
    ):
        channel = await retry(
            lambda: guild.create_text_channel(
                name,
                category=category,
                topic=topic if topic is not None else MISSING,
            ),
        )
    return channel


@tracer.wrap()
async def safe_update_embed(
    message: discord.Message | discord.PartialMessage,
    *args: Any,
    **kwargs: Any,
) -> discord.Message | None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"message_xid": str(message.id)})

    updated_message: discord.Message | None = None
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="could not update embed in message %(message_xid)s",
        message_xid=message.id,
    ):
        updated_message = await retry(lambda: message.edit(*args, **kwargs))
    return updated_message


@tracer.wrap()
async def safe_delete_message(message: discord.Message | discord.PartialMessage) -> bool:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"message_xid": str(message.id)})

    success: bool = False
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="could not delete message %(message_xid)s",
        message_xid=message.id,
    ):
        await retry(message.delete)
        success = True
    return success


@tracer.wrap()
async def safe_delete_channel(channel: discord.abc.GuildChannel, guild_xid: int) -> bool:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild_xid), "channel_xid": str(channel.id)})

    if not bot_can_delete_channel(channel):  # type: ignore
        return False

    success = False
    with suppress(
        DiscordException,
        ClientOSError,
        log="in guild %(guild_xid)s, could not delete channel %(channel_xid)s",
        guild_xid=guild_xid,
        channel_xid=channel.id,
    ):
        await retry(channel.delete)
        success = True
    return success


@tracer.wrap()
async def safe_send_channel(
    interaction: discord.Interaction,
    *args: Any,
    **kwargs: Any,
) -> None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags(
            {
                "guild_xid": str(interaction.guild_id),
                "channel_xid": str(interaction.channel_id),
            },
        )

    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="in guild %(guild_xid)s, could not send message to channel %(channel_xid)s",
        guild_xid=interaction.guild_id,
        channel_xid=interaction.channel_id,
    ):
        await retry(lambda: interaction.response.send_message(*args, **kwargs))


@tracer.wrap()
async def safe_followup_channel(
    interaction: discord.Interaction,
    *args: Any,
    **kwargs: Any,
) -> None:
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags(
            {
                "guild_xid": str(interaction.guild_id),
                "channel_xid": str(interaction.channel_id),
            },
        )

    # interaction.followup.send() requires that view be MISSING rather than None.
    if "view" in kwargs and kwargs["view"] is None:
        kwargs["view"] = MISSING

    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="in guild %(guild_xid)s, could not send followup to channel %(channel_xid)s",
        guild_xid=interaction.guild_id,
        channel_xid=interaction.channel_id,
    ):
        await retry(lambda: interaction.followup.send(*args, **kwargs))


@tracer.wrap()
async def safe_channel_reply(
    channel: discord.TextChannel,
    *args: Any,
    **kwargs: Any,
) -> discord.Message | None:
    guild_xid = channel.guild.id
    channel_xid = channel.id
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"guild_xid": str(guild_xid), "channel_xid": str(channel_xid)})
    if not bot_can_send_messages(channel):
        log_info(
            "in guild %(guild_xid)s, could not reply to channel %(channel_xid)s",
            guild_xid=guild_xid,
            channel_xid=channel_xid,
        )
        return None
    message: discord.Message | None = None
    with suppress(
        DiscordException,
        ClientOSError,
        NotFound,
        log="in guild %(guild_xid)s, could not reply to channel %(channel_xid)s",
        guild_xid=guild_xid,
        channel_xid=channel_xid,
    ):
        message = await retry(lambda: channel.send(*args, **kwargs))
    return message


@tracer.wrap()
async def safe_send_user(
    user: discord.User | discord.Member,
    *args: Any,
    **kwargs: Any,
) -> None:
    user_xid = getattr(user, "id", None)
    if span := tracer.current_span():  # pragma: no cover
        span.set_tags({"user_xid": str(user_xid)})

    if await is_bad_user(user_xid):
        return log_warning("not sending to bad user %(user)s %(xid)s", user=user, xid=user_xid)

    if not hasattr(user, "send"):
        return log_warning("no send method on user %(user)s %(xid)s", user=user, xid=user_xid)

    try:
        await retry(lambda: user.send(*args, **kwargs))
    except discord.errors.DiscordServerError as ex:
        add_span_error(ex)
        log_warning(
            "discord server error sending to user %(user)s %(xid)s",
            user=user,
            xid=user_xid,
            exec_info=True,
        )
    except (discord.errors.Forbidden, discord.errors.HTTPException) as ex:
        add_span_error(ex)
        if isinstance(ex, discord.errors.Forbidden) or ex.code == CANT_SEND_CODE:
            # Too many failed DM attempts can get the bot rate limited,
            # so remember users that have DMs closed for a while.
            if user_xid is not None:
                await mark_bad_user(user_xid)
            return log_info(
                "not allowed to send message to %(user)s %(xid)s",
                user=user,
                xid=user_xid,
            )
        log_warning(
            "failed to send message to user %(user)s %(xid)s",
            user=user,
            xid=user_xid,
            exec_info=True,
        )
    except ClientOSError as ex:
        add_span_error(ex)
        log_warning(
            "client error sending to user %(user)s %(xid)s",
            user=user,
            xid=user_xid,
            exec_info=True,
        )
    return None
