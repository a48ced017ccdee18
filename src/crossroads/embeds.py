from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from .enums import TrainingState
from .settings import settings
from .utils import EMBED_DESCRIPTION_SIZE_LIMIT, EMBED_FIELD_VALUE_SIZE_LIMIT

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import RoleDict, TierDict, TrainingDict
    from .services import RosterEntry, UserSignup

STATE_COLORS = {
    TrainingState.CREATED: settings.CLOSED_EMBED_COLOR,
    TrainingState.OPEN: settings.BOARD_EMBED_COLOR,
    TrainingState.CLOSED: settings.CLOSED_EMBED_COLOR,
    TrainingState.STARTED: settings.STARTED_EMBED_COLOR,
    TrainingState.FINISHED: settings.CLOSED_EMBED_COLOR,
}


def board_description(training_id: int) -> str:
    return f"||{training_id}||"


def parse_board_description(description: str | None) -> int | None:
    if not description:
        return None
    try:
        return int(description.replace("||", "").strip())
    except ValueError:
        return None


def format_date(training: TrainingDict) -> str:
    return f"{training['date']:%A, %d %B %Y %H:%M} UTC"


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[: limit - 3]}..."


def training_embed(
    training: TrainingDict,
    roles: Sequence[RoleDict],
    *,
    role_counts: dict[int, int] | None = None,
    signup_count: int | None = None,
    tier: TierDict | None = None,
) -> discord.Embed:
    state = TrainingState(training["state"])
    embed = discord.Embed(
        title=training["title"],
        description=board_description(training["id"]),
        color=STATE_COLORS[state],
    )
    embed.add_field(name="Date", value=format_date(training), inline=False)
    embed.add_field(name="State", value=f"{state.emoji} {state}")
    embed.add_field(name="Tier", value=tier["name"] if tier else "None")
    if signup_count is not None:
        embed.add_field(name="Signups", value=str(signup_count))
    if role_counts is None:
        lines = [f"{role['emoji']} {role['title']}" for role in roles]
    else:
        lines = [
            f"{role['emoji']} {role['title']}: **{role_counts.get(role['id'], 0)}**"
            for role in roles
        ]
    embed.add_field(
        name="Roles",
        value=truncate("\n".join(lines) or "_None_", EMBED_FIELD_VALUE_SIZE_LIMIT),
        inline=False,
    )
    embed.set_footer(text=f"Training ID: {training['id']}")
    return embed


def trainings_list_embed(trainings: Sequence[TrainingDict], *, title: str) -> discord.Embed:
    lines = [
        f"`{training['id']}` {TrainingState(training['state']).emoji} "
        f"**{training['title']}** {format_date(training)}"
        for training in trainings
    ]
    return discord.Embed(
        title=title,
        description=truncate(
            "\n".join(lines) or "_No trainings found_",
            EMBED_DESCRIPTION_SIZE_LIMIT,
        ),
        color=settings.INFO_EMBED_COLOR,
    )


def user_signups_embed(signups: Sequence[UserSignup]) -> discord.Embed:
    embed = discord.Embed(title="Your signups", color=settings.INFO_EMBED_COLOR)
    if not signups:
        embed.description = "You are not signed up for any training."
        return embed
    for signup in signups[:25]:
        training = signup["training"]
        state = TrainingState(training["state"])
        roles = ", ".join(f"`{repr_}`" for repr_ in signup["role_reprs"]) or "_No roles_"
        embed.add_field(
            name=f"{training['title']} (ID {training['id']})",
            value=f"{format_date(training)}\n{state.emoji} {state}\n{roles}",
            inline=False,
        )
    return embed


def roster_embed(training: TrainingDict, roster: Sequence[RosterEntry]) -> discord.Embed:
    lines = [
        f"<@{entry['discord_id']}> `{entry['gw2_id']}` "
        + (" ".join(f"`{repr_}`" for repr_ in entry["role_reprs"]) or "_No roles_")
        for entry in roster
    ]
    return discord.Embed(
        title=f"Signups for {training['title']}",
        description=truncate("\n".join(lines) or "_No signups yet_", EMBED_DESCRIPTION_SIZE_LIMIT),
        color=settings.INFO_EMBED_COLOR,
    )


def log_embed(
    user: discord.User | discord.Member,
    command: str,
    result: str,
    *,
    failed: bool = False,
) -> discord.Embed:
    embed = discord.Embed(
        description=f"{user.mention} used `{command}`",
        color=settings.ERROR_EMBED_COLOR if failed else settings.INFO_EMBED_COLOR,
    )
    embed.add_field(name="Result", value=truncate(result, EMBED_FIELD_VALUE_SIZE_LIMIT))
    embed.set_footer(text=f"User ID: {user.id}")
    return embed
