from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from .errors import CanceledError, TimedOutError
from .settings import settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .conversation import Conversation
    from .models import RoleDict

logger = logging.getLogger(__name__)

CONFIRM_EMOJI = "✅"
CANCEL_EMOJI = "❌"
NONE_SELECTED = "_None_"


def emoji_key(emoji: str | discord.PartialEmoji) -> str:
    """Identify an emoji the same way whether it's stored as text or came from an event."""
    if isinstance(emoji, str):
        emoji = discord.PartialEmoji.from_str(emoji.strip())
    if emoji.id:
        return str(emoji.id)
    # clients are inconsistent about sending the emoji variation selector
    return (emoji.name or "").replace("\ufe0f", "")


def role_line(role: RoleDict) -> str:
    return f"{role['emoji']} `{role['repr']}` {role['title']}"


def render_role_selection(
    roles: Sequence[RoleDict],
    selected: Iterable[int],
    *,
    title: str = "Select your roles",
) -> discord.Embed:
    """Render which of the candidate roles are currently selected."""
    selected_ids = set(selected)
    chosen = [role_line(role) for role in roles if role["id"] in selected_ids]
    remaining = [role_line(role) for role in roles if role["id"] not in selected_ids]
    embed = discord.Embed(title=title, color=settings.INFO_EMBED_COLOR)
    embed.description = (
        "React with a role's emoji to select or deselect it.\n"
        f"{CONFIRM_EMOJI} to confirm, {CANCEL_EMOJI} to cancel."
    )
    embed.add_field(name="Selected", value="\n".join(chosen) or NONE_SELECTED, inline=False)
    embed.add_field(name="Unselected", value="\n".join(remaining) or NONE_SELECTED, inline=False)
    return embed


class RoleSelection:
    """A partition of candidate roles into the selected and the unselected ones."""

    def __init__(self, roles: Sequence[RoleDict], selected: Iterable[int] = ()) -> None:
        self.roles = list(roles)
        self._by_emoji = {emoji_key(role["emoji"]): role for role in self.roles}
        candidates = {role["id"] for role in self.roles}
        self.selected = {role_id for role_id in selected if role_id in candidates}

    @property
    def unselected(self) -> set[int]:
        return {role["id"] for role in self.roles} - self.selected

    def role_for(self, emoji: str | discord.PartialEmoji) -> RoleDict | None:
        return self._by_emoji.get(emoji_key(emoji))

    def toggle(self, role_id: int) -> None:
        if role_id in self.selected:
            self.selected.remove(role_id)
        elif any(role["id"] == role_id for role in self.roles):
            self.selected.add(role_id)

    def render(self, *, title: str = "Select your roles") -> discord.Embed:
        return render_role_selection(self.roles, self.selected, title=title)


async def select_roles(
    conversation: Conversation,
    roles: Sequence[RoleDict],
    selected: Iterable[int] = (),
    *,
    title: str = "Select your roles",
) -> set[int]:
    """
    Let the user pick roles by reacting to the conversation's anchor message.

    Adding or removing a role's reaction toggles that role. Returns the selected
    role ids once the user confirms. Raises CanceledError if the user cancels and
    TimedOutError if a single step goes unanswered for the conversation timeout.
    """
    selection = RoleSelection(roles, selected)
    await conversation.edit(content=None, embed=selection.render(title=title))
    await conversation.add_reactions(
        [*(role["emoji"] for role in selection.roles), CONFIRM_EMOJI, CANCEL_EMOJI],
    )

    while True:
        event = await conversation.await_reaction()
        if event is None:
            raise TimedOutError

        key = emoji_key(event.emoji)
        if key == CONFIRM_EMOJI:
            if event.event_type == "REACTION_ADD":
                return set(selection.selected)
            continue
        if key == CANCEL_EMOJI:
            if event.event_type == "REACTION_ADD":
                raise CanceledError
            continue

        role = selection.role_for(event.emoji)
        if role is None:
            logger.debug("ignoring unrelated reaction %s during role selection", key)
            continue
        selection.toggle(role["id"])
        await conversation.edit(content=None, embed=selection.render(title=title))


async def await_confirmation(conversation: Conversation) -> None:
    """
    Wait for the user to confirm whatever the anchor currently shows.

    Returns once the user adds the confirm reaction. Raises CanceledError on the
    cancel reaction and TimedOutError if the user does not answer in time.
    """
    await conversation.add_reactions([CONFIRM_EMOJI, CANCEL_EMOJI])
    while True:
        event = await conversation.await_reaction()
        if event is None:
            raise TimedOutError
        if event.event_type != "REACTION_ADD":
            continue
        key = emoji_key(event.emoji)
        if key == CONFIRM_EMOJI:
            return
        if key == CANCEL_EMOJI:
            raise CanceledError
