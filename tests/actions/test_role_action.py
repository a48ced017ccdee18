from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from crossroads.actions import RoleAction
from crossroads.actions import role_action as role_action_module
from crossroads.conversation import CANCELED_MESSAGE
from crossroads.database import DatabaseSession
from crossroads.errors import CrossroadsError
from crossroads.models import Role
from crossroads.role_select import CANCEL_EMOJI, CONFIRM_EMOJI
from tests.mixins import InteractionMixin

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from crossroads import CrossroadsBot

pytestmark = pytest.mark.use_db


@pytest.mark.asyncio
class TestRoleAction(InteractionMixin):
    @pytest_asyncio.fixture(autouse=True)
    async def use_mocks(self, bot: CrossroadsBot, mocker: MockerFixture) -> None:
        self.log_result = mocker.patch.object(bot, "log_result", AsyncMock())
        self.get_emoji = mocker.patch.object(bot, "get_emoji", MagicMock(return_value=None))

    def start_add(self, title: str, repr: str) -> asyncio.Task[None]:  # noqa: A002
        async def run() -> None:
            async with RoleAction.create(self.bot, self.interaction) as action:
                await action.add(title, repr)

        return asyncio.create_task(run())

    async def test_add(self) -> None:
        task = self.start_add("Tank", "tank")
        await self.react("🛡")
        await self.react(CONFIRM_EMOJI)
        await task

        DatabaseSession.expire_all()
        role = DatabaseSession.query(Role).one()
        assert role.title == "Tank"
        assert role.repr == "tank"
        assert role.emoji == "🛡"
        assert role.active
        assert self.dm_messages() == ["Created role 🛡 `tank` Tank"]
        self.log_result.assert_called_once_with(
            self.interaction.user,
            "role add tank",
            "Success",
            failed=False,
        )

    async def test_add_ignores_removed_reactions(self) -> None:
        task = self.start_add("Tank", "tank")
        await self.react("⚔", added=False)
        await self.react("🛡")
        await self.react(CONFIRM_EMOJI)
        await task

        DatabaseSession.expire_all()
        assert DatabaseSession.query(Role).one().emoji == "🛡"

    async def test_add_unusable_custom_emoji(self) -> None:
        task = self.start_add("Tank", "tank")
        await self.react("<:shield:424242424242424242>")
        await self.react("🛡")
        await self.react(CONFIRM_EMOJI)
        await task

        self.get_emoji.assert_called_once_with(424242424242424242)
        edits = [c.kwargs.get("content") for c in self.anchor.edit.call_args_list]  # type: ignore
        assert any(edit and edit.startswith("I can not use") for edit in edits)
        DatabaseSession.expire_all()
        assert DatabaseSession.query(Role).one().emoji == "🛡"

    async def test_add_usable_custom_emoji(self) -> None:
        self.get_emoji.return_value = MagicMock()

        task = self.start_add("Tank", "tank")
        await self.react("<:shield:424242424242424242>")
        await self.react(CONFIRM_EMOJI)
        await task

        DatabaseSession.expire_all()
        assert DatabaseSession.query(Role).one().emoji == "<:shield:424242424242424242>"

    async def test_add_custom_emoji_from_other_guild(self, mocker: MockerFixture) -> None:
        mocker.patch.object(role_action_module.settings, "EMOJI_GUILD_ID", 77)
        mocker.patch.object(role_action_module.settings, "MAIN_GUILD_ID", 78)
        guilds = {424242424242424242: 79, 424243424243424243: 77}
        self.get_emoji.side_effect = lambda emoji_id: MagicMock(guild_id=guilds[emoji_id])

        task = self.start_add("Tank", "tank")
        await self.react("<:shield:424242424242424242>")
        await self.react("<:shield:424243424243424243>")
        await self.react(CONFIRM_EMOJI)
        await task

        DatabaseSession.expire_all()
        assert DatabaseSession.query(Role).one().emoji == "<:shield:424243424243424243>"

    async def test_add_canceled(self) -> None:
        task = self.start_add("Tank", "tank")
        await self.react("🛡")
        await self.react(CANCEL_EMOJI)
        await task

        DatabaseSession.expire_all()
        assert DatabaseSession.query(Role).count() == 0
        assert self.dm_messages() == [CANCELED_MESSAGE]
        self.log_result.assert_called_once_with(
            self.interaction.user,
            "role add tank",
            CANCELED_MESSAGE,
            failed=True,
        )

    async def test_add_duplicate_repr(self) -> None:
        self.factories.role.create(repr="tank")

        with pytest.raises(CrossroadsError, match="A role with repr `tank` already exists"):
            async with RoleAction.create(self.bot, self.interaction) as action:
                await action.add("Tank", "tank")

        self.interaction.user.create_dm.assert_not_called()  # type: ignore
        self.log_result.assert_called_once_with(
            self.interaction.user,
            "role add tank",
            "A role with repr `tank` already exists",
            failed=True,
        )

    async def test_add_brings_back_removed_role(self) -> None:
        removed = self.factories.role.create(repr="tank", emoji="⚔", active=False)

        task = self.start_add("Tank", "tank")
        await self.react("🛡")
        await self.react(CONFIRM_EMOJI)
        await task

        DatabaseSession.expire_all()
        role = DatabaseSession.query(Role).one()
        assert role.id == removed.id
        assert role.active
        assert role.emoji == "🛡"

    async def test_remove(self) -> None:
        role = self.factories.role.create(repr="tank")

        async with RoleAction.create(self.bot, self.interaction) as action:
            await action.remove("tank")

        DatabaseSession.expire_all()
        found = DatabaseSession.get(Role, role.id)
        assert found
        assert not found.active
        assert self.last_reply() == "Role `tank` was removed"

    async def test_remove_missing(self) -> None:
        self.factories.role.create(repr="tank", active=False)

        with pytest.raises(CrossroadsError, match="No active role with repr `tank`"):
            async with RoleAction.create(self.bot, self.interaction) as action:
                await action.remove("tank")

    async def test_list_roles(self) -> None:
        self.factories.role.create(repr="tank", emoji="🛡", title="Tank")
        self.factories.role.create(repr="heal", emoji="💉", title="Healer", active=False)

        async with RoleAction.create(self.bot, self.interaction) as action:
            await action.list_roles()

        embed = self.last_reply("embed")
        assert embed["title"] == "Roles"
        assert embed["description"] == "🛡 `tank` Tank"

    async def test_list_roles_empty(self) -> None:
        async with RoleAction.create(self.bot, self.interaction) as action:
            await action.list_roles()

        assert self.last_reply("embed")["description"] == "_No roles yet_"
