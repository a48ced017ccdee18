from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import discord
import pytest
from discord.app_commands import CommandInvokeError, NoPrivateMessage

from crossroads.errors import (
    AdminOnlyError,
    GuildOnlyError,
    NotRegisteredError,
    SquadmakerOnlyError,
)
from crossroads.utils import (
    bot_can_delete_channel,
    bot_can_manage_channels,
    bot_can_read,
    bot_can_send_messages,
    handle_interaction_errors,
    is_admin,
    is_guild,
    is_squadmaker,
    log_warning,
    member_role_ids,
    reply_ephemeral,
    safe_permissions_for,
    suppress,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def build_role(role_id: int) -> discord.Role:
    role = MagicMock(spec=discord.Role)
    role.id = role_id
    return role


def build_member(
    *,
    owner: bool = False,
    administrator: bool = False,
    role_ids: tuple[int, ...] = (),
) -> discord.Member:
    member = MagicMock(spec=discord.Member)
    member.id = 1001
    member.guild = MagicMock(spec=discord.Guild)
    member.guild.owner_id = member.id if owner else 2
    member.guild_permissions = discord.Permissions(administrator=administrator)
    member.roles = [build_role(role_id) for role_id in role_ids]
    return member


def build_interaction_for(user: discord.User | discord.Member) -> discord.Interaction:
    interaction = MagicMock(spec=discord.Interaction)
    interaction.user = user
    interaction.guild = getattr(user, "guild", None)
    return interaction


class TestUtilsLogging:
    def test_log_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        log_warning("log-line %(foo)s", foo="foo")
        assert "log-line foo" in caplog.text
        assert "warning:" in caplog.text


class TestUtilsSuppress:
    def test_suppresses_listed(self, caplog: pytest.LogCaptureFixture) -> None:
        with suppress(ValueError, log="could not frob %(thing)s", thing="widget"):
            raise ValueError
        assert "could not frob widget" in caplog.text

    def test_propagates_others(self) -> None:
        with (
            pytest.raises(KeyError),
            suppress(ValueError, log="could not frob %(thing)s", thing="widget"),
        ):
            raise KeyError


class TestUtilsPermissionsFor:
    def test_happy_path(self) -> None:
        permissions = MagicMock(spec=discord.Permissions)
        channel = MagicMock(spec=discord.TextChannel)
        channel.permissions_for = MagicMock(return_value=permissions)
        assert safe_permissions_for(channel) == permissions

    def test_exception(self) -> None:
        channel = MagicMock(spec=discord.TextChannel)
        channel.permissions_for = MagicMock(side_effect=RuntimeError("oh no"))
        assert safe_permissions_for(channel) is None


class TestUtilsBotCan:
    def channel(self, **perms: bool) -> discord.TextChannel:
        channel = MagicMock(spec=discord.TextChannel)
        channel.type = discord.ChannelType.text
        channel.guild = MagicMock(spec=discord.Guild)
        channel.permissions_for = MagicMock(return_value=discord.Permissions(**perms))
        return channel

    def test_private_channel(self) -> None:
        channel = MagicMock(spec=discord.DMChannel)
        channel.type = discord.ChannelType.private
        assert bot_can_read(channel)
        assert bot_can_send_messages(channel)
        assert not bot_can_delete_channel(channel)

    def test_read(self) -> None:
        assert bot_can_read(self.channel(read_messages=True, read_message_history=True))
        assert not bot_can_read(self.channel(read_messages=True))

    def test_send_messages(self) -> None:
        assert bot_can_send_messages(self.channel(send_messages=True))
        assert not bot_can_send_messages(self.channel())

    def test_delete_channel(self) -> None:
        assert bot_can_delete_channel(self.channel(manage_channels=True))
        assert not bot_can_delete_channel(self.channel())

    def test_manage_channels(self) -> None:
        guild = MagicMock(spec=discord.Guild)
        guild.me = MagicMock()
        guild.me.guild_permissions = discord.Permissions(manage_channels=True)
        assert bot_can_manage_channels(guild)
        guild.me = None
        assert not bot_can_manage_channels(guild)


class TestUtilsChecks:
    def test_member_role_ids(self) -> None:
        assert member_role_ids(build_member(role_ids=(1, 2))) == {1, 2}
        assert member_role_ids(None) == set()

    def test_is_guild(self) -> None:
        interaction = MagicMock(spec=discord.Interaction)
        interaction.guild = None
        with pytest.raises(GuildOnlyError):
            is_guild(interaction)
        interaction.guild = MagicMock(spec=discord.Guild)
        assert is_guild(interaction)

    def test_is_admin_owner(self) -> None:
        assert is_admin(build_interaction_for(build_member(owner=True)))

    def test_is_admin_administrator(self) -> None:
        assert is_admin(build_interaction_for(build_member(administrator=True)))

    def test_is_admin_role(self, mocker: MockerFixture) -> None:
        mocker.patch("crossroads.utils.settings.ADMIN_ROLE_ID", 42)
        assert is_admin(build_interaction_for(build_member(role_ids=(42,))))

    def test_is_admin_denied(self, mocker: MockerFixture) -> None:
        mocker.patch("crossroads.utils.settings.ADMIN_ROLE_ID", 42)
        with pytest.raises(AdminOnlyError):
            is_admin(build_interaction_for(build_member(role_ids=(7,))))

    def test_is_squadmaker(self, mocker: MockerFixture) -> None:
        mocker.patch("crossroads.utils.settings.SQUADMAKER_ROLE_ID", 43)
        assert is_squadmaker(build_interaction_for(build_member(role_ids=(43,))))
        assert is_squadmaker(build_interaction_for(build_member(administrator=True)))
        with pytest.raises(SquadmakerOnlyError):
            is_squadmaker(build_interaction_for(build_member(role_ids=(7,))))


@pytest.mark.asyncio
class TestUtilsReplies:
    async def test_reply_ephemeral_followup(self, interaction: discord.Interaction) -> None:
        await reply_ephemeral(interaction, "hello")
        interaction.followup.send.assert_called_once_with("hello", ephemeral=True)  # type: ignore

    async def test_reply_ephemeral_response(self, interaction: discord.Interaction) -> None:
        interaction.response.is_done.return_value = False  # type: ignore
        await reply_ephemeral(interaction, "hello")
        interaction.response.send_message.assert_called_once_with(  # type: ignore
            "hello",
            ephemeral=True,
        )

    async def test_handle_crossroads_error(self, interaction: discord.Interaction) -> None:
        await handle_interaction_errors(interaction, NotRegisteredError())
        interaction.followup.send.assert_called_once_with(  # type: ignore
            str(NotRegisteredError()),
            ephemeral=True,
        )

    async def test_handle_wrapped_crossroads_error(
        self,
        interaction: discord.Interaction,
    ) -> None:
        command = MagicMock()
        error = CommandInvokeError(command, NotRegisteredError())
        await handle_interaction_errors(interaction, error)
        interaction.followup.send.assert_called_once_with(  # type: ignore
            str(NotRegisteredError()),
            ephemeral=True,
        )

    async def test_handle_no_private_message(self, interaction: discord.Interaction) -> None:
        await handle_interaction_errors(interaction, NoPrivateMessage())
        interaction.followup.send.assert_called_once_with(  # type: ignore
            "This command is not supported in DMs.",
            ephemeral=True,
        )

    async def test_handle_unexpected_error(
        self,
        interaction: discord.Interaction,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        await handle_interaction_errors(interaction, RuntimeError("boom"))
        interaction.followup.send.assert_not_called()  # type: ignore
        assert "unhandled exception in interaction `9001`: RuntimeError: boom" in caplog.text
