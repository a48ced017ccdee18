from __future__ import annotations

import discord
import pytest

from crossroads.actions import SignupAction
from crossroads.views import SignupBoardView
from crossroads.views.board_view import UNKNOWN_TRAINING
from tests.mixins import InteractionMixin
from tests.mocks import build_author, build_channel, build_message, mock_action

pytestmark = pytest.mark.use_db


@pytest.mark.asyncio
class TestSignupBoardView(InteractionMixin):
    def test_persistent(self) -> None:
        view = SignupBoardView(self.bot)

        assert view.is_persistent()
        assert [item.custom_id for item in view.children] == [  # type: ignore
            "board:join",
            "board:edit",
            "board:leave",
        ]

    def board_message(self, training_id: int) -> discord.Message:
        assert self.interaction.guild
        guild = self.interaction.guild
        message = build_message(guild, build_channel(guild), build_author(offset=9))
        self.bot.signup_board.cache[message.id] = {"id": training_id}  # type: ignore
        return message

    @pytest.mark.parametrize("button", ["join", "edit", "leave"])
    async def test_button(self, button: str) -> None:
        self.interaction.message = self.board_message(12)
        view = SignupBoardView(self.bot)

        with mock_action(SignupAction) as action:
            await getattr(view, button).callback(self.interaction)

        self.interaction.response.defer.assert_called_once_with(  # type: ignore
            ephemeral=True,
            thinking=True,
        )
        getattr(action, button).assert_called_once_with(12)

    async def test_unknown_message(self) -> None:
        assert self.interaction.guild
        guild = self.interaction.guild
        self.interaction.message = build_message(guild, build_channel(guild), build_author())
        view = SignupBoardView(self.bot)

        with mock_action(SignupAction) as action:
            await view.join.callback(self.interaction)

        action.join.assert_not_called()
        assert self.last_reply() == UNKNOWN_TRAINING

    async def test_defer_failure(self) -> None:
        self.interaction.message = self.board_message(12)
        self.interaction.response.defer.side_effect = discord.DiscordException  # type: ignore
        view = SignupBoardView(self.bot)

        with mock_action(SignupAction) as action:
            await view.leave.callback(self.interaction)

        action.leave.assert_not_called()
