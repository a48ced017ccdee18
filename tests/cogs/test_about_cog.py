from __future__ import annotations

from unittest.mock import PropertyMock

import pytest
from pytest_mock import MockerFixture

from crossroads import __version__
from crossroads.cogs import AboutCog
from tests.mixins import InteractionMixin

pytestmark = pytest.mark.use_db


@pytest.mark.asyncio
class TestCogAbout(InteractionMixin):
    async def test_about(self) -> None:
        cog = AboutCog(self.bot)
        await self.run(cog.about)

        self.interaction.response.send_message.assert_called_once()  # type: ignore
        call = self.interaction.response.send_message.call_args_list[0]  # type: ignore
        assert call.kwargs["ephemeral"] is True
        assert call.kwargs["embed"].to_dict() == {
            "color": self.settings.INFO_EMBED_COLOR,
            "description": (
                "_Signups and rosters for Guild Wars 2 trainings._\n"
                "\n"
                "Use `/register` once, then `/join` a training or use the buttons on the "
                "signup board."
            ),
            "fields": [
                {"inline": True, "name": "Version", "value": __version__},
                {"inline": True, "name": "Author", "value": "The Crossroads Inn staff"},
            ],
            "title": "Crossroads",
            "type": "rich",
            "flags": 0,
        }

    async def test_ping(self, mocker: MockerFixture) -> None:
        mocker.patch.object(type(self.bot), "latency", PropertyMock(return_value=0.042))
        cog = AboutCog(self.bot)
        await self.run(cog.ping)

        self.interaction.response.send_message.assert_called_once()  # type: ignore
        content = self.interaction.response.send_message.call_args.args[0]  # type: ignore
        assert content == "pong (42 ms)"
