from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import pytest

from crossroads.embeds import (
    board_description,
    format_date,
    log_embed,
    parse_board_description,
    roster_embed,
    training_embed,
    trainings_list_embed,
    truncate,
    user_signups_embed,
)
from crossroads.enums import TrainingState
from tests.mocks import build_author

if TYPE_CHECKING:
    from crossroads.models import RoleDict, TrainingDict
    from crossroads.settings import Settings


def make_training(**overrides: Any) -> TrainingDict:
    training: dict[str, Any] = {
        "id": 7,
        "title": "Raid Basics",
        "date": datetime(2024, 5, 4, 19, 30),  # noqa: DTZ001
        "state": TrainingState.OPEN.value,
        "tier_id": None,
    }
    training.update(overrides)
    return training  # type: ignore


def make_role(role_id: int, emoji: str, title: str) -> RoleDict:
    return {
        "id": role_id,
        "title": title,
        "repr": title.lower(),
        "emoji": emoji,
        "active": True,
    }  # type: ignore


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        pytest.param(board_description(42), 42, id="board"),
        pytest.param("||  13 ||", 13, id="padded"),
        pytest.param("hello", None, id="text"),
        pytest.param("", None, id="empty"),
        pytest.param(None, None, id="none"),
    ],
)
def test_parse_board_description(description: str | None, expected: int | None) -> None:
    assert parse_board_description(description) == expected


def test_truncate() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("a" * 20, 10) == "aaaaaaa..."


def test_format_date() -> None:
    assert format_date(make_training()) == "Saturday, 04 May 2024 19:30 UTC"


class TestTrainingEmbed:
    def test_board(self, settings: Settings) -> None:
        roles = [make_role(1, "🛡", "Tank"), make_role(2, "💉", "Healer")]

        embed = training_embed(make_training(), roles, role_counts={1: 3}).to_dict()

        assert embed["title"] == "Raid Basics"
        assert embed["description"] == "||7||"
        assert embed["color"] == settings.BOARD_EMBED_COLOR
        assert embed["footer"] == {"text": "Training ID: 7"}
        fields = {field["name"]: field["value"] for field in embed["fields"]}
        assert fields == {
            "Date": "Saturday, 04 May 2024 19:30 UTC",
            "State": "🟢 Open",
            "Tier": "None",
            "Roles": "🛡 Tank: **3**\n💉 Healer: **0**",
        }

    def test_without_counts(self, settings: Settings) -> None:
        training = make_training(state=TrainingState.STARTED.value)
        tier = {"id": 1, "name": "Tier 1", "discord_role_ids": []}

        embed = training_embed(training, [], signup_count=0, tier=tier).to_dict()  # type: ignore

        assert embed["color"] == settings.STARTED_EMBED_COLOR
        fields = {field["name"]: field["value"] for field in embed["fields"]}
        assert fields["Tier"] == "Tier 1"
        assert fields["Signups"] == "0"
        assert fields["Roles"] == "_None_"


def test_trainings_list_embed() -> None:
    embed = trainings_list_embed([make_training()], title="Current trainings").to_dict()
    assert embed["title"] == "Current trainings"
    assert embed["description"] == "`7` 🟢 **Raid Basics** Saturday, 04 May 2024 19:30 UTC"

    empty = trainings_list_embed([], title="Open trainings").to_dict()
    assert empty["description"] == "_No trainings found_"


def test_user_signups_embed() -> None:
    embed = user_signups_embed(
        [{"training": make_training(), "role_reprs": ["tank", "heal"]}],  # type: ignore
    ).to_dict()
    assert embed["fields"] == [
        {
            "name": "Raid Basics (ID 7)",
            "value": "Saturday, 04 May 2024 19:30 UTC\n🟢 Open\n`tank`, `heal`",
            "inline": False,
        },
    ]

    empty = user_signups_embed([]).to_dict()
    assert empty["description"] == "You are not signed up for any training."


def test_roster_embed() -> None:
    embed = roster_embed(
        make_training(),
        [{"discord_id": 5, "gw2_id": "Amy.2222", "role_reprs": []}],
    ).to_dict()
    assert embed["title"] == "Signups for Raid Basics"
    assert embed["description"] == "<@5> `Amy.2222` _No roles_"

    empty = roster_embed(make_training(), []).to_dict()
    assert empty["description"] == "_No signups yet_"


@pytest.mark.parametrize("failed", [True, False])
def test_log_embed(settings: Settings, failed: bool) -> None:
    user = build_author()

    embed = log_embed(user, "join 7", "Success", failed=failed).to_dict()

    assert embed["description"] == f"<@{user.id}> used `join 7`"
    assert embed["fields"] == [{"name": "Result", "value": "Success", "inline": True}]
    assert embed["footer"] == {"text": f"User ID: {user.id}"}
    expected = settings.ERROR_EMBED_COLOR if failed else settings.INFO_EMBED_COLOR
    assert embed["color"] == expected
