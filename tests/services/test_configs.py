from __future__ import annotations

import pytest

from crossroads.database import DatabaseSession
from crossroads.models import Config
from crossroads.services import ConfigsService
from tests.factories import ConfigFactory

pytestmark = pytest.mark.use_db


@pytest.mark.asyncio
class TestServiceConfigs:
    async def test_configs_load(self) -> None:
        configs = ConfigsService()
        assert await configs.load("log_channel_id") is None

        ConfigFactory.create(name="log_channel_id", value="123")

        assert await configs.load("log_channel_id") == "123"

    async def test_configs_save(self) -> None:
        configs = ConfigsService()
        assert await configs.save("log_channel_id", "123") == {
            "name": "log_channel_id",
            "value": "123",
        }
        await configs.save("log_channel_id", "456")

        DatabaseSession.expire_all()
        config = DatabaseSession.get(Config, "log_channel_id")
        assert config
        assert config.value == "456"
        assert DatabaseSession.query(Config).count() == 1

    async def test_configs_delete(self) -> None:
        ConfigFactory.create(name="log_channel_id", value="123")

        configs = ConfigsService()
        assert await configs.delete("log_channel_id")
        assert not await configs.delete("log_channel_id")
        assert await configs.load("log_channel_id") is None

    async def test_configs_all(self) -> None:
        ConfigFactory.create(name="b", value="2")
        ConfigFactory.create(name="a", value="1")

        configs = ConfigsService()
        assert await configs.all() == [
            {"name": "a", "value": "1"},
            {"name": "b", "value": "2"},
        ]
