from __future__ import annotations

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer

from crossroads.database import DatabaseSession
from crossroads.models import Config, ConfigDict

from .base import upsert_insert


class ConfigsService:
    @sync_to_async()
    @tracer.wrap()
    def load(self, name: str) -> str | None:
        config = DatabaseSession.get(Config, name)
        return config.value if config else None

    @sync_to_async()
    @tracer.wrap()
    def save(self, name: str, value: str) -> ConfigDict:
        values = {"name": name, "value": value}
        upsert = upsert_insert(Config).values(**values)
        upsert = upsert.on_conflict_do_update(
            index_elements=[Config.name],
            set_={"value": upsert.excluded.value},
        )
        DatabaseSession.execute(upsert, values)
        DatabaseSession.commit()
        return {"name": name, "value": value}

    @sync_to_async()
    @tracer.wrap()
    def delete(self, name: str) -> bool:
        deleted = DatabaseSession.query(Config).filter(Config.name == name).delete()
        DatabaseSession.commit()
        return bool(deleted)

    @sync_to_async()
    @tracer.wrap()
    def all(self) -> list[ConfigDict]:
        configs = DatabaseSession.query(Config).order_by(Config.name).all()
        return [config.to_dict() for config in configs]
