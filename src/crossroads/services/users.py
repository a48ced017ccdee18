from __future__ import annotations

import logging
from datetime import UTC, datetime

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer

from crossroads.database import DatabaseSession
from crossroads.models import User, UserDict

from .base import upsert_insert

logger = logging.getLogger(__name__)


class UsersService:
    user: User | None = None

    @sync_to_async()
    @tracer.wrap()
    def upsert(self, discord_id: int, gw2_id: str) -> UserDict:
        values = {
            "discord_id": discord_id,
            "gw2_id": gw2_id,
            "updated_at": datetime.now(tz=UTC),
        }
        upsert = upsert_insert(User).values(**values)
        upsert = upsert.on_conflict_do_update(
            index_elements=[User.discord_id],
            set_={
                "gw2_id": upsert.excluded.gw2_id,
                "updated_at": upsert.excluded.updated_at,
            },
        )
        DatabaseSession.execute(upsert, values)
        DatabaseSession.commit()
        self.user = DatabaseSession.query(User).filter(User.discord_id == discord_id).one()
        return self.user.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def select(self, discord_id: int) -> UserDict | None:
        self.user = DatabaseSession.query(User).filter(User.discord_id == discord_id).one_or_none()
        return self.user.to_dict() if self.user else None
