from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.dialects import postgresql, sqlite

from crossroads.database import DatabaseSession

if TYPE_CHECKING:
    from sqlalchemy.dialects.postgresql import Insert


def upsert_insert(model: Any) -> Insert:
    """Build an INSERT that supports `on_conflict_do_update()` on the bound dialect."""
    if DatabaseSession.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)  # type: ignore
    return postgresql.insert(model)
