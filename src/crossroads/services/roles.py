from __future__ import annotations

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer
from sqlalchemy.exc import IntegrityError

from crossroads.database import DatabaseSession
from crossroads.models import Role, RoleDict


class RolesService:
    @sync_to_async()
    @tracer.wrap()
    def create(self, *, title: str, repr: str, emoji: str) -> RoleDict | None:  # noqa: A002
        """Create a role, returning None when its repr is already taken."""
        existing = DatabaseSession.query(Role).filter(Role.repr == repr).one_or_none()
        if existing is not None:
            if existing.active:
                return None
            # bring back a previously removed role instead of failing on its repr
            existing.title = title  # type: ignore
            existing.emoji = emoji  # type: ignore
            existing.active = True  # type: ignore
            DatabaseSession.commit()
            return existing.to_dict()
        role = Role(title=title, repr=repr, emoji=emoji, active=True)
        DatabaseSession.add(role)
        try:
            DatabaseSession.commit()
        except IntegrityError:
            DatabaseSession.rollback()
            return None
        return role.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def select_by_repr(self, repr: str) -> RoleDict | None:  # noqa: A002
        role = DatabaseSession.query(Role).filter(Role.repr == repr).one_or_none()
        return role.to_dict() if role else None

    @sync_to_async()
    @tracer.wrap()
    def active(self) -> list[RoleDict]:
        roles = DatabaseSession.query(Role).filter(Role.active.is_(True)).order_by(Role.id).all()
        return [role.to_dict() for role in roles]

    @sync_to_async()
    @tracer.wrap()
    def deactivate(self, repr: str) -> bool:  # noqa: A002
        role = (
            DatabaseSession.query(Role)
            .filter(Role.repr == repr, Role.active.is_(True))
            .one_or_none()
        )
        if role is None:
            return False
        role.active = False  # type: ignore
        DatabaseSession.commit()
        return True
