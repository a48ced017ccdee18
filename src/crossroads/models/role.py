from __future__ import annotations

from typing import TypedDict

from sqlalchemy import Boolean, Column, Integer, String, true

from . import Base

MAX_TITLE_LENGTH = 100
MAX_REPR_LENGTH = 16


class RoleDict(TypedDict):
    id: int
    title: str
    repr: str
    emoji: str
    active: bool


class Role(Base):
    """
    A role that players can fill during a training, like a healer or a tank.

    Roles are never deleted, only deactivated, because historical signups keep
    referring to them.
    """

    __tablename__ = "roles"

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
        doc="The internal ID of this role",
    )
    title = Column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
        doc="Human readable name of this role",
    )
    repr = Column(
        String(MAX_REPR_LENGTH),
        nullable=False,
        unique=True,
        doc="Short unique representation of this role used in listings and commands",
    )
    emoji = Column(
        String(100),
        nullable=False,
        doc="Reaction emoji for this role, either unicode or a custom <:name:id> emoji",
    )
    active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
        index=True,
        doc="If false, this role can no longer be selected for new trainings",
    )

    def to_dict(self) -> RoleDict:
        return {
            "id": self.id,
            "title": self.title,
            "repr": self.repr,
            "emoji": self.emoji,
            "active": self.active,
        }
