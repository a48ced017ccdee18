from __future__ import annotations

from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from . import Base, now

if TYPE_CHECKING:
    from . import Signup  # noqa: F401

MAX_GW2_ID_LENGTH = 100


class UserDict(TypedDict):
    id: int
    discord_id: int
    gw2_id: str
    created_at: datetime
    updated_at: datetime


class User(Base):
    """A registered Discord user and the Guild Wars 2 account they play on."""

    __tablename__ = "users"

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
        doc="The internal ID of this user",
    )
    discord_id = Column(
        BigInteger,
        nullable=False,
        unique=True,
        index=True,
        doc="The external Discord ID of this user",
    )
    gw2_id = Column(
        String(MAX_GW2_ID_LENGTH),
        nullable=False,
        doc="The Guild Wars 2 account name of this user, like Name.1234",
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=partial(datetime.now, UTC),
        server_default=now,
        doc="UTC timestamp when this user first registered",
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=partial(datetime.now, UTC),
        server_default=now,
        onupdate=partial(datetime.now, UTC),
        doc="UTC timestamp when this user last registered",
    )

    signups = relationship(
        "Signup",
        back_populates="user",
        cascade="all, delete-orphan",
        doc="Signups made by this user",
    )

    def to_dict(self) -> UserDict:
        return {
            "id": self.id,
            "discord_id": self.discord_id,
            "gw2_id": self.gw2_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
