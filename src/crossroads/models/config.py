from __future__ import annotations

from typing import TypedDict

from sqlalchemy import Column, String

from . import Base

# Discord channel that receives the results of every conversation.
LOG_CHANNEL_KEY = "log_channel_id"

# Discord category under which the per-date signup board channels live.
SIGNUP_BOARD_KEY = "signup_board_category"


class ConfigDict(TypedDict):
    name: str
    value: str


class Config(Base):
    """A named bot setting that is persisted between restarts."""

    __tablename__ = "configs"

    name = Column(
        String(100),
        nullable=False,
        primary_key=True,
        doc="The name of this setting",
    )
    value = Column(
        String(255),
        nullable=False,
        doc="The value of this setting",
    )

    def to_dict(self) -> ConfigDict:
        return {"name": self.name, "value": self.value}
