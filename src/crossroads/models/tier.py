from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from . import Base

if TYPE_CHECKING:
    from . import Training  # noqa: F401


class TierDict(TypedDict):
    id: int
    name: str
    discord_role_ids: list[int]


class Tier(Base):
    """An access level for trainings, granted by having one of its Discord roles."""

    __tablename__ = "tiers"

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
        doc="The internal ID of this tier",
    )
    name = Column(
        String(100),
        nullable=False,
        unique=True,
        doc="Unique name of this tier",
    )

    mappings = relationship(
        "TierMapping",
        back_populates="tier",
        cascade="all, delete-orphan",
        doc="Discord roles that fulfill this tier",
    )
    trainings = relationship(
        "Training",
        back_populates="tier",
        doc="Trainings that require this tier",
    )

    def to_dict(self) -> TierDict:
        return {
            "id": self.id,
            "name": self.name,
            "discord_role_ids": sorted(mapping.discord_role_id for mapping in self.mappings),
        }


class TierMapping(Base):
    """Links a tier to a Discord role that fulfills it."""

    __tablename__ = "tier_mappings"
    __table_args__ = (UniqueConstraint("tier_id", "discord_role_id"),)

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
    )
    tier_id = Column(
        Integer,
        ForeignKey("tiers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="The tier this mapping belongs to",
    )
    discord_role_id = Column(
        BigInteger,
        nullable=False,
        doc="The external Discord ID of a role that fulfills the tier",
    )

    tier = relationship("Tier", back_populates="mappings")
