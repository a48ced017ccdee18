from __future__ import annotations

from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from crossroads.enums import TrainingState

from . import Base, now

if TYPE_CHECKING:
    from . import Role, Signup, Tier  # noqa: F401

MAX_TITLE_LENGTH = 255


class TrainingDict(TypedDict):
    id: int
    title: str
    date: datetime
    state: int
    tier_id: int | None
    created_at: datetime
    updated_at: datetime


class Training(Base):
    """A scheduled training event that users can sign up for."""

    __tablename__ = "trainings"

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
        doc="The internal ID of this training",
    )
    title = Column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
        doc="Human readable name of this training",
    )
    date = Column(
        DateTime,
        nullable=False,
        index=True,
        doc="UTC timestamp when this training takes place",
    )
    state = Column(
        Integer(),
        default=TrainingState.CREATED.value,
        server_default=str(TrainingState.CREATED.value),
        index=True,
        nullable=False,
        doc="Lifecycle state of this training, see TrainingState",
    )
    tier_id = Column(
        Integer,
        ForeignKey("tiers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="The tier required to sign up for this training, if any",
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=partial(datetime.now, UTC),
        server_default=now,
        doc="UTC timestamp when this training was first created",
    )
    updated_at = Column(
        DateTime,
        nullable=False,
        default=partial(datetime.now, UTC),
        server_default=now,
        onupdate=partial(datetime.now, UTC),
        doc="UTC timestamp when this training was last updated",
    )

    tier = relationship("Tier", back_populates="trainings")
    training_roles = relationship(
        "TrainingRole",
        back_populates="training",
        cascade="all, delete-orphan",
        doc="Roles that can be selected when signing up for this training",
    )
    signups = relationship(
        "Signup",
        back_populates="training",
        cascade="all, delete-orphan",
        doc="Signups for this training",
    )

    @property
    def training_state(self) -> TrainingState:
        return TrainingState(self.state)

    def to_dict(self) -> TrainingDict:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "state": self.state,
            "tier_id": self.tier_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class TrainingRole(Base):
    """A role that is selectable for a particular training."""

    __tablename__ = "training_roles"
    __table_args__ = (UniqueConstraint("training_id", "role_id"),)

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
    )
    training_id = Column(
        Integer,
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    training = relationship("Training", back_populates="training_roles")
    role = relationship("Role")
