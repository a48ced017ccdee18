from __future__ import annotations

from datetime import UTC, datetime
from functools import partial
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from . import Base, now

if TYPE_CHECKING:
    from . import Role, Training, User  # noqa: F401


class SignupDict(TypedDict):
    id: int
    user_id: int
    training_id: int
    role_ids: list[int]
    created_at: datetime


class Signup(Base):
    """A user's signup for a training along with the roles they picked."""

    __tablename__ = "signups"
    __table_args__ = (UniqueConstraint("user_id", "training_id"),)

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
        doc="The internal ID of this signup",
    )
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="The user that signed up",
    )
    training_id = Column(
        Integer,
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="The training the user signed up for",
    )
    created_at = Column(
        DateTime,
        nullable=False,
        default=partial(datetime.now, UTC),
        server_default=now,
        doc="UTC timestamp when this signup was made",
    )

    user = relationship("User", back_populates="signups")
    training = relationship("Training", back_populates="signups")
    signup_roles = relationship(
        "SignupRole",
        back_populates="signup",
        cascade="all, delete-orphan",
        doc="Roles selected for this signup",
    )

    def to_dict(self) -> SignupDict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "training_id": self.training_id,
            "role_ids": sorted(signup_role.role_id for signup_role in self.signup_roles),
            "created_at": self.created_at,
        }


class SignupRole(Base):
    """A role that a user selected for one signup."""

    __tablename__ = "signup_roles"
    __table_args__ = (UniqueConstraint("signup_id", "role_id"),)

    id = Column(
        Integer,
        autoincrement=True,
        nullable=False,
        primary_key=True,
    )
    signup_id = Column(
        Integer,
        ForeignKey("signups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    signup = relationship("Signup", back_populates="signup_roles")
    role = relationship("Role")
