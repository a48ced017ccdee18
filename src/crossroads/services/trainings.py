from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypedDict

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer
from sqlalchemy import func

from crossroads.database import DatabaseSession
from crossroads.enums import ACTIVE_STATES, TrainingState
from crossroads.models import (
    Role,
    RoleDict,
    Signup,
    SignupRole,
    Training,
    TrainingDict,
    TrainingRole,
    User,
)

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)


class RosterEntry(TypedDict):
    discord_id: int
    gw2_id: str
    role_reprs: list[str]


class TrainingsService:
    training: Training | None = None

    @sync_to_async()
    @tracer.wrap()
    def create(self, *, title: str, date: datetime, role_ids: list[int]) -> TrainingDict:
        self.training = Training(title=title, date=date, state=TrainingState.CREATED.value)
        self.training.training_roles = [TrainingRole(role_id=role_id) for role_id in role_ids]
        DatabaseSession.add(self.training)
        DatabaseSession.commit()
        return self.training.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def select(self, training_id: int, state: TrainingState | None = None) -> TrainingDict | None:
        query = DatabaseSession.query(Training).filter(Training.id == training_id)
        if state is not None:
            query = query.filter(Training.state == state.value)
        self.training = query.one_or_none()
        return self.training.to_dict() if self.training else None

    @sync_to_async()
    @tracer.wrap()
    def by_state(self, *states: TrainingState) -> list[TrainingDict]:
        states = states or ACTIVE_STATES
        trainings = (
            DatabaseSession.query(Training)
            .filter(Training.state.in_([state.value for state in states]))
            .order_by(Training.date, Training.id)
            .all()
        )
        return [training.to_dict() for training in trainings]

    @sync_to_async()
    @tracer.wrap()
    def set_state(self, training_id: int, state: TrainingState) -> TrainingDict | None:
        self.training = DatabaseSession.get(Training, training_id)
        if self.training is None:
            return None
        self.training.state = state.value  # type: ignore
        DatabaseSession.commit()
        return self.training.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def set_tier(self, training_id: int, tier_id: int | None) -> TrainingDict | None:
        self.training = DatabaseSession.get(Training, training_id)
        if self.training is None:
            return None
        self.training.tier_id = tier_id  # type: ignore
        DatabaseSession.commit()
        return self.training.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def roles(self, training_id: int) -> list[RoleDict]:
        """Active roles that can be selected when signing up for the given training."""
        roles = (
            DatabaseSession.query(Role)
            .join(TrainingRole, TrainingRole.role_id == Role.id)
            .filter(TrainingRole.training_id == training_id, Role.active.is_(True))
            .order_by(Role.id)
            .all()
        )
        return [role.to_dict() for role in roles]

    @sync_to_async()
    @tracer.wrap()
    def signup_count(self, training_id: int) -> int:
        return (
            DatabaseSession.query(func.count(Signup.id))
            .filter(Signup.training_id == training_id)
            .scalar()
        )

    @sync_to_async()
    @tracer.wrap()
    def role_counts(self, training_id: int) -> dict[int, int]:
        """Map of role id to how many signups of the given training picked that role."""
        rows = (
            DatabaseSession.query(SignupRole.role_id, func.count(SignupRole.id))
            .join(Signup, Signup.id == SignupRole.signup_id)
            .filter(Signup.training_id == training_id)
            .group_by(SignupRole.role_id)
            .all()
        )
        return {role_id: count for role_id, count in rows}

    @sync_to_async()
    @tracer.wrap()
    def roster(self, training_id: int) -> list[RosterEntry]:
        signups = (
            DatabaseSession.query(Signup)
            .join(User, User.id == Signup.user_id)
            .filter(Signup.training_id == training_id)
            .order_by(User.gw2_id)
            .all()
        )
        return [
            {
                "discord_id": signup.user.discord_id,
                "gw2_id": signup.user.gw2_id,
                "role_reprs": sorted(signup_role.role.repr for signup_role in signup.signup_roles),
            }
            for signup in signups
        ]
