from __future__ import annotations

from typing import TypedDict

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer
from sqlalchemy.exc import IntegrityError

from crossroads.database import DatabaseSession
from crossroads.enums import ACTIVE_STATES
from crossroads.models import (
    Role,
    RoleDict,
    Signup,
    SignupDict,
    SignupRole,
    Training,
    TrainingDict,
    TrainingRole,
)


class RolePartition(TypedDict):
    roles: list[RoleDict]
    selected: list[int]


class UserSignup(TypedDict):
    training: TrainingDict
    role_reprs: list[str]


class SignupsService:
    signup: Signup | None = None

    @sync_to_async()
    @tracer.wrap()
    def select(self, user_id: int, training_id: int) -> SignupDict | None:
        self.signup = (
            DatabaseSession.query(Signup)
            .filter(Signup.user_id == user_id, Signup.training_id == training_id)
            .one_or_none()
        )
        return self.signup.to_dict() if self.signup else None

    @sync_to_async()
    @tracer.wrap()
    def create(self, user_id: int, training_id: int, role_ids: set[int]) -> SignupDict | None:
        """
        Sign the user up for a training with the given roles.

        The signup and all of its roles are written together so that an abandoned
        conversation never leaves a signup without roles behind. Returns None if
        the user was already signed up.
        """
        existing = (
            DatabaseSession.query(Signup.id)
            .filter(Signup.user_id == user_id, Signup.training_id == training_id)
            .first()
        )
        if existing is not None:
            return None
        self.signup = Signup(user_id=user_id, training_id=training_id)
        self.signup.signup_roles = [SignupRole(role_id=role_id) for role_id in sorted(role_ids)]
        DatabaseSession.add(self.signup)
        try:
            DatabaseSession.commit()
        except IntegrityError:
            DatabaseSession.rollback()
            self.signup = None
            return None
        return self.signup.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def set_roles(self, signup_id: int, role_ids: set[int]) -> SignupDict:
        self.signup = DatabaseSession.get(Signup, signup_id)
        assert self.signup
        DatabaseSession.query(SignupRole).filter(SignupRole.signup_id == signup_id).delete()
        for role_id in sorted(role_ids):
            DatabaseSession.add(SignupRole(signup_id=signup_id, role_id=role_id))
        DatabaseSession.commit()
        DatabaseSession.refresh(self.signup)
        return self.signup.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def remove(self, signup_id: int) -> bool:
        self.signup = DatabaseSession.get(Signup, signup_id)
        if self.signup is None:
            return False
        DatabaseSession.delete(self.signup)
        DatabaseSession.commit()
        self.signup = None
        return True

    @sync_to_async()
    @tracer.wrap()
    def role_partition(self, signup_id: int) -> RolePartition:
        """The training's selectable roles and which of them this signup currently has."""
        signup = DatabaseSession.get(Signup, signup_id)
        assert signup
        rows = (
            DatabaseSession.query(Role, SignupRole.id)
            .join(TrainingRole, TrainingRole.role_id == Role.id)
            .outerjoin(
                SignupRole,
                (SignupRole.role_id == Role.id) & (SignupRole.signup_id == signup_id),
            )
            .filter(TrainingRole.training_id == signup.training_id, Role.active.is_(True))
            .order_by(Role.id)
            .all()
        )
        return {
            "roles": [role.to_dict() for role, _ in rows],
            "selected": [role.id for role, signup_role_id in rows if signup_role_id is not None],
        }

    @sync_to_async()
    @tracer.wrap()
    def for_user(self, user_id: int) -> list[UserSignup]:
        """Signups of the given user for trainings that have not finished yet."""
        signups = (
            DatabaseSession.query(Signup)
            .join(Training, Training.id == Signup.training_id)
            .filter(
                Signup.user_id == user_id,
                Training.state.in_([state.value for state in ACTIVE_STATES]),
            )
            .order_by(Training.date, Training.id)
            .all()
        )
        return [
            {
                "training": signup.training.to_dict(),
                "role_reprs": sorted(signup_role.role.repr for signup_role in signup.signup_roles),
            }
            for signup in signups
        ]
