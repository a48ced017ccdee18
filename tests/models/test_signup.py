from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from crossroads.database import DatabaseSession

if TYPE_CHECKING:
    from tests.fixtures import Factories

pytestmark = pytest.mark.use_db


class TestModelSignup:
    def test_signup(self, factories: Factories) -> None:
        tank = factories.role.create()
        heal = factories.role.create()
        user = factories.user.create()
        training = factories.training.create(roles=[tank, heal])
        signup = factories.signup.create(user=user, training=training, roles=[heal, tank])
        DatabaseSession.expire_all()

        assert signup.to_dict() == {
            "id": signup.id,
            "user_id": user.id,
            "training_id": training.id,
            "role_ids": sorted([tank.id, heal.id]),
            "created_at": signup.created_at,
        }
