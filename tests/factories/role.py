from __future__ import annotations

import factory

from crossroads.models import Role

EMOJI = ["🛡", "⚔", "🏹", "💉", "🔥", "❄", "🌀", "⚡"]


class RoleFactory(factory.alchemy.SQLAlchemyModelFactory):
    title = factory.faker.Faker("job")
    repr = factory.declarations.Sequence(lambda n: f"role{n}")
    emoji = factory.declarations.Sequence(lambda n: EMOJI[n % len(EMOJI)])
    active = True

    class Meta:
        model = Role
        sqlalchemy_session_persistence = "flush"
