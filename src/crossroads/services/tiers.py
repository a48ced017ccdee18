from __future__ import annotations

from asgiref.sync import sync_to_async
from ddtrace.trace import tracer

from crossroads.database import DatabaseSession
from crossroads.models import Tier, TierDict, TierMapping


class TiersService:
    @sync_to_async()
    @tracer.wrap()
    def create(self, name: str) -> TierDict | None:
        if DatabaseSession.query(Tier.id).filter(Tier.name == name).first() is not None:
            return None
        tier = Tier(name=name)
        DatabaseSession.add(tier)
        DatabaseSession.commit()
        return tier.to_dict()

    @sync_to_async()
    @tracer.wrap()
    def select(self, tier_id: int) -> TierDict | None:
        tier = DatabaseSession.get(Tier, tier_id)
        return tier.to_dict() if tier else None

    @sync_to_async()
    @tracer.wrap()
    def select_by_name(self, name: str) -> TierDict | None:
        tier = DatabaseSession.query(Tier).filter(Tier.name == name).one_or_none()
        return tier.to_dict() if tier else None

    @sync_to_async()
    @tracer.wrap()
    def all(self) -> list[TierDict]:
        return [tier.to_dict() for tier in DatabaseSession.query(Tier).order_by(Tier.name).all()]

    @sync_to_async()
    @tracer.wrap()
    def delete(self, name: str) -> bool:
        tier = DatabaseSession.query(Tier).filter(Tier.name == name).one_or_none()
        if tier is None:
            return False
        for training in tier.trainings:
            training.tier_id = None
        DatabaseSession.delete(tier)
        DatabaseSession.commit()
        return True

    @sync_to_async()
    @tracer.wrap()
    def add_discord_role(self, tier_id: int, discord_role_id: int) -> bool:
        exists = (
            DatabaseSession.query(TierMapping.id)
            .filter(TierMapping.tier_id == tier_id, TierMapping.discord_role_id == discord_role_id)
            .first()
        )
        if exists is not None:
            return False
        DatabaseSession.add(TierMapping(tier_id=tier_id, discord_role_id=discord_role_id))
        DatabaseSession.commit()
        return True

    @sync_to_async()
    @tracer.wrap()
    def remove_discord_role(self, tier_id: int, discord_role_id: int) -> bool:
        deleted = (
            DatabaseSession.query(TierMapping)
            .filter(TierMapping.tier_id == tier_id, TierMapping.discord_role_id == discord_role_id)
            .delete()
        )
        DatabaseSession.commit()
        return bool(deleted)
