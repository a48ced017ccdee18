from __future__ import annotations

from .configs import ConfigsService
from .roles import RolesService
from .signups import RolePartition, SignupsService, UserSignup
from .tiers import TiersService
from .trainings import RosterEntry, TrainingsService
from .users import UsersService


class ServicesRegistry:
    def __init__(self) -> None:
        self.configs = ConfigsService()
        self.roles = RolesService()
        self.signups = SignupsService()
        self.tiers = TiersService()
        self.trainings = TrainingsService()
        self.users = UsersService()


__all__ = [
    "ConfigsService",
    "RolePartition",
    "RolesService",
    "RosterEntry",
    "ServicesRegistry",
    "SignupsService",
    "TiersService",
    "TrainingsService",
    "UserSignup",
    "UsersService",
]
