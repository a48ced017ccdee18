from __future__ import annotations

from .config import ConfigFactory
from .role import RoleFactory
from .signup import SignupFactory
from .tier import TierFactory, TierMappingFactory
from .training import TrainingFactory
from .user import UserFactory

__all__ = [
    "ConfigFactory",
    "RoleFactory",
    "SignupFactory",
    "TierFactory",
    "TierMappingFactory",
    "TrainingFactory",
    "UserFactory",
]
