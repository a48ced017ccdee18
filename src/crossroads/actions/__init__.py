from __future__ import annotations

from .base_action import BaseAction
from .config_action import ConfigAction
from .role_action import RoleAction
from .signup_action import SignupAction
from .tier_action import TierAction
from .training_action import TrainingAction

__all__ = [
    "BaseAction",
    "ConfigAction",
    "RoleAction",
    "SignupAction",
    "TierAction",
    "TrainingAction",
]
