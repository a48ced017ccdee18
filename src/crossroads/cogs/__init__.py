from __future__ import annotations

import logging
from importlib import import_module
from inspect import isclass
from pathlib import Path
from pkgutil import iter_modules
from typing import TYPE_CHECKING

from discord.ext import commands

from .about_cog import AboutCog
from .config_cog import ConfigCog
from .owner_cog import OwnerCog
from .role_cog import RoleCog
from .signup_cog import SignupCog
from .tier_cog import TierCog
from .training_cog import TrainingCog

if TYPE_CHECKING:
    from discord.ext.commands import AutoShardedBot

logger = logging.getLogger(__name__)

# Only exported cogs will be loaded into the bot at runtime.
__all__ = [
    "AboutCog",
    "ConfigCog",
    "OwnerCog",
    "RoleCog",
    "SignupCog",
    "TierCog",
    "TrainingCog",
]


async def load_all_cogs(bot: AutoShardedBot) -> AutoShardedBot:  # pragma: no cover
    package_dir = Path(__file__).resolve().parent
    for info in iter_modules([str(package_dir)]):
        module = import_module(f"{__name__}.{info.name}")
        for attribute_name in dir(module):
            attribute = getattr(module, attribute_name)

            # a module is loaded as an extension once, for its exported cog
            if (
                isclass(attribute)
                and issubclass(attribute, commands.Cog)
                and attribute.__name__ in __all__
            ):
                if module.__name__ in bot.extensions:
                    logger.info("reloading extension %s...", module.__name__)
                    await bot.reload_extension(module.__name__)
                else:
                    logger.info("loading extension %s...", module.__name__)
                    await bot.load_extension(module.__name__)
                break
    return bot
