from __future__ import annotations

from importlib import import_module
from inspect import getmembers, isclass
from pathlib import Path
from pkgutil import iter_modules


def import_models() -> None:  # pragma: no cover
    package_dir = Path(__file__).resolve().parent
    for info in iter_modules([str(package_dir)]):
        module = import_module(f"{__name__}.{info.name}")
        for name, _object in getmembers(module, isclass):
            if isclass(_object) and issubclass(_object, Base) and name not in globals():
                globals()[name] = _object


from .base import Base, create_all, now, reverse_all  # noqa: I001,E402

from .config import Config, ConfigDict  # noqa: E402
from .role import Role, RoleDict  # noqa: E402
from .signup import Signup, SignupDict, SignupRole  # noqa: E402
from .tier import Tier, TierDict, TierMapping  # noqa: E402
from .training import Training, TrainingDict, TrainingRole  # noqa: E402
from .user import User, UserDict  # noqa: E402

__all__ = [
    "Base",
    "Config",
    "ConfigDict",
    "Role",
    "RoleDict",
    "Signup",
    "SignupDict",
    "SignupRole",
    "Tier",
    "TierDict",
    "TierMapping",
    "Training",
    "TrainingDict",
    "TrainingRole",
    "User",
    "UserDict",
    "create_all",
    "import_models",
    "now",
    "reverse_all",
]
