from __future__ import annotations

from ._version import __version__
from .cli import main
from .client import CrossroadsBot

__all__ = [
    "CrossroadsBot",
    "__version__",
    "main",
]
