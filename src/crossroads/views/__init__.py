from __future__ import annotations

from .base_view import BaseView
from .board_view import SignupBoardView

__all__ = [
    "BaseView",
    "SignupBoardView",
]
