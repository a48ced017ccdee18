from __future__ import annotations

from enum import Enum
from typing import Any


class TrainingState(Enum):
    """Lifecycle of a training, staff move it forward in declaration order."""

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:  # noqa: ARG004
        """Give each enum value an increasing numerical value starting at 1."""
        value = len(cls.__members__) + 1
        obj = object.__new__(cls)
        obj._value_ = value
        return obj

    def __init__(self, title: str, emoji: str) -> None:
        self.title = title
        self.emoji = emoji

    def __str__(self) -> str:
        return self.title

    @property
    def on_board(self) -> bool:
        return self in BOARD_STATES

    # DO NOT REORDER -- IT WOULD INVALIDATE EXISTING DATABASE ENTRIES!
    CREATED = "Created", "🛠"
    OPEN = "Open", "🟢"
    CLOSED = "Closed", "🔒"
    STARTED = "Started", "🏁"
    FINISHED = "Finished", "✔"


# Trainings in these states have a message on the signup board.
BOARD_STATES = (TrainingState.OPEN, TrainingState.CLOSED, TrainingState.STARTED)

# Trainings in these states are listed to users as current trainings.
ACTIVE_STATES = BOARD_STATES
