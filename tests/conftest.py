from __future__ import annotations

from os import environ
from pathlib import Path
from tempfile import gettempdir
from typing import TYPE_CHECKING

# Must happen before crossroads.settings is first imported.
environ["DATABASE_URL"] = environ.get("TEST_DATABASE_URL") or (
    f"sqlite:///{Path(gettempdir()) / 'crossroads-test.db'}"
)

if TYPE_CHECKING:
    import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "use_db: mark tests that use the database")


pytest_plugins = [
    "tests.fixtures",
]
