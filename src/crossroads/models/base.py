from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import alembic
import alembic.command
import alembic.config
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base  # type: ignore (current type stubs are broken)
from sqlalchemy_utils import create_database, database_exists

from . import import_models

if TYPE_CHECKING:
    from sqlalchemy.ext.declarative import DeclarativeMeta

MODULE_ROOT = Path(__file__).resolve().parent
PACKAGE_ROOT = MODULE_ROOT.parent
MIGRATIONS_DIR = PACKAGE_ROOT / "migrations"
ALEMBIC_INI = MIGRATIONS_DIR / "alembic.ini"

logger = logging.getLogger(__name__)

now = text("CURRENT_TIMESTAMP")
Base: DeclarativeMeta = declarative_base()


def alembic_config(database_url: str) -> alembic.config.Config:
    config = alembic.config.Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def create_all(database_url: str) -> None:
    import_models()
    engine = create_engine(database_url, echo=False)
    if not database_exists(engine.url):  # pragma: no cover
        logger.info("creating database %s", engine.url.database)
        create_database(engine.url)
    with engine.connect() as connection:
        config = alembic_config(database_url)
        config.attributes["connection"] = connection
        alembic.command.upgrade(config, "head")
        connection.commit()
    engine.dispose()


def reverse_all(database_url: str) -> None:
    import_models()
    engine = create_engine(database_url, echo=False)
    with engine.connect() as connection:
        config = alembic_config(database_url)
        config.attributes["connection"] = connection
        alembic.command.downgrade(config, "base")
        connection.commit()
    engine.dispose()
