#!/usr/bin/env python3
"""Autogenerate an alembic revision: create_db_revision.py DATABASE_URL MESSAGE"""

from __future__ import annotations

import sys
from os.path import realpath
from pathlib import Path

import alembic
import alembic.command
import alembic.config

SRC_ROOT = Path(realpath(__file__)).parent.parent
PACKAGE_DIR = SRC_ROOT / "src" / "crossroads"
MIGRATIONS_DIR = PACKAGE_DIR / "migrations"
ALEMBIC_INI = MIGRATIONS_DIR / "alembic.ini"

if len(sys.argv) != 3:
    sys.exit(__doc__)

url, message = sys.argv[1], sys.argv[2]

config = alembic.config.Config(str(ALEMBIC_INI))
config.set_main_option("script_location", str(MIGRATIONS_DIR))
config.set_main_option("sqlalchemy.url", url)
alembic.command.revision(config, message=message, autogenerate=True)
