from __future__ import annotations

from os.path import realpath
from pathlib import Path

import dunamai as _dunamai

UNKNOWN_VERSIONS = (None, "0.0.0")


def version_from_vcs() -> str | None:
    try:
        version = _dunamai.get_version(
            "crossroads",
            first_choice=_dunamai.Version.from_any_vcs,
        ).serialize()
    except Exception:
        return None
    return None if version in UNKNOWN_VERSIONS else version


def version_from_metadata() -> str | None:
    try:
        version = _dunamai.get_version(
            "crossroads",
            third_choice=_dunamai.Version.from_any_vcs,
        ).serialize()
    except Exception:
        return None
    return None if version in UNKNOWN_VERSIONS else version


def version_from_pyproject() -> str | None:
    import toml

    repo_root = Path(realpath(__file__)).parent.parent.parent
    try:
        pyproject = toml.load(repo_root / "pyproject.toml")
    except Exception:
        return None
    version = pyproject.get("project", {}).get("version")
    return None if version in UNKNOWN_VERSIONS else version


# A git checkout yields development versions like 1.2.0.post3.dev0+1d15510,
# an installed distribution yields its metadata version, and a bare source
# tree falls back to whatever pyproject.toml declares.
__version__ = version_from_vcs() or version_from_metadata() or version_from_pyproject() or "unknown"
