from __future__ import annotations

from pathlib import Path

CLIENT_TOKEN = "my-token"

TST_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TST_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

SRC_DIRS = [
    REPO_ROOT / "tests",
    SRC_ROOT / "crossroads",
]
