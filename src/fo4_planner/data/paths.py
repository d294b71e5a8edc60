"""Helpers for resolving dataset and per-user build locations."""
from __future__ import annotations

import os
from pathlib import Path

HOME_ENV_VAR = "FO4_PLANNER_HOME"


def get_perks_path(path: Path | str | None = None) -> Path:
    """Return the perk dataset file, defaulting to the bundled one."""
    if path is not None:
        return Path(path)
    return Path(__file__).resolve().parent / "perks.json"


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Fallout4Builds"
        return Path.home() / "Fallout4Builds"
    base = os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base) / "Fallout4Builds"
    return Path.home() / ".local" / "share" / "Fallout4Builds"


def get_builds_dir() -> Path:
    """Return the directory saved builds live in."""
    return get_user_data_dir() / "builds"
