"""Read the raw perk dataset from disk."""
from __future__ import annotations

import json
from pathlib import Path

from fo4_planner.data.errors import DataLoadError


def read_dataset(path: Path) -> object:
    """Decode *path* as UTF-8 JSON; any failure becomes a DataLoadError."""
    if not path.is_file():
        raise DataLoadError(f"Perk dataset not found: {path}")
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise DataLoadError(
            f"Invalid JSON in {path.name} at line {exc.lineno}, column {exc.colno}: {exc.msg}"
        ) from exc
    except UnicodeDecodeError as exc:
        raise DataLoadError(f"{path.name} is not UTF-8 text") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read {path}: {exc.strerror}") from exc
