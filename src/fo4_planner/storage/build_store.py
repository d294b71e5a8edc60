"""File-system storage for saved builds.

Each build is one pretty-printed JSON snapshot named after the build,
kept in the per-user builds directory (see data.paths).
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from fo4_planner.data import paths

logger = logging.getLogger(__name__)

BUILD_SUFFIX = ".json"


class BuildStoreError(Exception):
    """Raised when a build cannot be written, found or read."""


class BuildStore:
    """Saves and loads build snapshots as JSON files."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else paths.get_builds_dir()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, name: str) -> Path:
        """Return where the build called *name* is stored."""
        name = name.strip()
        if not name or name in (".", "..") or any(sep in name for sep in ("/", "\\")):
            raise BuildStoreError(f"Invalid build name: {name!r}")
        return self._base_dir / f"{name}{BUILD_SUFFIX}"

    def save(self, payload: Dict[str, Any]) -> Path:
        """Write a build snapshot; the snapshot must carry a name."""
        name = payload.get("name")
        if not name:
            raise BuildStoreError(
                'A name for the build must be specified. Try "name <NAME>" or "save <NAME>".'
            )
        path = self.path_for(name)
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise BuildStoreError(f"Unable to write build file {path}: {exc}") from exc
        logger.info("Saved build %r to %s", name, path)
        return path

    def resolve(self, ref: Path | str) -> Path:
        """Find a build file from a path, a path without suffix, or a name."""
        ref_path = Path(ref)
        candidates = [ref_path]
        if ref_path.suffix != BUILD_SUFFIX:
            candidates.append(ref_path.with_name(ref_path.name + BUILD_SUFFIX))
        if not ref_path.is_absolute():
            candidates.extend(self._base_dir / c for c in list(candidates))
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise BuildStoreError(f'Unable to find build file for "{ref}"')

    def load(self, ref: Path | str) -> Dict[str, Any]:
        """Read the snapshot stored at *ref* (see resolve())."""
        path = self.resolve(ref)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise BuildStoreError(f"Unable to read build file {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise BuildStoreError(f"Build file {path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise BuildStoreError(f"Build file {path} does not hold a build.")
        logger.debug("Loaded build from %s", path)
        return payload

    def list_builds(self) -> List[str]:
        """Names of all saved builds, sorted."""
        if not self._base_dir.is_dir():
            return []
        return sorted(p.stem for p in self._base_dir.glob(f"*{BUILD_SUFFIX}") if p.is_file())
