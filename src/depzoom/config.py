"""Settings read from ``.depzoom.toml`` or ``[tool.depzoom]`` in pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from depzoom.analysis import DEFAULT_MAX_PATH_DEPTH
from depzoom.extractors.ide_deps import DEFAULT_SOURCE_ROOT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepzoomConfig:
    rules: Path | None = None
    prefix: str | None = None
    pom: Path | None = None
    source_root: str = DEFAULT_SOURCE_ROOT
    abbreviate: int = 4
    max_path_depth: int = DEFAULT_MAX_PATH_DEPTH
    reduce: bool = True

    def with_overrides(self, **overrides: Any) -> DepzoomConfig:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


# TOML type expected for every setting; path settings are strings resolved
# against the directory of the file that declares them.
_TOML_TYPES: dict[str, type] = {
    "rules": str,
    "prefix": str,
    "pom": str,
    "source_root": str,
    "abbreviate": int,
    "max_path_depth": int,
    "reduce": bool,
}
_PATH_KEYS = {"rules", "pom"}


def _from_table(table: dict[str, Any], base_dir: Path) -> DepzoomConfig:
    values: dict[str, Any] = {}
    for key, value in table.items():
        key = key.replace("-", "_")
        expected = _TOML_TYPES.get(key)
        if expected is None:
            logger.warning("Unknown depzoom setting %r ignored", key)
            continue
        # TOML booleans are not integer settings
        if not isinstance(value, expected) or (
            expected is int and isinstance(value, bool)
        ):
            logger.warning(
                "depzoom setting %r must be %s, got %r; ignored",
                key,
                expected.__name__,
                value,
            )
            continue
        if key in _PATH_KEYS:
            value = base_dir / value
        values[key] = value
    return DepzoomConfig(**values)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {}


def _table(data: dict[str, Any], *keys: str) -> dict[str, Any] | None:
    for key in keys:
        data = data.get(key, {})
        if not isinstance(data, dict):
            return None
    return data or None


def load_config(start_dir: Path, explicit: Path | None = None) -> DepzoomConfig:
    """Load settings for a run started in *start_dir*.

    An *explicit* file wins; otherwise ``.depzoom.toml`` is tried first,
    then ``[tool.depzoom]`` in ``pyproject.toml``.  Relative paths in the
    file are resolved against the file's directory.
    """
    if explicit is not None:
        data = _read_toml(explicit)
        table = _table(data, "depzoom") or _table(data, "tool", "depzoom")
        if table:
            return _from_table(table, explicit.parent)
        return DepzoomConfig()

    depzoom_toml = start_dir / ".depzoom.toml"
    if depzoom_toml.exists():
        table = _table(_read_toml(depzoom_toml), "depzoom")
        if table:
            return _from_table(table, start_dir)

    pyproject = start_dir / "pyproject.toml"
    if pyproject.exists():
        table = _table(_read_toml(pyproject), "tool", "depzoom")
        if table:
            return _from_table(table, start_dir)

    return DepzoomConfig()
