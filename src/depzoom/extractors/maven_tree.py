"""Read module dependencies from ``mvn dependency:tree`` output."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from depzoom.extractors.base import read_head
from depzoom.model import DependencyGraph

logger = logging.getLogger(__name__)

# [INFO] --- maven-dependency-plugin:3.6.1:tree (default-cli) @ core ---
_HEADER_RE = re.compile(r"maven-dependency-plugin:[^:\s]*:tree\b")

# Leading log level emitted by Maven: "[INFO] ", "[WARNING] ", ...
_LEVEL_RE = re.compile(r"^\[[A-Z]+\]\s?")

# Only first-level branches are direct dependencies of the listed module.
_DIRECT_MARKERS = ("+- ", "\\- ")


def normalize_coordinate(coordinate: str, *, scoped: bool = True) -> str | None:
    """Reduce a Maven coordinate to ``group:artifact:version``.

    Dependency lines read ``group:artifact:packaging[:classifier]:version:scope``.
    Pass ``scoped=False`` for the module line under a tree header, which has
    no scope: ``group:artifact:packaging[:classifier]:version``.  Returns None
    when the coordinate has too few segments to be a Maven artifact.
    """
    token = coordinate.strip().split(" ", 1)[0]
    parts = token.split(":")
    if len(parts) < 4 or len(parts) > (6 if scoped else 5):
        return None
    if scoped and len(parts) >= 5:
        version = parts[-2]
    else:
        version = parts[-1]
    return f"{parts[0]}:{parts[1]}:{version}"


def group_id_from_pom(pom_path: Path) -> str | None:
    """Read the groupId of *pom_path* using jgo.

    Uses jgo's POM class which handles parent inheritance for groupId.
    """
    try:
        from jgo.maven import POM
    except ImportError:
        logger.warning(
            "jgo not installed, cannot read groupId from %s. "
            "Install with: pip install depzoom[maven]",
            pom_path,
        )
        return None

    try:
        pom = POM(pom_path)
        return pom.groupId or None
    except (OSError, ValueError, KeyError, AttributeError) as e:
        logger.warning("Could not read groupId from %s: %s", pom_path, e)
    return None


class MavenTreeExtractor:
    """Populate the graph with direct module dependencies from a tree log."""

    def __init__(self, *, prefix: str | None = None):
        self._prefix = prefix

    def can_handle(self, path: Path) -> bool:
        return any(_HEADER_RE.search(line) for line in read_head(path))

    def extract(self, path: Path, graph: DependencyGraph) -> None:
        lines = path.read_text(encoding="utf-8").splitlines()
        modules = 0
        edges = 0
        current: str | None = None

        i = 0
        while i < len(lines):
            line = _LEVEL_RE.sub("", lines[i])
            i += 1

            if _HEADER_RE.search(line):
                current = None
                if i < len(lines):
                    current = normalize_coordinate(
                        _LEVEL_RE.sub("", lines[i]), scoped=False
                    )
                    i += 1
                if current is not None and self._is_relevant(current):
                    graph.add_node(current)
                    modules += 1
                else:
                    current = None
                continue

            if current is None or not line.startswith(_DIRECT_MARKERS):
                continue

            dependency = normalize_coordinate(line[3:])
            if dependency is None:
                logger.debug("%s:%d: ignoring malformed line %r", path, i, line)
                continue
            if dependency == current or not self._is_relevant(dependency):
                continue
            graph.add_edge(current, dependency)
            edges += 1

        logger.debug(
            "Maven tree %s: %d modules, %d direct dependencies", path, modules, edges
        )

    def _is_relevant(self, module_id: str) -> bool:
        return self._prefix is None or module_id.startswith(self._prefix)
