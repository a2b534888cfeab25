"""Read package dependencies from an IDE dependency-analysis export.

Two line forms are understood::

    <file path="$PROJECT_DIR$/ui/src/main/java/com/acme/ui/Button.java">
      <dependency path="$PROJECT_DIR$/core/src/main/java/com/acme/core/Bus.java"/>

and the plain ``source-path -> referenced-path`` form.  Both endpoints are
reduced to their package, with the leading segments abbreviated, so that
``com/acme/editor/ui/Button.java`` becomes ``c.a.e.ui``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from depzoom.extractors.base import read_head
from depzoom.model import DependencyGraph

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_ROOT = "src/main/java/"

_FILE_RE = re.compile(r'^\s*<file\s+path="([^"]+)"')
_DEPENDENCY_RE = re.compile(r'^\s*<dependency\s+path="([^"]+)"')
_ARROW_RE = re.compile(r"^\s*(\S+)\s+->\s+(\S+)\s*$")


def package_id(path: str, source_root: str, abbreviate: int = 4) -> str | None:
    """Return the coarse package identifier of a source path.

    Returns None for paths outside *source_root* and for classes in the
    default package.
    """
    if "/" in path:
        start = path.find(source_root)
        if start == -1:
            return None
        relative = path[start + len(source_root) :]
        stem, dot, _ext = relative.rpartition(".")
        dotted = (stem if dot else relative).replace("/", ".")
    else:
        # Already a qualified symbol such as com.acme.ui.Button
        dotted = path

    package, dot, _cls = dotted.rpartition(".")
    if not dot or not package:
        return None

    parts = package.split(".")
    for i in range(min(len(parts) - 1, abbreviate)):
        parts[i] = parts[i][:1]
    return ".".join(parts)


class IdeDepsExtractor:
    """Populate the graph with package-level import edges."""

    def __init__(self, *, source_root: str = DEFAULT_SOURCE_ROOT, abbreviate: int = 4):
        self._source_root = source_root
        self._abbreviate = abbreviate

    def can_handle(self, path: Path) -> bool:
        return any(
            _FILE_RE.match(line) or _ARROW_RE.match(line) for line in read_head(path)
        )

    def extract(self, path: Path, graph: DependencyGraph) -> None:
        dependent: str | None = None
        edges = 0

        with open(path, encoding="utf-8") as f:
            for line in f:
                m = _FILE_RE.match(line)
                if m:
                    dependent = self._package(m.group(1))
                    continue

                m = _DEPENDENCY_RE.match(line)
                if m:
                    edges += self._add(graph, dependent, self._package(m.group(1)))
                    continue

                m = _ARROW_RE.match(line)
                if m:
                    source = self._package(m.group(1))
                    edges += self._add(graph, source, self._package(m.group(2)))

        logger.debug("IDE export %s: %d package dependencies", path, edges)

    def _package(self, path: str) -> str | None:
        return package_id(path, self._source_root, self._abbreviate)

    @staticmethod
    def _add(graph: DependencyGraph, source: str | None, target: str | None) -> int:
        if source is None or target is None or source == target:
            return 0
        graph.add_edge(source, target)
        return 1
