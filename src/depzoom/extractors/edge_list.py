"""Read plain ``dependent dependency`` pairs, one per line."""

from __future__ import annotations

import logging
from pathlib import Path

from depzoom.model import DependencyGraph

logger = logging.getLogger(__name__)


class EdgeListExtractor:
    """Fallback reader for whitespace-separated edge lists."""

    def can_handle(self, path: Path) -> bool:
        return path.is_file()

    def extract(self, path: Path, graph: DependencyGraph) -> None:
        edges = 0
        with open(path, encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                columns = line.split()
                if len(columns) != 2:
                    if columns:
                        logger.debug("%s:%d: ignoring %r", path, lineno, line.rstrip())
                    continue
                source, target = columns
                if source == target:
                    continue
                graph.add_edge(source, target)
                edges += 1
        logger.debug("Edge list %s: %d edges", path, edges)


def read_changes(path: Path) -> dict[str, int]:
    """Read ``module count`` lines into a mapping of change counts."""
    changes: dict[str, int] = {}
    with open(path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            columns = line.split()
            if len(columns) != 2:
                continue
            try:
                changes[columns[0]] = int(columns[1])
            except ValueError:
                logger.debug("%s:%d: ignoring non-numeric count %r", path, lineno, columns[1])
    logger.debug("Read %d change counts from %s", len(changes), path)
    return changes
