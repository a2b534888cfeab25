"""Extractor protocol: all extractors conform to this interface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from depzoom.model import DependencyGraph


class Extractor(Protocol):
    """Protocol for dependency listing readers."""

    def can_handle(self, path: Path) -> bool:
        """Return True if this extractor understands the file at *path*."""
        ...

    def extract(self, path: Path, graph: DependencyGraph) -> None:
        """Add the edges listed in *path* to *graph*."""
        ...


def read_head(path: Path, lines: int = 200) -> list[str]:
    """Return up to *lines* leading lines of *path* for format sniffing."""
    head: list[str] = []
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            head.append(line.rstrip("\n"))
            if len(head) >= lines:
                break
    return head
