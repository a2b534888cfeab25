"""Readers for dependency listings."""

from __future__ import annotations

from depzoom.extractors.base import Extractor
from depzoom.extractors.edge_list import EdgeListExtractor, read_changes
from depzoom.extractors.ide_deps import IdeDepsExtractor
from depzoom.extractors.maven_tree import MavenTreeExtractor, group_id_from_pom

__all__ = [
    "EdgeListExtractor",
    "Extractor",
    "IdeDepsExtractor",
    "MavenTreeExtractor",
    "group_id_from_pom",
    "read_changes",
]
