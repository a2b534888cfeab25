"""Auto-detect the input format and return the matching extractor."""

from __future__ import annotations

from pathlib import Path

from depzoom.config import DepzoomConfig
from depzoom.extractors import (
    EdgeListExtractor,
    Extractor,
    IdeDepsExtractor,
    MavenTreeExtractor,
)

FORMATS = ("auto", "maven", "ide", "edges")


def _candidates(config: DepzoomConfig, prefix: str | None) -> dict[str, Extractor]:
    return {
        "maven": MavenTreeExtractor(prefix=prefix),
        "ide": IdeDepsExtractor(
            source_root=config.source_root, abbreviate=config.abbreviate
        ),
        "edges": EdgeListExtractor(),
    }


def detect_extractor(
    path: Path,
    config: DepzoomConfig,
    *,
    fmt: str = "auto",
    prefix: str | None = None,
) -> Extractor:
    """Return the extractor for *path*.

    With ``fmt="auto"`` the leading lines are sniffed; the edge-list reader
    is the fallback.
    """
    extractors = _candidates(config, prefix)
    if fmt != "auto":
        return extractors[fmt]
    for name in ("maven", "ide"):
        if extractors[name].can_handle(path):
            return extractors[name]
    return extractors["edges"]
