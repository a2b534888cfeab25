"""Orchestrator: extract → classify → merge → detect cycles → reduce → render."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from depzoom.analysis import (
    DEFAULT_MAX_PATH_DEPTH,
    CycleReport,
    explain_cycle,
    find_cycle,
    reduce_transitive,
)
from depzoom.classify import Classifier, load_rules
from depzoom.collapse import Ambiguity, assign_components, merge_all
from depzoom.config import DepzoomConfig
from depzoom.detect import detect_extractor
from depzoom.extractors import group_id_from_pom, read_changes
from depzoom.model import DependencyGraph
from depzoom.renderer.graphml import render_graphml

logger = logging.getLogger(__name__)


@dataclass
class CollapseResult:
    """Everything produced from one input graph.

    ``pre_merge`` is an untouched copy of the module-level graph, kept for
    diagnostics only.
    """

    graph: DependencyGraph
    pre_merge: DependencyGraph
    membership: dict[str, set[str]] = field(default_factory=dict)
    ambiguities: list[Ambiguity] = field(default_factory=list)
    cycle: CycleReport | None = None
    removed_edges: int = 0

    def report(self) -> dict:
        """Return the diagnostics as JSON-serializable data."""
        return {
            "components": {c: sorted(m) for c, m in sorted(self.membership.items())},
            "ambiguities": [asdict(a) for a in self.ambiguities],
            "cycle": asdict(self.cycle) if self.cycle else None,
            "removed_edges": self.removed_edges,
        }


def collapse(
    graph: DependencyGraph,
    classifier: Classifier,
    *,
    reduce: bool = True,
    max_path_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> CollapseResult:
    """Collapse *graph* into components without touching the input graph."""
    pre_merge = graph.copy()
    merged = graph.copy()

    assignment = assign_components(pre_merge, classifier, max_path_depth)
    for ambiguity in assignment.ambiguities:
        logger.warning("%s", ambiguity.describe())

    merge_all(merged, assignment.membership)

    result = CollapseResult(
        graph=merged,
        pre_merge=pre_merge,
        membership=assignment.membership,
        ambiguities=assignment.ambiguities,
    )

    cycle = find_cycle(merged)
    if cycle is not None:
        result.cycle = explain_cycle(
            cycle, pre_merge, assignment.membership, max_path_depth
        )
        logger.warning("%s", result.cycle.describe())

    if reduce:
        result.removed_edges = reduce_transitive(merged)

    return result


def _resolve_prefix(config: DepzoomConfig) -> str | None:
    if config.prefix:
        return config.prefix
    if config.pom is not None:
        group_id = group_id_from_pom(config.pom)
        if group_id:
            logger.debug("Using groupId %s from %s as prefix", group_id, config.pom)
        return group_id
    return None


def load_graph(
    inputs: list[Path], config: DepzoomConfig, *, fmt: str = "auto"
) -> DependencyGraph:
    """Read every input file into one module graph."""
    prefix = _resolve_prefix(config)
    graph = DependencyGraph()
    for path in inputs:
        extractor = detect_extractor(path, config, fmt=fmt, prefix=prefix)
        logger.debug("Reading %s with %s", path, type(extractor).__name__)
        extractor.extract(path, graph)
    logger.debug("Module graph: %d nodes, %d edges", len(graph), graph.edge_count())
    return graph


def run(
    inputs: list[Path],
    output: Path,
    *,
    config: DepzoomConfig | None = None,
    fmt: str = "auto",
    changes: Path | None = None,
    report: Path | None = None,
) -> CollapseResult:
    """Run the full depzoom pipeline and write the GraphML to *output*.

    Raises ``OSError`` for unreadable inputs and ``RuleError`` for invalid
    classification rules.
    """
    config = config or DepzoomConfig()
    rules = load_rules(config.rules) if config.rules is not None else []
    classifier = Classifier(rules)

    graph = load_graph(inputs, config, fmt=fmt)
    result = collapse(
        graph,
        classifier,
        reduce=config.reduce,
        max_path_depth=config.max_path_depth,
    )

    change_counts = read_changes(changes) if changes is not None else None
    render_graphml(
        result.graph,
        output,
        membership=result.membership,
        changes=change_counts,
    )
    logger.info("Generated %s", output)

    if report is not None:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(result.report(), indent=2), encoding="utf-8")
        logger.info("Wrote diagnostics to %s", report)

    return result
