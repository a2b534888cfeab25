"""Assign modules to components and merge them into component vertices."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from depzoom.analysis import (
    DEFAULT_MAX_PATH_DEPTH,
    depending_components,
    find_path,
    reachable_components,
)
from depzoom.classify import Classifier
from depzoom.model import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class Ambiguity:
    """A module that lies between members of more than one component.

    ``forward_paths[c]`` leads from the module to a module of component
    ``c``; ``backward_paths[c]`` leads from a module of ``c`` to the module.
    """

    module: str
    candidates: list[str]
    forward_paths: dict[str, list[str]] = field(default_factory=dict)
    backward_paths: dict[str, list[str]] = field(default_factory=dict)

    def describe(self) -> str:
        lines = [f"{self.module} is ambiguous: {', '.join(self.candidates)}"]
        for component in self.candidates:
            fwd = self.forward_paths.get(component)
            bwd = self.backward_paths.get(component)
            lines.append(f"  {component}:")
            lines.append("    depends on: " + (" -> ".join(fwd) if fwd else "?"))
            lines.append("    used by:    " + (" -> ".join(bwd) if bwd else "?"))
        return "\n".join(lines)


@dataclass
class Assignment:
    """Outcome of component assignment over a whole graph."""

    membership: dict[str, set[str]] = field(default_factory=dict)
    ambiguities: list[Ambiguity] = field(default_factory=list)


def _explain_ambiguity(
    graph: DependencyGraph,
    classifier: Classifier,
    module: str,
    candidates: list[str],
    max_depth: int,
) -> Ambiguity:
    ambiguity = Ambiguity(module=module, candidates=candidates)
    for component in candidates:
        def in_component(node: str, component: str = component) -> bool:
            return classifier.classify(node) == component or node == component

        forward = find_path(graph.successors, module, in_component, max_depth)
        if forward is not None:
            ambiguity.forward_paths[component] = forward
        backward = find_path(graph.predecessors, module, in_component, max_depth)
        if backward is not None:
            ambiguity.backward_paths[component] = list(reversed(backward))
    return ambiguity


def assign_components(
    graph: DependencyGraph,
    classifier: Classifier,
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> Assignment:
    """Decide which component, if any, every module is merged into.

    Classified modules go to their own component.  An unclassified module
    joins a component when it is the only one both reachable from it and
    depending on it; with several such components it is reported as an
    :class:`Ambiguity` and left alone.
    """
    reachable = reachable_components(graph, classifier)
    depending = depending_components(graph, classifier)
    assignment = Assignment()

    for module in sorted(graph.nodes):
        component = classifier.classify(module)
        if component is None:
            candidates = sorted(reachable[module] & depending[module])
            if len(candidates) > 1:
                ambiguity = _explain_ambiguity(
                    graph, classifier, module, candidates, max_depth
                )
                assignment.ambiguities.append(ambiguity)
                continue
            if not candidates:
                continue
            component = candidates[0]
        assignment.membership.setdefault(component, set()).add(module)

    logger.debug(
        "Assigned %d modules to %d components (%d ambiguous)",
        sum(len(m) for m in assignment.membership.values()),
        len(assignment.membership),
        len(assignment.ambiguities),
    )
    return assignment


def merge_component(
    graph: DependencyGraph, component: str, members: set[str]
) -> None:
    """Replace *members* by the single vertex *component*, rewiring edges."""
    absorbed = set(members)
    successors: set[str] = set()
    predecessors: set[str] = set()

    for module in sorted(absorbed):
        if module not in graph:
            continue
        for target in graph.successors(module):
            graph.remove_edge(module, target)
            if target not in absorbed and target != component:
                successors.add(target)
        for source in graph.predecessors(module):
            graph.remove_edge(source, module)
            if source not in absorbed and source != component:
                predecessors.add(source)
        graph.remove_node(module)

    graph.add_node(component)
    for target in sorted(successors):
        graph.add_edge(component, target)
    for source in sorted(predecessors):
        graph.add_edge(source, component)


def merge_all(graph: DependencyGraph, membership: dict[str, set[str]]) -> None:
    """Merge every component of *membership* into *graph*, in sorted order."""
    for component in sorted(membership):
        merge_component(graph, component, membership[component])
    logger.debug(
        "Merged graph: %d nodes, %d edges", len(graph), graph.edge_count()
    )
