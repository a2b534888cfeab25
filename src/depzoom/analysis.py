"""Graph analysis: reachability, cycle detection and transitive reduction.

All traversals are iterative so that graphs with thousands of modules
do not hit the interpreter's recursion limit.  Nodes and successors are
visited in sorted order, which makes every result reproducible.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from depzoom.classify import Classifier
from depzoom.model import DependencyGraph

logger = logging.getLogger(__name__)

DEFAULT_MAX_PATH_DEPTH = 64

Adjacency = Callable[[str], Iterable[str]]


def strongly_connected_components(
    nodes: Iterable[str], successors: Adjacency
) -> list[list[str]]:
    """Return all strongly-connected components using Tarjan's algorithm.

    Components come out in reverse topological order: every component is
    emitted after all components reachable from it.  Singletons are
    included.
    """
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    sccs: list[list[str]] = []
    counter = 0

    for root in sorted(nodes):
        if root in index:
            continue
        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(sorted(successors(root))))]

        while work:
            v, pending = work[-1]
            descended = False
            for w in pending:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    stack.append(w)
                    on_stack.add(w)
                    work.append((w, iter(sorted(successors(w)))))
                    descended = True
                    break
                if w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[v])

            if lowlink[v] == index[v]:
                scc: list[str] = []
                while True:
                    w = stack.pop()
                    on_stack.discard(w)
                    scc.append(w)
                    if w == v:
                        break
                sccs.append(sorted(scc))

    return sccs


# ---------------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------------


def _own_component(classifier: Classifier, node: str) -> str | None:
    component = classifier.classify(node)
    if component is None and classifier.is_component(node):
        # Merged vertices carry the component name as their identifier.
        return node
    return component


def _component_sets(
    graph: DependencyGraph, adjacency: Adjacency, classifier: Classifier
) -> dict[str, frozenset[str]]:
    result: dict[str, frozenset[str]] = {}
    # Reverse topological order guarantees every neighbour outside the
    # current SCC is already resolved.
    for scc in strongly_connected_components(graph.nodes, adjacency):
        members = set(scc)
        found: set[str] = set()
        for node in scc:
            own = _own_component(classifier, node)
            if own is not None:
                found.add(own)
            for neighbour in adjacency(node):
                if neighbour not in members:
                    found |= result[neighbour]
        frozen = frozenset(found)
        for node in scc:
            result[node] = frozen
    return result


def reachable_components(
    graph: DependencyGraph, classifier: Classifier
) -> dict[str, frozenset[str]]:
    """Map every node to the components reachable along forward edges.

    A node's own component is included.
    """
    return _component_sets(graph, graph.successors, classifier)


def depending_components(
    graph: DependencyGraph, classifier: Classifier
) -> dict[str, frozenset[str]]:
    """Map every node to the components that can reach it, itself included."""
    return _component_sets(graph, graph.predecessors, classifier)


def find_path(
    successors: Adjacency,
    start: str,
    is_target: Callable[[str], bool],
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> list[str] | None:
    """Breadth-first search for a path of at least one edge from *start*.

    Returns the shortest path ``[start, ..., target]`` to a node satisfying
    *is_target*, or None when no such node lies within *max_depth* edges.
    Ties are broken by identifier order.
    """
    parents: dict[str, str] = {}
    seen = {start}
    frontier = [start]
    for _ in range(max_depth):
        next_frontier: list[str] = []
        for node in frontier:
            for nxt in sorted(successors(node)):
                if nxt in seen:
                    continue
                seen.add(nxt)
                parents[nxt] = node
                if is_target(nxt):
                    path = [nxt]
                    while path[-1] != start:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                next_frontier.append(nxt)
        if not next_frontier:
            break
        frontier = next_frontier
    return None


# ---------------------------------------------------------------------------
# Cycles
# ---------------------------------------------------------------------------


@dataclass
class CycleReport:
    """A cycle in the collapsed graph and its module-level evidence.

    ``evidence[i]`` is a pre-merge path underlying the edge
    ``cycle[i] -> cycle[i + 1]`` (empty when none was found within the
    search bound).
    """

    cycle: list[str]
    evidence: list[list[str]] = field(default_factory=list)

    def describe(self) -> str:
        lines = ["Cycle: " + " -> ".join(self.cycle)]
        for (a, b), path in zip(zip(self.cycle, self.cycle[1:]), self.evidence):
            via = " -> ".join(path) if path else "(no module path found)"
            lines.append(f"  {a} -> {b}: {via}")
        return "\n".join(lines)


def find_cycle(graph: DependencyGraph) -> list[str] | None:
    """Return the first cycle found by depth-first search, or None.

    The cycle is reported closed: ``[a, b, ..., a]``.
    """
    visited: set[str] = set()
    for root in sorted(graph.nodes):
        if root in visited:
            continue
        visited.add(root)
        path = [root]
        on_path = {root}
        work = [iter(sorted(graph.successors(root)))]
        while work:
            for nxt in work[-1]:
                if nxt in on_path:
                    return path[path.index(nxt) :] + [nxt]
                if nxt not in visited:
                    visited.add(nxt)
                    path.append(nxt)
                    on_path.add(nxt)
                    work.append(iter(sorted(graph.successors(nxt))))
                    break
            else:
                work.pop()
                on_path.discard(path.pop())
    return None


def _explain_edge(
    source: str,
    target: str,
    pre_merge: DependencyGraph,
    membership: dict[str, set[str]],
    max_depth: int,
) -> list[str]:
    if source not in membership and target not in membership:
        return [source, target]

    target_members = membership.get(target)
    if target_members:
        def is_target(node: str) -> bool:
            return node in target_members
    else:
        def is_target(node: str) -> bool:
            return node == target

    starts = sorted(membership[source]) if source in membership else [source]
    for start in starts:
        path = find_path(pre_merge.successors, start, is_target, max_depth)
        if path is not None:
            return path
    return []


def explain_cycle(
    cycle: list[str],
    pre_merge: DependencyGraph,
    membership: dict[str, set[str]],
    max_depth: int = DEFAULT_MAX_PATH_DEPTH,
) -> CycleReport:
    """Reconstruct the module-level path behind every edge of *cycle*."""
    evidence = [
        _explain_edge(a, b, pre_merge, membership, max_depth)
        for a, b in zip(cycle, cycle[1:])
    ]
    return CycleReport(cycle=cycle, evidence=evidence)


# ---------------------------------------------------------------------------
# Transitive reduction
# ---------------------------------------------------------------------------


def reduce_transitive(graph: DependencyGraph) -> int:
    """Remove edges to nodes that are also reachable over a longer path.

    For each root (in sorted order) a depth-first traversal records the depth
    at which every node is first reached; an edge ``root -> node`` is dropped
    when ``node`` is first reached at depth > 1.  This is a heuristic: which
    of several redundant edges survives depends on the traversal order.
    Returns the number of removed edges.
    """
    removed = 0
    for root in sorted(graph.nodes):
        visited: set[str] = set()
        stack = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            if depth > 1 and graph.has_edge(root, node):
                graph.remove_edge(root, node)
                removed += 1
            for nxt in sorted(graph.successors(node), reverse=True):
                if nxt not in visited:
                    stack.append((nxt, depth + 1))
    logger.debug("Transitive reduction removed %d edges", removed)
    return removed
