"""Directed dependency graph with forward and inverse adjacency views."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass
class DependencyGraph:
    """Edge set over module (or component) identifiers.

    ``forward[a]`` holds the dependencies of ``a`` and ``inverse[b]`` its
    dependents.  Both views are updated together, so they stay exact
    transposes of each other after every mutation.
    """

    nodes: set[str] = field(default_factory=set)
    forward: dict[str, set[str]] = field(default_factory=dict)
    inverse: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[str, str]]) -> DependencyGraph:
        graph = cls()
        for source, target in edges:
            graph.add_edge(source, target)
        return graph

    def add_node(self, node: str) -> None:
        self.nodes.add(node)

    def add_edge(self, source: str, target: str) -> None:
        if source == target:
            raise ValueError(f"self loop on {source!r}")
        self.nodes.add(source)
        self.nodes.add(target)
        self.forward.setdefault(source, set()).add(target)
        self.inverse.setdefault(target, set()).add(source)

    def remove_edge(self, source: str, target: str) -> None:
        targets = self.forward.get(source)
        if targets is None or target not in targets:
            return
        targets.discard(target)
        if not targets:
            del self.forward[source]
        sources = self.inverse[target]
        sources.discard(source)
        if not sources:
            del self.inverse[target]

    def remove_node(self, node: str) -> None:
        """Drop *node* together with every edge touching it."""
        for target in self.successors(node):
            self.remove_edge(node, target)
        for source in self.predecessors(node):
            self.remove_edge(source, node)
        self.nodes.discard(node)

    def successors(self, node: str) -> set[str]:
        return set(self.forward.get(node, ()))

    def predecessors(self, node: str) -> set[str]:
        return set(self.inverse.get(node, ()))

    def has_edge(self, source: str, target: str) -> bool:
        return target in self.forward.get(source, ())

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield every edge, sorted by source then target."""
        for source in sorted(self.forward):
            for target in sorted(self.forward[source]):
                yield source, target

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.forward.values())

    def copy(self) -> DependencyGraph:
        return DependencyGraph(
            nodes=set(self.nodes),
            forward={k: set(v) for k, v in self.forward.items()},
            inverse={k: set(v) for k, v in self.inverse.items()},
        )

    def is_consistent(self) -> bool:
        """Return True if the inverse view is the exact transpose of forward."""
        transposed: dict[str, set[str]] = {}
        for source, target in self.edges():
            transposed.setdefault(target, set()).add(source)
        return transposed == self.inverse

    def __contains__(self, node: object) -> bool:
        return node in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)
