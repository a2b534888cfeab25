"""Tests for reachability, cycle detection and transitive reduction."""

from collections import deque

from depzoom.analysis import (
    depending_components,
    explain_cycle,
    find_cycle,
    find_path,
    reachable_components,
    reduce_transitive,
    strongly_connected_components,
)
from depzoom.classify import Classifier, parse_rules
from depzoom.model import DependencyGraph


# ── Helpers ───────────────────────────────────────────────────

def _graph(*edges):
    return DependencyGraph.from_edges(edges)


def _classifier(*lines):
    return Classifier(parse_rules(lines))


def _reachable_brute_force(graph, classifier, start):
    """Components of every node reachable from *start* (itself included)."""
    seen = {start}
    todo = deque([start])
    found = set()
    while todo:
        node = todo.popleft()
        component = classifier.classify(node)
        if component is not None:
            found.add(component)
        for nxt in graph.successors(node):
            if nxt not in seen:
                seen.add(nxt)
                todo.append(nxt)
    return found


# ── Strongly connected components ─────────────────────────────

class TestStronglyConnected:
    def test_reverse_topological_order(self):
        graph = _graph(("a", "b"), ("b", "a"), ("b", "c"))
        sccs = strongly_connected_components(graph.nodes, graph.successors)
        assert sccs == [["c"], ["a", "b"]]

    def test_long_chain_does_not_recurse(self):
        edges = [(f"m{i:05d}", f"m{i + 1:05d}") for i in range(5000)]
        graph = _graph(*edges)
        sccs = strongly_connected_components(graph.nodes, graph.successors)
        assert len(sccs) == 5001


# ── Reachability ──────────────────────────────────────────────

class TestReachability:
    def test_chain(self):
        graph = _graph(("a", "b"), ("b", "c"))
        classifier = _classifier("K=c")
        reachable = reachable_components(graph, classifier)
        depending = depending_components(graph, classifier)
        assert reachable["a"] == {"K"}
        assert reachable["c"] == {"K"}
        assert depending["a"] == set()
        assert depending["c"] == {"K"}

    def test_cycle_members_share_result(self):
        graph = _graph(("a", "b"), ("b", "a"), ("b", "c"))
        classifier = _classifier("K=c", "A=a")
        reachable = reachable_components(graph, classifier)
        assert reachable["a"] == reachable["b"] == {"A", "K"}
        depending = depending_components(graph, classifier)
        assert depending["c"] == {"A", "K"}

    def test_merged_component_vertex_counts_as_itself(self):
        graph = _graph(("a", "K"))
        classifier = _classifier("K=k.*")
        assert reachable_components(graph, classifier)["a"] == {"K"}

    def test_matches_brute_force(self):
        graph = _graph(
            ("a", "b"), ("b", "c"), ("c", "a"), ("c", "p1"), ("d", "a"),
            ("p1", "e"), ("e", "q1"), ("q2", "d"), ("f", "g"), ("g", "f"),
        )
        classifier = _classifier("P=p.*", "Q=q.*")
        reachable = reachable_components(graph, classifier)
        for node in graph.nodes:
            assert reachable[node] == _reachable_brute_force(graph, classifier, node)


class TestFindPath:
    def test_first_target_found(self):
        graph = _graph(("m", "x"), ("x", "k1"), ("k1", "k2"))
        path = find_path(graph.successors, "m", lambda n: n.startswith("k"))
        assert path == ["m", "x", "k1"]

    def test_start_is_never_the_target(self):
        graph = _graph(("k0", "x"))
        assert find_path(graph.successors, "k0", lambda n: n.startswith("k")) is None

    def test_depth_bound(self):
        graph = _graph(("a", "b"), ("b", "c"), ("c", "d"))
        assert find_path(graph.successors, "a", lambda n: n == "d", max_depth=2) is None
        assert find_path(graph.successors, "a", lambda n: n == "d", max_depth=3) == [
            "a", "b", "c", "d",
        ]

    def test_shorter_route_found_after_deep_visit(self):
        # "x" is first seen via s -> a -> x, already at the depth limit
        graph = _graph(("s", "a"), ("a", "x"), ("s", "x"), ("x", "t"))
        path = find_path(graph.successors, "s", lambda n: n == "t", max_depth=2)
        assert path == ["s", "x", "t"]

    def test_shortest_path_preferred(self):
        graph = _graph(("m", "a"), ("a", "b"), ("b", "k"), ("m", "z"), ("z", "k"))
        assert find_path(graph.successors, "m", lambda n: n == "k") == ["m", "z", "k"]

    def test_backward_search(self):
        graph = _graph(("p", "x"), ("x", "m"))
        path = find_path(graph.predecessors, "m", lambda n: n == "p")
        assert list(reversed(path)) == ["p", "x", "m"]


# ── Cycles ────────────────────────────────────────────────────

class TestFindCycle:
    def test_two_node_cycle(self):
        assert find_cycle(_graph(("A", "B"), ("B", "A"))) == ["A", "B", "A"]

    def test_acyclic(self):
        assert find_cycle(_graph(("a", "b"), ("b", "c"), ("a", "c"))) is None

    def test_cycle_suffix_only(self):
        graph = _graph(("a", "b"), ("b", "c"), ("c", "d"), ("d", "b"))
        assert find_cycle(graph) == ["b", "c", "d", "b"]

    def test_explain_cycle_through_components(self):
        pre_merge = _graph(("x1", "y"), ("y", "x2"))
        merged = _graph(("K", "y"), ("y", "K"))
        cycle = find_cycle(merged)
        assert cycle == ["K", "y", "K"]
        report = explain_cycle(cycle, pre_merge, {"K": {"x1", "x2"}})
        assert report.evidence == [["x1", "y"], ["y", "x2"]]
        assert "K -> y -> K" in report.describe()

    def test_explain_cycle_between_components(self):
        pre_merge = _graph(("a1", "m"), ("m", "b1"), ("b2", "a2"))
        membership = {"A": {"a1", "a2"}, "B": {"b1", "b2"}}
        report = explain_cycle(["A", "B", "A"], pre_merge, membership)
        assert report.evidence == [["a1", "m", "b1"], ["b2", "a2"]]

    def test_explain_module_level_pair(self):
        report = explain_cycle(["a", "b", "a"], _graph(("a", "b"), ("b", "a")), {})
        assert report.evidence == [["a", "b"], ["b", "a"]]

    def test_explain_missing_path(self):
        report = explain_cycle(["K", "z", "K"], _graph(("k1", "q")), {"K": {"k1"}})
        assert report.evidence[0] == []
        assert "no module path found" in report.describe()


# ── Transitive reduction ──────────────────────────────────────

class TestReduceTransitive:
    def test_removes_shortcut(self):
        graph = _graph(("A", "B"), ("B", "C"), ("A", "C"))
        removed = reduce_transitive(graph)
        assert removed == 1
        assert list(graph.edges()) == [("A", "B"), ("B", "C")]
        assert graph.is_consistent()

    def test_keeps_direct_edges(self):
        graph = _graph(("a", "b"), ("a", "c"), ("b", "d"))
        assert reduce_transitive(graph) == 0
        assert graph.edge_count() == 3

    def test_idempotent(self):
        graph = _graph(
            ("a", "b"), ("a", "c"), ("a", "d"), ("b", "c"), ("b", "d"),
            ("c", "d"), ("d", "e"), ("a", "e"), ("e", "f"), ("c", "f"),
        )
        reduce_transitive(graph)
        once = list(graph.edges())
        assert reduce_transitive(graph) == 0
        assert list(graph.edges()) == once

    def test_diamond(self):
        graph = _graph(("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("a", "d"))
        reduce_transitive(graph)
        assert list(graph.edges()) == [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]

    def test_cycle_survives(self):
        graph = _graph(("a", "b"), ("b", "a"))
        reduce_transitive(graph)
        assert list(graph.edges()) == [("a", "b"), ("b", "a")]
