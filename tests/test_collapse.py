"""Tests for component assignment and merging."""

from depzoom.classify import Classifier, parse_rules
from depzoom.collapse import assign_components, merge_all, merge_component
from depzoom.model import DependencyGraph


def _graph(*edges):
    return DependencyGraph.from_edges(edges)


def _classifier(*lines):
    return Classifier(parse_rules(lines))


class TestAssignComponents:
    def test_classified_modules(self):
        graph = _graph(("X1", "X2"), ("X2", "X3"), ("X3", "Y"))
        assignment = assign_components(graph, _classifier(r"K=X\d"))
        assert assignment.membership == {"K": {"X1", "X2", "X3"}}
        assert assignment.ambiguities == []

    def test_sandwiched_module_joins_component(self):
        graph = _graph(("P1", "M"), ("M", "P2"), ("M", "Z"))
        assignment = assign_components(graph, _classifier(r"P=P\d"))
        assert assignment.membership == {"P": {"P1", "P2", "M"}}

    def test_unrelated_module_stays_ungrouped(self):
        graph = _graph(("P1", "M"), ("N", "M"))
        assignment = assign_components(graph, _classifier(r"P=P\d"))
        assert assignment.membership == {"P": {"P1"}}

    def test_ambiguous_module_is_reported(self):
        graph = _graph(("P1", "M"), ("M", "Q1"), ("Q2", "M"), ("M", "P2"))
        assignment = assign_components(graph, _classifier(r"P=P\d", r"Q=Q\d"))

        assert assignment.membership == {"P": {"P1", "P2"}, "Q": {"Q1", "Q2"}}
        [ambiguity] = assignment.ambiguities
        assert ambiguity.module == "M"
        assert ambiguity.candidates == ["P", "Q"]
        assert ambiguity.forward_paths == {"P": ["M", "P2"], "Q": ["M", "Q1"]}
        assert ambiguity.backward_paths == {"P": ["P1", "M"], "Q": ["Q2", "M"]}
        text = ambiguity.describe()
        assert "M is ambiguous: P, Q" in text
        assert "P1 -> M" in text

    def test_ambiguity_paths_through_intermediates(self):
        graph = _graph(
            ("P1", "a"), ("a", "M"), ("M", "b"), ("b", "Q1"),
            ("Q2", "M"), ("M", "P2"),
        )
        assignment = assign_components(graph, _classifier(r"P=P\d", r"Q=Q\d"))
        ambiguity = next(a for a in assignment.ambiguities if a.module == "M")
        assert ambiguity.forward_paths["Q"] == ["M", "b", "Q1"]
        assert ambiguity.backward_paths["P"] == ["P1", "a", "M"]


class TestMerge:
    def test_merge_chain_into_component(self):
        graph = _graph(("X1", "X2"), ("X2", "X3"), ("X3", "Y"))
        merge_component(graph, "K", {"X1", "X2", "X3"})
        assert graph.nodes == {"K", "Y"}
        assert list(graph.edges()) == [("K", "Y")]
        assert graph.is_consistent()

    def test_external_predecessors_rewired(self):
        graph = _graph(("A", "X1"), ("B", "X2"), ("A", "X2"), ("X1", "X2"))
        merge_component(graph, "K", {"X1", "X2"})
        assert list(graph.edges()) == [("A", "K"), ("B", "K")]

    def test_existing_component_vertex_gets_no_self_loop(self):
        graph = _graph(("K", "X1"), ("X1", "K"), ("X1", "Y"))
        merge_component(graph, "K", {"X1"})
        assert list(graph.edges()) == [("K", "Y")]

    def test_merge_all_replaces_absorbed_modules(self):
        graph = _graph(
            ("a1", "a2"), ("a2", "b1"), ("b1", "b2"), ("b2", "c"), ("c", "a1"),
        )
        membership = {"A": {"a1", "a2"}, "B": {"b1", "b2"}}
        merge_all(graph, membership)
        absorbed = {"a1", "a2", "b1", "b2"}
        for source, target in graph.edges():
            assert source not in absorbed
            assert target not in absorbed
        assert list(graph.edges()) == [("A", "B"), ("B", "c"), ("c", "A")]
        assert graph.is_consistent()

    def test_merge_all_is_stable_on_merged_graph(self):
        graph = _graph(("x1", "y"), ("y", "z"))
        membership = {"K": {"x1"}}
        merge_all(graph, membership)
        before = list(graph.edges())
        merge_all(graph, membership)
        assert list(graph.edges()) == before
        assert graph.nodes == {"K", "y", "z"}
