"""Tests for DependencyGraph ordering and cycle detection."""

from __future__ import annotations

import pytest

from z_entry_finder.dependencies.graph import DependencyGraph


def _graph(nodes: str, edges: list[str]) -> DependencyGraph[str]:
    """Build from node letters and ``"ab"`` edges meaning a depends on b."""
    graph: DependencyGraph[str] = DependencyGraph()
    for node in nodes:
        graph.add_node(node, node.upper())
    for edge in edges:
        graph.add_dependency(edge[0], edge[1])
    return graph


class TestNodes:
    def test_add_and_get(self):
        graph = _graph("ab", [])
        assert graph.has_node("a")
        assert "b" in graph
        assert not graph.has_node("c")
        assert graph.get_node_data("a") == "A"
        assert len(graph) == 2
        assert list(graph) == ["a", "b"]

    def test_unknown_edge(self):
        graph = _graph("a", [])
        with pytest.raises(KeyError):
            graph.add_dependency("a", "zzz")

    def test_remove_node_drops_edges(self):
        graph = _graph("abc", ["ab", "bc"])
        graph.remove_node("b")
        assert not graph.has_node("b")
        assert graph.direct_dependencies_of("a") == []
        assert graph.direct_dependants_of("c") == []


class TestOrdering:
    def test_chain(self):
        assert _graph("abc", ["ab", "bc"]).overall_order() == ["c", "b", "a"]

    def test_independent_nodes_keep_insertion_order(self):
        assert _graph("xyz", []).overall_order() == ["x", "y", "z"]

    def test_diamond(self):
        graph = _graph("abcd", ["ab", "ac", "bd", "cd"])
        order = graph.overall_order()
        assert order == ["d", "b", "c", "a"]

    def test_dependencies_of(self):
        graph = _graph("abcd", ["ab", "bc"])
        assert graph.dependencies_of("a") == ["c", "b"]
        assert graph.dependencies_of("d") == []

    def test_dependants_of(self):
        graph = _graph("abcd", ["ab", "bc"])
        assert graph.dependants_of("c") == ["a", "b"]
        assert graph.dependants_of("a") == []

    def test_cycle_tolerant(self):
        graph = _graph("abc", ["ab", "ba", "ca"])
        assert graph.overall_order() == ["b", "a", "c"]

    def test_deterministic(self):
        orders = {tuple(_graph("abcdef", ["ab", "cd", "eb", "fa"]).overall_order()) for _ in range(5)}
        assert len(orders) == 1


class TestCycles:
    def test_acyclic(self):
        assert _graph("abc", ["ab", "bc"]).find_cycles() == []

    def test_two_node_cycle(self):
        assert _graph("abc", ["ab", "ba", "ca"]).find_cycles() == [["a", "b"]]

    def test_self_loop(self):
        assert _graph("ab", ["aa"]).find_cycles() == [["a"]]

    def test_shortest_cycle_through_first_node(self):
        graph = _graph("abcd", ["ab", "bc", "ca", "ad", "da"])
        assert graph.find_cycles() == [["a", "d"]]

    def test_cycle_starts_at_first_inserted_node(self):
        graph = _graph("xab", ["ab", "bx", "xa"])
        assert graph.find_cycles() == [["x", "a", "b"]]

    def test_separate_cycles_in_insertion_order(self):
        graph = _graph("abcd", ["cd", "dc", "ab", "ba"])
        assert graph.find_cycles() == [["a", "b"], ["c", "d"]]
