"""Tests for the dependency graph and publish ordering."""

from __future__ import annotations

import itertools
import random
from pathlib import Path

import pytest

from cargo_relay.errors import CyclicDependencyError, PackageNotFoundError
from cargo_relay.workspace.graph import DependencyGraph, topological_sort
from cargo_relay.workspace.package import Package


def make_pkg(name: str, *deps: str) -> Package:
    return Package(name=name, version="0.1.0", path=Path(name), local_dependencies=frozenset(deps))


def assert_valid_order(order: list[Package], packages: list[Package]) -> None:
    names = [p.name for p in order]
    assert sorted(names) == sorted(p.name for p in packages)
    index = {name: i for i, name in enumerate(names)}
    for pkg in packages:
        for dep in pkg.local_dependencies:
            if dep in index:
                assert index[dep] < index[pkg.name], f"{dep} must precede {pkg.name}"


class TestDependencyGraph:
    """Tests for graph construction."""

    def test_edges_and_in_degrees(self) -> None:
        graph = DependencyGraph([make_pkg("a"), make_pkg("b", "a"), make_pkg("c", "a", "b")])

        assert set(graph.edges) == {("a", "b"), ("a", "c"), ("b", "c")}
        assert graph.in_degrees == {"a": 0, "b": 1, "c": 2}

    def test_unknown_dependencies_ignored(self) -> None:
        graph = DependencyGraph([make_pkg("a", "outside"), make_pkg("b", "a")])

        assert graph.edges == [("a", "b")]
        assert graph.in_degrees["a"] == 0

    def test_dependencies_and_dependents(self) -> None:
        graph = DependencyGraph([make_pkg("a"), make_pkg("b", "a"), make_pkg("c", "a")])

        assert [p.name for p in graph.dependents_of("a")] == ["b", "c"]
        assert [p.name for p in graph.dependencies_of("b")] == ["a"]
        assert graph.dependencies_of("a") == []

    def test_lookup_unknown(self) -> None:
        graph = DependencyGraph([make_pkg("a")])
        with pytest.raises(PackageNotFoundError):
            graph.dependents_of("zzz")

    def test_len_and_contains(self) -> None:
        graph = DependencyGraph([make_pkg("a"), make_pkg("b")])
        assert len(graph) == 2
        assert "a" in graph
        assert "c" not in graph


class TestTopologicalOrder:
    """Tests for Kahn ordering."""

    def test_chain(self) -> None:
        """A <- B <- C publishes as A, B, C."""
        packages = [make_pkg("c", "b"), make_pkg("b", "a"), make_pkg("a")]

        order = topological_sort(packages)

        assert [p.name for p in order] == ["a", "b", "c"]

    def test_diamond(self) -> None:
        packages = [
            make_pkg("top", "left", "right"),
            make_pkg("left", "base"),
            make_pkg("right", "base"),
            make_pkg("base"),
        ]

        order = topological_sort(packages)

        assert_valid_order(order, packages)
        assert order[0].name == "base"
        assert order[-1].name == "top"

    def test_independent_packages_all_present(self) -> None:
        packages = [make_pkg("x"), make_pkg("y"), make_pkg("z")]
        order = topological_sort(packages)
        assert {p.name for p in order} == {"x", "y", "z"}

    def test_empty(self) -> None:
        assert topological_sort([]) == []

    def test_two_node_cycle(self) -> None:
        with pytest.raises(CyclicDependencyError) as exc_info:
            topological_sort([make_pkg("x", "y"), make_pkg("y", "x")])
        assert set(exc_info.value.packages) == {"x", "y"}

    def test_self_loop(self) -> None:
        with pytest.raises(CyclicDependencyError):
            topological_sort([make_pkg("a"), make_pkg("self", "self")])

    def test_cycle_behind_valid_prefix(self) -> None:
        packages = [make_pkg("a"), make_pkg("b", "a", "d"), make_pkg("c", "b"), make_pkg("d", "c")]
        with pytest.raises(CyclicDependencyError) as exc_info:
            topological_sort(packages)
        assert "a" not in exc_info.value.packages

    def test_cycle_message(self) -> None:
        with pytest.raises(CyclicDependencyError, match="Circular dependency"):
            topological_sort([make_pkg("x", "y"), make_pkg("y", "x")])

    def test_input_order_does_not_matter(self) -> None:
        packages = [
            make_pkg("a"),
            make_pkg("b", "a"),
            make_pkg("c", "a"),
            make_pkg("d", "b", "c"),
            make_pkg("e", "d", "external"),
        ]
        for perm in itertools.permutations(packages):
            assert_valid_order(topological_sort(list(perm)), packages)

    def test_random_dags(self) -> None:
        rng = random.Random(1234)
        for _ in range(50):
            size = rng.randint(1, 12)
            names = [f"p{i}" for i in range(size)]
            # edges only from lower to higher index keep it acyclic
            packages = [
                make_pkg(name, *(n for n in names[:i] if rng.random() < 0.3))
                for i, name in enumerate(names)
            ]
            rng.shuffle(packages)
            assert_valid_order(topological_sort(packages), packages)

    def test_graph_is_reusable(self) -> None:
        graph = DependencyGraph([make_pkg("b", "a"), make_pkg("a")])
        assert graph.topological_order() == graph.topological_order()
