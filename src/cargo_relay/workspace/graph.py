"""Local dependency graph and publish ordering."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from cargo_relay.errors import CyclicDependencyError, PackageNotFoundError
from cargo_relay.workspace.package import Package

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Directed graph over workspace packages.

    Packages are indexed by their position in the input sequence. An edge
    ``dep -> pkg`` means ``pkg`` depends on ``dep`` so ``dep`` must be
    published first. Dependencies naming no known package are external and
    contribute no edge.
    """

    def __init__(self, packages: Sequence[Package]) -> None:
        """Build the graph.

        Args:
            packages: Packages in discovery order. Names must be unique.
        """
        self.packages: list[Package] = list(packages)
        self._index: dict[str, int] = {pkg.name: i for i, pkg in enumerate(self.packages)}
        self._dependents: list[list[int]] = [[] for _ in self.packages]
        self._dependencies: list[list[int]] = [[] for _ in self.packages]

        for i, pkg in enumerate(self.packages):
            for dep in sorted(pkg.local_dependencies):
                j = self._index.get(dep)
                if j is None:
                    continue
                self._dependents[j].append(i)
                self._dependencies[i].append(j)

    def __len__(self) -> int:
        return len(self.packages)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def _lookup(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise PackageNotFoundError(name) from None

    @property
    def edges(self) -> list[tuple[str, str]]:
        """All ``(dependency, dependent)`` pairs."""
        return [
            (self.packages[j].name, self.packages[i].name)
            for j, dependents in enumerate(self._dependents)
            for i in dependents
        ]

    @property
    def in_degrees(self) -> dict[str, int]:
        """Number of local dependencies per package."""
        return {pkg.name: len(self._dependencies[i]) for i, pkg in enumerate(self.packages)}

    def dependencies_of(self, name: str) -> list[Package]:
        """Packages `name` depends on."""
        return [self.packages[j] for j in self._dependencies[self._lookup(name)]]

    def dependents_of(self, name: str) -> list[Package]:
        """Packages that depend on `name`."""
        return [self.packages[i] for i in self._dependents[self._lookup(name)]]

    def topological_order(self) -> list[Package]:
        """Order packages so every dependency precedes its dependents.

        Kahn's algorithm. Ready packages are taken in discovery order, but
        callers must not rely on the relative order of independent packages.

        Returns:
            Packages in publish order.

        Raises:
            CyclicDependencyError: If the graph has a cycle, self-loops included.
        """
        in_degree = [len(deps) for deps in self._dependencies]
        queue = deque(i for i, degree in enumerate(in_degree) if degree == 0)
        order: list[int] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for dependent in self._dependents[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(order) != len(self.packages):
            remaining = [pkg.name for i, pkg in enumerate(self.packages) if in_degree[i] > 0]
            raise CyclicDependencyError(remaining)

        logger.debug("Publish order: %s", ", ".join(self.packages[i].name for i in order))
        return [self.packages[i] for i in order]


def topological_sort(packages: Sequence[Package]) -> list[Package]:
    """Convenience wrapper: build a graph and return its publish order."""
    return DependencyGraph(packages).topological_order()
