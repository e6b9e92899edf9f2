"""
Dependency graph of resource instances.

Edges point from a resource to the resources that reference it, so a
topological order is a valid apply order and its reverse a valid destroy
order.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Iterable

from vaultform.errors import PlanError


@dataclass
class GraphNode:
    """A resource instance in the graph."""

    address: str
    item: Any = None
    dependencies: list[str] = field(default_factory=list)
    dependents: list[str] = field(default_factory=list)


class ResourceGraph:
    """
    Directed acyclic graph of resource addresses.

    Provides:
    1. Dependency bookkeeping
    2. Topological ordering (apply) and its reverse (destroy)
    3. Cycle detection
    """

    def __init__(self):
        self.nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, list[str]] = defaultdict(list)

    def add_node(self, address: str, item: Any = None) -> None:
        if address not in self.nodes:
            self.nodes[address] = GraphNode(address=address, item=item)

    def add_edge(self, dependency: str, dependent: str) -> None:
        """
        Record that ``dependent`` references ``dependency``.

        Raises:
            PlanError: Either address is not in the graph
        """
        for address in (dependency, dependent):
            if address not in self.nodes:
                raise PlanError(f"reference to undeclared resource {address!r}")
        if dependent in self._edges[dependency]:
            return
        self._edges[dependency].append(dependent)
        self.nodes[dependent].dependencies.append(dependency)
        self.nodes[dependency].dependents.append(dependent)

    def dependencies(self, address: str) -> list[str]:
        return self.nodes[address].dependencies if address in self.nodes else []

    def dependents(self, address: str) -> list[str]:
        return self.nodes[address].dependents if address in self.nodes else []

    def topological_sort(self) -> list[str]:
        """
        Order addresses so every resource follows what it references.

        Ties keep insertion order, which keeps plans stable between runs.

        Raises:
            PlanError: The graph contains a cycle
        """
        in_degree = {address: 0 for address in self.nodes}
        for address in self.nodes:
            for dependent in self._edges[address]:
                in_degree[dependent] += 1

        queue = deque(address for address, degree in in_degree.items() if degree == 0)
        ordered: list[str] = []
        while queue:
            address = queue.popleft()
            ordered.append(address)
            for dependent in self._edges[address]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(ordered) != len(self.nodes):
            cycle = self.detect_cycle() or []
            raise PlanError(f"dependency cycle between resources: {' -> '.join(cycle)}")
        return ordered

    def reverse_topological_sort(self) -> list[str]:
        return list(reversed(self.topological_sort()))

    def detect_cycle(self) -> list[str] | None:
        """Return one cycle as a path of addresses, or None."""
        visited: set[str] = set()
        on_stack: set[str] = set()
        path: list[str] = []

        def visit(address: str) -> list[str] | None:
            visited.add(address)
            on_stack.add(address)
            path.append(address)
            for neighbor in self._edges[address]:
                if neighbor not in visited:
                    found = visit(neighbor)
                    if found:
                        return found
                elif neighbor in on_stack:
                    return path[path.index(neighbor):] + [neighbor]
            path.pop()
            on_stack.remove(address)
            return None

        for address in self.nodes:
            if address not in visited:
                cycle = visit(address)
                if cycle:
                    return cycle
        return None

    @classmethod
    def from_dependencies(
        cls, dependencies: dict[str, Iterable[str]], *, ignore_missing: bool = False
    ) -> "ResourceGraph":
        """
        Build a graph from ``{address: [dependency, ...]}``.

        With ``ignore_missing`` edges to unknown addresses are dropped, which
        is what destroy wants when part of the state is already gone.
        """
        graph = cls()
        for address in dependencies:
            graph.add_node(address)
        for address, deps in dependencies.items():
            for dep in deps:
                if ignore_missing and dep not in graph.nodes:
                    continue
                graph.add_edge(dep, address)
        return graph

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "address": node.address,
                    "dependencies": node.dependencies,
                    "dependents": node.dependents,
                }
                for node in self.nodes.values()
            ],
            "edges": [
                {"from": dependency, "to": dependent}
                for dependency, dependents in self._edges.items()
                for dependent in dependents
            ],
        }

    def __repr__(self) -> str:
        edges = sum(len(dependents) for dependents in self._edges.values())
        return f"ResourceGraph(nodes={len(self.nodes)}, edges={edges})"
