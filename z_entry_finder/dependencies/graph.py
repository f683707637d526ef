"""Directed dependency graph between units.

Nodes are unit paths, edges point from a dependant to its dependency.
Iteration order always follows insertion order so repeated runs over the
same tree give the same processing order.
"""

from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class DependencyGraph(Generic[T]):
    def __init__(self) -> None:
        self._data: dict[str, T] = {}
        self._outgoing: dict[str, dict[str, None]] = {}
        self._incoming: dict[str, dict[str, None]] = {}

    def __contains__(self, node: str) -> bool:
        return node in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def add_node(self, node: str, data: T) -> None:
        if node not in self._data:
            self._outgoing[node] = {}
            self._incoming[node] = {}
        self._data[node] = data

    def has_node(self, node: str) -> bool:
        return node in self._data

    def get_node_data(self, node: str) -> T:
        return self._data[node]

    def add_dependency(self, dependant: str, dependency: str) -> None:
        if dependant not in self._data or dependency not in self._data:
            raise KeyError(f"Unknown node in edge {dependant} -> {dependency}")
        self._outgoing[dependant][dependency] = None
        self._incoming[dependency][dependant] = None

    def remove_node(self, node: str) -> None:
        for dependency in self._outgoing.pop(node):
            self._incoming[dependency].pop(node, None)
        for dependant in self._incoming.pop(node):
            self._outgoing[dependant].pop(node, None)
        del self._data[node]

    def direct_dependencies_of(self, node: str) -> list[str]:
        return list(self._outgoing[node])

    def direct_dependants_of(self, node: str) -> list[str]:
        return list(self._incoming[node])

    def dependencies_of(self, node: str) -> list[str]:
        """Transitive dependencies of *node*, each before its own dependants."""
        return [n for n in self._post_order([node], self._outgoing) if n != node]

    def dependants_of(self, node: str) -> list[str]:
        """Transitive dependants of *node*, nearest last."""
        return [n for n in self._post_order([node], self._incoming) if n != node]

    def overall_order(self) -> list[str]:
        """Every node, dependencies first.

        Cycles do not stop the ordering; inside a cycle the node reached
        first by the walk comes last.
        """
        return self._post_order(list(self._data), self._outgoing)

    def _post_order(self, starts: list[str], edges: dict[str, dict[str, None]]) -> list[str]:
        order: list[str] = []
        visited: set[str] = set()
        for start in starts:
            if start in visited:
                continue
            visited.add(start)
            stack = [(start, iter(edges[start]))]
            while stack:
                node, children = stack[-1]
                for child in children:
                    if child not in visited:
                        visited.add(child)
                        stack.append((child, iter(edges[child])))
                        break
                else:
                    stack.pop()
                    order.append(node)
        return order

    def find_cycles(self) -> list[list[str]]:
        """One cycle per cyclic strongly connected component.

        Each cycle is the shortest one through the component's first node
        (in insertion order), listed from that node along the edges.
        """
        position = {node: i for i, node in enumerate(self._data)}
        cycles: list[list[str]] = []
        for component in self._strongly_connected_components():
            first = min(component, key=position.__getitem__)
            if len(component) == 1 and first not in self._outgoing[first]:
                continue
            cycles.append(self._shortest_cycle(first, set(component)))
        cycles.sort(key=lambda cycle: position[cycle[0]])
        return cycles

    def _strongly_connected_components(self) -> list[list[str]]:
        """Tarjan's algorithm, iterative."""
        index: dict[str, int] = {}
        low: dict[str, int] = {}
        on_stack: set[str] = set()
        stack: list[str] = []
        components: list[list[str]] = []
        counter = 0

        for root in self._data:
            if root in index:
                continue
            index[root] = low[root] = counter
            counter += 1
            stack.append(root)
            on_stack.add(root)
            work = [(root, iter(self._outgoing[root]))]
            while work:
                node, children = work[-1]
                descended = False
                for child in children:
                    if child not in index:
                        index[child] = low[child] = counter
                        counter += 1
                        stack.append(child)
                        on_stack.add(child)
                        work.append((child, iter(self._outgoing[child])))
                        descended = True
                        break
                    if child in on_stack:
                        low[node] = min(low[node], index[child])
                if descended:
                    continue
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])
                if low[node] == index[node]:
                    component: list[str] = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member == node:
                            break
                    components.append(component)
        return components

    def _shortest_cycle(self, start: str, members: set[str]) -> list[str]:
        """Breadth-first search from *start* back to itself inside *members*."""
        parents: dict[str, str] = {}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            for child in self._outgoing[node]:
                if child not in members:
                    continue
                if child == start:
                    path = [node]
                    while path[-1] != start:
                        path.append(parents[path[-1]])
                    path.reverse()
                    return path
                if child not in parents:
                    parents[child] = node
                    queue.append(child)
        return [start]
