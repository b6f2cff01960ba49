"""Graph algorithms for dependency ordering and cycle detection."""

from __future__ import annotations

import logging
from collections.abc import Collection, Hashable, Iterator, Mapping, Sequence
from enum import Enum, auto
from typing import Generic, TypeVar

from ._directed_graph import DirectedGraph

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


def format_cycle(cycle: Sequence[object]) -> str:
    """Render a cycle as ``A->B->C->A``."""
    return "->".join(str(vertex) for vertex in cycle)


class CyclicDependencyError(ValueError):
    """Raised when an operation needs a topological order but the graph has a cycle."""

    def __init__(
        self,
        cycle: Sequence[Hashable],
        reason: str = "Equations have a cycle, cannot resolve.",
    ) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"{reason} Cycle: {format_cycle(self.cycle)}")


class MissingOrderingError(CyclicDependencyError):
    """Raised when the ordering of a cyclic graph is requested."""

    def __init__(self, cycle: Sequence[Hashable]) -> None:
        super().__init__(cycle, "Graph has a cycle, no topological ordering exists.")


class _VisitState(Enum):
    ON_PATH = auto()
    FINISHED = auto()


class TopologicalSorter(Generic[T]):
    """Depth-first topological sort with cycle detection.

    The traversal runs once, at construction. It starts from each unvisited
    vertex in ``graph.vertices()`` order and follows out-edges in adjacency
    order. Each vertex is appended to the ordering after all of its
    out-neighbours (post-order), so for an edge (v, w) meaning "v depends on
    w", ``w`` comes before ``v``: the ordering can be consumed left to right
    as a resolution order.

    If a vertex on the current path is reached again, that first-found cycle
    is recorded and the traversal stops. A graph with a cycle has no
    topological ordering.

    Example:
        >>> graph = DirectedGraph.from_edges("ABCD", [("A", "B"), ("B", "C"), ("D", "A"), ("D", "B")])
        >>> TopologicalSorter(graph).ordering()
        ('C', 'B', 'A', 'D')

    """

    __slots__ = ("_cycle", "_edge_to", "_ordering", "_state")

    def __init__(self, graph: DirectedGraph[T]) -> None:
        self._state: dict[T, _VisitState] = {}
        # Tree-edge parent of each discovered vertex: _edge_to[w] = v
        self._edge_to: dict[T, T] = {}
        self._ordering: list[T] = []
        self._cycle: tuple[T, ...] | None = None

        for vertex in graph.vertices():
            if vertex not in self._state:
                self._dfs(graph, vertex)
            if self._cycle is not None:
                break

        if self._cycle is None:
            logger.debug("Topological order of %d vertices: %s", len(self._ordering), self._ordering)
        else:
            logger.debug("Cycle detected: %s", format_cycle(self._cycle))

    def _dfs(self, graph: DirectedGraph[T], root: T) -> None:
        """Visit everything reachable from `root`.

        Uses an explicit stack of neighbour iterators; the visiting order is
        the same as a recursive depth-first search.
        """
        self._state[root] = _VisitState.ON_PATH
        stack: list[tuple[T, Iterator[T]]] = [(root, iter(graph.adjacency(root)))]

        while stack:
            vertex, neighbors = stack[-1]
            for neighbor in neighbors:
                state = self._state.get(neighbor)
                if state is None:
                    self._edge_to[neighbor] = vertex
                    self._state[neighbor] = _VisitState.ON_PATH
                    stack.append((neighbor, iter(graph.adjacency(neighbor))))
                    break
                if state is _VisitState.ON_PATH:
                    self._cycle = self._trace_cycle(vertex, neighbor)
                    return
            else:
                stack.pop()
                self._state[vertex] = _VisitState.FINISHED
                self._ordering.append(vertex)

    def _trace_cycle(self, vertex: T, ancestor: T) -> tuple[T, ...]:
        """Walk tree edges from `vertex` back to `ancestor` and close the loop."""
        path = [ancestor]
        current = vertex
        while current != ancestor:
            path.append(current)
            current = self._edge_to[current]
        path.append(ancestor)
        path.reverse()
        return tuple(path)

    def has_cycle(self) -> bool:
        """Return True if the graph has a directed cycle."""
        return self._cycle is not None

    def cycle(self) -> tuple[T, ...]:
        """Get the first-discovered cycle, e.g. ``('A', 'B', 'C', 'A')``.

        Returns:
            The cycle in dependency order, starting and ending with the same
            vertex. An empty tuple if the graph has no cycle.

        """
        return self._cycle or ()

    def ordering(self) -> tuple[T, ...]:
        """Get the topological ordering (dependencies before dependents).

        Raises:
            MissingOrderingError: If the graph has a cycle.

        """
        if self._cycle is not None:
            raise MissingOrderingError(self._cycle)
        return tuple(self._ordering)


def topological_sort(dependencies: Mapping[T, Collection[T]]) -> list[T]:
    """Sort nodes so that each node comes after everything it depends on.

    Args:
        dependencies: Mapping from node to the nodes it depends on. Nodes that
            only appear as dependencies are included in the result.

    Returns:
        List of nodes in topological order.

    Raises:
        MissingOrderingError: If the graph contains a cycle.

    Example:
        >>> # c depends on b, b depends on a
        >>> topological_sort({"c": ["b"], "b": ["a"], "a": []})
        ['a', 'b', 'c']

    """
    graph: DirectedGraph[T] = DirectedGraph()
    for node, deps in dependencies.items():
        graph.add_vertex(node)
        for dep in deps:
            graph.add_vertex(dep)
            graph.add_edge(node, dep)
    return list(TopologicalSorter(graph).ordering())
