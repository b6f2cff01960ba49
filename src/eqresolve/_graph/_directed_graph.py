"""Adjacency-list directed graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

T = TypeVar("T")


@dataclass(slots=True)
class DirectedGraph(Generic[T]):
    """A directed graph stored as ordered adjacency lists.

    Vertices and the out-neighbours of each vertex keep their insertion order,
    so every traversal over the graph is deterministic.

    An edge (v, w) means "v depends on w".

    Attributes:
        _vertices: Ordered set of vertices (dict keys, values unused).
        _adjacency: Mapping from vertex to its ordered set of out-neighbours.

    """

    _vertices: dict[T, None] = field(default_factory=dict)
    _adjacency: dict[T, dict[T, None]] = field(default_factory=dict)

    @classmethod
    def from_edges(
        cls,
        vertices: Iterable[T],
        edges: Iterable[tuple[T, T]],
    ) -> DirectedGraph[T]:
        """Build a graph from vertices and (source, target) edges.

        Edge endpoints are not added as vertices implicitly.

        Example:
            >>> graph = DirectedGraph.from_edges(["a", "b"], [("a", "b")])
            >>> graph.adjacency("a")
            ('b',)

        """
        graph = cls()
        for vertex in vertices:
            graph.add_vertex(vertex)
        for src, dst in edges:
            graph.add_edge(src, dst)
        return graph

    def add_vertex(self, vertex: T) -> None:
        """Add a vertex. Adding an existing vertex is a no-op."""
        self._vertices.setdefault(vertex)

    def add_edge(self, src: T, dst: T) -> None:
        """Add a directed edge from `src` to `dst`.

        An edge that already exists is not stored twice. Neither endpoint is
        added to the vertex set.
        """
        self._adjacency.setdefault(src, {}).setdefault(dst)

    def vertices(self) -> tuple[T, ...]:
        """All vertices in insertion order."""
        return tuple(self._vertices)

    def adjacency(self, vertex: T) -> tuple[T, ...]:
        """Get the distinct out-neighbours of a vertex.

        Args:
            vertex: The vertex to query.

        Returns:
            Out-neighbours in the order their edges were first added, or an
            empty tuple if the vertex has no recorded out-edges.

        """
        return tuple(self._adjacency.get(vertex, ()))

    def edges(self) -> Iterator[tuple[T, T]]:
        """Iterate over all (source, target) edges."""
        for src, targets in self._adjacency.items():
            for dst in targets:
                yield src, dst

    def __len__(self) -> int:
        """Return the number of vertices in the graph."""
        return len(self._vertices)

    def __contains__(self, vertex: object) -> bool:
        """Check if a vertex is in the graph."""
        return vertex in self._vertices
