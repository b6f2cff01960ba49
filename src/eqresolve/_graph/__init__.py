"""Graph module providing dependency graph abstractions.

This module contains:
- DirectedGraph[T]: An adjacency-list directed graph with ordered vertices
- TopologicalSorter[T]: Depth-first ordering with cycle detection
- topological_sort: Convenience function over a dependency mapping
"""

from ._algorithms import (
    CyclicDependencyError,
    MissingOrderingError,
    TopologicalSorter,
    format_cycle,
    topological_sort,
)
from ._directed_graph import DirectedGraph

__all__ = [
    "CyclicDependencyError",
    "DirectedGraph",
    "MissingOrderingError",
    "TopologicalSorter",
    "format_cycle",
    "topological_sort",
]
