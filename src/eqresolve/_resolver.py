"""Dependency resolution and expansion of equation sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from ._graph import CyclicDependencyError, DirectedGraph, TopologicalSorter
from ._policy import UndefinedPolicy
from ._tokens import dependency_names, substitute_tokens

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._tokens import VariableToken

logger = logging.getLogger(__name__)


class UndefinedVariableError(LookupError):
    """Raised when an expression references a variable with no equation."""

    def __init__(self, variable: str, equation: str) -> None:
        self.variable = variable
        self.equation = equation
        super().__init__(f"Equation '{equation}' references undefined variable '{variable}'")


def build_graph(equations: Mapping[str, str]) -> DirectedGraph[str]:
    """Build the dependency graph of an equation set.

    Every equation name becomes a vertex, and so does every variable its
    expression references, even one with no equation of its own. An edge
    (A, B) means "A's expression references B".

    Example:
        >>> graph = build_graph({"A": "B+2", "B": "C+5", "C": "1"})
        >>> graph.vertices()
        ('A', 'B', 'C')
        >>> graph.adjacency("A")
        ('B',)

    """
    graph: DirectedGraph[str] = DirectedGraph()
    for name, expression in equations.items():
        graph.add_vertex(name)
        for dependency in dependency_names(expression):
            graph.add_vertex(dependency)
            graph.add_edge(name, dependency)
    return graph


class EquationResolver:
    """Resolves the dependencies between equations and expands them.

    The dependency graph is built and sorted once, at construction. If the
    equations have a cycle it is kept for reporting and no expansion is
    possible; check `has_cycle` before calling `expanded_equations`.

    Example:
        >>> resolver = EquationResolver({"A": "B+2", "B": "C+5", "C": "1", "D": "A+B"})
        >>> resolver.has_cycle()
        False
        >>> resolver.ordering()
        ('C', 'B', 'A', 'D')
        >>> resolver.expanded_equations()
        {'A': '1+5+2', 'B': '1+5', 'C': '1', 'D': '1+5+2+1+5'}

    Args:
        equations: Mapping from equation name to expression text. Copied on
            construction.
        undefined: What to do with variables that have no equation.

    """

    def __init__(
        self,
        equations: Mapping[str, str],
        *,
        undefined: UndefinedPolicy = UndefinedPolicy.KEEP,
    ) -> None:
        self._equations: Mapping[str, str] = MappingProxyType(dict(equations))
        self._undefined = UndefinedPolicy(undefined)
        self._graph = build_graph(self._equations)
        self._expanded: dict[str, str] | None = None

        sorter = TopologicalSorter(self._graph)
        self._cycle: tuple[str, ...] = sorter.cycle()
        self._ordering: tuple[str, ...] | None = None if sorter.has_cycle() else sorter.ordering()

        logger.debug(
            "Built dependency graph with %d vertices for %d equations",
            len(self._graph),
            len(self._equations),
        )

    @property
    def equations(self) -> Mapping[str, str]:
        """Read-only view of the input equations."""
        return self._equations

    @property
    def graph(self) -> DirectedGraph[str]:
        return self._graph

    @property
    def undefined_policy(self) -> UndefinedPolicy:
        return self._undefined

    def has_cycle(self) -> bool:
        """Return True if the equations depend on each other in a cycle."""
        return bool(self._cycle)

    def cycle(self) -> tuple[str, ...]:
        """Get the cycle found in the equations, e.g. ``('A', 'B', 'C', 'A')``.

        Returns:
            The cycle in dependency order, starting and ending with the same
            name. An empty tuple if there is no cycle.

        """
        return self._cycle

    def ordering(self) -> tuple[str, ...]:
        """Get the resolution order (dependencies before dependents).

        Undefined variables appear in the ordering as well.

        Raises:
            CyclicDependencyError: If the equations have a cycle.

        """
        if self._ordering is None:
            raise CyclicDependencyError(self._cycle)
        return self._ordering

    def undefined_variables(self) -> tuple[str, ...]:
        """Sorted names that are referenced but have no equation."""
        return tuple(sorted(v for v in self._graph.vertices() if v not in self._equations))

    def expanded_equations(self) -> dict[str, str]:
        """Get the equations with every variable replaced by its expansion.

        The expansion is computed on the first call and cached. Each call
        returns a new dict, keyed like the input equations.

        Raises:
            CyclicDependencyError: If the equations have a cycle.
            UndefinedVariableError: If a variable has no equation and the
                policy is `UndefinedPolicy.ERROR`.

        """
        if self._expanded is None:
            self._expanded = self._expand()
        else:
            logger.debug("Using cached expansion")
        return {name: self._expanded[name] for name in self._equations}

    def _expand(self) -> dict[str, str]:
        ordering = self.ordering()
        expanded: dict[str, str] = {}

        # Single forward pass: every dependency of `name` is already final
        for name in ordering:
            if name not in self._equations:
                continue

            def replace(token: VariableToken, name: str = name) -> str:
                if token.name in expanded:
                    return expanded[token.name]
                return self._replace_undefined(token, name)

            expanded[name] = substitute_tokens(self._equations[name], replace)
            logger.debug("Expanded %s = %s", name, expanded[name])

        return expanded

    def _replace_undefined(self, token: VariableToken, equation: str) -> str:
        match self._undefined:
            case UndefinedPolicy.KEEP:
                return token.name
            case UndefinedPolicy.EMPTY:
                return ""
            case UndefinedPolicy.ERROR:
                raise UndefinedVariableError(token.name, equation)


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of resolving an equation set.

    Attributes:
        expanded: Expanded equations. Empty if there is a cycle.
        cycle: The cycle found, or an empty tuple.
        ordering: Resolution order. Empty if there is a cycle.
        undefined: Names referenced but not defined.

    """

    expanded: dict[str, str] = field(default_factory=dict)
    cycle: tuple[str, ...] = ()
    ordering: tuple[str, ...] = ()
    undefined: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Check if the equations could be expanded."""
        return not self.cycle


def resolve_equations(
    equations: Mapping[str, str],
    *,
    undefined: UndefinedPolicy = UndefinedPolicy.KEEP,
) -> ResolutionResult:
    """Resolve an equation set without raising on cycles.

    Args:
        equations: Mapping from equation name to expression text.
        undefined: What to do with variables that have no equation.

    Returns:
        ResolutionResult with either the expansion or the cycle.

    Raises:
        UndefinedVariableError: If a variable has no equation and the policy
            is `UndefinedPolicy.ERROR`.

    """
    resolver = EquationResolver(equations, undefined=undefined)
    if resolver.has_cycle():
        return ResolutionResult(cycle=resolver.cycle(), undefined=resolver.undefined_variables())
    return ResolutionResult(
        expanded=resolver.expanded_equations(),
        ordering=resolver.ordering(),
        undefined=resolver.undefined_variables(),
    )
