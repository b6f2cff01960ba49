"""Dependency resolution and expansion of textual equations."""

__all__ = [
    "CyclicDependencyError",
    "DirectedGraph",
    "EquationResolver",
    "EquationSyntaxError",
    "MissingOrderingError",
    "ResolutionResult",
    "TopologicalSorter",
    "UndefinedPolicy",
    "UndefinedVariableError",
    "VariableToken",
    "build_graph",
    "dependency_names",
    "export_to_toml",
    "extract_tokens",
    "format_cycle",
    "format_equations",
    "load_equations",
    "parse_equation_lines",
    "resolve_equations",
    "substitute_tokens",
    "topological_sort",
    "validate_equations",
]

from ._graph import (
    CyclicDependencyError,
    DirectedGraph,
    MissingOrderingError,
    TopologicalSorter,
    format_cycle,
    topological_sort,
)
from ._io import (
    EquationSyntaxError,
    export_to_toml,
    format_equations,
    load_equations,
    parse_equation_lines,
    validate_equations,
)
from ._policy import UndefinedPolicy
from ._resolver import (
    EquationResolver,
    ResolutionResult,
    UndefinedVariableError,
    build_graph,
    resolve_equations,
)
from ._tokens import VariableToken, dependency_names, extract_tokens, substitute_tokens
