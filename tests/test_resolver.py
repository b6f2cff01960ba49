"""Tests for the equation resolver."""

import pytest

from eqresolve import _resolver
from eqresolve._graph import CyclicDependencyError
from eqresolve._policy import UndefinedPolicy
from eqresolve._resolver import (
    EquationResolver,
    ResolutionResult,
    UndefinedVariableError,
    build_graph,
    resolve_equations,
)

CANONICAL = {"A": "B+2", "B": "C+5", "C": "1", "D": "A+B"}


class TestBuildGraph:
    def test_vertices_and_edges(self) -> None:
        graph = build_graph(CANONICAL)
        assert graph.vertices() == ("A", "B", "C", "D")
        assert graph.adjacency("A") == ("B",)
        assert graph.adjacency("C") == ()
        assert graph.adjacency("D") == ("A", "B")

    def test_duplicate_references_collapse(self) -> None:
        graph = build_graph({"E": "A+A+B"})
        assert list(graph.edges()) == [("E", "A"), ("E", "B")]

    def test_undefined_variable_is_a_leaf_vertex(self) -> None:
        graph = build_graph({"A": "X+1"})
        assert "X" in graph
        assert graph.adjacency("X") == ()

    def test_function_calls_are_not_dependencies(self) -> None:
        graph = build_graph({"E": "FOO(A,B)+C"})
        assert graph.adjacency("E") == ("A", "B", "C")
        assert "FOO" not in graph

    def test_self_reference_is_a_self_loop(self) -> None:
        graph = build_graph({"A": "A+1"})
        assert graph.adjacency("A") == ("A",)


class TestEquationResolver:
    def test_canonical_expansion(self) -> None:
        resolver = EquationResolver(CANONICAL)
        assert resolver.has_cycle() is False
        assert resolver.cycle() == ()
        assert resolver.expanded_equations() == {
            "A": "1+5+2",
            "B": "1+5",
            "C": "1",
            "D": "1+5+2+1+5",
        }

    def test_canonical_ordering(self) -> None:
        assert EquationResolver(CANONICAL).ordering() == ("C", "B", "A", "D")

    def test_result_independent_of_input_order(self) -> None:
        reordered = {name: CANONICAL[name] for name in ["D", "C", "A", "B"]}
        assert EquationResolver(reordered).expanded_equations() == EquationResolver(CANONICAL).expanded_equations()

    def test_ordering_respects_dependencies(self) -> None:
        equations = {"E": "D*A", "D": "B+C", "C": "A", "B": "A+1", "A": "2"}
        resolver = EquationResolver(equations)
        ordering = resolver.ordering()
        for v, w in resolver.graph.edges():
            assert ordering.index(w) < ordering.index(v)

    def test_self_cycle(self) -> None:
        resolver = EquationResolver({"A": "A+1"})
        assert resolver.has_cycle()
        assert resolver.cycle() == ("A", "A")

    def test_multi_node_cycle(self) -> None:
        resolver = EquationResolver({"A": "B+1", "B": "C+1", "C": "A+1"})
        cycle = resolver.cycle()
        assert resolver.has_cycle()
        assert cycle[0] == cycle[-1]
        assert sorted(cycle[:-1]) == ["A", "B", "C"]
        # Each step follows a dependency edge
        for v, w in zip(cycle, cycle[1:], strict=False):
            assert w in resolver.graph.adjacency(v)

    def test_expansion_refused_on_cycle(self) -> None:
        resolver = EquationResolver({"A": "B", "B": "A", "C": "1"})
        with pytest.raises(CyclicDependencyError, match="cannot resolve") as exc_info:
            resolver.expanded_equations()
        assert exc_info.value.cycle == resolver.cycle()

    def test_ordering_raises_on_cycle(self) -> None:
        resolver = EquationResolver({"A": "A"})
        with pytest.raises(CyclicDependencyError):
            resolver.ordering()

    def test_equations_are_copied_and_read_only(self) -> None:
        source = dict(CANONICAL)
        resolver = EquationResolver(source)
        source["A"] = "999"
        assert resolver.equations["A"] == "B+2"
        with pytest.raises(TypeError):
            resolver.equations["A"] = "1"  # type: ignore[index]

    def test_expansion_uses_expanded_dependencies(self) -> None:
        resolver = EquationResolver({"A": "B*B", "B": "C+C", "C": "2"})
        assert resolver.expanded_equations()["A"] == "2+2*2+2"

    def test_no_token_remains_after_expansion(self) -> None:
        equations = {"A": "B+C", "B": "C*2", "C": "MAX(1,2)"}
        expanded = EquationResolver(equations).expanded_equations()
        for name, text in expanded.items():
            assert name not in text.replace("MAX", "")

    def test_function_names_kept_during_expansion(self) -> None:
        resolver = EquationResolver({"E": "FOO(A,B)+C", "A": "1", "B": "2", "C": "3"})
        assert resolver.expanded_equations()["E"] == "FOO(1,2)+3"

    def test_empty_equation_set(self) -> None:
        resolver = EquationResolver({})
        assert not resolver.has_cycle()
        assert resolver.expanded_equations() == {}


class TestExpansionCache:
    def test_repeated_calls_equal(self) -> None:
        resolver = EquationResolver(CANONICAL)
        assert resolver.expanded_equations() == resolver.expanded_equations()

    def test_second_call_does_no_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[str] = []
        real_substitute = _resolver.substitute_tokens

        def counting(text: str, replace: object) -> str:
            calls.append(text)
            return real_substitute(text, replace)  # type: ignore[arg-type]

        monkeypatch.setattr(_resolver, "substitute_tokens", counting)
        resolver = EquationResolver(CANONICAL)
        first = resolver.expanded_equations()
        assert len(calls) == len(CANONICAL)

        second = resolver.expanded_equations()
        assert second == first
        assert len(calls) == len(CANONICAL)

    def test_returned_dict_does_not_alias_cache(self) -> None:
        resolver = EquationResolver(CANONICAL)
        resolver.expanded_equations()["A"] = "changed"
        assert resolver.expanded_equations()["A"] == "1+5+2"


class TestUndefinedVariables:
    def test_default_keeps_token(self) -> None:
        resolver = EquationResolver({"A": "X+1"})
        assert resolver.undefined_policy is UndefinedPolicy.KEEP
        assert resolver.expanded_equations() == {"A": "X+1"}

    def test_keep_is_consistent_across_runs(self) -> None:
        results = [EquationResolver({"A": "X+1", "B": "A*X"}).expanded_equations() for _ in range(3)]
        assert results == [{"A": "X+1", "B": "X+1*X"}] * 3

    def test_empty_policy(self) -> None:
        resolver = EquationResolver({"A": "X+1", "B": "A+Y"}, undefined=UndefinedPolicy.EMPTY)
        assert resolver.expanded_equations() == {"A": "+1", "B": "+1+"}

    def test_error_policy(self) -> None:
        resolver = EquationResolver({"A": "X+1"}, undefined=UndefinedPolicy.ERROR)
        with pytest.raises(UndefinedVariableError, match="undefined variable 'X'") as exc_info:
            resolver.expanded_equations()
        assert exc_info.value.variable == "X"
        assert exc_info.value.equation == "A"

    def test_policy_accepts_string_value(self) -> None:
        resolver = EquationResolver({"A": "X"}, undefined="empty")  # type: ignore[arg-type]
        assert resolver.expanded_equations() == {"A": ""}

    def test_undefined_variables_listed(self) -> None:
        resolver = EquationResolver({"A": "Y+X", "B": "A+X"})
        assert resolver.undefined_variables() == ("X", "Y")

    def test_undefined_variables_not_in_output(self) -> None:
        expanded = EquationResolver({"A": "X+1"}).expanded_equations()
        assert set(expanded) == {"A"}


class TestResolveEquations:
    def test_success(self) -> None:
        result = resolve_equations(CANONICAL)
        assert isinstance(result, ResolutionResult)
        assert result.success
        assert result.expanded["D"] == "1+5+2+1+5"
        assert result.ordering == ("C", "B", "A", "D")
        assert result.cycle == ()

    def test_cycle(self) -> None:
        result = resolve_equations({"A": "B", "B": "A"})
        assert not result.success
        assert result.cycle == ("A", "B", "A")
        assert result.expanded == {}
        assert result.ordering == ()

    def test_reports_undefined(self) -> None:
        result = resolve_equations({"A": "X"}, undefined=UndefinedPolicy.EMPTY)
        assert result.undefined == ("X",)
        assert result.expanded == {"A": ""}
