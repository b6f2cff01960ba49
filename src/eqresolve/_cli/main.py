import logging
import tomllib
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from eqresolve._io import (
    EquationSyntaxError,
    export_to_toml,
    format_equations,
    load_equations,
    parse_equation_lines,
    validate_equations,
)
from eqresolve._policy import UndefinedPolicy
from eqresolve._resolver import EquationResolver, UndefinedVariableError, resolve_equations

from .config import ConfigError, EqresolveConfig, get_config
from .render import render_cycle, render_equation_table, render_resolution_summary

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console(soft_wrap=True)

_UNDEFINED_HELP = "How to expand variables without an equation. " + "; ".join(
    f"{policy}: {policy.__doc__}" for policy in UndefinedPolicy
)

InputArg = Annotated[
    Path | None,
    typer.Argument(help="Equations file (.toml, or NAME=expression lines). Defaults to [tool.eqresolve].input"),
]
EquationOpt = Annotated[
    list[str] | None,
    typer.Option("-e", "--equation", help="Equation given as NAME=expression (repeatable)"),
]
UndefinedOpt = Annotated[
    UndefinedPolicy | None,
    typer.Option("--undefined", help=_UNDEFINED_HELP),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Expand inter-dependent equations."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> typer.Exit:
    """Print an error and return the exit exception for the caller to raise."""
    err_console.print(f"[red]Error: {escape(message)}[/red]", soft_wrap=True)
    return typer.Exit(code=1)


def _load_config() -> EqresolveConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]", soft_wrap=True)
        raise typer.Exit(code=1) from e


def _gather_equations(
    input_path: Path | None,
    equation_args: list[str] | None,
    config: EqresolveConfig,
) -> dict[str, str]:
    """Collect equations from the input file and -e options.

    The configured input is only used when neither is given.
    """
    if input_path is None and not equation_args:
        input_path = config.input
        logger.debug("Using configured input: %s", input_path)

    equations: dict[str, str] = {}
    try:
        if input_path is not None:
            err_console.print(f"[cyan]Loading equations from:[/cyan] {escape(str(input_path))}")
            equations = load_equations(input_path)
        if equation_args:
            extra = validate_equations(parse_equation_lines(equation_args))
            duplicated = sorted(extra.keys() & equations.keys())
            if duplicated:
                msg = f"Equations defined more than once: {', '.join(duplicated)}"
                raise _fail(msg)
            equations.update(extra)
    except FileNotFoundError as e:
        raise _fail(f"Input file not found: {e.filename}") from e
    except OSError as e:
        raise _fail(f"Cannot read input: {e}") from e
    except (EquationSyntaxError, ValidationError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise _fail(f"Invalid equations: {e}") from e

    if not equations:
        msg = "No equations given. Pass an input file, use -e NAME=expression, or configure [tool.eqresolve].input"
        raise _fail(msg)

    return equations


@app.command()
def expand(
    input: InputArg = None,  # noqa: A002
    *,
    equation: EquationOpt = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the expanded equations to this TOML file"),
    ] = None,
    undefined: UndefinedOpt = None,
) -> None:
    """Expand every variable in the equations with its own expansion.

    Examples:
        eqresolve expand equations.toml
        eqresolve expand -e A=B+2 -e B=C+5 -e C=1 -e D=A+B

    """
    err_console.print()

    config = _load_config()
    equations = _gather_equations(input, equation, config)
    policy = undefined or config.undefined or UndefinedPolicy.KEEP
    effective_output = output if output is not None else config.output

    render_equation_table(equations, "Input Equations", err_console)

    try:
        result = resolve_equations(equations, undefined=policy)
    except UndefinedVariableError as e:
        raise _fail(str(e)) from e

    if not result.success:
        render_cycle(result.cycle, err_console)
        raise typer.Exit(code=1)

    if result.undefined:
        names = ", ".join(result.undefined)
        err_console.print(f"[yellow]⚠ Undefined variables ({policy}): {escape(names)}[/yellow]", soft_wrap=True)

    err_console.print("[cyan]Output (Expanded) Equations:[/cyan]")
    out_console.print(format_equations(result.expanded), markup=False, highlight=False)

    if effective_output is not None:
        err_console.print(f"[cyan]Exporting results to:[/cyan] {escape(str(effective_output))}")
        try:
            export_to_toml(result.expanded, effective_output)
        except OSError as e:
            raise _fail(f"Cannot write output: {e}") from e

    err_console.print()
    err_console.print("[green]✓ Expansion complete[/green]")
    err_console.print()

    raise typer.Exit(code=0)


@app.command()
def check(
    input: InputArg = None,  # noqa: A002
    *,
    equation: EquationOpt = None,
    undefined: UndefinedOpt = None,
) -> None:
    """Check equations for dependency cycles and undefined variables, and show the resolution order."""
    err_console.print()

    config = _load_config()
    equations = _gather_equations(input, equation, config)
    policy = undefined or config.undefined or UndefinedPolicy.KEEP

    err_console.print("[cyan]Validating dependencies...[/cyan]")
    resolver = EquationResolver(equations, undefined=policy)
    if resolver.has_cycle():
        render_cycle(resolver.cycle(), err_console)
        raise typer.Exit(code=1)

    # Under the error policy an undefined variable fails the check like expand does
    try:
        resolver.expanded_equations()
    except UndefinedVariableError as e:
        raise _fail(str(e)) from e

    err_console.print()
    render_resolution_summary(resolver, err_console)

    free_variables = resolver.undefined_variables()
    if free_variables:
        err_console.print(f"[yellow]⚠ Undefined variables: {escape(', '.join(free_variables))}[/yellow]")

    err_console.print()
    err_console.print("[green]✓ No dependency cycles[/green]")
    err_console.print()


def main() -> None:
    app()
