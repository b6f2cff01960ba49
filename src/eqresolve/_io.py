import logging
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import StringConstraints, TypeAdapter

logger = logging.getLogger(__name__)

EquationName = Annotated[str, StringConstraints(pattern=r"^[A-Z]+$")]

_equations_adapter: TypeAdapter[dict[str, str]] = TypeAdapter(dict[EquationName, str])


class EquationSyntaxError(ValueError):
    """Raised when a line of equation text cannot be parsed."""

    def __init__(self, message: str, line: int) -> None:
        self.line = line
        super().__init__(f"line {line}: {message}")


def validate_equations(data: Any) -> dict[str, str]:
    """Validate raw data as an equation set.

    Names must be non-empty runs of uppercase letters and expressions must be
    strings.

    Raises:
        pydantic.ValidationError: If the data is not a valid equation set.

    """
    return _equations_adapter.validate_python(data, strict=True)


def parse_equation_lines(lines: str | Iterable[str]) -> dict[str, str]:
    """Parse ``NAME=expression`` definitions, one per line.

    Blank lines and lines starting with ``#`` are skipped. Whitespace around
    the name and the expression is stripped. Only the first ``=`` separates
    the name from the expression.

    Example:
        >>> parse_equation_lines("A=B+2\\nB = 1")
        {'A': 'B+2', 'B': '1'}

    Raises:
        EquationSyntaxError: If a line has no ``=``, an empty name, or
            redefines a name.

    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    equations: dict[str, str] = {}
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, expression = line.partition("=")
        name = name.strip()
        if not sep or not name:
            msg = f"expected NAME=expression, got {raw.strip()!r}"
            raise EquationSyntaxError(msg, lineno)
        if name in equations:
            msg = f"equation '{name}' is defined more than once"
            raise EquationSyntaxError(msg, lineno)
        equations[name] = expression.strip()
    return equations


def toml_to_equations(toml_contents: Mapping[str, Any]) -> dict[str, str]:
    """Extract and validate equations from parsed TOML.

    Equations are read from the ``[equations]`` table if there is one,
    otherwise from the top level of the document.
    """
    section = toml_contents.get("equations", toml_contents)
    return validate_equations(section)


def load_equations(input_path: Path | str) -> dict[str, str]:
    """Load an equation set from a file.

    ``.toml`` files are read as TOML (see `toml_to_equations`); any other file
    is read as ``NAME=expression`` lines.

    Args:
        input_path: Path to the equations file.

    Returns:
        Validated mapping from equation name to expression text.

    """
    input_path = Path(input_path)

    if input_path.suffix == ".toml":
        with input_path.open("rb") as f:
            equations = toml_to_equations(tomllib.load(f))
    else:
        equations = validate_equations(parse_equation_lines(input_path.read_text(encoding="utf-8")))

    logger.debug(f"Loaded {len(equations)} equations from {input_path}")
    return equations


def format_equations(equations: Mapping[str, str]) -> str:
    """Format equations as ``NAME=expression`` lines sorted by name."""
    return "\n".join(f"{name}={equations[name]}" for name in sorted(equations))


def export_to_toml(equations: Mapping[str, str], output_path: Path | str) -> None:
    """Write equations to a TOML file under an ``[equations]`` table."""
    toml_data = {"equations": {name: equations[name] for name in sorted(equations)}}

    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(toml_data, f)

    logger.debug(f"Exported {len(equations)} equations to {output_path}")
