"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from eqresolve._policy import UndefinedPolicy


class ConfigError(Exception):
    """Error in eqresolve configuration."""


@dataclass(slots=True, frozen=True)
class EqresolveConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    input: Path | None = None
    output: Path | None = None
    undefined: UndefinedPolicy | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.eqresolve].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return path


def _parse_undefined(section: dict[str, object]) -> UndefinedPolicy | None:
    if "undefined" not in section:
        return None
    value = section["undefined"]
    try:
        return UndefinedPolicy(value)
    except ValueError as e:
        choices = ", ".join(f"'{policy}'" for policy in UndefinedPolicy)
        msg = f"Invalid [tool.eqresolve].undefined: {value!r}. Expected one of {choices}"
        raise ConfigError(msg) from e


def load_config(pyproject_path: Path) -> EqresolveConfig:
    """Load and validate [tool.eqresolve] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed EqresolveConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("eqresolve", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.eqresolve]: expected a table"
        raise ConfigError(msg)

    return EqresolveConfig(
        input=_parse_path(section, "input", project_root),
        output=_parse_path(section, "output", project_root),
        undefined=_parse_undefined(section),
        project_root=project_root,
    )


def get_config() -> EqresolveConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        EqresolveConfig (may be empty if no pyproject.toml or no [tool.eqresolve] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return EqresolveConfig()
    return load_config(pyproject_path)
