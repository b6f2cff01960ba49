"""Handling of variables that are referenced but never defined."""

from enum import StrEnum
from typing import Self


class UndefinedPolicy(StrEnum):
    """What to substitute for a variable that has no equation of its own.

    Each member carries its own docstring, shown in the CLI help.
    """

    KEEP = "keep", "Leave the variable name in the expanded text"
    EMPTY = "empty", "Replace the variable with an empty string"
    ERROR = "error", "Fail with UndefinedVariableError"

    def __new__(cls, value: str, doc: str = "") -> Self:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj
