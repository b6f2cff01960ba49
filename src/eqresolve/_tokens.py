"""Variable token extraction and substitution.

A variable token is a whole word made only of uppercase ASCII letters that is
not immediately followed by an opening parenthesis, so ``MAX(A,B)`` references
``A`` and ``B`` but not ``MAX``. Graph building and substitution both go
through `extract_tokens`, so they always agree on which spans are variables.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

VARIABLE_TOKEN_PATTERN = re.compile(r"\b[A-Z]+\b(?!\()", re.ASCII)


@dataclass(frozen=True, slots=True)
class VariableToken:
    """A variable reference found in an expression.

    Attributes:
        name: The referenced equation name.
        start: Index of the first character of the token.
        end: Index one past the last character of the token.

    """

    name: str
    start: int
    end: int

    @property
    def span(self) -> tuple[int, int]:
        return (self.start, self.end)


def extract_tokens(text: str) -> list[VariableToken]:
    """Find every variable token in `text`, left to right.

    Example:
        >>> [t.name for t in extract_tokens("FOO(A,B)+C")]
        ['A', 'B', 'C']

    """
    return [VariableToken(m.group(), m.start(), m.end()) for m in VARIABLE_TOKEN_PATTERN.finditer(text)]


def dependency_names(text: str) -> list[str]:
    """Distinct variable names referenced by `text`, in first-occurrence order."""
    return list(dict.fromkeys(token.name for token in extract_tokens(text)))


def substitute_tokens(text: str, replace: Callable[[VariableToken], str]) -> str:
    """Replace each variable token in `text` with ``replace(token)``.

    Args:
        text: The expression to rewrite.
        replace: Called once per token occurrence; returns the replacement text.

    Returns:
        The rewritten expression. Text outside token spans is kept as is.

    """
    parts: list[str] = []
    position = 0
    for token in extract_tokens(text):
        parts.append(text[position : token.start])
        parts.append(replace(token))
        position = token.end
    parts.append(text[position:])
    return "".join(parts)
