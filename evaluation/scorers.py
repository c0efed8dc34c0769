"""Built-in scorers and scorer resolution for the CLI."""

from __future__ import annotations

import importlib
from typing import Any, Dict, Optional, Type

from .protocol import Score


class ExactMatch:
    """Output equals expected, ignoring case and surrounding whitespace."""

    name = "exact_match"

    def score(self, *, input: str, output: str, expected: Optional[str] = None) -> Score:
        match = output.strip().lower() == (expected or "").strip().lower()
        return Score(
            name=self.name,
            value=1.0 if match else 0.0,
            label="match" if match else "mismatch",
        )


class ContainsKeyword:
    """Expected appears somewhere in the output."""

    name = "contains_keyword"

    def score(self, *, input: str, output: str, expected: Optional[str] = None) -> Score:
        keyword = (expected or "").strip().lower()
        found = keyword in output.lower()
        return Score(
            name=self.name,
            value=1.0 if found else 0.0,
            rationale=f"Keyword '{keyword}' {'found' if found else 'not found'} in output",
        )


BUILTIN_SCORERS: Dict[str, Type[Any]] = {
    ExactMatch.name: ExactMatch,
    ContainsKeyword.name: ContainsKeyword,
}


def import_object(path: str) -> Any:
    """Import ``module:attribute`` (or ``module.attribute``)."""
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:attribute', got: {path}")
    obj: Any = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    return obj


def resolve_scorer(spec: str) -> Any:
    """Built-in scorer by name, or an imported scorer (classes are instantiated)."""
    if spec in BUILTIN_SCORERS:
        return BUILTIN_SCORERS[spec]()
    obj = import_object(spec)
    return obj() if isinstance(obj, type) else obj


__all__ = ["ExactMatch", "ContainsKeyword", "BUILTIN_SCORERS", "import_object", "resolve_scorer"]
