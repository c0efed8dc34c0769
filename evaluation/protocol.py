"""Scorer protocol and canonical Score.

Defines what a scorer must look like to be accepted by ``evaluate()`` and
normalizes whatever a scorer returns (autoevals results, phoenix-evals
results, dicts, plain numbers) into a ``Score``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

_MISSING = object()

# Fields consumed by the generic mapping rule; everything else becomes metadata
_CONSUMED_FIELDS = ("value", "score", "label", "rationale", "explanation")


@dataclass
class Score:
    """Result from a scorer evaluation."""

    name: str
    value: Optional[float] = None
    label: Optional[str] = None
    rationale: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def answered(self) -> bool:
        return self.value is not None or self.label is not None


@runtime_checkable
class Scorer(Protocol):
    """Interface for evaluation scorers.

    Any object with a ``name`` and a ``score`` method accepting ``input``,
    ``output`` and (when the datum has one) ``expected`` keyword arguments is
    a valid scorer. The return value may be a ``Score`` or anything
    ``adapt_score`` understands.

    Example:
        class ContainsYes:
            name = "contains_yes"

            def score(self, *, input, output, expected=None):
                return 1.0 if "yes" in output.lower() else 0.0
    """

    name: str

    def score(self, *, input: str, output: str, expected: Optional[str] = None) -> Any:
        ...


def scorer_name(scorer: Any) -> str:
    """Identity of a scorer: ``name``, then ``__name__``, then its class name."""
    name = getattr(scorer, "name", None)
    if isinstance(name, str) and name:
        return name
    return getattr(scorer, "__name__", None) or type(scorer).__name__


def invoke_scorer(scorer: Any, **kwargs: Any) -> Any:
    """Call ``scorer.score(**kwargs)``, or the scorer itself when it is a plain callable."""
    method = getattr(scorer, "score", None)
    if callable(method):
        return method(**kwargs)
    if callable(scorer):
        return scorer(**kwargs)
    raise TypeError(f"Scorer {scorer_name(scorer)!r} has no callable 'score'")


# --- Field access over mappings and attribute objects ---

def _field(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _has_field(obj: Any, key: str) -> bool:
    if isinstance(obj, Mapping):
        return key in obj
    return _field(obj, key, _MISSING) is not _MISSING


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    return value if _is_number(value) else None


def _as_mapping(obj: Any) -> Optional[Dict[str, Any]]:
    """Shallow field view of a dict-like result, or None for non-objects."""
    if isinstance(obj, Mapping):
        return dict(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in fields(obj)}
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        dumped = model_dump()
        return dict(dumped) if isinstance(dumped, Mapping) else None
    return None


# --- Recognition rules, evaluated in order ---

def _is_canonical(result: Any) -> bool:
    return isinstance(_field(result, "name"), str) and (
        _has_field(result, "value") or _has_field(result, "label")
    )


def _from_canonical(name: str, result: Any) -> Score:
    return Score(
        name=name,
        value=_as_number(_field(result, "value")),
        label=_field(result, "label"),
        rationale=_field(result, "rationale"),
        metadata=_field(result, "metadata"),
    )


def _is_autoevals_result(result: Any) -> bool:
    return _is_number(_field(result, "score"))


def _from_autoevals_result(name: str, result: Any) -> Score:
    label = _field(result, "choice")
    if label is None:
        label = _field(result, "label")
    metadata = _field(result, "metadata")
    return Score(
        name=name,
        value=_field(result, "score"),
        label=label,
        rationale=_field(result, "rationale"),
        metadata=metadata if metadata is not None else {},
    )


def _is_phoenix_result(result: Any) -> bool:
    return isinstance(_field(result, "label"), str) and isinstance(_field(result, "explanation"), str)


def _from_phoenix_result(name: str, result: Any) -> Score:
    return Score(
        name=name,
        value=_as_number(_field(result, "score")),
        label=_field(result, "label"),
        rationale=_field(result, "explanation"),
    )


def _is_plain_number(result: Any) -> bool:
    return isinstance(result, (int, float))


def _from_plain_number(name: str, result: Any) -> Score:
    return Score(name=name, value=_as_number(result))


def _is_object(result: Any) -> bool:
    return _as_mapping(result) is not None


def _from_object(name: str, result: Any) -> Score:
    obj = _as_mapping(result) or {}
    value = obj.get("value")
    if value is None:
        value = obj.get("score")
    rationale = obj.get("rationale")
    if rationale is None:
        rationale = obj.get("explanation")
    return Score(
        name=name,
        value=_as_number(value),
        label=obj.get("label"),
        rationale=rationale,
        metadata={k: v for k, v in obj.items() if k not in _CONSUMED_FIELDS},
    )


_RULES: List[Tuple[Callable[[Any], bool], Callable[[str, Any], Score]]] = [
    (_is_canonical, _from_canonical),
    (_is_autoevals_result, _from_autoevals_result),
    (_is_phoenix_result, _from_phoenix_result),
    (_is_plain_number, _from_plain_number),
    (_is_object, _from_object),
]


def _fallback(name: str, result: Any) -> Score:
    try:
        raw = str(result)
    except Exception:
        raw = repr(type(result))
    return Score(name=name, metadata={"raw": raw})


def adapt_score(scorer_name: str, result: Any) -> Score:
    """Convert a scorer result to a ``Score``.

    Handles ``Score`` instances (returned unchanged), autoevals-style results
    (numeric ``score``), phoenix-evals-style results (``label`` +
    ``explanation``), plain numbers and dict-like objects. Anything else
    degrades to a Score carrying ``metadata["raw"]``; this never raises.
    """
    if isinstance(result, Score):
        return result
    try:
        for matches, convert in _RULES:
            if matches(result):
                return convert(scorer_name, result)
    except Exception:
        pass
    return _fallback(scorer_name, result)


__all__ = ["Score", "Scorer", "adapt_score", "scorer_name", "invoke_scorer"]
