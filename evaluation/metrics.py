from __future__ import annotations

from statistics import mean
from typing import TYPE_CHECKING, Dict, Iterable, List

if TYPE_CHECKING:
    from .evaluate import EvalResult


def _is_numeric(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def group_values(results: Iterable["EvalResult"]) -> Dict[str, List[float]]:
    """Numeric score values per scorer name, in first-seen scorer order."""
    groups: Dict[str, List[float]] = {}
    for r in results:
        for scorer_name, s in r.scores.items():
            if _is_numeric(s.value):
                groups.setdefault(scorer_name, []).append(s.value)
    return groups


def compute_averages(results: Iterable["EvalResult"]) -> Dict[str, float]:
    """Arithmetic mean per scorer; scorers with no numeric value are left out."""
    return {name: float(mean(vals)) for name, vals in group_values(results).items()}


__all__ = ["group_values", "compute_averages"]
