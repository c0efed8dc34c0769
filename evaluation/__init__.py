"""
Evaluation framework package for genai-evals.

Provides:
- The `evaluate()` orchestrator emitting a span per run, item, task and scorer
- The `Scorer` protocol and `adapt_score()` for third-party scorer results
- Built-in scorers, a dataset loader and a minimal runner (CLI)
"""

from .protocol import Score, Scorer, adapt_score
from .evaluate import EvalDatum, EvalResult, EvalSummary, evaluate, format_eval_summary
from .scorers import ContainsKeyword, ExactMatch
from .dataset import load_dataset

__all__ = [
    "Score",
    "Scorer",
    "adapt_score",
    "EvalDatum",
    "EvalResult",
    "EvalSummary",
    "evaluate",
    "format_eval_summary",
    "ExactMatch",
    "ContainsKeyword",
    "load_dataset",
]
