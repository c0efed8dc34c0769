"""Evaluation orchestrator.

Runs a task function across a dataset, applies scorers to each output,
creates OpenTelemetry spans for the whole run and emits every score as a
span through the same exporter pipeline.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, TracerProvider

from utils.logger import get_logger
from utils.observability.score import score as submit_score

from .metrics import compute_averages
from .protocol import Score, adapt_score, invoke_scorer, scorer_name

TRACER_NAME = "genai-evals"

MAX_PREVIEW_LENGTH = 1000
MAX_RATIONALE_LENGTH = 500

EvalDatum = Mapping[str, Any]
DataSource = Union[Iterable[EvalDatum], Callable[[], Iterable[EvalDatum]]]


@dataclass
class EvalResult:
    """Outcome of one dataset item."""

    input: Any
    expected: Any = None
    output: Any = None
    scores: Dict[str, Score] = field(default_factory=dict)
    error: Optional[str] = None


@dataclass
class EvalSummary:
    """Final state of an evaluation run."""

    name: str
    results: List[EvalResult] = field(default_factory=list)
    averages: Dict[str, float] = field(default_factory=dict)
    total: int = 0
    errors: int = 0


def _preview(value: Any, limit: int = MAX_PREVIEW_LENGTH) -> str:
    return str(value)[:limit]


def _describe_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def evaluate(
    name: str,
    data: DataSource,
    task: Callable[[Any], Any],
    scores: Sequence[Any],
    emit_scores: bool = True,
    *,
    logger: Any = None,
    tracer_provider: Optional[TracerProvider] = None,
) -> EvalSummary:
    """Run an evaluation: dataset -> task -> scorers -> spans.

    Items are processed one at a time in dataset order. A task that raises
    marks its item with ``error`` and skips scoring; a scorer that raises is
    left out for that item only. Neither aborts the run.

    Span tree per run::

        evaluate
        +-- eval_item                  (one per datum)
            +-- eval_task
            +-- eval_score.<scorer>    (one per scorer)
            +-- score.<scorer>         (when emit_scores)

    Args:
        name: Identifier of this run.
        data: Sequence of mappings with ``input`` and optional ``expected``,
            or a zero-argument callable returning one. The callable is
            invoked once; if it raises, the error propagates.
        task: Called with each item's ``input``. Must be synchronous.
        scores: Scorers, see ``evaluation.protocol.Scorer``.
        emit_scores: Also emit each score as a ``score.<name>`` span.
        logger: structlog-style logger for warnings; defaults to this module's.
        tracer_provider: OpenTelemetry provider; defaults to the global one.

    Example:
        summary = evaluate(
            "qa-eval",
            data=[{"input": "Capital of France?", "expected": "Paris"}],
            task=my_llm_call,
            scores=[ExactMatch()],
        )
        print(format_eval_summary(summary))
    """
    log = logger or get_logger(__name__)
    tracer = trace.get_tracer(TRACER_NAME, tracer_provider=tracer_provider)

    dataset: List[EvalDatum] = list(data() if callable(data) else data)
    scorers = list(scores)

    summary = EvalSummary(name=name, total=len(dataset))

    with tracer.start_as_current_span(
        "evaluate",
        attributes={
            "eval.name": name,
            "eval.dataset_size": len(dataset),
            "eval.scorer_count": len(scorers),
        },
    ) as eval_span:
        for index, datum in enumerate(dataset):
            summary.results.append(
                _evaluate_item(
                    tracer, log, summary, index, datum, task, scorers, emit_scores, tracer_provider
                )
            )

        summary.averages = compute_averages(summary.results)
        for key, avg in summary.averages.items():
            eval_span.set_attribute(f"eval.avg.{key}", avg)
        eval_span.set_attribute("eval.errors", summary.errors)

    return summary


def _evaluate_item(
    tracer: trace.Tracer,
    log: Any,
    summary: EvalSummary,
    index: int,
    datum: EvalDatum,
    task: Callable[[Any], Any],
    scorers: List[Any],
    emit_scores: bool,
    tracer_provider: Optional[TracerProvider],
) -> EvalResult:
    input_val = datum.get("input")
    expected_val = datum.get("expected")
    result = EvalResult(input=input_val, expected=expected_val)

    with tracer.start_as_current_span(
        "eval_item",
        attributes={"eval.item.index": index, "eval.item.input": _preview(input_val)},
    ) as item_span:
        if not _run_task(tracer, log, summary, index, task, result):
            return result

        kwargs: Dict[str, str] = {"input": str(input_val), "output": str(result.output)}
        if expected_val is not None:
            kwargs["expected"] = str(expected_val)

        for scorer in scorers:
            _run_scorer(tracer, log, index, scorer, kwargs, result)

        if emit_scores:
            _emit_scores(log, summary.name, index, item_span, result, tracer_provider)

    return result


def _run_task(
    tracer: trace.Tracer,
    log: Any,
    summary: EvalSummary,
    index: int,
    task: Callable[[Any], Any],
    result: EvalResult,
) -> bool:
    """Run the task inside ``eval_task``; False when it raised."""
    with tracer.start_as_current_span(
        "eval_task", record_exception=False, set_status_on_exception=False
    ) as task_span:
        try:
            output = task(result.input)
        except Exception as exc:
            result.error = _describe_error(exc)
            summary.errors += 1
            task_span.set_status(Status(StatusCode.ERROR, str(exc)))
            task_span.record_exception(exc)
            log.warning("task_failed", eval_name=summary.name, item_index=index, error=result.error)
            return False

        if inspect.isawaitable(output):
            # The sync entry point never awaits; the placeholder itself becomes the output
            log.warning(
                "async_task_unsupported",
                eval_name=summary.name,
                item_index=index,
                hint="evaluate() runs synchronous tasks only; the awaitable was not awaited",
            )
            task_span.set_attribute("eval.task.async_unsupported", True)
            if inspect.iscoroutine(output):
                output.close()

        result.output = output
        task_span.set_attribute("eval.task.output", _preview(output))
    return True


def _run_scorer(
    tracer: trace.Tracer,
    log: Any,
    index: int,
    scorer: Any,
    kwargs: Dict[str, str],
    result: EvalResult,
) -> None:
    name = scorer_name(scorer)
    with tracer.start_as_current_span(
        f"eval_score.{name}",
        attributes={"eval.scorer.name": name},
        record_exception=False,
        set_status_on_exception=False,
    ) as score_span:
        try:
            raw = invoke_scorer(scorer, **kwargs)
        except Exception as exc:
            log.warning("scorer_failed", scorer=name, item_index=index, error=_describe_error(exc))
            score_span.set_status(Status(StatusCode.ERROR, str(exc)))
            score_span.record_exception(exc)
            return

        score_obj = adapt_score(name, raw)
        result.scores[name] = score_obj

        if score_obj.value is not None:
            score_span.set_attribute("eval.score.value", score_obj.value)
        if score_obj.label:
            score_span.set_attribute("eval.score.label", str(score_obj.label))
        if score_obj.rationale:
            score_span.set_attribute("eval.score.rationale", str(score_obj.rationale)[:MAX_RATIONALE_LENGTH])


def _emit_scores(
    log: Any,
    eval_name: str,
    index: int,
    item_span: trace.Span,
    result: EvalResult,
    tracer_provider: Optional[TracerProvider],
) -> None:
    ctx = item_span.get_span_context()
    trace_id = trace.format_trace_id(ctx.trace_id)
    span_id = trace.format_span_id(ctx.span_id)

    for name, score_obj in result.scores.items():
        try:
            submit_score(
                name,
                score_obj.value,
                trace_id=trace_id,
                span_id=span_id,
                label=score_obj.label,
                rationale=score_obj.rationale,
                source="eval",
                metadata={"eval_name": eval_name, "item_index": index},
                tracer_provider=tracer_provider,
            )
        except Exception as exc:
            log.warning("score_emit_failed", scorer=name, item_index=index, error=_describe_error(exc))


def format_eval_summary(summary: EvalSummary) -> str:
    """Format an EvalSummary as a human-readable string."""
    parts = [f"Eval: {summary.name} ({summary.total} samples, {summary.errors} errors)"]
    for name, avg in summary.averages.items():
        parts.append(f"  {name}: {avg:.3f}")
    return "\n".join(parts)


__all__ = [
    "EvalDatum",
    "EvalResult",
    "EvalSummary",
    "evaluate",
    "format_eval_summary",
]
