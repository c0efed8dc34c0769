"""Score submission as OpenTelemetry spans.

Scores travel through the same exporter pipeline as every other trace. Data
Prepper routes them to the scores index on the ``opensearch.score`` marker
attribute, so no separate storage client is needed.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.trace import TracerProvider

TRACER_NAME = "genai-evals-scores"
MAX_RATIONALE_LENGTH = 500
DATA_TYPES = ("NUMERIC", "CATEGORICAL", "BOOLEAN")


def score(
    name: str,
    value: Optional[float] = None,
    *,
    trace_id: Optional[str] = None,
    span_id: Optional[str] = None,
    label: Optional[str] = None,
    data_type: str = "NUMERIC",
    source: str = "sdk",
    comment: Optional[str] = None,
    rationale: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    project: Optional[str] = None,
    tracer_provider: Optional[TracerProvider] = None,
) -> None:
    """Submit a score as a zero-duration span named ``score.<name>``.

    ``trace_id`` and ``span_id`` are stored as attributes pointing at the
    scored trace; they do not become the score span's own identity.

    Usage:
        score("relevance", 0.95, trace_id="abc123", source="llm-judge",
              rationale="Answer directly addresses the question")
    """
    if data_type not in DATA_TYPES:
        raise ValueError(f"Unknown score data type: {data_type}")

    attrs: Dict[str, Any] = {
        "opensearch.score": True,
        "score.name": name,
        "score.data_type": data_type,
        "score.source": source,
        "score.project": project or os.getenv("OPENSEARCH_PROJECT", "default"),
    }
    if value is not None:
        attrs["score.value"] = value
    if trace_id:
        attrs["score.trace_id"] = trace_id
    if span_id:
        attrs["score.span_id"] = span_id
    if label:
        attrs["score.label"] = str(label)
    if comment:
        attrs["score.comment"] = str(comment)
    if rationale:
        attrs["score.rationale"] = str(rationale)[:MAX_RATIONALE_LENGTH]
    for key, val in (metadata or {}).items():
        attrs[f"score.metadata.{key}"] = str(val)

    tracer = trace.get_tracer(TRACER_NAME, tracer_provider=tracer_provider)
    with tracer.start_as_current_span(f"score.{name}", attributes=attrs):
        pass


__all__ = ["score", "DATA_TYPES", "MAX_RATIONALE_LENGTH"]
