"""Tests for score submission spans."""

import pytest

from utils.observability.score import MAX_RATIONALE_LENGTH, score


def _only_span(exporter):
    (span,) = exporter.get_finished_spans()
    return span


def test_minimal_score_attributes(monkeypatch, tracer_provider, span_exporter):
    monkeypatch.delenv("OPENSEARCH_PROJECT", raising=False)

    score("relevance", 0.95, tracer_provider=tracer_provider)

    span = _only_span(span_exporter)
    assert span.name == "score.relevance"
    assert dict(span.attributes) == {
        "opensearch.score": True,
        "score.name": "relevance",
        "score.data_type": "NUMERIC",
        "score.source": "sdk",
        "score.project": "default",
        "score.value": 0.95,
    }


def test_full_score_attributes(tracer_provider, span_exporter):
    score(
        "tone",
        trace_id="abc123",
        span_id="def456",
        label="polite",
        data_type="CATEGORICAL",
        source="llm-judge",
        comment="checked by hand",
        rationale="Courteous phrasing",
        metadata={"model": "gpt", "attempt": 2},
        project="support-bot",
        tracer_provider=tracer_provider,
    )

    attrs = _only_span(span_exporter).attributes
    assert "score.value" not in attrs
    assert attrs["score.trace_id"] == "abc123"
    assert attrs["score.span_id"] == "def456"
    assert attrs["score.label"] == "polite"
    assert attrs["score.data_type"] == "CATEGORICAL"
    assert attrs["score.source"] == "llm-judge"
    assert attrs["score.comment"] == "checked by hand"
    assert attrs["score.rationale"] == "Courteous phrasing"
    assert attrs["score.metadata.model"] == "gpt"
    assert attrs["score.metadata.attempt"] == "2"
    assert attrs["score.project"] == "support-bot"


def test_zero_value_is_kept(tracer_provider, span_exporter):
    score("accuracy", 0.0, tracer_provider=tracer_provider)
    assert _only_span(span_exporter).attributes["score.value"] == 0.0


def test_rationale_truncated(tracer_provider, span_exporter):
    score("judge", 1.0, rationale="r" * (MAX_RATIONALE_LENGTH + 100), tracer_provider=tracer_provider)
    assert len(_only_span(span_exporter).attributes["score.rationale"]) == MAX_RATIONALE_LENGTH


def test_project_from_env(monkeypatch, tracer_provider, span_exporter):
    monkeypatch.setenv("OPENSEARCH_PROJECT", "env-project")
    score("s", 1.0, tracer_provider=tracer_provider)
    assert _only_span(span_exporter).attributes["score.project"] == "env-project"


def test_trace_id_does_not_become_span_identity(tracer_provider, span_exporter):
    score("s", 1.0, trace_id="0" * 31 + "1", tracer_provider=tracer_provider)
    span = _only_span(span_exporter)
    assert span.context.trace_id != 1


def test_unknown_data_type(tracer_provider, span_exporter):
    with pytest.raises(ValueError, match="Unknown score data type: PERCENT"):
        score("s", 1.0, data_type="PERCENT", tracer_provider=tracer_provider)
    assert span_exporter.get_finished_spans() == ()


def test_non_text_label_and_rationale_are_stringified(tracer_provider, span_exporter):
    score("judge", 1.0, label=3, rationale=42, tracer_provider=tracer_provider)

    attrs = _only_span(span_exporter).attributes
    assert attrs["score.label"] == "3"
    assert attrs["score.rationale"] == "42"
