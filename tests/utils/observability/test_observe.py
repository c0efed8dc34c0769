"""Tests for @observe decorator."""

import asyncio
import json

import pytest
from dataclasses import dataclass
from opentelemetry.trace import StatusCode

from utils.observability.observe import observe, workflow, task, agent, tool, _safe_preview, MAX_ATTRIBUTE_LENGTH


class TestSafePreview:
    """Tests for _safe_preview function."""

    def test_preview_primitives(self):
        """Test that primitives are returned as-is."""
        assert _safe_preview(None) is None
        assert _safe_preview(True) is True
        assert _safe_preview(42) == 42
        assert _safe_preview(3.14) == 3.14

    def test_preview_long_string_truncated(self):
        """Test that long strings are truncated with ellipsis."""
        long_str = "x" * 1000
        result = _safe_preview(long_str, max_len=100)

        assert len(result) == 103  # 100 + "..."
        assert result.endswith("...")

    def test_preview_dict_handles_various_secret_formats(self):
        """Test that various secret key formats are redacted."""
        data = {
            "api_key": "secret",
            "api-key": "secret",
            "apikey": "secret",
            "API_KEY": "secret",
            "access_token": "secret",
            "accessToken": "secret",
            "client_secret": "secret",
            "normal_field": "visible"
        }

        result = _safe_preview(data)

        for key in data:
            if key != "normal_field":
                assert result[key] == "<redacted>"
        assert result["normal_field"] == "visible"

    def test_preview_list_truncates_with_marker(self):
        """Test that long lists are truncated with ellipsis marker."""
        result = _safe_preview(list(range(50)))

        assert len(result) == 21  # 20 items + "..."
        assert result[-1] == "..."

    def test_preview_dict_truncates_with_marker(self):
        """Test that large dicts are truncated with marker."""
        result = _safe_preview({f"key{i}": f"val{i}" for i in range(50)})

        assert "30 more keys" in result["..."]
        assert len([k for k in result.keys() if k != "..."]) == 20

    def test_preview_dataclass(self):
        """Test that dataclasses are converted and previewed."""
        @dataclass
        class Credentials:
            user: str
            password: str

        result = _safe_preview(Credentials(user="john", password="hunter2"))

        assert result == {"user": "john", "password": "<redacted>"}


class TestObserveDecorator:
    """Tests for @observe and its span-kind shorthands."""

    def test_observe_preserves_function_name(self):
        """Test that decorator preserves function __name__ and __doc__."""
        @observe
        def my_function():
            """My docstring."""
            return 42

        assert my_function.__name__ == "my_function"
        assert my_function.__doc__ == "My docstring."

    def test_default_span_name_and_kind(self, global_span_exporter):
        @observe
        def double(x):
            return x * 2

        assert double(21) == 42

        (span,) = global_span_exporter.get_finished_spans()
        assert span.name.endswith("double")
        assert span.attributes["gen_ai.operation.name"] == "task"
        assert span.attributes["traceloop.span.kind"] == "task"
        assert span.attributes["gen_ai.entity.input"] == "21"
        assert span.attributes["gen_ai.entity.output"] == "42"

    @pytest.mark.parametrize("decorator,kind", [(workflow, "workflow"), (task, "task"), (agent, "agent"), (tool, "tool")])
    def test_shorthands_set_kind(self, global_span_exporter, decorator, kind):
        @decorator(name=f"my_{kind}")
        def fn():
            return "done"

        fn()

        (span,) = global_span_exporter.get_finished_spans()
        assert span.name == f"my_{kind}"
        assert span.attributes["gen_ai.operation.name"] == kind

    def test_version_and_multiple_arguments(self, global_span_exporter):
        @workflow(name="qa_pipeline", version=3)
        def pipeline(question, api_key=None):
            return {"answer": question.upper()}

        pipeline("hello", api_key="sk-123")

        (span,) = global_span_exporter.get_finished_spans()
        assert span.attributes["gen_ai.entity.version"] == 3
        assert json.loads(span.attributes["gen_ai.entity.input"]) == {"question": "hello", "api_key": "<redacted>"}
        assert json.loads(span.attributes["gen_ai.entity.output"]) == {"answer": "HELLO"}

    def test_none_result_sets_no_output(self, global_span_exporter):
        @tool
        def noop():
            return None

        noop()

        (span,) = global_span_exporter.get_finished_spans()
        assert "gen_ai.entity.output" not in span.attributes
        assert "gen_ai.entity.input" not in span.attributes

    def test_large_output_truncated(self, global_span_exporter):
        @task(name="huge")
        def huge():
            return "y" * (MAX_ATTRIBUTE_LENGTH * 2)

        huge()

        spans = {s.name: s for s in global_span_exporter.get_finished_spans()}
        assert spans["huge"].attributes["gen_ai.entity.output"].endswith("...(truncated)")

    def test_exceptions_are_recorded_and_reraised(self, global_span_exporter):
        @agent(name="failing")
        def failing():
            raise ValueError("test error")

        with pytest.raises(ValueError, match="test error"):
            failing()

        (span,) = global_span_exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR
        assert span.status.description == "test error"
        assert [e.name for e in span.events] == ["exception"]

    def test_async_function_span_covers_await(self, global_span_exporter):
        @tool(name="search")
        async def search(query):
            await asyncio.sleep(0)
            return [f"Result: {query}"]

        assert asyncio.run(search("otel")) == ["Result: otel"]

        (span,) = global_span_exporter.get_finished_spans()
        assert span.name == "search"
        assert json.loads(span.attributes["gen_ai.entity.output"]) == ["Result: otel"]

    def test_async_exception_marks_span(self, global_span_exporter):
        @tool(name="broken")
        async def broken():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            asyncio.run(broken())

        (span,) = global_span_exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR

    def test_nested_spans_share_trace(self, global_span_exporter):
        @task(name="inner")
        def inner(x):
            return x + 1

        @workflow(name="outer")
        def outer(x):
            return inner(x) * 2

        assert outer(1) == 4

        spans = {s.name: s for s in global_span_exporter.get_finished_spans()}
        assert spans["inner"].parent.span_id == spans["outer"].context.span_id
        assert spans["inner"].context.trace_id == spans["outer"].context.trace_id
