"""Tracing decorators that turn plain functions into traced operations."""

from __future__ import annotations

from functools import wraps
from inspect import iscoroutinefunction, signature
from typing import Any, Callable, Optional
from dataclasses import is_dataclass, asdict
import json

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

TRACER_NAME = "genai-evals"

SPAN_KIND_WORKFLOW = "workflow"
SPAN_KIND_TASK = "task"
SPAN_KIND_AGENT = "agent"
SPAN_KIND_TOOL = "tool"

# Max characters for serialized input/output attributes
MAX_ATTRIBUTE_LENGTH = 10_000

# Compared after lower-casing and stripping "_" and "-"
SECRET_REDACT_KEYS = frozenset({
    "apikey", "accesstoken", "refreshtoken", "clientsecret", "secret", "password",
    "authorization", "bearer", "cookie", "setcookie", "privatekey", "sshkey",
})


def observe(
    _fn: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    kind: str = SPAN_KIND_TASK,
    version: Optional[int] = None,
) -> Callable[..., Any]:
    """Minimal tracing decorator.

    Usage:
        @observe
        def my_function(): ...

        @observe(name="qa_pipeline", kind="workflow", version=2)
        def pipeline(question): ...

        @observe(kind="tool")
        async def web_search(query): ...

    - Span named ``name`` or module.qualname
    - ``gen_ai.operation.name`` / ``traceloop.span.kind`` carry the span kind
    - Records redacted input previews, output, and exceptions
    - Coroutine functions keep the span open until the awaited call finishes
    """

    def _decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        module = getattr(fn, "__module__", "") or ""
        qualname = getattr(fn, "__qualname__", fn.__name__)
        span_name = name or (f"{module}.{qualname}" if module else qualname)

        if iscoroutinefunction(fn):
            @wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                tracer = trace.get_tracer(TRACER_NAME)
                with tracer.start_as_current_span(
                    span_name, record_exception=False, set_status_on_exception=False
                ) as span:
                    _set_span_attributes(span, kind, version, fn, args, kwargs)
                    try:
                        result = await fn(*args, **kwargs)
                    except Exception as e:
                        _mark_error(span, e)
                        raise
                    _capture_output(span, result)
                    return result

            return async_wrapper

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = trace.get_tracer(TRACER_NAME)
            with tracer.start_as_current_span(
                span_name, record_exception=False, set_status_on_exception=False
            ) as span:
                _set_span_attributes(span, kind, version, fn, args, kwargs)
                try:
                    result = fn(*args, **kwargs)
                except Exception as e:
                    _mark_error(span, e)
                    raise
                _capture_output(span, result)
                return result

        return wrapper

    # Support both @observe and @observe() forms
    if callable(_fn):
        return _decorate(_fn)
    return _decorate


def workflow(_fn: Optional[Callable[..., Any]] = None, *, name: Optional[str] = None, version: Optional[int] = None):
    """Trace top-level orchestration that coordinates tasks, agents or tools."""
    return observe(_fn, name=name, kind=SPAN_KIND_WORKFLOW, version=version)


def task(_fn: Optional[Callable[..., Any]] = None, *, name: Optional[str] = None, version: Optional[int] = None):
    """Trace an individual unit of work within a workflow."""
    return observe(_fn, name=name, kind=SPAN_KIND_TASK, version=version)


def agent(_fn: Optional[Callable[..., Any]] = None, *, name: Optional[str] = None, version: Optional[int] = None):
    """Trace autonomous agent logic that decides and invokes tools."""
    return observe(_fn, name=name, kind=SPAN_KIND_AGENT, version=version)


def tool(_fn: Optional[Callable[..., Any]] = None, *, name: Optional[str] = None, version: Optional[int] = None):
    """Trace a tool/function call invoked by an agent."""
    return observe(_fn, name=name, kind=SPAN_KIND_TOOL, version=version)


def _mark_error(span: Any, exc: Exception) -> None:
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)


def _set_span_attributes(span: Any, kind: str, version: Optional[int], fn: Callable, args: tuple, kwargs: dict) -> None:
    span.set_attribute("gen_ai.operation.name", kind)
    span.set_attribute("traceloop.span.kind", kind)
    if version is not None:
        span.set_attribute("gen_ai.entity.version", version)
    _capture_input(span, fn, args, kwargs)


def _is_secret_key(key: Any) -> bool:
    return str(key).lower().replace("_", "").replace("-", "") in SECRET_REDACT_KEYS


def _safe_preview(val: Any, max_len: int = 512) -> Any:
    """Create safe preview of any value."""
    if val is None or isinstance(val, (bool, int, float)):
        return val
    if isinstance(val, str):
        return val if len(val) <= max_len else val[:max_len] + "..."
    if isinstance(val, dict):
        items = list(val.items())
        preview = {
            str(k): ("<redacted>" if _is_secret_key(k) else _safe_preview(v, max_len))
            for k, v in items[:20]
        }
        if len(items) > 20:
            preview["..."] = f"{len(items) - 20} more keys"
        return preview
    if isinstance(val, (list, tuple)):
        items = [_safe_preview(v, max_len) for v in list(val)[:20]]
        if len(val) > 20:
            items.append("...")
        return items
    if is_dataclass(val) and not isinstance(val, type):
        return _safe_preview(asdict(val), max_len)
    if hasattr(val, "model_dump"):
        return _safe_preview(val.model_dump(), max_len)
    return _safe_preview(repr(val), max_len)


def _serialize(value: Any) -> str:
    serialized = json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    if len(serialized) > MAX_ATTRIBUTE_LENGTH:
        serialized = serialized[:MAX_ATTRIBUTE_LENGTH] + "...(truncated)"
    return serialized


def _capture_input(span: Any, fn: Callable, args: tuple, kwargs: dict) -> None:
    """Capture function inputs with smart previews and redaction."""
    try:
        bound = signature(fn).bind_partial(*args, **kwargs)
        inputs = _safe_preview({k: v for k, v in bound.arguments.items() if k not in {"self", "cls"}})
        if not inputs:
            return
        value = next(iter(inputs.values())) if len(inputs) == 1 else inputs
        span.set_attribute("gen_ai.entity.input", _serialize(value))
    except (TypeError, ValueError):
        pass


def _capture_output(span: Any, result: Any) -> None:
    if result is None:
        return
    try:
        span.set_attribute("gen_ai.entity.output", _serialize(_safe_preview(result, MAX_ATTRIBUTE_LENGTH)))
    except (TypeError, ValueError):
        pass


__all__ = ["observe", "workflow", "task", "agent", "tool"]
