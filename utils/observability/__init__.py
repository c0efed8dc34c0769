"""Observability utilities for genai-evals.

This module provides vendor-neutral tracing and telemetry infrastructure:
- @observe decorator (and workflow/task/agent/tool shorthands) for span creation
- OpenTelemetry pipeline setup
- Score submission as spans
"""

from .observe import observe, workflow, task, agent, tool
from .score import score


# Lazy import keeps the OTLP exporter optional until tracing is configured
def setup_telemetry(*args, **kwargs):
    """Set up OpenTelemetry tracing."""
    from .otel_setup import setup_telemetry as _setup_telemetry
    return _setup_telemetry(*args, **kwargs)


def __getattr__(name):
    if name == "AuthMode":
        from .otel_setup import AuthMode
        return AuthMode
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["observe", "workflow", "task", "agent", "tool", "score", "setup_telemetry", "AuthMode"]
