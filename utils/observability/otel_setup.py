"""Simple OpenTelemetry setup for genai-evals."""

from __future__ import annotations

import os
from enum import Enum
from importlib.metadata import entry_points
from typing import Dict, Optional
from urllib.parse import urlparse

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "http://localhost:21890/opentelemetry/v1/traces"
INSTRUMENTOR_ENTRY_POINT_GROUP = "opentelemetry_instrumentor"

_AWS_HOST_MARKERS = (".amazonaws.com", ".aws.dev", ".osis.", ".es.", ".aoss.")


class AuthMode(str, Enum):
    """Supported exporter authentication modes."""
    AUTO = "auto"
    SIGV4 = "sigv4"
    NONE = "none"


def setup_telemetry(
    endpoint: Optional[str] = None,
    project_name: Optional[str] = None,
    *,
    auth: AuthMode | str = AuthMode.AUTO,
    batch: bool = True,
    auto_instrument: bool = True,
    exporter: Optional[SpanExporter] = None,
    set_global: bool = True,
    headers: Optional[Dict[str, str]] = None,
) -> TracerProvider:
    """Setup OpenTelemetry tracing.

    Args:
        endpoint: OTLP/HTTP traces endpoint
        project_name: Attached to every span as the resource ``service.name``
        auth: ``auto`` detects AWS-hosted endpoints, ``sigv4`` forces signing, ``none`` disables it
        batch: Use BatchSpanProcessor (True) or SimpleSpanProcessor (False)
        auto_instrument: Activate installed ``opentelemetry_instrumentor`` entry points
        exporter: Custom SpanExporter, overrides endpoint/auth/headers
        set_global: Register the provider as the global TracerProvider
        headers: Extra HTTP headers for the OTLP exporter

    Environment variables:
        - OPENSEARCH_OTEL_ENDPOINT: default for ``endpoint``
        - OPENSEARCH_PROJECT: default for ``project_name``

    Raises:
        ValueError: If ``auth`` is not a known mode

    Returns:
        The configured TracerProvider
    """
    endpoint = endpoint or os.getenv("OPENSEARCH_OTEL_ENDPOINT", DEFAULT_ENDPOINT)
    project_name = project_name or os.getenv("OPENSEARCH_PROJECT", "default")
    try:
        auth = AuthMode(auth)
    except ValueError:
        raise ValueError(f"Unknown auth mode: {auth}") from None

    resource = Resource.create({SERVICE_NAME: project_name})
    provider = TracerProvider(resource=resource)

    span_exporter = exporter or _create_exporter(endpoint, auth, headers)
    if batch:
        provider.add_span_processor(BatchSpanProcessor(span_exporter))
    else:
        provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    if set_global:
        trace.set_tracer_provider(provider)

    if auto_instrument:
        _auto_instrument(provider)

    logger.info("tracing_initialized", endpoint=endpoint, project=project_name, auth=auth.value)
    return provider


def _create_exporter(endpoint: str, auth: AuthMode, headers: Optional[Dict[str, str]]) -> OTLPSpanExporter:
    """Create OTLP exporter for the endpoint."""
    if auth == AuthMode.SIGV4 or (auth == AuthMode.AUTO and _is_aws_endpoint(endpoint)):
        # Signing needs a caller-supplied exporter; ship unsigned rather than fail
        logger.warning(
            "sigv4_unsupported",
            endpoint=endpoint,
            hint="pass exporter= with a SigV4-signing SpanExporter for AWS endpoints",
        )
    return OTLPSpanExporter(endpoint=endpoint, headers=headers or None)


def _is_aws_endpoint(endpoint: str) -> bool:
    hostname = urlparse(endpoint).hostname or ""
    return any(marker in hostname for marker in _AWS_HOST_MARKERS)


def _auto_instrument(provider: TracerProvider) -> int:
    """Activate every installed instrumentor, returning how many succeeded."""
    discovered = 0
    for ep in entry_points(group=INSTRUMENTOR_ENTRY_POINT_GROUP):
        try:
            instrumentor = ep.load()()
            instrumentor.instrument(tracer_provider=provider)
            discovered += 1
        except Exception as exc:
            logger.debug("instrumentor_skipped", name=ep.name, error=str(exc))

    if discovered == 0:
        logger.info("no_instrumentors_found", hint="pip install opentelemetry-instrumentation-openai")
    else:
        logger.info("auto_instrumented", count=discovered)
    return discovered
