"""Observability module: JSON logging, OpenTelemetry tracing, Prometheus metrics."""

from abstract_search.observability.context import get_trace_context, set_trace_context, trace_context
from abstract_search.observability.logging import JsonFormatter, configure_logging
from abstract_search.observability.metrics import (
    INDEX_BUILD_LATENCY,
    INDEX_DOC_COUNT,
    RECORDS_SKIPPED,
    SEARCH_LATENCY,
    SEARCH_QUERIES,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from abstract_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_BUILD_LATENCY",
    "INDEX_DOC_COUNT",
    "RECORDS_SKIPPED",
    "SEARCH_LATENCY",
    "SEARCH_QUERIES",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
