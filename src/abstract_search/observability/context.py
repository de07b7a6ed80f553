"""Log/trace correlation for index builds and queries.

``create_span`` publishes the active span here so every log line written
while a build or query runs carries the same ids and operation name.
"""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def _new_context() -> dict:
    ident = uuid4().hex
    return {"trace_id": ident, "span_id": ident[:16], "operation": ""}


def get_trace_context() -> dict:
    """Return the current correlation ids, creating a fresh set if none exist."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = _new_context()
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, operation: str = "") -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, "operation": operation})


def enter_span(trace_id: str, span_id: str, operation: str) -> dict | None:
    """Publish a span as the current context; return the previous one for :func:`leave_span`."""
    previous = trace_context.get()
    trace_context.set({"trace_id": trace_id, "span_id": span_id, "operation": operation})
    return previous


def leave_span(previous: dict | None) -> None:
    trace_context.set(previous)
