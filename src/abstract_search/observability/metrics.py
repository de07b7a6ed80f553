"""Build and query metrics.

Each metric is a Prometheus collector (scraped via :func:`get_metrics`, or
printed with ``--metrics``) mirrored onto an OpenTelemetry instrument so an
SDK reader sees the same numbers.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(service_name: str = "abstract-search") -> MeterProvider:
    """Install the OpenTelemetry meter provider once; later calls return it."""
    provider = _meter_holder["provider"]
    if provider is None:
        provider = MeterProvider(resource=Resource.create({"service.name": service_name}))
        otel_metrics.set_meter_provider(provider)
        _meter_holder["provider"] = provider
        _meter_holder["meter"] = provider.get_meter(__name__)
    return provider


class MetricBridge:
    """A labelled Prometheus metric plus its lazily created OTel twin."""

    def __init__(self, kind: str, name: str, documentation: str, labelnames: tuple[str, ...], **options: Any) -> None:
        collectors = {"counter": Counter, "gauge": Gauge, "histogram": Histogram}
        if kind not in collectors:
            raise ValueError(f"Unknown metric kind: {kind}")
        self.kind = kind
        self.name = name
        self.documentation = documentation
        self.prometheus = collectors[kind](name, documentation, labelnames, **options)
        self._instrument = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _LabelledMetric:
        return _LabelledMetric(self, labels)

    def _otel(self):
        if self._instrument is None:
            init_metrics()
            meter = _meter_holder["meter"]
            if self.kind == "counter":
                self._instrument = meter.create_counter(self.name, description=self.documentation)
            elif self.kind == "histogram":
                self._instrument = meter.create_histogram(self.name, description=self.documentation)
            else:
                # gauges are mirrored as deltas on an up/down counter
                self._instrument = meter.create_up_down_counter(self.name, description=self.documentation)
        return self._instrument

    def _inc(self, labels: dict[str, str], amount: float) -> None:
        self.prometheus.labels(**labels).inc(amount)
        self._otel().add(amount, labels)

    def _observe(self, labels: dict[str, str], value: float) -> None:
        self.prometheus.labels(**labels).observe(value)
        self._otel().record(value, labels)

    def _set(self, labels: dict[str, str], value: float) -> None:
        self.prometheus.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        delta = value - self._gauge_values.get(key, 0.0)
        self._gauge_values[key] = value
        if delta:
            self._otel().add(delta, labels)


class _LabelledMetric:
    def __init__(self, metric: MetricBridge, labels: dict[str, str]) -> None:
        self._metric = metric
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._metric._inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._metric._observe(self._labels, value)

    def set(self, value: float) -> None:
        self._metric._set(self._labels, value)


SEARCH_LATENCY = MetricBridge(
    "histogram",
    "search_latency_seconds",
    "Time spent analyzing, intersecting and ranking one query",
    ("scorer",),
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

SEARCH_QUERIES = MetricBridge(
    "counter",
    "search_queries_total",
    "Queries by outcome (hit, empty, rejected)",
    ("outcome",),
)

INDEX_DOC_COUNT = MetricBridge(
    "gauge",
    "index_document_count",
    "Documents in the most recently built index",
    ("analyzer",),
)

INDEX_BUILD_LATENCY = MetricBridge(
    "histogram",
    "index_build_seconds",
    "Wall time of a full index build",
    ("mode",),
    buckets=(0.1, 0.5, 1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)

RECORDS_SKIPPED = MetricBridge(
    "counter",
    "index_records_skipped_total",
    "Feed records left out of the index, by reason",
    ("reason",),
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the block, including when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Prometheus text exposition of every registered metric."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
