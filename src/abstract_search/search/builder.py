"""Index construction from a stream of raw feed records.

The builder is the only writer an :class:`InvertedIndex` ever has. Records
that cannot become documents (missing or broken URL) are skipped and
reported instead of aborting the batch; a broken feed stream aborts the
whole build because the corpus would silently be incomplete.

With more than one worker, text normalization (the expensive part: stemming)
runs in a process pool while the calling thread stays the single writer and
applies the results in input order. Serial and parallel builds produce the
same index.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from itertools import islice
import logging
from pathlib import Path
import time

from abstract_search.config import Settings
from abstract_search.domain.identity import IdentityFunction, InvalidSourceURLError, get_identity_function
from abstract_search.domain.model import Document, RawRecord
from abstract_search.feed import iter_abstract_records
from abstract_search.observability.metrics import (
    INDEX_BUILD_LATENCY,
    INDEX_DOC_COUNT,
    RECORDS_SKIPPED,
    track_latency,
)
from abstract_search.observability.tracing import create_span
from abstract_search.search.analyzers import Analyzer, get_analyzer
from abstract_search.search.index import InvertedIndex
from abstract_search.search.scoring import get_scorer


logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 100


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of an index build."""

    index: InvertedIndex
    documents_indexed: int
    duplicates: int
    documents_skipped: int
    errors: tuple[str, ...]
    duration_s: float

    @property
    def complete(self) -> bool:
        """True when every record in the feed made it into the index."""
        return self.documents_skipped == 0


# Per-process analyzer for pool workers, set by _init_worker.
_worker_state: dict[str, Analyzer] = {}


def _init_worker(analyzer_name: str | None) -> None:
    _worker_state["analyzer"] = get_analyzer(analyzer_name)


def _analyze_text(text: str) -> list[str]:
    return [token.text for token in _worker_state["analyzer"](text)]


def _batched(records: Iterable[RawRecord], size: int) -> Iterator[list[RawRecord]]:
    iterator = iter(records)
    while batch := list(islice(iterator, size)):
        yield batch


class IndexBuilder:
    """Build an :class:`InvertedIndex` from raw records."""

    def __init__(
        self,
        *,
        analyzer_name: str | None = None,
        scoring: str | None = None,
        identity: IdentityFunction | None = None,
        workers: int = 1,
        batch_size: int = 2048,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.analyzer_name = analyzer_name
        self.scoring = scoring
        self.identity = identity if identity is not None else get_identity_function(None)
        self.workers = workers
        self.batch_size = batch_size

    @classmethod
    def from_settings(cls, settings: Settings) -> IndexBuilder:
        return cls(
            analyzer_name=settings.analyzer,
            scoring=settings.scoring,
            identity=get_identity_function(settings.identity),
            workers=settings.build_workers,
            batch_size=settings.build_batch_size,
        )

    def new_index(self) -> InvertedIndex:
        return InvertedIndex(analyzer=get_analyzer(self.analyzer_name), scorer=get_scorer(self.scoring))

    def build(self, records: Iterable[RawRecord]) -> IndexBuildResult:
        """Consume ``records`` and return the finished index with a report.

        Raises:
            FeedError: propagated from the record source if the feed breaks.
        """
        mode = "parallel" if self.workers > 1 else "serial"
        index = self.new_index()
        report = _BuildCounters()
        started = time.perf_counter()

        with (
            create_span("index.build", attributes={"index.build.mode": mode, "index.build.workers": self.workers}),
            track_latency(INDEX_BUILD_LATENCY, mode=mode),
        ):
            if self.workers > 1:
                self._build_parallel(index, records, report)
            else:
                self._build_serial(index, records, report)

        duration = time.perf_counter() - started
        INDEX_DOC_COUNT.labels(analyzer=self.analyzer_name or "default").set(index.size())
        logger.info(
            "Indexed %d documents in %.2fs (%d duplicates, %d skipped)",
            report.indexed,
            duration,
            report.duplicates,
            report.skipped,
        )
        if report.skipped:
            logger.warning("%d records were skipped; the index does not cover the whole feed", report.skipped)

        return IndexBuildResult(
            index=index,
            documents_indexed=report.indexed,
            duplicates=report.duplicates,
            documents_skipped=report.skipped,
            errors=tuple(report.errors),
            duration_s=duration,
        )

    def _to_document(self, record: RawRecord, report: _BuildCounters) -> Document | None:
        try:
            return Document.from_record(record, self.identity)
        except InvalidSourceURLError as exc:
            logger.warning("Skipping record %r: %s", record.title, exc)
            report.skip(f"{record.title or '<untitled>'}: {exc}")
            RECORDS_SKIPPED.labels(reason="invalid_url").inc()
            return None

    def _build_serial(self, index: InvertedIndex, records: Iterable[RawRecord], report: _BuildCounters) -> None:
        for record in records:
            document = self._to_document(record, report)
            if document is None:
                continue
            if index.ingest(document):
                report.indexed += 1
            else:
                report.duplicate()

    def _build_parallel(self, index: InvertedIndex, records: Iterable[RawRecord], report: _BuildCounters) -> None:
        with ProcessPoolExecutor(
            max_workers=self.workers,
            initializer=_init_worker,
            initargs=(self.analyzer_name,),
        ) as executor:
            for batch in _batched(records, self.batch_size):
                pending: dict[int, Document] = {}
                for record in batch:
                    document = self._to_document(record, report)
                    if document is None:
                        continue
                    if document.id in index or document.id in pending:
                        report.duplicate()
                        continue
                    pending[document.id] = document

                documents = list(pending.values())
                chunksize = max(1, len(documents) // (self.workers * 4))
                texts = [document.fulltext() for document in documents]
                for document, tokens in zip(
                    documents, executor.map(_analyze_text, texts, chunksize=chunksize), strict=True
                ):
                    index.ingest(document, tokens)
                    report.indexed += 1


class _BuildCounters:
    def __init__(self) -> None:
        self.indexed = 0
        self.duplicates = 0
        self.skipped = 0
        self.errors: list[str] = []

    def duplicate(self) -> None:
        self.duplicates += 1
        RECORDS_SKIPPED.labels(reason="duplicate").inc()

    def skip(self, error: str) -> None:
        self.skipped += 1
        if len(self.errors) < MAX_REPORTED_ERRORS:
            self.errors.append(error)


def build_index(records: Iterable[RawRecord], settings: Settings | None = None) -> IndexBuildResult:
    """Build an index from ``records`` using ``settings`` (defaults if omitted)."""
    active = settings if settings is not None else Settings()
    return IndexBuilder.from_settings(active).build(records)


def load_index(path: Path | str, settings: Settings | None = None) -> IndexBuildResult:
    """Stream the dump at ``path`` into a new index.

    Raises:
        FeedError: if the dump cannot be read to the end.
    """
    logger.info("Loading data file: %s", path)
    return build_index(iter_abstract_records(path), settings)
