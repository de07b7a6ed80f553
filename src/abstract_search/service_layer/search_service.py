"""Search service orchestration layer.

Wraps a built :class:`InvertedIndex` with the concerns a caller needs but the
index should not know about: input limits, timing, tracing and metrics.
"""

import logging
import time

from abstract_search.domain.model import Document, DocumentId
from abstract_search.domain.search import SearchHit, SearchResponse
from abstract_search.observability.metrics import SEARCH_LATENCY, SEARCH_QUERIES, track_latency
from abstract_search.observability.tracing import create_span
from abstract_search.search.index import InvertedIndex


logger = logging.getLogger(__name__)

DEFAULT_MAX_QUERY_LENGTH = 1024


class QueryTooLongError(ValueError):
    """Raised when a query exceeds the configured length limit."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"query is {length} characters long, limit is {limit}")
        self.length = length
        self.limit = limit


class SearchService:
    """High-level search API over a read-only index."""

    def __init__(self, index: InvertedIndex, *, max_query_length: int = DEFAULT_MAX_QUERY_LENGTH) -> None:
        self.index = index
        self.max_query_length = max_query_length

    def document(self, doc_id: DocumentId) -> Document | None:
        return self.index.document(doc_id)

    def search(self, raw_query: str, limit: int | None = None) -> SearchResponse:
        """Run ``raw_query`` and return the top ``limit`` hits (all when None).

        Raises:
            QueryTooLongError: if the query is longer than ``max_query_length``.
        """
        if len(raw_query) > self.max_query_length:
            SEARCH_QUERIES.labels(outcome="rejected").inc()
            raise QueryTooLongError(len(raw_query), self.max_query_length)

        started = time.perf_counter()
        scorer_name = getattr(self.index.scorer, "name", "custom")
        with (
            create_span("search.query", attributes={"search.scorer": scorer_name}) as span,
            track_latency(SEARCH_LATENCY, scorer=scorer_name),
        ):
            terms = self.index.analyze(raw_query)
            ranked = self.index.scored_query(raw_query)
            span.set_attribute("search.terms", len(terms))
            span.set_attribute("search.matches", len(ranked))

        selected = ranked if limit is None else ranked[:limit]
        hits = []
        for rank, (doc_id, score) in enumerate(selected, start=1):
            document = self.index.document(doc_id)
            if document is None:  # pragma: no cover - postings only reference stored documents
                logger.error("Document %s is in postings but not in the store", doc_id)
                continue
            hits.append(SearchHit(rank=rank, score=score, document=document))

        SEARCH_QUERIES.labels(outcome="hit" if ranked else "empty").inc()
        took_ms = (time.perf_counter() - started) * 1000
        logger.debug("Query %r matched %d documents in %.2fms", raw_query, len(ranked), took_ms)
        return SearchResponse(query=raw_query, terms=terms, total_count=len(ranked), hits=hits, took_ms=took_ms)
