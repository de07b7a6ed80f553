"""In-memory inverted index with conjunctive TF-IDF ranking.

The index owns three tables that always move together:

- ``documents``: id -> Document, the authoritative store
- ``term_frequency``: (id, term) -> occurrences of term in the document
- ``postings``: term -> ids of documents containing the term

It is filled once by the builder and then only read, so queries need no
locking. Each index is an ordinary object; tests routinely build several in
one process.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging

from abstract_search.domain.model import Document, DocumentId
from abstract_search.search.analyzers import Analyzer, get_analyzer
from abstract_search.search.scoring import TermScorer, TermStats, get_scorer


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Term -> document postings plus per-document term frequencies."""

    def __init__(self, analyzer: Analyzer | None = None, scorer: TermScorer | None = None) -> None:
        self.analyzer = analyzer if analyzer is not None else get_analyzer(None)
        self.scorer = scorer if scorer is not None else get_scorer(None)
        self.documents: dict[DocumentId, Document] = {}
        self.term_frequency: dict[tuple[DocumentId, str], int] = {}
        self.postings: dict[str, set[DocumentId]] = {}

    def __len__(self) -> int:
        return len(self.documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.documents

    def size(self) -> int:
        """Number of distinct documents indexed."""
        return len(self.documents)

    def document(self, doc_id: DocumentId) -> Document | None:
        return self.documents.get(doc_id)

    def document_frequency(self, term: str) -> int:
        return len(self.postings.get(term, ()))

    def analyze(self, text: str) -> list[str]:
        return [token.text for token in self.analyzer(text)]

    def ingest(self, document: Document, tokens: Sequence[str] | None = None) -> bool:
        """Add ``document`` to the index.

        Args:
            document: The document to index.
            tokens: Pre-computed terms for ``document.fulltext()``; must be what
                this index's analyzer would produce. Analyzed here when omitted.

        Returns:
            True if the document was added, False if its id was already present
            (the index is left untouched in that case).
        """
        doc_id = document.id
        if doc_id in self.documents:
            logger.debug("Skipping already indexed document %s", doc_id)
            return False

        terms = self.analyze(document.fulltext()) if tokens is None else tokens
        for term in terms:
            key = (doc_id, term)
            self.term_frequency[key] = self.term_frequency.get(key, 0) + 1
            self.postings.setdefault(term, set()).add(doc_id)

        self.documents[doc_id] = document
        return True

    def candidates(self, terms: Iterable[str]) -> set[DocumentId]:
        """Return ids containing every known term.

        Terms missing from the index are ignored rather than emptying the
        result; no known terms at all yields an empty set.
        """
        sets = []
        for term in dict.fromkeys(terms):
            doc_ids = self.postings.get(term)
            if doc_ids is not None:
                sets.append(doc_ids)

        if not sets:
            return set()
        sets.sort(key=len)
        return set(sets[0]).intersection(*sets[1:])

    def score(self, doc_id: DocumentId, terms: Sequence[str]) -> float:
        """Sum the scorer's weight over every query term occurrence."""
        total_documents = len(self.documents)
        score = 0.0
        for term in terms:
            tf = self.term_frequency.get((doc_id, term), 0)
            if tf <= 0:
                continue
            score += self.scorer(
                TermStats(
                    term_frequency=tf,
                    document_frequency=self.document_frequency(term),
                    total_documents=total_documents,
                )
            )
        return score

    def scored_query(self, query: str) -> list[tuple[DocumentId, float]]:
        """Rank matching documents, returning ``(id, score)`` pairs.

        Ordered by descending score, ties by ascending id.
        """
        terms = self.analyze(query)
        if not terms:
            return []

        matches = self.candidates(terms)
        logger.debug("Query %r -> terms %s, %d candidates", query, terms, len(matches))

        results = [(doc_id, self.score(doc_id, terms)) for doc_id in matches]
        results.sort(key=lambda item: (-item[1], item[0]))
        return results

    def query(self, query: str) -> list[DocumentId]:
        """Return ids of documents matching all query terms, best first."""
        return [doc_id for doc_id, _score in self.scored_query(query)]
