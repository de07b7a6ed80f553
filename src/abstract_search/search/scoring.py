"""Statistical helpers for TF-IDF style scoring.

The functions here stay independent of the index layout so they can be unit
tested on their own. Two IDF flavours exist:

``legacy``
    ``log10(total_docs / tf)`` where ``tf`` is the document's own term
    frequency. This is what rankings have always been computed with and it
    stays the default so result order is stable.

``document-frequency``
    Textbook ``log10(total_docs / df)`` using the number of documents that
    contain the term. Opt-in only.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import math
from typing import Protocol


def legacy_idf(total_docs: int, term_frequency: int) -> float:
    """Return the compatibility IDF (divides by the in-document frequency)."""

    if total_docs <= 0 or term_frequency <= 0:
        return 0.0
    return math.log10(total_docs / term_frequency)


def document_frequency_idf(total_docs: int, doc_freq: int) -> float:
    """Return ``log10(N / df)``; zero for degenerate inputs."""

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    return math.log10(total_docs / doc_freq)


@dataclass(frozen=True)
class TermStats:
    """Everything a scorer may look at for one (document, term) pair."""

    term_frequency: int
    document_frequency: int
    total_documents: int


class TermScorer(Protocol):
    """Protocol implemented by per-term scorers."""

    name: str

    def __call__(self, stats: TermStats) -> float:  # pragma: no cover - interface definition
        ...


class LegacyTfIdfScorer:
    """``idf * tf`` with the in-document IDF."""

    name = "legacy"

    def __call__(self, stats: TermStats) -> float:
        return legacy_idf(stats.total_documents, stats.term_frequency) * stats.term_frequency


class DocumentFrequencyTfIdfScorer:
    """``idf * tf`` with corpus document frequency."""

    name = "document-frequency"

    def __call__(self, stats: TermStats) -> float:
        return document_frequency_idf(stats.total_documents, stats.document_frequency) * stats.term_frequency


_SCORER_FACTORIES: dict[str, Callable[[], TermScorer]] = {
    "legacy": LegacyTfIdfScorer,
    "document-frequency": DocumentFrequencyTfIdfScorer,
}


def available_scorers() -> list[str]:
    return sorted(_SCORER_FACTORIES)


def get_scorer(name: str | None) -> TermScorer:
    """Return scorer by name, defaulting to the legacy formula."""

    if name is None:
        return LegacyTfIdfScorer()
    normalized = name.lower()
    if normalized not in _SCORER_FACTORIES:
        msg = f"Unknown scorer '{name}'. Available: {available_scorers()}"
        raise ValueError(msg)
    return _SCORER_FACTORIES[normalized]()
