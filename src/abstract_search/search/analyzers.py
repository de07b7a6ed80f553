"""Analyzer utilities for the abstract search engine.

Text is turned into index tokens by a composable tokenizer/filter pipeline,
applied in a fixed order: split on spaces, lowercase, strip ASCII
punctuation, drop stopwords, stem. The same analyzer must be used for
documents and queries, otherwise query tokens never meet their postings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
import string
from typing import Protocol

from nltk.stem.snowball import SnowballStemmer


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int

    def copy_with(self, **updates: object) -> Token:
        data = {"text": self.text, "position": self.position}
        data.update(updates)
        return Token(**data)  # type: ignore[arg-type]


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class SpaceTokenizer:
    """Splits on the ASCII space character only.

    Tabs and newlines stay inside tokens; abstracts in the feed are single
    lines so this matches how documents were always indexed.
    """

    def __call__(self, text: str) -> Iterator[Token]:
        for position, chunk in enumerate(text.split(" ")):
            yield Token(text=chunk, position=position)


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


_PUNCTUATION_TABLE = str.maketrans("", "", string.punctuation)


class PunctuationFilter:
    """Removes ASCII punctuation characters and drops tokens left empty."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stripped = token.text.translate(_PUNCTUATION_TABLE)
            if not stripped:
                continue
            yield token if stripped == token.text else token.copy_with(text=stripped)


DEFAULT_STOPWORDS = (
    "the",
    "be",
    "to",
    "of",
    "and",
    "a",
    "in",
    "that",
    "have",
    "i",
    "it",
    "for",
    "not",
    "on",
    "with",
    "he",
    "as",
    "you",
    "do",
    "at",
    "this",
    "but",
    "his",
    "by",
    "from",
    "wikipedia",
)


class StopFilter:
    """Removes tokens that exactly match a stopword.

    Matching is case sensitive; run after :class:`LowercaseFilter`.
    """

    def __init__(self, stopwords: Sequence[str] | None = None) -> None:
        self.stopwords = frozenset(stopwords if stopwords is not None else DEFAULT_STOPWORDS)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


class SnowballStemFilter:
    """Reduces tokens to their English Snowball (Porter2) stem."""

    def __init__(self, language: str = "english") -> None:
        self._stemmer = SnowballStemmer(language)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            yield token.copy_with(text=self._stemmer.stem(token.text))


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer used for both documents and queries."""

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        apply_stemming: bool = True,
    ) -> None:
        filters: list[TokenFilter] = [LowercaseFilter(), PunctuationFilter(), StopFilter(stopwords)]
        if apply_stemming:
            filters.append(SnowballStemFilter())
        self.pipeline = AnalyzerPipeline(SpaceTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)


_ANALYZER_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "default": lambda: StandardAnalyzer(),
    "english": lambda: StandardAnalyzer(),
    "english-nostem": lambda: StandardAnalyzer(apply_stemming=False),
}


def available_analyzers() -> list[str]:
    return sorted(_ANALYZER_FACTORIES)


def get_analyzer(name: str | None) -> Analyzer:
    """Return analyzer by name, defaulting to the standard analyzer."""

    if name is None:
        return _ANALYZER_FACTORIES["default"]()
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {available_analyzers()}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized]()


def normalize(text: str, analyzer: Analyzer | None = None) -> list[str]:
    """Return the index terms for ``text``, in order, duplicates kept."""

    active = analyzer if analyzer is not None else _default_analyzer()
    return [token.text for token in active(text)]


_default_holder: dict[str, Analyzer] = {}


def _default_analyzer() -> Analyzer:
    analyzer = _default_holder.get("analyzer")
    if analyzer is None:
        analyzer = get_analyzer(None)
        _default_holder["analyzer"] = analyzer
    return analyzer
