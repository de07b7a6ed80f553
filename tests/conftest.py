"""Shared test fixtures and configuration."""

import gzip
import logging
import os
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

from abstract_search.domain.model import Document, RawRecord
from abstract_search.search.index import InvertedIndex


CATS_AND_DOGS = RawRecord(
    title="Cats and Dogs",
    body="Cats are great pets",
    url="https://en.wikipedia.org/wiki/Cats_and_Dogs",
)
DOGS_ONLY = RawRecord(
    title="Dogs only",
    body="Dogs are loyal",
    url="https://en.wikipedia.org/wiki/Dogs_only",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop ABSTRACT_SEARCH_* variables so settings come from defaults."""
    for key in list(os.environ):
        if key.upper().startswith("ABSTRACT_SEARCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sample_records() -> list[RawRecord]:
    return [CATS_AND_DOGS, DOGS_ONLY]


@pytest.fixture
def doc_a() -> Document:
    return Document.from_record(CATS_AND_DOGS)


@pytest.fixture
def doc_b() -> Document:
    return Document.from_record(DOGS_ONLY)


@pytest.fixture
def sample_index(sample_records) -> InvertedIndex:
    index = InvertedIndex()
    for record in sample_records:
        index.ingest(Document.from_record(record))
    return index


def render_feed(records: list[RawRecord]) -> bytes:
    """Render records the way the Wikipedia abstracts dump lays them out."""
    parts = ["<feed>"]
    for record in records:
        parts.append("<doc>")
        parts.append(f"<title>{escape(record.title)}</title>")
        if record.url is not None:
            parts.append(f"<url>{escape(record.url)}</url>")
        parts.append(f"<abstract>{escape(record.body)}</abstract>")
        parts.append('<links><sublink linktype="nav"><anchor>History</anchor></sublink></links>')
        parts.append("</doc>")
    parts.append("</feed>")
    return "\n".join(parts).encode("utf-8")


@pytest.fixture
def write_feed(tmp_path):
    """Write records to a dump file; gzip-compressed unless ``compress=False``."""

    def _write(records: list[RawRecord], name: str = "abstracts.xml.gz", *, compress: bool = True) -> Path:
        path = tmp_path / name
        payload = render_feed(records)
        path.write_bytes(gzip.compress(payload) if compress else payload)
        return path

    return _write
