"""Unit tests for the document domain model."""

from pydantic import ValidationError
import pytest

from abstract_search.domain.identity import InvalidSourceURLError, crc64_document_id, sha256_document_id
from abstract_search.domain.model import Document, RawRecord


class TestDocumentFromRecord:
    def test_id_is_derived_from_canonical_url(self):
        record = RawRecord(title="Cat", body="A small mammal", url="HTTPS://EN.wikipedia.org/wiki/Cat")

        document = Document.from_record(record)

        assert document.id == crc64_document_id("https://en.wikipedia.org/wiki/Cat")
        assert str(document.source_url) == "https://en.wikipedia.org/wiki/Cat"
        assert document.title == "Cat"
        assert document.body == "A small mammal"

    def test_same_canonical_url_gives_same_id(self):
        first = Document.from_record(RawRecord(title="One", url="https://en.wikipedia.org"))
        second = Document.from_record(RawRecord(title="Two", url="https://EN.WIKIPEDIA.ORG/"))

        assert first.id == second.id

    def test_identity_function_is_pluggable(self):
        record = RawRecord(title="Cat", url="https://en.wikipedia.org/wiki/Cat")

        document = Document.from_record(record, sha256_document_id)

        assert document.id == sha256_document_id("https://en.wikipedia.org/wiki/Cat")

    def test_missing_url_raises(self):
        with pytest.raises(InvalidSourceURLError):
            Document.from_record(RawRecord(title="Orphan", body="no link"))

    def test_broken_url_raises(self):
        with pytest.raises(InvalidSourceURLError):
            Document.from_record(RawRecord(title="Broken", url="::not-a-url::"))


class TestDocument:
    def test_fulltext_joins_title_and_body(self):
        document = Document(id=1, title="Cats and Dogs", body="Cats are great pets")

        assert document.fulltext() == "Cats and Dogs Cats are great pets"

    def test_display_form(self):
        document = Document(id=42, title="Dogs only", body="Dogs are loyal")

        assert str(document) == "Dogs only\t(42)\n    Dogs are loyal"

    def test_is_immutable(self):
        document = Document(id=1, title="Cat")

        with pytest.raises((ValidationError, AttributeError, TypeError)):
            document.title = "Dog"  # type: ignore[misc]

    @pytest.mark.parametrize("bad_id", [-1, 2**64])
    def test_id_must_fit_unsigned_64_bits(self, bad_id):
        with pytest.raises(ValidationError):
            Document(id=bad_id, title="x")
