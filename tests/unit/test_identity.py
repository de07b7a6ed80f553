"""Unit tests for URL-derived document identity."""

import pytest

from abstract_search.domain import identity
from abstract_search.domain.identity import (
    InvalidSourceURLError,
    canonical_url,
    crc64_document_id,
    get_identity_function,
    parse_source_url,
    sha256_document_id,
)


class TestCrc64:
    def test_matches_reference_check_value(self):
        # Standard CRC-64/XZ check input
        assert crc64_document_id("123456789") == 0x995DC9BBDF1939FA

    def test_empty_string_is_zero(self):
        assert crc64_document_id("") == 0

    def test_fits_in_64_bits(self):
        doc_id = crc64_document_id("https://en.wikipedia.org/wiki/Anarchism")

        assert 0 <= doc_id < 2**64

    def test_is_stable_and_content_addressed(self):
        first = crc64_document_id("https://en.wikipedia.org/wiki/Cat")

        assert first == crc64_document_id("https://en.wikipedia.org/wiki/Cat")
        assert first != crc64_document_id("https://en.wikipedia.org/wiki/Dog")


class TestCanonicalUrl:
    def test_normalizes_scheme_host_and_empty_path(self):
        assert canonical_url("HTTPS://EN.Wikipedia.org") == "https://en.wikipedia.org/"

    def test_keeps_article_urls_unchanged(self):
        url = "https://en.wikipedia.org/wiki/Anarchism"

        assert canonical_url(url) == url

    def test_surrounding_whitespace_is_ignored(self):
        assert canonical_url("  https://en.wikipedia.org/wiki/Cat\n") == "https://en.wikipedia.org/wiki/Cat"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_url_is_rejected(self, raw):
        with pytest.raises(InvalidSourceURLError, match="no source URL"):
            parse_source_url(raw)

    def test_unparseable_url_is_rejected(self):
        with pytest.raises(InvalidSourceURLError, match="unparseable"):
            parse_source_url("not a url")

    def test_error_is_a_value_error(self):
        assert issubclass(InvalidSourceURLError, ValueError)


class TestIdentityRegistry:
    def test_defaults_to_crc64(self):
        assert get_identity_function(None) is crc64_document_id

    def test_lookup_is_case_insensitive(self):
        assert get_identity_function("SHA256") is sha256_document_id

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown identity"):
            get_identity_function("md5")

    def test_available_identities(self):
        assert identity.available_identities() == ["crc64", "sha256"]

    def test_sha256_variant_is_64_bit(self):
        doc_id = sha256_document_id("https://en.wikipedia.org/wiki/Cat")

        assert 0 <= doc_id < 2**64
        assert doc_id != crc64_document_id("https://en.wikipedia.org/wiki/Cat")
