"""Unit tests for TF-IDF scoring helpers."""

import math

import pytest

from abstract_search.search.scoring import (
    DocumentFrequencyTfIdfScorer,
    LegacyTfIdfScorer,
    TermStats,
    available_scorers,
    document_frequency_idf,
    get_scorer,
    legacy_idf,
)


class TestIdf:
    def test_legacy_idf_divides_by_term_frequency(self):
        assert legacy_idf(100, 10) == pytest.approx(1.0)
        assert legacy_idf(100, 100) == pytest.approx(0.0)

    def test_document_frequency_idf(self):
        assert document_frequency_idf(1000, 10) == pytest.approx(2.0)

    @pytest.mark.parametrize("total, freq", [(0, 1), (10, 0), (-1, 3)])
    def test_degenerate_inputs_score_zero(self, total, freq):
        assert legacy_idf(total, freq) == 0.0
        assert document_frequency_idf(total, freq) == 0.0


class TestScorers:
    def test_legacy_weight_is_idf_times_tf(self):
        stats = TermStats(term_frequency=2, document_frequency=1, total_documents=20)

        assert LegacyTfIdfScorer()(stats) == pytest.approx(math.log10(20 / 2) * 2)

    def test_document_frequency_weight_ignores_tf_in_idf(self):
        stats = TermStats(term_frequency=2, document_frequency=5, total_documents=50)

        assert DocumentFrequencyTfIdfScorer()(stats) == pytest.approx(math.log10(50 / 5) * 2)

    def test_rarer_terms_weigh_more_with_document_frequency(self):
        scorer = DocumentFrequencyTfIdfScorer()
        rare = TermStats(term_frequency=1, document_frequency=1, total_documents=100)
        common = TermStats(term_frequency=1, document_frequency=60, total_documents=100)

        assert scorer(rare) > scorer(common)


class TestScorerRegistry:
    def test_defaults_to_legacy(self):
        assert isinstance(get_scorer(None), LegacyTfIdfScorer)

    def test_lookup_by_name(self):
        assert isinstance(get_scorer("Document-Frequency"), DocumentFrequencyTfIdfScorer)

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown scorer"):
            get_scorer("bm25")

    def test_available_scorers(self):
        assert available_scorers() == ["document-frequency", "legacy"]
