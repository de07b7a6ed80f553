"""
Search indexing and query engine package.

This package provides the in-memory search stack:
- analyzers: Tokenizer and filters (space split, lowercase, punctuation, stop, stemming)
- scoring: TF-IDF term scorers
- index: Inverted index, ingestion and conjunctive ranked queries
- builder: Index construction from feed records
"""
