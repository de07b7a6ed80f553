"""Domain layer - documents and their identity, no infrastructure dependencies.

- Entities: ``Document`` (identity derived from its canonical URL)
- Value objects: ``RawRecord`` as produced by the feed loader
- Identity: pluggable URL -> 64-bit id functions
"""

from abstract_search.domain.identity import (
    IdentityFunction,
    InvalidSourceURLError,
    canonical_url,
    crc64_document_id,
    get_identity_function,
    sha256_document_id,
)
from abstract_search.domain.model import Document, DocumentId, RawRecord


__all__ = [
    "Document",
    "DocumentId",
    "IdentityFunction",
    "InvalidSourceURLError",
    "RawRecord",
    "canonical_url",
    "crc64_document_id",
    "get_identity_function",
    "sha256_document_id",
]
