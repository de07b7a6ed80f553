"""Domain model - documents and the raw records they are built from.

Following the same split as the rest of the domain layer:
- ``RawRecord`` is what the feed loader hands over: plain decoded strings,
  nothing validated yet.
- ``Document`` is the aggregate the index stores. Its identity is derived
  from the canonical source URL, never assigned by a counter, so the same
  article always lands on the same key.
"""

from dataclasses import dataclass as std_dataclass
from typing import Self

from pydantic import AnyUrl, Field
from pydantic.dataclasses import dataclass

from abstract_search.domain.identity import (
    IdentityFunction,
    crc64_document_id,
    parse_source_url,
)


DocumentId = int

MAX_DOCUMENT_ID = 2**64 - 1


@std_dataclass(frozen=True, slots=True)
class RawRecord:
    """One decoded record from the document feed."""

    title: str = ""
    body: str = ""
    url: str | None = None


@dataclass(frozen=True)
class Document:
    """Aggregate root for an indexed abstract.

    Immutable: the index never updates a document after ingestion, a second
    record with the same id is dropped instead.
    """

    id: DocumentId = Field(ge=0, le=MAX_DOCUMENT_ID)
    title: str = ""
    body: str = ""
    source_url: AnyUrl | None = None

    @classmethod
    def from_record(cls, record: RawRecord, identity: IdentityFunction = crc64_document_id) -> Self:
        """Build a document from a raw record.

        Raises:
            InvalidSourceURLError: if the record's URL is missing or unparseable.
        """
        url = parse_source_url(record.url)
        return cls(id=identity(str(url)), title=record.title, body=record.body, source_url=url)

    def fulltext(self) -> str:
        """Return the text that gets indexed: title and abstract."""
        return f"{self.title} {self.body}"

    def __str__(self) -> str:
        return f"{self.title}\t({self.id})\n    {self.body}"
