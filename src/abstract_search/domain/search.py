"""Domain models for search responses.

Value objects are immutable (frozen=True) so a response handed to the CLI
cannot drift from what the index returned.
"""

from pydantic import BaseModel, ConfigDict, Field

from abstract_search.domain.model import Document


class SearchHit(BaseModel):
    """One ranked document."""

    model_config = ConfigDict(frozen=True)

    rank: int = Field(ge=1)
    score: float
    document: Document


class SearchResponse(BaseModel):
    """Ranked hits for a query plus enough context to explain them."""

    model_config = ConfigDict(frozen=True)

    query: str
    terms: list[str] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    hits: list[SearchHit] = Field(default_factory=list)
    took_ms: float = Field(default=0.0, ge=0.0)

    @property
    def document_ids(self) -> list[int]:
        return [hit.document.id for hit in self.hits]
