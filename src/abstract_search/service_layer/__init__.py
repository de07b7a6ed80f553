"""Service layer - orchestration on top of the search index."""

from abstract_search.service_layer.search_service import QueryTooLongError, SearchService


__all__ = ["QueryTooLongError", "SearchService"]
