"""Centralized configuration for abstract-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from abstract_search.domain.identity import available_identities
from abstract_search.search.analyzers import available_analyzers
from abstract_search.search.scoring import available_scorers


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every field can be set with an ``ABSTRACT_SEARCH_`` prefixed variable
    (``ABSTRACT_SEARCH_BUILD_WORKERS=4``) or from a ``.env`` file. Command line
    flags override whatever is loaded here.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABSTRACT_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    data_file: Path | None = Field(default=None, description="Wikipedia abstracts dump (.xml or .xml.gz)")

    # Indexing
    analyzer: str = Field(default="english", description="Analyzer used for documents and queries")
    identity: str = Field(default="crc64", description="URL -> document id function")
    build_workers: int = Field(default=1, ge=1, description="Processes used to normalize text during a build")
    build_batch_size: int = Field(
        default=2048, ge=1, description="Records handed to worker processes per batch when build_workers > 1"
    )

    # Querying
    scoring: str = Field(default="legacy", description="Term scorer: legacy or document-frequency")
    max_query_length: int = Field(default=1024, ge=1, description="Longest accepted query, in characters")
    result_limit: int = Field(default=10, ge=1, description="Hits printed per query")

    # Logging / telemetry
    log_level: str = Field(default="warning", description="Logging level")
    log_json: bool = Field(default=False, description="Emit structured JSON logs")
    tracing_enabled: bool = Field(default=False, description="Install an OpenTelemetry tracer provider")

    @field_validator("analyzer")
    @classmethod
    def _check_analyzer(cls, value: str) -> str:
        return _check_choice("analyzer", value, available_analyzers())

    @field_validator("identity")
    @classmethod
    def _check_identity(cls, value: str) -> str:
        return _check_choice("identity", value, available_identities())

    @field_validator("scoring")
    @classmethod
    def _check_scoring(cls, value: str) -> str:
        return _check_choice("scoring", value, available_scorers())

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        return _check_choice("log_level", value, ["critical", "debug", "error", "info", "warning"])

    def is_parallel_build(self) -> bool:
        return self.build_workers > 1


def _check_choice(field_name: str, value: str, choices: list[str]) -> str:
    normalized = value.strip().lower()
    if normalized not in choices:
        raise ValueError(f"{field_name} must be one of {choices}, got {value!r}")
    return normalized
