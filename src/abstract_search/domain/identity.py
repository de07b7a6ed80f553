"""Document identity derived from canonical source URLs.

Every document is keyed by a 64-bit integer computed from its canonical URL,
so re-ingesting the same article (even with a differently cased host or a
missing trailing slash) always maps to the same key. The checksum lives
behind :data:`IdentityFunction` so the index never depends on a specific
algorithm.
"""

from __future__ import annotations

from collections.abc import Callable
import hashlib

from crc import Calculator, Configuration
from pydantic import AnyUrl, TypeAdapter, ValidationError


IdentityFunction = Callable[[str], int]
"""Maps a canonical URL string to an unsigned 64-bit document id."""

# CRC-64 over the ECMA-182 polynomial, reflected, with all-ones init/xorout
# (the parameter set xz uses).
CRC64_ECMA = Configuration(
    width=64,
    polynomial=0x42F0E1EBA9EA3693,
    init_value=0xFFFFFFFFFFFFFFFF,
    final_xor_value=0xFFFFFFFFFFFFFFFF,
    reverse_input=True,
    reverse_output=True,
)

_crc64 = Calculator(CRC64_ECMA, optimized=True)
_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


class InvalidSourceURLError(ValueError):
    """Raised when a record's source URL is missing or cannot be parsed."""


def parse_source_url(raw: str | None) -> AnyUrl:
    """Parse ``raw`` into a URL, raising :class:`InvalidSourceURLError` on failure."""

    if raw is None or not raw.strip():
        raise InvalidSourceURLError("document has no source URL")
    try:
        return _url_adapter.validate_python(raw.strip())
    except ValidationError as exc:
        raise InvalidSourceURLError(f"unparseable source URL {raw!r}") from exc


def canonical_url(raw: str | None) -> str:
    """Return the canonical serialization used for identity hashing.

    >>> canonical_url("HTTPS://EN.Wikipedia.org")
    'https://en.wikipedia.org/'
    """

    return str(parse_source_url(raw))


def crc64_document_id(url: str) -> int:
    return _crc64.checksum(url.encode("utf-8"))


def sha256_document_id(url: str) -> int:
    """Alternative identity: first eight bytes of the SHA-256 digest."""
    digest = hashlib.sha256(url.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


_IDENTITY_FUNCTIONS: dict[str, IdentityFunction] = {
    "crc64": crc64_document_id,
    "sha256": sha256_document_id,
}


def available_identities() -> list[str]:
    return sorted(_IDENTITY_FUNCTIONS)


def get_identity_function(name: str | None) -> IdentityFunction:
    """Return identity function by name, defaulting to CRC-64."""

    if name is None:
        return crc64_document_id
    normalized = name.lower()
    if normalized not in _IDENTITY_FUNCTIONS:
        msg = f"Unknown identity '{name}'. Available: {available_identities()}"
        raise ValueError(msg)
    return _IDENTITY_FUNCTIONS[normalized]
