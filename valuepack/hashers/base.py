"""Hasher interface and the canonical-JSON reference implementation."""

from __future__ import annotations

from typing import Any, Iterable

from valuepack.core.hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_ENCODING,
    SUPPORTED_ENCODINGS,
    DigestEncoding,
    HashSummary,
    compute_content_hash,
    is_supported_algorithm,
)
from valuepack.core.types import ContentHash
from valuepack.hashers.exceptions import HasherConfigError


class Hasher:
    """Base hasher interface.

    Subclasses turn a structured value into its ContentHash. The result must be
    a pure function of the value's content and stable for the process lifetime.
    """

    name = "hasher"

    def hash(self, value: Any) -> ContentHash:
        raise NotImplementedError

    def describe(self) -> HashSummary:
        return HashSummary(algorithm=self.name, encoding="unknown", scope="custom")


class CanonicalJsonHasher(Hasher):
    """Digest of the canonical JSON form of a value."""

    def __init__(
        self,
        algorithm: str = DEFAULT_ALGORITHM,
        encoding: DigestEncoding = DEFAULT_ENCODING,
        *,
        exclude_keys: Iterable[str] = (),
        unordered_sequences: bool = False,
        unordered_field_names: Iterable[str] = (),
    ) -> None:
        normalized_algorithm = algorithm.strip().lower()
        if not is_supported_algorithm(normalized_algorithm):
            raise HasherConfigError(f"Unsupported hash algorithm: {algorithm!r}")
        if encoding not in SUPPORTED_ENCODINGS:
            raise HasherConfigError(
                f"Unsupported digest encoding {encoding!r}. Supported encodings: base64, hex"
            )
        self.algorithm = normalized_algorithm
        self.encoding: DigestEncoding = encoding
        self.exclude_keys = frozenset(exclude_keys)
        self.unordered_sequences = unordered_sequences
        self.unordered_field_names = frozenset(unordered_field_names)
        self.name = f"canonical-json/{normalized_algorithm}"

    def hash(self, value: Any) -> ContentHash:
        return compute_content_hash(
            value,
            algorithm=self.algorithm,
            encoding=self.encoding,
            exclude_keys=self.exclude_keys,
            unordered_sequences=self.unordered_sequences,
            unordered_field_names=self.unordered_field_names,
        )

    def describe(self) -> HashSummary:
        scope = "canonical-json"
        if self.exclude_keys:
            scope += f"-exclude({','.join(sorted(self.exclude_keys))})"
        if self.unordered_sequences:
            scope += "+unordered-sequences"
        elif self.unordered_field_names:
            scope += f"+unordered({','.join(sorted(self.unordered_field_names))})"
        return HashSummary(algorithm=self.algorithm, encoding=self.encoding, scope=scope)

    def __repr__(self) -> str:
        return (
            f"CanonicalJsonHasher(algorithm={self.algorithm!r}, encoding={self.encoding!r})"
        )
