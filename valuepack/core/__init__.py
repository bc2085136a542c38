"""Core deterministic primitives for ValueSet."""

from valuepack.core.canonical import canonical_json, canonicalize
from valuepack.core.exceptions import HashFailure, ValueSetError
from valuepack.core.hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_ENCODING,
    SUPPORTED_ENCODINGS,
    HashSummary,
    compute_content_hash,
    is_supported_algorithm,
)
from valuepack.core.types import ContentHash, SupportsHash, SupportsMembership

__all__ = [
    "ContentHash",
    "DEFAULT_ALGORITHM",
    "DEFAULT_ENCODING",
    "HashFailure",
    "HashSummary",
    "SUPPORTED_ENCODINGS",
    "SupportsHash",
    "SupportsMembership",
    "ValueSetError",
    "canonical_json",
    "canonicalize",
    "compute_content_hash",
    "is_supported_algorithm",
]
