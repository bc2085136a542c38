"""Stable content hashing for structured values."""

from __future__ import annotations

import base64
from dataclasses import dataclass
import hashlib
from typing import Any, Iterable, Literal

from valuepack.core.canonical import canonical_json
from valuepack.core.types import ContentHash

DigestEncoding = Literal["hex", "base64"]

DEFAULT_ALGORITHM = "sha256"
DEFAULT_ENCODING: DigestEncoding = "hex"
SUPPORTED_ENCODINGS: frozenset[str] = frozenset({"hex", "base64"})


@dataclass(frozen=True, slots=True)
class HashSummary:
    """Hash details exposed for debugging and diagnostics."""

    algorithm: str
    encoding: str
    scope: str

    def to_dict(self) -> dict[str, str]:
        return {
            "algorithm": self.algorithm,
            "encoding": self.encoding,
            "scope": self.scope,
        }


def is_supported_algorithm(algorithm: str) -> bool:
    normalized = algorithm.strip().lower()
    # shake digests need an explicit length
    if normalized.startswith("shake_"):
        return False
    return normalized in hashlib.algorithms_available


def compute_content_hash(
    value: Any,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    encoding: DigestEncoding = DEFAULT_ENCODING,
    exclude_keys: Iterable[str] = (),
    unordered_sequences: bool = False,
    unordered_field_names: Iterable[str] = (),
) -> ContentHash:
    """Compute a deterministic content hash for a value.

    The digest covers the canonical JSON form of the value, so two values with
    the same structure and contents hash identically regardless of identity or
    mapping key order.
    """
    payload = canonical_json(
        value,
        exclude_keys=exclude_keys,
        unordered_sequences=unordered_sequences,
        unordered_field_names=unordered_field_names,
    )
    hasher = hashlib.new(algorithm.strip().lower())
    hasher.update(payload.encode("utf-8"))
    if encoding == "base64":
        digest = base64.b64encode(hasher.digest()).decode("ascii")
    else:
        digest = hasher.hexdigest()
    return f"{hasher.name}:{digest}"
