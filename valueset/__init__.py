"""Stable public API surface for ValueSet.

This module is the supported import path for library users.
"""

from __future__ import annotations

from typing import Any

from valuepack.collection import HashedSet
from valuepack.core import ContentHash, HashFailure, HashSummary, ValueSetError
from valuepack.core import canonical_json as _canonical_json
from valuepack.core.types import SupportsHash, SupportsMembership
from valuepack.hashers import (
    CanonicalJsonHasher,
    Hasher,
    get_hasher,
    list_hasher_keys,
    resolve_default_hasher,
)

__version__ = "0.1.0"


def content_hash(value: Any, *, hasher: SupportsHash | str | None = None) -> ContentHash:
    """Return the ContentHash of ``value``.

    ``hasher`` may be a hasher object, a registered hasher key, or None for the
    process default (``VALUESET_HASHER``). Raises HashFailure for values that
    cannot be canonically serialized.
    """
    if hasher is None:
        resolved: SupportsHash = resolve_default_hasher()
    elif isinstance(hasher, str):
        resolved = get_hasher(hasher)
    else:
        resolved = hasher
    return resolved.hash(value)


def canonical_json(value: Any) -> str:
    """Return the canonical JSON text that default hashers digest."""
    return _canonical_json(value)


def list_hashers() -> tuple[str, ...]:
    """Return the registered hasher keys, sorted."""
    return list_hasher_keys()


__all__ = [
    "__version__",
    "ContentHash",
    "HashFailure",
    "HashSummary",
    "ValueSetError",
    "Hasher",
    "CanonicalJsonHasher",
    "SupportsHash",
    "SupportsMembership",
    "HashedSet",
    "content_hash",
    "canonical_json",
    "list_hashers",
]
