"""Content-keyed collections."""

from valuepack.collection.hashed_set import HashedSet, HashedSetEntries, HashedSetValues

__all__ = [
    "HashedSet",
    "HashedSetEntries",
    "HashedSetValues",
]
