"""Insertion-ordered set that compares values by content instead of identity."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSet
from typing import Any, Callable

from valuepack.core.types import ContentHash, SupportsHash
from valuepack.hashers import get_hasher, resolve_default_hasher

_MISSING = object()


class HashedSet(MutableSet):
    """Set of structured values, unique by ContentHash.

    Entries live in a single dict keyed by ContentHash, relying on dict
    insertion order for iteration. Re-adding a value with known content replaces
    the stored value but keeps its original position.

    The hash is recomputed on every ``add``/``has``/``delete``; a HashFailure
    from the hasher propagates to the caller unchanged.
    """

    __slots__ = ("_entries", "_hasher")

    def __init__(
        self,
        source: Iterable[Any] | None = None,
        *,
        hasher: SupportsHash | str | None = None,
    ) -> None:
        self._entries: dict[ContentHash, Any] = {}
        self._hasher = _resolve_hasher(hasher)
        if source is not None:
            for value in source:
                self.add(value)

    @property
    def hasher(self) -> SupportsHash:
        return self._hasher

    @property
    def size(self) -> int:
        """Number of distinct stored values."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, value: object) -> bool:
        return self.has(value)

    def __iter__(self) -> Iterator[Any]:
        yield from self._entries.values()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._entries.values())!r})"

    def _key(self, value: Any) -> ContentHash:
        return self._hasher.hash(value)

    def _from_iterable(self, iterable: Iterable[Any]) -> "HashedSet":
        return type(self)(iterable, hasher=self._hasher)

    def add(self, value: Any) -> "HashedSet":
        """Store ``value`` under its ContentHash and return the set for chaining."""
        self._entries[self._key(value)] = value
        return self

    def delete(self, value: Any) -> bool:
        """Remove the value with the same content; True if one was present."""
        key = self._key(value)
        if key not in self._entries:
            return False
        del self._entries[key]
        return True

    def discard(self, value: Any) -> None:
        self.delete(value)

    def clear(self) -> None:
        self._entries.clear()

    def has(self, value: Any) -> bool:
        return self._key(value) in self._entries

    def values(self) -> "HashedSetValues":
        return HashedSetValues(self)

    def keys(self) -> "HashedSetValues":
        """Same view as ``values()``; content hashes are never exposed."""
        return HashedSetValues(self)

    def entries(self) -> "HashedSetEntries":
        return HashedSetEntries(self)

    def for_each(self, callback: Callable[..., Any], context: Any = _MISSING) -> None:
        """Call ``callback(value)`` for every value in insertion order.

        When ``context`` is given it is passed as a second argument.
        """
        for value in list(self._entries.values()):
            if context is _MISSING:
                callback(value)
            else:
                callback(value, context)

    def copy(self) -> "HashedSet":
        new_set = type(self)(hasher=self._hasher)
        new_set._entries = self._entries.copy()
        return new_set

    def update(self, other: Iterable[Any]) -> "HashedSet":
        for value in other:
            self.add(value)
        return self

    def union(self, other: Iterable[Any]) -> "HashedSet":
        """Values of this set, then values of ``other`` not already present."""
        new_set = self.copy()
        for value in other:
            if not new_set.has(value):
                new_set.add(value)
        return new_set

    def intersection(self, other: Iterable[Any]) -> "HashedSet":
        """Values of this set whose content is also in ``other``."""
        contains = self._membership(other)
        return self._from_iterable(
            value for value in list(self._entries.values()) if contains(value)
        )

    def difference(self, other: Iterable[Any]) -> "HashedSet":
        """Values of this set whose content is absent from ``other``."""
        contains = self._membership(other)
        return self._from_iterable(
            value for value in list(self._entries.values()) if not contains(value)
        )

    def _membership(self, other: Iterable[Any]) -> Callable[[Any], bool]:
        has = getattr(other, "has", None)
        if callable(has):
            return has
        # plain containers compare by ==/hash; re-index them by content
        return self._from_iterable(other).has

    def __or__(self, other: Any) -> "HashedSet":
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.union(other)

    def __and__(self, other: Any) -> "HashedSet":
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.intersection(other)

    def __sub__(self, other: Any) -> "HashedSet":
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.difference(other)


class HashedSetValues:
    """Restartable view over the values of a HashedSet, in insertion order."""

    __slots__ = ("_owner",)

    def __init__(self, owner: HashedSet) -> None:
        self._owner = owner

    def __iter__(self) -> Iterator[Any]:
        return iter(self._owner)

    def __len__(self) -> int:
        return len(self._owner)

    def __contains__(self, value: object) -> bool:
        return self._owner.has(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class HashedSetEntries:
    """Restartable view of ``(value, value)`` pairs, mirroring mapping items."""

    __slots__ = ("_owner",)

    def __init__(self, owner: HashedSet) -> None:
        self._owner = owner

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        for value in self._owner:
            yield (value, value)

    def __len__(self) -> int:
        return len(self._owner)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


def _resolve_hasher(hasher: SupportsHash | str | None) -> SupportsHash:
    if hasher is None:
        return resolve_default_hasher()
    if isinstance(hasher, str):
        return get_hasher(hasher)
    return hasher
