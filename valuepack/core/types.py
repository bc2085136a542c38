"""Shared type aliases and structural protocols."""

from __future__ import annotations

from typing import Any, Iterator, Protocol, runtime_checkable

ContentHash = str


@runtime_checkable
class SupportsHash(Protocol):
    """Anything that can turn a value into its ContentHash."""

    def hash(self, value: Any) -> ContentHash: ...


@runtime_checkable
class SupportsMembership(Protocol):
    """Minimal collaborator accepted by the set-algebra operations."""

    def has(self, value: Any) -> bool: ...

    def __iter__(self) -> Iterator[Any]: ...
