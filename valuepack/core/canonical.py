"""Deterministic canonicalization helpers for content hashing."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
import json
import math
from typing import Any, Iterable

from valuepack.core.exceptions import HashFailure

_EMPTY: frozenset[str] = frozenset()

SET_TAG = "__set__"
BYTES_TAG = "__bytes__"
_TAGS: frozenset[str] = frozenset({SET_TAG, BYTES_TAG})
_KEY_ESCAPE = "~"


def canonicalize(
    value: Any,
    *,
    exclude_keys: Iterable[str] = _EMPTY,
    unordered_sequences: bool = False,
    unordered_field_names: Iterable[str] = _EMPTY,
) -> Any:
    """Normalize a value to a deterministic JSON-compatible representation.

    Mapping keys are stringified and sorted. Sets and bytes become single-key
    tagged objects (``{"__set__": [...]}``, ``{"__bytes__": "<hex>"}``), and
    user mapping keys that could be mistaken for a tag are escaped with a
    leading ``~``. Dataclasses are walked as mappings of their fields. Lists
    keep their order unless ``unordered_sequences`` is set or the enclosing
    field is named in ``unordered_field_names``.

    Raises HashFailure for reference cycles, NaN/infinity, unsupported types,
    distinct mapping keys with the same string form, and nesting too deep to
    walk.
    """
    try:
        return _canonicalize(
            value,
            path=(),
            active=set(),
            exclude_keys=frozenset(exclude_keys),
            unordered_sequences=unordered_sequences,
            unordered_field_names=frozenset(name.lower() for name in unordered_field_names),
        )
    except RecursionError as error:
        raise HashFailure("Value is nested too deeply to canonicalize") from error


def canonical_json(
    value: Any,
    *,
    exclude_keys: Iterable[str] = _EMPTY,
    unordered_sequences: bool = False,
    unordered_field_names: Iterable[str] = _EMPTY,
) -> str:
    """Serialize a value to stable canonical JSON."""
    canonical_value = canonicalize(
        value,
        exclude_keys=exclude_keys,
        unordered_sequences=unordered_sequences,
        unordered_field_names=unordered_field_names,
    )
    try:
        return _dumps(canonical_value)
    except RecursionError as error:
        raise HashFailure("Value is nested too deeply to serialize") from error


def _dumps(value: Any) -> str:
    return json.dumps(
        value,
        ensure_ascii=True,
        separators=(",", ":"),
        sort_keys=True,
    )


def _canonicalize(
    value: Any,
    *,
    path: tuple[str, ...],
    active: set[int],
    exclude_keys: frozenset[str],
    unordered_sequences: bool,
    unordered_field_names: frozenset[str],
) -> Any:
    if isinstance(value, bool) or value is None:
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise HashFailure(
                f"NaN and infinity cannot be hashed (at {_render_path(path)})"
            )
        # json.dumps writes the shortest repr that round-trips
        return value

    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, bytearray)):
        return {BYTES_TAG: bytes(value).hex()}

    marker = id(value)
    if marker in active:
        raise HashFailure(f"Reference cycle detected at {_render_path(path)}")

    options = {
        "exclude_keys": exclude_keys,
        "unordered_sequences": unordered_sequences,
        "unordered_field_names": unordered_field_names,
    }

    active.add(marker)
    try:
        if isinstance(value, Mapping):
            return _canonicalize_mapping(value, path=path, active=active, **options)

        if is_dataclass(value) and not isinstance(value, type):
            as_mapping = {field.name: getattr(value, field.name) for field in fields(value)}
            return _canonicalize_mapping(as_mapping, path=path, active=active, **options)

        if isinstance(value, (list, tuple)):
            normalized_list = [
                _canonicalize(item, path=path + ("[]",), active=active, **options)
                for item in value
            ]
            if unordered_sequences or (path and path[-1].lower() in unordered_field_names):
                normalized_list.sort(key=_stable_item_sort_key)
            return normalized_list

        if isinstance(value, (set, frozenset)):
            normalized_items = [
                _canonicalize(item, path=path + ("{}",), active=active, **options)
                for item in value
            ]
            normalized_items.sort(key=_stable_item_sort_key)
            return {SET_TAG: normalized_items}

        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            as_mapping = to_dict()
            if not isinstance(as_mapping, dict):
                raise HashFailure(
                    f"{type(value).__name__}.to_dict() must return a dict "
                    f"(at {_render_path(path)})"
                )
            return _canonicalize_mapping(as_mapping, path=path, active=active, **options)
    finally:
        active.discard(marker)

    raise HashFailure(
        f"Unsupported type {type(value).__name__!r} at {_render_path(path)}"
    )


def _canonicalize_mapping(
    value: Mapping[Any, Any],
    *,
    path: tuple[str, ...],
    active: set[int],
    exclude_keys: frozenset[str],
    unordered_sequences: bool,
    unordered_field_names: frozenset[str],
) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key in sorted(value.keys(), key=lambda raw: str(raw)):
        key_name = str(key)
        if key_name in exclude_keys:
            continue
        escaped = _escape_key(key_name)
        if escaped in normalized:
            raise HashFailure(
                f"Mapping keys collide as {key_name!r} at {_render_path(path)}"
            )
        normalized[escaped] = _canonicalize(
            value[key],
            path=path + (key_name,),
            active=active,
            exclude_keys=exclude_keys,
            unordered_sequences=unordered_sequences,
            unordered_field_names=unordered_field_names,
        )
    return normalized


def _escape_key(key_name: str) -> str:
    # tag names never appear unescaped as user keys
    if key_name in _TAGS or key_name.startswith(_KEY_ESCAPE):
        return _KEY_ESCAPE + key_name
    return key_name


def _stable_item_sort_key(item: Any) -> str:
    return _dumps(item)


def _render_path(path: tuple[str, ...]) -> str:
    if not path:
        return "/"
    return "/" + "/".join(path)
