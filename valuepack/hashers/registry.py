"""Hasher registry and plugin hooks."""

from __future__ import annotations

from functools import partial
import importlib
import logging
from typing import Callable

from valuepack.hashers.base import CanonicalJsonHasher, Hasher
from valuepack.hashers.exceptions import HasherRegistryError

logger = logging.getLogger(__name__)

HasherFactory = Callable[[], Hasher]
_HASHER_REGISTRY: dict[str, HasherFactory] = {}
_REGISTRY_GENERATION = 0

DEFAULT_HASHER_KEY = "sha256"


def _normalize_key(key: str) -> str:
    normalized_key = key.strip().lower()
    if not normalized_key:
        raise HasherRegistryError("Hasher key cannot be empty.")
    return normalized_key


def register_hasher(
    key: str,
    factory: HasherFactory,
    *,
    overwrite: bool = False,
) -> None:
    normalized_key = _normalize_key(key)
    if not overwrite and normalized_key in _HASHER_REGISTRY:
        raise HasherRegistryError(f"Hasher '{normalized_key}' is already registered.")
    _HASHER_REGISTRY[normalized_key] = factory
    _bump_generation()
    logger.debug("registered hasher %r", normalized_key)


def register_hasher_entrypoint(
    key: str,
    entrypoint: str,
    *,
    overwrite: bool = False,
) -> None:
    """Register a hasher from a ``module:attribute`` import path.

    The attribute may be a Hasher subclass, a zero-argument factory, or a
    ready hasher instance.
    """
    module_name, separator, attr = entrypoint.partition(":")
    if not separator or not module_name or not attr:
        raise HasherRegistryError(
            f"Invalid hasher entrypoint '{entrypoint}'. Expected module:attribute."
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise HasherRegistryError(
            f"Hasher entrypoint '{entrypoint}' failed to import module '{module_name}': {error}"
        ) from error
    try:
        target = getattr(module, attr)
    except AttributeError as error:
        raise HasherRegistryError(
            f"Hasher entrypoint '{entrypoint}' could not find attribute '{attr}'."
        ) from error

    if isinstance(target, type) or (callable(target) and not hasattr(target, "hash")):
        factory: HasherFactory = target
    elif callable(getattr(target, "hash", None)):
        instance = target
        factory = lambda: instance  # noqa: E731
    else:
        raise HasherRegistryError(
            f"Hasher entrypoint '{entrypoint}' is neither callable nor a hasher."
        )
    register_hasher(key, factory, overwrite=overwrite)


def get_hasher(key: str) -> Hasher:
    normalized_key = key.strip().lower()
    if normalized_key not in _HASHER_REGISTRY:
        raise HasherRegistryError(
            f"Hasher '{normalized_key}' is not registered. "
            f"Available hashers: {', '.join(list_hasher_keys()) or '(none)'}"
        )
    factory = _HASHER_REGISTRY[normalized_key]
    return factory()


def list_hasher_keys() -> tuple[str, ...]:
    return tuple(sorted(_HASHER_REGISTRY.keys()))


def reset_hasher_registry() -> None:
    _HASHER_REGISTRY.clear()
    _bump_generation()


def registry_generation() -> int:
    """Counter that changes whenever a hasher is registered or the registry is reset."""
    return _REGISTRY_GENERATION


def _bump_generation() -> None:
    global _REGISTRY_GENERATION
    _REGISTRY_GENERATION += 1


def initialize_default_hashers(*, overwrite: bool = False) -> None:
    defaults: dict[str, HasherFactory] = {
        "sha256": partial(CanonicalJsonHasher, "sha256"),
        "sha1": partial(CanonicalJsonHasher, "sha1"),
        "md5": partial(CanonicalJsonHasher, "md5"),
        "blake2b": partial(CanonicalJsonHasher, "blake2b"),
        "sha256-unordered": partial(
            CanonicalJsonHasher, "sha256", unordered_sequences=True
        ),
    }
    for key, factory in defaults.items():
        if key in _HASHER_REGISTRY and not overwrite:
            continue
        register_hasher(key, factory, overwrite=True)


def load_hashers_from_plugins(
    plugins: dict[str, str] | None = None,
    *,
    overwrite: bool = False,
) -> None:
    """Load hashers from an import entrypoint mapping."""
    if not plugins:
        return
    for key, entrypoint in plugins.items():
        register_hasher_entrypoint(key, entrypoint, overwrite=overwrite)
