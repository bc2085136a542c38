"""Environment and file configuration for the process default hasher."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from valuepack.hashers.base import Hasher
from valuepack.hashers.exceptions import HasherConfigError
from valuepack.hashers.registry import (
    DEFAULT_HASHER_KEY,
    get_hasher,
    load_hashers_from_plugins,
    registry_generation,
)

logger = logging.getLogger(__name__)

HASHER_CONFIG_VERSION = 1
HASHER_ENV_VAR = "VALUESET_HASHER"
HASHER_CONFIG_ENV_VAR = "VALUESET_HASHER_CONFIG"

# (env hasher key, config path) -> (registry generation, hasher)
_DEFAULT_HASHER_CACHE: dict[tuple[str, str], tuple[int, Hasher]] = {}


@dataclass(frozen=True, slots=True)
class HasherConfig:
    """Parsed hasher config file."""

    default: str | None = None
    hashers: dict[str, str] = field(default_factory=dict)


def load_hasher_config(path: str | Path) -> HasherConfig:
    """Load hasher config from a JSON file."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as error:
        raise HasherConfigError(f"Invalid hasher config JSON ({config_path}): {error}") from error

    if not isinstance(raw, dict):
        raise HasherConfigError(f"Hasher config must be a JSON object ({config_path}).")

    supported_keys = {"config_version", "default", "hashers"}
    unknown = sorted(set(raw.keys()) - supported_keys)
    if unknown:
        raise HasherConfigError(
            f"Hasher config contains unsupported keys: {', '.join(unknown)}"
        )

    version = raw.get("config_version")
    if version != HASHER_CONFIG_VERSION:
        raise HasherConfigError(
            "Unsupported hasher config version "
            f"{version!r}; expected {HASHER_CONFIG_VERSION}."
        )

    default = raw.get("default")
    if default is not None and (not isinstance(default, str) or not default.strip()):
        raise HasherConfigError("Hasher config key 'default' must be a non-empty string.")

    hashers = raw.get("hashers", {})
    if not isinstance(hashers, dict):
        raise HasherConfigError("Hasher config key 'hashers' must be a JSON object.")
    for key, entrypoint in hashers.items():
        if not isinstance(entrypoint, str) or ":" not in entrypoint:
            raise HasherConfigError(
                f"Hasher config entry '{key}' must be a 'module:attribute' string."
            )

    return HasherConfig(default=default, hashers=dict(hashers))


def resolve_default_hasher(env: Mapping[str, str] | None = None) -> Hasher:
    """Resolve the process default hasher.

    ``VALUESET_HASHER_CONFIG`` (if set) registers plugin hashers and may name a
    default; ``VALUESET_HASHER`` overrides that default. Falls back to sha256.

    The result is cached per (VALUESET_HASHER, VALUESET_HASHER_CONFIG) pair
    until the hasher registry changes, so the config file is read and its
    plugins imported once.
    """
    environ: Mapping[str, Any] = os.environ if env is None else env
    config_path = str(environ.get(HASHER_CONFIG_ENV_VAR, "")).strip()
    env_key = str(environ.get(HASHER_ENV_VAR, "")).strip()

    cache_key = (env_key, config_path)
    cached = _DEFAULT_HASHER_CACHE.get(cache_key)
    if cached is not None and cached[0] == registry_generation():
        return cached[1]

    key = DEFAULT_HASHER_KEY
    if config_path:
        config = load_hasher_config(config_path)
        load_hashers_from_plugins(config.hashers, overwrite=True)
        if config.default:
            key = config.default
        logger.debug("loaded hasher config from %s", config_path)

    if env_key:
        key = env_key

    logger.debug("resolved default hasher %r", key)
    hasher = get_hasher(key)
    _DEFAULT_HASHER_CACHE[cache_key] = (registry_generation(), hasher)
    return hasher


def clear_default_hasher_cache() -> None:
    _DEFAULT_HASHER_CACHE.clear()
