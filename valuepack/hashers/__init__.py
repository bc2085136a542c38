"""Hasher contracts, reference implementation and registry."""

from valuepack.hashers.base import CanonicalJsonHasher, Hasher
from valuepack.hashers.config import (
    HASHER_CONFIG_ENV_VAR,
    HASHER_CONFIG_VERSION,
    HASHER_ENV_VAR,
    HasherConfig,
    clear_default_hasher_cache,
    load_hasher_config,
    resolve_default_hasher,
)
from valuepack.hashers.exceptions import HasherConfigError, HasherError, HasherRegistryError
from valuepack.hashers.registry import (
    DEFAULT_HASHER_KEY,
    get_hasher,
    initialize_default_hashers,
    list_hasher_keys,
    load_hashers_from_plugins,
    register_hasher,
    register_hasher_entrypoint,
    registry_generation,
    reset_hasher_registry,
)

initialize_default_hashers()

__all__ = [
    "CanonicalJsonHasher",
    "DEFAULT_HASHER_KEY",
    "HASHER_CONFIG_ENV_VAR",
    "HASHER_CONFIG_VERSION",
    "HASHER_ENV_VAR",
    "Hasher",
    "HasherConfig",
    "HasherConfigError",
    "HasherError",
    "HasherRegistryError",
    "clear_default_hasher_cache",
    "get_hasher",
    "initialize_default_hashers",
    "list_hasher_keys",
    "load_hasher_config",
    "load_hashers_from_plugins",
    "register_hasher",
    "register_hasher_entrypoint",
    "registry_generation",
    "reset_hasher_registry",
    "resolve_default_hasher",
]
