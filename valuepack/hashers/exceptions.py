"""Hasher subsystem exceptions."""

from valuepack.core.exceptions import ValueSetError


class HasherError(ValueSetError):
    """Base class for hasher subsystem errors."""


class HasherConfigError(HasherError):
    """Raised when a hasher or hasher config file is malformed."""


class HasherRegistryError(HasherError, ValueError):
    """Raised when hasher registration or lookup fails."""
