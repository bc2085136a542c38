"""Core exceptions shared by the set and its hashers."""


class ValueSetError(Exception):
    """Base class for ValueSet errors."""


class HashFailure(ValueSetError, ValueError):
    """Raised when a value cannot be canonically serialized for hashing."""
