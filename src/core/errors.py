from __future__ import annotations


class CacheError(Exception):
    """Base error for the cache engine."""


class ValidationError(CacheError):
    """Raised when caller input is invalid."""


class InvalidPatternError(ValidationError):
    """Raised when a key pattern cannot be turned into a matcher."""


class CacheTypeError(CacheError):
    """Raised when a stored value has the wrong type for the operation."""
