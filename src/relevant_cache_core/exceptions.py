"""Custom exception hierarchy for relevant-cache."""

from __future__ import annotations


class RelevantCacheError(Exception):
    """Base exception for all relevant-cache errors."""


class InvalidKeyType(RelevantCacheError):
    """Raised when a key argument is not a str, bytes, or Item."""


class NotFound(RelevantCacheError):
    """Raised when a key is absent or has expired."""


class MalformedRecord(RelevantCacheError):
    """Raised when a tagged record's length field does not fit its payload."""


class InsufficientArguments(RelevantCacheError):
    """Raised when Set or key construction receives nothing to work with."""


class TypeMismatch(RelevantCacheError):
    """Raised when a value has the wrong type for the requested operation."""


class TransportFailure(RelevantCacheError):
    """Raised when the underlying Redis call fails."""


class PatternError(RelevantCacheError):
    """Raised when a wildcard key cannot be turned into a match pattern."""


class CyclicDependency(RelevantCacheError):
    """Raised when a dependency chain leads back to a key already on the path."""

    def __init__(self, path: list[str]) -> None:
        """Record the offending path, ending with the repeated key."""
        self.path = path
        super().__init__(f"cyclic dependency: {' -> '.join(path)}")
