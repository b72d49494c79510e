"""Entry model: a plain key/value write without dependencies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relevant_cache_core.exceptions import TypeMismatch


class Entry(BaseModel):
    """Explicit configuration for a dependency-free Set.

    Type errors surface as ``TypeMismatch`` rather than pydantic's
    ``ValidationError`` so callers handle one error hierarchy.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Cache key, stored verbatim")
    value: str | bytes = Field(description="Raw payload; text is stored as UTF-8")
    ttl: int = Field(default=0, description="Seconds until expiry, 0 for none")

    @field_validator("key", mode="before")
    @classmethod
    def validate_key(cls, v: object) -> object:
        """Reject non-string keys."""
        if not isinstance(v, str):
            msg = f"key must be a str, got {type(v).__name__}"
            raise TypeMismatch(msg)
        return v

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: object) -> object:
        """Reject payloads other than str or bytes."""
        if not isinstance(v, (str, bytes)):
            msg = f"value must be str or bytes, got {type(v).__name__}"
            raise TypeMismatch(msg)
        return v

    @field_validator("ttl", mode="before")
    @classmethod
    def validate_ttl(cls, v: object) -> object:
        """Reject non-integer and negative TTLs."""
        if isinstance(v, bool) or not isinstance(v, int):
            msg = f"ttl must be an int, got {type(v).__name__}"
            raise TypeMismatch(msg)
        if v < 0:
            msg = f"ttl must not be negative, got {v}"
            raise TypeMismatch(msg)
        return v
