"""Shared constants for relevant-cache.

Writers and readers of the shared store must agree on these values, so
they are fixed at module level and never mutated.
"""

from __future__ import annotations

# Joins the textual forms of key-construction arguments
KEY_DELIMITER = "_"

# Joins dependency keys inside the stored dependency list
DEPENDENCY_DELIMITER = "|"

# Wildcard marker: "any sequence of characters" at resolution time
WILDCARD = "*"

# Tagged record header: signature byte, reserved byte, 16-bit big-endian length
SIGNATURE = b"$\x00"
HEADER_SIZE = 4
MAX_DEPENDENCY_BYTES = 0xFFFF

# Endpoint schemes that switch the Redis connection to TLS
TLS_SCHEMES = ("tls", "rediss")
PLAIN_SCHEMES = ("redis",)
