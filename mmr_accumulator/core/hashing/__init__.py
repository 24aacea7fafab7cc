"""
Hash primitives for the MMR accumulator.

Leaves are the SHA-256 of the raw element bytes. Internal nodes are the
SHA-256 of the 64-byte concatenation of their children's digests, left first.
"""

import hashlib
import hmac
from typing import Any

from mmr_accumulator.core.errors import InvalidArgumentError

DIGEST_SIZE = hashlib.sha256().digest_size

# Deepest supported proof; bounds a tree's weight to 2**63 leaves.
MAX_PROOF_DEPTH = 63


def _ensure_digest(value: Any, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != DIGEST_SIZE:
        raise InvalidArgumentError(f"{name} must be a {DIGEST_SIZE}-byte digest")
    return bytes(value)


def leaf_hash(data: bytes) -> bytes:
    """Hash an element into its leaf digest.

    Raises:
        InvalidArgumentError: If ``data`` is missing, empty or not bytes-like.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError(
            f"Element must be bytes, got {type(data).__name__}"
        )
    if len(data) < 1:
        raise InvalidArgumentError("Element must not be empty")
    return hashlib.sha256(data).digest()


def parent_hash(left: bytes, right: bytes) -> bytes:
    """Hash two child digests into their parent digest (order-sensitive)."""
    left = _ensure_digest(left, "left")
    right = _ensure_digest(right, "right")
    return hashlib.sha256(left + right).digest()


def digests_equal(a: bytes, b: bytes) -> bool:
    """Compare two digests in constant time."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def short_hex(digest: bytes, n: int = 4) -> str:
    """Render the first ``n`` bytes of a digest for display."""
    return digest[:n].hex() + "..."


__all__ = [
    "DIGEST_SIZE",
    "MAX_PROOF_DEPTH",
    "leaf_hash",
    "parent_hash",
    "digests_equal",
    "short_hex",
]
