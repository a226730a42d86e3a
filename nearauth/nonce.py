"""Timestamp-prefixed anti-replay nonces.

Layout (32 bytes):
    [0:16]   current Unix time in milliseconds, zero-padded ASCII decimal
    [16:32]  cryptographically random bytes
"""

import secrets
import time

from .config import DEFAULT_NONCE_MAX_AGE_MS
from .errors import (
    ExpiredNonce,
    FutureNonce,
    InvalidNonceLength,
    InvalidNonceTimestamp,
)

NONCE_LENGTH = 32
TIMESTAMP_LENGTH = 16


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_nonce() -> bytes:
    """Return a fresh 32-byte nonce stamped with the current time."""
    stamp = str(_now_ms()).zfill(TIMESTAMP_LENGTH).encode("ascii")
    return stamp + secrets.token_bytes(NONCE_LENGTH - TIMESTAMP_LENGTH)


def nonce_timestamp(nonce: bytes) -> int:
    """Extract the millisecond timestamp embedded in *nonce*.

    Raises:
        InvalidNonceLength: If *nonce* is not 32 bytes.
        InvalidNonceTimestamp: If the leading 16 bytes are not decimal digits.
    """
    if len(nonce) != NONCE_LENGTH:
        raise InvalidNonceLength(
            f"Invalid nonce length: expected {NONCE_LENGTH} bytes, got {len(nonce)}"
        )
    raw = bytes(nonce[:TIMESTAMP_LENGTH])
    if not raw.isdigit():
        raise InvalidNonceTimestamp("Invalid timestamp in nonce")
    return int(raw)


def validate_nonce(nonce: bytes, max_age: int = DEFAULT_NONCE_MAX_AGE_MS) -> None:
    """Check nonce format and freshness.

    A nonce aged exactly *max_age* milliseconds is still valid.

    Raises:
        InvalidNonceLength: If *nonce* is not 32 bytes.
        InvalidNonceTimestamp: If the timestamp segment does not parse.
        FutureNonce: If the timestamp is ahead of the local clock.
        ExpiredNonce: If the nonce is older than *max_age*.
    """
    stamp = nonce_timestamp(nonce)
    now = _now_ms()
    if stamp > now:
        raise FutureNonce("Nonce timestamp is in the future")
    age = now - stamp
    if age > max_age:
        raise ExpiredNonce(f"Nonce has expired (age {age}ms, max {max_age}ms)")
