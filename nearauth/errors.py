"""Machine-readable error categories for NEAR auth token failures."""

from typing import Any


class NearAuthError(Exception):
    """Base exception for all nearauth errors."""


class ConfigError(NearAuthError):
    """Contradictory or malformed verification options or settings."""


class ParseError(NearAuthError):
    """Malformed token text or binary structure."""


class NonceError(NearAuthError):
    """Nonce rejected (format, freshness or custom validation)."""


class InvalidNonceLength(NonceError):
    """Nonce is not exactly 32 bytes."""


class InvalidNonceTimestamp(NonceError):
    """Leading 16 nonce bytes are not an ASCII decimal timestamp."""


class FutureNonce(NonceError):
    """Nonce timestamp lies in the future."""


class ExpiredNonce(NonceError):
    """Nonce is older than the allowed maximum age."""


class ValidationMismatch(NearAuthError):
    """A token field did not satisfy the caller's constraint."""

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class RecipientMismatch(ValidationMismatch):
    """Token recipient rejected."""


class StateMismatch(ValidationMismatch):
    """Token state rejected."""


class MessageMismatch(ValidationMismatch):
    """Token message rejected."""


class OwnershipError(NearAuthError):
    """Public key could not be proven to act for the claimed account."""


class OwnershipLookupError(OwnershipError):
    """Key registry transport failure or unexpected response."""


class KeyNotAssociated(OwnershipError):
    """Key registry answered, but the account is not among the key owners."""


class SignatureError(NearAuthError):
    """Signature verification failed."""


class UnsupportedKeyType(SignatureError):
    """Public key is not an ``ed25519:`` key or its key data is malformed."""


class InvalidSignature(SignatureError):
    """Ed25519 verification rejected the signature."""


class KeyFormatError(NearAuthError):
    """Secret key text could not be decoded."""


class SignerError(NearAuthError):
    """Signer could not produce a token (bad signer or missing account id)."""
