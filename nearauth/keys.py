"""Ed25519 key handling: NEAR key strings, hash signing, verification."""

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .errors import InvalidSignature, KeyFormatError, UnsupportedKeyType

ED25519_PREFIX = "ed25519:"
SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


def _split_prefix(key: str) -> str:
    if not isinstance(key, str) or not key.startswith(ED25519_PREFIX):
        raise UnsupportedKeyType(
            f'Unsupported public key type: "{key}". Must start with "{ED25519_PREFIX}".'
        )
    return key[len(ED25519_PREFIX):]


def encode_public_key(raw: bytes) -> str:
    """Format raw 32-byte key as ``ed25519:<base58>``."""
    return ED25519_PREFIX + base58.b58encode(raw).decode("ascii")


def decode_public_key(key: str) -> bytes:
    """Parse an ``ed25519:<base58>`` public key into 32 raw bytes.

    Raises:
        UnsupportedKeyType: On a foreign prefix or malformed key data.
    """
    body = _split_prefix(key)
    try:
        raw = base58.b58decode(body)
    except ValueError as e:
        raise UnsupportedKeyType(f"Invalid ed25519 public key encoding: {e}") from e
    if len(raw) != 32:
        raise UnsupportedKeyType(
            f"Invalid ed25519 public key: expected 32 bytes, got {len(raw)}"
        )
    return raw


class KeyPair:
    """An ed25519 signing key parsed from a NEAR secret key string."""

    def __init__(self, signing_key: SigningKey):
        self._signing_key = signing_key

    @classmethod
    def from_string(cls, secret_key: str) -> "KeyPair":
        """Load ``ed25519:<base58>`` holding a 64-byte secret key or 32-byte seed.

        Raises:
            UnsupportedKeyType: If the curve prefix is not ``ed25519:``.
            KeyFormatError: If the base58 body is malformed or the wrong size.
        """
        body = _split_prefix(secret_key)
        try:
            raw = base58.b58decode(body)
        except ValueError as e:
            raise KeyFormatError(f"Invalid secret key encoding: {e}") from e
        if len(raw) not in (SEED_LENGTH, SECRET_KEY_LENGTH):
            raise KeyFormatError(
                f"Expected decoded private key to be {SECRET_KEY_LENGTH} bytes "
                f"for Ed25519, got {len(raw)}"
            )
        return cls(SigningKey(raw[:SEED_LENGTH]))

    @property
    def seed(self) -> bytes:
        return bytes(self._signing_key)

    @property
    def public_key_bytes(self) -> bytes:
        """Raw 32-byte ed25519 public key."""
        return bytes(self._signing_key.verify_key)

    @property
    def public_key(self) -> str:
        """Public key as ``ed25519:<base58>``."""
        return encode_public_key(self.public_key_bytes)

    def sign(self, digest: bytes) -> bytes:
        return sign_hash(digest, self.seed)


def sign_hash(digest: bytes, seed: bytes) -> bytes:
    """Sign a 32-byte payload hash, returning the 64-byte ed25519 signature."""
    return SigningKey(seed).sign(digest).signature


def verify_signature(digest: bytes, signature: bytes, public_key: str) -> None:
    """Verify an ed25519 signature over a payload hash.

    Raises:
        UnsupportedKeyType: If *public_key* is not a well-formed ed25519 key.
        InvalidSignature: If verification fails.
    """
    raw = decode_public_key(public_key)
    try:
        VerifyKey(raw).verify(digest, signature)
    except BadSignatureError as e:
        raise InvalidSignature("Ed25519 signature verification failed.") from e
    except (ValueError, TypeError) as e:
        raise InvalidSignature(f"Verification error: {e}") from e
