"""nearauth: NEAR account-signed bearer tokens (NEP-413 payloads)."""

from .config import Settings, default_settings
from .errors import (
    NearAuthError,
    ConfigError,
    ParseError,
    NonceError,
    InvalidNonceLength,
    InvalidNonceTimestamp,
    FutureNonce,
    ExpiredNonce,
    ValidationMismatch,
    RecipientMismatch,
    StateMismatch,
    MessageMismatch,
    OwnershipError,
    OwnershipLookupError,
    KeyNotAssociated,
    SignatureError,
    UnsupportedKeyType,
    InvalidSignature,
    KeyFormatError,
    SignerError,
)
from .keys import ED25519_PREFIX, KeyPair
from .nonce import generate_nonce, validate_nonce
from .options import Exact, Predicate, VerifyOptions
from .ownership import OwnerVerifier, OwnershipClient
from .payload import TAG, SignedPayload, hash_payload, serialize_payload
from .signer import Delegate, DelegateSignature, KeySeed, sign
from .token import TokenRecord, encode_token, parse_auth_token
from .verify import VerificationResult, default_ownership_client, verify

__all__ = [
    "sign",
    "verify",
    "parse_auth_token",
    "encode_token",
    "generate_nonce",
    "validate_nonce",
    "serialize_payload",
    "hash_payload",
    "TAG",
    "ED25519_PREFIX",
    "KeyPair",
    "KeySeed",
    "Delegate",
    "DelegateSignature",
    "SignedPayload",
    "TokenRecord",
    "VerificationResult",
    "VerifyOptions",
    "Exact",
    "Predicate",
    "OwnershipClient",
    "OwnerVerifier",
    "default_ownership_client",
    "Settings",
    "default_settings",
    "NearAuthError",
    "ConfigError",
    "ParseError",
    "NonceError",
    "InvalidNonceLength",
    "InvalidNonceTimestamp",
    "FutureNonce",
    "ExpiredNonce",
    "ValidationMismatch",
    "RecipientMismatch",
    "StateMismatch",
    "MessageMismatch",
    "OwnershipError",
    "OwnershipLookupError",
    "KeyNotAssociated",
    "SignatureError",
    "UnsupportedKeyType",
    "InvalidSignature",
    "KeyFormatError",
    "SignerError",
]
