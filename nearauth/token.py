"""Auth token construction and parsing.

A token is standard base64 (RFC 4648 §4) of the Borsh struct:

    account_id: string
    public_key: string          ("ed25519:<base58>")
    signature: string           (base64 of the 64-byte signature)
    message: string
    nonce: [u8; 32]
    recipient: string
    callback_url: Option<string>
    state: Option<string>       (not covered by the signature)
"""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from borsh_construct import CStruct, Option, String, U8
from construct import ConstructError

from .errors import ParseError
from .nonce import NONCE_LENGTH
from .payload import SignedPayload

_BASE64_STANDARD_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
SIGNATURE_LENGTH = 64

TOKEN_SCHEMA = CStruct(
    "account_id" / String,
    "public_key" / String,
    "signature" / String,
    "message" / String,
    "nonce" / U8[NONCE_LENGTH],
    "recipient" / String,
    "callback_url" / Option(String),
    "state" / Option(String),
)


@dataclass(frozen=True)
class TokenRecord:
    account_id: str
    public_key: str
    signature: bytes
    message: str
    nonce: bytes
    recipient: str
    callback_url: Optional[str] = None
    state: Optional[str] = None

    def signed_payload(self) -> SignedPayload:
        """The payload this token's signature covers."""
        return SignedPayload(
            message=self.message,
            nonce=self.nonce,
            recipient=self.recipient,
            callback_url=self.callback_url,
        )


def decode_base64_standard(value: str, field_name: str) -> bytes:
    """Decode and validate standard base64 (RFC 4648 §4). Rejects URL-safe."""
    if not isinstance(value, str):
        raise ParseError(f"{field_name} must be a string")
    if "-" in value or "_" in value:
        raise ParseError(
            f"{field_name} uses URL-safe base64; standard base64 required"
        )
    if not _BASE64_STANDARD_RE.match(value):
        raise ParseError(f"{field_name} is not valid base64")
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ParseError(f"{field_name} base64 decode failed: {e}") from e
    if base64.b64encode(decoded).decode("ascii") != value:
        raise ParseError(f"{field_name} is not canonical base64")
    return decoded


def encode_token(record: TokenRecord) -> str:
    """Serialize *record* to the transportable token string."""
    serialized = TOKEN_SCHEMA.build(
        {
            "account_id": record.account_id,
            "public_key": record.public_key,
            "signature": base64.b64encode(record.signature).decode("ascii"),
            "message": record.message,
            "nonce": list(record.nonce),
            "recipient": record.recipient,
            "callback_url": record.callback_url,
            "state": record.state,
        }
    )
    return base64.b64encode(serialized).decode("ascii")


def parse_auth_token(token: str) -> TokenRecord:
    """Parse a token string into a :class:`TokenRecord`.

    Raises:
        ParseError: On malformed or non-canonical base64, truncated or
            corrupted Borsh data, trailing bytes, or a signature field that
            does not decode to 64 bytes.
    """
    raw = decode_base64_standard(token, "auth token")
    if not raw:
        raise ParseError("Invalid auth token format: empty token")

    try:
        data = TOKEN_SCHEMA.parse(raw)
    except (ConstructError, ValueError) as e:
        raise ParseError(
            f"Invalid auth token format: Borsh deserialization failed - {e}"
        ) from e

    record_fields = {
        "account_id": data.account_id,
        "public_key": data.public_key,
        "message": data.message,
        "nonce": bytes(data.nonce),
        "recipient": data.recipient,
        "callback_url": data.callback_url,
        "state": data.state,
    }

    # Option tags other than 0/1 and trailing bytes parse silently; only the
    # canonical encoding of the parsed values is accepted.
    canonical = TOKEN_SCHEMA.build(
        {**record_fields, "nonce": list(data.nonce), "signature": data.signature}
    )
    if canonical != raw:
        raise ParseError(
            "Invalid auth token format: non-canonical Borsh encoding "
            f"({len(raw)} bytes, expected {len(canonical)})"
        )

    signature = decode_base64_standard(data.signature, "signature")
    if len(signature) != SIGNATURE_LENGTH:
        raise ParseError(
            f"signature must decode to {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    return TokenRecord(signature=signature, **record_fields)
