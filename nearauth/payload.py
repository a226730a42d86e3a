"""NEP-413 canonical payload: the exact bytes that get hashed and signed.

Delegates binary layout to ``borsh-construct`` so the output matches the
Borsh reference implementations byte-for-byte:

    u32le(TAG) || borsh({message, nonce: [u8; 32], recipient, callback_url?})
"""

import hashlib
from dataclasses import dataclass
from typing import Optional

from borsh_construct import CStruct, Option, String, U8, U32

from .nonce import NONCE_LENGTH

# 2**31 + 413: NEP-413 off-chain message prefix.
TAG = 2147484061

PAYLOAD_SCHEMA = CStruct(
    "message" / String,
    "nonce" / U8[NONCE_LENGTH],
    "recipient" / String,
    "callback_url" / Option(String),
)


@dataclass(frozen=True)
class SignedPayload:
    message: str
    nonce: bytes
    recipient: str
    callback_url: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.nonce) != NONCE_LENGTH:
            raise ValueError(
                f"nonce must be {NONCE_LENGTH} bytes, got {len(self.nonce)}"
            )


def serialize_payload(payload: SignedPayload) -> bytes:
    """Encode *payload* as tag-prefixed Borsh bytes."""
    body = PAYLOAD_SCHEMA.build(
        {
            "message": payload.message,
            "nonce": list(payload.nonce),
            "recipient": payload.recipient,
            "callback_url": payload.callback_url,
        }
    )
    return U32.build(TAG) + body


def hash_payload(data: bytes) -> bytes:
    """SHA-256 of serialized payload bytes."""
    return hashlib.sha256(data).digest()


def payload_hash(payload: SignedPayload) -> bytes:
    return hash_payload(serialize_payload(payload))
