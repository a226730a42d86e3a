"""Token issuance from a local secret key or a key-holding delegate."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from .errors import KeyFormatError, SignerError, UnsupportedKeyType
from .keys import ED25519_PREFIX, KeyPair
from .nonce import NONCE_LENGTH, generate_nonce
from .payload import SignedPayload, payload_hash
from .token import SIGNATURE_LENGTH, TokenRecord, encode_token

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DelegateSignature:
    signature: Union[bytes, str]
    public_key: str
    account_id: str


class MessageSigner(Protocol):
    """A key-custody component (e.g. a wallet) that signs NEP-413 messages."""

    def sign_message(
        self,
        *,
        message: str,
        recipient: str,
        nonce: bytes,
        callback_url: Optional[str] = None,
    ) -> DelegateSignature:
        ...


@dataclass(frozen=True)
class KeySeed:
    """Sign locally with ``ed25519:<base58>`` secret key text."""

    secret_key: str
    account_id: str

    def __repr__(self) -> str:
        return f"KeySeed(account_id={self.account_id!r})"


@dataclass(frozen=True)
class Delegate:
    """Sign through an external :class:`MessageSigner`."""

    wallet: MessageSigner


SignerSpec = Union[KeySeed, Delegate]


def _resolve_signer(
    signer: Union[SignerSpec, str], account_id: Optional[str]
) -> SignerSpec:
    if isinstance(signer, (KeySeed, Delegate)):
        return signer
    if isinstance(signer, str):
        if not signer.startswith(ED25519_PREFIX):
            raise SignerError(
                f"Invalid signer: key string must start with {ED25519_PREFIX!r}"
            )
        if not account_id:
            raise SignerError("account_id is required when signing with a key string")
        return KeySeed(secret_key=signer, account_id=account_id)
    raise SignerError(
        "Invalid signer: expected KeySeed, Delegate or an ed25519 key string, "
        f"got {type(signer).__name__}"
    )


def _signature_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        signature = bytes(value)
    else:
        try:
            signature = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            raise SignerError(
                f"Delegate returned an undecodable signature: {e}"
            ) from e
    if len(signature) != SIGNATURE_LENGTH:
        raise SignerError(
            f"Delegate signature must be {SIGNATURE_LENGTH} bytes, "
            f"got {len(signature)}"
        )
    return signature


def _sign_with_key(
    key_seed: KeySeed, payload: SignedPayload, state: Optional[str]
) -> TokenRecord:
    try:
        keypair = KeyPair.from_string(key_seed.secret_key)
    except (UnsupportedKeyType, KeyFormatError) as e:
        raise SignerError(f"Invalid KeyPair format: {e}") from e
    return TokenRecord(
        account_id=key_seed.account_id,
        public_key=keypair.public_key,
        signature=keypair.sign(payload_hash(payload)),
        message=payload.message,
        nonce=payload.nonce,
        recipient=payload.recipient,
        callback_url=payload.callback_url,
        state=state,
    )


def _sign_with_delegate(
    delegate: Delegate, payload: SignedPayload, state: Optional[str]
) -> TokenRecord:
    result = delegate.wallet.sign_message(
        message=payload.message,
        recipient=payload.recipient,
        nonce=payload.nonce,
        callback_url=payload.callback_url,
    )
    for field in ("signature", "public_key", "account_id"):
        if getattr(result, field, None) is None:
            raise SignerError(f"Delegate result is missing {field!r}")
    if not isinstance(result.public_key, str) or not isinstance(
        result.account_id, str
    ):
        raise SignerError("Delegate public_key and account_id must be strings")
    return TokenRecord(
        account_id=result.account_id,
        public_key=result.public_key,
        signature=_signature_bytes(result.signature),
        message=payload.message,
        nonce=payload.nonce,
        recipient=payload.recipient,
        callback_url=payload.callback_url,
        state=state,
    )


def sign(
    message: str,
    *,
    signer: Union[SignerSpec, str],
    recipient: str,
    account_id: Optional[str] = None,
    nonce: Optional[bytes] = None,
    callback_url: Optional[str] = None,
    state: Optional[str] = None,
) -> str:
    """Sign *message* for *recipient* and return an auth token string.

    Args:
        message: Application message to sign.
        signer: A :class:`KeySeed`, a :class:`Delegate`, or an
            ``ed25519:<base58>`` secret key string (requires *account_id*).
        recipient: Intended recipient, e.g. the backend's account or domain.
        account_id: Claimed account when *signer* is a key string.
        nonce: Explicit 32-byte nonce; generated when omitted.
        callback_url: Optional callback URL, covered by the signature.
        state: Optional CSRF-style value carried unsigned in the token.

    Raises:
        SignerError: On an unusable signer, a missing account id, a bad
            nonce, or a delegate result without a 64-byte signature.
    """
    spec = _resolve_signer(signer, account_id)

    current_nonce = generate_nonce() if nonce is None else bytes(nonce)
    if len(current_nonce) != NONCE_LENGTH:
        raise SignerError(
            f"nonce must be {NONCE_LENGTH} bytes, got {len(current_nonce)}"
        )
    payload = SignedPayload(
        message=message,
        nonce=current_nonce,
        recipient=recipient,
        callback_url=callback_url,
    )

    if isinstance(spec, KeySeed):
        record = _sign_with_key(spec, payload, state)
    else:
        record = _sign_with_delegate(spec, payload, state)
    _LOG.debug("signed token for %s -> %s", record.account_id, recipient)
    return encode_token(record)
