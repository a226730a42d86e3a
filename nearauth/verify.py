"""Auth token verification pipeline.

Steps run in a fixed order and the first failure is raised:

    parse -> nonce -> recipient -> state -> message -> ownership -> signature

Local checks complete before the key registry is queried, and the registry
answers before any signature is checked.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Optional, Type

from .config import default_settings
from .errors import (
    MessageMismatch,
    NonceError,
    RecipientMismatch,
    StateMismatch,
    ValidationMismatch,
)
from .keys import verify_signature
from .nonce import validate_nonce
from .options import Check, Exact, Predicate, VerifyOptions
from .ownership import OwnerVerifier, OwnershipClient
from .payload import payload_hash
from .token import TokenRecord, parse_auth_token

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    account_id: str
    public_key: str
    message: str
    callback_url: Optional[str] = None
    state: Optional[str] = None


@functools.lru_cache(maxsize=None)
def default_ownership_client() -> OwnershipClient:
    """Shared client for calls that pass no ``ownership``; built on first use."""
    settings = default_settings()
    return OwnershipClient(
        settings.mainnet_api_url, settings.testnet_api_url, settings.http_timeout
    )


def _quote(value: Optional[str]) -> str:
    return "undefined" if value is None else f"'{value}'"


def _check_nonce(record: TokenRecord, options: VerifyOptions) -> None:
    check = options.nonce
    if isinstance(check, Predicate):
        if not check.fn(record.nonce):
            raise NonceError("Custom nonce validation failed")
    elif isinstance(check, Exact):
        if bytes(check.value) != record.nonce:
            raise NonceError("Nonce mismatch: token nonce differs from expected nonce")
    else:
        max_age = options.nonce_max_age
        if max_age is None:
            max_age = default_settings().nonce_max_age_ms
        validate_nonce(record.nonce, max_age)


def _check_field(
    check: Check, actual: Any, field: str, error_cls: Type[ValidationMismatch]
) -> None:
    if isinstance(check, Predicate):
        if not check.fn(actual):
            raise error_cls(
                f"Custom {field} validation failed for {_quote(actual)}",
                actual=actual,
            )
    elif isinstance(check, Exact):
        if check.value != actual:
            raise error_cls(
                f"{field.capitalize()} mismatch: expected {_quote(check.value)}, "
                f"but received {_quote(actual)}",
                expected=check.value,
                actual=actual,
            )


def verify(
    token: str,
    options: Optional[VerifyOptions] = None,
    *,
    ownership: Optional[OwnerVerifier] = None,
) -> VerificationResult:
    """Verify an auth token and return the authenticated identity.

    Args:
        token: Base64 auth token produced by :func:`nearauth.signer.sign`.
        options: Field constraints; no constraints beyond default nonce
            freshness when omitted.
        ownership: Object with ``verify_owner(account_id, public_key,
            require_full_access_key)``; the shared
            :func:`default_ownership_client` when omitted.

    Raises:
        ConfigError: A ``NEARAUTH_*`` variable needed for a default is
            malformed (read once, on the first call that needs it).
        ParseError: Token is malformed.
        NonceError: Nonce format, freshness or custom check failed.
        RecipientMismatch, StateMismatch, MessageMismatch: A field
            constraint failed.
        OwnershipError: Key ownership could not be confirmed.
        SignatureError: Key type unsupported or signature invalid.
    """
    options = options or VerifyOptions()

    record = parse_auth_token(token)
    _LOG.debug("parsed token for %s", record.account_id)

    _check_nonce(record, options)
    _check_field(options.recipient, record.recipient, "recipient", RecipientMismatch)
    _check_field(options.state, record.state, "state", StateMismatch)
    _check_field(options.message, record.message, "message", MessageMismatch)
    _LOG.debug("local checks passed for %s", record.account_id)

    owner_check = ownership if ownership is not None else default_ownership_client()
    owner_check.verify_owner(
        record.account_id, record.public_key, options.require_full_access_key
    )

    # The signed bytes come from the token alone; options only gate acceptance.
    digest = payload_hash(record.signed_payload())
    verify_signature(digest, record.signature, record.public_key)

    _LOG.info("verified token for %s (%s)", record.account_id, record.public_key)
    return VerificationResult(
        account_id=record.account_id,
        public_key=record.public_key,
        message=record.message,
        callback_url=record.callback_url,
        state=record.state,
    )
