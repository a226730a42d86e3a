"""Shared fixtures: throwaway ed25519 keys and an in-memory key registry."""

import time

import base58
import pytest
from nacl.signing import SigningKey

from nearauth.config import default_settings
from nearauth.errors import KeyNotAssociated
from nearauth.verify import default_ownership_client


def secret_key_string(signing_key: SigningKey) -> str:
    raw = bytes(signing_key) + bytes(signing_key.verify_key)
    return "ed25519:" + base58.b58encode(raw).decode("ascii")


def public_key_string(signing_key: SigningKey) -> str:
    return "ed25519:" + base58.b58encode(bytes(signing_key.verify_key)).decode("ascii")


def nonce_at(timestamp_ms: int, tail: bytes = b"\x00" * 16) -> bytes:
    return str(timestamp_ms).zfill(16).encode("ascii") + tail


def now_ms() -> int:
    return int(time.time() * 1000)


class FakeRegistry:
    """Stands in for OwnershipClient; maps public key -> owning accounts."""

    def __init__(self, owners=None, error=None):
        self.owners = owners or {}
        self.error = error
        self.calls = []

    def verify_owner(self, account_id, public_key, require_full_access_key=True):
        self.calls.append((account_id, public_key, require_full_access_key))
        if self.error is not None:
            raise self.error
        if account_id not in self.owners.get(public_key, []):
            raise KeyNotAssociated("key not associated with account")


@pytest.fixture
def alice_key():
    return SigningKey.generate()


@pytest.fixture
def alice_secret(alice_key):
    return secret_key_string(alice_key)


@pytest.fixture
def alice_public(alice_key):
    return public_key_string(alice_key)


@pytest.fixture
def registry(alice_public):
    return FakeRegistry({alice_public: ["alice.near", "alice.testnet"]})


@pytest.fixture(autouse=True)
def fresh_defaults():
    default_settings.cache_clear()
    default_ownership_client.cache_clear()
    yield
    default_settings.cache_clear()
    default_ownership_client.cache_clear()
