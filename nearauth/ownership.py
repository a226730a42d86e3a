"""Public key ownership lookup against a NEAR key registry (FastNEAR API)."""

import logging
from typing import Optional, Protocol

import requests

from .config import Settings
from .errors import KeyNotAssociated, OwnershipLookupError

_LOG = logging.getLogger(__name__)

TESTNET_SUFFIX = ".testnet"
API_FAILURE = "API error or unexpected response"
NOT_ASSOCIATED = "key not associated with account"


class OwnerVerifier(Protocol):
    """Anything that can confirm a public key belongs to an account."""

    def verify_owner(
        self, account_id: str, public_key: str, require_full_access_key: bool = True
    ) -> None:
        ...


class OwnershipClient:
    """Checks that a public key is an access key of the claimed account.

    ``*.testnet`` accounts are looked up on the testnet registry, everything
    else on mainnet. A single request is made per check.
    """

    def __init__(
        self,
        mainnet_url: Optional[str] = None,
        testnet_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        if mainnet_url is None or testnet_url is None or timeout is None:
            settings = Settings.from_env()
            mainnet_url = mainnet_url or settings.mainnet_api_url
            testnet_url = testnet_url or settings.testnet_api_url
            timeout = settings.http_timeout if timeout is None else timeout
        self._mainnet = mainnet_url.rstrip("/")
        self._testnet = testnet_url.rstrip("/")
        self._timeout = timeout

    @classmethod
    def from_env(cls) -> "OwnershipClient":
        """Build a client from ``NEARAUTH_*`` environment variables."""
        return cls()

    def endpoint_for(self, account_id: str) -> str:
        if account_id.endswith(TESTNET_SUFFIX):
            return self._testnet
        return self._mainnet

    def lookup_url(
        self, account_id: str, public_key: str, require_full_access_key: bool
    ) -> str:
        suffix = "" if require_full_access_key else "/all"
        return f"{self.endpoint_for(account_id)}/v0/public_key/{public_key}{suffix}"

    def verify_owner(
        self, account_id: str, public_key: str, require_full_access_key: bool = True
    ) -> None:
        """Confirm *public_key* acts for *account_id*.

        Raises:
            OwnershipLookupError: On transport failure, non-2xx status or an
                unexpected response body.
            KeyNotAssociated: If the registry does not list *account_id*.
        """
        url = self.lookup_url(account_id, public_key, require_full_access_key)
        try:
            resp = requests.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            _LOG.warning("key registry GET %s failed: %s", url, e)
            raise OwnershipLookupError(API_FAILURE) from e

        if not resp.ok:
            _LOG.warning("key registry GET %s returned %s", url, resp.status_code)
            raise OwnershipLookupError(API_FAILURE)

        try:
            data = resp.json()
        except ValueError as e:
            _LOG.warning("key registry GET %s returned invalid JSON: %s", url, e)
            raise OwnershipLookupError(API_FAILURE) from e

        account_ids = data.get("account_ids") if isinstance(data, dict) else None
        if not isinstance(account_ids, list):
            _LOG.warning("key registry GET %s returned unexpected body", url)
            raise OwnershipLookupError(API_FAILURE)

        if account_id not in account_ids:
            raise KeyNotAssociated(NOT_ASSOCIATED)
        _LOG.debug("key %s confirmed for %s", public_key, account_id)
