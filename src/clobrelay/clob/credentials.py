"""Credential cache - one authenticated client per (key prefix, funder, static-creds) fingerprint."""

from __future__ import annotations

import httpx
import structlog

from clobrelay.clob.client import ClobClient
from clobrelay.config.settings import Settings
from clobrelay.errors import ConfigurationError, RelayError
from clobrelay.models.credentials import ApiCreds
from clobrelay.models.order import SignatureType
from clobrelay.signing.eip712 import OrderDomain
from clobrelay.signing.identity import Identity

log = structlog.get_logger(__name__)

_KEY_PREFIX_LEN = 10


def order_domain(settings: Settings) -> OrderDomain:
    """Domain descriptor of the exchange contract orders are signed against."""
    contract: str | None = None
    if settings.include_verifying_contract:
        contract = settings.neg_risk_exchange_address if settings.neg_risk else settings.exchange_address
    return OrderDomain(
        name=settings.domain_name,
        version=settings.domain_version,
        chain_id=settings.chain_id,
        verifying_contract=contract,
    )


class CredentialCache:
    """Owns the identity and the last authenticated client built from it.

    No lock: two cold-cache trades may both derive credentials; the last write wins.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http
        self._identity: Identity | None = None
        self._client: ClobClient | None = None
        self._fingerprint: tuple[str, str, bool] | None = None

    @property
    def identity(self) -> Identity:
        if self._identity is None:
            self._identity = Identity.from_private_key(self.settings.private_key)
        return self._identity

    def _funder_and_signature_type(self) -> tuple[str, SignatureType]:
        proxy = self.settings.proxy_wallet_address
        if proxy:
            return proxy, SignatureType.POLY_GNOSIS_SAFE
        return self.identity.address, SignatureType.EOA

    def fingerprint(self) -> tuple[str, str, bool]:
        funder, _ = self._funder_and_signature_type()
        return (
            self.settings.private_key[:_KEY_PREFIX_LEN],
            funder,
            self.settings.has_static_creds,
        )

    def _base_client(self) -> ClobClient:
        funder, signature_type = self._funder_and_signature_type()
        return ClobClient(
            self.settings.clob_host,
            self.settings.chain_id,
            self.identity,
            self.http,
            signature_type=signature_type,
            funder=funder,
            domain=order_domain(self.settings),
            fee_rate_bps=self.settings.fee_rate_bps,
            expiration_sec=self.settings.expiration_sec,
        )

    async def _obtain_creds(self, base: ClobClient) -> ApiCreds:
        if self.settings.has_static_creds:
            return ApiCreds(
                api_key=self.settings.api_key,
                api_secret=self.settings.api_secret,
                api_passphrase=self.settings.api_passphrase,
            )
        return await self._derive_or_create(base)

    async def _derive_or_create(self, base: ClobClient) -> ApiCreds:
        try:
            creds = await base.derive_api_key()
            log.info("credentials_derived", address=base.identity.address)
        except (httpx.HTTPError, RelayError) as e:
            log.info("derive_api_key_failed", error=str(e))
            creds = await base.create_or_derive_api_key()
            log.info("credentials_created", address=base.identity.address)
        return creds

    async def derive_credentials(self) -> ApiCreds:
        """Ask the venue for this key's API credentials over L1 auth.

        Ignores configured static creds and leaves the cached client alone.
        """
        self._require_key()
        return await self._derive_or_create(self._base_client())

    def _require_key(self) -> None:
        if not self.settings.private_key:
            raise ConfigurationError("POLYMARKET_PRIVATE_KEY not set")

    async def get_authed_client(self) -> ClobClient:
        """Return the cached client, or build, authenticate and cache a new one."""
        self._require_key()
        fingerprint = self.fingerprint()
        if self._client is not None and self._fingerprint == fingerprint:
            return self._client

        base = self._base_client()
        creds = await self._obtain_creds(base)
        client = base.with_creds(creds)
        self._client = client
        self._fingerprint = fingerprint
        log.info(
            "authed_client_cached",
            funder=client.funder,
            signature_type=int(client.signature_type),
            static_creds=self.settings.has_static_creds,
        )
        return client
