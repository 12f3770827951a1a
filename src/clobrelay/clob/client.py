"""Async CLOB REST client - L1 credential derivation, market data, order posting."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from clobrelay.errors import ConfigurationError, MarketDataError, RelayError
from clobrelay.execution.builder import OrderBuilder, PreparedOrder
from clobrelay.models.credentials import ApiCreds
from clobrelay.models.order import OrderArgs, SignatureType
from clobrelay.signing.eip712 import OrderDomain, build_l1_headers, build_l2_headers, dump_body
from clobrelay.signing.identity import Identity

log = structlog.get_logger(__name__)

DERIVE_API_KEY = "/auth/derive-api-key"
CREATE_API_KEY = "/auth/api-key"
TICK_SIZE = "/tick-size"
MIDPOINT = "/midpoint"
POST_ORDER = "/order"

MAX_TICK_SIZE = 0.5


def parse_json(resp: httpx.Response) -> Any:
    """Decoded JSON body, or {"raw": text} when the body is not JSON."""
    try:
        return resp.json()
    except (json.JSONDecodeError, ValueError):
        return {"raw": resp.text}


def parse_json_body(resp: httpx.Response) -> dict[str, Any]:
    data = parse_json(resp)
    return data if isinstance(data, dict) else {"data": data}


class ClobClient:
    """Handle bound to (identity, funder, signature type, creds).

    Without creds the client can sign orders and derive credentials (L1);
    with creds it can also post orders (L2).
    """

    def __init__(
        self,
        host: str,
        chain_id: int,
        identity: Identity,
        http: httpx.AsyncClient,
        *,
        creds: ApiCreds | None = None,
        signature_type: SignatureType = SignatureType.EOA,
        funder: str | None = None,
        domain: OrderDomain | None = None,
        fee_rate_bps: int = 0,
        expiration_sec: int = 300,
    ):
        self.host = host.rstrip("/")
        self.chain_id = chain_id
        self.identity = identity
        self.http = http
        self.creds = creds
        self.signature_type = signature_type
        self.funder = funder or identity.address
        self.domain = domain or OrderDomain("Polymarket CTF Exchange", "1", chain_id)
        self.builder = OrderBuilder(
            identity,
            self.domain,
            funder=self.funder,
            signature_type=signature_type,
            fee_rate_bps=fee_rate_bps,
            expiration_sec=expiration_sec,
        )

    def with_creds(self, creds: ApiCreds) -> ClobClient:
        """Same binding, authenticated with creds."""
        return ClobClient(
            self.host,
            self.chain_id,
            self.identity,
            self.http,
            creds=creds,
            signature_type=self.signature_type,
            funder=self.funder,
            domain=self.domain,
            fee_rate_bps=self.builder.fee_rate_bps,
            expiration_sec=self.builder.expiration_sec,
        )

    # --- L1: credentials ---

    async def _creds_request(self, method: str, path: str) -> ApiCreds:
        headers = build_l1_headers(self.identity, self.chain_id)
        resp = await self.http.request(method, f"{self.host}{path}", headers=headers)
        resp.raise_for_status()
        creds = ApiCreds.from_venue(parse_json_body(resp))
        if not creds.complete:
            raise RelayError(f"Incomplete API credentials from {path}")
        return creds

    async def derive_api_key(self) -> ApiCreds:
        """Fetch existing credentials. Fails if this key never registered."""
        return await self._creds_request("GET", DERIVE_API_KEY)

    async def create_api_key(self) -> ApiCreds:
        return await self._creds_request("POST", CREATE_API_KEY)

    async def create_or_derive_api_key(self) -> ApiCreds:
        """Create credentials, or derive them when creation is refused (already exist)."""
        try:
            return await self.create_api_key()
        except (httpx.HTTPError, RelayError) as e:
            log.info("create_api_key_failed", error=str(e))
            return await self.derive_api_key()

    # --- Public market data ---

    async def _get_public(self, path: str, token_id: str) -> dict[str, Any]:
        try:
            resp = await self.http.get(f"{self.host}{path}", params={"token_id": token_id})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise MarketDataError(f"{path} lookup failed for {token_id}: {e}") from e
        return parse_json_body(resp)

    async def get_tick_size(self, token_id: str) -> float:
        data = await self._get_public(TICK_SIZE, token_id)
        try:
            tick = float(data["minimum_tick_size"])
        except (KeyError, TypeError, ValueError) as e:
            raise MarketDataError(f"No tick size for {token_id}") from e
        # A tick of 0.5 or more leaves no price strictly inside [tick, 1 - tick].
        if not 0 < tick < MAX_TICK_SIZE:
            raise MarketDataError(f"Unusable tick size for {token_id}: {tick}")
        return tick

    async def get_midpoint(self, token_id: str) -> float:
        data = await self._get_public(MIDPOINT, token_id)
        try:
            return float(data["mid"])
        except (KeyError, TypeError, ValueError) as e:
            raise MarketDataError(f"No midpoint for {token_id}") from e

    # --- Orders ---

    def create_order(self, args: OrderArgs) -> PreparedOrder:
        """Build and sign a fresh order. Every call gets a new salt and signature."""
        return self.builder.build(args)

    async def post_order(self, prepared: PreparedOrder) -> dict[str, Any]:
        """POST /order with L2 auth. Returns the venue body whatever the HTTP status."""
        if self.creds is None or not self.creds.complete:
            raise ConfigurationError("API credentials not set on client")
        body = dump_body(prepared.envelope(self.creds.api_key))
        headers = build_l2_headers(self.identity, self.creds, "POST", POST_ORDER, body)
        headers["Content-Type"] = "application/json"
        resp = await self.http.post(f"{self.host}{POST_ORDER}", content=body, headers=headers)
        data = parse_json_body(resp)
        if resp.is_error and "error" not in data and "errorMsg" not in data:
            data["error"] = f"HTTP {resp.status_code}"
        return data
