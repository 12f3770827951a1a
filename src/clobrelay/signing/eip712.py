"""EIP-712 typed data for CLOB orders and L1 auth, plus L1/L2 request headers.

Order signatures bind every field of the Order struct and the domain. Change
any field and the order must be signed again.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from clobrelay.models.credentials import ApiCreds
from clobrelay.models.order import SignedOrder
from clobrelay.signing.identity import Identity

CLOB_AUTH_DOMAIN_NAME = "ClobAuthDomain"
CLOB_AUTH_MESSAGE = "This message attests that I control the given wallet"

ORDER_TYPES = [
    {"name": "salt", "type": "uint256"},
    {"name": "maker", "type": "address"},
    {"name": "signer", "type": "address"},
    {"name": "taker", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "makerAmount", "type": "uint256"},
    {"name": "takerAmount", "type": "uint256"},
    {"name": "expiration", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "feeRateBps", "type": "uint256"},
    {"name": "side", "type": "uint8"},
    {"name": "signatureType", "type": "uint8"},
]

CLOB_AUTH_TYPES = [
    {"name": "address", "type": "address"},
    {"name": "timestamp", "type": "string"},
    {"name": "nonce", "type": "uint256"},
    {"name": "message", "type": "string"},
]


@dataclass(frozen=True)
class OrderDomain:
    """Domain descriptor of the exchange contract that verifies orders."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str | None = None

    def types(self) -> list[dict[str, str]]:
        fields = [
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
        ]
        if self.verifying_contract:
            fields.append({"name": "verifyingContract", "type": "address"})
        return fields

    def as_dict(self) -> dict[str, Any]:
        domain: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "chainId": int(self.chain_id),
        }
        if self.verifying_contract:
            domain["verifyingContract"] = self.verifying_contract
        return domain


def order_typed_data(domain: OrderDomain, order: SignedOrder) -> dict[str, Any]:
    return {
        "types": {"EIP712Domain": domain.types(), "Order": ORDER_TYPES},
        "primaryType": "Order",
        "domain": domain.as_dict(),
        "message": order.struct_message(),
    }


def sign_order(identity: Identity, domain: OrderDomain, order: SignedOrder) -> SignedOrder:
    """Return a copy of order carrying a fresh signature over all of its fields."""
    signature = identity.sign_typed_data(order_typed_data(domain, order))
    return order.model_copy(update={"signature": signature})


def recover_order_signer(domain: OrderDomain, order: SignedOrder) -> str:
    """Address that produced order.signature for exactly these fields and domain."""
    signable = encode_typed_data(full_message=order_typed_data(domain, order))
    return Account.recover_message(signable, signature=order.signature)


def sign_clob_auth(identity: Identity, chain_id: int, timestamp: int, nonce: int = 0) -> str:
    """L1 proof of key ownership used to derive or create API credentials."""
    typed = {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
            ],
            "ClobAuth": CLOB_AUTH_TYPES,
        },
        "primaryType": "ClobAuth",
        "domain": {"name": CLOB_AUTH_DOMAIN_NAME, "version": "1", "chainId": int(chain_id)},
        "message": {
            "address": identity.address,
            "timestamp": str(timestamp),
            "nonce": int(nonce),
            "message": CLOB_AUTH_MESSAGE,
        },
    }
    return identity.sign_typed_data(typed)


def build_l1_headers(
    identity: Identity, chain_id: int, nonce: int = 0, timestamp: int | None = None
) -> dict[str, str]:
    ts = int(time.time()) if timestamp is None else timestamp
    return {
        "POLY_ADDRESS": identity.address,
        "POLY_SIGNATURE": sign_clob_auth(identity, chain_id, ts, nonce),
        "POLY_TIMESTAMP": str(ts),
        "POLY_NONCE": str(nonce),
    }


def hmac_signature(secret: str, timestamp: int, method: str, path: str, body: str = "") -> str:
    """url-safe base64 HMAC-SHA256 of timestamp + METHOD + path + body."""
    key = base64.urlsafe_b64decode(secret + "=" * (-len(secret) % 4))
    message = f"{timestamp}{method.upper()}{path}{body}"
    digest = hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8")


def build_l2_headers(
    identity: Identity,
    creds: ApiCreds,
    method: str,
    path: str,
    body: str = "",
    timestamp: int | None = None,
) -> dict[str, str]:
    ts = int(time.time()) if timestamp is None else timestamp
    return {
        "POLY_ADDRESS": identity.address,
        "POLY_SIGNATURE": hmac_signature(creds.api_secret, ts, method, path, body),
        "POLY_TIMESTAMP": str(ts),
        "POLY_API_KEY": creds.api_key,
        "POLY_PASSPHRASE": creds.api_passphrase,
    }


def dump_body(body: Any) -> str:
    """Serialize a request body once so the HMAC covers the exact bytes sent."""
    return json.dumps(body, separators=(",", ":"))
