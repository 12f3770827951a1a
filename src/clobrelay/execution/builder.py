"""Order construction: fixed-point amounts, salt, expiration, fee rate, signature."""

from __future__ import annotations

import secrets
import time
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Callable

import structlog
from pydantic import BaseModel

from clobrelay.execution.pricing import normalize_token_id
from clobrelay.models.order import (
    ZERO_ADDRESS,
    OrderArgs,
    OrderType,
    Side,
    SignatureType,
    SignedOrder,
)
from clobrelay.signing.eip712 import OrderDomain, sign_order
from clobrelay.signing.identity import Identity

log = structlog.get_logger(__name__)

# Collateral and outcome tokens both use 6 decimals on the venue.
AMOUNT_DECIMALS = 6
_SCALE = Decimal(10) ** AMOUNT_DECIMALS
_SALT_BITS = 53


def to_fixed_point(value: Decimal) -> int:
    """Scale to 6-decimal integer units, always flooring."""
    return int((value * _SCALE).to_integral_value(rounding=ROUND_FLOOR))


def compute_amounts(side: Side, size: float, price: float) -> tuple[int, int]:
    """Return (maker_amount, taker_amount).

    BUY pays collateral (size * price) for shares; SELL pays shares for collateral.
    """
    d_size = Decimal(str(size))
    d_price = Decimal(str(price))
    shares = to_fixed_point(d_size)
    collateral = to_fixed_point(d_size * d_price)
    if side is Side.BUY:
        return collateral, shares
    return shares, collateral


class PreparedOrder(BaseModel):
    """Signed order plus the execution type it is posted with."""

    order: SignedOrder
    order_type: OrderType

    def envelope(self, owner: str) -> dict[str, Any]:
        """POST /order body."""
        return {
            "order": self.order.to_payload(),
            "owner": owner,
            "orderType": self.order_type.value,
        }


class OrderBuilder:
    """Builds and signs orders for one identity/funder pair."""

    def __init__(
        self,
        identity: Identity,
        domain: OrderDomain,
        *,
        funder: str | None = None,
        signature_type: SignatureType = SignatureType.EOA,
        fee_rate_bps: int = 0,
        expiration_sec: int = 300,
        nonce: int = 0,
        clock: Callable[[], float] = time.time,
    ):
        self.identity = identity
        self.domain = domain
        self.funder = funder or identity.address
        self.signature_type = signature_type
        self.fee_rate_bps = fee_rate_bps
        self.expiration_sec = expiration_sec
        self.nonce = nonce
        self._clock = clock

    def _expiration(self) -> int:
        if self.expiration_sec <= 0:
            return 0
        return int(self._clock()) + self.expiration_sec

    def build_order(
        self,
        token_id: Any,
        side: Any,
        quantity: float,
        price: float,
        order_type: Any = None,
    ) -> PreparedOrder:
        """Construct the canonical order record and sign it."""
        parsed_side = Side.parse(side)
        maker_amount, taker_amount = compute_amounts(parsed_side, quantity, price)
        unsigned = SignedOrder(
            salt=secrets.randbits(_SALT_BITS),
            maker=self.funder,
            signer=self.identity.address,
            taker=ZERO_ADDRESS,
            token_id=normalize_token_id(token_id),
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            expiration=self._expiration(),
            nonce=self.nonce,
            fee_rate_bps=self.fee_rate_bps,
            side=parsed_side,
            signature_type=self.signature_type,
        )
        signed = sign_order(self.identity, self.domain, unsigned)
        log.debug(
            "order_built",
            token_id=signed.token_id,
            side=parsed_side.value,
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            expiration=signed.expiration,
        )
        return PreparedOrder(order=signed, order_type=OrderType.parse(order_type))

    def build(self, args: OrderArgs) -> PreparedOrder:
        return self.build_order(args.token_id, args.side, args.size, args.price, args.order_type)
