"""TradeParameters, PassThroughOrder, SubmissionResult - inbound and outbound trade shapes."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field

from clobrelay.errors import ValidationError
from clobrelay.execution.pricing import normalize_token_id
from clobrelay.models.order import OrderType

MISSING_FIELDS_ERROR = "Missing: tokenId, side, amount/size"
INVALID_SIZE_ERROR = "Invalid amount/size"


def _present(value: Any) -> bool:
    """Truthiness as the inbound JSON contract defines it: null, "", 0 and false are absent."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (int, float)):
        return value != 0
    return True


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


class TradeParameters(BaseModel):
    """Logical trade request routed into the build-sign-submit pipeline."""

    token_id: str = Field(..., description="Decimal token id; hex input is converted on parse")
    side: str
    quantity: float = Field(..., gt=0, description="Requested size before the minimum-size floor")
    price: float | None = Field(None, gt=0, lt=1, description="None means use the market midpoint")
    order_type: OrderType = OrderType.FAK

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> TradeParameters:
        """Validate an inbound {tokenId, side, amount|size, price?, orderType?} body."""
        token_id = raw.get("tokenId")
        side = raw.get("side")
        amount = raw.get("amount")
        size = raw.get("size")
        if not _present(token_id) or not _present(side) or not (_present(amount) or _present(size)):
            raise ValidationError(MISSING_FIELDS_ERROR)

        token_id = normalize_token_id(token_id)

        quantity = _to_float(amount if _present(amount) else size)
        if not math.isfinite(quantity) or quantity <= 0:
            raise ValidationError(INVALID_SIZE_ERROR)

        price = _to_float(raw.get("price"))
        if not math.isfinite(price) or price <= 0 or price >= 1:
            price = None

        return cls(
            token_id=token_id,
            side=str(side),
            quantity=quantity,
            price=price,
            order_type=OrderType.parse(raw.get("orderType")),
        )


class PassThroughOrder(BaseModel):
    """Pre-built, pre-signed order plus the caller's venue auth headers. Forwarded verbatim."""

    order: dict[str, Any]
    headers: dict[str, str]

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> PassThroughOrder | None:
        """Return the pass-through variant, or None when the body lacks order or headers."""
        order = raw.get("order")
        headers = raw.get("headers") or raw.get("polyHeaders")
        if not order or not headers or not isinstance(order, dict) or not isinstance(headers, dict):
            return None
        return cls(order=order, headers={str(k): str(v) for k, v in headers.items()})


class SubmissionResult(BaseModel):
    """Outcome of one trade. Produced once, never persisted."""

    success: bool
    submitted: bool
    order_id: str | None = None
    data: dict[str, Any] | None = None
    final_price: float | None = None
    tick_size: float | None = None
    attempt: int | None = None
    error: str | None = None

    def to_body(self) -> dict[str, Any]:
        """Response body in the relay's camelCase wire shape."""
        body: dict[str, Any] = {"success": self.success, "submitted": self.submitted}
        if self.success:
            body["orderID"] = self.order_id
            body["data"] = self.data
        if self.error is not None:
            body["error"] = self.error
        if self.final_price is not None:
            body["finalPrice"] = self.final_price
        if self.tick_size is not None:
            body["tickSize"] = format_tick(self.tick_size)
        if self.attempt is not None:
            body["attempt"] = self.attempt
        return body


def format_tick(tick: float) -> str:
    """Render a tick size the way the venue does: 0.01, 0.001, 0.1."""
    text = f"{tick:.6f}".rstrip("0").rstrip(".")
    return text or "0"


def extract_order_id(result: dict[str, Any] | None) -> str | None:
    """Venue responses spell the identifier orderID or order_id."""
    if not isinstance(result, dict):
        return None
    value = result.get("orderID") or result.get("order_id")
    return str(value) if value else None
