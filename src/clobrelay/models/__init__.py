"""Canonical schema (Pydantic) - credentials, orders, trade requests and results."""

from clobrelay.models.credentials import ApiCreds
from clobrelay.models.order import (
    ZERO_ADDRESS,
    OrderArgs,
    OrderType,
    Side,
    SignatureType,
    SignedOrder,
)
from clobrelay.models.trade import (
    PassThroughOrder,
    SubmissionResult,
    TradeParameters,
    extract_order_id,
)

__all__ = [
    "ApiCreds",
    "OrderArgs",
    "OrderType",
    "PassThroughOrder",
    "Side",
    "SignatureType",
    "SignedOrder",
    "SubmissionResult",
    "TradeParameters",
    "ZERO_ADDRESS",
    "extract_order_id",
]
