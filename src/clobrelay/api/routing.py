"""Inbound request parsing into explicit variants before any pipeline logic runs."""

from __future__ import annotations

from typing import Any, Union

from clobrelay.models.trade import PassThroughOrder, TradeParameters

OrderRequest = Union[PassThroughOrder, TradeParameters]


def parse_order_request(raw: dict[str, Any]) -> OrderRequest:
    """{order, headers|polyHeaders} is a pass-through; anything else is a trade.

    Raises ValidationError when the body is a trade with missing or bad fields.
    """
    passthrough = PassThroughOrder.from_payload(raw)
    if passthrough is not None:
        return passthrough
    return TradeParameters.from_payload(raw)
