"""Verbatim forwarding: pre-signed orders to the venue, and arbitrary proxied requests."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from clobrelay.clob.client import POST_ORDER, parse_json
from clobrelay.models.trade import PassThroughOrder, extract_order_id

log = structlog.get_logger(__name__)


async def forward_order(
    http: httpx.AsyncClient, host: str, request: PassThroughOrder
) -> tuple[int, dict[str, Any]]:
    """Post a caller-built order with the caller's headers. No building or signing here.

    data is the venue's decoded body as-is, object or not.
    """
    headers = {"Content-Type": "application/json", **request.headers}
    resp = await http.post(
        f"{host.rstrip('/')}{POST_ORDER}",
        content=json.dumps(request.order),
        headers=headers,
    )
    data = parse_json(resp)
    order_id = extract_order_id(data) if isinstance(data, dict) else None
    log.info("order_forwarded", status=resp.status_code, order_id=order_id)
    return resp.status_code, {
        "success": resp.is_success,
        "status": resp.status_code,
        "data": data,
        "orderID": order_id,
    }


async def forward_request(
    http: httpx.AsyncClient,
    url: str,
    method: str = "POST",
    headers: dict[str, str] | None = None,
    body: Any = None,
) -> tuple[int, dict[str, Any]]:
    """Generic pass-through: any URL, method, headers and body."""
    merged = {"Content-Type": "application/json", **(headers or {})}
    content: str | None = None
    if body:
        content = body if isinstance(body, str) else json.dumps(body)
    resp = await http.request(method.upper(), url, headers=merged, content=content)
    log.debug("request_proxied", url=url, method=method, status=resp.status_code)
    return resp.status_code, {
        "success": resp.is_success,
        "status": resp.status_code,
        "data": parse_json(resp),
    }
