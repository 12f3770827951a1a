"""Shared fixtures: test identity, settings builder, fake CLOB venue."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from clobrelay.config.settings import Settings

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
API_SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="
PROXY_ADDRESS = "0x1111111111111111111111111111111111111111"
CLOB_HOST = "https://clob.test"


def make_settings(**sections: dict[str, Any]) -> Settings:
    """Settings with a key configured and fast retries; sections deep-override the defaults."""
    raw: dict[str, Any] = {
        "server": {},
        "polymarket": {"clob_host": CLOB_HOST, "private_key": PRIVATE_KEY},
        "orders": {},
        "retry": {"max_attempts": 3, "delay_sec": 0.0},
        "logging": {},
    }
    for name, values in sections.items():
        raw.setdefault(name, {}).update(values)
    return Settings.from_dict(raw)


class FakeVenue:
    """Routes httpx requests to canned CLOB responses and records them."""

    def __init__(
        self,
        *,
        tick_size: Any = "0.01",
        midpoint: Any = "0.5",
        post_responses: list[tuple[int, Any]] | None = None,
        derive_status: int = 200,
        create_status: int = 200,
    ):
        self.tick_size = tick_size
        self.midpoint = midpoint
        self.post_responses = list(post_responses or [(200, {"success": True, "orderID": "0xabc"})])
        self.derive_status = derive_status
        self.create_status = create_status
        self.requests: list[httpx.Request] = []
        self.extra_routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def posted_orders(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path == "/order"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.extra_routes:
            return self.extra_routes[path](request)
        creds = {"apiKey": "derived-key", "secret": API_SECRET, "passphrase": "derived-pass"}
        if path == "/auth/derive-api-key":
            if self.derive_status != 200:
                return httpx.Response(self.derive_status, json={"error": "Could not derive api key!"})
            return httpx.Response(200, json=creds)
        if path == "/auth/api-key":
            if self.create_status != 200:
                return httpx.Response(self.create_status, json={"error": "Could not create api key"})
            return httpx.Response(200, json={**creds, "apiKey": "created-key"})
        if path == "/tick-size":
            if self.tick_size is None:
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json={"minimum_tick_size": self.tick_size})
        if path == "/midpoint":
            if self.midpoint is None:
                return httpx.Response(404, json={"error": "No orderbook exists"})
            return httpx.Response(200, json={"mid": self.midpoint})
        if path == "/order":
            status, body = self.post_responses.pop(0) if len(self.post_responses) > 1 else self.post_responses[0]
            if isinstance(body, Exception):
                raise body
            return httpx.Response(status, json=body)
        return httpx.Response(404, json={"error": f"no route {path}"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def venue() -> FakeVenue:
    return FakeVenue()
