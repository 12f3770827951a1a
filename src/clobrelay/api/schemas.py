"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"
    ts: int = Field(..., description="Server time, ms epoch")
    hasWallet: bool
    hasProxy: bool
    hasL2Creds: bool


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable message")


# --- Trade ---
class TradeRequest(BaseModel):
    tokenId: str = Field(..., description="Token id, decimal or 0x-hex")
    side: str = Field(..., description="BUY or SELL (case-insensitive)")
    amount: float | str | None = None
    size: float | str | None = Field(None, description="Alias of amount")
    price: float | str | None = Field(None, description="Limit price in (0, 1); midpoint if absent")
    orderType: str | None = Field(None, description="FAK (default) or FOK")


class TradeResponse(BaseModel):
    success: bool
    submitted: bool
    orderID: str | None = None
    data: dict[str, Any] | None = None
    finalPrice: float | None = None
    tickSize: str | None = None
    attempt: int | None = None
    error: str | None = None


# --- Pass-through order ---
class ForwardedOrderResponse(BaseModel):
    success: bool
    status: int
    data: Any = None
    orderID: str | None = None


# --- Generic proxy ---
class ProxyRequest(BaseModel):
    url: str
    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class ProxyResponse(BaseModel):
    success: bool
    status: int
    data: Any = None
