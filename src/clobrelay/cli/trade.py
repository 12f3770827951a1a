"""One-off trade and credential commands that bypass the HTTP server."""

from __future__ import annotations

import asyncio
import json

import httpx
import typer

from clobrelay.clob.credentials import CredentialCache
from clobrelay.config.settings import Settings
from clobrelay.errors import RelayError
from clobrelay.execution.pipeline import TradeExecutor
from clobrelay.models.credentials import ApiCreds
from clobrelay.models.trade import SubmissionResult


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


def _http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.http_timeout_sec)


async def _execute(settings: Settings, payload: dict) -> SubmissionResult:
    async with _http_client(settings) as http:
        executor = TradeExecutor(settings, CredentialCache(settings, http))
        return await executor.execute_payload(payload)


async def _derive(settings: Settings) -> ApiCreds:
    async with _http_client(settings) as http:
        return await CredentialCache(settings, http).derive_credentials()


def trade(
    ctx: typer.Context,
    token_id: str = typer.Argument(..., help="Token id, decimal or 0x-hex"),
    side: str = typer.Argument(..., help="BUY or SELL"),
    size: float = typer.Argument(..., help="Shares; floored up to the venue minimum"),
    price: float | None = typer.Option(None, "--price", help="Limit price in (0, 1); midpoint if omitted"),
    order_type: str = typer.Option("FAK", "--order-type", "-t", help="FAK or FOK"),
) -> None:
    """Build, sign and submit one order, then print the result as JSON."""
    settings = ctx.obj["settings"]
    payload = {"tokenId": token_id, "side": side, "size": size, "price": price, "orderType": order_type}
    try:
        result = asyncio.run(_execute(settings, payload))
    except RelayError as e:
        typer.echo(json.dumps({"success": False, "submitted": False, "error": e.message}), err=True)
        raise typer.Exit(code=1) from e
    typer.echo(json.dumps(result.to_body(), indent=2))
    if not result.success:
        raise typer.Exit(code=1)


def creds(
    ctx: typer.Context,
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Print secret and passphrase unmasked"),
) -> None:
    """Derive (or create) API credentials for the configured key and print them.

    Always asks the venue; POLYMARKET_API_* values in the environment are not consulted.
    """
    settings = ctx.obj["settings"]
    try:
        api_creds = asyncio.run(_derive(settings))
    except (RelayError, httpx.HTTPError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    secret = api_creds.api_secret if show_secrets else _mask(api_creds.api_secret)
    passphrase = api_creds.api_passphrase if show_secrets else _mask(api_creds.api_passphrase)
    typer.echo(f"POLYMARKET_API_KEY={api_creds.api_key}")
    typer.echo(f"POLYMARKET_API_SECRET={secret}")
    typer.echo(f"POLYMARKET_PASSPHRASE={passphrase}")
