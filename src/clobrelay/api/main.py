"""FastAPI relay: /trade, /order, /proxy, /health."""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaError

from clobrelay.api.routing import parse_order_request
from clobrelay.api.schemas import (
    ErrorResponse,
    ForwardedOrderResponse,
    HealthResponse,
    ProxyRequest,
    ProxyResponse,
    TradeRequest,
    TradeResponse,
)
from clobrelay.clob.credentials import CredentialCache
from clobrelay.clob.forward import forward_order, forward_request
from clobrelay.config import Settings, get_settings
from clobrelay.errors import RelayError, ValidationError
from clobrelay.execution.pipeline import TradeExecutor
from clobrelay.models.trade import PassThroughOrder, SubmissionResult, TradeParameters

log = structlog.get_logger(__name__)

# Set by run_api() so the app factory picks up the CLI profile.
_config_profile: str | None = None

RELAY_SECRET_HEADER = "x-relay-secret"
OPEN_PATHS = {"/health"}


@dataclass
class RelayServices:
    """Composition root: everything a request handler needs, built once per process."""

    settings: Settings
    http: httpx.AsyncClient
    credentials: CredentialCache
    executor: TradeExecutor


def build_services(
    settings: Settings, http: httpx.AsyncClient, executor: TradeExecutor | None = None
) -> RelayServices:
    credentials = CredentialCache(settings, http)
    return RelayServices(
        settings=settings,
        http=http,
        credentials=credentials,
        executor=executor or TradeExecutor(settings, credentials),
    )


def _services(request: Request) -> RelayServices:
    return request.app.state.relay


def _trade_failure(exc: Exception) -> JSONResponse:
    """{success, submitted, error} with the status the error class maps to."""
    status = exc.status_code if isinstance(exc, RelayError) else 500
    if status >= 500:
        log.error("trade_error", error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status,
        content={"success": False, "submitted": False, "error": str(exc) or type(exc).__name__},
    )


def _trade_response(result: SubmissionResult) -> JSONResponse:
    return JSONResponse(status_code=200 if result.success else 400, content=result.to_body())


async def _json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ValidationError("Invalid JSON body") from e
    return data if isinstance(data, dict) else {}


def _json_request_body(model: type) -> dict[str, Any]:
    """Document a JSON body the handler parses itself, so bad input gets our 400s instead of 422s."""
    return {"requestBody": {"content": {"application/json": {"schema": model.model_json_schema()}}}}


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    settings = _services(request).settings
    return HealthResponse(
        status="ok",
        ts=int(time.time() * 1000),
        hasWallet=bool(settings.private_key),
        hasProxy=bool(settings.proxy_wallet_address),
        hasL2Creds=settings.has_static_creds,
    )


@router.post(
    "/trade",
    response_model=TradeResponse,
    responses={400: {"model": TradeResponse}, 500: {"model": TradeResponse}},
    openapi_extra=_json_request_body(TradeRequest),
)
async def trade(request: Request) -> JSONResponse:
    """Run logical trade parameters through the build-sign-submit pipeline."""
    services = _services(request)
    try:
        params = TradeParameters.from_payload(await _json_body(request))
        result = await services.executor.execute(params)
    except Exception as e:
        return _trade_failure(e)
    return _trade_response(result)


@router.post(
    "/order",
    response_model=ForwardedOrderResponse | TradeResponse,
    responses={400: {"model": TradeResponse}, 500: {"model": TradeResponse}},
)
async def order(request: Request) -> JSONResponse:
    """Forward a pre-signed {order, headers} verbatim, or run trade parameters through the pipeline."""
    services = _services(request)
    try:
        parsed = parse_order_request(await _json_body(request))
        if isinstance(parsed, PassThroughOrder):
            status, body = await forward_order(services.http, services.settings.clob_host, parsed)
            return JSONResponse(status_code=status, content=body)
        result = await services.executor.execute(parsed)
    except Exception as e:
        return _trade_failure(e)
    return _trade_response(result)


@router.post(
    "/proxy",
    response_model=ProxyResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    openapi_extra=_json_request_body(ProxyRequest),
)
async def proxy(request: Request) -> JSONResponse:
    """Forward an arbitrary {url, method, headers, body} request."""
    services = _services(request)
    try:
        body = await _json_body(request)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    if not body.get("url"):
        return JSONResponse(status_code=400, content={"error": "Missing 'url'"})
    try:
        req = ProxyRequest.model_validate(body)
    except SchemaError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    try:
        status, content = await forward_request(
            services.http, req.url, method=req.method, headers=req.headers, body=req.body
        )
    except Exception as e:
        log.warning("proxy_error", url=body.get("url"), error=str(e))
        return JSONResponse(status_code=502, content={"error": str(e) or type(e).__name__})
    return JSONResponse(status_code=status, content=content)


def create_app(
    settings: Settings | None = None,
    http: httpx.AsyncClient | None = None,
    executor: TradeExecutor | None = None,
) -> FastAPI:
    """Build the relay app. http and executor may be injected (tests); otherwise owned by the app."""
    settings = settings or get_settings(_config_profile)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http or httpx.AsyncClient(timeout=settings.http_timeout_sec)
        app.state.relay = build_services(settings, client, executor)
        log.info(
            "relay_started",
            clob_host=settings.clob_host,
            has_wallet=bool(settings.private_key),
            has_proxy=bool(settings.proxy_wallet_address),
        )
        yield
        if http is None:
            await client.aclose()

    app = FastAPI(title="CLOB Relay", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    @app.middleware("http")
    async def require_relay_secret(request: Request, call_next):
        secret = settings.relay_secret
        if request.url.path not in OPEN_PATHS and secret:
            if request.headers.get(RELAY_SECRET_HEADER) != secret:
                return JSONResponse(status_code=401, content={"error": "Unauthorized"})
        return await call_next(request)

    app.include_router(router)
    return app


def run_api(host: str = "0.0.0.0", port: int = 3000, profile: str | None = None) -> None:
    global _config_profile
    _config_profile = profile
    import uvicorn

    uvicorn.run("clobrelay.api.main:create_app", factory=True, host=host, port=port, reload=False)
