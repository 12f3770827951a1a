"""Trade pipeline: credentials -> market data -> price -> order -> submission."""

from __future__ import annotations

from typing import Any

import structlog

from clobrelay.clob.credentials import CredentialCache
from clobrelay.config.settings import Settings
from clobrelay.errors import MarketDataError
from clobrelay.execution.engine import SubmissionEngine, is_retryable
from clobrelay.execution.pricing import FALLBACK_PRICE, normalize_token_id, round_to_tick
from clobrelay.execution.retry import RetryPolicy
from clobrelay.models.order import OrderArgs, Side
from clobrelay.models.trade import SubmissionResult, TradeParameters

log = structlog.get_logger(__name__)


class TradeExecutor:
    """Runs one TradeParameters through the full build-sign-submit pipeline."""

    def __init__(
        self,
        settings: Settings,
        credentials: CredentialCache,
        engine: SubmissionEngine | None = None,
    ):
        self.settings = settings
        self.credentials = credentials
        self.engine = engine or SubmissionEngine(
            RetryPolicy(
                max_attempts=settings.max_attempts,
                delay_sec=settings.retry_delay_sec,
                retryable=is_retryable,
            )
        )

    def effective_size(self, quantity: float) -> float:
        """Apply the venue minimum, then round to cents of a share."""
        return round(max(self.settings.min_size, quantity), 2)

    async def _tick_size(self, client: Any, token_id: str) -> float:
        try:
            return await client.get_tick_size(token_id)
        except MarketDataError as e:
            log.warning("tick_size_fallback", token_id=token_id, error=str(e))
            return self.settings.default_tick_size

    async def _reference_price(self, client: Any, token_id: str, requested: float | None) -> float:
        if requested is not None:
            return requested
        try:
            return await client.get_midpoint(token_id)
        except MarketDataError as e:
            log.warning("midpoint_fallback", token_id=token_id, error=str(e))
            return FALLBACK_PRICE

    async def execute(self, params: TradeParameters) -> SubmissionResult:
        client = await self.credentials.get_authed_client()
        token_id = normalize_token_id(params.token_id)
        size = self.effective_size(params.quantity)

        tick_size = await self._tick_size(client, token_id)
        price = await self._reference_price(client, token_id, params.price)
        final_price = round_to_tick(price, tick_size)

        args = OrderArgs(
            token_id=token_id,
            price=final_price,
            size=size,
            side=Side.parse(params.side),
            order_type=params.order_type,
        )
        log.info(
            "trade_started",
            token_id=token_id,
            side=args.side.value,
            size=size,
            price=final_price,
            tick_size=tick_size,
            order_type=args.order_type.value,
        )
        return await self.engine.submit(args, client, tick_size)

    async def execute_payload(self, raw: dict[str, Any]) -> SubmissionResult:
        """Validate an inbound body, then execute it. Raises ValidationError on bad input."""
        return await self.execute(TradeParameters.from_payload(raw))
