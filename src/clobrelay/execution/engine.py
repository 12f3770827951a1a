"""Submission engine - create, sign, post, classify, retry."""

from __future__ import annotations

from typing import Any, Protocol

import structlog

from clobrelay.errors import ConfigurationError, SubmissionError, ValidationError
from clobrelay.execution.builder import PreparedOrder
from clobrelay.execution.retry import RetryPolicy
from clobrelay.models.order import OrderArgs
from clobrelay.models.trade import SubmissionResult, extract_order_id

log = structlog.get_logger(__name__)

DEFAULT_REJECTION = "Order rejected"


class OrderVenue(Protocol):
    """What the engine needs from an authenticated client."""

    def create_order(self, args: OrderArgs) -> PreparedOrder: ...

    async def post_order(self, prepared: PreparedOrder) -> dict[str, Any]: ...


def rejection_message(result: dict[str, Any] | None) -> str:
    if isinstance(result, dict):
        return str(result.get("error") or result.get("errorMsg") or DEFAULT_REJECTION)
    return DEFAULT_REJECTION


def is_retryable(exc: BaseException) -> bool:
    """Configuration and input problems will fail the same way every time."""
    return not isinstance(exc, (ConfigurationError, ValidationError))


class SubmissionEngine:
    """Posts an order under a bounded retry policy (3 attempts, 400ms apart by default)."""

    def __init__(self, policy: RetryPolicy | None = None):
        self.policy = policy or RetryPolicy(retryable=is_retryable)

    async def submit(self, args: OrderArgs, client: OrderVenue, tick_size: float) -> SubmissionResult:
        async def attempt(n: int) -> dict[str, Any]:
            prepared = client.create_order(args)
            result = await client.post_order(prepared)
            if not isinstance(result, dict):
                raise SubmissionError(f"Unexpected venue response: {result!r}")
            return result

        def on_reject(n: int, result: dict[str, Any] | None, error: BaseException | None) -> None:
            message = str(error) if error is not None else rejection_message(result)
            log.warning("trade_attempt_failed", attempt=n, token_id=args.token_id, error=message)

        outcome = await self.policy.run(attempt, lambda r: bool(r.get("success")), on_reject)

        if outcome.succeeded:
            result = outcome.result or {}
            order_id = extract_order_id(result)
            log.info("trade_submitted", order_id=order_id, attempt=outcome.attempt, price=args.price)
            return SubmissionResult(
                success=True,
                submitted=True,
                order_id=order_id,
                data=result,
                final_price=args.price,
                tick_size=tick_size,
                attempt=outcome.attempt,
            )

        if outcome.error is not None:
            error = str(outcome.error) or type(outcome.error).__name__
        else:
            error = rejection_message(outcome.result)
        log.warning("trade_failed", token_id=args.token_id, attempts=outcome.attempt, error=error)
        return SubmissionResult(
            success=False,
            submitted=False,
            final_price=args.price,
            tick_size=tick_size,
            error=error,
        )
