"""Retry policy and submission engine state machine."""

import asyncio

import pytest

from clobrelay.errors import ConfigurationError
from clobrelay.execution.engine import SubmissionEngine, is_retryable
from clobrelay.execution.retry import RetryPolicy
from clobrelay.models.order import OrderArgs, OrderType, Side


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class ScriptedVenue:
    """Returns (or raises) scripted post results, one per attempt."""

    def __init__(self, script):
        self.script = list(script)
        self.created = 0
        self.posted = 0

    def create_order(self, args):
        self.created += 1
        return ("prepared", self.created)

    async def post_order(self, prepared):
        self.posted += 1
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


ARGS = OrderArgs(token_id="255", price=0.97, size=5.0, side=Side.BUY, order_type=OrderType.FAK)


def _engine(sleep):
    return SubmissionEngine(RetryPolicy(max_attempts=3, delay_sec=0.4, retryable=is_retryable, sleep=sleep))


def test_persistent_rejection_tries_three_times_and_sleeps_twice():
    sleep = RecordingSleep()
    venue = ScriptedVenue([{"success": False, "errorMsg": "no match"}] * 3)
    result = asyncio.run(_engine(sleep).submit(ARGS, venue, 0.01))
    assert venue.created == 3 and venue.posted == 3
    assert sleep.calls == [0.4, 0.4]
    assert result.success is False and result.submitted is False
    assert result.error == "no match"
    assert result.final_price == 0.97
    assert result.tick_size == 0.01
    assert result.attempt is None


def test_success_reports_first_successful_attempt():
    sleep = RecordingSleep()
    venue = ScriptedVenue([{"success": False}, {"success": True, "order_id": "0xdead"}])
    result = asyncio.run(_engine(sleep).submit(ARGS, venue, 0.01))
    assert result.success and result.submitted
    assert result.attempt == 2
    assert result.order_id == "0xdead"
    assert result.to_body()["orderID"] == "0xdead"
    assert "order_id" not in result.to_body()
    assert sleep.calls == [0.4]
    assert venue.posted == 2


def test_first_attempt_success_does_not_sleep():
    sleep = RecordingSleep()
    venue = ScriptedVenue([{"success": True, "orderID": "a"}])
    result = asyncio.run(_engine(sleep).submit(ARGS, venue, 0.01))
    assert result.attempt == 1
    assert sleep.calls == []


def test_transport_errors_are_retried_and_last_message_kept():
    sleep = RecordingSleep()
    venue = ScriptedVenue([RuntimeError("timeout"), {"success": False, "error": "bad"}, RuntimeError("reset")])
    result = asyncio.run(_engine(sleep).submit(ARGS, venue, 0.001))
    assert venue.posted == 3
    assert result.error == "reset"
    assert result.to_body()["tickSize"] == "0.001"


def test_rejection_without_message_uses_default():
    venue = ScriptedVenue([{"success": False}] * 3)
    result = asyncio.run(_engine(RecordingSleep()).submit(ARGS, venue, 0.01))
    assert result.error == "Order rejected"


def test_configuration_error_is_not_retried():
    sleep = RecordingSleep()
    venue = ScriptedVenue([ConfigurationError("API credentials not set on client")])
    with pytest.raises(ConfigurationError):
        asyncio.run(_engine(sleep).submit(ARGS, venue, 0.01))
    assert venue.posted == 1
    assert sleep.calls == []


def test_retry_policy_standalone():
    sleep = RecordingSleep()
    seen = []

    async def attempt(n):
        seen.append(n)
        return n

    outcome = asyncio.run(RetryPolicy(max_attempts=4, delay_sec=0.1, sleep=sleep).run(attempt, lambda r: r == 3))
    assert outcome.succeeded and outcome.attempt == 3 and outcome.result == 3
    assert seen == [1, 2, 3]
    assert sleep.calls == [0.1, 0.1]


def test_retry_policy_rejects_bad_config():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
    with pytest.raises(ValueError):
        RetryPolicy(delay_sec=-1)
