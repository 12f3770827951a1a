"""Tick rounding and token id normalization."""

import math

import pytest

from clobrelay.errors import ValidationError
from clobrelay.execution.pricing import normalize_token_id, round_to_tick

TICKS = [0.1, 0.05, 0.01, 0.001, 0.0001, 0.25]
PRICES = [-1.0, 0.0, 0.0001, 0.004, 0.0149, 0.015, 0.333, 0.5, 0.6666, 0.97, 0.9951, 0.999, 1.0, 1.7]


@pytest.mark.parametrize("tick", TICKS)
def test_round_to_tick_stays_on_grid_and_in_bounds(tick):
    for price in PRICES:
        r = round_to_tick(price, tick)
        assert tick - 1e-9 <= r <= 1 - tick + 1e-9, (price, tick, r)
        steps = round(r / tick)
        assert abs(steps * tick - r) < 1e-6, (price, tick, r)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "abc", None])
def test_round_to_tick_non_finite_price_is_half(bad):
    assert round_to_tick(bad, 0.01) == 0.5
    assert round_to_tick(bad, 0.001) == 0.5


def test_round_to_tick_clamps_to_edges():
    assert round_to_tick(0.0, 0.01) == 0.01
    assert round_to_tick(0.999, 0.01) == 0.99
    assert round_to_tick(1.5, 0.001) == 0.999


def test_round_to_tick_keeps_valid_price():
    assert round_to_tick(0.97, 0.01) == 0.97
    assert round_to_tick(0.123, 0.001) == 0.123


def test_round_to_tick_ties_round_away_from_zero():
    # 0.15625 is exactly 2.5 ticks of 0.0625
    assert round_to_tick(0.15625, 0.0625) == 0.1875
    assert round_to_tick(0.09375, 0.0625) == 0.125


def test_round_to_tick_bad_tick_uses_default():
    assert round_to_tick(0.123, 0) == 0.12
    assert round_to_tick(0.127, "nope") == 0.13


def test_normalize_token_id_hex_to_decimal():
    assert normalize_token_id("0xff") == "255"
    assert normalize_token_id("  0x0ABC ") == str(0xABC)


def test_normalize_token_id_is_idempotent():
    hex_id = "0x" + "ab" * 32
    once = normalize_token_id(hex_id)
    assert once == str(int(hex_id, 16))
    assert normalize_token_id(hex_id) == once
    assert normalize_token_id(once) == once
    assert normalize_token_id("12345") == "12345"
    assert normalize_token_id("") == ""


@pytest.mark.parametrize("token_id", ["0xg1", "0x", "abc", "1e5"])
def test_normalize_token_id_rejects_non_integers(token_id):
    with pytest.raises(ValidationError):
        normalize_token_id(token_id)
