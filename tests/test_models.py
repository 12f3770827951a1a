"""Inbound request parsing and result serialization."""

import pytest

from clobrelay.api.routing import parse_order_request
from clobrelay.errors import ValidationError
from clobrelay.models import (
    OrderType,
    PassThroughOrder,
    Side,
    SubmissionResult,
    TradeParameters,
    extract_order_id,
)
from clobrelay.models.trade import MISSING_FIELDS_ERROR, format_tick


@pytest.mark.parametrize(
    "body",
    [
        {"side": "BUY", "amount": 5},
        {"tokenId": "123", "amount": 5},
        {"tokenId": "123", "side": "BUY"},
        {"tokenId": "", "side": "BUY", "amount": 5},
        {"tokenId": "123", "side": "BUY", "amount": 0},
        {},
    ],
)
def test_missing_fields(body):
    with pytest.raises(ValidationError) as exc:
        TradeParameters.from_payload(body)
    assert str(exc.value) == MISSING_FIELDS_ERROR == "Missing: tokenId, side, amount/size"
    assert exc.value.status_code == 400


@pytest.mark.parametrize("amount", ["abc", -3, "-1"])
def test_invalid_quantity(amount):
    with pytest.raises(ValidationError, match="Invalid amount/size"):
        TradeParameters.from_payload({"tokenId": "1", "side": "SELL", "amount": amount})


def test_size_alias_and_defaults():
    params = TradeParameters.from_payload({"tokenId": " 77 ", "side": "sell", "size": "7.5"})
    assert params.token_id == "77"
    assert params.quantity == 7.5
    assert params.price is None
    assert params.order_type is OrderType.FAK


@pytest.mark.parametrize("price,expected", [(0.42, 0.42), ("0.3", 0.3), (0, None), (1, None), (1.2, None), ("x", None)])
def test_price_outside_open_interval_is_unset(price, expected):
    params = TradeParameters.from_payload({"tokenId": "1", "side": "BUY", "amount": 5, "price": price})
    assert params.price == expected


def test_order_type_and_side_parsing():
    assert OrderType.parse("fok") is OrderType.FOK
    assert OrderType.parse("GTC") is OrderType.FAK
    assert OrderType.parse(None) is OrderType.FAK
    assert Side.parse("buy") is Side.BUY
    assert Side.parse("Sell") is Side.SELL
    assert Side.parse("hold") is Side.SELL
    assert Side.parse(Side.BUY) is Side.BUY


def test_parse_order_request_variants():
    passthrough = parse_order_request({"order": {"salt": 1}, "headers": {"POLY_API_KEY": "k"}})
    assert isinstance(passthrough, PassThroughOrder)
    alias = parse_order_request({"order": {"salt": 1}, "polyHeaders": {"POLY_API_KEY": "k"}})
    assert isinstance(alias, PassThroughOrder)
    trade = parse_order_request({"order": {"salt": 1}, "tokenId": "1", "side": "BUY", "amount": 5})
    assert isinstance(trade, TradeParameters)
    with pytest.raises(ValidationError):
        parse_order_request({"order": {"salt": 1}})


def test_extract_order_id_spellings():
    assert extract_order_id({"orderID": "a"}) == "a"
    assert extract_order_id({"order_id": "b"}) == "b"
    assert extract_order_id({"success": True}) is None
    assert extract_order_id(None) is None


def test_submission_result_bodies():
    ok = SubmissionResult(
        success=True, submitted=True, order_id="x", data={"success": True}, final_price=0.97, tick_size=0.01, attempt=2
    ).to_body()
    assert ok == {
        "success": True,
        "submitted": True,
        "orderID": "x",
        "data": {"success": True},
        "finalPrice": 0.97,
        "tickSize": "0.01",
        "attempt": 2,
    }
    failed = SubmissionResult(
        success=False, submitted=False, final_price=0.5, tick_size=0.001, error="not enough balance"
    ).to_body()
    assert failed == {
        "success": False,
        "submitted": False,
        "error": "not enough balance",
        "finalPrice": 0.5,
        "tickSize": "0.001",
    }


def test_format_tick():
    assert format_tick(0.01) == "0.01"
    assert format_tick(0.1) == "0.1"
    assert format_tick(0.0001) == "0.0001"


@pytest.mark.parametrize("token_id", ["0xZZ", "0x", "not-a-number", "12.5", "-7", "１２"])
def test_invalid_token_id(token_id):
    with pytest.raises(ValidationError, match="Invalid tokenId"):
        TradeParameters.from_payload({"tokenId": token_id, "side": "BUY", "amount": 5})


def test_hex_token_id_is_stored_as_decimal():
    params = TradeParameters.from_payload({"tokenId": "0xff", "side": "BUY", "amount": 5})
    assert params.token_id == "255"
    assert TradeParameters.from_payload({"tokenId": 42, "side": "BUY", "amount": 5}).token_id == "42"
