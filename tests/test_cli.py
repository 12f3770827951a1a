"""CLI wiring."""

import json

from typer.testing import CliRunner

from clobrelay.cli import trade as trade_cmd
from clobrelay.cli.app import app

from conftest import API_SECRET, PRIVATE_KEY, FakeVenue

runner = CliRunner()


def test_trade_without_key_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.delenv("POLYMARKET_PRIVATE_KEY", raising=False)
    result = runner.invoke(app, ["-C", str(tmp_path), "trade", "0xabc", "BUY", "3", "--price", "0.5"])
    assert result.exit_code == 1
    assert "POLYMARKET_PRIVATE_KEY not set" in result.output


def test_trade_validation_error(tmp_path, monkeypatch):
    monkeypatch.setenv("POLYMARKET_PRIVATE_KEY", "0x" + "11" * 32)
    result = runner.invoke(app, ["-C", str(tmp_path), "trade", "1", "BUY", "0"])
    assert result.exit_code == 1
    assert json.loads(result.output.strip().splitlines()[-1])["error"] == "Missing: tokenId, side, amount/size"


def test_creds_asks_venue_even_with_static_creds(tmp_path, monkeypatch):
    venue = FakeVenue()
    monkeypatch.setenv("POLYMARKET_PRIVATE_KEY", PRIVATE_KEY)
    monkeypatch.setenv("POLYMARKET_API_KEY", "static-key")
    monkeypatch.setenv("POLYMARKET_API_SECRET", API_SECRET)
    monkeypatch.setenv("POLYMARKET_PASSPHRASE", "static-pass")
    monkeypatch.setattr(trade_cmd, "_http_client", lambda settings: venue.client())
    result = runner.invoke(app, ["-C", str(tmp_path), "creds"])
    assert result.exit_code == 0
    assert "POLYMARKET_API_KEY=derived-key" in result.output
    assert "POLYMARKET_PASSPHRASE=derived-pass" not in result.output
    assert venue.paths() == ["/auth/derive-api-key"]
