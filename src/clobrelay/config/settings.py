"""TOML config loading, environment overrides and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

# Environment variable -> (section, key). Secrets live here rather than in TOML.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "POLYMARKET_PRIVATE_KEY": ("polymarket", "private_key"),
    "PROXY_WALLET_ADDRESS": ("polymarket", "proxy_wallet_address"),
    "POLYMARKET_API_KEY": ("polymarket", "api_key"),
    "POLYMARKET_API_SECRET": ("polymarket", "api_secret"),
    "POLYMARKET_PASSPHRASE": ("polymarket", "api_passphrase"),
    "CLOB_HOST": ("polymarket", "clob_host"),
    "RELAY_SECRET": ("server", "relay_secret"),
    "PORT": ("server", "port"),
}

CTF_EXCHANGE_ADDRESS = "0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E"
NEG_RISK_CTF_EXCHANGE_ADDRESS = "0xC5d563A36AE78145C45a50134d48A1215220f80a"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def _env_overlay(environ: Mapping[str, str]) -> dict[str, Any]:
    """Build a config overlay from non-empty environment variables."""
    overlay: dict[str, Any] = {}
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var, "")
        if value:
            overlay.setdefault(section, {})[key] = value
    return overlay


def load_config(
    profile: str | None = None,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load merged config: default.toml, optional profile overlay, then environment."""
    config_dir = config_dir or _find_config_dir()
    base: dict[str, Any] = {}
    default_path = config_dir / "default.toml"
    if default_path.exists():
        base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    env = os.environ if environ is None else environ
    return _deep_merge(base, _env_overlay(env))


def get_settings(
    profile: str | None = None,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir=config_dir, environ=environ)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config and environment."""

    def __init__(
        self,
        *,
        server: dict[str, Any] | None = None,
        polymarket: dict[str, Any] | None = None,
        orders: dict[str, Any] | None = None,
        retry: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.server = server or {}
        self.polymarket = polymarket or {}
        self.orders = orders or {}
        self.retry = retry or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            server=raw.get("server"),
            polymarket=raw.get("polymarket"),
            orders=raw.get("orders"),
            retry=raw.get("retry"),
            logging=raw.get("logging"),
        )

    # Server
    @property
    def host(self) -> str:
        return self.server.get("host", "0.0.0.0")

    @property
    def port(self) -> int:
        return int(self.server.get("port", 3000))

    @property
    def relay_secret(self) -> str:
        return str(self.server.get("relay_secret") or "")

    # Venue
    @property
    def clob_host(self) -> str:
        return self.polymarket.get("clob_host", "https://clob.polymarket.com").rstrip("/")

    @property
    def chain_id(self) -> int:
        return int(self.polymarket.get("chain_id", 137))

    @property
    def http_timeout_sec(self) -> float:
        return float(self.polymarket.get("http_timeout_sec", 15.0))

    @property
    def private_key(self) -> str:
        return str(self.polymarket.get("private_key") or "").strip()

    @property
    def proxy_wallet_address(self) -> str:
        return str(self.polymarket.get("proxy_wallet_address") or "").strip()

    @property
    def api_key(self) -> str:
        return str(self.polymarket.get("api_key") or "")

    @property
    def api_secret(self) -> str:
        return str(self.polymarket.get("api_secret") or "")

    @property
    def api_passphrase(self) -> str:
        return str(self.polymarket.get("api_passphrase") or "")

    @property
    def has_static_creds(self) -> bool:
        return bool(self.api_key and self.api_secret and self.api_passphrase)

    # Orders
    @property
    def fee_rate_bps(self) -> int:
        return int(self.orders.get("fee_rate_bps", 0))

    @property
    def expiration_sec(self) -> int:
        return int(self.orders.get("expiration_sec", 300))

    @property
    def min_size(self) -> float:
        return float(self.orders.get("min_size", 5.0))

    @property
    def default_tick_size(self) -> float:
        return float(self.orders.get("default_tick_size", 0.01))

    @property
    def neg_risk(self) -> bool:
        return bool(self.orders.get("neg_risk", False))

    @property
    def include_verifying_contract(self) -> bool:
        return bool(self.orders.get("include_verifying_contract", True))

    @property
    def domain_name(self) -> str:
        return self.orders.get("domain_name", "Polymarket CTF Exchange")

    @property
    def domain_version(self) -> str:
        return str(self.orders.get("domain_version", "1"))

    @property
    def exchange_address(self) -> str:
        return self.orders.get("exchange_address", CTF_EXCHANGE_ADDRESS)

    @property
    def neg_risk_exchange_address(self) -> str:
        return self.orders.get("neg_risk_exchange_address", NEG_RISK_CTF_EXCHANGE_ADDRESS)

    # Retry
    @property
    def max_attempts(self) -> int:
        return int(self.retry.get("max_attempts", 3))

    @property
    def retry_delay_sec(self) -> float:
        return float(self.retry.get("delay_sec", 0.4))

    # Logging
    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
