"""Signing identity: private key plus derived address."""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from clobrelay.errors import ConfigurationError


class Identity:
    """Wraps one private key. Immutable after construction."""

    def __init__(self, private_key: str):
        key = (private_key or "").strip()
        if not key:
            raise ConfigurationError("POLYMARKET_PRIVATE_KEY not set")
        if not key.startswith("0x"):
            key = f"0x{key}"
        try:
            self._account = Account.from_key(key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid private key: {e}") from e

    @classmethod
    def from_private_key(cls, private_key: str) -> Identity:
        return cls(private_key)

    @property
    def address(self) -> str:
        """Checksum address of the signer."""
        return self._account.address

    def sign_typed_data(self, typed: dict[str, Any]) -> str:
        """Sign a full EIP-712 message (types, primaryType, domain, message). Returns 0x-hex."""
        signable = encode_typed_data(full_message=typed)
        signed = self._account.sign_message(signable)
        return _hex(signed.signature)

    def __repr__(self) -> str:
        return f"Identity(address={self.address})"


def _hex(sig: bytes) -> str:
    h = sig.hex()
    return h if h.startswith("0x") else f"0x{h}"
