"""ApiCreds - venue-issued L2 credentials."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiCreds(BaseModel):
    """Key/secret/passphrase triple bound to one signing address."""

    api_key: str
    api_secret: str
    api_passphrase: str

    @classmethod
    def from_venue(cls, raw: dict[str, Any]) -> ApiCreds:
        """Parse the venue's {apiKey, secret, passphrase} body."""
        return cls(
            api_key=str(raw.get("apiKey") or raw.get("api_key") or ""),
            api_secret=str(raw.get("secret") or raw.get("api_secret") or ""),
            api_passphrase=str(raw.get("passphrase") or raw.get("api_passphrase") or ""),
        )

    @property
    def complete(self) -> bool:
        return bool(self.api_key and self.api_secret and self.api_passphrase)

    def __repr__(self) -> str:
        return f"ApiCreds(api_key={self.api_key!r})"

    __str__ = __repr__
