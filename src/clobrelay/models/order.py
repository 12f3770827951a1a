"""OrderArgs, SignedOrder - the order as built, signed and posted."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, raw: Any) -> Side:
        """Case-insensitive BUY; anything else is SELL."""
        if isinstance(raw, cls):
            return raw
        return cls.BUY if str(raw or "").strip().upper() == "BUY" else cls.SELL

    @property
    def index(self) -> int:
        """Numeric side used inside the signed struct."""
        return 0 if self is Side.BUY else 1


class OrderType(str, Enum):
    FAK = "FAK"
    FOK = "FOK"

    @classmethod
    def parse(cls, raw: Any) -> OrderType:
        """Case-insensitive FOK; anything else (including None) is FAK."""
        if isinstance(raw, cls):
            return raw
        return cls.FOK if str(raw or "FAK").strip().upper() == "FOK" else cls.FAK


class SignatureType(int, Enum):
    EOA = 0
    POLY_PROXY = 1
    POLY_GNOSIS_SAFE = 2


class OrderArgs(BaseModel):
    """Logical order: what to trade, before amounts are scaled and signed."""

    token_id: str = Field(..., description="Decimal token id")
    price: float = Field(..., gt=0, lt=1)
    size: float = Field(..., gt=0)
    side: Side
    order_type: OrderType = OrderType.FAK


class SignedOrder(BaseModel):
    """Venue-canonical order with its EIP-712 signature."""

    salt: int
    maker: str
    signer: str
    taker: str = ZERO_ADDRESS
    token_id: str
    maker_amount: int = Field(..., ge=0)
    taker_amount: int = Field(..., ge=0)
    expiration: int = 0
    nonce: int = 0
    fee_rate_bps: int = 0
    side: Side
    signature_type: SignatureType = SignatureType.EOA
    signature: str = ""

    def struct_message(self) -> dict[str, Any]:
        """Field values as they enter the EIP-712 Order struct."""
        return {
            "salt": int(self.salt),
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": int(self.token_id),
            "makerAmount": int(self.maker_amount),
            "takerAmount": int(self.taker_amount),
            "expiration": int(self.expiration),
            "nonce": int(self.nonce),
            "feeRateBps": int(self.fee_rate_bps),
            "side": self.side.index,
            "signatureType": int(self.signature_type),
        }

    def to_payload(self) -> dict[str, Any]:
        """JSON shape expected by POST /order (integers as strings, side as text)."""
        return {
            "salt": int(self.salt),
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": str(self.maker_amount),
            "takerAmount": str(self.taker_amount),
            "expiration": str(self.expiration),
            "nonce": str(self.nonce),
            "feeRateBps": str(self.fee_rate_bps),
            "side": self.side.value,
            "signatureType": int(self.signature_type),
            "signature": self.signature,
        }
