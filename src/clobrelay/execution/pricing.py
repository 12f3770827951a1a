"""Tick-aware price normalization and token id normalization."""

from __future__ import annotations

import math
import string
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from clobrelay.errors import ValidationError

DEFAULT_TICK = 0.01
FALLBACK_PRICE = 0.5
INVALID_TOKEN_ERROR = "Invalid tokenId"


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def round_to_tick(price: Any, tick: Any) -> float:
    """Snap price to the tick grid and clamp into [tick, 1 - tick].

    Non-finite prices give 0.5. Ties round half away from zero. The result is
    rounded to 6 decimals so it is an exact multiple of tick at that precision.
    """
    p = _as_float(price)
    t = _as_float(tick)
    if not math.isfinite(t) or t <= 0:
        t = DEFAULT_TICK
    if not math.isfinite(p):
        return FALLBACK_PRICE
    ratio = p / t
    if math.isfinite(ratio):
        steps = Decimal(repr(ratio)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        rounded = round(float(steps) * t, 6)
    else:
        rounded = p
    return max(t, min(round(1 - t, 6), rounded))


def normalize_token_id(token_id: Any) -> str:
    """Hex (0x-prefixed) token ids become decimal strings; decimal ids pass through.

    Raises ValidationError for anything that is not a hex or decimal integer.
    """
    raw = str(token_id if token_id is not None else "").strip()
    if not raw:
        return raw
    if raw[:2].lower() == "0x":
        digits = raw[2:]
        if not digits or any(c not in string.hexdigits for c in digits):
            raise ValidationError(INVALID_TOKEN_ERROR)
        return str(int(digits, 16))
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError(INVALID_TOKEN_ERROR)
    return raw
