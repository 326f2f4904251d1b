from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

MONEY_FIELDS = ("price", "original_price", "discount_amount", "discount_percentage")

_CENTS = Decimal("0.01")


def base_price(price: float, size: float, base_size: float) -> float:
    """Price rescaled to ``base_size`` units, e.g. the price per 100 ml.

    A zero ``size`` raises ``ZeroDivisionError``.
    """
    return float(price) / float(size) * base_size


def round2(value: Optional[float]) -> Optional[float]:
    # half away from zero on the decimal representation, so 2.675 -> 2.68
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def priced(record: dict[str, Any], base_size: int) -> dict[str, Any]:
    """Round the monetary fields of a variant or order line and attach base pricing."""
    out = dict(record)
    for field in MONEY_FIELDS:
        if field in out:
            out[field] = round2(out[field])
    out["base_size"] = base_size
    size = record.get("size")
    price = record.get("price")
    if not size or price is None:
        out["base_price"] = None
    else:
        out["base_price"] = round2(base_price(price, size, base_size))
    return out
