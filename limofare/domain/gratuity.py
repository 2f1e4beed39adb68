"""
Gratuity Calculator
===================

Gratuity is layered on the *clamped, rounded* fare subtotal:

* ``none``       -- nothing added.
* ``cash``       -- tip is handed to the driver; the entered amount is kept
                    for display but never charged.
* ``percentage`` -- ``subtotal x percentage / 100`` (15 % when unset).
* ``custom``     -- the entered amount; unparseable or negative input is 0.

The amount is always derived from the current subtotal, never carried over
from an earlier quote.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .entities import GratuityInfo, coerce_amount, round_money
from .enums import GratuityType, UNCHARGED_GRATUITY

DEFAULT_GRATUITY_PERCENTAGE = 15.0


def parse_gratuity_type(value: Any) -> GratuityType:
    """Unknown or missing types degrade to ``none``."""
    if isinstance(value, GratuityType):
        return value
    try:
        return GratuityType(str(value).strip().lower())
    except ValueError:
        return GratuityType.NONE


def apply_gratuity(subtotal: float, info: GratuityInfo | None) -> GratuityInfo:
    """Return a copy of *info* with ``amount`` derived from *subtotal*."""
    if info is None:
        return GratuityInfo()

    kind = parse_gratuity_type(info.type)
    if kind in UNCHARGED_GRATUITY:
        custom = (
            coerce_amount(info.custom_amount) if kind is GratuityType.CASH else None
        )
        return replace(info, type=kind, custom_amount=custom, amount=0.0)

    if kind is GratuityType.PERCENTAGE:
        percentage = (
            DEFAULT_GRATUITY_PERCENTAGE
            if info.percentage is None
            else coerce_amount(info.percentage)
        )
        amount = round_money(coerce_amount(subtotal) * percentage / 100)
        return replace(
            info, type=kind, percentage=percentage, custom_amount=None, amount=amount
        )

    custom = coerce_amount(info.custom_amount)
    return replace(info, type=kind, custom_amount=custom, amount=round_money(custom))


def total_with_gratuity(subtotal: float, info: GratuityInfo | None) -> float:
    return round_money(subtotal + apply_gratuity(subtotal, info).amount)
