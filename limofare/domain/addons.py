"""Per-unit add-on fees: additional stops, car seats and booster seats."""

from __future__ import annotations

from typing import Any, Sequence

from .entities import PricingSettings, Stop, coerce_amount, coerce_count


def stop_fees(stops: Sequence[Stop], stop_price: float) -> float:
    """Each stop costs its own ``price`` when set, else *stop_price*."""
    total = 0.0
    for stop in stops:
        if stop.price is None:
            total += coerce_amount(stop_price)
        else:
            total += coerce_amount(stop.price)
    return total


def seat_fees(
    car_seats: Any, booster_seats: Any, settings: PricingSettings
) -> tuple[float, float]:
    """Return ``(car_seat_fees, booster_seat_fees)``."""
    return (
        coerce_count(car_seats) * coerce_amount(settings.car_seat_price),
        coerce_count(booster_seats) * coerce_amount(settings.booster_seat_price),
    )
