"""
Fare Pipeline  (Strategy Pattern for the base price)
====================================================

Stages, always in this order
----------------------------
1. **Base price**   -- chosen strategy (package flat / hourly, vehicle
                       fixed / hourly).
2. **Distance**     -- tier fee, then per-mile overage above the threshold.
                       Both may apply; the overage layers on the tier fee.
3. **Surcharge**    -- first time-of-day window containing the pickup.
4. **Add-ons**      -- stops, car seats, booster seats.
5. **Fee rules**    -- every admin rule whose condition holds.
6. **Clamp**        -- ``max(total, min_fee)`` then ``min(total, max_fee)``
                       (each only when > 0).  Because min is applied first,
                       ``max_fee < min_fee`` yields ``max_fee``.
7. **Round**        -- cents, half-up.  The subtotal is the rounded sum of
                       the *unrounded* stages; each line item is rounded on
                       its own for display, so the items can differ from
                       the subtotal by a cent.
8. **Gratuity**     -- optional, on the rounded subtotal.

``compute_fare`` is pure: no I/O, no shared state, and identical inputs
give an identical ``PriceBreakdown``.  Bad input degrades to 0 rather than
raising.

Complexity: O(T + W + S + R) for tiers, windows, stops and rules.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Optional

from .addons import seat_fees, stop_fees
from .distance import meters_to_miles
from .entities import (
    BookingInputs,
    GratuityInfo,
    PriceBreakdown,
    PricingSettings,
    ServicePackage,
    Vehicle,
    coerce_amount,
    round_money,
)
from .enums import ClampBound
from .gratuity import apply_gratuity
from .rules import build_context, evaluate_fee_rules
from .surcharges import surcharge_amount
from .tiers import tier_fee


# ── Base price strategies ─────────────────────────────────────────────


class BasePriceStrategy(ABC):
    @abstractmethod
    def calculate(self, hours: Any) -> float: ...


class FlatPackagePricing(BasePriceStrategy):
    def __init__(self, package: ServicePackage):
        self.package = package

    def calculate(self, hours: Any) -> float:
        return coerce_amount(self.package.base_price)


class HourlyPackagePricing(BasePriceStrategy):
    """Booked hours, falling back to the package minimum when none given."""

    def __init__(self, package: ServicePackage):
        self.package = package

    def calculate(self, hours: Any) -> float:
        billed = coerce_amount(hours) or coerce_amount(self.package.minimum_hours)
        return coerce_amount(self.package.base_price) * billed


class FixedVehiclePricing(BasePriceStrategy):
    def __init__(self, vehicle: Vehicle):
        self.vehicle = vehicle

    def calculate(self, hours: Any) -> float:
        return coerce_amount(self.vehicle.fixed_price)


class HourlyVehiclePricing(BasePriceStrategy):
    def __init__(self, vehicle: Vehicle):
        self.vehicle = vehicle

    def calculate(self, hours: Any) -> float:
        return coerce_amount(self.vehicle.price_per_hour) * coerce_amount(hours)


class NoSelectionPricing(BasePriceStrategy):
    def calculate(self, hours: Any) -> float:
        return 0.0


def select_base_pricing(booking: BookingInputs) -> BasePriceStrategy:
    """A selected package takes precedence over a selected vehicle."""
    if booking.package is not None:
        if booking.package.is_hourly:
            return HourlyPackagePricing(booking.package)
        return FlatPackagePricing(booking.package)
    if booking.vehicle is not None:
        if coerce_amount(booking.vehicle.fixed_price) > 0:
            return FixedVehiclePricing(booking.vehicle)
        return HourlyVehiclePricing(booking.vehicle)
    return NoSelectionPricing()


# ── Distance stage ────────────────────────────────────────────────────


def per_mile_overage(
    distance_miles: float, threshold: float, rate: float
) -> float:
    if distance_miles <= threshold:
        return 0.0
    return (distance_miles - threshold) * rate


def distance_fees(
    distance_miles: float, booking: BookingInputs, settings: PricingSettings
) -> tuple[float, float]:
    """Return ``(tier_fee, per_mile_fee)``; both 0 when distance pricing is off."""
    if not settings.distance_fee_enabled or distance_miles <= 0:
        return 0.0, 0.0

    tier = tier_fee(distance_miles, settings.distance_tiers)
    overage = 0.0
    if settings.per_mile_fee_enabled:
        threshold, rate = settings.per_mile_terms(
            booking.vehicle.id if booking.vehicle else None,
            booking.package.id if booking.package else None,
        )
        overage = per_mile_overage(distance_miles, threshold, rate)
    return tier, overage


# ── Clamp stage ───────────────────────────────────────────────────────


def clamp_total(
    total: float, min_fee: float, max_fee: float
) -> tuple[float, Optional[ClampBound]]:
    """Apply min then max.  Returns the clamped total and the bound that won."""
    bound: Optional[ClampBound] = None
    if min_fee > 0 and total < min_fee:
        total, bound = min_fee, ClampBound.MIN
    if max_fee > 0 and total > max_fee:
        total, bound = max_fee, ClampBound.MAX
    return total, bound


# ── Pipeline ──────────────────────────────────────────────────────────


def _finite(amount: float) -> float:
    """A stage that overflowed to infinity (or NaN) contributes nothing."""
    return amount if math.isfinite(amount) else 0.0


def compute_fare(
    booking: BookingInputs,
    settings: PricingSettings,
    gratuity: GratuityInfo | None = None,
) -> PriceBreakdown:
    """Price *booking* under *settings*.  Never raises for bad booking input."""
    base = _finite(select_base_pricing(booking).calculate(booking.hours))

    distance_miles = meters_to_miles(booking.distance_meters)
    tier, overage = map(_finite, distance_fees(distance_miles, booking, settings))

    surcharge = _finite(surcharge_amount(booking.pickup_time, settings.time_surcharges))

    stops = _finite(stop_fees(booking.stops, settings.stop_price))
    car_seats, booster_seats = map(
        _finite, seat_fees(booking.car_seats, booking.booster_seats, settings)
    )

    rules = _finite(
        evaluate_fee_rules(settings.fee_rules, build_context(booking, settings))
    )

    unclamped = _finite(
        base + tier + overage + surcharge + stops + car_seats + booster_seats + rules
    )
    clamped, bound = clamp_total(unclamped, settings.min_fee, settings.max_fee)
    subtotal = round_money(clamped)

    tip = apply_gratuity(subtotal, gratuity)

    return PriceBreakdown(
        base_price=round_money(base),
        distance_miles=round_money(distance_miles),
        distance_fee=round_money(tier),
        per_mile_fee=round_money(overage),
        surcharge=round_money(surcharge),
        stop_fees=round_money(stops),
        car_seat_fees=round_money(car_seats),
        booster_seat_fees=round_money(booster_seats),
        rule_fees=round_money(rules),
        unclamped_total=round_money(unclamped),
        clamp_applied=bound is not None,
        clamp_bound=bound,
        subtotal=subtotal,
        gratuity=tip,
        total=round_money(subtotal + tip.amount),
    )
