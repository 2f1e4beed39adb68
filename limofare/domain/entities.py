"""
Domain entities consumed and produced by the fare engine.

Everything here is an immutable value object: a ``PriceBreakdown`` is
rebuilt from scratch on every recomputation and a ``PricingSettings``
snapshot is never modified by the booking flow.

Input coercion
--------------
Booking input arrives from a form and is frequently partial.  The helpers
at the bottom of this module turn anything non-numeric, negative or
missing into ``0`` so pricing can always produce a number.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Optional

from .enums import ClampBound, GratuityType

CENT = Decimal("0.01")
# wide enough to quantize any finite float to cents
MONEY_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


class InvalidPricingSettings(Exception):
    """Raised when an admin tries to save a rule set that cannot be priced."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


# ── Rule set ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DistanceTier:
    min_distance: float
    max_distance: Optional[float] = None  # None -> unbounded
    fee: float = 0.0

    @property
    def is_unbounded(self) -> bool:
        return self.max_distance is None or math.isinf(self.max_distance)

    @property
    def upper_bound(self) -> float:
        return math.inf if self.is_unbounded else float(self.max_distance)

    def contains(self, miles: float) -> bool:
        """Inclusive on both ends; an unbounded tier matches anything >= min."""
        if miles < self.min_distance:
            return False
        return self.is_unbounded or miles <= self.upper_bound


@dataclass(frozen=True)
class TimeSurcharge:
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM", same day as start_time
    surcharge: float


@dataclass(frozen=True)
class FeeRule:
    condition: str
    fee: float


@dataclass(frozen=True)
class VehiclePackagePricing:
    """Per-mile overage override for one vehicle / package combination."""

    vehicle_id: str
    package_id: str
    distance_threshold: float
    per_mile_fee: float


DEFAULT_DISTANCE_TIERS: tuple[DistanceTier, ...] = (
    DistanceTier(min_distance=0, max_distance=40, fee=0),
    DistanceTier(min_distance=40, max_distance=60, fee=49),
    DistanceTier(min_distance=60, max_distance=100, fee=99),
)


@dataclass(frozen=True)
class PricingSettings:
    distance_fee_enabled: bool = True
    distance_threshold: float = 40.0
    distance_fee: float = 49.0
    per_mile_fee_enabled: bool = False
    per_mile_fee: float = 2.0
    min_fee: float = 0.0
    max_fee: float = 1000.0
    distance_tiers: tuple[DistanceTier, ...] = DEFAULT_DISTANCE_TIERS
    time_surcharges: tuple[TimeSurcharge, ...] = ()
    fee_rules: tuple[FeeRule, ...] = ()
    vehicle_package_pricing: tuple[VehiclePackagePricing, ...] = ()
    stop_price: float = 25.0
    car_seat_price: float = 15.0
    booster_seat_price: float = 10.0

    @classmethod
    def defaults(cls) -> "PricingSettings":
        return cls()

    def per_mile_terms(
        self, vehicle_id: str | None, package_id: str | None
    ) -> tuple[float, float]:
        """Return ``(threshold, per_mile_fee)`` honouring any override."""
        for override in self.vehicle_package_pricing:
            if (
                vehicle_id is not None
                and package_id is not None
                and override.vehicle_id == vehicle_id
                and override.package_id == package_id
            ):
                return override.distance_threshold, override.per_mile_fee
        return self.distance_threshold, self.per_mile_fee


# ── Booking ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ServicePackage:
    id: str
    name: str = ""
    base_price: float = 0.0
    is_hourly: bool = False
    minimum_hours: Optional[float] = None


@dataclass(frozen=True)
class Vehicle:
    id: str
    name: str = ""
    price_per_hour: float = 0.0
    fixed_price: Optional[float] = None


@dataclass(frozen=True)
class Stop:
    location: str
    price: Optional[float] = None  # None -> settings.stop_price


@dataclass(frozen=True)
class BookingInputs:
    package: Optional[ServicePackage] = None
    vehicle: Optional[Vehicle] = None
    distance_meters: Any = 0
    hours: Any = None
    stops: tuple[Stop, ...] = ()
    car_seats: Any = 0
    booster_seats: Any = 0
    passengers: Any = None
    pickup_time: Optional[datetime] = None
    airport_code: Optional[str] = None


@dataclass(frozen=True)
class GratuityInfo:
    type: GratuityType = GratuityType.NONE
    percentage: Optional[float] = None
    custom_amount: Any = None
    amount: float = 0.0  # derived by the gratuity calculator


# ── Output ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: float
    distance_miles: float
    distance_fee: float
    per_mile_fee: float
    surcharge: float
    stop_fees: float
    car_seat_fees: float
    booster_seat_fees: float
    rule_fees: float
    unclamped_total: float
    clamp_applied: bool
    clamp_bound: Optional[ClampBound]
    subtotal: float
    gratuity: GratuityInfo = field(default_factory=GratuityInfo)
    total: float = 0.0

    @property
    def seat_fees(self) -> float:
        return round_money(self.car_seat_fees + self.booster_seat_fees)


# ── Input coercion ────────────────────────────────────────────────────


def coerce_amount(value: Any) -> float:
    """Return *value* as a non-negative finite float, else ``0.0``."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def coerce_count(value: Any) -> int:
    """Return *value* as a non-negative whole count, else ``0``."""
    return int(coerce_amount(value))


def round_money(value: float) -> float:
    """Round to cents, half-up (``round()`` would round half to even).

    Infinite or NaN amounts round to ``0.0``.
    """
    if not math.isfinite(value):
        return 0.0
    cents = Decimal(str(value)).quantize(CENT, context=MONEY_CONTEXT)
    return float(cents)
