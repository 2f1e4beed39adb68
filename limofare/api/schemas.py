"""
Pydantic request / response schemas for the REST API.

Wire format is camelCase JSON, like the settings document in
``limofare.infrastructure.documents``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from limofare.domain.entities import (
    BookingInputs,
    GratuityInfo,
    PriceBreakdown,
    ServicePackage,
    Stop,
    Vehicle,
)
from limofare.domain.gratuity import parse_gratuity_type
from limofare.infrastructure.documents import CamelModel


# ── Quotes ────────────────────────────────────────────────────────────


class PackageSchema(CamelModel):
    id: str
    name: str = ""
    base_price: float = Field(0.0, ge=0)
    is_hourly: bool = False
    minimum_hours: Optional[float] = Field(None, ge=0)


class VehicleSchema(CamelModel):
    id: str
    name: str = ""
    price_per_hour: float = Field(0.0, ge=0)
    fixed_price: Optional[float] = Field(None, ge=0)


class StopSchema(CamelModel):
    location: str = ""
    price: Optional[float] = None


class GratuitySchema(CamelModel):
    type: str = "none"
    percentage: Optional[float] = None
    custom_amount: Any = None


class QuoteRequest(CamelModel):
    """Booking inputs.  Counts and hours are coerced, not rejected."""

    package: Optional[PackageSchema] = None
    vehicle: Optional[VehicleSchema] = None
    distance_meters: Any = 0
    hours: Any = None
    stops: list[StopSchema] = Field(default_factory=list)
    car_seats: Any = 0
    booster_seats: Any = 0
    passengers: Any = None
    pickup_time: Optional[datetime] = None
    airport_code: Optional[str] = None
    gratuity: Optional[GratuitySchema] = None

    def to_booking(self) -> BookingInputs:
        package = vehicle = None
        if self.package is not None:
            package = ServicePackage(**self.package.model_dump())
        if self.vehicle is not None:
            vehicle = Vehicle(**self.vehicle.model_dump())
        return BookingInputs(
            package=package,
            vehicle=vehicle,
            distance_meters=self.distance_meters,
            hours=self.hours,
            stops=tuple(Stop(s.location, s.price) for s in self.stops),
            car_seats=self.car_seats,
            booster_seats=self.booster_seats,
            passengers=self.passengers,
            pickup_time=self.pickup_time,
            airport_code=self.airport_code,
        )

    def to_gratuity(self) -> Optional[GratuityInfo]:
        if self.gratuity is None:
            return None
        return GratuityInfo(
            type=parse_gratuity_type(self.gratuity.type),
            percentage=self.gratuity.percentage,
            custom_amount=self.gratuity.custom_amount,
        )


class GratuityResponse(CamelModel):
    type: str
    percentage: Optional[float] = None
    custom_amount: Optional[float] = None
    amount: float


class QuoteResponse(CamelModel):
    base_price: float
    distance_miles: float
    distance_fee: float
    per_mile_fee: float
    surcharge: float
    stop_fees: float
    car_seat_fees: float
    booster_seat_fees: float
    seat_fees: float
    rule_fees: float
    unclamped_total: float
    clamp_applied: bool
    clamp_bound: Optional[str] = None
    subtotal: float
    gratuity: GratuityResponse
    total: float

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "QuoteResponse":
        tip = breakdown.gratuity
        return cls(
            base_price=breakdown.base_price,
            distance_miles=breakdown.distance_miles,
            distance_fee=breakdown.distance_fee,
            per_mile_fee=breakdown.per_mile_fee,
            surcharge=breakdown.surcharge,
            stop_fees=breakdown.stop_fees,
            car_seat_fees=breakdown.car_seat_fees,
            booster_seat_fees=breakdown.booster_seat_fees,
            seat_fees=breakdown.seat_fees,
            rule_fees=breakdown.rule_fees,
            unclamped_total=breakdown.unclamped_total,
            clamp_applied=breakdown.clamp_applied,
            clamp_bound=breakdown.clamp_bound.value if breakdown.clamp_bound else None,
            subtotal=breakdown.subtotal,
            gratuity=GratuityResponse(
                type=tip.type.value,
                percentage=tip.percentage,
                custom_amount=tip.custom_amount,
                amount=tip.amount,
            ),
            total=breakdown.total,
        )


# ── Misc ──────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
