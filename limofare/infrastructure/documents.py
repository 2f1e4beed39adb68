"""
Pricing settings document.

The JSON document stored in ``pricing_settings`` and served by
``/settings/public``.  Keys are camelCase (``distanceFeeEnabled``,
``minDistance``) because the same document is read by the booking
front-end.  Every field has a default so a partial or empty document
still yields a complete rule set.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from limofare.domain.entities import (
    DistanceTier,
    FeeRule,
    PricingSettings,
    TimeSurcharge,
    VehiclePackagePricing,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class DistanceTierSchema(CamelModel):
    min_distance: float = 0.0
    max_distance: Optional[float] = Field(
        None, description="Omit or null for an unbounded top tier."
    )
    fee: float = 0.0


class TimeSurchargeSchema(CamelModel):
    start_time: str = Field(..., examples=["17:00"])
    end_time: str = Field(..., examples=["19:00"])
    surcharge: float = 0.0


class FeeRuleSchema(CamelModel):
    condition: str = Field(..., examples=["bookingDetails.carSeats > 2"])
    fee: float = 0.0


class VehiclePackagePricingSchema(CamelModel):
    vehicle_id: str
    package_id: str
    distance_threshold: float = Field(..., ge=0)
    per_mile_fee: float = Field(..., ge=0)


def _default_tiers() -> list[DistanceTierSchema]:
    return [
        DistanceTierSchema(
            min_distance=t.min_distance, max_distance=t.max_distance, fee=t.fee
        )
        for t in PricingSettings.defaults().distance_tiers
    ]


class PricingSettingsDocument(CamelModel):
    distance_fee_enabled: bool = True
    distance_threshold: float = Field(40.0, ge=0)
    distance_fee: float = Field(49.0, ge=0)
    per_mile_fee_enabled: bool = False
    per_mile_fee: float = Field(2.0, ge=0)
    min_fee: float = Field(0.0, ge=0)
    max_fee: float = Field(1000.0, ge=0)
    stop_price: float = Field(25.0, ge=0)
    car_seat_price: float = Field(15.0, ge=0)
    booster_seat_price: float = Field(10.0, ge=0)
    distance_tiers: list[DistanceTierSchema] = Field(default_factory=_default_tiers)
    time_surcharges: list[TimeSurchargeSchema] = Field(default_factory=list)
    vehicle_package_pricing: list[VehiclePackagePricingSchema] = Field(
        default_factory=list
    )
    fee_rules: list[FeeRuleSchema] = Field(default_factory=list)

    def to_domain(self) -> PricingSettings:
        return PricingSettings(
            distance_fee_enabled=self.distance_fee_enabled,
            distance_threshold=self.distance_threshold,
            distance_fee=self.distance_fee,
            per_mile_fee_enabled=self.per_mile_fee_enabled,
            per_mile_fee=self.per_mile_fee,
            min_fee=self.min_fee,
            max_fee=self.max_fee,
            distance_tiers=tuple(
                DistanceTier(t.min_distance, t.max_distance, t.fee)
                for t in self.distance_tiers
            ),
            time_surcharges=tuple(
                TimeSurcharge(w.start_time, w.end_time, w.surcharge)
                for w in self.time_surcharges
            ),
            fee_rules=tuple(FeeRule(r.condition, r.fee) for r in self.fee_rules),
            vehicle_package_pricing=tuple(
                VehiclePackagePricing(
                    o.vehicle_id, o.package_id, o.distance_threshold, o.per_mile_fee
                )
                for o in self.vehicle_package_pricing
            ),
            stop_price=self.stop_price,
            car_seat_price=self.car_seat_price,
            booster_seat_price=self.booster_seat_price,
        )

    def merged_with(self, update: "PricingSettingsDocument") -> "PricingSettingsDocument":
        """Apply only the fields explicitly present in *update*."""
        changes = {name: getattr(update, name) for name in update.model_fields_set}
        return self.model_copy(update=changes)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

