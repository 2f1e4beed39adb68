"""Unit tests for save-time validation of a pricing rule set."""

import pytest

from limofare.domain.entities import (
    DistanceTier,
    FeeRule,
    InvalidPricingSettings,
    PricingSettings,
    TimeSurcharge,
)
from limofare.domain.validation import pricing_settings_errors, validate_pricing_settings


class TestValidatePricingSettings:
    def test_defaults_are_valid(self):
        settings = PricingSettings.defaults()
        assert validate_pricing_settings(settings) is settings

    def test_collects_every_problem(self):
        settings = PricingSettings(
            distance_tiers=(DistanceTier(0, 50, 0), DistanceTier(40, 60, 49)),
            time_surcharges=(TimeSurcharge("7pm", "21:00", 10),),
            fee_rules=(FeeRule("bookingDetails.carSeats >", 5),),
        )
        errors = pricing_settings_errors(settings)
        assert len(errors) == 3
        assert any(e.startswith("timeSurcharges[0].startTime") for e in errors)
        assert any(e.startswith("feeRules[0].condition") for e in errors)

    def test_raises_with_errors_attached(self):
        settings = PricingSettings(fee_rules=(FeeRule("os.system('x')", 5),))
        with pytest.raises(InvalidPricingSettings) as exc_info:
            validate_pricing_settings(settings)
        assert len(exc_info.value.errors) == 1

    def test_midnight_crossing_window_is_accepted(self):
        settings = PricingSettings(time_surcharges=(TimeSurcharge("22:00", "02:00", 40),))
        assert pricing_settings_errors(settings) == []
