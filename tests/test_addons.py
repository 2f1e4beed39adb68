"""Unit tests for stop and child-seat fees."""

import pytest

from limofare.domain.addons import seat_fees, stop_fees
from limofare.domain.entities import PricingSettings, Stop


class TestStopFees:
    def test_default_price_per_stop(self):
        stops = [Stop("Midtown"), Stop("Brooklyn")]
        assert stop_fees(stops, 25) == 50  # 2 x $25

    def test_explicit_price_overrides_default(self):
        stops = [Stop("Midtown", price=40), Stop("Brooklyn")]
        assert stop_fees(stops, 25) == 65

    def test_explicit_zero_price_is_honoured(self):
        assert stop_fees([Stop("Lobby", price=0)], 25) == 0

    def test_negative_price_contributes_nothing(self):
        assert stop_fees([Stop("Odd", price=-10)], 25) == 0

    def test_no_stops(self):
        assert stop_fees([], 25) == 0


class TestSeatFees:
    def setup_method(self):
        self.settings = PricingSettings(car_seat_price=15, booster_seat_price=10)

    def test_car_and_booster_seats(self):
        assert seat_fees(2, 1, self.settings) == (30, 10)

    @pytest.mark.parametrize(
        "count", [None, -3, "lots", float("nan"), float("inf"), "1e400", 10**400]
    )
    def test_bad_counts_contribute_nothing(self, count):
        assert seat_fees(count, count, self.settings) == (0, 0)

    def test_numeric_strings_are_accepted(self):
        assert seat_fees("2", "3", self.settings) == (30, 30)
