"""Unit tests for time-of-day surcharge resolution."""

import logging
from datetime import datetime, time

import pytest

from limofare.domain.entities import TimeSurcharge
from limofare.domain.surcharges import parse_hhmm, resolve_surcharge, surcharge_amount

RUSH_HOUR = TimeSurcharge("17:00", "19:00", 20)
LATE_NIGHT = TimeSurcharge("22:00", "23:59", 35)


class TestParseHHMM:
    def test_parses_minutes_since_midnight(self):
        assert parse_hhmm("00:00") == 0
        assert parse_hhmm("17:30") == 1050
        assert parse_hhmm(" 7:05 ") == 425

    @pytest.mark.parametrize("bad", ["", "1730", "24:00", "12:60", "ab:cd", None])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            parse_hhmm(bad)


class TestResolveSurcharge:
    def test_inside_window(self):
        pickup = datetime(2026, 5, 1, 18, 15)
        assert surcharge_amount(pickup, [RUSH_HOUR]) == 20

    def test_window_is_inclusive_on_both_ends(self):
        assert surcharge_amount(time(17, 0), [RUSH_HOUR]) == 20
        assert surcharge_amount(time(19, 0), [RUSH_HOUR]) == 20
        assert surcharge_amount(time(19, 1), [RUSH_HOUR]) == 0

    def test_outside_every_window(self):
        assert surcharge_amount(datetime(2026, 5, 1, 9, 0), [RUSH_HOUR, LATE_NIGHT]) == 0

    def test_first_matching_window_wins(self):
        overlapping = TimeSurcharge("18:00", "20:00", 50)
        assert resolve_surcharge(time(18, 30), [RUSH_HOUR, overlapping]) is RUSH_HOUR

    def test_no_pickup_time(self):
        assert surcharge_amount(None, [RUSH_HOUR]) == 0

    def test_midnight_crossing_window_never_matches(self):
        overnight = TimeSurcharge("22:00", "02:00", 40)
        assert surcharge_amount(time(23, 0), [overnight]) == 0
        assert surcharge_amount(time(1, 0), [overnight]) == 0

    def test_malformed_window_is_skipped_and_logged(self, caplog):
        broken = TimeSurcharge("5pm", "7pm", 99)
        with caplog.at_level(logging.WARNING, logger="limofare.domain.surcharges"):
            assert surcharge_amount(time(18, 0), [broken, RUSH_HOUR]) == 20
        assert "malformed surcharge window" in caplog.text
