"""Unit tests for the fee-rule expression interpreter."""

import logging
from datetime import datetime

import pytest

from limofare.domain.entities import (
    BookingInputs,
    FeeRule,
    PricingSettings,
    ServicePackage,
    Stop,
)
from limofare.domain.rules import (
    RuleEvaluationError,
    RuleSyntaxError,
    build_context,
    compile_condition,
    evaluate_condition,
    evaluate_fee_rules,
    tokenize,
    validate_condition,
)


@pytest.fixture
def context():
    booking = BookingInputs(
        package=ServicePackage(id="pkg-1", base_price=250, is_hourly=True),
        distance_meters=45 * 1609.34,
        hours=3,
        stops=(Stop("Midtown"), Stop("Brooklyn")),
        car_seats=2,
        booster_seats=0,
        pickup_time=datetime(2026, 5, 1, 18, 5),
        airport_code="JFK",
    )
    return build_context(booking, PricingSettings.defaults())


class TestTokenizer:
    def test_operators_and_names(self):
        kinds = [t.kind for t in tokenize("bookingDetails.carSeats >= 2 && !false")]
        assert kinds == ["name", "op", "name", "op", "number", "op", "op", "name", "end"]

    def test_strings_with_either_quote(self):
        values = [t.value for t in tokenize("'a' == \"b\"")][:3]
        assert values == ["'a'", "==", '"b"']

    def test_rejects_unknown_characters(self):
        with pytest.raises(RuleSyntaxError):
            tokenize("bookingDetails.carSeats > 1 ; 2")


class TestCompile:
    @pytest.mark.parametrize(
        "condition",
        [
            "(bookingDetails.carSeats > 5",  # unmatched parenthesis
            "bookingDetails.carSeats >",
            "bookingDetails.carSeats > 1 )",
            "",
            "   ",
            "window.alert(1)",
            "__import__('os')",
            "bookingDetails.constructor",
            "bookingDetails.stops.map",
            "settings",
            "bookingDetails.carSeats = 2",
        ],
    )
    def test_malformed_conditions_are_syntax_errors(self, condition):
        with pytest.raises(RuleSyntaxError):
            compile_condition(condition)

    def test_overlong_condition_is_rejected(self):
        with pytest.raises(RuleSyntaxError):
            compile_condition("1 + " * 200 + "1")

    def test_deep_nesting_is_rejected(self):
        with pytest.raises(RuleSyntaxError):
            compile_condition("(" * 240 + "1" + ")" * 240)

    def test_validate_condition_reports_message(self):
        assert validate_condition("bookingDetails.carSeats > 1") is None
        assert "unknown field" in validate_condition("bookingDetails.wings > 1")


class TestEvaluate:
    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("bookingDetails.carSeats > 1", True),
            ("bookingDetails.carSeats > 5", False),
            ("bookingDetails.carSeats === 2", True),
            ("bookingDetails.carSeats !== 2", False),
            ("bookingDetails.airportCode == \"JFK\"", True),
            ("bookingDetails.airportCode != 'JFK'", False),
            ("bookingDetails.stops.length >= 2", True),
            ("bookingDetails.isHourly && bookingDetails.hours >= 3", True),
            ("bookingDetails.isHourly and not bookingDetails.hours < 3", True),
            ("bookingDetails.distanceMiles > 40 || false", True),
            ("!(bookingDetails.pickupHour >= 17 && bookingDetails.pickupHour < 19)", False),
            ("bookingDetails.pickupTime >= '18:00'", True),
            ("1 + 2 * 3 == 7", True),
            ("(1 + 2) * 3 == 9", True),
            ("-bookingDetails.carSeats < 0", True),
            ("10 % 4 == 2", True),
            ("settings.carSeatPrice * bookingDetails.carSeats > 25", True),
            ("settings.distanceTiers.length == 3", True),
            ("settings.perMileFeeEnabled", False),
            ("bookingDetails.vehicleId == null", True),
        ],
    )
    def test_conditions(self, context, condition, expected):
        assert evaluate_condition(condition, context) is expected

    @pytest.mark.parametrize(
        "condition, expected",
        [
            ("bookingDetails.hours > 2", False),
            ("bookingDetails.hours <= 2", False),
            ("2 < bookingDetails.hours", False),
            ("!(bookingDetails.hours > 2)", True),
            ("bookingDetails.hours == null", True),
        ],
    )
    def test_ordering_against_missing_value_is_false(self, condition, expected):
        ctx = build_context(BookingInputs(car_seats=1), PricingSettings.defaults())
        assert evaluate_condition(condition, ctx) is expected

    def test_negated_rule_on_missing_value_applies(self):
        ctx = build_context(BookingInputs(car_seats=1), PricingSettings.defaults())
        rules = [FeeRule("!(bookingDetails.hours > 2)", 30)]
        assert evaluate_fee_rules(rules, ctx) == 30

    def test_arithmetic_overflow_is_an_evaluation_error(self):
        ctx = build_context(BookingInputs(car_seats=10**300), PricingSettings.defaults())
        with pytest.raises(RuleEvaluationError):
            evaluate_condition(
                "bookingDetails.carSeats * bookingDetails.carSeats + 1 > 0", ctx
            )

    def test_division_by_zero_is_an_evaluation_error(self, context):
        with pytest.raises(RuleEvaluationError):
            evaluate_condition("bookingDetails.boosterSeats / 0 > 1", context)

    def test_mixed_type_arithmetic_is_an_evaluation_error(self, context):
        with pytest.raises(RuleEvaluationError):
            evaluate_condition("bookingDetails.airportCode + 1 > 0", context)

    def test_length_of_a_number_is_an_evaluation_error(self, context):
        with pytest.raises(RuleEvaluationError):
            evaluate_condition("bookingDetails.carSeats.length > 0", context)


class TestEvaluateFeeRules:
    def test_all_matching_rules_are_added(self, context):
        rules = [
            FeeRule("bookingDetails.carSeats > 1", 10),
            FeeRule("bookingDetails.airportCode == 'JFK'", 15),
            FeeRule("bookingDetails.carSeats > 5", 1000),
        ]
        assert evaluate_fee_rules(rules, context) == 25

    def test_never_true_rule_contributes_nothing(self, context):
        assert evaluate_fee_rules([FeeRule("bookingDetails.carSeats > 5", 50)], context) == 0

    def test_malformed_rule_is_skipped_and_logged(self, context, caplog):
        rules = [
            FeeRule("(bookingDetails.carSeats > 1", 50),
            FeeRule("bookingDetails.carSeats > 1", 10),
        ]
        with caplog.at_level(logging.WARNING, logger="limofare.domain.rules"):
            assert evaluate_fee_rules(rules, context) == 10
        assert "Skipping fee rule" in caplog.text

    def test_runtime_error_rule_is_skipped(self, context):
        rules = [FeeRule("bookingDetails.carSeats / 0 > 1", 50)]
        assert evaluate_fee_rules(rules, context) == 0

    def test_rules_are_independent_of_order(self, context):
        rules = [
            FeeRule("bookingDetails.carSeats > 1", 10),
            FeeRule("bookingDetails.stops.length == 2", 5),
        ]
        assert evaluate_fee_rules(rules, context) == evaluate_fee_rules(
            list(reversed(rules)), context
        )
