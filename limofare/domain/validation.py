"""Save-time checks for an admin-edited rule set."""

from __future__ import annotations

from .entities import InvalidPricingSettings, PricingSettings
from .rules import validate_condition
from .surcharges import parse_hhmm
from .tiers import validate_tiers


def pricing_settings_errors(settings: PricingSettings) -> list[str]:
    errors = list(validate_tiers(settings.distance_tiers))

    for i, window in enumerate(settings.time_surcharges):
        for label, value in (("startTime", window.start_time), ("endTime", window.end_time)):
            try:
                parse_hhmm(value)
            except ValueError as exc:
                errors.append(f"timeSurcharges[{i}].{label}: {exc}")

    for i, rule in enumerate(settings.fee_rules):
        problem = validate_condition(rule.condition)
        if problem:
            errors.append(f"feeRules[{i}].condition: {problem}")

    return errors


def validate_pricing_settings(settings: PricingSettings) -> PricingSettings:
    """Return *settings* unchanged, or raise ``InvalidPricingSettings``."""
    errors = pricing_settings_errors(settings)
    if errors:
        raise InvalidPricingSettings(errors)
    return settings
