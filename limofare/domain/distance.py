"""
Distance unit conversion.

The distance-matrix provider reports trip length in **meters**; every
pricing rule (tiers, thresholds, per-mile fees) is configured in miles.
"""

import math

METERS_PER_MILE = 1_609.34


def meters_to_miles(distance_meters: float | None) -> float:
    """Return *distance_meters* in miles.  Missing, negative or non-finite input is 0."""
    try:
        meters = float(distance_meters or 0)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(meters) or meters <= 0:
        return 0.0
    return meters / METERS_PER_MILE
