"""
Distance Tier Resolver
======================

Selection rule
--------------
1. **First match** -- the first tier (in configured order) whose inclusive
   ``[min_distance, max_distance]`` range contains the distance.  An
   unbounded tier matches every distance ``>= min_distance``.
2. **Highest-tier fallback** -- when nothing matches (e.g. a trip longer
   than the top configured bound) the tier with the largest
   ``max_distance`` (unbounded counts as +inf) is used, provided the
   distance is at least that tier's ``min_distance``.
3. Otherwise no distance fee applies.

Tiers are stored exactly as the admin entered them, so the resolver never
assumes they are sorted or contiguous.  ``validate_tiers`` is the stricter
check run when settings are saved.

Complexity: O(T) per lookup for T configured tiers.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .entities import DistanceTier


def resolve_tier(
    distance_miles: float, tiers: Sequence[DistanceTier]
) -> Optional[DistanceTier]:
    """Return the tier that prices *distance_miles*, or ``None``."""
    if not tiers:
        return None

    for tier in tiers:
        if tier.contains(distance_miles):
            return tier

    # ties on the upper bound go to the last-configured tier
    highest = max(reversed(tiers), key=lambda t: t.upper_bound)
    if distance_miles >= highest.min_distance:
        return highest
    return None


def tier_fee(distance_miles: float, tiers: Sequence[DistanceTier]) -> float:
    tier = resolve_tier(distance_miles, tiers)
    return float(tier.fee) if tier else 0.0


def validate_tiers(tiers: Iterable[DistanceTier]) -> list[str]:
    """
    Check that *tiers* form a non-overlapping ladder.

    Rules: bounds are non-negative, ``min <= max``, at most one unbounded
    tier and it must be the top one, and after sorting by ``min_distance``
    no tier starts before its predecessor ends.  Shared endpoints
    (``0-40`` followed by ``40-60``) are allowed.  Gaps are allowed too;
    the highest-tier fallback covers distances above the ladder.

    Returns a list of human-readable problems (empty when valid).
    """
    errors: list[str] = []
    ordered = sorted(tiers, key=lambda t: (t.min_distance, t.upper_bound))

    for i, tier in enumerate(ordered):
        label = _label(tier)
        if tier.min_distance < 0:
            errors.append(f"Tier {label}: minDistance must be >= 0")
        if not tier.is_unbounded and tier.upper_bound < tier.min_distance:
            errors.append(f"Tier {label}: maxDistance is below minDistance")
        if tier.fee < 0:
            errors.append(f"Tier {label}: fee must be >= 0")
        if tier.is_unbounded and i != len(ordered) - 1:
            errors.append(f"Tier {label}: only the highest tier may be unbounded")

        if i > 0:
            previous = ordered[i - 1]
            if tier.min_distance < previous.upper_bound:
                errors.append(
                    f"Tier {label} overlaps tier {_label(previous)}"
                )

    return errors


def _label(tier: DistanceTier) -> str:
    upper = "+" if tier.is_unbounded else f"-{tier.max_distance:g}"
    return f"{tier.min_distance:g}{upper}"
