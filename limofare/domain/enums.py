"""Domain enumerations for fare computation."""

import enum


class GratuityType(str, enum.Enum):
    NONE = "none"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"
    CASH = "cash"


# Gratuity types that are never added to the charged total
UNCHARGED_GRATUITY: frozenset[GratuityType] = frozenset(
    {GratuityType.NONE, GratuityType.CASH}
)


class ClampBound(str, enum.Enum):
    MIN = "min"
    MAX = "max"
