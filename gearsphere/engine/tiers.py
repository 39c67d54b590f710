"""Budget tier classification.

Tiers describe the budget the customer asked for, not the total of the
parts that were found.
"""

from __future__ import annotations

from decimal import Decimal

Number = int | float | Decimal

BELOW_MINIMUM = "Below Minimum"

# (exclusive lower, inclusive upper, label); upper=None means unbounded.
# Entry Level is the one range whose lower bound is inclusive.
BUDGET_TIERS: list[tuple[Number, Number | None, str]] = [
    (100000, 200000, "Entry Level"),
    (200000, 300000, "Budget"),
    (300000, 400000, "Mid-Range"),
    (400000, 500000, "High-End"),
    (500000, 750000, "Premium"),
    (750000, None, "Ultimate"),
]

ENTRY_LEVEL_MINIMUM = BUDGET_TIERS[0][0]


def classify_budget(budget: Number) -> str:
    """Map a raw budget to its tier label."""
    if budget == ENTRY_LEVEL_MINIMUM:
        return BUDGET_TIERS[0][2]
    for lower, upper, label in BUDGET_TIERS:
        if budget > lower and (upper is None or budget <= upper):
            return label
    return BELOW_MINIMUM
