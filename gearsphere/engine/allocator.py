"""Build allocator — suggests a PC build for a budget and usage.

Splits the budget across the ten categories with the usage weight
profile, then picks the most expensive buyable part under each
category's ceiling. Categories are independent: one empty category
never blocks the others.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable

from gearsphere.engine.tiers import classify_budget
from gearsphere.engine.weights import normalize_usage, resolve_profile
from gearsphere.models.build import BuildResponse
from gearsphere.models.components import ComponentType, ProductOut

logger = logging.getLogger(__name__)

# Lets a category reach slightly past its nominal share
FLEX_FACTOR = Decimal("1.10")

CURRENCY = "LKR"

# Budgets of 10**15 and above are rejected
MAX_BUDGET_DIGITS = 15

CENT = Decimal("0.01")

# (component_type, ceiling) → best buyable product or None
ProductFinder = Callable[[ComponentType, Decimal], ProductOut | None]


class InvalidBudgetError(ValueError):
    """Raised when the requested budget is missing, non-numeric, or not positive."""


def parse_budget(raw: str | int | float | Decimal | None) -> Decimal:
    """Convert a raw budget value to a positive Decimal.

    Raises:
        InvalidBudgetError: on anything that is not a finite number > 0,
            or that has MAX_BUDGET_DIGITS or more integer digits.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidBudgetError("Invalid budget")
    try:
        budget = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidBudgetError("Invalid budget")
    if not budget.is_finite() or budget <= 0:
        raise InvalidBudgetError("Invalid budget")
    if budget.adjusted() >= MAX_BUDGET_DIGITS:
        raise InvalidBudgetError("Invalid budget")
    return budget


def category_ceiling(budget: Decimal, weight: float) -> Decimal:
    """Maximum price for one category: budget × weight × 1.10."""
    return budget * Decimal(str(weight)) * FLEX_FACTOR


def _usage_label(usage: str | None) -> str:
    """Echo the caller's usage with its first letter upper-cased."""
    normalized = normalize_usage(usage)
    return normalized[:1].upper() + normalized[1:]


def suggest_build(
    budget: str | int | float | Decimal | None,
    usage: str | None,
    finder: ProductFinder,
) -> BuildResponse:
    """Suggest one part per category for the given budget and usage.

    Args:
        budget: Total budget; must parse to a number > 0.
        usage: Raw usage string (gaming / workstation / multimedia).
            Anything else gets gaming weights.
        finder: Affordability query used for every category lookup.

    Returns:
        BuildResponse with exactly one entry per ComponentType.

    Raises:
        InvalidBudgetError: before any lookup when the budget is invalid.
    """
    amount = parse_budget(budget)
    resolved, weights = resolve_profile(usage)

    build: dict[str, ProductOut | None] = {}
    debug: dict[str, str] = {}
    total = Decimal("0")

    for component_type in ComponentType:
        ceiling = category_ceiling(amount, weights[component_type])
        item = finder(component_type, ceiling)

        build[component_type.value] = item
        if item is None:
            debug[component_type.value] = (
                f"No product found in {component_type.table} "
                f"under {CURRENCY} {ceiling.quantize(CENT, ROUND_HALF_UP):,.2f}"
            )
        else:
            total += Decimal(str(item.price))

    label = classify_budget(amount)

    logger.info(
        "Suggested %s build for %s %s (%s): %d/%d categories filled, total %s",
        resolved.value, CURRENCY, amount, label,
        len(build) - len(debug), len(build), total,
    )

    return BuildResponse(
        build=build,
        total=float(total),
        label=label,
        usage=_usage_label(usage),
        debug=debug,
    )
