"""Usage-based budget share allocations.

Each usage profile splits the total budget across the ten component
categories. Higher weight = bigger price ceiling for that category.
"""

from __future__ import annotations

import logging

from gearsphere.models.components import ComponentType, Usage

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────
# Weight Profiles
# ──────────────────────────────────────────────

# Values sum to 1.0 for each usage.
USAGE_WEIGHTS: dict[Usage, dict[ComponentType, float]] = {
    Usage.GAMING: {
        ComponentType.CPU: 0.15,
        ComponentType.GPU: 0.30,
        ComponentType.RAM: 0.10,
        ComponentType.STORAGE: 0.10,
        ComponentType.MOTHERBOARD: 0.12,
        ComponentType.PSU: 0.06,
        ComponentType.CASE: 0.05,
        ComponentType.COOLER: 0.03,
        ComponentType.OS: 0.04,
        ComponentType.MONITOR: 0.05,
    },
    Usage.WORKSTATION: {
        ComponentType.CPU: 0.25,
        ComponentType.GPU: 0.20,
        ComponentType.RAM: 0.12,
        ComponentType.STORAGE: 0.12,
        ComponentType.MOTHERBOARD: 0.12,
        ComponentType.PSU: 0.06,
        ComponentType.CASE: 0.04,
        ComponentType.COOLER: 0.03,
        ComponentType.OS: 0.03,
        ComponentType.MONITOR: 0.03,
    },
    Usage.MULTIMEDIA: {
        ComponentType.CPU: 0.18,
        ComponentType.GPU: 0.22,
        ComponentType.RAM: 0.10,
        ComponentType.STORAGE: 0.10,
        ComponentType.MOTHERBOARD: 0.12,
        ComponentType.PSU: 0.05,
        ComponentType.CASE: 0.05,
        ComponentType.COOLER: 0.03,
        ComponentType.OS: 0.05,
        ComponentType.MONITOR: 0.10,
    },
}

DEFAULT_USAGE = Usage.GAMING


def normalize_usage(usage: str | None) -> str:
    """Trim and lowercase a raw usage string (``None`` → ``""``)."""
    return (usage or "").strip().lower()


def resolve_profile(usage: str | None) -> tuple[Usage, dict[ComponentType, float]]:
    """Return the weight profile for a raw usage string.

    Unrecognized usage silently falls back to gaming weights.
    """
    normalized = normalize_usage(usage)
    try:
        resolved = Usage(normalized)
    except ValueError:
        logger.warning(
            "Unrecognized usage %r — falling back to %s weights",
            usage, DEFAULT_USAGE.value,
        )
        resolved = DEFAULT_USAGE
    return resolved, USAGE_WEIGHTS[resolved]

