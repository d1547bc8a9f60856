"""
Encumbrance classification (variant encumbrance rules).

Carrying capacity is a linear multiple of strength. A racial size-bonus trait
such as Powerful Build counts the character as one size larger, which is
modeled by doubling the strength used for capacity (capped at 29) without
touching the actual ability score.
"""

from __future__ import annotations

import logging

from .models import CarryingCapacity, EncumbranceLevel, EncumbranceResult
from .safe import as_list, as_str, dig

logger = logging.getLogger("ddb-normalizer")

# Effective strength cap when the size-bonus trait doubles strength
MAX_EFFECTIVE_STRENGTH = 29

# Carrying-capacity multipliers of effective strength
NORMAL_MULTIPLIER = 5
HEAVY_MULTIPLIER = 10
MAXIMUM_MULTIPLIER = 15
PUSH_DRAG_LIFT_MULTIPLIER = 30

# Level → (speed penalty in feet, disadvantage on STR/DEX/CON checks)
ENCUMBRANCE_PENALTIES: dict[EncumbranceLevel, tuple[int, bool]] = {
    EncumbranceLevel.UNENCUMBERED: (0, False),
    EncumbranceLevel.ENCUMBERED: (10, False),
    EncumbranceLevel.HEAVILY_ENCUMBERED: (20, True),
    EncumbranceLevel.OVERLOADED: (0, True),
}

# Racial traits that count the character as one size larger for carrying
SIZE_BONUS_TRAITS = frozenset({"powerful build", "hippo build", "little giant"})
SIZE_BONUS_RACES = ("goliath",)


def has_powerful_build(raw: dict) -> bool:
    """Detect a carrying-capacity size-bonus trait on the character's race.

    Args:
        raw: Raw D&D Beyond character JSON.

    Returns:
        True if the race is a Goliath or any racial trait grants Powerful
        Build (or an equivalent trait).
    """
    race_name = (
        as_str(dig(raw, "race", "fullName"))
        or as_str(dig(raw, "race", "baseName"))
    ).lower()
    if any(name in race_name for name in SIZE_BONUS_RACES):
        return True

    traits = [
        *as_list(dig(raw, "race", "racialTraits")),
        *as_list(dig(raw, "race", "subraceDefinition", "racialTraits")),
    ]
    for trait in traits:
        name = as_str(dig(trait, "definition", "name")) or as_str(dig(trait, "name"))
        if name.lower() in SIZE_BONUS_TRAITS:
            return True
    return False


def carrying_capacity(effective_strength: int) -> CarryingCapacity:
    """Carrying-capacity thresholds for an effective strength."""
    strength = max(0, effective_strength)
    return CarryingCapacity(
        normal=strength * NORMAL_MULTIPLIER,
        encumbered=strength * NORMAL_MULTIPLIER,
        heavily_encumbered=strength * HEAVY_MULTIPLIER,
        maximum=strength * MAXIMUM_MULTIPLIER,
        push_drag_lift=strength * PUSH_DRAG_LIFT_MULTIPLIER,
    )


class EncumbranceCalculator:
    """Classifies a carried weight into an encumbrance level."""

    def calculate(
        self,
        strength_score: int,
        has_size_bonus_trait: bool,
        total_weight: float,
    ) -> EncumbranceResult:
        """Classify carry load.

        Args:
            strength_score: Resolved strength score.
            has_size_bonus_trait: Whether Powerful Build (or equivalent)
                applies.
            total_weight: Total carried weight in pounds.

        Returns:
            EncumbranceResult with capacity, level and penalties.
        """
        effective = strength_score
        if has_size_bonus_trait:
            effective = min(strength_score * 2, MAX_EFFECTIVE_STRENGTH)

        capacity = carrying_capacity(effective)
        level = self.level_for(total_weight, capacity)
        speed_penalty, disadvantage = ENCUMBRANCE_PENALTIES[level]

        logger.debug(
            f"Encumbrance: {total_weight} lb against STR {effective} -> {level.value}"
        )

        return EncumbranceResult(
            strength=strength_score,
            effective_strength=effective,
            has_size_bonus=has_size_bonus_trait,
            total_weight=total_weight,
            capacity=capacity,
            encumbrance_level=level,
            speed_penalty=speed_penalty,
            has_disadvantage=disadvantage,
            can_move=level != EncumbranceLevel.OVERLOADED,
        )

    @staticmethod
    def level_for(total_weight: float, capacity: CarryingCapacity) -> EncumbranceLevel:
        """Select the encumbrance level for a weight; thresholds are exclusive."""
        if total_weight > capacity.maximum:
            return EncumbranceLevel.OVERLOADED
        if total_weight > capacity.heavily_encumbered:
            return EncumbranceLevel.HEAVILY_ENCUMBERED
        if total_weight > capacity.encumbered:
            return EncumbranceLevel.ENCUMBERED
        return EncumbranceLevel.UNENCUMBERED
