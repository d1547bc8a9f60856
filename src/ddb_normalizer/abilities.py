"""
Ability score resolution.

D&D Beyond scatters ability scores across several competing sources: base
stats, a manual bonus, a manual override, and ``<ability>-score`` bonus
modifiers granted by race, class, background, items and feats. The resolver
merges them into the six final scores.
"""

from __future__ import annotations

import logging
from typing import Any

from .importers.dndbeyond.schema import (
    ABILITY_BONUS_SECTIONS,
    ABILITY_SCORE_SUBTYPES,
    MODIFIER_TYPE_BONUS,
    STAT_ID_MAP,
)
from .models import AbilityScore, AbilityScores
from .safe import as_dict, as_int, as_list, as_str, dig, optional_int

logger = logging.getLogger("ddb-normalizer")

DEFAULT_BASE_SCORE = 10


def _stat_map(entries: Any) -> dict[int, int | None]:
    """Collapse a DDB stat array ``[{"id": 1, "value": 15}, ...]`` into a dict."""
    result: dict[int, int | None] = {}
    for entry in as_list(entries):
        stat_id = optional_int(dig(entry, "id"))
        if stat_id in STAT_ID_MAP:
            result[stat_id] = optional_int(dig(entry, "value"))
    return result


def modifier_bonuses(raw: dict) -> dict[str, int]:
    """Sum ability score bonus modifiers from every bonus-granting section.

    Args:
        raw: Raw D&D Beyond character JSON.

    Returns:
        Ability name → total bonus from modifiers.
    """
    bonuses = {ability: 0 for ability in STAT_ID_MAP.values()}
    modifiers = as_dict(dig(raw, "modifiers"))

    for section_name in ABILITY_BONUS_SECTIONS:
        for mod in as_list(modifiers.get(section_name)):
            if dig(mod, "type") != MODIFIER_TYPE_BONUS:
                continue
            ability = ABILITY_SCORE_SUBTYPES.get(as_str(dig(mod, "subType")))
            if ability:
                bonuses[ability] += as_int(dig(mod, "value"))
    return bonuses


class AbilityResolver:
    """Resolves final ability scores from a raw character record.

    For each ability the final score is the override when one is set,
    otherwise base (default 10) + manual bonus + modifier bonuses. Scores are
    never clamped; out-of-range values are left for validation to flag.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.debug_info: dict[str, dict[str, int | None]] = {}

    def resolve(self, raw: dict) -> AbilityScores:
        """Resolve the six ability scores.

        Args:
            raw: Raw D&D Beyond character JSON. Not modified.

        Returns:
            AbilityScores with one entry per ability.
        """
        base_stats = _stat_map(dig(raw, "stats"))
        bonus_stats = _stat_map(dig(raw, "bonusStats"))
        override_stats = _stat_map(dig(raw, "overrideStats"))
        bonuses = modifier_bonuses(raw)

        scores: dict[str, AbilityScore] = {}
        breakdown: dict[str, dict[str, int | None]] = {}

        for stat_id, ability in STAT_ID_MAP.items():
            override = override_stats.get(stat_id)
            base = base_stats.get(stat_id)
            if base is None:
                base = DEFAULT_BASE_SCORE
            bonus = bonus_stats.get(stat_id) or 0

            if override is not None:
                final = override
            else:
                final = base + bonus + bonuses[ability]

            scores[ability] = AbilityScore(score=final)
            breakdown[ability] = {
                "base": base,
                "bonus": bonus,
                "modifiers": bonuses[ability],
                "override": override,
                "final": final,
            }

        if self.debug:
            self.debug_info = breakdown
            logger.debug(f"Resolved ability scores: {breakdown}")

        return AbilityScores(**scores)
