"""
Spell slot calculation, including multiclass spellcasting and pact magic.

Standard casters pool their caster levels (full = level, half = level // 2,
third = level // 3) and read the combined level off the multiclass
spellcaster table. Pact casters (warlocks) have their own short progression
that is never merged into the standard table.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .models import CasterType, ClassInfo, PactMagicSlots, SpellSlotResult, SpellSlotTable
from .safe import as_int, as_list, as_str, dig

logger = logging.getLogger("ddb-normalizer")


# =============================================================================
# Caster types
# =============================================================================

CLASS_CASTER_TYPES: dict[str, CasterType] = {
    "bard": CasterType.FULL,
    "cleric": CasterType.FULL,
    "druid": CasterType.FULL,
    "sorcerer": CasterType.FULL,
    "wizard": CasterType.FULL,
    "paladin": CasterType.HALF,
    "ranger": CasterType.HALF,
    "artificer": CasterType.THIRD,
    "fighter": CasterType.THIRD,
    "rogue": CasterType.THIRD,
    "warlock": CasterType.PACT,
}

# Classes that only cast through a specific subclass
SPELLCASTING_SUBCLASSES: dict[str, str] = {
    "fighter": "eldritch knight",
    "rogue": "arcane trickster",
}


def caster_type_for(class_name: str, subclass: str | None = None) -> CasterType:
    """Determine the caster type of a class/subclass pair.

    Args:
        class_name: Class name, any case.
        subclass: Subclass name, if chosen.

    Returns:
        The CasterType; NONE for non-casters and for fighters/rogues
        without their spellcasting subclass.
    """
    key = class_name.strip().lower()
    caster_type = CLASS_CASTER_TYPES.get(key, CasterType.NONE)
    required = SPELLCASTING_SUBCLASSES.get(key)
    if required is not None:
        chosen = (subclass or "").strip().lower().replace("_", " ")
        if required not in chosen:
            return CasterType.NONE
    return caster_type


def class_infos_from_raw(raw: dict) -> list[ClassInfo]:
    """Derive ClassInfo entries from the raw ``classes`` array.

    Args:
        raw: Raw D&D Beyond character JSON.

    Returns:
        One ClassInfo per class entry that has a name; order preserved.
    """
    infos: list[ClassInfo] = []
    for entry in as_list(dig(raw, "classes")):
        name = as_str(dig(entry, "definition", "name"))
        if not name:
            continue
        subclass = as_str(dig(entry, "subclassDefinition", "name")) or None
        infos.append(ClassInfo(
            name=name,
            level=max(0, as_int(dig(entry, "level"))),
            subclass=subclass,
            caster_type=caster_type_for(name, subclass),
        ))
    return infos


# =============================================================================
# Slot tables
# =============================================================================

# Multiclass spellcaster table: caster level → slots for spell levels 1–9
MULTICLASS_SPELL_SLOTS: dict[int, tuple[int, ...]] = {
    1: (2, 0, 0, 0, 0, 0, 0, 0, 0),
    2: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    3: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    4: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    5: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    6: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    7: (4, 3, 3, 1, 0, 0, 0, 0, 0),
    8: (4, 3, 3, 2, 0, 0, 0, 0, 0),
    9: (4, 3, 3, 3, 1, 0, 0, 0, 0),
    10: (4, 3, 3, 3, 2, 0, 0, 0, 0),
    11: (4, 3, 3, 3, 2, 1, 0, 0, 0),
    12: (4, 3, 3, 3, 2, 1, 0, 0, 0),
    13: (4, 3, 3, 3, 2, 1, 1, 0, 0),
    14: (4, 3, 3, 3, 2, 1, 1, 0, 0),
    15: (4, 3, 3, 3, 2, 1, 1, 1, 0),
    16: (4, 3, 3, 3, 2, 1, 1, 1, 0),
    17: (4, 3, 3, 3, 2, 1, 1, 1, 1),
    18: (4, 3, 3, 3, 3, 1, 1, 1, 1),
    19: (4, 3, 3, 3, 3, 2, 1, 1, 1),
    20: (4, 3, 3, 3, 3, 2, 2, 1, 1),
}

MAX_CASTER_LEVEL = 20

# Pact magic: (minimum pact level, slot count, slot level), highest first
PACT_MAGIC_PROGRESSION: tuple[tuple[int, int, int], ...] = (
    (15, 2, 5),
    (11, 2, 4),
    (7, 2, 3),
    (3, 2, 2),
    (2, 2, 1),
    (1, 1, 1),
)


def standard_slots_for(caster_level: int) -> SpellSlotTable:
    """Slots from the multiclass table; caster levels above 20 use row 20."""
    if caster_level <= 0:
        return SpellSlotTable()
    row = MULTICLASS_SPELL_SLOTS[min(caster_level, MAX_CASTER_LEVEL)]
    return SpellSlotTable(
        slots={level: count for level, count in enumerate(row, start=1) if count > 0}
    )


def pact_slots_for(pact_level: int) -> PactMagicSlots:
    """Pact magic slots for a total pact caster level."""
    for minimum, slots, slot_level in PACT_MAGIC_PROGRESSION:
        if pact_level >= minimum:
            return PactMagicSlots(slot_level=slot_level, slots=slots)
    return PactMagicSlots()


# =============================================================================
# Calculator
# =============================================================================

class SpellSlotCalculator:
    """Computes standard and pact spell slots for a list of classes."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def calculate(self, class_infos: Iterable[ClassInfo]) -> SpellSlotResult:
        """Calculate spell slots.

        Args:
            class_infos: The character's classes with caster types.

        Returns:
            SpellSlotResult with standard slots, pact slots and, when debug
            is enabled, the per-class caster-level breakdown.
        """
        infos = list(class_infos)
        caster_level = sum(info.caster_level_contribution for info in infos)
        pact_level = sum(info.pact_level_contribution for info in infos)

        spell_slots = standard_slots_for(caster_level)
        pact_slots = pact_slots_for(pact_level)

        debug_info: dict[str, Any] = {}
        if self.debug:
            debug_info = {
                "calculation_method": self._method(infos, caster_level, pact_level),
                "caster_level": caster_level,
                "pact_level": pact_level,
                "caster_level_calculation": [
                    {
                        "class_name": info.name,
                        "level": info.level,
                        "caster_type": info.caster_type.value,
                        "contributes": info.caster_level_contribution,
                        "pact_contributes": info.pact_level_contribution,
                    }
                    for info in infos
                ],
            }
            logger.debug(f"Spell slot calculation: {debug_info}")

        return SpellSlotResult(
            spell_slots=spell_slots,
            pact_magic_slots=pact_slots,
            caster_level=caster_level,
            pact_level=pact_level,
            debug_info=debug_info,
        )

    @staticmethod
    def _method(infos: list[ClassInfo], caster_level: int, pact_level: int) -> str:
        if caster_level <= 0 and pact_level <= 0:
            return "none"
        if caster_level > 0 and pact_level > 0:
            return "mixed"
        if pact_level > 0:
            return "pact_magic_only"
        casters = [i for i in infos if i.caster_level_contribution > 0]
        return "single_class" if len(casters) == 1 else "multiclass"
