"""
D&D 5th Edition rule pack.

Checks game-rule consistency on top of the core presence checks: ability
score ranges, proficiency math, hit point and armor class plausibility,
spell slot progression and expected class features. Register it with::

    engine = ValidationEngine()
    engine.add_rules(DND5E_RULES)

Most checks are informational: homebrew and house rules are common on
D&D Beyond, so out-of-band values lower accuracy rather than erroring.
"""

from __future__ import annotations

import re
from typing import Any

from ..abilities import AbilityResolver
from ..importers.dndbeyond.schema import (
    ABILITY_BONUS_SECTIONS,
    ABILITY_NAMES,
    ABILITY_SCORE_SUBTYPES,
    CLASS_HIT_DICE,
    DAMAGE_TYPES,
    MODIFIER_TYPE_BONUS,
    SKILL_ABILITIES,
    SPELL_SCHOOLS,
)
from ..models import ClassInfo
from ..safe import as_int, as_list, as_str, dig
from ..spell_slots import pact_slots_for, standard_slots_for
from .models import Severity, ValidationResult, ValidationRule

Data = dict[str, Any]

MAX_CHARACTER_LEVEL = 20
MAX_NAME_LENGTH = 100


# =============================================================================
# Reference tables
# =============================================================================

# Base race (lowercase) → recognised subraces (lowercase substrings)
KNOWN_SUBRACES: dict[str, tuple[str, ...]] = {
    "dwarf": ("hill", "mountain", "duergar"),
    "elf": ("high", "wood", "dark", "drow", "eladrin", "sea", "shadar-kai", "pallid"),
    "halfling": ("lightfoot", "stout", "ghostwise", "lotusden"),
    "gnome": ("forest", "rock", "deep", "svirfneblin"),
    "genasi": ("air", "earth", "fire", "water"),
    "aasimar": ("protector", "scourge", "fallen"),
}

# Any one of the listed abilities satisfies a requirement group
MULTICLASS_REQUIREMENTS: dict[str, list[tuple[str, ...]]] = {
    "barbarian": [("strength",)],
    "bard": [("charisma",)],
    "cleric": [("wisdom",)],
    "druid": [("wisdom",)],
    "fighter": [("strength", "dexterity")],
    "monk": [("dexterity",), ("wisdom",)],
    "paladin": [("strength",), ("charisma",)],
    "ranger": [("dexterity",), ("wisdom",)],
    "rogue": [("dexterity",)],
    "sorcerer": [("charisma",)],
    "warlock": [("charisma",)],
    "wizard": [("intelligence",)],
    "artificer": [("intelligence",)],
}
MULTICLASS_MINIMUM_SCORE = 13

# Skill proficiencies chosen at 1st level
CLASS_SKILL_CHOICES: dict[str, int] = {
    "artificer": 2,
    "barbarian": 2,
    "bard": 3,
    "cleric": 2,
    "druid": 2,
    "fighter": 2,
    "monk": 2,
    "paladin": 2,
    "ranger": 3,
    "rogue": 4,
    "sorcerer": 2,
    "warlock": 2,
    "wizard": 2,
}

# Skill proficiencies granted when multiclassing into the class
MULTICLASS_SKILL_GRANTS: dict[str, int] = {
    "bard": 1,
    "ranger": 1,
    "rogue": 1,
}

# Class (lowercase) → (level gained, feature name) every member of the class has
EXPECTED_CLASS_FEATURES: dict[str, list[tuple[int, str]]] = {
    "barbarian": [(1, "Rage"), (1, "Unarmored Defense"), (2, "Reckless Attack")],
    "bard": [(1, "Bardic Inspiration"), (1, "Spellcasting")],
    "cleric": [(1, "Spellcasting"), (2, "Channel Divinity")],
    "druid": [(1, "Spellcasting"), (2, "Wild Shape")],
    "fighter": [(1, "Fighting Style"), (1, "Second Wind"), (2, "Action Surge"), (5, "Extra Attack")],
    "monk": [(1, "Martial Arts"), (1, "Unarmored Defense")],
    "paladin": [(1, "Divine Sense"), (1, "Lay on Hands"), (2, "Spellcasting")],
    "ranger": [(2, "Spellcasting")],
    "rogue": [(1, "Expertise"), (1, "Sneak Attack"), (1, "Thieves' Cant"), (2, "Cunning Action")],
    "sorcerer": [(1, "Spellcasting"), (2, "Font of Magic")],
    "warlock": [(1, "Pact Magic"), (2, "Eldritch Invocations")],
    "wizard": [(1, "Spellcasting"), (1, "Arcane Recovery")],
}

DAMAGE_DICE_PATTERN = re.compile(r"\d+d\d+")
ABILITY_SCORE_FLOOR = 3
ABILITY_SCORE_CEILING = 20
ABILITY_SCORE_HARD_LIMIT = 30
MAX_RACIAL_BONUS_TOTAL = 4
ENCUMBRANCE_LEVELS_OK = ("unencumbered", "encumbered")


def _ok(message: str, accuracy: float = 100) -> ValidationResult:
    return ValidationResult(valid=True, severity=Severity.SUCCESS, message=message, accuracy=accuracy)


def _info(message: str, accuracy: float = 100) -> ValidationResult:
    return ValidationResult(valid=True, severity=Severity.INFO, message=message, accuracy=accuracy)


def _warn(message: str, accuracy: float, details: list[str] | None = None,
          suggestions: list[str] | None = None) -> ValidationResult:
    return ValidationResult(
        valid=False,
        severity=Severity.WARNING,
        message=message,
        accuracy=accuracy,
        details=details or [],
        suggestions=suggestions or [],
    )


def _percent(good: int, total: int) -> float:
    return good / total * 100 if total else 100


def _class_infos(data: Data) -> list[ClassInfo]:
    return [ClassInfo(**c) for c in data.get("classes") or []]


# =============================================================================
# Identity
# =============================================================================

def check_character_name_format(data: Data, source: Data | None = None) -> ValidationResult:
    name = data.get("name") or ""
    if not name.strip() or name == "Unknown Character":
        return _warn("Character has no real name", 50)
    if len(name) > MAX_NAME_LENGTH:
        return _warn(f"Name is longer than {MAX_NAME_LENGTH} characters", 70)
    if any(ord(ch) < 32 for ch in name):
        return _warn("Name contains control characters", 70)
    if name.strip().isdigit():
        return _warn("Name is only digits", 70)
    return _ok("Name format valid")


def check_race_subrace(data: Data, source: Data | None = None) -> ValidationResult:
    race = (data.get("race") or "").lower()
    subrace = (data.get("subrace") or "").lower()
    if not race:
        return _info("No race to check")

    for base, subraces in KNOWN_SUBRACES.items():
        if not re.search(rf"\b{base}\b", race) or "half" in race:
            continue
        if subrace and not any(known in subrace for known in subraces):
            return _warn(
                f"Subrace '{data.get('subrace')}' is not a recognised {base} subrace",
                70,
                suggestions=["Homebrew subraces are fine; check the race was imported correctly"],
            )
        return _ok("Race and subrace combination recognised")
    return _info("Race has no subrace requirements")


def check_multiclass_levels(data: Data, source: Data | None = None) -> ValidationResult:
    classes = _class_infos(data)
    if not classes:
        return _info("No classes to check")

    issues = []
    names = [c.name.lower() for c in classes]
    for duplicate in sorted({n for n in names if names.count(n) > 1}):
        issues.append(f"Class '{duplicate}' appears more than once")
    for c in classes:
        if not 1 <= c.level <= MAX_CHARACTER_LEVEL:
            issues.append(f"{c.name} level {c.level} is outside 1-{MAX_CHARACTER_LEVEL}")
    total = sum(c.level for c in classes)
    if total > MAX_CHARACTER_LEVEL:
        issues.append(f"Total level {total} exceeds {MAX_CHARACTER_LEVEL}")
    if issues:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message="Class levels are inconsistent",
            accuracy=0,
            details=issues,
        )

    if len(classes) > 1 and source is not None:
        scores = AbilityResolver().resolve(source).as_dict()
        unmet = []
        for c in classes:
            for group in MULTICLASS_REQUIREMENTS.get(c.name.lower(), []):
                if not any(scores.get(ability, 0) >= MULTICLASS_MINIMUM_SCORE for ability in group):
                    unmet.append(f"{c.name} requires {' or '.join(group)} {MULTICLASS_MINIMUM_SCORE}")
        if unmet:
            return _warn("Multiclass ability prerequisites not met", 80, details=unmet)

    if len(classes) > 1:
        return _ok(f"Multiclass levels valid ({total} total)")
    return _ok("Single class levels valid")


# =============================================================================
# Abilities
# =============================================================================

def check_ability_score_ranges(data: Data, source: Data | None = None) -> ValidationResult:
    scores = data.get("scores") or {}
    per_ability = []
    unusual = []
    impossible = []
    for name in ABILITY_NAMES:
        score = scores.get(name)
        if not isinstance(score, int):
            continue
        if ABILITY_SCORE_FLOOR <= score <= ABILITY_SCORE_CEILING:
            per_ability.append(100)
        elif 1 <= score <= ABILITY_SCORE_HARD_LIMIT:
            per_ability.append(80)
            unusual.append(f"{name} {score}")
        else:
            per_ability.append(0)
            impossible.append(f"{name} {score}")

    accuracy = sum(per_ability) / len(per_ability) if per_ability else 0
    if impossible:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message=f"Ability scores outside 1-{ABILITY_SCORE_HARD_LIMIT}",
            accuracy=accuracy,
            details=impossible,
        )
    if unusual:
        return ValidationResult(
            valid=True,
            severity=Severity.WARNING,
            message=f"Ability scores outside the usual {ABILITY_SCORE_FLOOR}-{ABILITY_SCORE_CEILING}",
            accuracy=accuracy,
            details=unusual,
        )
    return _ok("Ability scores within normal range")


def _ability_bonus_total(source: Data, sections: tuple[str, ...]) -> int:
    total = 0
    for section in sections:
        for mod in as_list(dig(source, "modifiers", section)):
            if (
                isinstance(mod, dict)
                and mod.get("type") == MODIFIER_TYPE_BONUS
                and as_str(mod.get("subType")) in ABILITY_SCORE_SUBTYPES
            ):
                total += as_int(mod.get("value"))
    return total


def check_racial_ability_bonuses(data: Data, source: Data | None = None) -> ValidationResult:
    if source is None:
        return _info("Raw character data unavailable")
    total = _ability_bonus_total(source, ("race",))
    if total == 0:
        others = tuple(s for s in ABILITY_BONUS_SECTIONS if s != "race")
        if _ability_bonus_total(source, others):
            return _info("Ability bonuses come from background or other sources")
        return _info("No racial ability bonuses found")
    if total > MAX_RACIAL_BONUS_TOTAL:
        return _warn(f"Racial ability bonuses total +{total}", 70)
    return _ok(f"Racial ability bonuses total +{total}")


# =============================================================================
# Skills
# =============================================================================

def check_proficiency_bonus(data: Data, source: Data | None = None) -> ValidationResult:
    bonus = data.get("proficiency_bonus")
    level = data.get("level") or 0
    if bonus is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Proficiency bonus is missing",
            accuracy=0,
            missing_data=["proficiency_bonus"],
        )
    if level < 1:
        return _info("Level unknown, proficiency bonus not checked")
    expected = (min(level, MAX_CHARACTER_LEVEL) - 1) // 4 + 2
    if bonus != expected:
        return _warn(f"Proficiency bonus +{bonus} does not match level {level} (+{expected})", 50)
    return _ok(f"Proficiency bonus +{bonus}")


def check_skill_modifiers(data: Data, source: Data | None = None) -> ValidationResult:
    skills = data.get("skills") or []
    if not skills:
        return _info("No skills to check")
    bonus = data.get("proficiency_bonus") or 0
    ability_mods = data.get("ability_modifiers") or {}

    wrong = []
    for skill in skills:
        multiplier = 2 if skill.get("expertise") else 1 if skill.get("proficient") else 0
        expected = (
            ability_mods.get(SKILL_ABILITIES.get(skill.get("name"), ""), 0)
            + bonus * multiplier
            + (skill.get("bonus") or 0)
        )
        if skill.get("modifier") != expected:
            wrong.append(f"{skill.get('name')}: expected {expected:+d}, got {skill.get('modifier')}")
        elif skill.get("expertise") and not skill.get("proficient"):
            wrong.append(f"{skill.get('name')}: expertise without proficiency")

    if wrong:
        return _warn(
            "Skill modifiers inconsistent",
            _percent(len(skills) - len(wrong), len(skills)),
            details=wrong,
        )
    return _ok("Skill modifiers consistent")


def check_class_skill_proficiencies(data: Data, source: Data | None = None) -> ValidationResult:
    classes = _class_infos(data)
    if not classes:
        return _info("No classes to check")
    expected = CLASS_SKILL_CHOICES.get(classes[0].name.lower(), 0)
    expected += sum(MULTICLASS_SKILL_GRANTS.get(c.name.lower(), 0) for c in classes[1:])
    proficient = sum(1 for s in data.get("skills") or [] if s.get("proficient"))
    if proficient < expected:
        return _warn(
            f"{proficient} skill proficiencies, classes grant at least {expected}",
            _percent(proficient, expected),
            suggestions=["Choose class skill proficiencies in the D&D Beyond builder"],
        )
    return _ok(f"{proficient} skill proficiencies (classes grant {expected})")


# =============================================================================
# Combat
# =============================================================================

def check_armor_class_calculation(data: Data, source: Data | None = None) -> ValidationResult:
    armor_class = data.get("armor_class")
    if armor_class is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Armor class is missing",
            accuracy=0,
            missing_data=["armor_class"],
        )
    dex_mod = (data.get("ability_modifiers") or {}).get("dexterity", 0)
    if armor_class < min(10, 10 + dex_mod) - 2:
        return _warn(f"AC {armor_class} is lower than unarmored AC {10 + dex_mod}", 60)
    if armor_class > 25:
        return _warn(f"AC {armor_class} is unusually high", 70)
    return _ok(f"AC {armor_class} plausible")


def check_hit_points_calculation(data: Data, source: Data | None = None) -> ValidationResult:
    hp_max = data.get("hit_points_max")
    if hp_max is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Hit points are missing",
            accuracy=0,
            missing_data=["hit_points"],
        )
    classes = [c for c in _class_infos(data) if c.level > 0]
    if not classes:
        return _info("No class levels, hit points not checked")

    level = sum(c.level for c in classes)
    con_mod = (data.get("ability_modifiers") or {}).get("constitution", 0)
    dice_total = 0
    for c in classes:
        die = CLASS_HIT_DICE.get(c.name, "d8")
        dice_total += int(die[1:]) * c.level
    # Generous ceiling: every die maxed plus +2/level for Tough and similar
    ceiling = dice_total + (con_mod + 2) * level
    floor = max(1, level + min(0, con_mod) * level)

    if hp_max > ceiling:
        return _warn(f"Max HP {hp_max} exceeds the maximum possible ({ceiling})", 60)
    if hp_max < floor:
        return _warn(f"Max HP {hp_max} is below the minimum possible ({floor})", 60)
    return _ok(f"Max HP {hp_max} within {floor}-{ceiling}")


def check_speed(data: Data, source: Data | None = None) -> ValidationResult:
    speed = data.get("speed")
    if speed is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Speed is missing",
            accuracy=0,
            missing_data=["speed"],
        )
    if speed <= 0 or speed % 5:
        return _warn(f"Speed {speed} ft is not a positive multiple of 5", 50)
    if speed > 120:
        return _warn(f"Speed {speed} ft is unusually high", 70)
    return _ok(f"Speed {speed} ft")


# =============================================================================
# Equipment
# =============================================================================

def check_equipment_structure(data: Data, source: Data | None = None) -> ValidationResult:
    items = data.get("items") or []
    diagnostics = data.get("diagnostics") or []
    if not items:
        return _info("No items to check")

    bad = []
    for item in items:
        label = item.get("name") or f"item {item.get('id')}"
        if not item.get("name"):
            bad.append(f"{label}: missing name")
        elif (item.get("quantity") or 0) < 0:
            bad.append(f"{label}: negative quantity")
        elif (item.get("weight") or 0) < 0:
            bad.append(f"{label}: negative weight")

    if bad or diagnostics:
        accuracy = max(0, _percent(len(items) - len(bad), len(items)) - 10 * len(diagnostics))
        return _warn("Inventory structure has problems", accuracy, details=bad + diagnostics)
    return _ok(f"{len(items)} items in a consistent container tree")


def check_weapon_properties(data: Data, source: Data | None = None) -> ValidationResult:
    weapons = [i for i in data.get("items") or [] if i.get("category") == "weapon"]
    if not weapons:
        return _info("No weapons to check")
    incomplete = []
    for weapon in weapons:
        problems = []
        if not DAMAGE_DICE_PATTERN.search(weapon.get("damage") or ""):
            problems.append("damage dice")
        if (weapon.get("damage_type") or "").lower() not in DAMAGE_TYPES:
            problems.append("damage type")
        if problems:
            incomplete.append(f"{weapon.get('name')}: missing {' and '.join(problems)}")
    if incomplete:
        return ValidationResult(
            valid=False,
            severity=Severity.INFO,
            message=f"{len(incomplete)} of {len(weapons)} weapons lack damage data",
            accuracy=_percent(len(weapons) - len(incomplete), len(weapons)),
            details=incomplete,
        )
    return _ok(f"{len(weapons)} weapons with complete damage data")


def check_armor_ac_contribution(data: Data, source: Data | None = None) -> ValidationResult:
    armor = [i for i in data.get("items") or [] if i.get("category") == "armor"]
    if not armor:
        return _info("No armor to check")
    missing = [a.get("name") for a in armor if not (a.get("armor_class") or 0) > 0]
    if missing:
        return ValidationResult(
            valid=False,
            severity=Severity.INFO,
            message=f"{len(missing)} armor items have no AC value",
            accuracy=_percent(len(armor) - len(missing), len(armor)),
            details=missing,
        )
    return _ok(f"{len(armor)} armor items with AC values")


def check_encumbrance_status(data: Data, source: Data | None = None) -> ValidationResult:
    encumbrance = data.get("encumbrance")
    if not encumbrance:
        return _info("Encumbrance not calculated")
    level = encumbrance.get("encumbrance_level")
    carried = encumbrance.get("total_weight", data.get("total_weight", 0))
    if level in ENCUMBRANCE_LEVELS_OK:
        penalty = encumbrance.get("speed_penalty") or 0
        suffix = f", speed -{penalty} ft" if penalty else ""
        return _ok(f"{str(level).replace('_', ' ').capitalize()} ({carried:g} lb{suffix})")
    if level == "heavily_encumbered":
        return ValidationResult(
            valid=True,
            severity=Severity.WARNING,
            message=f"Heavily encumbered ({carried:g} lb)",
            accuracy=90,
        )
    return _warn(
        f"Overloaded ({carried:g} lb): character cannot move",
        60,
        suggestions=["Drop or stash items before play"],
    )


# =============================================================================
# Spells
# =============================================================================

def check_spell_slot_progression(data: Data, source: Data | None = None) -> ValidationResult:
    classes = _class_infos(data)
    caster_level = sum(c.caster_level_contribution for c in classes)
    pact_level = sum(c.pact_level_contribution for c in classes)
    slots = {int(k): v for k, v in (data.get("spell_slots") or {}).items() if v}
    pact = data.get("pact_magic_slots") or {}

    if caster_level == 0 and pact_level == 0:
        if slots or pact.get("slots"):
            return _warn("Spell slots present for a non-spellcaster", 50)
        return _ok("Non-spellcaster")

    if not slots and not pact.get("slots"):
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Spellcaster with no spell slots",
            accuracy=60,
            missing_data=["spell_slots"],
        )

    expected = standard_slots_for(caster_level).slots
    expected_pact = pact_slots_for(pact_level)
    problems = []
    if slots != expected:
        problems.append(f"standard slots {slots} != expected {expected} for caster level {caster_level}")
    if (pact.get("slots") or 0, pact.get("slot_level") or 0) != (expected_pact.slots, expected_pact.slot_level):
        problems.append(
            f"pact slots {pact.get('slots')}xL{pact.get('slot_level')} != expected "
            f"{expected_pact.slots}xL{expected_pact.slot_level}"
        )
    if problems:
        return _warn("Spell slots do not follow the class progression", 50, details=problems)
    return _ok("Spell slots follow the class progression")


def check_spell_list(data: Data, source: Data | None = None) -> ValidationResult:
    spells = data.get("known_spells") or []
    if not spells:
        return _info("No spells to check")

    issues = []
    for spell in spells:
        name = spell.get("name") or "unnamed spell"
        level = spell.get("level")
        school = spell.get("school")
        if not isinstance(level, int) or not 0 <= level <= 9:
            issues.append(f"{name}: invalid level {level}")
        elif school and school.lower() not in SPELL_SCHOOLS:
            issues.append(f"{name}: unknown school '{school}'")

    if issues:
        return _warn(
            "Some spells have invalid data",
            _percent(len(spells) - len(issues), len(spells)),
            details=issues,
        )
    return _ok(f"{len(spells)} spells valid")


# =============================================================================
# Features
# =============================================================================

def check_feature_completeness(data: Data, source: Data | None = None) -> ValidationResult:
    features = data.get("features") or []
    if not features:
        return _info("No features to check", accuracy=50)

    incomplete = []
    for feature in features:
        missing = [key for key in ("name", "description") if not (feature.get(key) or "").strip()]
        if missing:
            incomplete.append(f"{feature.get('name') or feature.get('id')}: no {' or '.join(missing)}")
    if incomplete:
        return ValidationResult(
            valid=False,
            severity=Severity.INFO,
            message=f"{len(incomplete)} features are incomplete",
            accuracy=_percent(len(features) - len(incomplete), len(features)),
            details=incomplete,
        )
    return _ok(f"{len(features)} features complete")


def check_class_feature_progression(data: Data, source: Data | None = None) -> ValidationResult:
    classes = _class_infos(data)
    features = data.get("features") or []
    if not classes or not features:
        return _info("No class features to check")

    expected_count = 0
    missing = []
    for c in classes:
        owned = [
            (f.get("name") or "").lower()
            for f in features
            if (f.get("class_name") or "").lower() == c.name.lower()
        ]
        for level, name in EXPECTED_CLASS_FEATURES.get(c.name.lower(), []):
            if level > c.level:
                continue
            expected_count += 1
            if not any(name.lower() in feature_name for feature_name in owned):
                missing.append(f"{c.name} {level}: {name}")

    if expected_count == 0:
        return _info("No expected features for these classes")
    if missing:
        return ValidationResult(
            valid=False,
            severity=Severity.INFO,
            message=f"{len(missing)} expected class features not found",
            accuracy=_percent(expected_count - len(missing), expected_count),
            details=missing,
        )
    return _ok(f"All {expected_count} expected class features present")


# =============================================================================
# Registration
# =============================================================================

DND5E_RULES: dict[str, list[ValidationRule]] = {
    "identity": [
        ValidationRule("character-name-format", "Character Name Format", check_character_name_format),
        ValidationRule("race-subrace-validation", "Race and Subrace", check_race_subrace),
        ValidationRule("multiclass-level-validation", "Multiclass Levels", check_multiclass_levels),
    ],
    "abilities": [
        ValidationRule("ability-score-ranges", "Ability Score Ranges", check_ability_score_ranges),
        ValidationRule("racial-ability-bonuses", "Racial Ability Bonuses", check_racial_ability_bonuses),
    ],
    "skills": [
        ValidationRule("proficiency-bonus", "Proficiency Bonus", check_proficiency_bonus),
        ValidationRule("skill-proficiency-validation", "Skill Modifiers", check_skill_modifiers),
        ValidationRule("class-skill-proficiencies", "Class Skill Proficiencies", check_class_skill_proficiencies),
    ],
    "combat": [
        ValidationRule("armor-class-calculation", "Armor Class Calculation", check_armor_class_calculation),
        ValidationRule("hit-points-calculation", "Hit Points Calculation", check_hit_points_calculation),
        ValidationRule("speed-validation", "Speed", check_speed),
    ],
    "equipment": [
        ValidationRule("equipment-structure", "Equipment Structure", check_equipment_structure),
        ValidationRule("weapon-properties", "Weapon Properties", check_weapon_properties),
        ValidationRule("armor-ac-contribution", "Armor AC Values", check_armor_ac_contribution),
        ValidationRule("encumbrance-status", "Encumbrance", check_encumbrance_status),
    ],
    "spells": [
        ValidationRule("spell-slots-progression", "Spell Slot Progression", check_spell_slot_progression),
        ValidationRule("spell-list-validation", "Spell List", check_spell_list),
    ],
    "features": [
        ValidationRule("feature-completeness", "Feature Completeness", check_feature_completeness),
        ValidationRule("class-feature-progression", "Class Feature Progression", check_class_feature_progression),
    ],
}
