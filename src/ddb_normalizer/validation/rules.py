"""
Core validation rules, registered on every ValidationEngine.

These check that each section carries the data every export format needs.
Game-system specifics (D&D 5e math) live in the ``dnd5e`` rule pack.
"""

from __future__ import annotations

from typing import Any

from ..importers.dndbeyond.schema import ABILITY_NAMES, SKILL_ABILITIES
from .models import Severity, ValidationResult, ValidationRule

Data = dict[str, Any]


def _ok(message: str, accuracy: float = 100, details: list[str] | None = None) -> ValidationResult:
    return ValidationResult(
        valid=True,
        severity=Severity.SUCCESS,
        message=message,
        accuracy=accuracy,
        details=details or [],
    )


# =============================================================================
# Identity
# =============================================================================

def check_name_present(data: Data, source: Data | None = None) -> ValidationResult:
    name = (data.get("name") or "").strip()
    if not name or name == "Unknown Character":
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message="Character name is missing",
            accuracy=0,
            missing_data=["name"],
            suggestions=["Set a character name on D&D Beyond and re-import"],
        )
    return _ok(f"Name: {name}")


def check_race_present(data: Data, source: Data | None = None) -> ValidationResult:
    race = data.get("race")
    if not race:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Race is missing",
            accuracy=0,
            missing_data=["race"],
            suggestions=["Choose a race or species in the D&D Beyond builder"],
        )
    subrace = data.get("subrace")
    return _ok(f"Race: {race}" + (f" ({subrace})" if subrace and subrace not in race else ""))


def check_classes_present(data: Data, source: Data | None = None) -> ValidationResult:
    classes = data.get("classes") or []
    if not classes:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message="No classes found",
            accuracy=0,
            missing_data=["classes"],
            suggestions=["Add at least one class level in the D&D Beyond builder"],
        )
    summary = " / ".join(f"{c.get('name')} {c.get('level')}" for c in classes)
    return _ok(f"Classes: {summary}")


def check_level_calculation(data: Data, source: Data | None = None) -> ValidationResult:
    level = data.get("level") or 0
    class_total = sum(c.get("level") or 0 for c in data.get("classes") or [])
    if level <= 0:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Character level could not be determined",
            accuracy=0,
            missing_data=["level"],
        )
    if level != class_total:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message=f"Character level {level} does not match class levels ({class_total})",
            accuracy=50,
        )
    if level > 20:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message=f"Character level {level} exceeds 20",
            accuracy=50,
        )
    return _ok(f"Level {level}")


# =============================================================================
# Abilities
# =============================================================================

def check_six_abilities(data: Data, source: Data | None = None) -> ValidationResult:
    scores = data.get("scores") or {}
    missing = [name for name in ABILITY_NAMES if not isinstance(scores.get(name), int)]
    if missing:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message=f"Missing ability scores: {', '.join(missing)}",
            accuracy=(len(ABILITY_NAMES) - len(missing)) / len(ABILITY_NAMES) * 100,
            missing_data=missing,
        )
    return _ok("All six ability scores present")


def check_ability_modifiers(data: Data, source: Data | None = None) -> ValidationResult:
    scores = data.get("scores") or {}
    modifiers = data.get("modifiers") or {}
    wrong = []
    for name in ABILITY_NAMES:
        score = scores.get(name)
        if not isinstance(score, int):
            continue
        expected = (score - 10) // 2
        if modifiers.get(name) != expected:
            wrong.append(f"{name}: expected {expected:+d}, got {modifiers.get(name)}")
    if wrong:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message="Ability modifiers do not match scores",
            accuracy=(len(ABILITY_NAMES) - len(wrong)) / len(ABILITY_NAMES) * 100,
            details=wrong,
        )
    return _ok("Ability modifiers consistent with scores")


# =============================================================================
# Skills
# =============================================================================

def check_skill_list(data: Data, source: Data | None = None) -> ValidationResult:
    skills = data.get("skills") or []
    missing_data = []
    if data.get("proficiency_bonus") is None:
        missing_data.append("proficiency_bonus")
    if not skills:
        missing_data.append("skill_modifiers")
    if missing_data:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Skill data is incomplete",
            accuracy=0,
            missing_data=missing_data,
        )

    present = {s.get("name") for s in skills}
    absent = [name for name in SKILL_ABILITIES if name not in present]
    if absent:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message=f"{len(absent)} skills missing",
            accuracy=(len(SKILL_ABILITIES) - len(absent)) / len(SKILL_ABILITIES) * 100,
            details=absent,
        )
    proficient = sum(1 for s in skills if s.get("proficient"))
    return _ok(f"{len(skills)} skills, {proficient} proficient")


# =============================================================================
# Combat
# =============================================================================

def check_armor_class(data: Data, source: Data | None = None) -> ValidationResult:
    armor_class = data.get("armor_class")
    if armor_class is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Armor class is missing",
            accuracy=0,
            missing_data=["armor_class"],
        )
    if not 1 <= armor_class <= 30:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message=f"Armor class {armor_class} is out of range",
            accuracy=0,
        )
    return _ok(f"AC {armor_class}")


def check_hit_points(data: Data, source: Data | None = None) -> ValidationResult:
    hp_max = data.get("hit_points_max")
    if hp_max is None:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Hit points are missing",
            accuracy=0,
            missing_data=["hit_points"],
        )
    if hp_max < 1:
        return ValidationResult(
            valid=False,
            severity=Severity.ERROR,
            message=f"Maximum hit points {hp_max} is below 1",
            accuracy=0,
        )
    current = data.get("hit_points_current")
    if current is not None and current > hp_max:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message=f"Current hit points {current} exceed maximum {hp_max}",
            accuracy=70,
        )
    return _ok(f"HP {current if current is not None else hp_max}/{hp_max}")


# =============================================================================
# Equipment
# =============================================================================

def check_equipment_count(data: Data, source: Data | None = None) -> ValidationResult:
    items = data.get("items") or []
    if not items:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="No equipment found",
            accuracy=50,
            missing_data=["weapons", "armor"],
            suggestions=["Add starting equipment on D&D Beyond, or add items manually after export"],
        )
    weight = data.get("total_weight") or 0
    return _ok(
        f"{len(items)} items, {data.get('container_count', 0)} containers, {weight:g} lb carried"
    )


# =============================================================================
# Spells
# =============================================================================

def _is_spellcaster(data: Data) -> bool:
    return (data.get("caster_level") or 0) > 0 or (data.get("pact_level") or 0) > 0


def check_spell_slots(data: Data, source: Data | None = None) -> ValidationResult:
    slots = {k: v for k, v in (data.get("spell_slots") or {}).items() if v}
    pact = data.get("pact_magic_slots") or {}
    has_pact = (pact.get("slots") or 0) > 0

    if not _is_spellcaster(data):
        if slots or has_pact:
            return ValidationResult(
                valid=False,
                severity=Severity.WARNING,
                message="Spell slots present without a spellcasting class level",
                accuracy=50,
            )
        return _ok("Non-spellcaster (no spell slots needed)")

    if not slots and not has_pact:
        return ValidationResult(
            valid=False,
            severity=Severity.WARNING,
            message="Spellcasting class but no spell slots found",
            accuracy=60,
            missing_data=["spell_slots"],
            suggestions=["Check class levels and subclass choices"],
        )
    parts = [f"L{level}: {count}" for level, count in sorted(slots.items())]
    if has_pact:
        parts.append(f"pact L{pact.get('slot_level')}: {pact.get('slots')}")
    return _ok("Spell slots: " + ", ".join(parts))


def check_known_spells(data: Data, source: Data | None = None) -> ValidationResult:
    spells = data.get("known_spells") or []
    if not spells:
        if _is_spellcaster(data):
            return ValidationResult(
                valid=False,
                severity=Severity.WARNING,
                message="Spellcaster with no known spells",
                accuracy=70,
                missing_data=["known_spells"],
                suggestions=["Select or prepare spells on D&D Beyond before exporting"],
            )
        return _ok("No spells known")
    return _ok(f"{len(spells)} spells known")


# =============================================================================
# Features
# =============================================================================

def check_feature_count(data: Data, source: Data | None = None) -> ValidationResult:
    features = data.get("features") or []
    if not features:
        return ValidationResult(
            valid=True,
            severity=Severity.INFO,
            message="No character features found",
            accuracy=50,
            suggestions=["Character may have class or racial features that were not detected"],
        )
    return _ok(
        f"{data.get('class_feature_count', 0)} class features, "
        f"{data.get('racial_trait_count', 0)} racial traits"
    )


# =============================================================================
# Registration
# =============================================================================

CORE_RULES: dict[str, list[ValidationRule]] = {
    "identity": [
        ValidationRule("name-present", "Character Name", check_name_present),
        ValidationRule("race-present", "Character Race", check_race_present),
        ValidationRule("classes-present", "Character Classes", check_classes_present),
        ValidationRule("level-calculation", "Character Level", check_level_calculation),
    ],
    "abilities": [
        ValidationRule("six-abilities", "Six Ability Scores", check_six_abilities),
        ValidationRule("ability-modifiers", "Ability Modifiers", check_ability_modifiers),
    ],
    "skills": [
        ValidationRule("skill-list", "Skill List", check_skill_list),
    ],
    "combat": [
        ValidationRule("armor-class", "Armor Class", check_armor_class),
        ValidationRule("hit-points", "Hit Points", check_hit_points),
    ],
    "equipment": [
        ValidationRule("equipment-count", "Equipment Count", check_equipment_count),
    ],
    "spells": [
        ValidationRule("spell-slots", "Spell Slots", check_spell_slots),
        ValidationRule("known-spells", "Known Spells", check_known_spells),
    ],
    "features": [
        ValidationRule("feature-count", "Feature Count", check_feature_count),
    ],
}
