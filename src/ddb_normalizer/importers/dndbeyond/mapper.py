"""
Mapper functions for the D&D Beyond sections not covered by a calculator.

Identity, proficiencies and skills, combat values and the known-spell list
are read straight from the raw record here. Each mapper returns a
(result, warnings) tuple so that the pipeline can degrade gracefully when a
section is malformed.
"""

from __future__ import annotations

from ...models import AbilityScores, ClassInfo, KnownSpell, Skill
from ...safe import as_dict, as_int, as_list, as_str, dig, optional_int
from ...spell_slots import class_infos_from_raw
from .schema import (
    ALIGNMENT_MAP,
    MODIFIER_SECTIONS,
    MODIFIER_TYPE_BONUS,
    MODIFIER_TYPE_EXPERTISE,
    MODIFIER_TYPE_LANGUAGE,
    MODIFIER_TYPE_PROFICIENCY,
    SAVING_THROW_SUBTYPES,
    SKILL_ABILITIES,
    SKILL_SUBTYPES,
)

# armorTypeId values in item definitions
LIGHT_ARMOR = 1
MEDIUM_ARMOR = 2
HEAVY_ARMOR = 3
SHIELD = 4

DEFAULT_SPEED = 30


def _modifiers(ddb: dict):
    """Yield every modifier dict across all modifier sections."""
    sections = as_dict(dig(ddb, "modifiers"))
    for section_name in MODIFIER_SECTIONS:
        for mod in as_list(sections.get(section_name)):
            if isinstance(mod, dict):
                yield mod


def _bonus_total(ddb: dict, sub_type: str) -> int:
    return sum(
        as_int(mod.get("value"))
        for mod in _modifiers(ddb)
        if mod.get("type") == MODIFIER_TYPE_BONUS and mod.get("subType") == sub_type
    )


def proficiency_bonus_for(level: int) -> int:
    """Proficiency bonus by total character level (+2 at level 1, +6 at 17)."""
    return (max(1, level) - 1) // 4 + 2


def map_identity(ddb: dict) -> tuple[dict, list[str]]:
    """Map identity fields from a DDB character.

    Args:
        ddb: Raw D&D Beyond character JSON.

    Returns:
        Tuple of (identity_fields_dict, warnings).
        identity_fields_dict contains: id, name, race, subrace, background,
        alignment, classes, level
    """
    warnings: list[str] = []
    result: dict = {"id": optional_int(dig(ddb, "id"))}

    name = as_str(dig(ddb, "name"))
    if not name:
        warnings.append("Character name missing, using 'Unknown Character'")
    result["name"] = name or "Unknown Character"

    race = as_dict(dig(ddb, "race"))
    race_name = as_str(race.get("fullName")) or as_str(race.get("baseName"))
    if not race_name:
        warnings.append("Race missing from character data")
    result["race"] = race_name or None
    result["subrace"] = (
        as_str(race.get("subRaceShortName"))
        or as_str(dig(race, "subraceDefinition", "name"))
        or None
    )

    result["background"] = as_str(dig(ddb, "background", "definition", "name")) or None

    alignment_id = optional_int(dig(ddb, "alignmentId"))
    result["alignment"] = ALIGNMENT_MAP.get(alignment_id) if alignment_id else None

    classes: list[ClassInfo] = class_infos_from_raw(ddb)
    if not classes:
        warnings.append("No classes found in character data")
    result["classes"] = classes
    result["level"] = sum(c.level for c in classes)

    return result, warnings


def map_proficiencies(ddb: dict) -> tuple[dict, list[str]]:
    """Map saving throws, tools and languages from DDB modifiers.

    Returns:
        Tuple of (proficiency_fields_dict, warnings).
        proficiency_fields_dict contains: saving_throw_proficiencies,
        tool_proficiencies, languages
    """
    warnings: list[str] = []
    result: dict = {
        "saving_throw_proficiencies": [],
        "tool_proficiencies": [],
        "languages": [],
    }

    for mod in _modifiers(ddb):
        mod_type = mod.get("type")
        sub_type = as_str(mod.get("subType"))
        friendly_name = as_str(mod.get("friendlySubtypeName"), sub_type)

        if mod_type == MODIFIER_TYPE_PROFICIENCY and sub_type in SAVING_THROW_SUBTYPES:
            save_name = SAVING_THROW_SUBTYPES[sub_type]
            if save_name not in result["saving_throw_proficiencies"]:
                result["saving_throw_proficiencies"].append(save_name)

        elif mod_type == MODIFIER_TYPE_PROFICIENCY and sub_type not in SKILL_SUBTYPES:
            if friendly_name and friendly_name not in result["tool_proficiencies"]:
                result["tool_proficiencies"].append(friendly_name)

        elif mod_type == MODIFIER_TYPE_LANGUAGE:
            if friendly_name and friendly_name not in result["languages"]:
                result["languages"].append(friendly_name)

    return result, warnings


def map_skills(
    ddb: dict, abilities: AbilityScores, proficiency_bonus: int
) -> tuple[list[Skill], list[str]]:
    """Build all eighteen skills with their modifiers.

    Modifier = ability modifier + proficiency bonus (doubled for expertise)
    + flat bonus modifiers targeting the skill.

    Returns:
        Tuple of (skills, warnings).
    """
    warnings: list[str] = []
    proficient: set[str] = set()
    expertise: set[str] = set()
    bonuses: dict[str, int] = {}

    for mod in _modifiers(ddb):
        sub_type = as_str(mod.get("subType"))
        if sub_type not in SKILL_SUBTYPES:
            continue
        skill = SKILL_SUBTYPES[sub_type]
        mod_type = mod.get("type")
        if mod_type == MODIFIER_TYPE_PROFICIENCY:
            proficient.add(skill)
        elif mod_type == MODIFIER_TYPE_EXPERTISE:
            proficient.add(skill)
            expertise.add(skill)
        elif mod_type == MODIFIER_TYPE_BONUS:
            bonuses[skill] = bonuses.get(skill, 0) + as_int(mod.get("value"))

    skills: list[Skill] = []
    for skill, ability in SKILL_ABILITIES.items():
        multiplier = 2 if skill in expertise else 1 if skill in proficient else 0
        bonus = bonuses.get(skill, 0)
        skills.append(Skill(
            name=skill,
            ability=ability,
            proficient=skill in proficient,
            expertise=skill in expertise,
            bonus=bonus,
            modifier=abilities.get(ability).modifier + proficiency_bonus * multiplier + bonus,
        ))
    return skills, warnings


def compute_armor_class(ddb: dict, abilities: AbilityScores, classes: list[ClassInfo]) -> int:
    """Armor class from equipped armor, shields and unarmored defense.

    Args:
        ddb: Raw D&D Beyond character JSON.
        abilities: Resolved ability scores.
        classes: The character's classes.

    Returns:
        The computed armor class.
    """
    dex_mod = abilities.dexterity.modifier
    body_armor: dict | None = None
    shield_bonus = 0

    for entry in as_list(dig(ddb, "inventory")):
        if not dig(entry, "equipped"):
            continue
        definition = as_dict(dig(entry, "definition"))
        armor_type = optional_int(definition.get("armorTypeId"))
        if armor_type == SHIELD:
            shield_bonus = max(shield_bonus, as_int(definition.get("armorClass"), 2))
        elif armor_type in (LIGHT_ARMOR, MEDIUM_ARMOR, HEAVY_ARMOR):
            if body_armor is None or as_int(definition.get("armorClass")) > as_int(body_armor.get("armorClass")):
                body_armor = definition

    if body_armor is not None:
        base = as_int(body_armor.get("armorClass"), 10)
        armor_type = optional_int(body_armor.get("armorTypeId"))
        if armor_type == LIGHT_ARMOR:
            armor_class = base + dex_mod
        elif armor_type == MEDIUM_ARMOR:
            armor_class = base + min(dex_mod, 2)
        else:
            armor_class = base
    else:
        class_names = {c.name.lower() for c in classes}
        armor_class = 10 + dex_mod
        if "barbarian" in class_names:
            armor_class = max(armor_class, 10 + dex_mod + abilities.constitution.modifier)
        if "monk" in class_names and shield_bonus == 0:
            armor_class = max(armor_class, 10 + dex_mod + abilities.wisdom.modifier)

    return armor_class + shield_bonus + _bonus_total(ddb, "armor-class")


def map_combat(
    ddb: dict, abilities: AbilityScores, classes: list[ClassInfo], level: int
) -> tuple[dict, list[str]]:
    """Map combat values from a DDB character.

    Args:
        ddb: Raw D&D Beyond character JSON.
        abilities: Already-resolved ability scores.
        classes: The character's classes.
        level: Total character level.

    Returns:
        Tuple of (combat_fields_dict, warnings).
        combat_fields_dict contains: armor_class, hit_points_max,
        hit_points_current, speed, initiative
    """
    warnings: list[str] = []
    result: dict = {}

    override_hp = optional_int(dig(ddb, "overrideHitPoints"))
    if override_hp is not None:
        hp_max = override_hp
    else:
        base_hp = as_int(dig(ddb, "baseHitPoints"))
        bonus_hp = as_int(dig(ddb, "bonusHitPoints"))
        if base_hp <= 0:
            warnings.append("Base hit points missing from character data")
        hp_max = base_hp + bonus_hp + abilities.constitution.modifier * level

    result["hit_points_max"] = max(1, hp_max)
    result["hit_points_current"] = max(0, result["hit_points_max"] - as_int(dig(ddb, "removedHitPoints")))

    armor_class = optional_int(dig(ddb, "armorClass"))
    if armor_class is None:
        armor_class = compute_armor_class(ddb, abilities, classes)
    result["armor_class"] = armor_class

    speed = optional_int(dig(ddb, "race", "weightSpeeds", "normal", "walk"))
    if speed is None:
        warnings.append(f"Could not parse race speed, defaulting to {DEFAULT_SPEED}")
        speed = DEFAULT_SPEED
    result["speed"] = speed + _bonus_total(ddb, "speed")

    result["initiative"] = abilities.dexterity.modifier + _bonus_total(ddb, "initiative")

    return result, warnings


def _spell_from_raw(entry: dict, source: str) -> KnownSpell | None:
    definition = as_dict(dig(entry, "definition"))
    name = as_str(definition.get("name")) or as_str(dig(entry, "name"))
    if not name:
        return None
    school = as_str(definition.get("school")) or None
    return KnownSpell(
        name=name,
        level=as_int(definition.get("level")),
        school=school,
        source=source,
        prepared=bool(dig(entry, "prepared") or dig(entry, "alwaysPrepared")),
    )


def map_known_spells(ddb: dict) -> tuple[list[KnownSpell], list[str]]:
    """Collect known/prepared spells from class lists and granted spells.

    Spells are deduplicated by name; the first occurrence wins.

    Returns:
        Tuple of (spells, warnings).
    """
    warnings: list[str] = []
    spells: list[KnownSpell] = []
    seen: set[str] = set()

    def add(entry: dict, source: str) -> None:
        spell = _spell_from_raw(entry, source)
        if spell is None:
            warnings.append(f"Skipped a {source} spell with no name")
            return
        key = spell.name.lower()
        if key not in seen:
            seen.add(key)
            spells.append(spell)

    for class_list in as_list(dig(ddb, "classSpells")):
        for entry in as_list(dig(class_list, "spells")):
            if isinstance(entry, dict):
                add(entry, "class")

    granted = as_dict(dig(ddb, "spells"))
    for source in ("race", "class", "background", "item", "feat"):
        for entry in as_list(granted.get(source)):
            if isinstance(entry, dict):
                add(entry, source)

    return spells, warnings
