"""
D&D Beyond JSON schema constants and lookup tables.

These map DDB's internal IDs and field names to normalized equivalents.
Based on community reverse-engineering of the v5 character-service endpoint.
"""

import re

# ---------------------------------------------------------------------------
# API endpoint
# ---------------------------------------------------------------------------

DDB_API_BASE_URL = "https://character-service.dndbeyond.com/character/v5/character"

# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------

# Matches: https://www.dndbeyond.com/characters/12345678[/anything]
DDB_CHARACTER_URL_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?dndbeyond\.com/characters/(\d+)"
)

# ---------------------------------------------------------------------------
# Ability score stat IDs
# ---------------------------------------------------------------------------

STAT_ID_MAP: dict[int, str] = {
    1: "strength",
    2: "dexterity",
    3: "constitution",
    4: "intelligence",
    5: "wisdom",
    6: "charisma",
}

ABILITY_NAMES: tuple[str, ...] = tuple(STAT_ID_MAP.values())

# ---------------------------------------------------------------------------
# Alignment IDs
# ---------------------------------------------------------------------------

ALIGNMENT_MAP: dict[int, str] = {
    1: "Lawful Good",
    2: "Neutral Good",
    3: "Chaotic Good",
    4: "Lawful Neutral",
    5: "True Neutral",
    6: "Chaotic Neutral",
    7: "Lawful Evil",
    8: "Neutral Evil",
    9: "Chaotic Evil",
}

# ---------------------------------------------------------------------------
# Item filter types → normalized item category
# ---------------------------------------------------------------------------

ITEM_FILTER_TYPE_MAP: dict[str, str] = {
    "Weapon": "weapon",
    "Armor": "armor",
    "Shield": "armor",
    "Staff": "weapon",
    "Potion": "consumable",
    "Scroll": "consumable",
    "Ammunition": "consumable",
    "Wondrous Item": "magic",
    "Ring": "magic",
    "Rod": "magic",
    "Wand": "magic",
    "Holy Symbol": "gear",
    "Adventuring Gear": "gear",
    "Tool": "gear",
    "Other Gear": "gear",
}

# ---------------------------------------------------------------------------
# Spells
# ---------------------------------------------------------------------------

SPELL_SCHOOLS: frozenset[str] = frozenset({
    "abjuration",
    "conjuration",
    "divination",
    "enchantment",
    "evocation",
    "illusion",
    "necromancy",
    "transmutation",
})

DAMAGE_TYPES: frozenset[str] = frozenset({
    "acid", "bludgeoning", "cold", "fire", "force", "lightning", "necrotic",
    "piercing", "poison", "psychic", "radiant", "slashing", "thunder",
})

# ---------------------------------------------------------------------------
# Modifier types used in DDB's modifiers sections
# ---------------------------------------------------------------------------

MODIFIER_TYPE_BONUS = "bonus"
MODIFIER_TYPE_PROFICIENCY = "proficiency"
MODIFIER_TYPE_EXPERTISE = "expertise"
MODIFIER_TYPE_LANGUAGE = "language"

# DDB modifier "subType" values for ability scores
ABILITY_SCORE_SUBTYPES: dict[str, str] = {
    f"{ability}-score": ability for ability in ABILITY_NAMES
}

# DDB modifier "subType" values for saving throws
SAVING_THROW_SUBTYPES: dict[str, str] = {
    f"{ability}-saving-throws": ability for ability in ABILITY_NAMES
}

# DDB modifier "subType" values for skill proficiencies
SKILL_SUBTYPES: dict[str, str] = {
    "acrobatics": "acrobatics",
    "animal-handling": "animal handling",
    "arcana": "arcana",
    "athletics": "athletics",
    "deception": "deception",
    "history": "history",
    "insight": "insight",
    "intimidation": "intimidation",
    "investigation": "investigation",
    "medicine": "medicine",
    "nature": "nature",
    "perception": "perception",
    "performance": "performance",
    "persuasion": "persuasion",
    "religion": "religion",
    "sleight-of-hand": "sleight of hand",
    "stealth": "stealth",
    "survival": "survival",
}

# Governing ability for each skill
SKILL_ABILITIES: dict[str, str] = {
    "acrobatics": "dexterity",
    "animal handling": "wisdom",
    "arcana": "intelligence",
    "athletics": "strength",
    "deception": "charisma",
    "history": "intelligence",
    "insight": "wisdom",
    "intimidation": "charisma",
    "investigation": "intelligence",
    "medicine": "wisdom",
    "nature": "intelligence",
    "perception": "wisdom",
    "performance": "charisma",
    "persuasion": "charisma",
    "religion": "intelligence",
    "sleight of hand": "dexterity",
    "stealth": "dexterity",
    "survival": "wisdom",
}

# ---------------------------------------------------------------------------
# Hit dice by class name
# ---------------------------------------------------------------------------

CLASS_HIT_DICE: dict[str, str] = {
    "Barbarian": "d12",
    "Bard": "d8",
    "Cleric": "d8",
    "Druid": "d8",
    "Fighter": "d10",
    "Monk": "d8",
    "Paladin": "d10",
    "Ranger": "d10",
    "Rogue": "d8",
    "Sorcerer": "d6",
    "Warlock": "d8",
    "Wizard": "d6",
    "Artificer": "d8",
    "Blood Hunter": "d10",
}

# ---------------------------------------------------------------------------
# Modifier source sections in DDB JSON
# ---------------------------------------------------------------------------

MODIFIER_SECTIONS = ("race", "class", "background", "item", "feat", "condition")

# Sections that may carry "<ability>-score" bonuses
ABILITY_BONUS_SECTIONS = ("race", "class", "background", "item", "feat")

# ---------------------------------------------------------------------------
# Limited-use reset types
# ---------------------------------------------------------------------------

RESET_TYPE_SHORT_REST = 1
RESET_TYPE_LONG_REST = 2
