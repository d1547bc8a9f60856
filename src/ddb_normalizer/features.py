"""
Class feature and racial trait processing.

Walks the class, subclass, race and subrace feature arrays of a D&D Beyond
character, drops administrative list entries, applies level gating, and
resolves how many times each limited-use feature can be used at the
character's current class level.

Usage counts come from the feature's level-scale entries when present. A
single feature can carry both usage scaling and damage scaling (for example
a die size that grows alongside the number of uses), so only entries with a
description that mentions neither damage nor a ``+`` bonus count as usage
entries when any exist. That choice is a heuristic; every feature where it
mattered is listed in the result's diagnostics.
"""

from __future__ import annotations

import logging
from typing import Any

from .config import FeatureOptions
from .importers.dndbeyond.schema import RESET_TYPE_LONG_REST, RESET_TYPE_SHORT_REST
from .models import (
    FeatureSource,
    FeatureType,
    ProcessedFeature,
    ProcessedFeatureSet,
    ResetCadence,
)
from .safe import as_dict, as_id, as_int, as_list, as_str, dig, optional_int

logger = logging.getLogger("ddb-normalizer")


# =============================================================================
# Filtering tables
# =============================================================================

# Administrative entries that duplicate data captured elsewhere
EXCLUDED_FEATURE_NAMES: frozenset[str] = frozenset({
    "proficiencies",
    "hit points",
    "equipment",
    "languages",
    "age",
    "alignment",
    "size",
    "speed",
    "creature type",
})

EXCLUDED_FEATURE_PREFIXES: tuple[str, ...] = (
    "ability score increase",
    "ability score improvement",
    "core ",
    "metamagic options",
    "proficiencies",
)


def is_excluded_feature(name: str) -> bool:
    """Whether a feature name is an administrative placeholder.

    Matching is case-insensitive, by exact name or by prefix.
    """
    key = name.strip().lower()
    if not key:
        return True
    if key in EXCLUDED_FEATURE_NAMES:
        return True
    return key.startswith(EXCLUDED_FEATURE_PREFIXES)


# =============================================================================
# Type classification
# =============================================================================

CLASS_FEATURE_TYPES: dict[str, dict[str, FeatureType]] = {
    "barbarian": {
        "Rage": FeatureType.RESOURCE,
        "Reckless Attack": FeatureType.ACTIVE,
        "Unarmored Defense": FeatureType.PASSIVE,
        "Danger Sense": FeatureType.PASSIVE,
    },
    "bard": {
        "Bardic Inspiration": FeatureType.RESOURCE,
        "Spellcasting": FeatureType.SPELL,
        "Song of Rest": FeatureType.ACTIVE,
    },
    "cleric": {
        "Channel Divinity": FeatureType.RESOURCE,
        "Spellcasting": FeatureType.SPELL,
        "Divine Intervention": FeatureType.ACTIVE,
    },
    "druid": {
        "Wild Shape": FeatureType.RESOURCE,
        "Spellcasting": FeatureType.SPELL,
        "Druidic": FeatureType.PROFICIENCY,
    },
    "fighter": {
        "Fighting Style": FeatureType.PASSIVE,
        "Second Wind": FeatureType.RESOURCE,
        "Action Surge": FeatureType.RESOURCE,
        "Extra Attack": FeatureType.PASSIVE,
        "Indomitable": FeatureType.RESOURCE,
    },
    "monk": {
        "Ki": FeatureType.RESOURCE,
        "Martial Arts": FeatureType.PASSIVE,
        "Unarmored Movement": FeatureType.PASSIVE,
    },
    "paladin": {
        "Divine Sense": FeatureType.RESOURCE,
        "Lay on Hands": FeatureType.RESOURCE,
        "Divine Smite": FeatureType.ACTIVE,
        "Spellcasting": FeatureType.SPELL,
    },
    "ranger": {
        "Favored Enemy": FeatureType.PASSIVE,
        "Natural Explorer": FeatureType.PASSIVE,
        "Spellcasting": FeatureType.SPELL,
        "Primeval Awareness": FeatureType.ACTIVE,
    },
    "rogue": {
        "Expertise": FeatureType.PROFICIENCY,
        "Sneak Attack": FeatureType.ACTIVE,
        "Thieves' Cant": FeatureType.PROFICIENCY,
        "Cunning Action": FeatureType.ACTIVE,
        "Uncanny Dodge": FeatureType.ACTIVE,
        "Evasion": FeatureType.PASSIVE,
    },
    "sorcerer": {
        "Spellcasting": FeatureType.SPELL,
        "Font of Magic": FeatureType.RESOURCE,
        "Metamagic": FeatureType.ACTIVE,
    },
    "warlock": {
        "Pact Magic": FeatureType.SPELL,
        "Eldritch Invocations": FeatureType.PASSIVE,
        "Pact Boon": FeatureType.PASSIVE,
    },
    "wizard": {
        "Spellcasting": FeatureType.SPELL,
        "Arcane Recovery": FeatureType.RESOURCE,
    },
}

RACIAL_TRAIT_TYPES: dict[str, dict[str, FeatureType]] = {
    "dragonborn": {
        "Breath Weapon": FeatureType.ACTIVE,
        "Damage Resistance": FeatureType.PASSIVE,
    },
    "dwarf": {
        "Dwarven Combat Training": FeatureType.PROFICIENCY,
        "Stonecunning": FeatureType.PROFICIENCY,
    },
    "elf": {
        "Keen Senses": FeatureType.PROFICIENCY,
        "Elf Weapon Training": FeatureType.PROFICIENCY,
    },
    "half-elf": {
        "Skill Versatility": FeatureType.PROFICIENCY,
    },
    "half-orc": {
        "Menacing": FeatureType.PROFICIENCY,
        "Relentless Endurance": FeatureType.RESOURCE,
        "Savage Attacks": FeatureType.PASSIVE,
    },
    "human": {
        "Extra Language": FeatureType.PROFICIENCY,
        "Extra Skill": FeatureType.PROFICIENCY,
    },
}


def classify_class_feature(name: str, class_name: str) -> FeatureType:
    """Feature type from the per-class table, else by keyword."""
    known = CLASS_FEATURE_TYPES.get(class_name.lower(), {})
    if name in known:
        return known[name]
    lowered = name.lower()
    if "spellcasting" in lowered or "pact magic" in lowered:
        return FeatureType.SPELL
    if "rage" in lowered or "action surge" in lowered:
        return FeatureType.RESOURCE
    if "attack" in lowered or "maneuver" in lowered:
        return FeatureType.ACTIVE
    return FeatureType.PASSIVE


def classify_racial_trait(name: str, race_name: str) -> FeatureType:
    """Trait type from the per-race table, else by keyword."""
    race_key = race_name.lower()
    for race, traits in RACIAL_TRAIT_TYPES.items():
        if race in race_key and name in traits:
            return traits[name]
    lowered = name.lower()
    if "proficiency" in lowered or "training" in lowered:
        return FeatureType.PROFICIENCY
    if "spell" in lowered or "cantrip" in lowered or "magic" in lowered:
        return FeatureType.SPELL
    if "breath" in lowered or "endurance" in lowered:
        return FeatureType.ACTIVE
    return FeatureType.PASSIVE


# =============================================================================
# Usage resolution
# =============================================================================

# DDB limitedUse.resetType; unlisted values fall back to a long rest
RESET_CADENCES = {
    RESET_TYPE_SHORT_REST: ResetCadence.SHORT_REST,
    RESET_TYPE_LONG_REST: ResetCadence.LONG_REST,
}


def _is_usage_scale(scale: dict) -> bool:
    description = as_str(dig(scale, "description"))
    return bool(description) and "damage" not in description.lower() and "+" not in description


def _level_scales(entry: dict) -> list[dict]:
    scales = as_list(dig(entry, "levelScales"))
    if not scales:
        single = dig(entry, "levelScale")
        if isinstance(single, dict):
            scales = [single]
    return [s for s in scales if isinstance(s, dict)]


def resolve_uses(entry: dict, class_level: int) -> tuple[int, dict | None, str | None]:
    """Resolve the usage count of a feature at a class level.

    Args:
        entry: Merged feature record (definition plus character-level data).
        class_level: Character level in the owning class.

    Returns:
        Tuple of (uses, selected level-scale entry or None, ambiguity note
        or None).
    """
    scales = _level_scales(entry)
    note = None
    selected = None

    if scales:
        usage_scales = [s for s in scales if _is_usage_scale(s)]
        if usage_scales and len(usage_scales) < len(scales):
            note = "level scales mix usage and damage or undescribed entries; only usage entries considered"
        elif not usage_scales:
            note = "no level scale describes usage; used all entries as usage counts"
        candidates = usage_scales or scales
        candidates = sorted(candidates, key=lambda s: as_int(dig(s, "level")))
        for scale in candidates:
            if as_int(dig(scale, "level")) <= class_level and optional_int(dig(scale, "fixedValue")) is not None:
                selected = scale
        if selected is not None:
            return max(0, as_int(dig(selected, "fixedValue"))), selected, note

    limited_use = dig(entry, "limitedUse")
    if isinstance(limited_use, dict):
        return max(0, as_int(dig(limited_use, "maxUses"))), None, note
    if isinstance(limited_use, list):
        uses = 0
        for step in sorted(
            (s for s in limited_use if isinstance(s, dict)),
            key=lambda s: as_int(dig(s, "level")),
        ):
            if as_int(dig(step, "level")) <= class_level:
                uses = as_int(dig(step, "uses"))
        return max(0, uses), None, note
    return 0, None, note


def _reset_cadence(entry: dict, uses: int) -> ResetCadence:
    if uses <= 0:
        return ResetCadence.UNLIMITED
    limited_use = dig(entry, "limitedUse")
    reset_type = None
    if isinstance(limited_use, dict):
        reset_type = optional_int(dig(limited_use, "resetType"))
    elif isinstance(limited_use, list):
        reset_type = optional_int(dig(limited_use, 0, "resetType"))
    if reset_type is None:
        reset_type = optional_int(dig(entry, "resetType"))
    return RESET_CADENCES.get(reset_type, ResetCadence.LONG_REST)


def _merge_entry(entry: Any) -> dict:
    """Flatten ``{"definition": {...}, "levelScales": [...]}`` wrappers."""
    entry = as_dict(entry)
    definition = dig(entry, "definition")
    if not isinstance(definition, dict):
        return entry
    merged = dict(definition)
    for key in ("levelScales", "levelScale", "limitedUse"):
        if entry.get(key) is not None:
            merged[key] = entry[key]
    if merged.get("id") is None and entry.get("id") is not None:
        merged["id"] = entry["id"]
    return merged


# =============================================================================
# Processor
# =============================================================================

class FeatureProcessor:
    """Builds the processed feature set of a character."""

    def process(
        self,
        raw_classes: list | None,
        race: dict | None,
        options: FeatureOptions | None = None,
    ) -> ProcessedFeatureSet:
        """Process class features and racial traits.

        Args:
            raw_classes: The raw ``classes`` array.
            race: The raw ``race`` object.
            options: Processing options; defaults apply when omitted.

        Returns:
            ProcessedFeatureSet. Never raises on malformed input.
        """
        options = options or FeatureOptions()
        classes = [c for c in as_list(raw_classes) if isinstance(c, dict)]
        race = as_dict(race)
        diagnostics: list[str] = []
        selected_scales: dict[str, Any] = {}

        class_features: list[ProcessedFeature] = []
        seen: set[str] = set()
        for class_entry in classes:
            class_features.extend(
                self._process_class(class_entry, options, seen, diagnostics, selected_scales)
            )

        racial_traits: list[ProcessedFeature] = []
        if options.include_racial_traits:
            character_level = sum(max(0, as_int(dig(c, "level"))) for c in classes)
            racial_traits = self._process_race(race, character_level, options, diagnostics)

        features_by_class: dict[str, list[str]] = {}
        for feature in class_features:
            key = feature.class_name or feature.source_name
            if feature.source == FeatureSource.SUBCLASS:
                key = f"{key} ({feature.source_name})"
            features_by_class.setdefault(key, []).append(feature.name)

        traits_by_race: dict[str, list[str]] = {}
        for trait in racial_traits:
            traits_by_race.setdefault(trait.source_name, []).append(trait.name)

        debug_info: dict[str, Any] = {}
        if options.debug:
            debug_info = {
                "processing_method": "multiclass" if len(classes) > 1 else "single_class",
                "class_breakdown": {
                    as_str(dig(c, "definition", "name"), "Unknown"): {
                        "level": as_int(dig(c, "level")),
                        "subclass": as_str(dig(c, "subclassDefinition", "name")) or None,
                        "feature_count": sum(
                            1 for f in class_features
                            if f.class_name == as_str(dig(c, "definition", "name"), "Unknown")
                        ),
                    }
                    for c in classes
                },
                "race_breakdown": {key: len(names) for key, names in traits_by_race.items()},
                "selected_scales": selected_scales,
            }
            logger.debug(f"Feature processing: {debug_info}")

        return ProcessedFeatureSet(
            class_features=class_features,
            racial_traits=racial_traits,
            features_by_class=features_by_class,
            traits_by_race=traits_by_race,
            diagnostics=diagnostics,
            debug_info=debug_info,
        )

    # ----------------------------------------------------------------------
    # Classes
    # ----------------------------------------------------------------------

    def _process_class(
        self,
        class_entry: dict,
        options: FeatureOptions,
        seen: set[str],
        diagnostics: list[str],
        selected_scales: dict[str, Any],
    ) -> list[ProcessedFeature]:
        class_name = as_str(dig(class_entry, "definition", "name"), "Unknown")
        class_level = max(0, as_int(dig(class_entry, "level")))
        subclass = as_dict(dig(class_entry, "subclassDefinition"))
        subclass_name = as_str(dig(subclass, "name")) or None
        subclass_id = dig(subclass, "id")

        sources: list[tuple[FeatureSource, dict]] = []
        for raw in as_list(dig(class_entry, "definition", "classFeatures")):
            sources.append((FeatureSource.CLASS, _merge_entry(raw)))
        if options.include_subclass_features:
            for raw in as_list(dig(subclass, "classFeatures")):
                sources.append((FeatureSource.SUBCLASS, _merge_entry(raw)))
        for raw in as_list(dig(class_entry, "classFeatures")):
            merged = _merge_entry(raw)
            owner = dig(merged, "classId")
            is_subclass = subclass_id is not None and owner is not None and str(owner) == str(subclass_id)
            if is_subclass and not options.include_subclass_features:
                continue
            sources.append((FeatureSource.SUBCLASS if is_subclass else FeatureSource.CLASS, merged))

        # Character-level copies often carry the level scales the definition lacks
        extras: dict[str, dict] = {}
        for _, merged in sources:
            feature_id = as_id(dig(merged, "id"))
            if feature_id is None:
                continue
            slot = extras.setdefault(str(feature_id), {})
            for key in ("levelScales", "levelScale", "limitedUse"):
                if merged.get(key) is not None and key not in slot:
                    slot[key] = merged[key]

        features: list[ProcessedFeature] = []
        for source, merged in sources:
            name = as_str(dig(merged, "name"))
            required_level = max(1, as_int(dig(merged, "requiredLevel"), default=1))
            feature_id = as_id(dig(merged, "id"))
            key = f"id:{feature_id}" if feature_id is not None else f"name:{class_name}:{name}:{required_level}"

            if key in seen:
                continue
            if is_excluded_feature(name):
                continue
            if options.filter_by_level and required_level > class_level:
                continue
            if required_level > options.max_level:
                continue
            seen.add(key)

            record = dict(merged)
            if feature_id is not None:
                for extra_key, value in extras.get(str(feature_id), {}).items():
                    record.setdefault(extra_key, value)

            uses, selected, note = resolve_uses(record, class_level)
            if note:
                diagnostics.append(f"{class_name} feature '{name}': {note}")
            if selected is not None:
                selected_scales[name] = {
                    "level": as_int(dig(selected, "level")),
                    "value": uses,
                    "description": as_str(dig(selected, "description")),
                }

            feature_type = classify_class_feature(name, class_name)
            if uses > 0 and feature_type == FeatureType.PASSIVE:
                feature_type = FeatureType.RESOURCE

            features.append(ProcessedFeature(
                id=feature_id,
                name=name,
                description=as_str(dig(record, "description")) if options.include_descriptions else "",
                source=source,
                source_name=subclass_name if source == FeatureSource.SUBCLASS and subclass_name else class_name,
                class_name=class_name,
                required_level=required_level,
                uses=uses,
                reset=_reset_cadence(record, uses),
                feature_type=feature_type,
            ))
        return features

    # ----------------------------------------------------------------------
    # Race
    # ----------------------------------------------------------------------

    def _process_race(
        self,
        race: dict,
        character_level: int,
        options: FeatureOptions,
        diagnostics: list[str],
    ) -> list[ProcessedFeature]:
        race_name = as_str(dig(race, "fullName")) or as_str(dig(race, "baseName")) or "Unknown Race"
        subrace_name = (
            as_str(dig(race, "subraceDefinition", "name"))
            or as_str(dig(race, "subRaceShortName"))
            or race_name
        )

        sources: list[tuple[FeatureSource, str, dict]] = []
        for raw in as_list(dig(race, "racialTraits")):
            sources.append((FeatureSource.RACE, race_name, _merge_entry(raw)))
        for raw in as_list(dig(race, "subraceDefinition", "racialTraits")):
            sources.append((FeatureSource.SUBRACE, subrace_name, _merge_entry(raw)))

        traits: list[ProcessedFeature] = []
        seen: set[str] = set()
        for source, source_name, merged in sources:
            name = as_str(dig(merged, "name"))
            trait_id = as_id(dig(merged, "id"))
            key = f"id:{trait_id}" if trait_id is not None else f"name:{source_name}:{name}"
            if key in seen or is_excluded_feature(name):
                continue
            required_level = max(1, as_int(dig(merged, "requiredLevel"), default=1))
            if options.filter_by_level and character_level and required_level > character_level:
                continue
            if required_level > options.max_level:
                continue
            seen.add(key)

            uses, _, note = resolve_uses(merged, character_level)
            if note:
                diagnostics.append(f"{race_name} trait '{name}': {note}")

            feature_type = classify_racial_trait(name, race_name)
            if uses > 0 and feature_type == FeatureType.PASSIVE:
                feature_type = FeatureType.RESOURCE

            traits.append(ProcessedFeature(
                id=trait_id,
                name=name,
                description=as_str(dig(merged, "description")) if options.include_descriptions else "",
                source=source,
                source_name=source_name,
                required_level=required_level,
                uses=uses,
                reset=_reset_cadence(merged, uses),
                feature_type=feature_type,
            ))
        return traits
