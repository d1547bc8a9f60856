"""
Conversion pipeline: raw D&D Beyond record → NormalizedCharacter + reports.

Each section is mapped independently. A section that fails is recorded as a
warning and left at its defaults, so a conversion always produces a
character and a validation report. The raw record is only ever read.
"""

from __future__ import annotations

import logging
from typing import Any

from .abilities import AbilityResolver
from .config import PipelineOptions
from .encumbrance import EncumbranceCalculator, has_powerful_build
from .features import FeatureProcessor
from .importers.base import ConversionResult
from .importers.dndbeyond.mapper import (
    map_combat,
    map_identity,
    map_known_spells,
    map_proficiencies,
    map_skills,
    proficiency_bonus_for,
)
from .inventory import InventoryTreeBuilder
from .models import AbilityScores, NormalizedCharacter
from .safe import as_dict, dig, optional_int
from .spell_slots import SpellSlotCalculator
from .validation import DND5E_RULES, AccuracyCalculator, ValidationEngine

logger = logging.getLogger("ddb-normalizer")


class CharacterNormalizer:
    """
    Runs every calculator over a raw character and validates the result.

    Instances hold options and the last run's debug info; each call to :meth:`convert` builds its own
    calculators and engine, so one normalizer can convert many characters.
    """

    def __init__(self, options: PipelineOptions | None = None):
        self.options = options or PipelineOptions()
        self.debug_info: dict[str, Any] = {}

    def build_engine(self) -> ValidationEngine:
        """Validation engine with the core rules and, if enabled, the 5e pack."""
        engine = ValidationEngine()
        if self.options.include_dnd5e_rules:
            engine.add_rules(DND5E_RULES)
        return engine

    def normalize(self, raw: dict) -> tuple[NormalizedCharacter, list[str], list[str], list[str]]:
        """Map a raw record to a NormalizedCharacter.

        Args:
            raw: Raw D&D Beyond character JSON. Not modified.

        Returns:
            Tuple of (character, mapped_fields, unmapped_fields, warnings).
        """
        raw = as_dict(raw)
        debug = self.options.debug
        all_warnings: list[str] = []
        mapped_fields: list[str] = []
        unmapped_fields: list[str] = []
        debug_info: dict[str, Any] = {}

        character_data: dict = {"abilities": AbilityScores()}

        # Identity
        identity_fields = ["name", "race", "classes", "background", "alignment"]
        try:
            identity, warnings = map_identity(raw)
            character_data.update(identity)
            all_warnings.extend(warnings)
            mapped_fields.extend(identity_fields)
        except Exception as e:
            all_warnings.append(f"Failed to map identity: {e}")
            unmapped_fields.extend(identity_fields)

        classes = character_data.get("classes", [])
        level = character_data.get("level", 0)
        character_data["proficiency_bonus"] = proficiency_bonus_for(level)

        # Abilities
        try:
            resolver = AbilityResolver(debug=debug)
            character_data["abilities"] = resolver.resolve(raw)
            mapped_fields.append("abilities")
            if debug:
                debug_info["abilities"] = resolver.debug_info
        except Exception as e:
            all_warnings.append(f"Failed to resolve abilities: {e}")
            unmapped_fields.append("abilities")
        abilities: AbilityScores = character_data["abilities"]

        # Proficiencies and skills
        proficiency_fields = ["saving_throw_proficiencies", "tool_proficiencies", "languages"]
        try:
            proficiencies, warnings = map_proficiencies(raw)
            character_data.update(proficiencies)
            all_warnings.extend(warnings)
            mapped_fields.extend(proficiency_fields)
        except Exception as e:
            all_warnings.append(f"Failed to map proficiencies: {e}")
            unmapped_fields.extend(proficiency_fields)

        try:
            skills, warnings = map_skills(raw, abilities, character_data["proficiency_bonus"])
            character_data["skills"] = skills
            all_warnings.extend(warnings)
            mapped_fields.extend(["proficiency_bonus", "skills"])
        except Exception as e:
            all_warnings.append(f"Failed to map skills: {e}")
            unmapped_fields.append("skills")

        # Combat
        combat_fields = ["armor_class", "hit_points_max", "hit_points_current", "speed", "initiative"]
        try:
            combat, warnings = map_combat(raw, abilities, classes, level)
            character_data.update(combat)
            all_warnings.extend(warnings)
            mapped_fields.extend(combat_fields)
        except Exception as e:
            all_warnings.append(f"Failed to map combat stats: {e}")
            unmapped_fields.extend(combat_fields)

        # Inventory and encumbrance
        try:
            builder = InventoryTreeBuilder(debug=debug)
            tree = builder.build(dig(raw, "inventory"), character_id=optional_int(dig(raw, "id")))
            character_data["inventory"] = tree
            mapped_fields.append("inventory")
            if debug:
                debug_info["inventory"] = builder.debug_info

            character_data["encumbrance"] = EncumbranceCalculator().calculate(
                abilities.strength.score, has_powerful_build(raw), tree.total_weight
            )
            mapped_fields.append("encumbrance")
        except Exception as e:
            all_warnings.append(f"Failed to map inventory: {e}")
            unmapped_fields.extend(["inventory", "encumbrance"])

        # Spell slots and known spells
        try:
            character_data["spells"] = SpellSlotCalculator(debug=debug).calculate(classes)
            mapped_fields.append("spell_slots")
        except Exception as e:
            all_warnings.append(f"Failed to calculate spell slots: {e}")
            unmapped_fields.append("spell_slots")

        try:
            known_spells, warnings = map_known_spells(raw)
            character_data["known_spells"] = known_spells
            all_warnings.extend(warnings)
            mapped_fields.append("known_spells")
        except Exception as e:
            all_warnings.append(f"Failed to map spells: {e}")
            unmapped_fields.append("known_spells")

        # Features
        try:
            feature_options = self.options.features
            if debug and not feature_options.debug:
                feature_options = feature_options.model_copy(update={"debug": True})
            features = FeatureProcessor().process(dig(raw, "classes"), dig(raw, "race"), feature_options)
            character_data["features"] = features
            mapped_fields.append("features")
        except Exception as e:
            all_warnings.append(f"Failed to process features: {e}")
            unmapped_fields.append("features")

        for warning in all_warnings:
            logger.warning(warning)
        if "inventory" in character_data:
            all_warnings.extend(character_data["inventory"].diagnostics)

        self.debug_info = debug_info
        return NormalizedCharacter(**character_data), mapped_fields, unmapped_fields, all_warnings

    def convert(self, raw: dict, source: str = "data") -> ConversionResult:
        """Normalize, validate and score a raw character.

        Args:
            raw: Raw D&D Beyond character JSON. Not modified.
            source: Where the record came from ("url", "file" or "data").

        Returns:
            ConversionResult with the character, validation report,
            weighted accuracy, missing-data analysis and recommendations.
        """
        character, mapped_fields, unmapped_fields, warnings = self.normalize(raw)

        report = self.build_engine().validate(character, as_dict(raw))
        calculator = AccuracyCalculator()
        accuracy = calculator.calculate_weighted_accuracy(report)
        missing_data = calculator.analyze_missing_data(report)
        recommendations = calculator.generate_improvement_recommendations(report, missing_data)

        logger.info(
            f"Converted '{character.name}' ({character.class_string() or 'no class'}): "
            f"weighted accuracy {accuracy.overall_accuracy}%"
        )

        return ConversionResult(
            character=character,
            report=report,
            accuracy=accuracy,
            missing_data=missing_data,
            recommendations=recommendations,
            mapped_fields=mapped_fields,
            unmapped_fields=unmapped_fields,
            warnings=warnings,
            source=source,
            source_id=character.id,
        )
