"""
Base models and exceptions for the character conversion system.
"""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, Field

from ..models import NormalizedCharacter
from ..validation.accuracy import MissingDataAnalysis, WeightedAccuracy
from ..validation.models import CharacterValidationReport


class ImportError(Exception):
    """Raised when a character record cannot be loaded.

    Provides a user-facing message explaining what went wrong
    and, where possible, how to fix it.
    """


class ImportedField(BaseModel):
    """A field that was successfully normalized."""

    name: str = Field(description="Field name")
    summary: str = Field(default="", description="Brief summary of the normalized value")


class ImportWarning(BaseModel):
    """A warning generated during conversion."""

    field: str = Field(description="Field that triggered the warning")
    message: str = Field(description="Human-readable warning message")
    suggestion: str = Field(default="", description="Actionable suggestion to resolve the warning")


class NotImported(BaseModel):
    """A field that could not be normalized."""

    field: str = Field(description="Field name that was not normalized")
    reason: str = Field(description="Reason why the field was not normalized")


class SectionScore(BaseModel):
    """One validation section as shown in the report."""

    name: str = Field(description="Section display name")
    accuracy: float = Field(description="Section accuracy, 0-100")
    status: str = Field(description='"success", "warning" or "error"')


class ImportReport(BaseModel):
    """Structured conversion report with status, fields, accuracy, warnings, and suggestions."""

    status: str = Field(description='Conversion status: "success", "success_with_warnings", or "failed"')
    character_name: str = Field(description="Name of the converted character")
    weighted_accuracy: int = Field(default=0, description="Weighted overall accuracy, 0-100")
    validation_accuracy: float = Field(default=0, description="Validated rules over total rules, 0-100")
    validation_status: str = Field(default="success", description="Overall validation status")
    sections: list[SectionScore] = Field(
        default_factory=list,
        description="Per-section validation scores in report order",
    )
    imported_fields: list[ImportedField] = Field(
        default_factory=list,
        description="Fields successfully normalized with value summaries",
    )
    warnings: list[ImportWarning] = Field(
        default_factory=list,
        description="Non-fatal issues encountered during conversion",
    )
    not_imported: list[NotImported] = Field(
        default_factory=list,
        description="Fields that could not be normalized with reasons",
    )
    suggestions: list[str] = Field(
        default_factory=list,
        description="Actionable advice for improving the conversion",
    )

    def format(self) -> str:
        """Render the report as plain text for an MCP tool response."""
        header = [
            f"D&D Beyond Conversion Report - {self.character_name}",
            f"Status: {self.status.upper().replace('_', ' ')}",
            f"Accuracy: {self.weighted_accuracy}% weighted, "
            f"{self.validation_accuracy:.0f}% of rules validated ({self.validation_status})",
        ]

        grouped: dict[str, list[str]] = {}
        for imported in self.imported_fields:
            grouped.setdefault(_categorize_field(imported.name), []).append(imported.summary or imported.name)

        blocks = [
            header,
            _block("Sections:", [f"{s.name}: {s.accuracy:.0f}% ({s.status})" for s in self.sections]),
            _block(
                f"Normalized ({len(self.imported_fields)} fields):",
                [f"{category}: {', '.join(values)}" for category, values in grouped.items()],
            ),
            _block(
                f"Warnings ({len(self.warnings)}):",
                [f"- {w.message} ({w.suggestion})" if w.suggestion else f"- {w.message}" for w in self.warnings],
            ),
            _block(
                f"Not Normalized ({len(self.not_imported)}):",
                [f"- {n.field}: {n.reason}" for n in self.not_imported],
            ),
            _block("Suggestions:", [f"- {s}" for s in self.suggestions]),
        ]
        return "\n\n".join("\n".join(block) for block in blocks if block)


def _block(heading: str, entries: list[str]) -> list[str]:
    """A heading followed by indented entries; empty when there are no entries."""
    if not entries:
        return []
    return [heading] + [f"  {entry}" for entry in entries]


# Display group for each normalized field; anything else is "Other"
FIELD_CATEGORIES: dict[str, str] = {
    **dict.fromkeys(("name", "race", "classes", "background", "alignment"), "Identity"),
    "abilities": "Abilities",
    **dict.fromkeys(
        ("hit_points_max", "hit_points_current", "armor_class", "speed", "initiative"), "Combat"
    ),
    **dict.fromkeys(
        ("proficiency_bonus", "skills", "saving_throw_proficiencies", "tool_proficiencies", "languages"),
        "Proficiencies",
    ),
    **dict.fromkeys(("known_spells", "spell_slots"), "Spells"),
    **dict.fromkeys(("inventory", "encumbrance"), "Gear"),
}


def _categorize_field(field_name: str) -> str:
    return FIELD_CATEGORIES.get(field_name, "Other")


# DDB fields that have no place in the normalized model
DDB_UNSUPPORTED_FIELDS: dict[str, str] = {
    "character_portrait": "Character portrait/avatar image (not part of the normalized model)",
    "character_theme": "D&D Beyond visual theme (not applicable)",
    "decorations": "D&D Beyond decorations and badges (not applicable)",
    "campaign_info": "D&D Beyond campaign metadata (not applicable)",
    "preferences": "D&D Beyond user preferences (not applicable)",
}


class ConversionResult(BaseModel):
    """Result of converting one raw character record."""

    character: NormalizedCharacter = Field(description="The normalized character")
    report: CharacterValidationReport = Field(description="Per-section validation report")
    accuracy: WeightedAccuracy = Field(description="Weighted accuracy and quality metrics")
    missing_data: list[MissingDataAnalysis] = Field(
        default_factory=list,
        description="Missing data per section, most impactful first",
    )
    recommendations: list[str] = Field(
        default_factory=list,
        description="Prioritised improvement recommendations",
    )
    mapped_fields: list[str] = Field(
        default_factory=list,
        description="Field names that were successfully mapped from the source",
    )
    unmapped_fields: list[str] = Field(
        default_factory=list,
        description="Field names that could not be mapped (missing or malformed)",
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal issues encountered during conversion",
    )
    source: str = Field(default="data", description='Record source: "url", "file" or "data"')
    source_id: int | None = Field(
        default=None,
        description="Original character ID from D&D Beyond",
    )

    def build_report(self) -> ImportReport:
        """Build a structured ImportReport from this ConversionResult.

        Converts the flat mapped_fields/unmapped_fields/warnings lists into
        structured ImportedField, ImportWarning, NotImported objects and
        attaches the accuracy scores.

        Returns:
            ImportReport with status, scores, structured fields, warnings, and suggestions.
        """
        char = self.character

        imported = [
            ImportedField(name=field_name, summary=_summarize_field(field_name, char))
            for field_name in self.mapped_fields
        ]
        structured_warnings = [_parse_warning(text) for text in self.warnings]

        not_imported = [
            NotImported(field=field_name, reason=f"Could not map '{field_name}' from source data")
            for field_name in self.unmapped_fields
        ]
        for field_name, reason in DDB_UNSUPPORTED_FIELDS.items():
            not_imported.append(NotImported(field=field_name, reason=reason))

        suggestions = list(self.recommendations)
        for suggestion in _generate_suggestions(char, self.unmapped_fields, self.warnings):
            if suggestion not in suggestions:
                suggestions.append(suggestion)

        if self.unmapped_fields and not self.mapped_fields:
            status = "failed"
        elif self.warnings or self.unmapped_fields:
            status = "success_with_warnings"
        else:
            status = "success"

        return ImportReport(
            status=status,
            character_name=char.name,
            weighted_accuracy=self.accuracy.overall_accuracy,
            validation_accuracy=self.report.overall_accuracy,
            validation_status=self.report.overall_status.value,
            sections=[
                SectionScore(name=s.section_name, accuracy=s.accuracy, status=s.status.value)
                for s in self.report.sections
            ],
            imported_fields=imported,
            warnings=structured_warnings,
            not_imported=not_imported,
            suggestions=suggestions,
        )


def _race_summary(char: NormalizedCharacter) -> str:
    if char.subrace and char.subrace not in (char.race or ""):
        return f"{char.subrace} {char.race}"
    return char.race or "None"


def _encumbrance_summary(char: NormalizedCharacter) -> str:
    if char.encumbrance is None:
        return "not calculated"
    return char.encumbrance.encumbrance_level.value.replace("_", " ")


def _joined(values: list[str]) -> str:
    return ", ".join(values) if values else "None"


# One-line summary per normalized field
FIELD_SUMMARIES: dict[str, Callable[[NormalizedCharacter], str]] = {
    "name": lambda c: c.name,
    "race": _race_summary,
    "classes": lambda c: c.class_string(),
    "background": lambda c: c.background or "None",
    "alignment": lambda c: c.alignment or "None",
    "abilities": lambda c: ", ".join(
        f"{name[:3].upper()} {score}" for name, score in c.abilities.as_dict().items()
    ),
    "proficiency_bonus": lambda c: f"+{c.proficiency_bonus}",
    "skills": lambda c: f"{sum(1 for s in c.skills if s.proficient)} proficient skills",
    "saving_throw_proficiencies": lambda c: _joined(c.saving_throw_proficiencies),
    "tool_proficiencies": lambda c: f"{len(c.tool_proficiencies)} tools",
    "languages": lambda c: _joined(c.languages),
    "hit_points_max": lambda c: str(c.hit_points_max),
    "hit_points_current": lambda c: f"{c.hit_points_current}/{c.hit_points_max}",
    "armor_class": lambda c: f"AC {c.armor_class}",
    "speed": lambda c: f"{c.speed} ft",
    "initiative": lambda c: f"initiative {c.initiative:+d}",
    "inventory": lambda c: f"{len(c.inventory.all_items())} items, {c.inventory.total_weight:g} lb",
    "encumbrance": _encumbrance_summary,
    "spell_slots": lambda c: f"{c.spells.spell_slots.total + c.spells.pact_magic_slots.slots} total slots",
    "known_spells": lambda c: f"{len(c.known_spells)} spells",
    "features": lambda c: f"{c.features.total} features",
}


def _summarize_field(field_name: str, char: NormalizedCharacter) -> str:
    """Short human-readable summary of a normalized field; unknown fields echo their name."""
    summarize = FIELD_SUMMARIES.get(field_name)
    return summarize(char) if summarize else field_name


def _parse_warning(warning_text: str) -> ImportWarning:
    """Parse a raw warning string into a structured ImportWarning.

    Args:
        warning_text: The raw warning message string.

    Returns:
        ImportWarning with field, message, and optional suggestion.
    """
    field = "general"
    suggestion = ""

    lower = warning_text.lower()

    if "class" in lower:
        field = "classes"
        suggestion = "Verify class and subclass choices on D&D Beyond"
    elif "speed" in lower:
        field = "speed"
        suggestion = "Check race speed settings on D&D Beyond"
    elif "container" in lower or "inventory" in lower or "item" in lower:
        field = "inventory"
        suggestion = "Check item placement in containers on D&D Beyond"
    elif "spell" in lower:
        field = "spells"
        suggestion = "Verify spell list on D&D Beyond"
    elif "feature" in lower or "trait" in lower:
        field = "features"
    elif "hit points" in lower:
        field = "hit_points"
        suggestion = "Re-save the character on D&D Beyond to refresh hit points"

    return ImportWarning(
        field=field,
        message=warning_text,
        suggestion=suggestion,
    )


def _generate_suggestions(
    char: NormalizedCharacter,
    unmapped: list[str],
    warnings: list[str],
) -> list[str]:
    """Generate actionable suggestions based on the conversion results.

    Args:
        char: The normalized character.
        unmapped: List of fields that could not be mapped.
        warnings: List of warning messages.

    Returns:
        List of suggestion strings.
    """
    suggestions: list[str] = []

    if "abilities" in unmapped:
        suggestions.append(
            "Ability scores could not be resolved. Set them manually after export"
        )

    if char.known_spells and char.spells.spell_slots.is_empty and char.spells.pact_magic_slots.is_empty:
        suggestions.append(
            "Spells were found but no spell slots. Check spellcasting subclass choices"
        )

    if any("cyclical" in w.lower() for w in warnings):
        suggestions.append(
            "Some containers hold each other. Move the items out on D&D Beyond and re-export"
        )

    if not char.background:
        suggestions.append(
            "No background detected. Set it on D&D Beyond if needed"
        )

    return suggestions
