"""
Section-based validation engine.

A normalized character is validated in seven fixed sections. Each section
holds its own list of rules; rules can be registered at runtime, which is how
game-system rule packs plug in. A rule that raises is recorded as an error
result and the remaining rules still run.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Iterable, Mapping

from ..models import NormalizedCharacter
from .models import (
    CharacterValidationReport,
    ItemCount,
    SectionValidation,
    Severity,
    Status,
    ValidationResult,
    ValidationRule,
)
from .rules import CORE_RULES

logger = logging.getLogger("ddb-normalizer.validation")

# Section id → display name, in report order
SECTIONS: dict[str, str] = {
    "identity": "Character Identity",
    "abilities": "Ability Scores",
    "skills": "Skills & Proficiencies",
    "combat": "Combat Statistics",
    "equipment": "Equipment & Inventory",
    "spells": "Spells & Magic",
    "features": "Features & Traits",
}

ACCURACY_WARNING_THRESHOLD = 90


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


def status_for(item_count: ItemCount, accuracy: float) -> Status:
    """Status rule shared by sections and the whole report."""
    if item_count.errored > 0:
        return Status.ERROR
    if item_count.missing > 0 or accuracy < ACCURACY_WARNING_THRESHOLD:
        return Status.WARNING
    return Status.SUCCESS


class ValidationEngine:
    """
    Runs registered rules over each section of a normalized character.

    Core rules are registered at construction unless ``include_core_rules``
    is False. Additional rule packs are added with :meth:`add_rules`.
    """

    def __init__(self, include_core_rules: bool = True):
        self._rules: dict[str, list[ValidationRule]] = {section: [] for section in SECTIONS}
        if include_core_rules:
            self.add_rules(CORE_RULES)

    # ----------------------------------------------------------------------
    # Registration
    # ----------------------------------------------------------------------

    def add_rule(self, section_id: str, rule: ValidationRule) -> None:
        """Register a rule for a section.

        Args:
            section_id: One of the fixed section ids.
            rule: The rule to append.

        Raises:
            ValueError: If the section id is unknown or a rule with the same
                id is already registered for that section.
        """
        if section_id not in self._rules:
            raise ValueError(
                f"Unknown validation section '{section_id}'. "
                f"Expected one of: {', '.join(SECTIONS)}"
            )
        if any(existing.id == rule.id for existing in self._rules[section_id]):
            raise ValueError(f"Rule '{rule.id}' is already registered for section '{section_id}'")
        self._rules[section_id].append(rule)
        logger.debug(f"Registered rule '{rule.id}' for section '{section_id}'")

    def add_rules(self, rule_pack: Mapping[str, Iterable[ValidationRule]]) -> None:
        """Register a rule pack keyed by section id."""
        for section_id, rules in rule_pack.items():
            for rule in rules:
                self.add_rule(section_id, rule)

    def get_rules(self, section_id: str) -> list[ValidationRule]:
        """Rules registered for a section (a copy)."""
        return list(self._rules.get(section_id, []))

    # ----------------------------------------------------------------------
    # Validation
    # ----------------------------------------------------------------------

    def validate(
        self,
        character: NormalizedCharacter,
        source: dict[str, Any] | None = None,
    ) -> CharacterValidationReport:
        """Validate every section of a normalized character.

        Args:
            character: The normalized character.
            source: The raw D&D Beyond record, passed through to rules.

        Returns:
            CharacterValidationReport with per-section results.
        """
        sections: list[SectionValidation] = []
        summary = ItemCount()

        for section_id in SECTIONS:
            section = self.validate_section(section_id, character.section_data(section_id), source)
            sections.append(section)
            summary.add(section.item_count)

        overall_accuracy = (
            round_half_up(summary.validated / summary.total * 100) if summary.total else 0
        )
        report = CharacterValidationReport(
            character_name=character.name,
            overall_accuracy=overall_accuracy,
            overall_status=status_for(summary, overall_accuracy),
            sections=sections,
            summary=summary,
        )
        logger.info(
            f"Validated '{character.name}': {overall_accuracy}% "
            f"({summary.validated}/{summary.total} rules), status {report.overall_status.value}"
        )
        return report

    def validate_section(
        self,
        section_id: str,
        section_data: dict[str, Any],
        source: dict[str, Any] | None = None,
    ) -> SectionValidation:
        """Run one section's rules.

        Used directly to re-validate a single section after its upstream
        data changed.

        Args:
            section_id: Section to validate.
            section_data: Data for that section (see
                ``NormalizedCharacter.section_data``).
            source: Optional raw record.

        Returns:
            SectionValidation for the section.
        """
        results: list[ValidationResult] = []
        count = ItemCount()

        for rule in self._rules.get(section_id, []):
            try:
                result = rule.check(section_data, source)
                if not isinstance(result, ValidationResult):
                    raise TypeError(
                        f"rule returned {type(result).__name__}, expected ValidationResult"
                    )
            except Exception as e:
                logger.exception(f"Validation rule '{rule.id}' failed")
                result = ValidationResult(
                    valid=False,
                    severity=Severity.ERROR,
                    message=f"Validation rule failed: {rule.name}",
                    details=[str(e) or type(e).__name__],
                )
            result = replace(result, rule_id=rule.id)
            results.append(result)

            count.total += 1
            if result.severity == Severity.ERROR:
                count.errored += 1
            elif result.severity == Severity.WARNING and result.missing_data:
                count.missing += 1
            elif result.valid:
                count.validated += 1

        accuracies = [r.accuracy for r in results if r.accuracy is not None]
        if accuracies:
            accuracy = round_half_up(sum(accuracies) / len(accuracies))
        else:
            accuracy = round_half_up(count.validated / max(count.total, 1) * 100)

        return SectionValidation(
            section_id=section_id,
            section_name=SECTIONS.get(section_id, section_id),
            accuracy=accuracy,
            status=status_for(count, accuracy),
            results=results,
            item_count=count,
        )
