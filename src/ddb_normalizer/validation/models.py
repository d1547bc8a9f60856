"""
Validation result structures.

Results are plain dataclasses so that rule packs can build them without
depending on anything but this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class Severity(Enum):
    """Severity of a single rule result."""
    ERROR = "error"      # Data is wrong or unusable
    WARNING = "warning"  # Suspicious or incomplete, still usable
    INFO = "info"        # Informational note
    SUCCESS = "success"  # Check passed


class Status(Enum):
    """Aggregated status of a section or a whole report."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationResult:
    """Outcome of one validation rule."""
    valid: bool
    severity: Severity
    message: str
    accuracy: float | None = None        # 0-100
    missing_data: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)
    rule_id: str | None = None


@dataclass
class ItemCount:
    """Rule counts for a section or a report."""
    total: int = 0
    validated: int = 0
    missing: int = 0
    errored: int = 0

    def add(self, other: ItemCount) -> None:
        self.total += other.total
        self.validated += other.validated
        self.missing += other.missing
        self.errored += other.errored


@dataclass
class SectionValidation:
    """All rule results for one section of the character."""
    section_id: str
    section_name: str
    accuracy: float
    status: Status
    results: list[ValidationResult] = field(default_factory=list)
    item_count: ItemCount = field(default_factory=ItemCount)

    @property
    def errors(self) -> list[ValidationResult]:
        """Return all ERROR-severity results."""
        return [r for r in self.results if r.severity == Severity.ERROR]

    @property
    def missing_data(self) -> list[str]:
        """Every missing data point named by this section's results, in order."""
        items: list[str] = []
        for result in self.results:
            for item in result.missing_data:
                if item not in items:
                    items.append(item)
        return items


@dataclass
class CharacterValidationReport:
    """
    Complete validation report for a normalized character.

    Overall accuracy is validated rules over total rules across every
    section, not a mean of the section accuracies.
    """
    character_name: str
    overall_accuracy: float
    overall_status: Status
    sections: list[SectionValidation] = field(default_factory=list)
    summary: ItemCount = field(default_factory=ItemCount)

    def section(self, section_id: str) -> SectionValidation | None:
        """Look up a section by id."""
        for section in self.sections:
            if section.section_id == section_id:
                return section
        return None

    def __str__(self) -> str:
        """Return a formatted summary of the validation report."""
        lines = [f"Validation Report for {self.character_name}"]
        lines.append(f"Status: {self.overall_status.value.upper()} ({self.overall_accuracy:.0f}% accurate)")
        lines.append(
            f"Rules: {self.summary.validated}/{self.summary.total} validated, "
            f"{self.summary.missing} missing data, {self.summary.errored} errors"
        )
        for section in self.sections:
            lines.append(
                f"\n{section.section_name}: {section.status.value} ({section.accuracy:.0f}%)"
            )
            for result in section.results:
                if result.severity == Severity.SUCCESS:
                    continue
                lines.append(f"  - [{result.severity.value}] {result.message}")
                for suggestion in result.suggestions:
                    lines.append(f"    Suggestion: {suggestion}")
        return "\n".join(lines)


RuleCheck = Callable[[dict[str, Any], "dict[str, Any] | None"], ValidationResult]


@dataclass(frozen=True)
class ValidationRule:
    """A named check over one section's data.

    ``check`` receives the section's data and, when available, the raw
    source record. It must return a ValidationResult; anything it raises is
    caught by the engine.
    """
    id: str
    name: str
    check: RuleCheck
    description: str = ""
