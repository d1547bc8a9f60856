"""
Weighted accuracy scoring over a validation report.

Sections are weighted by how much they matter to a playable character
(combat and abilities most, features least). Each section's score blends
its raw rule accuracy, penalised per critical error, with the share of its
critical data elements that are present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

from .engine import round_half_up
from .models import CharacterValidationReport, SectionValidation, Severity

logger = logging.getLogger("ddb-normalizer.validation")


# =============================================================================
# Tables
# =============================================================================

DEFAULT_WEIGHTS: dict[str, float] = {
    "identity": 0.15,
    "abilities": 0.20,
    "skills": 0.15,
    "combat": 0.20,
    "equipment": 0.15,
    "spells": 0.10,
    "features": 0.05,
}

# Weights for "does this character work at the table"
FUNCTIONAL_WEIGHTS: dict[str, float] = {
    "identity": 0.10,
    "abilities": 0.25,
    "skills": 0.15,
    "combat": 0.35,
    "equipment": 0.10,
    "spells": 0.05,
    "features": 0.0,
}

# Data elements each section cannot do without
CRITICAL_ELEMENTS: dict[str, list[str]] = {
    "identity": ["name", "race", "classes", "level"],
    "abilities": ["strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma"],
    "skills": ["proficiency_bonus", "skill_modifiers"],
    "combat": ["armor_class", "hit_points", "speed"],
    "equipment": ["weapons", "armor"],
    "spells": ["spell_slots", "known_spells"],
    "features": ["class_features", "racial_traits"],
}

BASE_IMPACT: dict[str, int] = {
    "identity": 70,
    "abilities": 90,
    "skills": 60,
    "combat": 95,
    "equipment": 70,
    "spells": 50,
    "features": 40,
}
DEFAULT_IMPACT = 50

FIX_DIFFICULTY: dict[str, str] = {
    "identity": "medium",
    "abilities": "easy",
    "skills": "easy",
    "combat": "medium",
    "equipment": "hard",
    "spells": "hard",
    "features": "impossible",
}

# (section, minimum raw accuracy, points) for the usability score
USABILITY_THRESHOLDS: tuple[tuple[str, int, int], ...] = (
    ("identity", 70, 25),
    ("abilities", 80, 20),
    ("combat", 75, 25),
    ("equipment", 60, 15),
    ("features", 50, 10),
)
USABILITY_NO_CRITICAL_BONUS = 5

CRITICAL_ISSUE_PENALTY = 15
FUNCTIONAL_CRITICAL_PENALTY = 25
FIDELITY_THRESHOLD = 90
MAX_RECOMMENDATIONS = 10


# =============================================================================
# Result models
# =============================================================================

@dataclass
class AccuracyBreakdown:
    """Weighted score for one section."""
    section_id: str
    section_name: str
    raw_accuracy: float
    weighted_accuracy: float
    weight: float
    critical_issues: int = 0
    missing_data_count: int = 0
    completeness: float = 100


@dataclass
class DataQualityMetrics:
    """Cross-section quality indicators, each 0-100."""
    overall_completeness: int = 0
    data_integrity: int = 0
    functional_accuracy: int = 0
    conversion_fidelity: int = 0
    usability_score: int = 0


@dataclass
class WeightedAccuracy:
    overall_accuracy: int
    breakdowns: list[AccuracyBreakdown] = field(default_factory=list)
    quality_metrics: DataQualityMetrics = field(default_factory=DataQualityMetrics)


@dataclass
class MissingDataAnalysis:
    """What a section is missing and how hard it is to fix."""
    section_id: str
    section_name: str
    critical_missing: list[str] = field(default_factory=list)
    optional_missing: list[str] = field(default_factory=list)
    impact: int = 0
    difficulty: str = "easy"     # easy | medium | hard | impossible
    suggestions: list[str] = field(default_factory=list)


def _unique(values) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _is_critical(item: str, critical: list[str]) -> bool:
    item = item.lower()
    return any(item in element or element in item for element in (c.lower() for c in critical))


# =============================================================================
# Calculator
# =============================================================================

class AccuracyCalculator:
    """
    Scores a CharacterValidationReport.

    Args:
        weights: Section id → weight. Defaults to DEFAULT_WEIGHTS; sections
            missing from a custom mapping weigh nothing.
    """

    def __init__(self, weights: Mapping[str, float] | None = None):
        self.weights = dict(weights) if weights is not None else dict(DEFAULT_WEIGHTS)

    def calculate_weighted_accuracy(self, report: CharacterValidationReport) -> WeightedAccuracy:
        """Weighted overall accuracy, per-section breakdowns and quality metrics."""
        breakdowns = [self._breakdown(section) for section in report.sections]

        total_weight = sum(b.weight for b in breakdowns)
        weighted_sum = sum(b.weighted_accuracy for b in breakdowns)
        overall = round_half_up(weighted_sum / total_weight) if total_weight > 0 else 0

        metrics = self._quality_metrics(report, breakdowns, overall)
        logger.debug(
            f"Weighted accuracy for '{report.character_name}': {overall}% "
            f"(usability {metrics.usability_score})"
        )
        return WeightedAccuracy(overall_accuracy=overall, breakdowns=breakdowns, quality_metrics=metrics)

    def _breakdown(self, section: SectionValidation) -> AccuracyBreakdown:
        weight = self.weights.get(section.section_id, 0.0)
        critical_issues = sum(1 for r in section.results if r.severity == Severity.ERROR)
        missing_count = sum(len(r.missing_data) for r in section.results)

        expected = CRITICAL_ELEMENTS.get(section.section_id, [])
        missing = {item.lower() for r in section.results for item in r.missing_data}
        if expected:
            absent = sum(1 for element in expected if element.lower() in missing)
            completeness = (len(expected) - absent) / len(expected) * 100
        else:
            completeness = 100

        adjusted = max(0, section.accuracy - CRITICAL_ISSUE_PENALTY * critical_issues)
        return AccuracyBreakdown(
            section_id=section.section_id,
            section_name=section.section_name,
            raw_accuracy=section.accuracy,
            weighted_accuracy=(adjusted + completeness) / 2 * weight,
            weight=weight,
            critical_issues=critical_issues,
            missing_data_count=missing_count,
            completeness=completeness,
        )

    def _quality_metrics(
        self,
        report: CharacterValidationReport,
        breakdowns: list[AccuracyBreakdown],
        overall: int,
    ) -> DataQualityMetrics:
        if not breakdowns:
            return DataQualityMetrics()

        integrity = sum(1 for b in breakdowns if b.critical_issues == 0) / len(breakdowns) * 100

        functional_weight = sum(FUNCTIONAL_WEIGHTS.get(b.section_id, 0) for b in breakdowns)
        functional_sum = sum(
            max(0, b.raw_accuracy - FUNCTIONAL_CRITICAL_PENALTY * b.critical_issues)
            * FUNCTIONAL_WEIGHTS.get(b.section_id, 0)
            for b in breakdowns
        )
        functional = functional_sum / functional_weight if functional_weight else 0

        results = [r for section in report.sections for r in section.results]
        faithful = sum(
            1 for r in results
            if r.valid and r.accuracy is not None and r.accuracy >= FIDELITY_THRESHOLD
        )
        fidelity = faithful / len(results) * 100 if results else 0

        by_id = {b.section_id: b for b in breakdowns}
        usability = 0
        for section_id, minimum, points in USABILITY_THRESHOLDS:
            breakdown = by_id.get(section_id)
            if breakdown is not None and breakdown.raw_accuracy >= minimum:
                usability += points
        if sum(b.critical_issues for b in breakdowns) == 0:
            usability += USABILITY_NO_CRITICAL_BONUS

        return DataQualityMetrics(
            overall_completeness=overall,
            data_integrity=round_half_up(integrity),
            functional_accuracy=round_half_up(functional),
            conversion_fidelity=round_half_up(fidelity),
            usability_score=usability,
        )

    # ----------------------------------------------------------------------
    # Missing data and recommendations
    # ----------------------------------------------------------------------

    def analyze_missing_data(self, report: CharacterValidationReport) -> list[MissingDataAnalysis]:
        """Missing data per section, most impactful first.

        Sections with nothing missing are left out.
        """
        analyses: list[MissingDataAnalysis] = []
        for section in report.sections:
            critical_elements = CRITICAL_ELEMENTS.get(section.section_id, [])
            critical: list[str] = []
            optional: list[str] = []
            for item in section.missing_data:
                (critical if _is_critical(item, critical_elements) else optional).append(item)
            if not critical and not optional:
                continue

            critical = _unique(critical)
            optional = _unique(optional)
            impact = BASE_IMPACT.get(section.section_id, DEFAULT_IMPACT)
            impact += 20 * len(critical) + 5 * len(optional)

            analyses.append(MissingDataAnalysis(
                section_id=section.section_id,
                section_name=section.section_name,
                critical_missing=critical,
                optional_missing=optional,
                impact=min(100, max(0, impact)),
                difficulty=self._difficulty(section.section_id, len(critical)),
                suggestions=_unique(s for r in section.results for s in r.suggestions),
            ))

        analyses.sort(key=lambda a: a.impact, reverse=True)
        return analyses

    @staticmethod
    def _difficulty(section_id: str, critical_count: int) -> str:
        if critical_count == 0:
            return "easy"
        difficulty = FIX_DIFFICULTY.get(section_id, "medium")
        if critical_count >= 5:
            return "impossible"
        if critical_count >= 3:
            return "medium" if difficulty == "easy" else "hard"
        return difficulty

    def generate_improvement_recommendations(
        self,
        report: CharacterValidationReport,
        analyses: list[MissingDataAnalysis] | None = None,
    ) -> list[str]:
        """Prioritised, human-readable suggestions (at most ten)."""
        if analyses is None:
            analyses = self.analyze_missing_data(report)
        recommendations: list[str] = []

        for analysis in analyses:
            if analysis.difficulty == "easy" and analysis.impact >= 70 and analysis.critical_missing:
                recommendations.append(
                    f"{analysis.section_name}: Add missing {', '.join(analysis.critical_missing)} "
                    "for immediate accuracy improvement"
                )

        for section in report.sections:
            if section.accuracy < 50 and section.item_count.errored > 0:
                recommendations.append(
                    f"{section.section_name}: Fix {section.item_count.errored} critical errors "
                    "to improve accuracy"
                )

        if report.overall_accuracy < 70:
            recommendations.append(
                "Overall accuracy is below 70%: review the character manually before use"
            )
        elif report.overall_accuracy >= 90:
            recommendations.append("Excellent accuracy! Character is ready for export")

        return recommendations[:MAX_RECOMMENDATIONS]
