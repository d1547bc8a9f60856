"""
Validation of normalized characters.

The engine runs per-section rules and produces a CharacterValidationReport;
the accuracy calculator turns that report into a weighted score, quality
metrics and improvement recommendations.
"""

from .accuracy import (
    AccuracyBreakdown,
    AccuracyCalculator,
    DataQualityMetrics,
    MissingDataAnalysis,
    WeightedAccuracy,
)
from .dnd5e import DND5E_RULES
from .engine import SECTIONS, ValidationEngine
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

__all__ = [
    "AccuracyBreakdown",
    "AccuracyCalculator",
    "CharacterValidationReport",
    "CORE_RULES",
    "DataQualityMetrics",
    "DND5E_RULES",
    "ItemCount",
    "MissingDataAnalysis",
    "SECTIONS",
    "SectionValidation",
    "Severity",
    "Status",
    "ValidationEngine",
    "ValidationResult",
    "ValidationRule",
    "WeightedAccuracy",
]
