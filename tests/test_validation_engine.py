"""Tests for the section-based validation engine and core rules."""

import pytest

from ddb_normalizer.importers.dndbeyond.mapper import map_skills
from ddb_normalizer.models import AbilityScore, AbilityScores, ClassInfo, NormalizedCharacter
from ddb_normalizer.validation import (
    CORE_RULES,
    SECTIONS,
    Severity,
    Status,
    ValidationEngine,
    ValidationResult,
    ValidationRule,
)
from ddb_normalizer.validation.engine import round_half_up


def _passing(data, source=None):
    return ValidationResult(valid=True, severity=Severity.SUCCESS, message="ok", accuracy=100)


def _exploding(data, source=None):
    raise RuntimeError("boom")


@pytest.fixture
def character():
    """A minimal but complete fighter."""
    abilities = AbilityScores(strength=AbilityScore(score=16))
    skills, _ = map_skills({}, abilities, 2)
    return NormalizedCharacter(
        name="Brenna",
        race="Human",
        classes=[ClassInfo(name="Fighter", level=3)],
        level=3,
        abilities=abilities,
        skills=skills,
        armor_class=16,
        hit_points_max=28,
        hit_points_current=28,
        speed=30,
    )


class TestRoundHalfUp:
    """Test percentage rounding."""

    def test_rounds_half_away_from_zero(self):
        """0.5 rounds up, unlike banker's rounding."""
        assert round_half_up(62.5) == 63
        assert round_half_up(0.5) == 1
        assert round_half_up(62.49) == 62


class TestRuleRegistration:
    """Test adding rules."""

    def test_core_rules_registered_by_default(self):
        """A fresh engine has every core rule."""
        engine = ValidationEngine()
        for section_id, rules in CORE_RULES.items():
            assert [r.id for r in engine.get_rules(section_id)] == [r.id for r in rules]

    def test_engine_without_core_rules(self):
        """Core rules can be left out."""
        engine = ValidationEngine(include_core_rules=False)
        assert all(engine.get_rules(s) == [] for s in SECTIONS)

    def test_unknown_section_rejected(self):
        """Adding to an unknown section raises ValueError."""
        with pytest.raises(ValueError, match="Unknown validation section"):
            ValidationEngine().add_rule("inventory", ValidationRule("x", "X", _passing))

    def test_duplicate_id_rejected(self):
        """A rule id can only be registered once per section."""
        engine = ValidationEngine()
        with pytest.raises(ValueError, match="already registered"):
            engine.add_rule("identity", ValidationRule("name-present", "Again", _passing))

    def test_same_id_in_other_section_allowed(self):
        """Ids are unique per section, not globally."""
        engine = ValidationEngine()
        engine.add_rule("combat", ValidationRule("name-present", "Odd but fine", _passing))
        assert "name-present" in [r.id for r in engine.get_rules("combat")]

    def test_get_rules_returns_copy(self):
        """Mutating the returned list does not change the engine."""
        engine = ValidationEngine()
        engine.get_rules("identity").clear()
        assert engine.get_rules("identity")


class TestValidate:
    """Test running validation."""

    def test_sections_in_fixed_order(self, character):
        """The report lists all seven sections in order."""
        report = ValidationEngine().validate(character)
        assert [s.section_id for s in report.sections] == list(SECTIONS)
        assert report.section("combat").section_name == "Combat Statistics"

    def test_complete_character_passes_core_rules(self, character):
        """Only equipment, which is empty, is missing data."""
        report = ValidationEngine().validate(character)
        assert report.section("identity").status == Status.SUCCESS
        assert report.section("abilities").accuracy == 100
        equipment = report.section("equipment")
        assert equipment.item_count.missing == 1
        assert equipment.missing_data == ["weapons", "armor"]
        assert equipment.status == Status.WARNING

    def test_overall_accuracy_counts_rules(self, character):
        """Overall accuracy is validated over total rules."""
        report = ValidationEngine().validate(character)
        total = sum(len(r) for r in CORE_RULES.values())
        assert report.summary.total == total
        assert report.summary.validated == total - 1
        assert report.overall_accuracy == round_half_up((total - 1) / total * 100)
        assert report.overall_status == Status.WARNING

    def test_raising_rule_is_isolated(self, character):
        """A rule that raises becomes an error result; other rules still run."""
        engine = ValidationEngine()
        engine.add_rule("combat", ValidationRule("explodes", "Exploding Rule", _exploding))
        engine.add_rule("combat", ValidationRule("after", "After", _passing))

        section = engine.validate(character).section("combat")
        by_id = {r.rule_id: r for r in section.results}
        assert by_id["explodes"].severity == Severity.ERROR
        assert by_id["explodes"].details == ["boom"]
        assert by_id["after"].valid is True
        assert section.status == Status.ERROR
        assert section.item_count.errored == 1

    def test_rule_returning_wrong_type_is_an_error(self, character):
        """Returning something other than a ValidationResult is recorded as an error."""
        engine = ValidationEngine(include_core_rules=False)
        engine.add_rule("identity", ValidationRule("bad", "Bad", lambda data, source=None: True))
        section = engine.validate(character).section("identity")
        assert section.results[0].severity == Severity.ERROR

    def test_empty_section_scores_zero(self, character):
        """A section with no rules has accuracy 0."""
        report = ValidationEngine(include_core_rules=False).validate(character)
        assert all(s.accuracy == 0 for s in report.sections)
        assert report.overall_accuracy == 0

    def test_source_passed_to_rules(self, character):
        """Rules receive the raw source record."""
        seen = {}

        def capture(data, source=None):
            seen["source"] = source
            return _passing(data)

        engine = ValidationEngine(include_core_rules=False)
        engine.add_rule("identity", ValidationRule("capture", "Capture", capture))
        engine.validate(character, {"id": 1})
        assert seen["source"] == {"id": 1}

    def test_validate_section(self, character):
        """A single section can be re-validated on its own."""
        engine = ValidationEngine()
        section = engine.validate_section("combat", character.section_data("combat"))
        assert section.section_id == "combat"
        assert section.accuracy == 100
        assert [r.rule_id for r in section.results] == ["armor-class", "hit-points"]

    def test_report_str(self, character):
        """The text summary names the character and sections."""
        text = str(ValidationEngine().validate(character))
        assert "Validation Report for Brenna" in text
        assert "Equipment & Inventory" in text
        assert "No equipment found" in text


class TestCoreRules:
    """Test individual core rules through the engine."""

    def test_unnamed_character_is_an_error(self):
        """Default name fails the name rule."""
        section = ValidationEngine().validate(NormalizedCharacter()).section("identity")
        by_id = {r.rule_id: r for r in section.results}
        assert by_id["name-present"].severity == Severity.ERROR
        assert by_id["classes-present"].missing_data == ["classes"]
        assert section.status == Status.ERROR

    def test_armor_class_out_of_range(self, character):
        """AC above 30 is an error."""
        bad = character.model_copy(update={"armor_class": 45})
        section = ValidationEngine().validate(bad).section("combat")
        assert section.errors[0].rule_id == "armor-class"

    def test_current_hp_above_max(self, character):
        """Current HP above max lowers accuracy without erroring."""
        bad = character.model_copy(update={"hit_points_current": 40})
        section = ValidationEngine().validate(bad).section("combat")
        assert section.item_count.errored == 0
        assert section.accuracy == round_half_up((100 + 70) / 2)

    def test_missing_combat_data(self):
        """Absent AC and HP are reported as missing data."""
        section = ValidationEngine().validate(NormalizedCharacter(name="X")).section("combat")
        assert section.missing_data == ["armor_class", "hit_points"]
        assert section.item_count.missing == 2

    def test_features_info_when_empty(self, character):
        """No features is informational and still counts as validated."""
        section = ValidationEngine().validate(character).section("features")
        assert section.results[0].severity == Severity.INFO
        assert section.item_count.validated == 1
        assert section.accuracy == 50
