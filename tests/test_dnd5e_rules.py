"""Tests for the D&D 5e validation rule pack."""

import pytest

from ddb_normalizer.validation import DND5E_RULES, Severity, ValidationEngine
from ddb_normalizer.validation import dnd5e


def _classes(*entries):
    return [
        {"name": name, "level": level, "subclass": subclass, "caster_type": caster_type}
        for name, level, subclass, caster_type in entries
    ]


class TestRegistration:
    """Test registering the pack."""

    def test_pack_registers_on_top_of_core(self):
        """Every pack rule is added alongside the core rules."""
        engine = ValidationEngine()
        engine.add_rules(DND5E_RULES)
        ids = [r.id for r in engine.get_rules("spells")]
        assert ids == ["spell-slots", "known-spells", "spell-slots-progression", "spell-list-validation"]

    def test_pack_registered_twice_fails(self):
        """Rule ids cannot collide."""
        engine = ValidationEngine()
        engine.add_rules(DND5E_RULES)
        with pytest.raises(ValueError):
            engine.add_rules(DND5E_RULES)


class TestIdentityRules:
    """Test identity checks."""

    def test_name_format(self):
        """Overlong or numeric names are flagged."""
        assert dnd5e.check_character_name_format({"name": "Aria"}).valid
        assert not dnd5e.check_character_name_format({"name": "x" * 101}).valid
        assert not dnd5e.check_character_name_format({"name": "12345"}).valid

    def test_known_subrace(self):
        """A recognised subrace passes."""
        result = dnd5e.check_race_subrace({"race": "Wood Elf", "subrace": "Wood"})
        assert result.severity == Severity.SUCCESS

    def test_unknown_subrace(self):
        """An unrecognised subrace lowers accuracy."""
        result = dnd5e.check_race_subrace({"race": "Elf", "subrace": "Moon"})
        assert not result.valid
        assert result.accuracy == 70

    def test_half_races_not_matched_as_base(self):
        """'Half-Elf' is not treated as an elf."""
        result = dnd5e.check_race_subrace({"race": "Half-Elf", "subrace": "Drow Heritage"})
        assert result.valid

    def test_multiclass_levels_valid(self):
        """Fighter 5 / Rogue 3 is consistent."""
        data = {"classes": _classes(("Fighter", 5, None, "none"), ("Rogue", 3, None, "none"))}
        assert dnd5e.check_multiclass_levels(data).severity == Severity.SUCCESS

    def test_multiclass_levels_over_twenty(self):
        """More than 20 total levels is an error."""
        data = {"classes": _classes(("Fighter", 15, None, "none"), ("Rogue", 8, None, "none"))}
        result = dnd5e.check_multiclass_levels(data)
        assert result.severity == Severity.ERROR
        assert any("Total level 23" in d for d in result.details)

    def test_duplicate_class(self):
        """The same class twice is an error."""
        data = {"classes": _classes(("Fighter", 2, None, "none"), ("fighter", 3, None, "none"))}
        assert dnd5e.check_multiclass_levels(data).severity == Severity.ERROR

    def test_multiclass_prerequisites(self):
        """Low scores for a multiclass are flagged from the raw record."""
        source = {"stats": [
            {"id": 1, "value": 15}, {"id": 2, "value": 10}, {"id": 3, "value": 14},
            {"id": 4, "value": 10}, {"id": 5, "value": 10}, {"id": 6, "value": 10},
        ]}
        data = {"classes": _classes(("Fighter", 5, None, "none"), ("Rogue", 3, None, "none"))}
        result = dnd5e.check_multiclass_levels(data, source)
        assert not result.valid
        assert result.details == ["Rogue requires dexterity 13"]


class TestAbilityRules:
    """Test ability checks."""

    def test_normal_scores(self):
        """3-20 is fine."""
        scores = {"strength": 3, "dexterity": 20, "constitution": 14, "intelligence": 10, "wisdom": 12, "charisma": 8}
        assert dnd5e.check_ability_score_ranges({"scores": scores}).accuracy == 100

    def test_unusual_scores_still_valid(self):
        """Scores up to 30 are unusual but valid."""
        scores = {"strength": 24, "dexterity": 10, "constitution": 10, "intelligence": 10, "wisdom": 10, "charisma": 10}
        result = dnd5e.check_ability_score_ranges({"scores": scores})
        assert result.valid
        assert result.severity == Severity.WARNING
        assert result.accuracy == pytest.approx((80 + 500) / 6)

    def test_impossible_scores(self):
        """Scores above 30 or below 1 are errors."""
        scores = {"strength": 35, "dexterity": 0, "constitution": 10, "intelligence": 10, "wisdom": 10, "charisma": 10}
        assert dnd5e.check_ability_score_ranges({"scores": scores}).severity == Severity.ERROR

    def test_racial_bonuses(self, ddb_fighter_rogue):
        """Half-Elf bonuses total +4."""
        result = dnd5e.check_racial_ability_bonuses({}, ddb_fighter_rogue)
        assert result.severity == Severity.SUCCESS

    def test_excessive_racial_bonuses(self):
        """More than +4 from race is suspicious."""
        source = {"modifiers": {"race": [
            {"type": "bonus", "subType": "strength-score", "value": 3},
            {"type": "bonus", "subType": "constitution-score", "value": 3},
        ]}}
        assert not dnd5e.check_racial_ability_bonuses({}, source).valid

    def test_unhashable_subtypes_ignored(self):
        """Malformed subtypes do not count toward the racial total."""
        source = {"modifiers": {"race": [
            {"type": "bonus", "subType": ["strength-score"], "value": 9},
            {"type": "bonus", "subType": "dexterity-score", "value": 2},
        ]}}
        result = dnd5e.check_racial_ability_bonuses({}, source)
        assert result.severity == Severity.SUCCESS
        assert result.message == "Racial ability bonuses total +2"

    def test_background_bonuses(self):
        """Bonuses from a background instead of race are informational."""
        source = {"modifiers": {"background": [{"type": "bonus", "subType": "strength-score", "value": 2}]}}
        result = dnd5e.check_racial_ability_bonuses({}, source)
        assert result.severity == Severity.INFO


class TestSkillRules:
    """Test skill checks."""

    @pytest.mark.parametrize("level, bonus", [(1, 2), (4, 2), (5, 3), (9, 4), (13, 5), (17, 6), (20, 6)])
    def test_proficiency_bonus_progression(self, level, bonus):
        """The expected bonus passes at every tier."""
        assert dnd5e.check_proficiency_bonus({"level": level, "proficiency_bonus": bonus}).valid

    def test_wrong_proficiency_bonus(self):
        """A bonus that does not match the level is flagged."""
        result = dnd5e.check_proficiency_bonus({"level": 5, "proficiency_bonus": 2})
        assert not result.valid
        assert result.accuracy == 50

    def test_skill_modifier_mismatch(self):
        """A skill with the wrong total is flagged."""
        data = {
            "proficiency_bonus": 2,
            "ability_modifiers": {"dexterity": 3},
            "skills": [
                {"name": "stealth", "proficient": True, "expertise": False, "bonus": 0, "modifier": 5},
                {"name": "acrobatics", "proficient": False, "expertise": False, "bonus": 0, "modifier": 5},
            ],
        }
        result = dnd5e.check_skill_modifiers(data)
        assert not result.valid
        assert result.accuracy == 50

    def test_class_skill_count(self):
        """A rogue needs four skill proficiencies."""
        data = {
            "classes": _classes(("Rogue", 1, None, "none")),
            "skills": [{"name": "stealth", "proficient": True}, {"name": "acrobatics", "proficient": True}],
        }
        result = dnd5e.check_class_skill_proficiencies(data)
        assert not result.valid
        assert result.accuracy == 50


class TestCombatRules:
    """Test combat checks."""

    def test_hit_points_within_bounds(self):
        """Fighter 5 / Rogue 3 with +2 CON allows up to 106 HP."""
        data = {
            "classes": _classes(("Fighter", 5, None, "none"), ("Rogue", 3, None, "none")),
            "hit_points_max": 106,
            "ability_modifiers": {"constitution": 2},
        }
        assert dnd5e.check_hit_points_calculation(data).valid
        data["hit_points_max"] = 107
        assert not dnd5e.check_hit_points_calculation(data).valid

    def test_hit_points_below_floor(self):
        """Fewer HP than levels is impossible with non-negative CON."""
        data = {"classes": _classes(("Wizard", 5, None, "full")), "hit_points_max": 3, "ability_modifiers": {}}
        assert not dnd5e.check_hit_points_calculation(data).valid

    def test_low_armor_class(self):
        """AC far below unarmored is suspicious."""
        result = dnd5e.check_armor_class_calculation({"armor_class": 5, "ability_modifiers": {"dexterity": 2}})
        assert not result.valid

    @pytest.mark.parametrize("speed, valid", [(30, True), (25, True), (0, False), (32, False), (150, False)])
    def test_speed(self, speed, valid):
        """Speed must be a positive multiple of 5 and plausible."""
        assert dnd5e.check_speed({"speed": speed}).valid is valid

    def test_missing_speed(self):
        """Missing speed is reported as missing data."""
        assert dnd5e.check_speed({"speed": None}).missing_data == ["speed"]


class TestEquipmentRules:
    """Test equipment checks."""

    def test_weapons_missing_damage(self):
        """A weapon without dice is informational."""
        data = {"items": [
            {"name": "Longsword", "category": "weapon", "damage": "1d8", "damage_type": "Slashing"},
            {"name": "Mystery Blade", "category": "weapon", "damage": None, "damage_type": None},
        ]}
        result = dnd5e.check_weapon_properties(data)
        assert result.severity == Severity.INFO
        assert result.accuracy == 50

    def test_armor_without_ac(self):
        """Armor needs an AC value."""
        data = {"items": [{"name": "Cloth", "category": "armor", "armor_class": None}]}
        assert not dnd5e.check_armor_ac_contribution(data).valid

    def test_structure_diagnostics_reduce_accuracy(self):
        """Each tree diagnostic costs ten points."""
        data = {"items": [{"name": "Rope", "quantity": 1, "weight": 10}], "diagnostics": ["cycle", "orphan"]}
        result = dnd5e.check_equipment_structure(data)
        assert not result.valid
        assert result.accuracy == 80

    @pytest.mark.parametrize("level, valid, severity", [
        ("unencumbered", True, Severity.SUCCESS),
        ("encumbered", True, Severity.SUCCESS),
        ("heavily_encumbered", True, Severity.WARNING),
        ("overloaded", False, Severity.WARNING),
    ])
    def test_encumbrance_status(self, level, valid, severity):
        """Only overloaded characters fail."""
        data = {"encumbrance": {"encumbrance_level": level, "total_weight": 100, "speed_penalty": 10}}
        result = dnd5e.check_encumbrance_status(data)
        assert (result.valid, result.severity) == (valid, severity)


class TestSpellRules:
    """Test spell checks."""

    def test_pact_progression(self):
        """Warlock 5 expects two 2nd-level pact slots."""
        data = {
            "classes": _classes(("Warlock", 5, None, "pact")),
            "spell_slots": {},
            "pact_magic_slots": {"slot_level": 2, "slots": 2},
        }
        assert dnd5e.check_spell_slot_progression(data).valid

    def test_wrong_standard_slots(self):
        """Slots that do not match the caster level are flagged."""
        data = {
            "classes": _classes(("Wizard", 3, None, "full")),
            "spell_slots": {1: 4, 2: 3},
            "pact_magic_slots": {"slot_level": 0, "slots": 0},
        }
        result = dnd5e.check_spell_slot_progression(data)
        assert not result.valid

    def test_slots_for_non_caster(self):
        """Slots on a non-caster are flagged."""
        data = {"classes": _classes(("Fighter", 5, "Champion", "none")), "spell_slots": {1: 2}}
        assert not dnd5e.check_spell_slot_progression(data).valid

    def test_spell_list(self):
        """Invalid levels and schools are reported."""
        data = {"known_spells": [
            {"name": "Fireball", "level": 3, "school": "Evocation"},
            {"name": "Oddity", "level": 12, "school": "Evocation"},
            {"name": "Weird", "level": 1, "school": "Chronomancy"},
        ]}
        result = dnd5e.check_spell_list(data)
        assert not result.valid
        assert len(result.details) == 2


class TestFeatureRules:
    """Test feature checks."""

    def test_expected_features_present(self):
        """Fighter 2 needs Fighting Style, Second Wind and Action Surge."""
        data = {
            "classes": _classes(("Fighter", 2, None, "none")),
            "features": [
                {"name": "Fighting Style", "class_name": "Fighter", "description": "x"},
                {"name": "Second Wind", "class_name": "Fighter", "description": "x"},
                {"name": "Action Surge", "class_name": "Fighter", "description": "x"},
            ],
        }
        assert dnd5e.check_class_feature_progression(data).severity == Severity.SUCCESS

    def test_expected_feature_missing(self):
        """A missing expected feature lowers accuracy."""
        data = {
            "classes": _classes(("Fighter", 2, None, "none")),
            "features": [{"name": "Second Wind", "class_name": "Fighter", "description": "x"}],
        }
        result = dnd5e.check_class_feature_progression(data)
        assert not result.valid
        assert result.accuracy == pytest.approx(100 / 3)

    def test_feature_without_description(self):
        """Features need a description."""
        data = {"features": [{"name": "Darkvision", "description": ""}]}
        assert not dnd5e.check_feature_completeness(data).valid
