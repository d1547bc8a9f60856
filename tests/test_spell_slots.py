"""Tests for spell slot calculation."""

import pytest

from ddb_normalizer.models import CasterType, ClassInfo
from ddb_normalizer.spell_slots import (
    SpellSlotCalculator,
    caster_type_for,
    class_infos_from_raw,
    pact_slots_for,
    standard_slots_for,
)


def _info(name, level, subclass=None):
    return ClassInfo(name=name, level=level, subclass=subclass, caster_type=caster_type_for(name, subclass))


class TestCasterType:
    """Test class to caster type resolution."""

    @pytest.mark.parametrize("name, expected", [
        ("Wizard", CasterType.FULL),
        ("cleric", CasterType.FULL),
        ("Paladin", CasterType.HALF),
        ("Ranger", CasterType.HALF),
        ("Artificer", CasterType.THIRD),
        ("Warlock", CasterType.PACT),
        ("Barbarian", CasterType.NONE),
        ("Monk", CasterType.NONE),
        ("Blood Hunter", CasterType.NONE),
    ])
    def test_class_caster_types(self, name, expected):
        """Base classes map to their progression."""
        assert caster_type_for(name) == expected

    def test_fighter_needs_eldritch_knight(self):
        """Fighters only cast as Eldritch Knights."""
        assert caster_type_for("Fighter", "Champion") == CasterType.NONE
        assert caster_type_for("Fighter", "Eldritch Knight") == CasterType.THIRD

    def test_rogue_needs_arcane_trickster(self):
        """Rogues only cast as Arcane Tricksters."""
        assert caster_type_for("Rogue") == CasterType.NONE
        assert caster_type_for("Rogue", "Arcane Trickster") == CasterType.THIRD


class TestSlotTables:
    """Test the slot lookup tables."""

    @pytest.mark.parametrize("level, expected", [
        (1, {1: 2}),
        (5, {1: 4, 2: 3, 3: 2}),
        (11, {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1}),
        (17, {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1}),
        (20, {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1}),
    ])
    def test_standard_slots(self, level, expected):
        """Multiclass table rows."""
        assert standard_slots_for(level).slots == expected

    def test_caster_level_zero_or_above_twenty(self):
        """No slots at 0; levels above 20 use the level 20 row."""
        assert standard_slots_for(0).is_empty
        assert standard_slots_for(24).slots == standard_slots_for(20).slots

    @pytest.mark.parametrize("level, slots, slot_level", [
        (1, 1, 1),
        (2, 2, 1),
        (3, 2, 2),
        (5, 2, 2),
        (7, 2, 3),
        (11, 2, 4),
        (15, 2, 5),
        (20, 2, 5),
    ])
    def test_pact_slots(self, level, slots, slot_level):
        """Pact magic progression."""
        pact = pact_slots_for(level)
        assert (pact.slots, pact.slot_level) == (slots, slot_level)

    def test_pact_slot_level_never_decreases(self):
        """Pact slot level is monotonic over levels 1-20."""
        levels = [pact_slots_for(level).slot_level for level in range(1, 21)]
        assert levels == sorted(levels)
        assert all(pact_slots_for(level).slots in (1, 2) for level in range(1, 21))


class TestSpellSlotCalculator:
    """Test the calculator over class lists."""

    def test_single_wizard(self):
        """A full caster uses its own level."""
        result = SpellSlotCalculator().calculate([_info("Wizard", 5)])
        assert result.caster_level == 5
        assert result.spell_slots.labelled() == {"level1": 4, "level2": 3, "level3": 2}
        assert result.spell_slots.highest_level == 3
        assert result.spell_slots.total == 9
        assert result.pact_magic_slots.is_empty

    def test_warlock_only_pact(self):
        """Warlock levels never produce standard slots."""
        for level in range(1, 21):
            result = SpellSlotCalculator().calculate([_info("Warlock", level)])
            assert result.spell_slots.is_empty
            assert not result.pact_magic_slots.is_empty

    def test_warlock_five(self):
        """Warlock 5 has two 2nd-level pact slots."""
        result = SpellSlotCalculator().calculate([_info("Warlock", 5)])
        assert result.pact_magic_slots.labelled() == {"level2": 2}

    def test_paladin_one_has_no_slots(self):
        """Half casters contribute nothing at level 1."""
        result = SpellSlotCalculator().calculate([_info("Paladin", 1)])
        assert result.caster_level == 0
        assert result.spell_slots.is_empty

    def test_multiclass_pools_caster_levels(self):
        """Paladin 6 / Sorcerer 3 is caster level 6."""
        result = SpellSlotCalculator().calculate([_info("Paladin", 6), _info("Sorcerer", 3)])
        assert result.caster_level == 6
        assert result.spell_slots.slots == {1: 4, 2: 3, 3: 3}

    def test_multiclass_with_warlock_keeps_tables_separate(self):
        """Sorcerer 3 / Warlock 2 gets both tables, unmerged."""
        result = SpellSlotCalculator().calculate([_info("Sorcerer", 3), _info("Warlock", 2)])
        assert result.spell_slots.slots == {1: 4, 2: 2}
        assert result.pact_magic_slots.labelled() == {"level1": 2}

    def test_third_caster_subclass(self):
        """Eldritch Knight 9 contributes three caster levels."""
        result = SpellSlotCalculator().calculate([_info("Fighter", 9, "Eldritch Knight")])
        assert result.caster_level == 3
        assert result.spell_slots.slots == {1: 4, 2: 2}

    def test_non_casters(self):
        """Fighter / Rogue without casting subclasses has no slots."""
        result = SpellSlotCalculator().calculate([_info("Fighter", 5, "Champion"), _info("Rogue", 3, "Thief")])
        assert result.spell_slots.is_empty
        assert result.pact_magic_slots.is_empty

    def test_debug_breakdown(self):
        """Debug mode explains the calculation without changing it."""
        infos = [_info("Cleric", 4), _info("Ranger", 4)]
        plain = SpellSlotCalculator().calculate(infos)
        verbose = SpellSlotCalculator(debug=True).calculate(infos)

        assert plain.debug_info == {}
        assert verbose.spell_slots == plain.spell_slots
        assert verbose.debug_info["calculation_method"] == "multiclass"
        assert [c["contributes"] for c in verbose.debug_info["caster_level_calculation"]] == [4, 2]


class TestClassInfosFromRaw:
    """Test reading classes from the raw record."""

    def test_reads_levels_and_subclasses(self, ddb_fighter_rogue):
        """Fixture classes are read in order with subclasses."""
        infos = class_infos_from_raw(ddb_fighter_rogue)
        assert [(i.name, i.level, i.subclass) for i in infos] == [
            ("Fighter", 5, "Champion"),
            ("Rogue", 3, "Thief"),
        ]
        assert all(i.caster_type == CasterType.NONE for i in infos)

    def test_skips_nameless_classes(self):
        """Class entries without a definition name are dropped."""
        raw = {"classes": [{"level": 3}, {"level": 2, "definition": {"name": "Bard"}}, "junk"]}
        assert [i.name for i in class_infos_from_raw(raw)] == ["Bard"]
