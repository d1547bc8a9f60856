"""Tests for inventory tree reconstruction and weight roll-up."""

import pytest

from ddb_normalizer.inventory import InventoryTreeBuilder, item_from_raw
from ddb_normalizer.models import InventoryItem

CHARACTER_ID = 1000


def _item(item_id, name, weight, container=CHARACTER_ID, quantity=1, **definition):
    return {
        "id": item_id,
        "containerEntityId": container,
        "quantity": quantity,
        "definition": {"name": name, "weight": weight, **definition},
    }


class TestItemFromRaw:
    """Test conversion of raw DDB inventory entries."""

    def test_weapon(self):
        """Weapons carry damage dice and damage type."""
        item = item_from_raw(_item(
            1, "Longsword", 3, filterType="Weapon",
            damage={"diceString": "1d8"}, damageType="Slashing",
        ))
        assert item.category == "weapon"
        assert item.damage == "1d8"
        assert item.damage_type == "Slashing"

    def test_armor(self):
        """Armor keeps its AC value."""
        item = item_from_raw(_item(2, "Chain Mail", 55, filterType="Armor", armorClass=16, armorTypeId=3))
        assert item.category == "armor"
        assert item.armor_class == 16

    def test_container_fields(self):
        """Container flag and weight multiplier come from the definition."""
        item = item_from_raw(_item(3, "Bag of Holding", 15, isContainer=True, weightMultiplier=0))
        assert item.is_container is True
        assert item.weight_multiplier == 0
        assert item.contents_multiplier == 0

    def test_bundle_size_divides_weight(self):
        """Bundled items weigh definition weight / bundle size each."""
        item = item_from_raw(_item(4, "Arrows", 1, quantity=20, bundleSize=20))
        assert item.weight == pytest.approx(0.05)
        assert item.total_weight == pytest.approx(1.0)

    def test_custom_weight_and_name(self):
        """Character-level customizations override the definition."""
        entry = _item(5, "Backpack", 5)
        entry["customWeight"] = 2
        entry["customName"] = "Lucky Pack"
        item = item_from_raw(entry)
        assert item.weight == 2
        assert item.name == "Lucky Pack"

    def test_missing_fields_default(self):
        """An entry without definition or id still converts."""
        item = item_from_raw({}, index=7)
        assert item.id == "item-7"
        assert item.name == "Unknown Item"
        assert item.weight == 0
        assert item.quantity == 1


class TestInventoryTreeBuilder:
    """Test containment tree building."""

    def test_flat_inventory(self):
        """Items carried directly are roots and weights add up."""
        tree = InventoryTreeBuilder().build(
            [_item(1, "Rope", 10), _item(2, "Torch", 1, quantity=5)],
            character_id=CHARACTER_ID,
        )
        assert [i.name for i in tree.roots] == ["Rope", "Torch"]
        assert tree.containers == {}
        assert tree.total_weight == 15
        assert tree.diagnostics == []

    def test_nested_containers(self):
        """Contents are attached to their container and counted once."""
        items = [
            _item(1, "Backpack", 5, isContainer=True),
            _item(2, "Pouch", 1, container=1, isContainer=True),
            _item(3, "Gem", 0.5, container=2, quantity=4),
            _item(4, "Rations", 2, container=1, quantity=3),
        ]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)

        assert [i.name for i in tree.roots] == ["Backpack"]
        assert [i.name for i in tree.contents_of(1)] == ["Pouch", "Rations"]
        assert [i.name for i in tree.contents_of(2)] == ["Gem"]
        assert len(tree.all_items()) == 4
        assert tree.total_weight == 5 + 1 + 2 + 6

    def test_weightless_container_contents(self):
        """A multiplier of 0 hides contents but not the container itself."""
        items = [
            _item(1, "Bag of Holding", 15, isContainer=True, weightMultiplier=0),
            _item(2, "Anvil", 500, container=1),
        ]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert tree.total_weight == 15

    def test_multiplier_applies_to_nested_weight(self):
        """A half-weight container halves everything nested inside it."""
        items = [
            _item(1, "Enchanted Chest", 10, isContainer=True, weightMultiplier=0.5),
            _item(2, "Sack", 2, container=1, isContainer=True),
            _item(3, "Ingot", 10, container=2),
        ]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert tree.total_weight == pytest.approx(10 + (2 + 10) * 0.5)

    def test_missing_parent_becomes_root(self):
        """An item whose container is unknown is carried directly."""
        tree = InventoryTreeBuilder().build(
            [_item(1, "Dagger", 1, container=424242)],
            character_id=CHARACTER_ID,
        )
        assert [i.name for i in tree.roots] == ["Dagger"]
        assert tree.total_weight == 1
        assert len(tree.diagnostics) == 1
        assert "parent not found" in tree.diagnostics[0]

    def test_parent_that_is_not_a_container(self):
        """Pointing at a non-container item is treated as a missing parent."""
        items = [_item(1, "Rope", 10), _item(2, "Dagger", 1, container=1)]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert len(tree.roots) == 2
        assert tree.total_weight == 11
        assert tree.diagnostics

    def test_cycle_is_broken(self):
        """Containers holding each other terminate and count every item once."""
        items = [
            _item(1, "Box A", 2, container=2, isContainer=True),
            _item(2, "Box B", 3, container=1, isContainer=True),
        ]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)

        assert len(tree.all_items()) == 2
        assert tree.total_weight == 5
        assert any("Cyclical containment" in d for d in tree.diagnostics)

    def test_self_containment(self):
        """An item inside itself is a cycle of one."""
        tree = InventoryTreeBuilder().build(
            [_item(1, "Klein Bottle", 1, container=1, isContainer=True)],
            character_id=CHARACTER_ID,
        )
        assert [i.name for i in tree.roots] == ["Klein Bottle"]
        assert tree.total_weight == 1

    def test_non_positive_quantity_weighs_nothing(self):
        """Zero or negative quantities contribute no weight."""
        items = [_item(1, "Ghost Rope", 10, quantity=0), _item(2, "Debt", 5, quantity=-3)]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert tree.total_weight == 0

    def test_duplicate_ids_kept_once(self):
        """A repeated id keeps only the first entry."""
        items = [_item(1, "Rope", 10), _item(1, "Rope copy", 10)]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert len(tree.all_items()) == 1
        assert tree.total_weight == 10

    @pytest.mark.parametrize("bad_id, expected", [
        (1.5, "1.5"),
        (7.0, 7),
        ({"nested": 1}, "item-0"),
        ([], "item-0"),
        (True, "item-0"),
    ])
    def test_odd_ids_are_coerced(self, bad_id, expected):
        """Non-integer ids become int or str, falling back to the position."""
        tree = InventoryTreeBuilder().build([_item(bad_id, "Lantern", 2)], character_id=CHARACTER_ID)
        assert tree.all_items()[0].id == expected
        assert tree.total_weight == 2

    def test_odd_container_ids(self):
        """A whole-number float parent id still finds its container; a dict one is carried directly."""
        items = [
            _item(1, "Backpack", 5, isContainer=True),
            _item(2, "Rope", 10, container=1.0),
            _item(3, "Torch", 1, container={"id": 1}),
        ]
        tree = InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert [i.name for i in tree.contents_of(1)] == ["Rope"]
        assert [i.name for i in tree.roots] == ["Backpack", "Torch"]
        assert tree.total_weight == 16

    def test_unbuildable_entry_skipped(self, monkeypatch):
        """An entry that cannot become an item is skipped with a diagnostic."""
        import ddb_normalizer.inventory as inventory

        original = inventory.item_from_raw

        def flaky(entry, index=0):
            if index == 0:
                return InventoryItem(id={"bad": "id"})
            return original(entry, index)

        monkeypatch.setattr(inventory, "item_from_raw", flaky)
        tree = InventoryTreeBuilder().build([_item(1, "Broken", 50), _item(2, "Rope", 10)], character_id=CHARACTER_ID)
        assert [i.name for i in tree.roots] == ["Rope"]
        assert tree.total_weight == 10
        assert tree.diagnostics[0].startswith("Skipped malformed inventory entry at position 0")

    def test_empty_and_none(self):
        """No inventory yields an empty tree."""
        assert InventoryTreeBuilder().build(None).total_weight == 0
        assert InventoryTreeBuilder().build([]).roots == []

    def test_accepts_inventory_items(self):
        """Already-normalized items can be fed back in."""
        items = [
            InventoryItem(id="bag", name="Bag", weight=1, is_container=True),
            InventoryItem(id="coin", name="Coins", weight=0.02, quantity=50, container_id="bag"),
        ]
        tree = InventoryTreeBuilder().build(items)
        assert tree.total_weight == pytest.approx(2.0)
        assert tree.find("coin").name == "Coins"

    def test_input_not_mutated(self):
        """The raw inventory list is left untouched."""
        items = [_item(1, "Box A", 2, container=2, isContainer=True), _item(2, "Box B", 3, container=1, isContainer=True)]
        before = [dict(i, definition=dict(i["definition"])) for i in items]
        InventoryTreeBuilder().build(items, character_id=CHARACTER_ID)
        assert items == before

    def test_debug_info(self):
        """Debug mode records per-container weights."""
        builder = InventoryTreeBuilder(debug=True)
        builder.build(
            [_item(1, "Backpack", 5, isContainer=True), _item(2, "Rope", 10, container=1)],
            character_id=CHARACTER_ID,
        )
        assert builder.debug_info["container_weights"]["1"] == {"own": 5, "contents": 10, "multiplier": 1.0}

    def test_fighter_rogue_fixture(self, ddb_fighter_rogue):
        """The fixture inventory totals 80 lb with rope and waterskin in the backpack."""
        tree = InventoryTreeBuilder().build(ddb_fighter_rogue["inventory"], character_id=ddb_fighter_rogue["id"])
        assert tree.total_weight == 80
        assert {i.name for i in tree.contents_of(5004)} == {"Hempen Rope (50 feet)", "Waterskin"}
        assert tree.diagnostics == []

    def test_fighter_rogue_fractional_id(self, ddb_fighter_rogue):
        """A fractional id on the chain mail keeps the 80 lb total."""
        inventory = [dict(entry) for entry in ddb_fighter_rogue["inventory"]]
        inventory[0]["id"] = 1.5
        tree = InventoryTreeBuilder().build(inventory, character_id=ddb_fighter_rogue["id"])
        assert tree.total_weight == 80
        assert tree.find("1.5").name == "Chain Mail"

    def test_warlock_fixture(self, ddb_warlock):
        """Books in the Bag of Holding add nothing."""
        tree = InventoryTreeBuilder().build(ddb_warlock["inventory"], character_id=ddb_warlock["id"])
        assert tree.total_weight == 26
