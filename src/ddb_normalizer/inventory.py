"""
Inventory tree reconstruction and weight roll-up.

D&D Beyond stores the inventory as a flat list where each entry points at its
parent through ``containerEntityId`` (either the character id, for items
carried directly, or the id of a container item). This module rebuilds the
containment tree from those back-references and totals carried weight,
honoring each container's ``weightMultiplier`` (0 for extradimensional
storage such as a Bag of Holding).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from .importers.dndbeyond.schema import ITEM_FILTER_TYPE_MAP
from .models import ContainerNode, InventoryItem, InventoryTree
from .safe import as_float, as_id, as_int, as_str, dig

logger = logging.getLogger("ddb-normalizer")


# ----------------------------------------------------------------------
# Raw entry conversion
# ----------------------------------------------------------------------

def _item_category(definition: dict) -> str:
    filter_type = as_str(dig(definition, "filterType"))
    if filter_type in ITEM_FILTER_TYPE_MAP:
        return ITEM_FILTER_TYPE_MAP[filter_type]
    if dig(definition, "armorClass") is not None and dig(definition, "armorTypeId") is not None:
        return "armor"
    if dig(definition, "damage") is not None:
        return "weapon"
    return "gear"


def item_from_raw(entry: dict, index: int = 0) -> InventoryItem:
    """Convert one raw D&D Beyond inventory entry into an InventoryItem.

    Unit weight is ``customWeight`` when set, else ``definition.weight``,
    divided by ``bundleSize`` for items sold in bundles (arrows, rations).

    Args:
        entry: Raw inventory entry.
        index: Position in the raw list, used as a fallback id.

    Returns:
        The normalized item.
    """
    definition = dig(entry, "definition", default={})
    if not isinstance(definition, dict):
        definition = {}

    item_id = as_id(dig(entry, "id"), fallback=f"item-{index}")

    name = (
        as_str(dig(entry, "customName"))
        or as_str(dig(definition, "name"))
        or as_str(dig(entry, "name"))
        or "Unknown Item"
    )

    raw_weight = dig(entry, "customWeight")
    if raw_weight is None:
        raw_weight = dig(definition, "weight")
    if raw_weight is None:
        raw_weight = dig(entry, "weight")
    weight = as_float(raw_weight)
    bundle_size = as_int(dig(definition, "bundleSize"), default=1)
    if bundle_size > 1:
        weight = weight / bundle_size

    quantity_raw = dig(entry, "quantity")
    quantity = 1 if quantity_raw is None else as_int(quantity_raw)

    multiplier = dig(definition, "weightMultiplier")
    if multiplier is None:
        multiplier = dig(entry, "weightMultiplier")

    armor_class = dig(definition, "armorClass")

    return InventoryItem(
        id=item_id,
        name=name,
        weight=weight,
        quantity=quantity,
        is_container=bool(dig(definition, "isContainer") or dig(entry, "isContainer")),
        weight_multiplier=None if multiplier is None else as_float(multiplier, default=1.0),
        container_id=as_id(dig(entry, "containerEntityId", default=dig(entry, "container_id"))),
        equipped=bool(dig(entry, "equipped")),
        category=_item_category(definition) if definition else as_str(dig(entry, "category"), "gear"),
        damage=as_str(dig(definition, "damage", "diceString")) or None,
        damage_type=as_str(dig(definition, "damageType")) or None,
        armor_class=None if armor_class is None else as_int(armor_class),
    )


# ----------------------------------------------------------------------
# Tree builder
# ----------------------------------------------------------------------

class InventoryTreeBuilder:
    """Builds an InventoryTree from a flat list of items.

    Containment problems never raise: an item whose parent is missing, or
    whose parent chain loops back to itself, is kept as a root item and a
    diagnostic is recorded on the tree.
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.debug_info: dict[str, Any] = {}

    def build(
        self,
        items: Iterable[dict | InventoryItem] | None,
        character_id: int | str | None = None,
    ) -> InventoryTree:
        """Rebuild the containment tree and compute total carried weight.

        Args:
            items: Raw D&D Beyond inventory entries or InventoryItems.
            character_id: Id of the owning character; items whose container
                id equals it are carried directly.

        Returns:
            InventoryTree with roots, containers, total weight and
            diagnostics.
        """
        diagnostics: list[str] = []
        normalized = self._normalize(items or [], diagnostics)

        by_key = {str(item.id): item for item in normalized}
        container_keys = {key for key, item in by_key.items() if item.is_container}
        owner_key = None if character_id is None else str(character_id)

        declared: dict[str, str | None] = {}
        for item in normalized:
            key = str(item.id)
            parent = item.container_id
            if parent is None or str(parent) == owner_key:
                declared[key] = None
            elif str(parent) not in container_keys:
                diagnostics.append(
                    f"Container parent not found for '{item.name}' (id {item.id}, parent {parent}); "
                    "treated as carried directly"
                )
                declared[key] = None
            else:
                declared[key] = str(parent)

        effective: dict[str, str | None] = {}
        for item in normalized:
            key = str(item.id)
            parent = declared[key]
            if parent is not None and self._loops_back(key, parent, declared, effective):
                diagnostics.append(
                    f"Cyclical containment detected for '{item.name}' (id {item.id}); "
                    "treated as carried directly"
                )
                parent = None
            effective[key] = parent

        roots: list[InventoryItem] = []
        containers: dict[str, ContainerNode] = {
            key: ContainerNode(container=by_key[key]) for key in by_key if key in container_keys
        }
        for item in normalized:
            parent = effective[str(item.id)]
            if parent is None:
                roots.append(item)
            else:
                containers[parent].contents.append(item)

        weights: dict[str, float] = {}
        total = sum(self._weight_of(item, containers, weights) for item in roots)

        for message in diagnostics:
            logger.warning(message)

        if self.debug:
            self.debug_info = {
                "item_count": len(normalized),
                "root_count": len(roots),
                "container_weights": {
                    key: {
                        "own": node.container.total_weight,
                        "contents": sum(weights.get(str(c.id), 0.0) for c in node.contents),
                        "multiplier": node.container.contents_multiplier,
                    }
                    for key, node in containers.items()
                },
            }

        return InventoryTree(
            roots=roots,
            containers=containers,
            total_weight=round(total, 4),
            diagnostics=diagnostics,
        )

    @staticmethod
    def _normalize(items: Iterable[dict | InventoryItem], diagnostics: list[str]) -> list[InventoryItem]:
        normalized: list[InventoryItem] = []
        seen: set[str] = set()
        for index, entry in enumerate(items):
            if isinstance(entry, InventoryItem):
                item = entry
            elif isinstance(entry, dict):
                try:
                    item = item_from_raw(entry, index)
                except ValidationError as exc:
                    diagnostics.append(
                        f"Skipped malformed inventory entry at position {index}: {exc.error_count()} invalid field(s)"
                    )
                    continue
            else:
                diagnostics.append(f"Skipped malformed inventory entry at position {index}")
                continue
            key = str(item.id)
            if key in seen:
                diagnostics.append(f"Duplicate inventory id {item.id} ('{item.name}') ignored")
                continue
            seen.add(key)
            normalized.append(item)
        return normalized

    @staticmethod
    def _loops_back(
        key: str,
        parent: str,
        declared: dict[str, str | None],
        effective: dict[str, str | None],
    ) -> bool:
        """Whether following parents from ``parent`` leads back to ``key``.

        Parents already settled are taken from ``effective`` so that a cycle
        broken earlier is not reported twice.
        """
        visited: set[str] = set()
        current: str | None = parent
        while current is not None:
            if current == key:
                return True
            if current in visited:
                # a loop further up that does not include this item
                return False
            visited.add(current)
            current = effective[current] if current in effective else declared.get(current)
        return False

    def _weight_of(
        self,
        item: InventoryItem,
        containers: dict[str, ContainerNode],
        weights: dict[str, float],
    ) -> float:
        weight = item.total_weight
        node = containers.get(str(item.id))
        if node is not None:
            contents = sum(self._weight_of(child, containers, weights) for child in node.contents)
            weight += contents * node.container.contents_multiplier
        weights[str(item.id)] = weight
        return weight
