"""
Data models for the normalized character.

Every structure produced by the normalization pipeline is a pydantic model so
that export-format generators can consume it as plain data via
``model_dump()``. None of these models hold references back to the raw
D&D Beyond record.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# Abilities
# =============================================================================

class AbilityScore(BaseModel):
    """A resolved ability score with its derived modifier."""
    score: int = Field(description="Final ability score (not clamped)")

    @property
    def modifier(self) -> int:
        """Calculate ability modifier."""
        return (self.score - 10) // 2


class AbilityScores(BaseModel):
    """The six ability scores of a character."""
    strength: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))
    dexterity: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))
    constitution: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))
    intelligence: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))
    wisdom: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))
    charisma: AbilityScore = Field(default_factory=lambda: AbilityScore(score=10))

    def get(self, ability: str) -> AbilityScore:
        """Look up an ability by its lowercase name."""
        return getattr(self, ability.lower())

    def as_dict(self) -> dict[str, int]:
        """Map of ability name → score."""
        return {name: score.score for name, score in self}

    def modifiers(self) -> dict[str, int]:
        """Map of ability name → modifier."""
        return {name: score.modifier for name, score in self}


# =============================================================================
# Inventory
# =============================================================================

class InventoryItem(BaseModel):
    """A single inventory entry, referencing its container by id."""
    id: int | str
    name: str = "Unknown Item"
    weight: float = Field(default=0.0, description="Weight of a single unit, in pounds")
    quantity: int = 1
    is_container: bool = False
    weight_multiplier: float | None = Field(
        default=None,
        description="Multiplier applied to contents' weight; None means full weight",
    )
    container_id: int | str | None = Field(
        default=None,
        description="Id of the parent container, or None for items carried directly",
    )
    equipped: bool = False
    category: str = "gear"
    damage: str | None = Field(default=None, description="Damage dice, e.g. '1d8'")
    damage_type: str | None = None
    armor_class: int | None = None

    @property
    def total_weight(self) -> float:
        """Weight of the whole stack; non-positive quantities weigh nothing."""
        if self.quantity <= 0:
            return 0.0
        return self.weight * self.quantity

    @property
    def contents_multiplier(self) -> float:
        """Multiplier applied to this container's contents."""
        if self.weight_multiplier is None:
            return 1.0
        return self.weight_multiplier


class ContainerNode(BaseModel):
    """A container and the items directly inside it."""
    container: InventoryItem
    contents: list[InventoryItem] = Field(default_factory=list)


class InventoryTree(BaseModel):
    """Containment tree rebuilt from child→parent references."""
    roots: list[InventoryItem] = Field(default_factory=list)
    containers: dict[str, ContainerNode] = Field(
        default_factory=dict,
        description="Container id (as string) → container node",
    )
    total_weight: float = 0.0
    diagnostics: list[str] = Field(default_factory=list)

    def all_items(self) -> list[InventoryItem]:
        """Every item exactly once: roots first, then container contents."""
        items = list(self.roots)
        for node in self.containers.values():
            items.extend(node.contents)
        return items

    def find(self, item_id: int | str) -> InventoryItem | None:
        """Find an item by id anywhere in the tree."""
        for item in self.all_items():
            if str(item.id) == str(item_id):
                return item
        return None

    def contents_of(self, container_id: int | str) -> list[InventoryItem]:
        """Items directly inside a container (empty if unknown)."""
        node = self.containers.get(str(container_id))
        return list(node.contents) if node else []


# =============================================================================
# Encumbrance
# =============================================================================

class EncumbranceLevel(str, Enum):
    """Carry-load tiers, in ascending order of severity."""
    UNENCUMBERED = "unencumbered"
    ENCUMBERED = "encumbered"
    HEAVILY_ENCUMBERED = "heavily_encumbered"
    OVERLOADED = "overloaded"

    @property
    def rank(self) -> int:
        return list(EncumbranceLevel).index(self)


class CarryingCapacity(BaseModel):
    """Carrying-capacity thresholds in pounds."""
    normal: int = Field(description="Most weight carried without penalty (5 × STR)")
    encumbered: int = Field(description="Above this, speed drops by 10 ft")
    heavily_encumbered: int = Field(description="Above this, speed drops by 20 ft with disadvantage")
    maximum: int = Field(description="Above this, the character cannot move (15 × STR)")
    push_drag_lift: int = Field(description="Most weight that can be pushed, dragged or lifted")


class EncumbranceResult(BaseModel):
    """Carry-load classification for a given strength and total weight."""
    strength: int
    effective_strength: int
    has_size_bonus: bool = False
    total_weight: float
    capacity: CarryingCapacity
    encumbrance_level: EncumbranceLevel
    speed_penalty: int = 0
    has_disadvantage: bool = False
    can_move: bool = True


# =============================================================================
# Classes and spell slots
# =============================================================================

class CasterType(str, Enum):
    """Spellcasting progression of a class."""
    NONE = "none"
    FULL = "full"
    HALF = "half"
    THIRD = "third"
    PACT = "pact"


class ClassInfo(BaseModel):
    """A class the character has levels in."""
    name: str
    level: int = 0
    subclass: str | None = None
    caster_type: CasterType = CasterType.NONE

    @property
    def caster_level_contribution(self) -> int:
        """Levels this class adds to the multiclass spellcaster level."""
        level = max(0, self.level)
        if self.caster_type == CasterType.FULL:
            return level
        if self.caster_type == CasterType.HALF:
            return level // 2
        if self.caster_type == CasterType.THIRD:
            return level // 3
        return 0

    @property
    def pact_level_contribution(self) -> int:
        """Levels this class adds to the pact magic progression."""
        if self.caster_type == CasterType.PACT:
            return max(0, self.level)
        return 0


class SpellSlotTable(BaseModel):
    """Spell level (1–9) → number of slots; levels with no slots are omitted."""
    slots: dict[int, int] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.slots.values())

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def highest_level(self) -> int:
        return max(self.slots, default=0)

    def get(self, spell_level: int) -> int:
        return self.slots.get(spell_level, 0)

    def labelled(self) -> dict[str, int]:
        """Slots keyed as ``level1`` … ``level9``."""
        return {f"level{level}": count for level, count in sorted(self.slots.items())}


class PactMagicSlots(BaseModel):
    """Pact magic slots: a small number of slots all of one spell level."""
    slot_level: int = 0
    slots: int = 0

    @property
    def is_empty(self) -> bool:
        return self.slots == 0

    def labelled(self) -> dict[str, int]:
        """Pact slots keyed like :meth:`SpellSlotTable.labelled`."""
        if self.is_empty:
            return {}
        return {f"level{self.slot_level}": self.slots}


class SpellSlotResult(BaseModel):
    """Standard and pact slots for a character."""
    spell_slots: SpellSlotTable = Field(default_factory=SpellSlotTable)
    pact_magic_slots: PactMagicSlots = Field(default_factory=PactMagicSlots)
    caster_level: int = 0
    pact_level: int = 0
    debug_info: dict[str, Any] = Field(default_factory=dict)


class KnownSpell(BaseModel):
    """A spell the character knows or has prepared."""
    name: str
    level: int = 0
    school: str | None = None
    source: str | None = None
    prepared: bool = False


# =============================================================================
# Features
# =============================================================================

class FeatureSource(str, Enum):
    CLASS = "class"
    SUBCLASS = "subclass"
    RACE = "race"
    SUBRACE = "subrace"


class ResetCadence(str, Enum):
    SHORT_REST = "short_rest"
    LONG_REST = "long_rest"
    UNLIMITED = "unlimited"


class FeatureType(str, Enum):
    PASSIVE = "passive"
    ACTIVE = "active"
    RESOURCE = "resource"
    SPELL = "spell"
    PROFICIENCY = "proficiency"


class ProcessedFeature(BaseModel):
    """A class feature or racial trait after filtering and usage resolution."""
    id: int | str | None = None
    name: str
    description: str = ""
    source: FeatureSource
    source_name: str = Field(description="Class, subclass, race or subrace name")
    class_name: str | None = Field(default=None, description="Owning class, for class/subclass features")
    required_level: int = 1
    uses: int = 0
    reset: ResetCadence = ResetCadence.UNLIMITED
    feature_type: FeatureType = FeatureType.PASSIVE


class ProcessedFeatureSet(BaseModel):
    """All processed features of a character."""
    class_features: list[ProcessedFeature] = Field(default_factory=list)
    racial_traits: list[ProcessedFeature] = Field(default_factory=list)
    features_by_class: dict[str, list[str]] = Field(default_factory=dict)
    traits_by_race: dict[str, list[str]] = Field(default_factory=dict)
    diagnostics: list[str] = Field(default_factory=list)
    debug_info: dict[str, Any] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.class_features) + len(self.racial_traits)

    def all_features(self) -> list[ProcessedFeature]:
        return [*self.class_features, *self.racial_traits]

    def names(self) -> list[str]:
        return [f.name for f in self.all_features()]


# =============================================================================
# Skills
# =============================================================================

class Skill(BaseModel):
    """A skill with its total modifier."""
    name: str
    ability: str
    proficient: bool = False
    expertise: bool = False
    bonus: int = Field(default=0, description="Flat bonuses from items, feats and the like")
    modifier: int = 0


# =============================================================================
# Normalized character
# =============================================================================

class NormalizedCharacter(BaseModel):
    """The internally consistent character produced by the pipeline."""
    id: int | None = None
    name: str = "Unknown Character"
    race: str | None = None
    subrace: str | None = None
    background: str | None = None
    alignment: str | None = None
    classes: list[ClassInfo] = Field(default_factory=list)
    level: int = 0

    abilities: AbilityScores = Field(default_factory=AbilityScores)
    proficiency_bonus: int = 2
    skills: list[Skill] = Field(default_factory=list)
    saving_throw_proficiencies: list[str] = Field(default_factory=list)
    tool_proficiencies: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)

    armor_class: int | None = None
    hit_points_max: int | None = None
    hit_points_current: int | None = None
    speed: int | None = None
    initiative: int = 0

    inventory: InventoryTree = Field(default_factory=InventoryTree)
    encumbrance: EncumbranceResult | None = None
    spells: SpellSlotResult = Field(default_factory=SpellSlotResult)
    known_spells: list[KnownSpell] = Field(default_factory=list)
    features: ProcessedFeatureSet = Field(default_factory=ProcessedFeatureSet)

    def class_string(self) -> str:
        """Human-readable class string, e.g. 'Fighter 5 / Rogue 3'."""
        return " / ".join(f"{c.name} {c.level}" for c in self.classes)

    def section_data(self, section_id: str) -> dict[str, Any]:
        """Plain data handed to the validation rules of one section.

        Args:
            section_id: One of identity, abilities, skills, combat,
                equipment, spells, features.

        Returns:
            Dict of the values that section's rules inspect. Unknown
            sections yield an empty dict.
        """
        classes = [c.model_dump(mode="json") for c in self.classes]
        modifiers = self.abilities.modifiers()

        if section_id == "identity":
            return {
                "name": self.name,
                "race": self.race,
                "subrace": self.subrace,
                "background": self.background,
                "alignment": self.alignment,
                "classes": classes,
                "level": self.level,
            }
        if section_id == "abilities":
            return {
                "scores": self.abilities.as_dict(),
                "modifiers": modifiers,
            }
        if section_id == "skills":
            return {
                "level": self.level,
                "classes": classes,
                "proficiency_bonus": self.proficiency_bonus,
                "ability_modifiers": modifiers,
                "skills": [s.model_dump() for s in self.skills],
                "saving_throws": list(self.saving_throw_proficiencies),
            }
        if section_id == "combat":
            return {
                "level": self.level,
                "classes": classes,
                "armor_class": self.armor_class,
                "hit_points_max": self.hit_points_max,
                "hit_points_current": self.hit_points_current,
                "speed": self.speed,
                "initiative": self.initiative,
                "ability_modifiers": modifiers,
            }
        if section_id == "equipment":
            return {
                "items": [i.model_dump(mode="json") for i in self.inventory.all_items()],
                "root_count": len(self.inventory.roots),
                "container_count": len(self.inventory.containers),
                "total_weight": self.inventory.total_weight,
                "diagnostics": list(self.inventory.diagnostics),
                "encumbrance": self.encumbrance.model_dump(mode="json") if self.encumbrance else None,
            }
        if section_id == "spells":
            return {
                "classes": classes,
                "spell_slots": dict(self.spells.spell_slots.slots),
                "pact_magic_slots": self.spells.pact_magic_slots.model_dump(),
                "caster_level": self.spells.caster_level,
                "pact_level": self.spells.pact_level,
                "known_spells": [s.model_dump() for s in self.known_spells],
            }
        if section_id == "features":
            return {
                "classes": classes,
                "race": self.race,
                "features": [f.model_dump(mode="json") for f in self.features.all_features()],
                "class_feature_count": len(self.features.class_features),
                "racial_trait_count": len(self.features.racial_traits),
                "diagnostics": list(self.features.diagnostics),
            }
        return {}
