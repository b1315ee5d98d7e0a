from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.ids import FactionId
from ..ambition.model import AmbitionProfile

FACTION_CATEGORIES = ("expand", "trade", "diplomatic", "military", "internal", "religious")
EFFECT_TYPES = ("power_change", "relationship_change", "resource_change", "region_control", "faction_modifier")


@dataclass(frozen=True)
class Archetype:
    id: str
    domains: Dict[str, float]
    modifiers: Dict[str, float]
    ambition_templates: Tuple[str, ...]


@dataclass(frozen=True)
class FactionEffect:
    type: str
    target: str
    value: float


@dataclass(frozen=True)
class FactionActionTemplate:
    category: str
    type: str
    description: str
    base_cost: int
    effects: Tuple[FactionEffect, ...] = ()


@dataclass
class FactionActionTemplates:
    """Archetypes plus the action templates available to each category."""
    archetypes: Dict[str, Archetype] = field(default_factory=dict)
    actions: Dict[str, List[FactionActionTemplate]] = field(default_factory=dict)

    def archetype(self, archetype_id: str) -> Archetype:
        if archetype_id not in self.archetypes:
            raise ValueError(f"Archetype with ID '{archetype_id}' not found.")
        return self.archetypes[archetype_id]

    def for_category(self, category: str) -> List[FactionActionTemplate]:
        return self.actions.get(category, [])


@dataclass
class FactionAmbition:
    """Agent policy for one faction. Kept beside the world, never inside a Faction."""
    faction_id: FactionId
    profile: AmbitionProfile
    archetype: str
    goals: List[str] = field(default_factory=list)
    last_action: Optional[str] = None
    cooldown: int = 0


@dataclass
class FactionRelationship:
    faction_a: FactionId
    faction_b: FactionId
    stance: str = "neutral"
    strength: float = 0.5
    history: List[str] = field(default_factory=list)

    def involves(self, faction_id: str) -> bool:
        return faction_id in (self.faction_a, self.faction_b)

    def other(self, faction_id: str) -> str:
        return self.faction_b if self.faction_a == faction_id else self.faction_a


@dataclass
class FactionAction:
    faction_id: FactionId
    category: str
    type: str
    description: str
    probability: float
    cost: int
    effects: Tuple[FactionEffect, ...] = ()
    target_id: Optional[str] = None


@dataclass
class FactionRoster:
    ambitions: Dict[FactionId, FactionAmbition] = field(default_factory=dict)
    relationships: List[FactionRelationship] = field(default_factory=list)

    def ambition(self, faction_id: str) -> Optional[FactionAmbition]:
        return self.ambitions.get(faction_id)

    def relationship(self, faction_a: str, faction_b: str) -> Optional[FactionRelationship]:
        for rel in self.relationships:
            if rel.involves(faction_a) and rel.involves(faction_b) and faction_a != faction_b:
                return rel
        return None

    def relationships_of(self, faction_id: str) -> List[FactionRelationship]:
        return [rel for rel in self.relationships if rel.involves(faction_id)]
