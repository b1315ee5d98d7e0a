from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.ids import RegionId, FactionId
from ..ambition.model import DOMAINS

RESOURCE_KEYS = ("gold", "grain", "iron", "stone", "wood")
PRESSURE_KEYS = ("lawfulness", "unrest", "piety", "heresy")
LEGITIMACY_KEYS = ("law", "faith", "lineage", "might")
STANCES = ("allied", "neutral", "hostile", "war", "trade")

PRESSURE_MIDPOINT = 50.0


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


@dataclass
class Resources:
    gold: int = 0
    grain: int = 0
    iron: int = 0
    stone: int = 0
    wood: int = 0

    def get(self, key: str) -> int:
        return getattr(self, key) if key in RESOURCE_KEYS else 0

    def add(self, key: str, amount: int):
        """Adds (or removes, for negative amounts) stock, never dropping below zero."""
        if key not in RESOURCE_KEYS:
            return
        setattr(self, key, max(0, int(getattr(self, key) + amount)))

    def can_afford(self, costs: Dict[str, int]) -> bool:
        return all(self.get(k) >= v for k, v in costs.items() if v > 0)

    def shortfall(self, costs: Dict[str, int]) -> Dict[str, int]:
        return {k: v - self.get(k) for k, v in costs.items() if v > self.get(k)}

    def to_dict(self) -> Dict[str, int]:
        return {k: getattr(self, k) for k in RESOURCE_KEYS}


@dataclass
class People:
    population: int = 0
    loyalty: float = 50.0
    unrest: float = 0.0
    faith: float = 50.0


@dataclass
class Forces:
    units: int = 0
    morale: float = 50.0
    supply: float = 50.0


@dataclass
class Legitimacy:
    law: float = 0.0
    faith: float = 0.0
    lineage: float = 0.0
    might: float = 0.0

    def get(self, axis: str) -> float:
        return getattr(self, axis)

    def shift(self, axis: str, delta: float):
        setattr(self, axis, clamp(getattr(self, axis) + delta))


@dataclass
class RegionPeople:
    """Regional population figures. Loyalty, unrest and faith are fractions in [0, 1]."""
    population: int = 0
    loyalty: float = 0.5
    unrest: float = 0.0
    faith: float = 0.5


@dataclass
class Region:
    id: RegionId
    name: str
    controlled: bool = False
    resources: Dict[str, int] = field(default_factory=dict)
    people: RegionPeople = field(default_factory=RegionPeople)
    security: float = 0.5
    lawfulness: float = PRESSURE_MIDPOINT
    unrest: float = PRESSURE_MIDPOINT
    piety: float = PRESSURE_MIDPOINT
    heresy: float = PRESSURE_MIDPOINT
    domain_affinities: Dict[str, float] = field(default_factory=lambda: {d: 0.5 for d in DOMAINS})

    def pressure(self, key: str) -> float:
        return getattr(self, key)

    def shift_pressure(self, key: str, delta: float):
        setattr(self, key, clamp(getattr(self, key) + delta))


@dataclass
class Faction:
    id: FactionId
    name: str
    stance: str = "neutral"
    power: float = 50.0
    regions: List[RegionId] = field(default_factory=list)
    domain_affinities: Dict[str, float] = field(default_factory=lambda: {d: 0.5 for d in DOMAINS})


@dataclass
class WorldState:
    seed: int
    tick: int = 0
    regions: List[Region] = field(default_factory=list)
    factions: List[Faction] = field(default_factory=list)
    resources: Resources = field(default_factory=Resources)
    people: People = field(default_factory=People)
    forces: Forces = field(default_factory=Forces)
    legitimacy: Legitimacy = field(default_factory=Legitimacy)
    # Ordered so that iteration, serialization and diffing stay deterministic.
    traits: List[str] = field(default_factory=list)
    player_id: str = ""

    def snapshot(self) -> WorldState:
        """Independent copy used as `prev` before a tick mutates this world in place."""
        return copy.deepcopy(self)

    def region(self, region_id: str) -> Optional[Region]:
        for region in self.regions:
            if region.id == region_id:
                return region
        return None

    def faction(self, faction_id: str) -> Optional[Faction]:
        for faction in self.factions:
            if faction.id == faction_id:
                return faction
        return None

    def controlled_regions(self) -> List[Region]:
        return [r for r in self.regions if r.controlled]

    def home_region(self) -> Optional[Region]:
        controlled = self.controlled_regions()
        if controlled:
            return controlled[0]
        return self.regions[0] if self.regions else None

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits

    def add_trait(self, trait: str):
        if trait not in self.traits:
            self.traits.append(trait)

    def remove_trait(self, trait: str):
        if trait in self.traits:
            self.traits.remove(trait)

    def set_trait(self, trait: str, present: bool):
        if present:
            self.add_trait(trait)
        else:
            self.remove_trait(trait)

    def release_region(self, region_id: str):
        for faction in self.factions:
            if region_id in faction.regions:
                faction.regions.remove(region_id)

    def enforce_bounds(self):
        """Clamps every numeric field into its declared range."""
        for key in RESOURCE_KEYS:
            setattr(self.resources, key, max(0, int(getattr(self.resources, key))))

        self.people.population = max(0, int(self.people.population))
        self.people.loyalty = clamp(self.people.loyalty)
        self.people.unrest = clamp(self.people.unrest)
        self.people.faith = clamp(self.people.faith)

        self.forces.units = max(0, int(self.forces.units))
        self.forces.morale = clamp(self.forces.morale)
        self.forces.supply = clamp(self.forces.supply)

        for axis in LEGITIMACY_KEYS:
            setattr(self.legitimacy, axis, clamp(getattr(self.legitimacy, axis)))

        for region in self.regions:
            region.security = clamp(region.security, 0.0, 1.0)
            for key in PRESSURE_KEYS:
                setattr(region, key, clamp(getattr(region, key)))
            region.people.population = max(0, int(region.people.population))
            region.people.loyalty = clamp(region.people.loyalty, 0.0, 1.0)
            region.people.unrest = clamp(region.people.unrest, 0.0, 1.0)
            region.people.faith = clamp(region.people.faith, 0.0, 1.0)
            for key, value in region.resources.items():
                region.resources[key] = max(0, int(value))

        for faction in self.factions:
            faction.power = clamp(faction.power)
