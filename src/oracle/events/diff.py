from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, TYPE_CHECKING

from ..world.model import LEGITIMACY_KEYS, PRESSURE_KEYS, RESOURCE_KEYS

if TYPE_CHECKING:
    from ..world.model import WorldState

SIGNIFICANT_PRESSURE_CHANGE = 5


@dataclass
class RegionDelta:
    region_id: str
    pressures: Dict[str, float] = field(default_factory=dict)


@dataclass
class ControlChange:
    region_id: str
    controlled: bool


@dataclass
class StanceChange:
    faction_id: str
    before: str
    after: str


@dataclass
class WorldDiff:
    """What moved between two snapshots of the same world."""
    resources: Dict[str, int] = field(default_factory=dict)
    loyalty: float = 0.0
    unrest: float = 0.0
    legitimacy: Dict[str, float] = field(default_factory=dict)
    regions: List[RegionDelta] = field(default_factory=list)
    control: List[ControlChange] = field(default_factory=list)
    new_traits: List[str] = field(default_factory=list)
    stances: List[StanceChange] = field(default_factory=list)


def diff_worlds(prev: WorldState, next: WorldState) -> WorldDiff:
    """
    Compares two snapshots. Regions and factions are matched by id; a region
    is reported only when at least one pressure moved by 5 or more.
    """
    diff = WorldDiff(
        loyalty=next.people.loyalty - prev.people.loyalty,
        unrest=next.people.unrest - prev.people.unrest,
        legitimacy={axis: next.legitimacy.get(axis) - prev.legitimacy.get(axis) for axis in LEGITIMACY_KEYS},
        new_traits=[t for t in next.traits if t not in prev.traits],
    )

    for key in RESOURCE_KEYS:
        change = next.resources.get(key) - prev.resources.get(key)
        if change != 0:
            diff.resources[key] = change

    for region in next.regions:
        before = prev.region(region.id)
        if before is None:
            continue
        if before.controlled != region.controlled:
            diff.control.append(ControlChange(region_id=region.id, controlled=region.controlled))
        pressures = {key: region.pressure(key) - before.pressure(key) for key in PRESSURE_KEYS}
        if any(abs(v) >= SIGNIFICANT_PRESSURE_CHANGE for v in pressures.values()):
            diff.regions.append(RegionDelta(region_id=region.id, pressures=pressures))

    for faction in next.factions:
        before = prev.faction(faction.id)
        if before is not None and before.stance != faction.stance:
            diff.stances.append(StanceChange(faction_id=faction.id, before=before.stance, after=faction.stance))

    return diff
