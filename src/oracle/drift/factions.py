from __future__ import annotations
import itertools
from typing import Optional, TYPE_CHECKING

import numpy as np

from ..core.rng import DIPLOMACY, sub_stream

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..factions.model import FactionRoster
    from ..world.model import WorldState

DOMINANT_SHARE = 0.4
WEAK_SHARE = 0.2
RIVAL_RATIO = 0.6
REPROACH_CHANCE = 0.1


def power_shares(world: WorldState) -> np.ndarray:
    """Each faction's fraction of the total faction power, in world order."""
    powers = np.array([f.power for f in world.factions], dtype=float)
    total = powers.sum()
    if total <= 0:
        return np.zeros_like(powers)
    return powers / total


def drift_power_and_stance(world: WorldState, log: AuditLog):
    rng = sub_stream(world.seed, DIPLOMACY, world.tick)
    for faction in world.factions:
        if faction.regions:
            faction.power = min(100.0, faction.power + len(faction.regions))
        else:
            faction.power = max(1.0, faction.power - 5)

        if world.has_trait("conqueror") and faction.stance == "neutral":
            faction.stance = "hostile"
            log.add_entry("factions.stance", world.tick, faction_id=faction.id, reason=f"{faction.name} fears a conqueror and turns hostile.")

        if world.has_trait("generous") and faction.stance == "hostile":
            if rng.next() < REPROACH_CHANCE:
                faction.stance = "neutral"
                log.add_entry("factions.stance", world.tick, faction_id=faction.id, reason=f"{faction.name} is swayed by generosity.")


def balance_of_power(world: WorldState, roster: FactionRoster, log: AuditLog):
    """
    A faction holding more than 40% of all power alienates factions below 60%
    of its strength. While any such faction exists, neutral pairs of weak
    factions (under 20%) drift toward alliance.
    """
    shares = power_shares(world)
    dominant = [f for f, share in zip(world.factions, shares) if share > DOMINANT_SHARE]

    for faction in dominant:
        for relationship in roster.relationships_of(faction.id):
            other = world.faction(relationship.other(faction.id))
            if other is None or other.power >= faction.power * RIVAL_RATIO:
                continue
            relationship.strength = max(0.0, relationship.strength - 0.1)
            if relationship.stance == "neutral":
                relationship.stance = "hostile"
                log.add_entry(
                    "diplomacy.rivalry",
                    world.tick,
                    faction_id=faction.id,
                    reason=f"{other.name} turns hostile toward the dominant {faction.name}.",
                )

    if not dominant:
        return

    weaker = [f for f, share in zip(world.factions, shares) if share < WEAK_SHARE]
    for a, b in itertools.combinations(weaker, 2):
        relationship = roster.relationship(a.id, b.id)
        if relationship is None or relationship.stance != "neutral":
            continue
        relationship.strength = min(1.0, relationship.strength + 0.1)
        if relationship.strength > 0.6:
            relationship.stance = "allied"
            log.add_entry(
                "diplomacy.coalition",
                world.tick,
                faction_id=a.id,
                reason=f"{a.name} and {b.name} ally against the dominant power.",
            )


def apply_faction_drift(world: WorldState, roster: Optional[FactionRoster], log: AuditLog):
    drift_power_and_stance(world, log)
    if roster is not None and world.factions:
        balance_of_power(world, roster, log)
    world.enforce_bounds()
