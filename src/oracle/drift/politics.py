from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import WorldState

LOYALTY_DECAY = 2
LOYALTY_FLOOR = 10
UNREST_LOYALTY_LEVEL = 40
UNREST_GRAIN_LEVEL = 20
MORALE_FLOOR = 10
SUPPLY_LOW_LEVEL = 50
SUPPLY_REGEN = 10


def apply_political_drift(world: WorldState, log: AuditLog):
    """Loyalty fades without attention, unrest follows loyalty and food, the army lives on supply."""
    people = world.people
    forces = world.forces
    loyalty_before = people.loyalty
    unrest_before = people.unrest

    people.loyalty = max(LOYALTY_FLOOR, people.loyalty - LOYALTY_DECAY)

    if people.loyalty < UNREST_LOYALTY_LEVEL or world.resources.grain < UNREST_GRAIN_LEVEL:
        people.unrest += 5
    else:
        people.unrest = max(0, people.unrest - 2)

    if forces.supply < SUPPLY_LOW_LEVEL:
        forces.morale = max(MORALE_FLOOR, forces.morale - 5)
    forces.supply += SUPPLY_REGEN

    world.enforce_bounds()
    log.add_entry(
        "politics.drift",
        world.tick,
        delta=people.unrest - unrest_before,
        reason=f"Loyalty {loyalty_before:.0f} -> {people.loyalty:.0f}, unrest {unrest_before:.0f} -> {people.unrest:.0f}.",
        details={"loyalty": people.loyalty, "unrest": people.unrest, "morale": forces.morale, "supply": forces.supply},
    )
