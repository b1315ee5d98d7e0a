from __future__ import annotations
import math
from typing import Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import WorldState

# Share of a controlled region's stock that flows into the treasury each tick.
PRODUCTION_RATES: Dict[str, float] = {
    "grain": 0.1,
    "gold": 0.05,
    "iron": 0.05,
    "wood": 0.1,
    "stone": 0.05,
}

IRON_SCARCITY_LEVEL = 20
GRAIN_SHORTAGE_LEVEL = 30
GRAIN_SHORTAGE_UNREST = 10
WINTER_GRAIN_LOSS = 10


def produce(world: WorldState) -> Dict[str, int]:
    produced: Dict[str, int] = {}
    for region in world.controlled_regions():
        for key, rate in PRODUCTION_RATES.items():
            amount = math.floor(region.resources.get(key, 0) * rate)
            if amount > 0:
                world.resources.add(key, amount)
                produced[key] = produced.get(key, 0) + amount
    return produced


def pay_upkeep(world: WorldState) -> Dict[str, int]:
    """Feeds the population and pays the troops. Stock never drops below zero."""
    grain_due = world.people.population // 100
    gold_due = math.floor(world.forces.units * 0.5)
    paid = {
        "grain": min(grain_due, world.resources.grain),
        "gold": min(gold_due, world.resources.gold),
    }
    world.resources.add("grain", -grain_due)
    world.resources.add("gold", -gold_due)
    return paid


def is_winter(tick: int) -> bool:
    return tick % 4 == 3


def update_scarcity(world: WorldState):
    world.set_trait("iron_scarcity", world.resources.iron < IRON_SCARCITY_LEVEL)

    shortage = world.resources.grain < GRAIN_SHORTAGE_LEVEL
    world.set_trait("grain_shortage", shortage)
    if shortage:
        world.people.unrest += GRAIN_SHORTAGE_UNREST

    winter = is_winter(world.tick)
    world.set_trait("winter", winter)
    if winter:
        world.resources.add("grain", -WINTER_GRAIN_LOSS)


def apply_economic_drift(world: WorldState, log: AuditLog):
    produced = produce(world)
    if produced:
        log.add_entry(
            "economy.production.output",
            world.tick,
            reason=f"Controlled regions produced {', '.join(f'{v} {k}' for k, v in produced.items())}.",
            details={"changes": produced},
        )
    else:
        log.add_entry("economy.production", world.tick, reason="No controlled region produced anything.")

    paid = pay_upkeep(world)
    log.add_entry(
        "economy.upkeep",
        world.tick,
        reason=f"Upkeep paid: {paid['grain']} grain, {paid['gold']} gold.",
        details={"paid": paid},
    )

    traits_before = set(world.traits)
    update_scarcity(world)
    world.enforce_bounds()
    for trait in ("iron_scarcity", "grain_shortage", "winter"):
        if world.has_trait(trait) and trait not in traits_before:
            log.add_entry("economy.scarcity", world.tick, reason=f"Trait gained: {trait}.", details={"trait": trait})
