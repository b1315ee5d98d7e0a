from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING

from .log import AuditLog
from ..drift.economy import apply_economic_drift
from ..drift.faith import apply_faith_drift
from ..drift.factions import apply_faction_drift
from ..drift.justice import apply_justice_drift
from ..drift.politics import apply_political_drift
from ..drift.regions import apply_regional_drift
from ..factions.integrate import apply_faction_actions
from ..rules.effects import apply_world_effect

if TYPE_CHECKING:
    from ..factions.model import FactionActionTemplates, FactionRoster
    from ..planning.actions import ActionProposal
    from ..world.model import WorldState


@dataclass
class TickReport:
    tick: int
    log: AuditLog


def apply_action(world: WorldState, action: ActionProposal, log: AuditLog):
    """
    Resolves one chosen action against the world: costs, rewards, typed
    effects on the home region, then the side effects implied by its tags.
    """
    for key, cost in action.costs.items():
        world.resources.add(key, -cost)
    for key, reward in action.rewards.items():
        world.resources.add(key, reward)

    home = world.home_region()
    applied = [e for e in action.effects if apply_world_effect(e, world, home)]

    if "people" in action.satisfies:
        world.people.loyalty += 10
        world.people.unrest = max(0, world.people.unrest - 5)

    if "army" in action.satisfies:
        world.forces.units += 20
        world.forces.morale += 5

    if "land" in action.satisfies:
        for region in world.regions:
            if not region.controlled:
                region.controlled = True
                world.release_region(region.id)
                log.add_entry("actions.annex", world.tick, region_id=region.id, reason=f"{region.name} annexed.")
                break

    if "charity" in action.id:
        world.add_trait("generous")

    if "conquest" in action.id:
        world.add_trait("conqueror")
        world.people.unrest += 10

    world.enforce_bounds()
    log.add_entry(
        "actions.resolved",
        world.tick,
        reason=f"Action '{action.label}' resolved.",
        details={"action_id": action.id, "costs": dict(action.costs), "rewards": dict(action.rewards), "effects": len(applied)},
    )


def step(
    world: WorldState,
    actions: Iterable[ActionProposal] = (),
    roster: Optional[FactionRoster] = None,
    templates: Optional[FactionActionTemplates] = None,
) -> TickReport:
    """
    Advances the world by one tick, in place. Callers that need the previous
    state take `world.snapshot()` first.
    """
    log = AuditLog()

    # --- Simulation Stages ---

    # 0. clock
    world.tick += 1

    # 1. actions
    resolved = 0
    for action in actions:
        apply_action(world, action, log)
        resolved += 1
    if not resolved:
        log.add_entry("actions", world.tick, reason="No player action this tick.")

    # 2. factions.step
    apply_faction_actions(world, roster, templates, log)

    # 3. economy
    apply_economic_drift(world, log)

    # 4. politics
    apply_political_drift(world, log)

    # 5. regions
    apply_regional_drift(world, log)

    # 6. justice
    apply_justice_drift(world, log)

    # 7. faith
    apply_faith_drift(world, log)

    # 8. factions.drift and diplomacy
    apply_faction_drift(world, roster, log)

    return TickReport(tick=world.tick, log=log)
