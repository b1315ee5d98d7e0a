from __future__ import annotations
import zlib
from typing import Optional, TYPE_CHECKING

from ..core.rng import FACTION_TURN, sub_stream
from .actions import apply_diplomatic_consequences, apply_faction_action
from .ai import candidate_actions, is_affordable, select_action

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import WorldState
    from .model import FactionActionTemplates, FactionRoster


def faction_salt(faction_id: str) -> int:
    return zlib.crc32(faction_id.encode("utf-8"))


def apply_faction_actions(
    world: WorldState,
    roster: Optional[FactionRoster],
    templates: Optional[FactionActionTemplates],
    log: AuditLog,
):
    """
    Runs one planning turn for every faction in the roster.

    Factions still cooling down only count down. The others plan, roll for an
    action, apply it when their power covers the cost, and start a new cooldown.
    Each faction draws from its own stream keyed by (seed, tick, faction id).
    """
    if roster is None or templates is None:
        log.add_entry("factions.step", world.tick, reason="No faction roster, faction turn skipped.")
        return

    for faction in world.factions:
        ambition = roster.ambition(faction.id)
        if ambition is None:
            continue
        if ambition.cooldown > 0:
            ambition.cooldown -= 1
            continue

        rng = sub_stream(world.seed, FACTION_TURN, world.tick, faction_salt(faction.id))
        candidates = candidate_actions(faction, ambition.profile, world, roster, templates, rng)
        action = select_action(candidates, rng)
        if action is None:
            log.add_entry("factions.idle", world.tick, faction_id=faction.id, reason="No viable faction action.")
            continue

        if is_affordable(action, faction):
            power_before = faction.power
            outcome = apply_faction_action(action, world, roster, rng)
            apply_diplomatic_consequences(action, roster)
            ambition.last_action = f"{action.category}:{action.type}"
            log.add_entry(
                "factions.action",
                world.tick,
                faction_id=faction.id,
                delta=faction.power - power_before,
                reason=f"{faction.name}: {outcome}",
                details={"category": action.category, "type": action.type, "target": action.target_id, "cost": action.cost},
            )
        else:
            log.add_entry(
                "factions.unaffordable",
                world.tick,
                faction_id=faction.id,
                reason=f"{faction.name} cannot afford: {action.description}",
                details={"cost": action.cost, "power": faction.power},
            )
        ambition.cooldown = 2 + rng.next_int(0, 2)
