from __future__ import annotations
import zlib
from typing import TYPE_CHECKING

from ..core.rng import FAITH, sub_stream

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import WorldState

FAITH_LEGITIMACY_LEVEL = 40
PIETY_LEVEL = 70
HERESY_LEVEL = 70
FESTIVAL_GOLD = 10


def region_salt(region_id: str) -> int:
    return zlib.crc32(region_id.encode("utf-8"))


def apply_faith_drift(world: WorldState, log: AuditLog):
    """
    Piety and heresy in controlled regions. The piety loss under weak faith
    legitimacy is drawn from a stream keyed by (seed, tick, region).
    """
    any_heresy = False

    for region in world.controlled_regions():
        if world.legitimacy.faith < FAITH_LEGITIMACY_LEVEL:
            rng = sub_stream(world.seed, FAITH, world.tick, region_salt(region.id))
            loss = rng.next_int(1, 3)
            region.shift_pressure("piety", -loss)
            region.shift_pressure("heresy", 1)
            log.add_entry(
                "faith.decline",
                world.tick,
                region_id=region.id,
                delta=-loss,
                reason=f"Faith wavers in {region.name}: piety -{loss}, heresy +1.",
            )

        if region.piety > PIETY_LEVEL:
            region.shift_pressure("unrest", -1)
            world.resources.add("gold", -FESTIVAL_GOLD)
            log.add_entry(
                "faith.festival",
                world.tick,
                region_id=region.id,
                delta=-FESTIVAL_GOLD,
                reason=f"Festivals in {region.name} calm the people and cost {FESTIVAL_GOLD} gold.",
            )

        if region.heresy > HERESY_LEVEL:
            any_heresy = True
            region.people.loyalty = max(0.1, region.people.loyalty - 0.05)

    world.set_trait("heresy_pressure", any_heresy)
    world.enforce_bounds()
