from __future__ import annotations
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import WorldState

LAW_LEGITIMACY_LEVEL = 40
LAWFULNESS_DECAY = 2
CRIME_LEVEL = 30
BUREAUCRACY_LEVEL = 70


def apply_justice_drift(world: WorldState, log: AuditLog):
    """
    Lawfulness in controlled regions. Weak legal legitimacy erodes it; lawless
    regions breed crime, over-policed ones cost gold in administration.
    `high_crime` and `high_bureaucracy` hold while any controlled region
    qualifies.
    """
    any_crime = False
    any_bureaucracy = False

    for region in world.controlled_regions():
        if world.legitimacy.law < LAW_LEGITIMACY_LEVEL:
            region.shift_pressure("lawfulness", -LAWFULNESS_DECAY)

        if region.lawfulness < CRIME_LEVEL:
            any_crime = True
            region.security = max(0.1, region.security - 0.05)
            region.people.loyalty = max(0.1, region.people.loyalty - 0.03)
            log.add_entry(
                "justice.crime",
                world.tick,
                region_id=region.id,
                reason=f"Crime spreads through {region.name} (lawfulness {region.lawfulness:.0f}).",
            )

        if region.lawfulness > BUREAUCRACY_LEVEL:
            any_bureaucracy = True
            cost = math.floor((region.lawfulness - BUREAUCRACY_LEVEL) * 0.5)
            world.resources.add("gold", -cost)
            log.add_entry(
                "justice.bureaucracy",
                world.tick,
                region_id=region.id,
                delta=-cost,
                reason=f"Administering {region.name} cost {cost} gold.",
                details={"cost": cost},
            )

    world.set_trait("high_crime", any_crime)
    world.set_trait("high_bureaucracy", any_bureaucracy)
    world.enforce_bounds()
