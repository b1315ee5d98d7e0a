from __future__ import annotations
from typing import TYPE_CHECKING

from ..world.model import PRESSURE_KEYS, PRESSURE_MIDPOINT

if TYPE_CHECKING:
    from ..core.log import AuditLog
    from ..world.model import Region, WorldState

SECURITY_FLOOR = 0.1
REGION_LOYALTY_FLOOR = 0.1
PRESSURE_DRIFT_RATE = 1.0


def drift_toward_midpoint(region: Region, key: str, rate: float = PRESSURE_DRIFT_RATE):
    """Moves a pressure metric `rate` points toward the midpoint without overshooting it."""
    current = region.pressure(key)
    if current < PRESSURE_MIDPOINT:
        setattr(region, key, min(PRESSURE_MIDPOINT, current + rate))
    elif current > PRESSURE_MIDPOINT:
        setattr(region, key, max(PRESSURE_MIDPOINT, current - rate))


def apply_regional_drift(world: WorldState, log: AuditLog):
    for region in world.regions:
        security_before = region.security
        if region.controlled:
            region.security += 0.02
        else:
            region.security = max(SECURITY_FLOOR, region.security - 0.01)

        if world.people.unrest > 50:
            region.people.loyalty = max(REGION_LOYALTY_FLOOR, region.people.loyalty - 0.03)
        if region.people.loyalty < 0.3:
            region.people.unrest += 0.05

        for key in PRESSURE_KEYS:
            drift_toward_midpoint(region, key)

        if region.security != security_before:
            log.add_entry(
                "regions.security",
                world.tick,
                region_id=region.id,
                delta=region.security - security_before,
                reason=f"Security in {region.name} drifted to {region.security:.2f}.",
            )
    world.enforce_bounds()
