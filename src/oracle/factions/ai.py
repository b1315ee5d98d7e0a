from __future__ import annotations
from typing import Dict, List, Optional, TYPE_CHECKING

from .model import FACTION_CATEGORIES, FactionAction, FactionEffect

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..core.rng import SequenceGenerator
    from ..world.model import Faction, WorldState
    from .model import FactionActionTemplate, FactionActionTemplates, FactionRoster

PRIORITY_THRESHOLD = 0.2
UNTARGETED_CATEGORIES = ("internal", "religious")


def category_priorities(profile: AmbitionProfile) -> Dict[str, float]:
    w = profile.weight
    return {
        "expand": w("power") * 0.8 + w("virtue") * 0.2,
        "trade": w("wealth") * 0.7 + w("creation") * 0.3,
        "diplomatic": w("virtue") * 0.5 + w("wealth") * 0.3 + w("faith") * 0.2,
        "military": w("power") * 0.6 + (1 - profile.modifier("peaceful")) * 0.4,
        "internal": w("creation") * 0.4 + w("virtue") * 0.4 + w("faith") * 0.2,
        "religious": w("faith") * 0.8 + w("virtue") * 0.2,
    }


def valid_targets(category: str, faction: Faction, world: WorldState, roster: FactionRoster) -> List[str]:
    if category == "expand":
        return [r.id for r in world.regions if not r.controlled and r.id not in faction.regions]
    if category in ("trade", "diplomatic"):
        return [f.id for f in world.factions if f.id != faction.id]
    if category == "military":
        hostile = [
            rel.other(faction.id) for rel in roster.relationships_of(faction.id)
            if rel.stance in ("hostile", "war")
        ]
        return hostile or [f.id for f in world.factions if f.id != faction.id]
    return []


def _instantiate(
    template: FactionActionTemplate,
    faction: Faction,
    target: Optional[str],
    priority: float,
    rng: SequenceGenerator,
) -> FactionAction:
    description = template.description.replace("{target}", target) if target else template.description
    effects = tuple(
        FactionEffect(type=e.type, target=target or "", value=e.value) if e.target == "{target}" else e
        for e in template.effects
    )
    return FactionAction(
        faction_id=faction.id,
        category=template.category,
        type=template.type,
        description=description,
        probability=priority * (0.6 + rng.next() * 0.4),
        cost=template.base_cost,
        effects=effects,
        target_id=target,
    )


def candidate_actions(
    faction: Faction,
    profile: AmbitionProfile,
    world: WorldState,
    roster: FactionRoster,
    templates: FactionActionTemplates,
    rng: SequenceGenerator,
) -> List[FactionAction]:
    """One candidate per category the faction cares about enough, each with a target when the category needs one."""
    priorities = category_priorities(profile)
    candidates = []
    for category in FACTION_CATEGORIES:
        priority = priorities[category]
        options = templates.for_category(category)
        if priority <= PRIORITY_THRESHOLD or not options:
            continue
        template = rng.choice(options)
        if category in UNTARGETED_CATEGORIES:
            candidates.append(_instantiate(template, faction, None, priority, rng))
            continue
        targets = valid_targets(category, faction, world, roster)
        if targets:
            candidates.append(_instantiate(template, faction, rng.choice(targets), priority, rng))
    return candidates


def select_action(candidates: List[FactionAction], rng: SequenceGenerator) -> Optional[FactionAction]:
    """Probability-weighted roll over the candidates."""
    total = sum(c.probability for c in candidates)
    if total <= 0:
        return None
    roll = rng.next() * total
    cumulative = 0.0
    for candidate in candidates:
        cumulative += candidate.probability
        if roll < cumulative:
            return candidate
    return candidates[-1]


def is_affordable(action: FactionAction, faction: Faction) -> bool:
    return action.cost <= faction.power * 2
