from __future__ import annotations
from dataclasses import replace
from typing import List, TYPE_CHECKING

from ..ambition.interpret import interpret
from ..ambition.model import DOMAINS, MODIFIERS, normalize_domains
from ..core.rng import FACTION_AMBITIONS, FACTION_RELATIONS, SequenceGenerator, sub_stream
from ..generation.world_gen import domain_compatibility
from .model import FactionAmbition, FactionRelationship, FactionRoster

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..core.content import Lexicon
    from ..world.model import Faction, WorldState
    from .model import Archetype, FactionActionTemplates

PROFILE_JITTER = 0.1
GOAL_THRESHOLD = 0.3
MAX_FACTION_GOALS = 2

DOMAIN_GOALS = (
    ("power", "expand_territory"),
    ("wealth", "increase_wealth"),
    ("faith", "spread_faith"),
    ("virtue", "maintain_order"),
    ("freedom", "resist_oppression"),
    ("creation", "build_infrastructure"),
)


def choose_archetype(faction: Faction, templates: FactionActionTemplates, rng: SequenceGenerator) -> str:
    affinities = faction.domain_affinities
    if affinities.get("power", 0.0) > 0.6:
        return "kingdoms"
    if affinities.get("faith", 0.0) > 0.6:
        return "clergy"
    if affinities.get("wealth", 0.0) > 0.6:
        return "merchants"
    if affinities.get("freedom", 0.0) > 0.6:
        return "rebels"
    if affinities.get("creation", 0.0) > 0.6:
        return "scholars"
    if affinities.get("power", 0.0) > 0.4 and affinities.get("virtue", 0.0) > 0.3:
        return "military"
    return rng.choice(list(templates.archetypes.keys()))


def faction_profile(archetype: Archetype, lexicon: Lexicon, rng: SequenceGenerator) -> AmbitionProfile:
    """Reads one of the archetype's ambition texts, then pins the domains to the archetype with a little jitter."""
    profile = interpret(rng.choice(archetype.ambition_templates), lexicon)
    domains = normalize_domains({
        d: archetype.domains.get(d, 0.0) + (rng.next() - 0.5) * PROFILE_JITTER
        for d in DOMAINS
    })
    modifiers = dict(profile.modifiers)
    for name, value in archetype.modifiers.items():
        if name in MODIFIERS:
            modifiers[name] = value
    return replace(profile, domains=domains, modifiers=modifiers, archetype=f"{archetype.id}_faction")


def faction_goals(profile: AmbitionProfile, faction: Faction) -> List[str]:
    goals = []
    for domain, goal in DOMAIN_GOALS:
        if profile.weight(domain) <= GOAL_THRESHOLD:
            continue
        if goal == "expand_territory" and len(faction.regions) >= 3:
            continue
        if goal == "increase_wealth" and faction.power >= 80:
            continue
        goals.append(goal)
    return goals[:MAX_FACTION_GOALS]


def initial_stance(compatibility: float, rng: SequenceGenerator) -> str:
    roll = rng.next()
    if compatibility > 0.7:
        return "allied" if roll < 0.6 else "trade" if roll < 0.9 else "neutral"
    if compatibility > 0.4:
        return "trade" if roll < 0.3 else "neutral" if roll < 0.8 else "hostile"
    return "neutral" if roll < 0.1 else "hostile" if roll < 0.7 else "war"


def build_relationships(world: WorldState, rng: SequenceGenerator) -> List[FactionRelationship]:
    relationships = []
    for i, faction_a in enumerate(world.factions):
        for faction_b in world.factions[i + 1:]:
            compatibility = domain_compatibility(faction_a.domain_affinities, faction_b.domain_affinities)
            stance = initial_stance(compatibility, rng)
            relationships.append(FactionRelationship(
                faction_a=faction_a.id,
                faction_b=faction_b.id,
                stance=stance,
                strength=0.3 + rng.next() * 0.4,
                history=[f"Initial {stance} relationship established"],
            ))
    return relationships


def build_roster(world: WorldState, templates: FactionActionTemplates, lexicon: Lexicon) -> FactionRoster:
    """Gives every faction an archetype, an ambition and goals, and seeds the pairwise relationships."""
    rng = sub_stream(world.seed, FACTION_AMBITIONS)
    roster = FactionRoster()
    for faction in world.factions:
        archetype_id = choose_archetype(faction, templates, rng)
        profile = faction_profile(templates.archetype(archetype_id), lexicon, rng)
        roster.ambitions[faction.id] = FactionAmbition(
            faction_id=faction.id,
            profile=profile,
            archetype=archetype_id,
            goals=faction_goals(profile, faction),
        )
    roster.relationships = build_relationships(world, sub_stream(world.seed, FACTION_RELATIONS))
    return roster
