from __future__ import annotations
import math
from typing import Dict, List, TYPE_CHECKING

from ..core.ids import RegionId, FactionId
from ..core.rng import SequenceGenerator, get_seeded_rng
from ..ambition.model import DOMAINS
from ..world.model import (
    Faction, Forces, Legitimacy, People, Region, RegionPeople, Resources, WorldState,
)

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..core.content import NameTables

SPECIALIZED_REGION_CHANCE = 0.4
SPECIALIZED_FACTION_CHANCE = 0.6
BEST_MATCH_CHANCE = 0.7
WEIGHTED_DOMAIN_THRESHOLD = 0.15
TRAIT_THRESHOLD = 0.2
MAX_TRAITS = 4
PLAYER_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"

DOMAIN_TRAITS = {
    "power": ("ambitious", "commanding"),
    "wealth": ("shrewd", "prosperous"),
    "faith": ("devout", "blessed"),
    "virtue": ("just", "honorable"),
    "freedom": ("independent", "rebellious"),
    "creation": ("creative", "innovative"),
}


def _affinity(affinities: Dict[str, float], domain: str) -> float:
    # An affinity of exactly zero is read as the neutral midpoint.
    return affinities.get(domain) or 0.5


def _mid_band_affinities(rng: SequenceGenerator) -> Dict[str, float]:
    return {d: 0.3 + rng.next() * 0.4 for d in DOMAINS}


def domain_compatibility(a: Dict[str, float], b: Dict[str, float]) -> float:
    """Mean of 1 - |difference| across the six domains."""
    return sum(1.0 - abs(a.get(d, 0.0) - b.get(d, 0.0)) for d in DOMAINS) / len(DOMAINS)


def _weighted_domains(weights: Dict[str, float]) -> List[str]:
    return [d for d in DOMAINS if weights.get(d, 0.0) > WEIGHTED_DOMAIN_THRESHOLD]


def _generate_region(index: int, weights: Dict[str, float], rng: SequenceGenerator, names: NameTables) -> Region:
    specialized = rng.next() < SPECIALIZED_REGION_CHANCE

    if specialized and index > 0:
        weighted = _weighted_domains(weights)
        chosen = rng.choice(weighted) if weighted else rng.choice(DOMAINS)
        name = rng.choice(names.regions[chosen])
        affinities = {
            d: 0.7 + rng.next() * 0.3 if d == chosen else rng.next() * 0.2
            for d in DOMAINS
        }
    else:
        name = rng.choice(names.regions["neutral"])
        affinities = _mid_band_affinities(rng)

    power = _affinity(affinities, "power")
    virtue = _affinity(affinities, "virtue")
    faith = _affinity(affinities, "faith")
    freedom = _affinity(affinities, "freedom")
    security = min(100.0, 40 + power * 40 + rng.next() * 20) / 100.0
    lawfulness = min(100.0, 50 + virtue * 30 + power * 10 + rng.next() * 10)
    unrest = max(0.0, 30 - virtue * 20 + freedom * 15 + rng.next() * 20 - 10)
    piety = min(100.0, 40 + faith * 40 + rng.next() * 20)
    heresy = max(0.0, 25 - faith * 15 + freedom * 10 + rng.next() * 15 - 7)

    wealth = _affinity(affinities, "wealth")
    creation = _affinity(affinities, "creation")
    resources = {
        "gold": math.floor(rng.next_int(10, 50) * (1 + wealth * 0.5)),
        "grain": rng.next_int(20, 80),
        "iron": math.floor(rng.next_int(5, 30) * (1 + creation * 0.5)),
        "stone": math.floor(rng.next_int(5, 30) * (1 + creation * 0.5)),
        "wood": math.floor(rng.next_int(10, 40) * (1 + creation * 0.3)),
    }

    people = RegionPeople(
        population=rng.next_int(1000, 10000),
        loyalty=rng.next() * 0.8 + 0.2,
        unrest=rng.next() * 0.3,
        faith=rng.next() * 0.8 + 0.2,
    )

    return Region(
        id=RegionId(f"region_{index}"),
        name=name,
        controlled=index == 0,
        resources=resources,
        people=people,
        security=security,
        lawfulness=lawfulness,
        unrest=unrest,
        piety=piety,
        heresy=heresy,
        domain_affinities=affinities,
    )


def _generate_faction(index: int, weights: Dict[str, float], rng: SequenceGenerator, names: NameTables) -> Faction:
    weighted = _weighted_domains(weights)

    if weighted and rng.next() < SPECIALIZED_FACTION_CHANCE:
        chosen = rng.choice(weighted)
        name = rng.choice(names.factions[chosen])
        affinities = {
            d: 0.8 + rng.next() * 0.2 if d == chosen else 0.1 + rng.next() * 0.3
            for d in DOMAINS
        }
    else:
        name = rng.choice(names.factions["neutral"])
        affinities = _mid_band_affinities(rng)

    return Faction(
        id=FactionId(f"faction_{index}"),
        name=name,
        stance=rng.choice(("allied", "neutral", "hostile")),
        power=float(rng.next_int(20, 100)),
        regions=[],
        domain_affinities=affinities,
    )


def _assign_regions(regions: List[Region], factions: List[Faction], rng: SequenceGenerator):
    """Every region but the home region joins its most compatible faction, or a random one 30% of the time."""
    for region in regions[1:]:
        best = factions[0]
        best_compatibility = 0.0
        for faction in factions:
            compatibility = domain_compatibility(region.domain_affinities, faction.domain_affinities)
            if compatibility > best_compatibility:
                best_compatibility = compatibility
                best = faction
        chosen = best if rng.next() < BEST_MATCH_CHANCE else rng.choice(factions)
        chosen.regions.append(region.id)


def domain_traits(weights: Dict[str, float]) -> List[str]:
    traits: List[str] = []
    for domain in DOMAINS:
        if weights.get(domain, 0.0) > TRAIT_THRESHOLD:
            traits.extend(DOMAIN_TRAITS[domain])
    return traits[:MAX_TRAITS]


def _player_id(rng: SequenceGenerator) -> str:
    return "player_" + "".join(
        PLAYER_ID_ALPHABET[math.floor(rng.next() * len(PLAYER_ID_ALPHABET))] for _ in range(9)
    )


def generate_world(profile: AmbitionProfile, seed: int, names: NameTables) -> WorldState:
    """
    Builds the starting world for an ambition. Identical (profile, seed) pairs
    give identical worlds; every draw comes from the world stream in a fixed order.
    """
    rng = get_seeded_rng(seed)
    weights = dict(profile.domains)

    regions = [_generate_region(i, weights, rng, names) for i in range(rng.next_int(6, 10))]
    factions = [_generate_faction(i, weights, rng, names) for i in range(rng.next_int(4, 6))]
    _assign_regions(regions, factions, rng)

    wealth = weights.get("wealth", 0.0)
    creation = weights.get("creation", 0.0)
    power = weights.get("power", 0.0)
    virtue = weights.get("virtue", 0.0)
    faith = weights.get("faith", 0.0)

    resources = Resources(
        gold=math.floor(rng.next_int(80, 150) * (1 + wealth * 0.5)),
        grain=rng.next_int(100, 200),
        iron=math.floor(rng.next_int(20, 60) * (1 + creation * 0.3)),
        stone=math.floor(rng.next_int(20, 60) * (1 + creation * 0.3)),
        wood=math.floor(rng.next_int(40, 100) * (1 + creation * 0.3)),
    )
    forces = Forces(
        units=math.floor(rng.next_int(15, 35) * (1 + power * 0.4)),
        morale=min(100.0, rng.next_int(60, 85) + virtue * 15),
        supply=float(rng.next_int(60, 90)),
    )
    people = People(
        population=rng.next_int(800, 1200),
        loyalty=min(100.0, rng.next_int(50, 75) + virtue * 20),
        unrest=max(0.0, rng.next_int(15, 35) - virtue * 15),
        faith=min(100.0, rng.next_int(40, 70) + faith * 25),
    )
    legitimacy = Legitimacy(
        law=min(100.0, rng.next_int(40, 70) + virtue * 20 + power * 10),
        faith=min(100.0, rng.next_int(30, 60) + faith * 30),
        lineage=float(rng.next_int(20, 80)),
        might=min(100.0, rng.next_int(30, 60) + power * 25),
    )

    world = WorldState(
        seed=seed,
        tick=0,
        regions=regions,
        factions=factions,
        resources=resources,
        people=people,
        forces=forces,
        legitimacy=legitimacy,
        traits=domain_traits(weights),
        player_id=_player_id(rng),
    )
    world.enforce_bounds()
    return world
