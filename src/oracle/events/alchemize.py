"""
Turns the difference between two world snapshots into narrative event cards.

Each rule below looks at one kind of change and may contribute a card; the
cards are then ranked by magnitude and the strongest few are kept.
"""
from __future__ import annotations
import logging
import zlib
from typing import List, Optional, TYPE_CHECKING

from ..core.rng import OMENS, sub_stream
from .diff import diff_worlds
from .model import EventCard, EventChoice

if TYPE_CHECKING:
    from ..world.model import Region, WorldState
    from .diff import WorldDiff
    from .registry import EventRegistry

logger = logging.getLogger(__name__)

MAX_CARDS = 3

GRAIN_SHORTAGE_DROP = -20
WEALTH_GAIN = 100
UNREST_RISE = 20
LOYALTY_RISE = 15
LEGITIMACY_SHIFT = 5

CRISIS_MAGNITUDE = 20
TERRITORY_MAGNITUDE = 25
FACTION_MAGNITUDE = 15
OMEN_MAGNITUDE = 5

OMEN_BASE_CHANCE = 0.02
OMEN_PIETY_BONUS = 0.02
OMEN_DOUBT_BONUS = 0.03


def _format_delta(value: float) -> str:
    return f"{round(abs(value), 1):g}"


class CardBuilder:
    """Renders registry templates into cards for one tick."""

    def __init__(self, registry: EventRegistry, world: WorldState):
        self.registry = registry
        self.world = world

    def build(
        self,
        template_id: str,
        magnitude: float,
        card_id: Optional[str] = None,
        region: Optional[Region] = None,
        faction_id: Optional[str] = None,
        axis: str = "",
        delta: float = 0.0,
    ) -> Optional[EventCard]:
        if not self.registry.has(template_id):
            logger.warning("No event template for '%s', card skipped.", template_id)
            return None
        template = self.registry.get(template_id)
        faction = self.world.faction(faction_id) if faction_id else None
        text = template.text.format(
            region=region.name if region else "your lands",
            faction=faction.name if faction else "a rival faction",
            axis=axis,
            delta=_format_delta(delta),
        )
        choices = tuple(
            EventChoice(id=c.id, label=c.label, costs=dict(c.costs), effects=c.effects, risk_tags=c.risk_tags)
            for c in template.choices
        )
        return EventCard(
            id=card_id or f"{template_id}_{self.world.tick}",
            type=template_id,
            tick=self.world.tick,
            text=text,
            magnitude=float(magnitude),
            choices=choices,
            region_id=region.id if region else None,
            faction_id=faction_id,
        )


def resource_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    grain = diff.resources.get("grain", 0)
    if grain < GRAIN_SHORTAGE_DROP:
        found.append(cards.build("grain_shortage", abs(grain), delta=grain))
    gold = diff.resources.get("gold", 0)
    if gold > WEALTH_GAIN:
        found.append(cards.build("wealth_discovered", gold, delta=gold))
    return found


def political_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    if diff.unrest > UNREST_RISE:
        found.append(cards.build("unrest_rising", diff.unrest, delta=diff.unrest))
    if diff.loyalty > LOYALTY_RISE:
        found.append(cards.build("loyalty_surge", diff.loyalty, delta=diff.loyalty))
    return found


def legitimacy_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    """One card for the axis that moved most, if it moved at least 5 points."""
    shifts = [(axis, change) for axis, change in diff.legitimacy.items() if abs(change) >= LEGITIMACY_SHIFT]
    if not shifts:
        return []
    axis, change = max(shifts, key=lambda item: abs(item[1]))
    if change > 0:
        return [cards.build(f"{axis}_legitimacy_boost", abs(change), axis=axis, delta=change)]
    return [cards.build("legitimacy_decline", abs(change), axis=axis, delta=change)]


def _regional(cards: CardBuilder, template_id: str, region: Region, change: float) -> Optional[EventCard]:
    return cards.build(
        template_id,
        abs(change),
        card_id=f"{template_id}_{cards.world.tick}_{region.id}",
        region=region,
        delta=change,
    )


def justice_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    for delta in diff.regions:
        region = cards.world.region(delta.region_id)
        if region is None or not region.controlled:
            continue
        lawfulness = delta.pressures.get("lawfulness", 0.0)
        unrest = delta.pressures.get("unrest", 0.0)
        if lawfulness >= 10:
            found.append(_regional(cards, "lawfulness_improved", region, lawfulness))
        elif lawfulness <= -10:
            found.append(_regional(cards, "lawfulness_declined", region, lawfulness))
        if unrest <= -8:
            found.append(_regional(cards, "unrest_calmed", region, unrest))

    if "high_crime" in diff.new_traits:
        lawless = next((r for r in cards.world.controlled_regions() if r.lawfulness < 30), None)
        if lawless is not None:
            found.append(cards.build("crime_crisis", CRISIS_MAGNITUDE, region=lawless))
    return found


def faith_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    for delta in diff.regions:
        region = cards.world.region(delta.region_id)
        if region is None or not region.controlled:
            continue
        piety = delta.pressures.get("piety", 0.0)
        heresy = delta.pressures.get("heresy", 0.0)
        if piety >= 10:
            found.append(_regional(cards, "piety_surge", region, piety))
        elif piety <= -10:
            found.append(_regional(cards, "piety_decline", region, piety))
        if heresy >= 8:
            found.append(_regional(cards, "heresy_rise", region, heresy))

    if "heresy_pressure" in diff.new_traits:
        heretical = next((r for r in cards.world.controlled_regions() if r.heresy > 70), None)
        if heretical is not None:
            found.append(cards.build("heresy_crisis", CRISIS_MAGNITUDE, region=heretical))
    return found


def omen_chance(region: Region, world: WorldState) -> float:
    chance = OMEN_BASE_CHANCE
    if region.piety > 70:
        chance += OMEN_PIETY_BONUS
    if world.legitimacy.faith < 40:
        chance += OMEN_DOUBT_BONUS
    return chance


def omen_roll(world: WorldState, region: Region) -> float:
    """Deterministic per (seed, tick, region)."""
    salt = zlib.crc32(region.id.encode("utf-8"))
    return sub_stream(world.seed, OMENS, world.tick, salt).next()


def omen_cards(cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    world = cards.world
    for region in world.controlled_regions():
        chance = omen_chance(region, world)
        roll = omen_roll(world, region)
        if roll >= chance:
            continue
        if roll < chance * 0.4:
            omen = "good_sign"
        elif roll < chance * 0.8:
            omen = "dire_sign"
        else:
            omen = "false_prophet"
        found.append(cards.build(
            omen,
            OMEN_MAGNITUDE,
            card_id=f"{omen}_{world.tick}_{region.id}",
            region=region,
        ))
    return found


def territory_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    found = []
    gained = [c for c in diff.control if c.controlled]
    lost = [c for c in diff.control if not c.controlled]
    if gained:
        found.append(cards.build("territory_acquired", TERRITORY_MAGNITUDE, region=cards.world.region(gained[0].region_id)))
    if lost:
        found.append(cards.build("territory_lost", TERRITORY_MAGNITUDE, region=cards.world.region(lost[0].region_id)))
    return found


def faction_cards(diff: WorldDiff, cards: CardBuilder) -> List[Optional[EventCard]]:
    """At most one faction card per tick, for the first stance that turned hostile or allied."""
    for change in diff.stances:
        if change.after == "hostile":
            return [cards.build("faction_hostile", FACTION_MAGNITUDE, faction_id=change.faction_id)]
        if change.after == "allied":
            return [cards.build("faction_allied", FACTION_MAGNITUDE, faction_id=change.faction_id)]
    return []


def alchemize(prev: WorldState, next: WorldState, registry: EventRegistry, limit: int = MAX_CARDS) -> List[EventCard]:
    """
    Produces at most `limit` event cards describing how `prev` became `next`,
    strongest first. Ties keep the order in which the rules ran.
    """
    diff = diff_worlds(prev, next)
    cards = CardBuilder(registry, next)

    candidates: List[Optional[EventCard]] = []
    candidates.extend(resource_cards(diff, cards))
    candidates.extend(political_cards(diff, cards))
    candidates.extend(legitimacy_cards(diff, cards))
    candidates.extend(justice_cards(diff, cards))
    candidates.extend(faith_cards(diff, cards))
    candidates.extend(omen_cards(cards))
    candidates.extend(territory_cards(diff, cards))
    candidates.extend(faction_cards(diff, cards))

    built = [c for c in candidates if c is not None]
    ranked = sorted(built, key=lambda c: c.magnitude, reverse=True)
    logger.debug("Tick %d produced %d candidate cards", next.tick, len(built))
    return ranked[:limit]
