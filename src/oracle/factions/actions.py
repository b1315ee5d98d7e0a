from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.rng import SequenceGenerator
    from ..world.model import WorldState
    from .model import FactionAction, FactionEffect, FactionRoster


def _clamp_power(value: float) -> float:
    return max(0.0, min(100.0, value))


def _change_power(effect: FactionEffect, action: FactionAction, world: WorldState) -> str:
    target_id = action.faction_id if effect.target == "self" else effect.target
    faction = world.faction(target_id)
    if faction is None:
        return ""
    faction.power = _clamp_power(faction.power + effect.value)
    return f" (Power {effect.value:+g})"


def _change_relationship(effect: FactionEffect, action: FactionAction, roster: FactionRoster) -> str:
    relationship = roster.relationship(action.faction_id, effect.target)
    if relationship is None:
        return ""
    relationship.strength = max(0.0, min(1.0, relationship.strength + effect.value))
    if relationship.strength > 0.8 and relationship.stance == "neutral":
        relationship.stance = "allied"
    elif relationship.strength < 0.2 and relationship.stance == "neutral":
        relationship.stance = "hostile"
    relationship.history.append(action.description)
    return f" (Relations {effect.value * 100:+.0f}%)"


def _change_resources(effect: FactionEffect, action: FactionAction, world: WorldState) -> str:
    faction = world.faction(action.faction_id)
    if faction is None:
        return ""
    faction.power = _clamp_power(faction.power + effect.value * 0.1)
    return f" (Resources {effect.value:+g})"


def _contest_region(effect: FactionEffect, action: FactionAction, world: WorldState, rng: SequenceGenerator) -> str:
    region = world.region(effect.target)
    faction = world.faction(action.faction_id)
    if region is None or faction is None or region.controlled or region.id in faction.regions:
        return ""
    if rng.next() < effect.value:
        world.release_region(region.id)
        faction.regions.append(region.id)
        return f" (Gained control of {region.name})"
    return " (Failed to gain control)"


def _strengthen_faction(effect: FactionEffect, action: FactionAction, world: WorldState) -> str:
    faction = world.faction(action.faction_id)
    if faction is None:
        return ""
    faction.power = _clamp_power(faction.power + effect.value * 20)
    return " (Faction strength improved)"


def apply_faction_action(
    action: FactionAction,
    world: WorldState,
    roster: FactionRoster,
    rng: SequenceGenerator,
) -> str:
    """Applies every effect of a faction action in order. Returns a one-line outcome."""
    outcome = action.description
    for effect in action.effects:
        if effect.type == "power_change":
            outcome += _change_power(effect, action, world)
        elif effect.type == "relationship_change":
            outcome += _change_relationship(effect, action, roster)
        elif effect.type == "resource_change":
            outcome += _change_resources(effect, action, world)
        elif effect.type == "region_control":
            outcome += _contest_region(effect, action, world, rng)
        elif effect.type == "faction_modifier":
            outcome += _strengthen_faction(effect, action, world)
    return outcome


def apply_diplomatic_consequences(action: FactionAction, roster: FactionRoster):
    """Raids sour the targeted relationship, trade and diplomacy warm it."""
    if not action.target_id:
        return
    relationship = roster.relationship(action.faction_id, action.target_id)
    if relationship is None:
        return

    if action.type == "raid":
        relationship.strength = max(0.0, relationship.strength - 0.2)
        if relationship.strength < 0.3:
            relationship.stance = "hostile"
    elif action.type == "trade":
        relationship.strength = min(1.0, relationship.strength + 0.1)
        relationship.stance = "allied" if relationship.strength > 0.7 else "trade"
    elif action.type == "diplomatic":
        relationship.strength = min(1.0, relationship.strength + 0.15)
        if relationship.strength > 0.8:
            relationship.stance = "allied"
