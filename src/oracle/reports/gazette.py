from typing import List

from ..ambition.model import AmbitionProfile, summarize_ambition
from ..ambition.mutation import DreamEvent
from ..core.log import AuditLog
from ..events.model import EventCard
from ..goals.model import RequirementGraph
from ..planning.actions import ActionProposal
from ..world.model import LEGITIMACY_KEYS, RESOURCE_KEYS, WorldState


def generate_gazette(log: AuditLog, tick: int) -> str:
    """
    Generates a concise gazette report from an AuditLog.
    """
    lines = [f"== Tick {tick} Report =="]
    for entry in log.entries:
        reason = entry.reason or ""
        if reason:
            lines.append(f"[{entry.type}] {reason}")
        else:
            lines.append(f"[{entry.type}]")
    return "\n".join(lines) + "\n"


def render_world(world: WorldState) -> str:
    """
    Summarizes the realm: treasury, people, forces, legitimacy, then one line
    per region and per faction.
    """
    report = f"--- {world.player_id or 'The Realm'} (tick {world.tick}, seed {world.seed}) ---\n"
    report += "Resources: " + ", ".join(f"{k} {world.resources.get(k)}" for k in RESOURCE_KEYS) + "\n"
    report += (
        f"People: population {world.people.population}, loyalty {world.people.loyalty:.0f}, "
        f"unrest {world.people.unrest:.0f}, faith {world.people.faith:.0f}\n"
    )
    report += (
        f"Forces: {world.forces.units} units, morale {world.forces.morale:.0f}, "
        f"supply {world.forces.supply:.0f}\n"
    )
    report += "Legitimacy: " + ", ".join(f"{a} {world.legitimacy.get(a):.0f}" for a in LEGITIMACY_KEYS) + "\n"
    report += f"Traits: {', '.join(world.traits) or 'none'}\n"

    report += "\n--- Regions ---\n"
    if not world.regions:
        report += "No regions.\n"
    for region in world.regions:
        marker = "*" if region.controlled else " "
        report += (
            f"{marker} {region.name} [{region.id}] security {region.security:.2f}, "
            f"lawfulness {region.lawfulness:.0f}, unrest {region.unrest:.0f}, "
            f"piety {region.piety:.0f}, heresy {region.heresy:.0f}\n"
        )

    report += "\n--- Factions ---\n"
    if not world.factions:
        report += "No factions.\n"
    for faction in world.factions:
        report += (
            f"{faction.name} [{faction.id}] {faction.stance}, power {faction.power:.0f}, "
            f"{len(faction.regions)} regions\n"
        )
    return report


def render_profile(profile: AmbitionProfile) -> str:
    weights = ", ".join(f"{d} {w:.2f}" for d, w in profile.domains.items())
    return f"{summarize_ambition(profile)}\nDomains: {weights}\n"


def render_graph(graph: RequirementGraph) -> str:
    lines = [graph.summary]
    for node in graph.nodes:
        mark = "x" if node.is_met else " "
        needs = f" (needs {', '.join(node.needs)})" if node.needs else ""
        lines.append(f"[{mark}] {node.label} <{node.id}> tier {node.tier}{needs}")
    return "\n".join(lines) + "\n"


def render_proposals(proposals: List[ActionProposal]) -> str:
    if not proposals:
        return "No actions available.\n"
    lines = []
    for i, p in enumerate(proposals):
        costs = ", ".join(f"{v} {k}" for k, v in p.costs.items()) or "free"
        lines.append(f"{i+1}. {p.label} <{p.id}> score {p.score:.2f}, cost {costs}")
    return "\n".join(lines) + "\n"


def render_events(cards: List[EventCard], dreams: List[DreamEvent] = ()) -> str:
    lines = []
    for dream in dreams:
        lines.append(f"~ {dream.title} ~ {dream.text}")
    for card in cards:
        lines.append(f"* {card.text}")
        for choice in card.choices:
            costs = ", ".join(f"{v} {k}" for k, v in choice.costs.items())
            lines.append(f"    - {choice.label} <{choice.id}>" + (f" ({costs})" if costs else ""))
    if not lines:
        return "Nothing of note happened.\n"
    return "\n".join(lines) + "\n"
