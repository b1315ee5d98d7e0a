import json
from dataclasses import asdict
from typing import Any, Dict, Optional

from ..ambition.model import AmbitionProfile, MutationRecord
from ..ambition.mutation import DreamEvent
from ..core.config import OracleConfig, load_config
from ..core.ids import ActionId, FactionId, NodeId, RegionId
from ..core.session import Session
from ..events.model import EventCard, EventChoice
from ..factions.model import FactionAmbition, FactionRelationship, FactionRoster
from ..goals.model import GoalNode, RequirementGraph
from ..planning.actions import ActionProposal
from ..rules.effects import effect_to_text, parse_effects
from ..world.model import (
    Faction, Forces, Legitimacy, People, Region, RegionPeople, Resources, WorldState,
)

SNAPSHOT_VERSION = 1


class SnapshotError(Exception):
    """Raised when a saved session cannot be read back."""
    pass


def _profile_to_dict(profile: AmbitionProfile) -> Dict[str, Any]:
    return {
        "domains": dict(profile.domains),
        "modifiers": dict(profile.modifiers),
        "scale": dict(profile.scale),
        "raw_text": profile.raw_text,
        "generation": profile.generation,
        "mutations": [asdict(m) for m in profile.mutations],
        "archetype": profile.archetype,
    }


def _profile_from_dict(data: Dict[str, Any]) -> AmbitionProfile:
    return AmbitionProfile(
        domains=dict(data["domains"]),
        modifiers=dict(data["modifiers"]),
        scale=dict(data["scale"]),
        raw_text=data.get("raw_text", ""),
        generation=data.get("generation", 0),
        mutations=[MutationRecord(**m) for m in data.get("mutations", [])],
        archetype=data.get("archetype"),
    )


def _proposal_to_dict(proposal: ActionProposal) -> Dict[str, Any]:
    data = asdict(proposal)
    data["effects"] = [effect_to_text(e) for e in proposal.effects]
    return data


def _proposal_from_dict(data: Dict[str, Any]) -> ActionProposal:
    return ActionProposal(
        id=ActionId(data["id"]),
        label=data["label"],
        description=data.get("description", ""),
        satisfies=tuple(data.get("satisfies", [])),
        costs=dict(data.get("costs", {})),
        rewards=dict(data.get("rewards", {})),
        risks=dict(data.get("risks", {})),
        time=data.get("time", "1 turn"),
        requirements=tuple(data.get("requirements", [])),
        effects=parse_effects(data.get("effects", [])),
        category=data.get("category", ""),
        domains=tuple(data.get("domains", [])),
        score=data.get("score", 0.0),
    )


def _card_to_dict(card: EventCard) -> Dict[str, Any]:
    return {
        "id": card.id,
        "type": card.type,
        "tick": card.tick,
        "text": card.text,
        "magnitude": card.magnitude,
        "region_id": card.region_id,
        "faction_id": card.faction_id,
        "choices": [
            {
                "id": c.id,
                "label": c.label,
                "costs": dict(c.costs),
                "effects": [effect_to_text(e) for e in c.effects],
                "risk_tags": list(c.risk_tags),
            }
            for c in card.choices
        ],
    }


def _card_from_dict(data: Dict[str, Any]) -> EventCard:
    return EventCard(
        id=data["id"],
        type=data["type"],
        tick=data["tick"],
        text=data["text"],
        magnitude=data["magnitude"],
        region_id=data.get("region_id"),
        faction_id=data.get("faction_id"),
        choices=tuple(
            EventChoice(
                id=c["id"],
                label=c["label"],
                costs=dict(c.get("costs", {})),
                effects=parse_effects(c.get("effects", [])),
                risk_tags=tuple(c.get("risk_tags", [])),
            )
            for c in data.get("choices", [])
        ),
    )


def world_to_dict(world: WorldState) -> Dict[str, Any]:
    return asdict(world)


def world_from_dict(data: Dict[str, Any]) -> WorldState:
    regions = [
        Region(
            id=RegionId(r["id"]),
            name=r["name"],
            controlled=r["controlled"],
            resources=dict(r["resources"]),
            people=RegionPeople(**r["people"]),
            security=r["security"],
            lawfulness=r["lawfulness"],
            unrest=r["unrest"],
            piety=r["piety"],
            heresy=r["heresy"],
            domain_affinities=dict(r["domain_affinities"]),
        )
        for r in data["regions"]
    ]
    factions = [
        Faction(
            id=FactionId(f["id"]),
            name=f["name"],
            stance=f["stance"],
            power=f["power"],
            regions=[RegionId(r) for r in f["regions"]],
            domain_affinities=dict(f["domain_affinities"]),
        )
        for f in data["factions"]
    ]
    return WorldState(
        seed=data["seed"],
        tick=data["tick"],
        regions=regions,
        factions=factions,
        resources=Resources(**data["resources"]),
        people=People(**data["people"]),
        forces=Forces(**data["forces"]),
        legitimacy=Legitimacy(**data["legitimacy"]),
        traits=list(data["traits"]),
        player_id=data.get("player_id", ""),
    )


def _graph_to_dict(graph: RequirementGraph) -> Dict[str, Any]:
    return {"summary": graph.summary, "nodes": [asdict(n) for n in graph.nodes]}


def _graph_from_dict(data: Dict[str, Any]) -> RequirementGraph:
    nodes = []
    for n in data["nodes"]:
        node = GoalNode(**n)
        node.id = NodeId(node.id)
        nodes.append(node)
    return RequirementGraph(summary=data.get("summary", ""), nodes=nodes)


def _roster_to_dict(roster: FactionRoster) -> Dict[str, Any]:
    return {
        "ambitions": [
            {
                "faction_id": a.faction_id,
                "profile": _profile_to_dict(a.profile),
                "archetype": a.archetype,
                "goals": list(a.goals),
                "last_action": a.last_action,
                "cooldown": a.cooldown,
            }
            for a in roster.ambitions.values()
        ],
        "relationships": [asdict(r) for r in roster.relationships],
    }


def _roster_from_dict(data: Dict[str, Any]) -> FactionRoster:
    roster = FactionRoster()
    for a in data.get("ambitions", []):
        roster.ambitions[a["faction_id"]] = FactionAmbition(
            faction_id=FactionId(a["faction_id"]),
            profile=_profile_from_dict(a["profile"]),
            archetype=a["archetype"],
            goals=list(a.get("goals", [])),
            last_action=a.get("last_action"),
            cooldown=a.get("cooldown", 0),
        )
    roster.relationships = [
        FactionRelationship(
            faction_a=FactionId(r["faction_a"]),
            faction_b=FactionId(r["faction_b"]),
            stance=r["stance"],
            strength=r["strength"],
            history=list(r.get("history", [])),
        )
        for r in data.get("relationships", [])
    ]
    return roster


def to_dict(session: Session) -> Dict[str, Any]:
    """Converts a Session to a dictionary for serialization. The loaded content tables are not included."""
    return {
        "version": SNAPSHOT_VERSION,
        "seed": session.seed,
        "tick": session.world.tick,
        "world": world_to_dict(session.world),
        "profile": _profile_to_dict(session.profile),
        "graph": _graph_to_dict(session.graph),
        "roster": _roster_to_dict(session.roster),
        "proposals": [_proposal_to_dict(p) for p in session.proposals],
        "last_events": [_card_to_dict(c) for c in session.last_events],
        "dreams": [asdict(d) for d in session.dreams],
        "history": list(session.history),
    }


def from_dict(data: Dict[str, Any], config: Optional[OracleConfig] = None) -> Session:
    """
    Rebuilds a Session from a dictionary produced by `to_dict`.

    `config` supplies the content tables; the packaged ones are loaded when it
    is omitted.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object.")
    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version {version}")

    try:
        world = world_from_dict(data["world"])
        session = Session(
            seed=data["seed"],
            config=config or load_config(),
            world=world,
            profile=_profile_from_dict(data["profile"]),
            graph=_graph_from_dict(data["graph"]),
            roster=_roster_from_dict(data["roster"]),
            proposals=[_proposal_from_dict(p) for p in data.get("proposals", [])],
            last_events=[_card_from_dict(c) for c in data.get("last_events", [])],
            dreams=[DreamEvent(**d) for d in data.get("dreams", [])],
            history=list(data.get("history", [])),
        )
    except KeyError as e:
        raise SnapshotError(f"Missing key {e} in snapshot")
    except (TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e}")

    if data.get("tick", world.tick) != world.tick:
        raise SnapshotError(f"Snapshot tick {data['tick']} does not match world tick {world.tick}")
    return session


def save_to_json(session: Session, path: str):
    """Saves the session to a JSON file."""
    with open(path, 'w') as f:
        json.dump(to_dict(session), f, indent=2)


def load_from_json(path: str, config: Optional[OracleConfig] = None) -> Session:
    """Loads a session from a JSON file."""
    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}")
    return from_dict(data, config)
