from __future__ import annotations
import logging
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import OracleConfig, load_config
from .errors import InsufficientResources, InvalidArgument
from .rng import DREAMS, GOALS, sub_stream
from .sim import TickReport, step
from ..ambition.interpret import interpret
from ..ambition.model import AmbitionProfile
from ..ambition.mutation import DreamEvent, apply_action_mutation, build_dream_events
from ..events.alchemize import alchemize
from ..events.model import EventCard, EventChoice
from ..factions.ambitions import build_roster
from ..factions.model import FactionRoster
from ..generation.world_gen import generate_world
from ..goals.generator import generate_goal_graph, spawn_dream_nodes
from ..goals.model import GoalNode, RequirementGraph
from ..planning.actions import ActionProposal
from ..planning.planner import propose
from ..rules.effects import apply_world_effect
from ..world.model import WorldState

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything one player's game needs to continue: the world plus the ambition that drives it."""
    seed: int
    config: OracleConfig
    world: WorldState
    profile: AmbitionProfile
    graph: RequirementGraph
    roster: FactionRoster
    proposals: List[ActionProposal] = field(default_factory=list)
    last_events: List[EventCard] = field(default_factory=list)
    dreams: List[DreamEvent] = field(default_factory=list)
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def tick(self) -> int:
        return self.world.tick


@dataclass
class TurnResult:
    tick_report: TickReport
    events: List[EventCard]
    dreams: List[DreamEvent]
    proposals: List[ActionProposal]
    new_nodes: List[GoalNode]
    met_nodes: List[str]


def seed_from_text(text: str) -> int:
    return zlib.crc32(text.encode("utf-8"))


def start_session(text: str, seed: Optional[int] = None, config: Optional[OracleConfig] = None) -> Session:
    """
    Reads an ambition and builds the world around it.

    Without an explicit seed the session is seeded from the text itself, so the
    same ambition always produces the same world.
    """
    config = config or load_config()
    seed = seed_from_text(text) if seed is None else int(seed)

    profile = interpret(text, config.lexicon)
    world = generate_world(profile, seed, config.names)
    graph = generate_goal_graph(
        profile,
        sub_stream(seed, GOALS),
        config.goals,
        min_nodes=config.min_goal_nodes,
        max_nodes=config.max_goal_nodes,
        max_tier=config.max_goal_tier,
    )
    roster = build_roster(world, config.factions, config.lexicon)
    session = Session(seed=seed, config=config, world=world, profile=profile, graph=graph, roster=roster)
    refresh_proposals(session)
    logger.info("Session started with seed %d: %d regions, %d factions, %d goals",
                seed, len(world.regions), len(world.factions), len(graph.nodes))
    return session


def refresh_proposals(session: Session) -> List[ActionProposal]:
    session.proposals = propose(
        session.graph,
        session.world,
        session.profile,
        session.config.knowledge_base,
        limit=session.config.proposal_limit,
    )
    return session.proposals


def find_proposal(session: Session, action_id: str) -> ActionProposal:
    for proposal in session.proposals:
        if proposal.id == action_id:
            return proposal
    raise InvalidArgument(f"Action '{action_id}' is not among the current proposals.")


def advance(session: Session, action_id: Optional[str] = None) -> TurnResult:
    """
    Plays one turn: resolves the chosen proposal (or none), ticks the world,
    drifts the ambition, and produces the next events and proposals.

    An unknown or unaffordable action is rejected before anything changes.
    """
    action = None
    if action_id is not None:
        action = find_proposal(session, action_id)
        if not session.world.resources.can_afford(action.costs):
            shortfall = session.world.resources.shortfall(action.costs)
            logger.warning("Rejected action %s: short %s", action.id, shortfall)
            raise InsufficientResources(action.id, shortfall)

    prev = session.world.snapshot()
    report = step(session.world, [action] if action else [], session.roster, session.config.factions)
    tick = session.world.tick

    met_nodes: List[str] = []
    new_nodes: List[GoalNode] = []
    dream_events: List[DreamEvent] = []
    if action is not None:
        met_nodes = [s for s in action.satisfies if session.graph.mark_met(s)]
        profile, dreams = apply_action_mutation(session.profile, action, tick, session.config.mutations)
        session.profile = profile
        if dreams:
            new_nodes = spawn_dream_nodes(
                session.graph,
                profile,
                dreams,
                sub_stream(session.seed, DREAMS, tick),
                session.config.goals,
                tick,
            )
            dream_events = build_dream_events(dreams, session.config.mutations, profile.generation)
            session.dreams.extend(dream_events)

    events = alchemize(prev, session.world, session.config.events, limit=session.config.max_event_cards)
    session.last_events = events
    proposals = refresh_proposals(session)
    session.history.append({
        "tick": tick,
        "action_id": action.id if action else None,
        "events": [e.id for e in events],
        "met": met_nodes,
    })
    logger.debug("Tick %d: action=%s events=%d dreams=%d", tick, action_id, len(events), len(dream_events))

    return TurnResult(
        tick_report=report,
        events=events,
        dreams=dream_events,
        proposals=proposals,
        new_nodes=new_nodes,
        met_nodes=met_nodes,
    )


def resolve_event_choice(session: Session, card_id: str, choice_id: str) -> EventChoice:
    """
    Applies one choice of a pending event card: its costs, then its world
    effects on the card's region (the home region when the card has none).
    The card is consumed.
    """
    card = next((c for c in session.last_events if c.id == card_id), None)
    if card is None:
        raise InvalidArgument(f"Event card '{card_id}' is not pending.")
    choice = card.choice(choice_id)
    if choice is None:
        raise InvalidArgument(f"Event card '{card_id}' has no choice '{choice_id}'.")

    world = session.world
    if not world.resources.can_afford(choice.costs):
        shortfall = world.resources.shortfall(choice.costs)
        logger.warning("Rejected choice %s on %s: short %s", choice_id, card_id, shortfall)
        raise InsufficientResources(choice.id, shortfall)

    for key, cost in choice.costs.items():
        world.resources.add(key, -cost)
    region = world.region(card.region_id) if card.region_id else None
    for effect in choice.effects:
        apply_world_effect(effect, world, region)
    world.enforce_bounds()

    session.last_events = [c for c in session.last_events if c.id != card_id]
    session.history.append({"tick": world.tick, "card_id": card_id, "choice_id": choice_id})
    refresh_proposals(session)
    return choice
