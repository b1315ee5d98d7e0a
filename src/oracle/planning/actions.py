from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, TYPE_CHECKING

from ..core.ids import ActionId
from ..rules.effects import Effect

if TYPE_CHECKING:
    from ..goals.model import GoalNode
    from ..rules.model import Generator, Requirement, RulePath
    from ..world.model import WorldState

RECRUIT_UNIT_CEILING = 50


@dataclass(frozen=True)
class ActionProposal:
    """A candidate action offered to the player. Regenerated every tick, never edited."""
    id: ActionId
    label: str
    description: str = ""
    satisfies: Tuple[str, ...] = ()
    costs: Dict[str, int] = field(default_factory=dict)
    rewards: Dict[str, int] = field(default_factory=dict)
    risks: Dict[str, float] = field(default_factory=dict)
    time: str = "1 turn"
    requirements: Tuple[str, ...] = ()
    effects: Tuple[Effect, ...] = ()
    category: str = ""
    domains: Tuple[str, ...] = ()
    score: float = 0.0


def from_rule_path(requirement: Requirement, path: RulePath, node: GoalNode) -> ActionProposal:
    return ActionProposal(
        id=ActionId(f"{requirement.id}_{path.id}"),
        label=path.label,
        description=path.description,
        satisfies=(requirement.id, node.id, *node.domains),
        costs=dict(path.costs),
        rewards=dict(path.rewards),
        risks=dict(path.risks),
        time=path.time,
        requirements=tuple(path.requirements),
        effects=path.effects,
        category=path.id,
        domains=tuple(requirement.domains),
    )


def from_generator(generator: Generator) -> ActionProposal:
    action = generator.action
    satisfies = list(action.satisfies)
    if generator.rule and generator.rule not in satisfies:
        satisfies.append(generator.rule)
    return ActionProposal(
        id=ActionId(action.id),
        label=action.label,
        description=action.description,
        satisfies=tuple(satisfies),
        costs=dict(action.costs),
        rewards=dict(action.rewards),
        risks=dict(action.risks),
        time=action.time,
        requirements=tuple(action.requirements),
        effects=action.effects,
        category=generator.id,
        domains=tuple(generator.domains),
    )


def fallback_actions(world: WorldState) -> List[ActionProposal]:
    """Always-available actions, offered when nothing better is affordable."""
    actions = [
        ActionProposal(
            id=ActionId("gather_gold"),
            label="Gather Gold",
            description="Collect basic funds through various means",
            satisfies=("wealth", "resources"),
            rewards={"gold": 25},
            category="gather_gold",
            domains=("wealth",),
        ),
    ]
    if world.forces.units < RECRUIT_UNIT_CEILING:
        actions.append(ActionProposal(
            id=ActionId("recruit_followers"),
            label="Recruit Followers",
            description="Gather loyal supporters to your cause",
            satisfies=("power", "followers", "army"),
            costs={"gold": 20},
            category="recruit_followers",
            domains=("power",),
        ))
    actions.append(ActionProposal(
        id=ActionId("contemplate_ambition"),
        label="Contemplate Your Path",
        description="Spend time reflecting on your ambitions and planning future actions",
        satisfies=("wisdom", "planning"),
        category="contemplate_ambition",
    ))
    return actions
