from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Set, TYPE_CHECKING

from ..ambition.model import dominant_domains
from ..core.errors import UnknownRuleReference
from ..rules.conditions import conditions_hold
from .actions import ActionProposal, fallback_actions, from_generator, from_rule_path
from .scoring import action_domains, score_action

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..goals.model import GoalNode, RequirementGraph
    from ..rules.model import KnowledgeBase, Requirement
    from ..world.model import WorldState

logger = logging.getLogger(__name__)

DOMINANT_THRESHOLD = 0.2
# Least score an affordable fallback is offered at.
FALLBACK_FLOOR_SCORE = 0.1


def _rules_for_node(node: GoalNode, kb: KnowledgeBase) -> List[Requirement]:
    """Rules the node names explicitly, then every rule whose domains overlap the node's."""
    rules: List[Requirement] = []
    seen: Set[str] = set()
    for rule_id in node.rules:
        try:
            requirement = kb.requirement(rule_id, referrer=node.id)
        except UnknownRuleReference as e:
            logger.warning("Skipping rule reference: %s", e)
            continue
        if requirement.id not in seen:
            rules.append(requirement)
            seen.add(requirement.id)
    for requirement in kb.requirements.values():
        if requirement.id in seen:
            continue
        if any(d in node.domains for d in requirement.domains):
            rules.append(requirement)
            seen.add(requirement.id)
    return rules


def rule_candidates(graph: RequirementGraph, kb: KnowledgeBase) -> List[ActionProposal]:
    candidates: List[ActionProposal] = []
    seen: Set[str] = set()
    for node in graph.ready_nodes():
        for requirement in _rules_for_node(node, kb):
            for path in requirement.paths.values():
                proposal = from_rule_path(requirement, path, node)
                if proposal.id in seen:
                    continue
                seen.add(proposal.id)
                candidates.append(proposal)
    return candidates


def generator_candidates(world: WorldState, profile: AmbitionProfile, kb: KnowledgeBase) -> List[ActionProposal]:
    dominant = dominant_domains(profile, DOMINANT_THRESHOLD)
    candidates: List[ActionProposal] = []
    for generator in kb.generators:
        if not any(d in dominant for d in generator.domains):
            continue
        if not conditions_hold(generator.conditions, world, profile):
            continue
        if generator.rule:
            try:
                kb.requirement(generator.rule, referrer=generator.id)
            except UnknownRuleReference as e:
                logger.warning("Skipping generator %s: %s", generator.id, e)
                continue
        candidates.append(from_generator(generator))
    return candidates


def _score_candidates(
    candidates: List[ActionProposal],
    graph: RequirementGraph,
    world: WorldState,
    profile: AmbitionProfile,
    floor: float = 0.0,
) -> List[ActionProposal]:
    scored = []
    for candidate in candidates:
        if not world.resources.can_afford(candidate.costs):
            continue
        score = max(score_action(candidate, graph, world, profile).score, floor)
        if score > 0:
            scored.append(replace(candidate, score=score))
    return scored


def diversify(scored: List[ActionProposal], limit: int) -> List[ActionProposal]:
    """
    Takes the best proposal for each domain not yet represented, then fills the
    remaining slots by score. The result is ordered by score, highest first.
    """
    ranked = sorted(scored, key=lambda p: p.score, reverse=True)
    chosen: List[ActionProposal] = []
    chosen_ids: Set[str] = set()
    covered: Set[str] = set()

    for proposal in ranked:
        if len(chosen) >= limit:
            break
        domains = action_domains(proposal)
        if any(d not in covered for d in domains):
            chosen.append(proposal)
            chosen_ids.add(proposal.id)
            covered.update(domains)

    for proposal in ranked:
        if len(chosen) >= limit:
            break
        if proposal.id not in chosen_ids:
            chosen.append(proposal)
            chosen_ids.add(proposal.id)

    return sorted(chosen, key=lambda p: p.score, reverse=True)


def propose(
    graph: RequirementGraph,
    world: WorldState,
    profile: AmbitionProfile,
    kb: KnowledgeBase,
    limit: int = 5,
) -> List[ActionProposal]:
    """
    Proposes up to `limit` actions for the current turn.

    Candidate tiers are tried in order (goal rules, situational generators,
    fallbacks); the first tier with an affordable, positively scored candidate
    supplies the list. Every affordable fallback is kept.
    """
    tiers = (
        ("rules", lambda: rule_candidates(graph, kb), 0.0),
        ("generators", lambda: generator_candidates(world, profile, kb), 0.0),
        ("fallback", lambda: fallback_actions(world), FALLBACK_FLOOR_SCORE),
    )
    for name, build, floor in tiers:
        candidates = build()
        scored = _score_candidates(candidates, graph, world, profile, floor)
        logger.debug("Planner tier %s: %d candidates, %d viable", name, len(candidates), len(scored))
        if scored:
            return diversify(scored, limit)
    return []
