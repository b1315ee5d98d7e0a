from __future__ import annotations
import logging
from typing import List, Set, TYPE_CHECKING

from ..ambition.model import dominant_domains, domain_priorities
from .model import GoalNode, GoalTemplate, GoalTemplates, RequirementGraph

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..ambition.mutation import DreamDescriptor
    from ..core.rng import SequenceGenerator

logger = logging.getLogger(__name__)

DREAM_WEIGHT_SLACK = 0.05


def _modifier_bonus(profile: AmbitionProfile, domain: str) -> float:
    bonus = 0.0
    if domain in ("virtue", "faith"):
        bonus += profile.modifier("peaceful") * 0.1
    if domain == "power":
        bonus += profile.modifier("ruthless") * 0.1
    if domain == "wealth":
        bonus += profile.modifier("opulent") * 0.1
    if domain in ("power", "virtue"):
        bonus += profile.modifier("charismatic") * 0.05
    return bonus


def spawn_chance(template: GoalTemplate, profile: AmbitionProfile) -> float:
    weight = profile.weight(template.domain)
    return min(template.spawn_weight + min(weight * 2, 1.0) + _modifier_bonus(profile, template.domain), 1.0)


def _needs_met(template: GoalTemplate, selected: Set[str]) -> bool:
    return all(need in selected for need in template.needs)


def graph_summary(profile: AmbitionProfile) -> str:
    focus = dominant_domains(profile, 0.15)
    return f"Dynamic ambition focused on {', '.join(focus) or 'balanced pursuits'}"


def generate_goal_graph(
    profile: AmbitionProfile,
    rng: SequenceGenerator,
    templates: GoalTemplates,
    min_nodes: int = 3,
    max_nodes: int = 10,
    max_tier: int = 3,
) -> RequirementGraph:
    """
    Selects objectives for an ambition, basic tiers first and strongest domains first.

    A template is only taken once every prerequisite is already selected, so the
    first node chosen always has no prerequisites.
    """
    target = rng.next_int(min_nodes, max_nodes)
    ordered_domains = domain_priorities(profile)
    selected: List[GoalTemplate] = []
    selected_ids: Set[str] = set()

    for tier in range(1, max_tier + 1):
        for domain in ordered_domains:
            weight = profile.weight(domain)
            for template in templates.for_domain(domain):
                if len(selected) >= target:
                    break
                if template.tier != tier or template.id in selected_ids:
                    continue
                if weight < template.min_domain_weight or not _needs_met(template, selected_ids):
                    continue
                if rng.next() < spawn_chance(template, profile):
                    selected.append(template)
                    selected_ids.add(template.id)

    # Top up with basic objectives until the minimum is reached.
    while len(selected) < min_nodes:
        added = False
        for domain in ordered_domains:
            for template in templates.for_domain(domain):
                if template.tier != 1 or template.id in selected_ids or not _needs_met(template, selected_ids):
                    continue
                selected.append(template)
                selected_ids.add(template.id)
                added = True
                break
            if len(selected) >= min_nodes:
                break
        if not added:
            logger.warning("Goal templates exhausted at %d nodes (minimum %d)", len(selected), min_nodes)
            break

    logger.debug("Selected %d goal nodes (target %d)", len(selected), target)
    return RequirementGraph(
        summary=graph_summary(profile),
        nodes=[GoalNode.from_template(t) for t in selected],
    )


def spawn_dream_nodes(
    graph: RequirementGraph,
    profile: AmbitionProfile,
    dreams: List[DreamDescriptor],
    rng: SequenceGenerator,
    templates: GoalTemplates,
    tick: int,
) -> List[GoalNode]:
    """Appends one new objective per dream, ignoring the node cap. Returns the nodes added."""
    added: List[GoalNode] = []
    for dream in dreams:
        candidates = [
            t for t in templates.for_domain(dream.domain)
            if not graph.has(t.id)
            and t.min_domain_weight <= dream.threshold + DREAM_WEIGHT_SLACK
            and all(graph.has(need) for need in t.needs)
        ]
        if not candidates:
            logger.warning("No eligible goal template for %s dream at %s", dream.domain, dream.threshold)
            continue
        preferred_tier = 3 if dream.threshold >= 0.6 else 2
        pool = [t for t in candidates if t.tier == preferred_tier] or candidates
        node = GoalNode.from_template(rng.choice(pool), spawned_at=tick)
        graph.append(node)
        added.append(node)
    if added:
        graph.summary = graph_summary(profile)
    return added
