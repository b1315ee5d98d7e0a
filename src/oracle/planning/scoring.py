"""
Heuristic scoring of action proposals against an ambition.

Every term is a plain function of the proposal, the goal graph, the world and
the profile, so scoring the same inputs always yields the same number.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, TYPE_CHECKING

from ..ambition.model import DOMAINS

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..goals.model import RequirementGraph
    from ..world.model import WorldState
    from .actions import ActionProposal

DOMAIN_WEIGHT = 10.0
MODIFIER_WEIGHT = 5.0
REQUIREMENT_BONUS = 15.0
RISK_PENALTY = 5.0
RISK_BONUS = 2.0
SCALE_WEIGHT = 3.0
UNKNOWN_DOMAIN_ALIGNMENT = 0.1

DOMAIN_KEYWORDS = {
    "power": ("power", "rule", "command", "authority", "control", "dominate"),
    "wealth": ("wealth", "trade", "gold", "commerce", "merchant", "profit"),
    "faith": ("faith", "divine", "holy", "sacred", "temple", "god", "prayer"),
    "virtue": ("virtue", "justice", "honor", "moral", "righteous", "good"),
    "freedom": ("freedom", "liberate", "rebel", "independence", "escape"),
    "creation": ("create", "build", "craft", "art", "innovation", "construct"),
}

SCALE_KEYWORDS = {
    "local": ("local", "village", "town", "community", "neighborhood"),
    "regional": ("region", "province", "territory", "land", "domain"),
    "world": ("world", "global", "empire", "continent", "universal"),
}


@dataclass
class ActionScore:
    score: float
    reasons: List[str] = field(default_factory=list)


def _has_keywords(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def _action_text(action: ActionProposal) -> str:
    return f"{action.label} {action.description}".lower()


def action_domains(action: ActionProposal) -> List[str]:
    """Declared domains, or domains read from the action's text when none are declared."""
    if action.domains:
        return [d for d in action.domains if d in DOMAINS]
    text = f"{_action_text(action)} {' '.join(action.satisfies)}".lower()
    return [d for d in DOMAINS if _has_keywords(text, DOMAIN_KEYWORDS[d])]


def domain_alignment(domains: List[str], profile: AmbitionProfile) -> float:
    if not domains:
        return UNKNOWN_DOMAIN_ALIGNMENT
    return sum(profile.weight(d) for d in domains) / len(domains)


def modifier_compatibility(action: ActionProposal, profile: AmbitionProfile) -> float:
    text = _action_text(action)
    compatibility = 0.0

    if _has_keywords(text, ("diplomacy", "peace", "negotiate", "alliance", "cooperation")):
        compatibility += profile.modifier("peaceful") * 0.8
    elif _has_keywords(text, ("war", "battle", "attack", "conquest", "violence")):
        compatibility += (1 - profile.modifier("peaceful")) * 0.5

    if _has_keywords(text, ("ruthless", "brutal", "sacrifice", "betray", "manipulate")):
        compatibility += profile.modifier("ruthless") * 0.8
    elif _has_keywords(text, ("merciful", "gentle", "compassionate", "forgive")):
        compatibility += (1 - profile.modifier("ruthless")) * 0.5

    if _has_keywords(text, ("secret", "hidden", "spy", "infiltrate", "covert")):
        compatibility += profile.modifier("secretive") * 0.8
    elif _has_keywords(text, ("public", "open", "declare", "announce")):
        compatibility += (1 - profile.modifier("secretive")) * 0.5

    if _has_keywords(text, ("luxury", "grand", "magnificent", "opulent", "lavish")):
        compatibility += profile.modifier("opulent") * 0.8
    elif _has_keywords(text, ("simple", "humble", "modest", "austere")):
        compatibility += profile.modifier("ascetic") * 0.8

    return min(compatibility, 1.0)


def fulfills_requirement(action: ActionProposal, graph: RequirementGraph) -> bool:
    for node in graph.unmet_nodes():
        if node.id in action.satisfies:
            return True
        if any(domain in action.satisfies for domain in node.domains):
            return True
    return False


def risk_score(action: ActionProposal, profile: AmbitionProfile) -> float:
    total_risk = sum(v for v in action.risks.values() if isinstance(v, (int, float)))
    if total_risk == 0:
        return 0.0
    tolerance = 0.5 + profile.modifier("ruthless") * 0.3 - profile.modifier("peaceful") * 0.2
    if total_risk > tolerance:
        return -(total_risk - tolerance) * RISK_PENALTY
    return (tolerance - total_risk) * RISK_BONUS


def scale_preference(action: ActionProposal, profile: AmbitionProfile) -> float:
    text = _action_text(action)
    score = 0.0
    for scale, keywords in SCALE_KEYWORDS.items():
        if _has_keywords(text, keywords):
            score += profile.scale.get(scale, 0.0) * SCALE_WEIGHT
    return score


def score_action(
    action: ActionProposal,
    graph: RequirementGraph,
    world: WorldState,
    profile: AmbitionProfile,
) -> ActionScore:
    if not world.resources.can_afford(action.costs):
        return ActionScore(score=0.0, reasons=["Cannot afford action costs"])

    reasons = []
    alignment = domain_alignment(action_domains(action), profile)
    score = alignment * DOMAIN_WEIGHT
    if alignment > 0.5:
        reasons.append(f"Strong domain alignment ({alignment:.2f})")

    compatibility = modifier_compatibility(action, profile)
    score += compatibility * MODIFIER_WEIGHT
    if compatibility > 0.3:
        reasons.append(f"Modifier compatibility ({compatibility:.2f})")

    if fulfills_requirement(action, graph):
        score += REQUIREMENT_BONUS
        reasons.append("Fulfills active requirement")

    risk = risk_score(action, profile)
    score += risk
    if risk != 0:
        reasons.append(f"Risk assessment ({risk:+.1f})")

    scale = scale_preference(action, profile)
    score += scale
    if scale > 0:
        reasons.append(f"Scale preference (+{scale:.1f})")

    return ActionScore(score=max(0.0, score), reasons=reasons)
