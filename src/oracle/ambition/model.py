from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

DOMAINS = ("power", "wealth", "faith", "virtue", "freedom", "creation")
MODIFIERS = ("peaceful", "ruthless", "ascetic", "opulent", "secretive", "charismatic")
SCALES = ("local", "regional", "world")

DREAM_THRESHOLDS = (0.4, 0.6, 0.8)
DOMAIN_SUM_TOLERANCE = 1e-6


def balanced_domains() -> Dict[str, float]:
    return {d: 1.0 / len(DOMAINS) for d in DOMAINS}


def normalize_domains(weights: Dict[str, float]) -> Dict[str, float]:
    """Clamps every domain at 0 and rescales so the six weights sum to 1.0."""
    clamped = {d: max(0.0, float(weights.get(d, 0.0))) for d in DOMAINS}
    total = sum(clamped.values())
    if total <= 0.0:
        return balanced_domains()
    return {d: clamped[d] / total for d in DOMAINS}


@dataclass
class MutationRecord:
    tick: int
    action_id: str
    domain_changes: Dict[str, float] = field(default_factory=dict)
    modifier_changes: Dict[str, float] = field(default_factory=dict)
    reason: str = ""


@dataclass
class AmbitionProfile:
    """
    Weighted reading of a statement of ambition.

    `domains` always sums to 1.0; `modifiers` are independent scalars in [0, 1];
    `scale` sums to 1.0. Profiles are never edited in place once published: the
    mutation engine builds a fresh one and appends to a copied `mutations` list.
    """
    domains: Dict[str, float] = field(default_factory=balanced_domains)
    modifiers: Dict[str, float] = field(default_factory=lambda: {m: 0.0 for m in MODIFIERS})
    scale: Dict[str, float] = field(default_factory=lambda: {"local": 0.2, "regional": 0.6, "world": 0.2})
    raw_text: str = ""
    generation: int = 0
    mutations: List[MutationRecord] = field(default_factory=list)
    archetype: Optional[str] = None

    def weight(self, domain: str) -> float:
        return self.domains.get(domain, 0.0)

    def modifier(self, name: str) -> float:
        return self.modifiers.get(name, 0.0)

    def is_normalized(self) -> bool:
        return abs(sum(self.domains.values()) - 1.0) <= DOMAIN_SUM_TOLERANCE


def dominant_domains(profile: AmbitionProfile, threshold: float = 0.2) -> List[str]:
    """Domains at or above `threshold`, strongest first. Ties keep the canonical domain order."""
    ranked = [d for d in DOMAINS if profile.weight(d) >= threshold]
    return sorted(ranked, key=lambda d: profile.weight(d), reverse=True)


def domain_priorities(profile: AmbitionProfile) -> List[str]:
    return sorted(DOMAINS, key=lambda d: profile.weight(d), reverse=True)


def summarize_ambition(profile: AmbitionProfile) -> str:
    dominant = dominant_domains(profile, 0.15)
    strong_modifiers = [m for m in MODIFIERS if profile.modifier(m) > 0.3]

    if profile.scale.get("world", 0.0) > 0.5:
        scale_type = "global"
    elif profile.scale.get("regional", 0.0) > 0.5:
        scale_type = "regional"
    else:
        scale_type = "local"

    summary = f"A {scale_type} ambition focused on {', '.join(dominant) or 'nothing in particular'}"
    if strong_modifiers:
        summary += f" with {', '.join(strong_modifiers)} tendencies"
    if profile.generation > 0:
        summary += f" (evolved {profile.generation} times)"
    return summary
