from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from .model import (
    AmbitionProfile, MutationRecord, DOMAINS, MODIFIERS, DREAM_THRESHOLDS, normalize_domains,
)
from ..rules.effects import DomainEffect, ModifierEffect

if TYPE_CHECKING:
    from ..planning.actions import ActionProposal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationEffect:
    domains: Dict[str, float] = field(default_factory=dict)
    modifiers: Dict[str, float] = field(default_factory=dict)
    reason: str = ""


@dataclass(frozen=True)
class KeywordCategory:
    domain: str
    delta: float
    words: Tuple[str, ...]
    reason: str = ""


@dataclass(frozen=True)
class DreamText:
    title: str
    text: str


@dataclass(frozen=True)
class DreamDescriptor:
    domain: str
    threshold: float
    tick: int


@dataclass(frozen=True)
class DreamEvent:
    id: str
    domain: str
    threshold: float
    tick: int
    title: str
    text: str


@dataclass
class MutationImpact:
    total_mutations: int
    dominant_source: Optional[str]
    velocity: float
    drift: Dict[str, float]


@dataclass
class MutationTable:
    """How resolved actions pull an ambition around, and what it dreams of when it crosses a threshold."""
    effects: Dict[str, MutationEffect] = field(default_factory=dict)
    keywords: List[KeywordCategory] = field(default_factory=list)
    dreams: Dict[str, Dict[float, DreamText]] = field(default_factory=dict)

    def add_effect(self, key: str, effect: MutationEffect):
        """Registers (or replaces) a custom mutation effect."""
        self.effects[key] = effect

    def dream_text(self, domain: str, threshold: float) -> Optional[DreamText]:
        for t, text in self.dreams.get(domain, {}).items():
            if abs(t - threshold) < 1e-9:
                return text
        return None

    def lookup(self, action: ActionProposal) -> Optional[MutationEffect]:
        """Finds the table effect for an action: id, then category, then satisfies tags, then keywords."""
        if action.id in self.effects:
            return self.effects[action.id]
        if action.category and action.category in self.effects:
            return self.effects[action.category]
        for tag in action.satisfies:
            if tag in self.effects:
                return self.effects[tag]
        return self._keyword_effect(f"{action.label} {action.description}".lower())

    def _keyword_effect(self, text: str) -> Optional[MutationEffect]:
        domains: Dict[str, float] = {}
        reasons = []
        for category in self.keywords:
            if any(word in text for word in category.words):
                domains[category.domain] = domains.get(category.domain, 0.0) + category.delta
                reasons.append(category.reason)
        if not domains:
            return None
        return MutationEffect(domains=domains, reason="; ".join(reasons))


def detect_dreams(previous: AmbitionProfile, current: AmbitionProfile, tick: int) -> List[DreamDescriptor]:
    """One descriptor per threshold crossed upward. A weight that jumps two thresholds fires both."""
    dreams = []
    for domain in DOMAINS:
        before = previous.weight(domain)
        after = current.weight(domain)
        for threshold in DREAM_THRESHOLDS:
            if before < threshold <= after:
                dreams.append(DreamDescriptor(domain=domain, threshold=threshold, tick=tick))
    return dreams


def apply_action_mutation(
    profile: AmbitionProfile,
    action: ActionProposal,
    tick: int,
    table: MutationTable,
) -> Tuple[AmbitionProfile, List[DreamDescriptor]]:
    """
    Returns a new profile drifted by the resolved action, plus any dreams it triggered.

    The input profile is never modified. An action that matches nothing in the
    table and carries no ambition effects leaves the profile unchanged.
    """
    match = table.lookup(action)
    domain_deltas: Dict[str, float] = dict(match.domains) if match else {}
    modifier_deltas: Dict[str, float] = dict(match.modifiers) if match else {}
    reason = match.reason if match else ""

    for effect in action.effects:
        if isinstance(effect, DomainEffect):
            domain_deltas[effect.domain] = domain_deltas.get(effect.domain, 0.0) + effect.delta
        elif isinstance(effect, ModifierEffect):
            modifier_deltas[effect.modifier] = modifier_deltas.get(effect.modifier, 0.0) + effect.delta

    if match is None and not domain_deltas and not modifier_deltas:
        logger.debug("No ambition drift for action %s", action.id)
        return profile, []

    domains = normalize_domains({d: profile.weight(d) + domain_deltas.get(d, 0.0) for d in DOMAINS})
    modifiers = {
        m: max(0.0, min(1.0, profile.modifier(m) + modifier_deltas.get(m, 0.0)))
        for m in MODIFIERS
    }
    record = MutationRecord(
        tick=tick,
        action_id=action.id,
        domain_changes=domain_deltas,
        modifier_changes=modifier_deltas,
        reason=reason or f"Ambition shaped by {action.label}",
    )
    mutated = replace(
        profile,
        domains=domains,
        modifiers=modifiers,
        scale=dict(profile.scale),
        generation=profile.generation + 1,
        mutations=list(profile.mutations) + [record],
    )
    return mutated, detect_dreams(profile, mutated, tick)


def build_dream_events(dreams: List[DreamDescriptor], table: MutationTable, generation: int) -> List[DreamEvent]:
    events = []
    for dream in dreams:
        text = table.dream_text(dream.domain, dream.threshold)
        if text is None:
            logger.warning("No dream text for %s at %s", dream.domain, dream.threshold)
            text = DreamText(
                title=f"Dreams of {dream.domain.capitalize()}",
                text=f"Your ambition for {dream.domain} grows stronger.",
            )
        events.append(DreamEvent(
            id=f"dream_{dream.domain}_{int(round(dream.threshold * 100))}_{generation}",
            domain=dream.domain,
            threshold=dream.threshold,
            tick=dream.tick,
            title=text.title,
            text=text.text,
        ))
    return events


def mutation_impact(profile: AmbitionProfile) -> MutationImpact:
    """Summarises how far, how fast and by what an ambition has drifted."""
    drift = {d: 0.0 for d in DOMAINS}
    for record in profile.mutations:
        for domain, delta in record.domain_changes.items():
            drift[domain] = drift.get(domain, 0.0) + delta

    total = len(profile.mutations)
    if total == 0:
        return MutationImpact(total_mutations=0, dominant_source=None, velocity=0.0, drift=drift)

    sources = Counter(record.action_id for record in profile.mutations)
    dominant_source = sources.most_common(1)[0][0]
    velocity = sum(abs(v) for v in drift.values()) / total
    return MutationImpact(total_mutations=total, dominant_source=dominant_source, velocity=velocity, drift=drift)
