from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.errors import UnknownRuleReference
from .conditions import Condition
from .effects import Effect


@dataclass
class RulePath:
    """One named way of satisfying a requirement."""
    id: str
    label: str
    description: str = ""
    costs: Dict[str, int] = field(default_factory=dict)
    rewards: Dict[str, int] = field(default_factory=dict)
    risks: Dict[str, float] = field(default_factory=dict)
    time: str = "1 turn"
    requirements: List[str] = field(default_factory=list)
    effects: Tuple[Effect, ...] = ()


@dataclass
class Requirement:
    id: str
    label: str
    domains: List[str] = field(default_factory=list)
    paths: Dict[str, RulePath] = field(default_factory=dict)


@dataclass
class GeneratorAction:
    id: str
    label: str
    description: str = ""
    satisfies: List[str] = field(default_factory=list)
    costs: Dict[str, int] = field(default_factory=dict)
    rewards: Dict[str, int] = field(default_factory=dict)
    risks: Dict[str, float] = field(default_factory=dict)
    time: str = "1 turn"
    requirements: List[str] = field(default_factory=list)
    effects: Tuple[Effect, ...] = ()


@dataclass
class Generator:
    """A situational action offered whenever its conditions hold."""
    id: str
    conditions: List[Condition]
    domains: List[str]
    action: GeneratorAction
    rule: Optional[str] = None


@dataclass
class KnowledgeBase:
    requirements: Dict[str, Requirement] = field(default_factory=dict)
    generators: List[Generator] = field(default_factory=list)

    def has_requirement(self, rule_id: str) -> bool:
        return rule_id in self.requirements

    def requirement(self, rule_id: str, referrer: Optional[str] = None) -> Requirement:
        if rule_id not in self.requirements:
            raise UnknownRuleReference(rule_id, referrer)
        return self.requirements[rule_id]
