from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..rules.effects import Effect


@dataclass(frozen=True)
class ChoiceTemplate:
    id: str
    label: str
    costs: Dict[str, int] = field(default_factory=dict)
    effects: Tuple[Effect, ...] = ()
    risk_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EventTemplate:
    """Authored text for one card category. `text` may use {region}, {faction}, {axis} and {delta}."""
    id: str
    text: str
    choices: Tuple[ChoiceTemplate, ...] = ()


@dataclass(frozen=True)
class EventChoice:
    id: str
    label: str
    costs: Dict[str, int] = field(default_factory=dict)
    effects: Tuple[Effect, ...] = ()
    risk_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EventCard:
    id: str
    type: str
    tick: int
    text: str
    magnitude: float
    choices: Tuple[EventChoice, ...] = ()
    region_id: Optional[str] = None
    faction_id: Optional[str] = None

    def choice(self, choice_id: str) -> Optional[EventChoice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None
