from __future__ import annotations
import operator
import re
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING

from ..ambition.model import DOMAINS, MODIFIERS
from ..world.model import RESOURCE_KEYS, LEGITIMACY_KEYS, PRESSURE_KEYS

if TYPE_CHECKING:
    from ..ambition.model import AmbitionProfile
    from ..world.model import WorldState

CONDITION_PATTERN = re.compile(r"^([a-z_]+(?:\.[a-z_]+)?)\s*(>=|<=|==|=|>|<)\s*(-?[\d.]+)$")
TRAIT_PATTERN = re.compile(r"^[a-z_]+$")

OPERATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    "==": operator.eq,
}

_SUBJECT_FIELDS = {
    "ambition": DOMAINS,
    "modifier": MODIFIERS,
    "resources": RESOURCE_KEYS,
    "legitimacy": LEGITIMACY_KEYS,
    "people": ("population", "loyalty", "unrest", "faith"),
    "forces": ("units", "morale", "supply"),
    "region": PRESSURE_KEYS + ("security", "loyalty", "population"),
}


@dataclass(frozen=True)
class Condition:
    """Either a bare trait test (`op` is None) or a numeric comparison against a world or profile value."""
    lhs: str
    op: Optional[str] = None
    value: float = 0.0

    @property
    def is_trait(self) -> bool:
        return self.op is None

    def to_text(self) -> str:
        if self.is_trait:
            return self.lhs
        return f"{self.lhs} {self.op} {self.value:g}"


def parse_condition(text: str) -> Condition:
    text = str(text).strip()
    match = CONDITION_PATTERN.match(text)
    if match:
        lhs, op, number = match.groups()
        if "." not in lhs:
            if lhs not in RESOURCE_KEYS:
                raise ValueError(f"Unknown condition subject '{lhs}' in '{text}'")
            lhs = f"resources.{lhs}"
        subject, name = lhs.split(".", 1)
        if subject not in _SUBJECT_FIELDS or name not in _SUBJECT_FIELDS[subject]:
            raise ValueError(f"Unknown condition subject '{lhs}' in '{text}'")
        return Condition(lhs=lhs, op=op, value=float(number))
    if TRAIT_PATTERN.match(text):
        return Condition(lhs=text)
    raise ValueError(f"Malformed condition '{text}'")


def _resolve(lhs: str, world: WorldState, profile: AmbitionProfile) -> Optional[float]:
    subject, name = lhs.split(".", 1)
    if subject == "ambition":
        return profile.weight(name)
    if subject == "modifier":
        return profile.modifier(name)
    if subject == "resources":
        return float(world.resources.get(name))
    if subject == "legitimacy":
        return world.legitimacy.get(name)
    if subject == "people":
        return float(getattr(world.people, name))
    if subject == "forces":
        return float(getattr(world.forces, name))
    if subject == "region":
        region = world.home_region()
        if region is None:
            return None
        if name in ("loyalty", "population"):
            return float(getattr(region.people, name))
        return float(getattr(region, name))
    return None


def evaluate_condition(condition: Condition, world: WorldState, profile: AmbitionProfile) -> bool:
    if condition.is_trait:
        return world.has_trait(condition.lhs)
    actual = _resolve(condition.lhs, world, profile)
    if actual is None:
        return False
    return OPERATORS[condition.op](actual, condition.value)


def conditions_hold(conditions: Iterable[Condition], world: WorldState, profile: AmbitionProfile) -> bool:
    return all(evaluate_condition(c, world, profile) for c in conditions)
