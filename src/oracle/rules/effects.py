"""
Typed action effects.

Authored content writes effects as short strings such as ``+legitimacy.law = 5``
or ``-region.unrest = 4``. They are parsed once, at load time, into one of five
frozen variants; consumers match on the variant instead of re-reading text.
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union, TYPE_CHECKING

from ..ambition.model import DOMAINS, MODIFIERS
from ..world.model import LEGITIMACY_KEYS, PRESSURE_KEYS

if TYPE_CHECKING:
    from ..world.model import WorldState, Region

EFFECT_PATTERN = re.compile(r"^([+-])\s*(legitimacy|region|ambition|modifier)\.([a-z_]+)\s*=\s*([\d.]+)$")

REGION_FIELDS = PRESSURE_KEYS + ("security", "loyalty")


@dataclass(frozen=True)
class LegitimacyEffect:
    axis: str
    delta: float


@dataclass(frozen=True)
class RegionEffect:
    """Shifts a field of the home region. Pressures and loyalty are authored in points, security as a fraction."""
    field: str
    delta: float


@dataclass(frozen=True)
class DomainEffect:
    domain: str
    delta: float


@dataclass(frozen=True)
class ModifierEffect:
    modifier: str
    delta: float


@dataclass(frozen=True)
class RawEffect:
    text: str


Effect = Union[LegitimacyEffect, RegionEffect, DomainEffect, ModifierEffect, RawEffect]

_VALID_FIELDS = {
    "legitimacy": LEGITIMACY_KEYS,
    "region": REGION_FIELDS,
    "ambition": DOMAINS,
    "modifier": MODIFIERS,
}


def parse_effect(text: str) -> Effect:
    """
    Parses one authored effect string.

    Strings that do not look like ``<sign><prefix>.<field> = <number>`` are kept
    as narrative RawEffects. A recognised prefix with an unknown field is an
    authoring mistake and raises ValueError.
    """
    match = EFFECT_PATTERN.match(text.strip())
    if not match:
        return RawEffect(text=text)

    sign, prefix, name, number = match.groups()
    if name not in _VALID_FIELDS[prefix]:
        raise ValueError(f"Unknown field '{name}' for effect prefix '{prefix}' in '{text}'")
    try:
        amount = float(number)
    except ValueError:
        raise ValueError(f"Invalid amount '{number}' in effect '{text}'")
    delta = amount if sign == "+" else -amount

    if prefix == "legitimacy":
        return LegitimacyEffect(axis=name, delta=delta)
    if prefix == "region":
        return RegionEffect(field=name, delta=delta)
    if prefix == "ambition":
        return DomainEffect(domain=name, delta=delta)
    return ModifierEffect(modifier=name, delta=delta)


def parse_effects(texts: Iterable[str]) -> Tuple[Effect, ...]:
    return tuple(parse_effect(str(t)) for t in texts)


def _format_amount(delta: float) -> str:
    return f"{abs(delta):g}"


def effect_to_text(effect: Effect) -> str:
    """Inverse of parse_effect, used when snapshots are written back out."""
    if isinstance(effect, RawEffect):
        return effect.text
    sign = "+" if effect.delta >= 0 else "-"
    if isinstance(effect, LegitimacyEffect):
        return f"{sign}legitimacy.{effect.axis} = {_format_amount(effect.delta)}"
    if isinstance(effect, RegionEffect):
        return f"{sign}region.{effect.field} = {_format_amount(effect.delta)}"
    if isinstance(effect, DomainEffect):
        return f"{sign}ambition.{effect.domain} = {_format_amount(effect.delta)}"
    return f"{sign}modifier.{effect.modifier} = {_format_amount(effect.delta)}"


def apply_world_effect(effect: Effect, world: WorldState, region: Optional[Region] = None) -> bool:
    """
    Applies a Legitimacy or Region effect to the world. Returns True when the
    world changed. Domain and Modifier effects belong to the mutation engine and
    Raw effects are narrative, so those return False.
    """
    if isinstance(effect, LegitimacyEffect):
        world.legitimacy.shift(effect.axis, effect.delta)
        return True
    if isinstance(effect, RegionEffect):
        target = region or world.home_region()
        if target is None:
            return False
        if effect.field in PRESSURE_KEYS:
            target.shift_pressure(effect.field, effect.delta)
        elif effect.field == "security":
            target.security = max(0.0, min(1.0, target.security + effect.delta))
        elif effect.field == "loyalty":
            target.people.loyalty = max(0.0, min(1.0, target.people.loyalty + effect.delta / 100.0))
        return True
    return False
