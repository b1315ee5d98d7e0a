"""
Loaders for the authored content tables under ``data/``.

Every loader reads YAML with ``yaml.safe_load``, validates the shape it needs
and raises ContentSchemaError naming the file and the offending key.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..ambition.model import DOMAINS, MODIFIERS, SCALES, DREAM_THRESHOLDS
from ..ambition.mutation import DreamText, KeywordCategory, MutationEffect, MutationTable
from ..events.registry import EventRegistry
from ..factions.model import (
    Archetype, FactionActionTemplate, FactionActionTemplates, FactionEffect,
    FACTION_CATEGORIES, EFFECT_TYPES,
)
from ..goals.model import GoalTemplate, GoalTemplates

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentSchemaError(Exception):
    """Custom exception for schema validation errors in content tables."""
    pass


@dataclass
class Lexicon:
    domains: Dict[str, List[str]] = field(default_factory=dict)
    modifiers: Dict[str, List[str]] = field(default_factory=dict)
    scales: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class NameTables:
    regions: Dict[str, List[str]] = field(default_factory=dict)
    factions: Dict[str, List[str]] = field(default_factory=dict)


def read_yaml(path: Path) -> Any:
    path = Path(path)
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    if data is None:
        raise ContentSchemaError(f"YAML file '{path}' is empty or malformed.")
    return data


def _keyword_table(data: Any, section: str, keys, path: Path, lower: bool = True) -> Dict[str, List[str]]:
    if not isinstance(data, dict):
        raise ContentSchemaError(f"Section '{section}' in {path} must be a mapping.")
    table = {}
    for key in keys:
        if key not in data:
            raise ContentSchemaError(f"Missing key '{key}' in section '{section}' in {path}")
        words = data[key]
        if not isinstance(words, list) or not all(isinstance(w, str) and w for w in words):
            raise ContentSchemaError(f"Invalid keyword list for '{key}' in section '{section}' in {path}")
        table[key] = [w.lower() if lower else w for w in words]
    return table


def load_lexicon(path: Path) -> Lexicon:
    data = read_yaml(path)
    for section in ("domains", "modifiers", "scales"):
        if section not in data:
            raise ContentSchemaError(f"Missing key '{section}' in {path}")
    return Lexicon(
        domains=_keyword_table(data["domains"], "domains", DOMAINS, path),
        modifiers=_keyword_table(data["modifiers"], "modifiers", MODIFIERS, path),
        scales=_keyword_table(data["scales"], "scales", SCALES, path),
    )


def load_names(path: Path) -> NameTables:
    data = read_yaml(path)
    tables = {}
    for section in ("regions", "factions"):
        if section not in data:
            raise ContentSchemaError(f"Missing key '{section}' in {path}")
        tables[section] = _keyword_table(data[section], section, DOMAINS + ("neutral",), path, lower=False)
    return NameTables(regions=tables["regions"], factions=tables["factions"])


def load_goal_templates(path: Path) -> GoalTemplates:
    data = read_yaml(path)
    by_domain: Dict[str, List[GoalTemplate]] = {}
    seen = set()
    for domain in DOMAINS:
        if domain not in data:
            raise ContentSchemaError(f"Missing key '{domain}' in {path}")
        templates = []
        for t_data in data[domain]:
            for key in ("id", "label", "spawn_weight", "min_domain_weight"):
                if key not in t_data:
                    raise ContentSchemaError(f"Missing key '{key}' in goal template '{t_data.get('id', 'N/A')}' in {path}")
            if t_data["id"] in seen:
                raise ContentSchemaError(f"Duplicate goal template id '{t_data['id']}' in {path}")
            tier = t_data.get("tier", 1)
            if tier not in (1, 2, 3):
                raise ContentSchemaError(f"Invalid 'tier' in goal template '{t_data['id']}' in {path}: {tier}")
            for need in t_data.get("needs") or []:
                if need not in seen:
                    raise ContentSchemaError(
                        f"Goal template '{t_data['id']}' in {path} needs '{need}', which must be declared earlier."
                    )
            seen.add(t_data["id"])
            templates.append(GoalTemplate(
                id=t_data["id"],
                label=t_data["label"],
                domain=domain,
                domains=tuple(t_data.get("domains") or [domain]),
                spawn_weight=float(t_data["spawn_weight"]),
                min_domain_weight=float(t_data["min_domain_weight"]),
                tier=tier,
                needs=tuple(t_data.get("needs") or []),
                rules=tuple(t_data.get("rules") or []),
            ))
        by_domain[domain] = templates
    return GoalTemplates(by_domain=by_domain)


def load_mutation_table(path: Path) -> MutationTable:
    data = read_yaml(path)
    if "effects" not in data:
        raise ContentSchemaError(f"Missing key 'effects' in {path}")

    effects = {}
    for key, e_data in data["effects"].items():
        for domain in (e_data.get("domains") or {}):
            if domain not in DOMAINS:
                raise ContentSchemaError(f"Unknown domain '{domain}' in mutation effect '{key}' in {path}")
        for modifier in (e_data.get("modifiers") or {}):
            if modifier not in MODIFIERS:
                raise ContentSchemaError(f"Unknown modifier '{modifier}' in mutation effect '{key}' in {path}")
        effects[key] = MutationEffect(
            domains={d: float(v) for d, v in (e_data.get("domains") or {}).items()},
            modifiers={m: float(v) for m, v in (e_data.get("modifiers") or {}).items()},
            reason=e_data.get("reason", ""),
        )

    keywords = []
    for k_data in data.get("keywords") or []:
        for key in ("domain", "delta", "words"):
            if key not in k_data:
                raise ContentSchemaError(f"Missing key '{key}' in keyword category in {path}")
        keywords.append(KeywordCategory(
            domain=k_data["domain"],
            delta=float(k_data["delta"]),
            words=tuple(w.lower() for w in k_data["words"]),
            reason=k_data.get("reason", ""),
        ))

    dreams: Dict[str, Dict[float, DreamText]] = {}
    for domain, thresholds in (data.get("dreams") or {}).items():
        dreams[domain] = {}
        for threshold, d_data in thresholds.items():
            threshold = float(threshold)
            if not any(abs(threshold - t) < 1e-9 for t in DREAM_THRESHOLDS):
                raise ContentSchemaError(f"Invalid dream threshold {threshold} for '{domain}' in {path}")
            dreams[domain][threshold] = DreamText(title=d_data["title"], text=d_data["text"])

    return MutationTable(effects=effects, keywords=keywords, dreams=dreams)


def load_event_registry(path: Path) -> EventRegistry:
    registry = EventRegistry()
    try:
        registry.load_from_yaml(Path(path))
    except (ValueError, KeyError) as e:
        raise ContentSchemaError(f"Invalid event templates in {path}: {e}")
    return registry


def load_faction_templates(path: Path) -> FactionActionTemplates:
    data = read_yaml(path)
    for section in ("archetypes", "actions"):
        if section not in data:
            raise ContentSchemaError(f"Missing key '{section}' in {path}")

    archetypes = {}
    for a_id, a_data in data["archetypes"].items():
        for key in ("domains", "ambition_templates"):
            if key not in a_data:
                raise ContentSchemaError(f"Missing key '{key}' in archetype '{a_id}' in {path}")
        modifiers = a_data.get("modifiers") or {}
        for modifier in modifiers:
            if modifier not in MODIFIERS:
                raise ContentSchemaError(f"Unknown modifier '{modifier}' in archetype '{a_id}' in {path}")
        archetypes[a_id] = Archetype(
            id=a_id,
            domains={d: float(a_data["domains"].get(d, 0.0)) for d in DOMAINS},
            modifiers={m: float(v) for m, v in modifiers.items()},
            ambition_templates=tuple(a_data["ambition_templates"]),
        )

    actions: Dict[str, List[FactionActionTemplate]] = {}
    for category in FACTION_CATEGORIES:
        if category not in data["actions"]:
            raise ContentSchemaError(f"Missing key '{category}' in section 'actions' in {path}")
        templates = []
        for t_data in data["actions"][category]:
            for key in ("type", "description", "base_cost", "effects"):
                if key not in t_data:
                    raise ContentSchemaError(f"Missing key '{key}' in '{category}' action template in {path}")
            effects = []
            for e_data in t_data["effects"]:
                if e_data.get("type") not in EFFECT_TYPES:
                    raise ContentSchemaError(f"Unknown faction effect type '{e_data.get('type')}' in {path}")
                effects.append(FactionEffect(type=e_data["type"], target=str(e_data["target"]), value=float(e_data["value"])))
            templates.append(FactionActionTemplate(
                category=category,
                type=t_data["type"],
                description=t_data["description"],
                base_cost=int(t_data["base_cost"]),
                effects=tuple(effects),
            ))
        actions[category] = templates

    return FactionActionTemplates(archetypes=archetypes, actions=actions)
