from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..world.model import RESOURCE_KEYS
from .conditions import parse_condition
from .effects import parse_effects
from .model import GeneratorAction, Generator, KnowledgeBase, Requirement, RulePath


class KnowledgeBaseSchemaError(Exception):
    """Custom exception for schema validation errors in the rule base."""
    pass


def _validate_amounts(amounts: Any, what: str, owner: str, path: Path) -> Dict[str, int]:
    if amounts is None:
        return {}
    if not isinstance(amounts, dict):
        raise KnowledgeBaseSchemaError(f"Invalid '{what}' in '{owner}' in {path}: {amounts}")
    for key, value in amounts.items():
        if key not in RESOURCE_KEYS:
            raise KnowledgeBaseSchemaError(f"Unknown resource '{key}' in '{what}' of '{owner}' in {path}")
        if not isinstance(value, int) or value < 0:
            raise KnowledgeBaseSchemaError(f"Invalid amount for '{key}' in '{what}' of '{owner}' in {path}: {value}")
    return dict(amounts)


def _parse_effect_list(texts: Any, owner: str, path: Path):
    if texts is None:
        return ()
    if not isinstance(texts, list):
        raise KnowledgeBaseSchemaError(f"Invalid 'effects' in '{owner}' in {path}: {texts}")
    try:
        return parse_effects(texts)
    except ValueError as e:
        raise KnowledgeBaseSchemaError(f"Invalid effect in '{owner}' in {path}: {e}")


def _parse_path(req_id: str, path_id: str, data: Dict[str, Any], path: Path) -> RulePath:
    owner = f"{req_id}.{path_id}"
    if not isinstance(data, dict):
        raise KnowledgeBaseSchemaError(f"Path '{owner}' in {path} must be a mapping.")
    if "label" not in data:
        raise KnowledgeBaseSchemaError(f"Missing key 'label' in path '{owner}' in {path}")
    return RulePath(
        id=path_id,
        label=data["label"],
        description=data.get("description", ""),
        costs=_validate_amounts(data.get("costs"), "costs", owner, path),
        rewards=_validate_amounts(data.get("rewards"), "rewards", owner, path),
        risks=dict(data.get("risks") or {}),
        time=data.get("time", "1 turn"),
        requirements=list(data.get("requirements") or []),
        effects=_parse_effect_list(data.get("effects"), owner, path),
    )


def _parse_requirement(req_id: str, data: Dict[str, Any], path: Path) -> Requirement:
    if not isinstance(data, dict):
        raise KnowledgeBaseSchemaError(f"Requirement '{req_id}' in {path} must be a mapping.")
    for key in ("label", "domains", "paths"):
        if key not in data:
            raise KnowledgeBaseSchemaError(f"Missing key '{key}' in requirement '{req_id}' in {path}")
    if not isinstance(data["paths"], dict) or not data["paths"]:
        raise KnowledgeBaseSchemaError(f"Requirement '{req_id}' in {path} must define at least one path.")
    paths = {
        path_id: _parse_path(req_id, path_id, path_data, path)
        for path_id, path_data in data["paths"].items()
    }
    return Requirement(id=req_id, label=data["label"], domains=list(data["domains"]), paths=paths)


def _parse_generator(data: Dict[str, Any], path: Path) -> Generator:
    if not isinstance(data, dict):
        raise KnowledgeBaseSchemaError(f"Generator entries in {path} must be mappings: {data}")
    for key in ("id", "conditions", "domains", "action"):
        if key not in data:
            raise KnowledgeBaseSchemaError(f"Missing key '{key}' in generator '{data.get('id', 'N/A')}' in {path}")
    gen_id = data["id"]
    try:
        conditions = [parse_condition(c) for c in data["conditions"]]
    except ValueError as e:
        raise KnowledgeBaseSchemaError(f"Invalid condition in generator '{gen_id}' in {path}: {e}")

    a_data = data["action"]
    for key in ("id", "label"):
        if key not in a_data:
            raise KnowledgeBaseSchemaError(f"Missing key '{key}' in action of generator '{gen_id}' in {path}")
    action = GeneratorAction(
        id=a_data["id"],
        label=a_data["label"],
        description=a_data.get("description", ""),
        satisfies=list(a_data.get("satisfies") or []),
        costs=_validate_amounts(a_data.get("costs"), "costs", gen_id, path),
        rewards=_validate_amounts(a_data.get("rewards"), "rewards", gen_id, path),
        risks=dict(a_data.get("risks") or {}),
        time=a_data.get("time", "1 turn"),
        requirements=list(a_data.get("requirements") or []),
        effects=_parse_effect_list(a_data.get("effects"), gen_id, path),
    )
    return Generator(
        id=gen_id,
        conditions=conditions,
        domains=list(data["domains"]),
        action=action,
        rule=data.get("rule"),
    )


def load_knowledge_base(path: Path) -> KnowledgeBase:
    """Loads and validates a rule base from YAML. Effects and conditions are parsed here, once."""
    path = Path(path)
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise KnowledgeBaseSchemaError(f"Top level of {path} must be a mapping with 'requirements' and 'generators'.")
    if "requirements" not in data:
        raise KnowledgeBaseSchemaError(f"Missing key 'requirements' in {path}")

    requirements = {
        req_id: _parse_requirement(req_id, req_data, path)
        for req_id, req_data in (data["requirements"] or {}).items()
    }
    generators: List[Generator] = [_parse_generator(g, path) for g in (data.get("generators") or [])]

    seen = set()
    for generator in generators:
        if generator.id in seen:
            raise KnowledgeBaseSchemaError(f"Duplicate generator id '{generator.id}' in {path}")
        seen.add(generator.id)

    return KnowledgeBase(requirements=requirements, generators=generators)
