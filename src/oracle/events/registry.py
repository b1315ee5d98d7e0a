import string
from pathlib import Path
from typing import Dict, List

import yaml

from ..rules.effects import parse_effects
from .model import ChoiceTemplate, EventTemplate

TEXT_FIELDS = ("region", "faction", "axis", "delta")


def check_placeholders(template_id: str, text: str):
    """Raises ValueError when a template's text uses a placeholder cards cannot fill."""
    for _, field_name, _, _ in string.Formatter().parse(text):
        if field_name is not None and field_name not in TEXT_FIELDS:
            raise ValueError(f"Unknown placeholder '{{{field_name}}}' in event template '{template_id}'")


class EventRegistry:
    def __init__(self):
        self._templates: Dict[str, EventTemplate] = {}

    def load_from_yaml(self, path: Path):
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        for template_id, t_data in data.items():
            if "text" not in t_data:
                raise ValueError(f"Missing key 'text' in event template '{template_id}' in {path}")
            check_placeholders(template_id, t_data["text"])
            choices = tuple(
                ChoiceTemplate(
                    id=c_data["id"],
                    label=c_data["label"],
                    costs=dict(c_data.get("costs") or {}),
                    effects=parse_effects(c_data.get("effects") or []),
                    risk_tags=tuple(c_data.get("risk_tags") or []),
                )
                for c_data in t_data.get("choices") or []
            )
            self.register(EventTemplate(id=template_id, text=t_data["text"], choices=choices))

    def register(self, template: EventTemplate):
        self._templates[template.id] = template

    def has(self, template_id: str) -> bool:
        return template_id in self._templates

    def get(self, template_id: str) -> EventTemplate:
        if template_id not in self._templates:
            raise ValueError(f"Event template with ID '{template_id}' not found.")
        return self._templates[template_id]

    def all_templates(self) -> List[EventTemplate]:
        return list(self._templates.values())
