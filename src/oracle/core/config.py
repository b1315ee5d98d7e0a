from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .content import (
    DATA_DIR, Lexicon, NameTables,
    load_lexicon, load_names, load_goal_templates, load_mutation_table,
    load_event_registry, load_faction_templates,
)
from ..ambition.mutation import MutationTable
from ..events.registry import EventRegistry
from ..factions.model import FactionActionTemplates
from ..goals.model import GoalTemplates
from ..rules.load import load_knowledge_base
from ..rules.model import KnowledgeBase


@dataclass
class OracleConfig:
    """Every loaded content table plus the numeric session settings. Passed explicitly, never global."""
    lexicon: Lexicon
    names: NameTables
    goals: GoalTemplates
    knowledge_base: KnowledgeBase
    mutations: MutationTable
    events: EventRegistry
    factions: FactionActionTemplates
    min_goal_nodes: int = 3
    max_goal_nodes: int = 5
    max_goal_tier: int = 3
    proposal_limit: int = 5
    max_event_cards: int = 3


def load_config(
    data_dir: Optional[Path] = None,
    rules_path: Optional[Path] = None,
    **settings,
) -> OracleConfig:
    """
    Loads every content table from `data_dir` (the packaged data by default).

    `rules_path` swaps in a different rule base; keyword arguments override the
    numeric settings, e.g. ``load_config(proposal_limit=3)``.
    """
    data_dir = Path(data_dir) if data_dir else DATA_DIR
    rules_path = Path(rules_path) if rules_path else data_dir / "rules.yaml"
    return OracleConfig(
        lexicon=load_lexicon(data_dir / "lexicon.yaml"),
        names=load_names(data_dir / "names.yaml"),
        goals=load_goal_templates(data_dir / "goals.yaml"),
        knowledge_base=load_knowledge_base(rules_path),
        mutations=load_mutation_table(data_dir / "mutations.yaml"),
        events=load_event_registry(data_dir / "events.yaml"),
        factions=load_faction_templates(data_dir / "factions.yaml"),
        **settings,
    )
