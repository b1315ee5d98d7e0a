from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.errors import InvalidArgument
from ..core.ids import NodeId

UNMET = "unmet"
MET = "met"


@dataclass(frozen=True)
class GoalTemplate:
    id: str
    label: str
    domain: str
    domains: tuple
    spawn_weight: float
    min_domain_weight: float
    tier: int = 1
    needs: tuple = ()
    rules: tuple = ()


@dataclass
class GoalTemplates:
    """Goal templates grouped by the domain they belong to, in authored order."""
    by_domain: Dict[str, List[GoalTemplate]] = field(default_factory=dict)

    def for_domain(self, domain: str) -> List[GoalTemplate]:
        return self.by_domain.get(domain, [])

    def all(self) -> List[GoalTemplate]:
        return [t for templates in self.by_domain.values() for t in templates]

    def get(self, template_id: str) -> GoalTemplate:
        for template in self.all():
            if template.id == template_id:
                return template
        raise ValueError(f"Goal template with ID '{template_id}' not found.")


@dataclass
class GoalNode:
    id: NodeId
    label: str
    status: str = UNMET
    needs: List[NodeId] = field(default_factory=list)
    domains: List[str] = field(default_factory=list)
    tier: int = 1
    spawn_threshold: float = 0.0
    spawned_at: int = 0
    rules: List[str] = field(default_factory=list)

    @property
    def is_met(self) -> bool:
        return self.status == MET

    @classmethod
    def from_template(cls, template: GoalTemplate, spawned_at: int = 0) -> GoalNode:
        return cls(
            id=NodeId(template.id),
            label=template.label,
            needs=[NodeId(n) for n in template.needs],
            domains=list(template.domains),
            tier=template.tier,
            spawn_threshold=template.min_domain_weight,
            spawned_at=spawned_at,
            rules=list(template.rules),
        )


@dataclass
class RequirementGraph:
    """
    Ordered, append-only set of objectives derived from an ambition.

    Nodes only ever move from unmet to met; nothing is removed.
    """
    summary: str = ""
    nodes: List[GoalNode] = field(default_factory=list)

    def node(self, node_id: str) -> Optional[GoalNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has(self, node_id: str) -> bool:
        return self.node(node_id) is not None

    def ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def append(self, node: GoalNode):
        if self.has(node.id):
            raise InvalidArgument(f"Goal node '{node.id}' is already in the graph.")
        self.nodes.append(node)

    def mark_met(self, node_id: str) -> bool:
        """Marks a node met. Returns True only when the status actually changed."""
        node = self.node(node_id)
        if node is None or node.is_met:
            return False
        node.status = MET
        return True

    def unmet_nodes(self) -> List[GoalNode]:
        return [n for n in self.nodes if not n.is_met]

    def is_ready(self, node: GoalNode) -> bool:
        """All prerequisites present in the graph are met."""
        for need in node.needs:
            prerequisite = self.node(need)
            if prerequisite is not None and not prerequisite.is_met:
                return False
        return True

    def ready_nodes(self) -> List[GoalNode]:
        return [n for n in self.unmet_nodes() if self.is_ready(n)]
