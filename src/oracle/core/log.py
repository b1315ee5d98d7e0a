from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .ids import RegionId, FactionId


@dataclass
class AuditEntry:
    type: str
    tick: int
    region_id: Optional[RegionId] = None
    faction_id: Optional[FactionId] = None
    delta: float = 0.0
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class AuditLog:
    def __init__(self):
        self.entries: List[AuditEntry] = []

    def add_entry(
        self,
        type: str,
        tick: int,
        region_id: Optional[RegionId] = None,
        faction_id: Optional[FactionId] = None,
        delta: float = 0.0,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        entry = AuditEntry(
            type=type,
            tick=tick,
            region_id=region_id,
            faction_id=faction_id,
            delta=delta,
            reason=reason,
            details=details or {},
        )
        self.entries.append(entry)

    def of_type(self, prefix: str) -> List[AuditEntry]:
        return [e for e in self.entries if e.type.startswith(prefix)]
