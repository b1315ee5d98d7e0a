from typing import Dict, Optional


class OracleError(Exception):
    """Base class for errors raised by the oracle engine."""
    pass


class InvalidArgument(OracleError, ValueError):
    """A caller-correctable precondition was violated (unknown id, empty candidate set)."""
    pass


class InsufficientResources(OracleError):
    """An action's cost exceeds the current stock. The choice is rejected, the world is untouched."""

    def __init__(self, action_id: str, shortfall: Optional[Dict[str, int]] = None):
        self.action_id = action_id
        self.shortfall = dict(shortfall or {})
        missing = ", ".join(f"{k} {v}" for k, v in self.shortfall.items())
        super().__init__(f"Cannot afford action '{action_id}' (short: {missing or 'unknown'}).")


class UnknownRuleReference(OracleError, KeyError):
    """A goal node or generator names a requirement id absent from the knowledge base."""

    def __init__(self, rule_id: str, referrer: Optional[str] = None):
        self.rule_id = rule_id
        self.referrer = referrer
        where = f" (referenced by '{referrer}')" if referrer else ""
        super().__init__(f"Rule '{rule_id}' is not in the knowledge base{where}.")

    def __str__(self):
        return self.args[0]
