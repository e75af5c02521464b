"""
Result records returned by key manager operations.
Records are computed on demand and never persisted.
"""

from typing import Dict, Any
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyRecord:
    """
    Read-only view of a named key.
    """
    name: str
    identity: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary."""
        return {
            'name': self.name,
            'identity': self.identity,
        }


@dataclass(frozen=True)
class RenameResult:
    """
    Outcome of a rename.
    """
    was: str
    now: str
    identity: str
    overwrote: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            'was': self.was,
            'now': self.now,
            'identity': self.identity,
            'overwrote': self.overwrote,
        }
