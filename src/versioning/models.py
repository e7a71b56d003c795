"""Data models for module coordinates and resolution bookkeeping."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Ordering(Enum):
    """Result of comparing two versions."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class Coordinate:
    """A fetchable artifact: group, artifact id, version and file type."""
    namespace: str
    identifier: str
    version: str
    file_type: Optional[str] = None  # chosen per fetch attempt when None

    def __str__(self) -> str:
        parts = [self.namespace, self.identifier, self.version]
        if self.file_type:
            parts.insert(2, self.file_type)
        return ":".join(parts)


@dataclass(frozen=True)
class ModuleEntry:
    """A resolved or unresolved module keyed by its module id."""
    module_id: str
    namespace: str
    version: str
    reason: Optional[str] = None  # unresolved entries only

    def as_row(self) -> dict:
        """Return the reporting columns as a dict."""
        return {
            "module_id": self.module_id,
            "group_id": self.namespace,
            "version": self.version,
        }
