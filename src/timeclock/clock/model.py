from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import ensure_aware, to_iso
from ..core.enums import EntryType


@dataclass(frozen=True)
class ClockEvent:
    """Domain entity: a single clock action (fichaje). Append-only."""

    employee_id: str
    entry_type: EntryType
    timestamp: datetime
    source: Optional[str] = None
    event_id: Optional[str] = None
    auto_generated: bool = False

    def __post_init__(self):
        object.__setattr__(self, "entry_type", EntryType(self.entry_type))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "employeeId": self.employee_id,
            "entryType": self.entry_type.value,
            "timestamp": to_iso(self.timestamp),
            "source": self.source,
            "autoGenerated": self.auto_generated,
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str
