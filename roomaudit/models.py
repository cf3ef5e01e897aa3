"""Data models for room inventory snapshots and audit results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNASSIGNED_ROOM = "Unassigned"
UNKNOWN_ROOM = "Unknown Room"
DEFAULT_SCAN_NAME = "Scan"

SCAN_UPLOADED = "uploaded"
SCAN_COMPLETE = "complete"

SESSION_IN_PROGRESS = "in_progress"
SESSION_COMPLETED = "completed"


@dataclass(frozen=True)
class InventoryItem:
    """One detected or recorded item. Identity is its position in a list."""

    name: str = ""
    count: int = 0
    condition: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count, "condition": self.condition}


@dataclass(frozen=True)
class Analysis:
    """Canonical analysis shape: ``{"items": [...], "location": "..."}``."""

    items: list[InventoryItem] = field(default_factory=list)
    location: str = ""

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "location": self.location,
        }


class AuditStatus(str, Enum):
    MATCH = "Match"
    MISMATCH = "Mismatch"
    MISSING = "Missing"


@dataclass(frozen=True)
class AuditOutcome:
    """Per-item verdict for an expected item."""

    item: str
    expected_count: int
    found_count: int
    status: AuditStatus

    def to_dict(self) -> dict:
        return {
            "item": self.item,
            "expected_count": self.expected_count,
            "found_count": self.found_count,
            "status": self.status.value,
        }


@dataclass
class Snapshot:
    """A photographed inventory record for a room."""

    id: int | str
    created_at: str
    room_name: str
    status: str
    image_path: str
    analysis: Analysis = field(default_factory=Analysis)
    property_id: int | str | None = None

    @property
    def items(self) -> list[InventoryItem]:
        return self.analysis.items

    @property
    def location(self) -> str:
        return self.analysis.location


@dataclass
class AuditSession:
    """A named audit pass over one property."""

    id: int | str
    property_id: int | str
    name: str
    status: str = SESSION_IN_PROGRESS
    created_at: str = ""


@dataclass
class AuditRecord:
    """Comparison result for one re-photographed snapshot."""

    session_id: int | str
    original_scan_id: int | str
    audit_image_path: str
    comparison: list[AuditOutcome] = field(default_factory=list)


@dataclass(frozen=True)
class RoomSection:
    title: str
    data: list[Snapshot]


@dataclass(frozen=True)
class AuditScanEntry:
    scan_name: str
    original_image_ref: str
    audit_image_ref: str
    outcomes: list[AuditOutcome]


@dataclass(frozen=True)
class AuditRoom:
    room_name: str
    scans: list[AuditScanEntry]


@dataclass
class Property:
    id: int | str
    name: str
    address: str = ""
    created_at: str = ""
