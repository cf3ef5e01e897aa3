"""Room inventory snapshots, audits, and reports."""

from .aggregate import build_audit_report, completed_sessions, group_by_room
from .config import (
    AuditConfig,
    DatabaseConfig,
    ReportConfig,
    VisionConfig,
    load_config,
)
from .inspector import InventoryInspector
from .models import (
    Analysis,
    AuditOutcome,
    AuditRecord,
    AuditRoom,
    AuditScanEntry,
    AuditSession,
    AuditStatus,
    InventoryItem,
    Property,
    RoomSection,
    Snapshot,
)
from .normalize import normalize, normalize_outcomes, strip_fences
from .reconcile import adjust_found, classify, reconcile
from .report import (
    ReportDocument,
    assemble_audit_report,
    assemble_inventory_report,
)
from .vision import VisionBackend, create_backend, verify_inventory

__all__ = [
    "Analysis",
    "AuditConfig",
    "AuditOutcome",
    "AuditRecord",
    "AuditRoom",
    "AuditScanEntry",
    "AuditSession",
    "AuditStatus",
    "DatabaseConfig",
    "InventoryInspector",
    "InventoryItem",
    "Property",
    "ReportConfig",
    "ReportDocument",
    "RoomSection",
    "Snapshot",
    "VisionBackend",
    "VisionConfig",
    "adjust_found",
    "assemble_audit_report",
    "assemble_inventory_report",
    "build_audit_report",
    "classify",
    "completed_sessions",
    "create_backend",
    "group_by_room",
    "load_config",
    "normalize",
    "normalize_outcomes",
    "reconcile",
    "strip_fences",
    "verify_inventory",
]
