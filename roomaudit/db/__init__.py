"""SQLite storage for properties, scans, and audits."""

from .audits import AuditDB
from .properties import PropertyDB
from .scans import ScanDB
from .schema import ensure_schema

__all__ = [
    "AuditDB",
    "PropertyDB",
    "ScanDB",
    "ensure_schema",
]
