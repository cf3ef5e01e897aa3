"""Scan, audit, and report workflows over storage and a vision backend."""

from __future__ import annotations

import logging
from datetime import datetime

from .aggregate import build_audit_report, group_by_room
from .db import AuditDB, PropertyDB, ScanDB
from .models import SESSION_COMPLETED, AuditOutcome, InventoryItem, Snapshot
from .report import (
    INVENTORY_TITLE,
    ReportDocument,
    assemble_audit_report,
    assemble_inventory_report,
)
from .vision import VisionBackend, verify_inventory

logger = logging.getLogger(__name__)


class InventoryInspector:
    """Ties the vision backend to scan and audit storage.

    The backend is optional; only :meth:`scan_room` and :meth:`audit_scan`
    need it.
    """

    def __init__(
        self,
        scans: ScanDB,
        audits: AuditDB,
        properties: PropertyDB | None = None,
        backend: VisionBackend | None = None,
    ) -> None:
        self._scans = scans
        self._audits = audits
        self._properties = properties
        self._backend = backend

    def _require_backend(self) -> VisionBackend:
        if self._backend is None:
            raise ValueError("No vision backend configured")
        return self._backend

    async def scan_room(
        self,
        property_id: int | None,
        image_path: str,
        room_name: str,
        location: str = "",
    ) -> Snapshot:
        """Analyze a photo and store it as a new scan.

        Analysis is best effort: if the backend call fails the scan is still
        saved, with no items and status ``uploaded``. A missing API key, SDK
        or image file is raised.
        """
        backend = self._require_backend()
        items: list[InventoryItem] = []
        try:
            items = await backend.analyze_image(image_path)
        except (ValueError, ImportError, FileNotFoundError):
            # configuration problems, not analysis failures
            raise
        except Exception:
            logger.exception("Analysis failed for %s, saving scan without items", image_path)

        scan_id = self._scans.add_scan(property_id, image_path, room_name, items, location)
        logger.info("Saved scan %d with %d item(s)", scan_id, len(items))
        return self._scans.get_scan(scan_id)

    def start_audit(self, property_id: int | None, name: str) -> int:
        session_id = self._audits.create_session(property_id, name)
        logger.info("Started audit session %d: %s", session_id, name)
        return session_id

    async def verify_scan(self, scan_id: int, image_path: str) -> list[AuditOutcome]:
        """Compare a re-photograph with a scan's items without storing anything."""
        backend = self._require_backend()
        scan = self._scans.get_scan(scan_id)
        if scan is None:
            raise ValueError(f"Scan not found: {scan_id}")
        return await verify_inventory(backend, image_path, scan.items)

    def record_audit(
        self, session_id: int, scan_id: int, image_path: str, outcomes: list[AuditOutcome]
    ) -> int:
        """Store outcomes, typically after manual correction."""
        if self._audits.get_session(session_id) is None:
            raise ValueError(f"Audit session not found: {session_id}")
        return self._audits.add_record(session_id, scan_id, image_path, outcomes)

    async def audit_scan(
        self, session_id: int, scan_id: int, image_path: str
    ) -> list[AuditOutcome]:
        """Verify a re-photograph of a scan and record the outcomes."""
        if self._audits.get_session(session_id) is None:
            raise ValueError(f"Audit session not found: {session_id}")
        outcomes = await self.verify_scan(scan_id, image_path)
        self._audits.add_record(session_id, scan_id, image_path, outcomes)
        return outcomes

    def finish_audit(self, session_id: int) -> None:
        if not self._audits.complete_session(session_id):
            raise ValueError(f"Audit session not found: {session_id}")
        logger.info("Completed audit session %d", session_id)

    def inventory_report(
        self,
        property_id: int | None,
        *,
        title: str = INVENTORY_TITLE,
        now: datetime | None = None,
    ) -> ReportDocument:
        sections = group_by_room(self._scans.list_scans(property_id))
        if self._properties is not None and property_id is not None:
            prop = self._properties.get_property(property_id)
            if prop is not None:
                title = f"{title}: {prop.name}"
        return assemble_inventory_report(sections, title=title, now=now)

    def audit_report(self, session_id: int, *, now: datetime | None = None) -> ReportDocument:
        """Build the report for a completed session.

        Raises:
            ValueError: If the session does not exist or is not completed.
        """
        session = self._audits.get_session(session_id)
        if session is None:
            raise ValueError(f"Audit session not found: {session_id}")
        if session.status != SESSION_COMPLETED:
            raise ValueError(
                f"Audit session {session_id} is {session.status!r}; "
                "only completed sessions can be reported"
            )

        records = self._audits.get_records(session_id)
        snapshots = self._scans.list_scans(session.property_id)
        rooms = build_audit_report(session, records, snapshots)

        property_name = ""
        if self._properties is not None and session.property_id is not None:
            prop = self._properties.get_property(session.property_id)
            if prop is not None:
                property_name = prop.name
        return assemble_audit_report(session, rooms, property_name=property_name, now=now)
