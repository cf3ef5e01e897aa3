"""Grouping of snapshots by room and of audit records by room."""

from __future__ import annotations

import logging

from .models import (
    DEFAULT_SCAN_NAME,
    SESSION_COMPLETED,
    UNASSIGNED_ROOM,
    UNKNOWN_ROOM,
    AuditRecord,
    AuditRoom,
    AuditScanEntry,
    AuditSession,
    RoomSection,
    Snapshot,
)

logger = logging.getLogger(__name__)


def room_key(room_name: str | None) -> str:
    # Trim only: "Kitchen" and "kitchen" stay separate rooms.
    return (room_name or UNASSIGNED_ROOM).strip()


def group_by_room(snapshots: list[Snapshot]) -> list[RoomSection]:
    """Partition snapshots into room sections.

    Snapshots keep their input order inside a section. Sections are sorted
    by plain string comparison of the room title.
    """
    groups: dict[str, list[Snapshot]] = {}
    for snapshot in snapshots:
        groups.setdefault(room_key(snapshot.room_name), []).append(snapshot)
    return [RoomSection(title=title, data=groups[title]) for title in sorted(groups)]


def completed_sessions(sessions: list[AuditSession]) -> list[AuditSession]:
    """Only completed sessions are eligible for reporting."""
    return [s for s in sessions if s.status == SESSION_COMPLETED]


def build_audit_report(
    session: AuditSession,
    records: list[AuditRecord],
    originating_snapshots: list[Snapshot],
) -> list[AuditRoom]:
    """Fold audit records into room buckets in first-seen order.

    Records whose original scan cannot be found are kept under
    ``"Unknown Room"`` with the scan name ``"Scan"``.
    """
    by_id: dict[str, Snapshot] = {}
    for snapshot in originating_snapshots:
        by_id.setdefault(str(snapshot.id), snapshot)

    buckets: dict[str, list[AuditScanEntry]] = {}
    for record in records:
        snapshot = by_id.get(str(record.original_scan_id))
        if snapshot is None:
            logger.warning(
                "Audit session %s: scan %s not found, reporting under %r",
                session.id,
                record.original_scan_id,
                UNKNOWN_ROOM,
            )
            room_name = UNKNOWN_ROOM
            scan_name = DEFAULT_SCAN_NAME
            original_ref = ""
        else:
            room_name = snapshot.room_name or UNKNOWN_ROOM
            scan_name = snapshot.location or DEFAULT_SCAN_NAME
            original_ref = snapshot.image_path

        buckets.setdefault(room_name, []).append(
            AuditScanEntry(
                scan_name=scan_name,
                original_image_ref=original_ref,
                audit_image_ref=record.audit_image_path,
                outcomes=list(record.comparison),
            )
        )

    # dicts keep insertion order, which is first-seen order here
    return [AuditRoom(room_name=name, scans=scans) for name, scans in buckets.items()]
