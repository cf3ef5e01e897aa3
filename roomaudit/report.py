"""Assembly of grouped structures into a renderable document tree.

The tree is rooms -> scans -> rows. Renderers (PDF, JSON) only walk it and
never look at snapshots or outcomes directly.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime

from .models import DEFAULT_SCAN_NAME, AuditRoom, AuditSession, RoomSection

INVENTORY_TITLE = "Property Inventory Report"
AUDIT_TITLE = "Property Audit Report"
EMPTY_SCAN_NOTE = "No items recorded for this scan."

INVENTORY_COLUMNS = ["Item", "Count", "Condition"]
AUDIT_COLUMNS = ["Item", "Expected", "Found", "Status"]


@dataclass
class ReportRow:
    name: str
    count: int
    condition: str = ""
    expected_count: int | None = None
    status: str | None = None

    def cells(self) -> list[str]:
        if self.status is None:
            return [self.name, str(self.count), self.condition]
        return [self.name, str(self.expected_count), str(self.count), self.status]


@dataclass
class ReportScan:
    heading: str
    date: str = ""
    original_image_ref: str = ""
    audit_image_ref: str = ""
    rows: list[ReportRow] = field(default_factory=list)


@dataclass
class ReportRoom:
    title: str
    scans: list[ReportScan] = field(default_factory=list)


@dataclass
class ReportDocument:
    title: str
    generated_at: str
    columns: list[str]
    subtitle: str = ""
    rooms: list[ReportRoom] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _stamp(now: datetime | None) -> str:
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M")


def _date_part(timestamp: str) -> str:
    """Date portion of an ISO timestamp, or the input if it is not one."""
    if not timestamp:
        return ""
    try:
        return datetime.fromisoformat(timestamp).date().isoformat()
    except ValueError:
        return timestamp


def assemble_inventory_report(
    sections: list[RoomSection],
    *,
    title: str = INVENTORY_TITLE,
    now: datetime | None = None,
) -> ReportDocument:
    rooms: list[ReportRoom] = []
    for section in sections:
        scans = []
        for snapshot in section.data:
            location = snapshot.location
            scans.append(
                ReportScan(
                    heading=f"Location: {location}" if location else DEFAULT_SCAN_NAME,
                    date=_date_part(snapshot.created_at),
                    original_image_ref=snapshot.image_path,
                    rows=[
                        ReportRow(name=i.name, count=i.count, condition=i.condition)
                        for i in snapshot.items
                    ],
                )
            )
        rooms.append(ReportRoom(title=section.title, scans=scans))

    return ReportDocument(
        title=title,
        generated_at=_stamp(now),
        columns=list(INVENTORY_COLUMNS),
        rooms=rooms,
    )


def assemble_audit_report(
    session: AuditSession,
    rooms: list[AuditRoom],
    *,
    property_name: str = "",
    title: str = AUDIT_TITLE,
    now: datetime | None = None,
) -> ReportDocument:
    subtitle = f"{property_name} - {session.name}" if property_name else session.name
    report_rooms = [
        ReportRoom(
            title=room.room_name,
            scans=[
                ReportScan(
                    heading=scan.scan_name,
                    original_image_ref=scan.original_image_ref,
                    audit_image_ref=scan.audit_image_ref,
                    rows=[
                        ReportRow(
                            name=o.item,
                            count=o.found_count,
                            expected_count=o.expected_count,
                            status=o.status.value,
                        )
                        for o in scan.outcomes
                    ],
                )
                for scan in room.scans
            ],
        )
        for room in rooms
    ]
    return ReportDocument(
        title=title,
        generated_at=_stamp(now),
        columns=list(AUDIT_COLUMNS),
        subtitle=subtitle,
        rooms=report_rooms,
    )


def report_filename(prefix: str = "Inventory_Report", now: datetime | None = None) -> str:
    """``<prefix>_YYYY-MM-DD_HH-MM.pdf``"""
    return f"{prefix}_{(now or datetime.now()).strftime('%Y-%m-%d_%H-%M')}.pdf"
