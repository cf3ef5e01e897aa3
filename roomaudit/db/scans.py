"""Scan (snapshot) CRUD operations."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..config import DEFAULT_DB_PATH
from ..models import UNASSIGNED_ROOM, Analysis, InventoryItem, Snapshot
from ..normalize import dumps_analysis, normalize
from ..reconcile import scan_status
from .schema import ensure_schema


def _row_to_snapshot(row: sqlite3.Row) -> Snapshot:
    return Snapshot(
        id=row["id"],
        created_at=row["created_at"],
        room_name=row["room_name"],
        status=row["status"],
        image_path=row["image_path"],
        analysis=normalize(row["analysis"]),
        property_id=row["property_id"],
    )


class ScanDB:
    """Manages the scans table."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def add_scan(
        self,
        property_id: int | None,
        image_path: str,
        room_name: str,
        items: list[InventoryItem],
        location: str = "",
    ) -> int:
        """Insert a scan with its analysis.

        The room name is trimmed and defaults to ``"Unassigned"``. Status is
        ``complete`` only if at least one item was detected.

        Returns:
            The inserted row ID.
        """
        conn = self._get_conn()
        analysis = Analysis(items=list(items), location=location.strip())
        cur = conn.execute(
            """INSERT INTO scans
               (property_id, room_name, status, image_path, analysis)
               VALUES (?, ?, ?, ?, ?)""",
            (
                property_id,
                room_name.strip() or UNASSIGNED_ROOM,
                scan_status(analysis.items),
                image_path,
                dumps_analysis(analysis),
            ),
        )
        conn.commit()
        return cur.lastrowid

    def get_scan(self, scan_id: int) -> Snapshot | None:
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM scans WHERE id = ?", (scan_id,)).fetchone()
        return _row_to_snapshot(row) if row else None

    def list_scans(self, property_id: int | None = None) -> list[Snapshot]:
        """Return scans newest-first, optionally for one property."""
        conn = self._get_conn()
        if property_id is None:
            rows = conn.execute(
                "SELECT * FROM scans ORDER BY created_at DESC, id DESC"
            ).fetchall()
        else:
            rows = conn.execute(
                """SELECT * FROM scans WHERE property_id = ?
                   ORDER BY created_at DESC, id DESC""",
                (property_id,),
            ).fetchall()
        return [_row_to_snapshot(r) for r in rows]

    def update_scan(
        self,
        scan_id: int,
        *,
        room_name: str,
        items: list[InventoryItem],
        location: str = "",
    ) -> bool:
        """Save manual edits, writing the analysis back in canonical shape.

        Returns:
            True if a row was updated.
        """
        conn = self._get_conn()
        analysis = Analysis(items=list(items), location=location.strip())
        cur = conn.execute(
            "UPDATE scans SET room_name = ?, analysis = ? WHERE id = ?",
            (room_name.strip() or UNASSIGNED_ROOM, dumps_analysis(analysis), scan_id),
        )
        conn.commit()
        return cur.rowcount > 0

    def delete_scan(self, scan_id: int) -> None:
        """Delete a scan by ID."""
        conn = self._get_conn()
        conn.execute("DELETE FROM scans WHERE id = ?", (scan_id,))
        conn.commit()

    def delete_property_scans(self, property_id: int) -> int:
        """Delete every scan of a property.

        Returns:
            Number of rows deleted.
        """
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM scans WHERE property_id = ?", (property_id,))
        conn.commit()
        return cur.rowcount
