"""Audit session and audit record storage."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..config import DEFAULT_DB_PATH
from ..models import (
    SESSION_COMPLETED,
    SESSION_IN_PROGRESS,
    AuditOutcome,
    AuditRecord,
    AuditSession,
)
from ..normalize import dumps_outcomes, normalize_outcomes
from .schema import ensure_schema


def _row_to_session(row: sqlite3.Row) -> AuditSession:
    return AuditSession(
        id=row["id"],
        property_id=row["property_id"],
        name=row["name"],
        status=row["status"],
        created_at=row["created_at"],
    )


class AuditDB:
    """Manages the audit_sessions and audit_records tables."""

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

    def create_session(self, property_id: int | None, name: str) -> int:
        """Start a new in-progress audit session.

        Returns:
            The inserted row ID.
        """
        conn = self._get_conn()
        cur = conn.execute(
            "INSERT INTO audit_sessions (property_id, name, status) VALUES (?, ?, ?)",
            (property_id, name.strip(), SESSION_IN_PROGRESS),
        )
        conn.commit()
        return cur.lastrowid

    def complete_session(self, session_id: int) -> bool:
        conn = self._get_conn()
        cur = conn.execute(
            "UPDATE audit_sessions SET status = ? WHERE id = ?",
            (SESSION_COMPLETED, session_id),
        )
        conn.commit()
        return cur.rowcount > 0

    def get_session(self, session_id: int) -> AuditSession | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM audit_sessions WHERE id = ?", (session_id,)
        ).fetchone()
        return _row_to_session(row) if row else None

    def list_sessions(
        self, property_id: int | None = None, *, completed_only: bool = False
    ) -> list[AuditSession]:
        """Return sessions newest-first."""
        conn = self._get_conn()
        query = "SELECT * FROM audit_sessions"
        clauses: list[str] = []
        params: list = []
        if property_id is not None:
            clauses.append("property_id = ?")
            params.append(property_id)
        if completed_only:
            clauses.append("status = ?")
            params.append(SESSION_COMPLETED)
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY created_at DESC, id DESC"
        rows = conn.execute(query, params).fetchall()
        return [_row_to_session(r) for r in rows]

    def add_record(
        self,
        session_id: int,
        original_scan_id: int,
        audit_image_path: str,
        outcomes: list[AuditOutcome],
    ) -> int:
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO audit_records
               (session_id, original_scan_id, audit_image_path, comparison_json)
               VALUES (?, ?, ?, ?)""",
            (session_id, original_scan_id, audit_image_path, dumps_outcomes(outcomes)),
        )
        conn.commit()
        return cur.lastrowid

    def get_records(self, session_id: int) -> list[AuditRecord]:
        """Return the records of a session in insertion order."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM audit_records WHERE session_id = ? ORDER BY id",
            (session_id,),
        ).fetchall()
        return [
            AuditRecord(
                session_id=row["session_id"],
                original_scan_id=row["original_scan_id"],
                audit_image_path=row["audit_image_path"],
                comparison=normalize_outcomes(row["comparison_json"]),
            )
            for row in rows
        ]
