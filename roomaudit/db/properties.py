"""Property CRUD operations."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from ..config import DEFAULT_DB_PATH
from ..models import Property
from .schema import ensure_schema


def _row_to_property(row: sqlite3.Row) -> Property:
    return Property(
        id=row["id"],
        name=row["name"],
        address=row["address"],
        created_at=row["created_at"],
    )


class PropertyDB:
    """Manages the properties table."""

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

    def add_property(self, name: str, address: str = "") -> int:
        conn = self._get_conn()
        cur = conn.execute(
            "INSERT INTO properties (name, address) VALUES (?, ?)",
            (name.strip(), address.strip()),
        )
        conn.commit()
        return cur.lastrowid

    def get_property(self, property_id: int) -> Property | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM properties WHERE id = ?", (property_id,)
        ).fetchone()
        return _row_to_property(row) if row else None

    def list_properties(self) -> list[Property]:
        """Return all properties, newest first."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM properties ORDER BY created_at DESC, id DESC"
        ).fetchall()
        return [_row_to_property(r) for r in rows]

    def update_property(self, property_id: int, name: str, address: str) -> bool:
        conn = self._get_conn()
        cur = conn.execute(
            "UPDATE properties SET name = ?, address = ? WHERE id = ?",
            (name.strip(), address.strip(), property_id),
        )
        conn.commit()
        return cur.rowcount > 0
