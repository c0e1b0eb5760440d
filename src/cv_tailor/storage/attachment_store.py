"""SQLite blob store for CV attachments such as profile photos."""

from __future__ import annotations

import sqlite3
import time
import uuid
from pathlib import Path

DEFAULT_DB_PATH = Path.home() / ".cv-tailor" / "library.db"


class AttachmentStore:
    """Opaque blobs keyed by attachment id, grouped by owner id."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS attachments (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    blob BLOB NOT NULL,
                    stored_at REAL NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_attachments_owner ON attachments (owner_id)"
            )

    def store(self, blob: bytes, owner_id: str) -> str:
        attachment_id = str(uuid.uuid4())
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO attachments (id, owner_id, blob, stored_at) VALUES (?, ?, ?, ?)",
                (attachment_id, owner_id, sqlite3.Binary(blob), time.time()),
            )
        return attachment_id

    def get(self, attachment_id: str) -> bytes | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT blob FROM attachments WHERE id = ?", (attachment_id,)
            ).fetchone()
        return bytes(row[0]) if row else None

    def delete(self, attachment_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM attachments WHERE id = ?", (attachment_id,))

    def delete_all_for_owner(self, owner_id: str) -> int:
        """Delete every attachment of an owner. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM attachments WHERE owner_id = ?", (owner_id,))
            return cursor.rowcount
