"""SQLite store for ingested CV records."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from cv_tailor.models.resume import ResumeDocument

DEFAULT_DB_PATH = Path.home() / ".cv-tailor" / "library.db"


class StoredCV(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    raw_text: str
    formatted_cv: ResumeDocument
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    profile_photo_id: str | None = None


class DocumentStore:
    """Keyed CV collection: last write wins, deleting a missing id is a no-op."""

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
                CREATE TABLE IF NOT EXISTS cvs (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    record_json TEXT NOT NULL
                )
            """)

    def add(self, record: StoredCV) -> StoredCV:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO cvs (id, record_json) VALUES (?, ?)",
                (record.id, record.model_dump_json(by_alias=True)),
            )
        return record

    def update(self, cv_id: str, record: StoredCV) -> StoredCV:
        """Replace the record stored under ``cv_id``, keeping its list position."""
        record = record.model_copy(update={"id": cv_id})
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE cvs SET record_json = ? WHERE id = ?",
                (record.model_dump_json(by_alias=True), cv_id),
            )
            if cursor.rowcount == 0:
                conn.execute(
                    "INSERT INTO cvs (id, record_json) VALUES (?, ?)",
                    (cv_id, record.model_dump_json(by_alias=True)),
                )
        return record

    def get(self, cv_id: str) -> StoredCV | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT record_json FROM cvs WHERE id = ?", (cv_id,)
            ).fetchone()
        if row is None:
            return None
        return StoredCV.model_validate_json(row[0])

    def delete(self, cv_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM cvs WHERE id = ?", (cv_id,))

    def list(self) -> list[StoredCV]:
        """All records in insertion order."""
        with self._connect() as conn:
            rows = conn.execute("SELECT record_json FROM cvs ORDER BY seq").fetchall()
        return [StoredCV.model_validate_json(row[0]) for row in rows]
