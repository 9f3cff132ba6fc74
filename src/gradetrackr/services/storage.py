from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Dict, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SqliteKeyValueStore:
    """Synchronous local fallback store: one string value per string key."""

    def __init__(self, db_path: str = "gradetrackr.db") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._init_schema()

    def _init_schema(self) -> None:
        cur = self.conn.cursor()
        cur.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv (
              key TEXT PRIMARY KEY,
              value TEXT NOT NULL
            );
            """
        )
        self.conn.commit()

    def get(self, key: str) -> str | None:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT value FROM kv WHERE key=?", (key,))
            row = cur.fetchone()
        return str(row["value"]) if row else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self.conn.execute(
                """INSERT INTO kv(key, value) VALUES(?, ?)
                   ON CONFLICT(key) DO UPDATE SET value=excluded.value""",
                (key, value),
            )
            self.conn.commit()

    def items(self) -> Dict[str, str]:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute("SELECT key, value FROM kv ORDER BY key")
            return {row["key"]: row["value"] for row in cur.fetchall()}

    def close(self) -> None:
        self.conn.close()
