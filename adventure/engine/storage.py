"""
SQLite Key-Value Store for workshops.

Provides portable persistence for:
- Completed exercise names
- The currently selected exercise
- The preferred language

Database location: ~/.config/<workshop name>/state.db
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from loguru import logger


class KeyValueStore:
    """
    SQLite-backed named values for one application namespace.

    Values are stored JSON-encoded, so anything ``json`` can round-trip
    (lists, strings, numbers, ``None``) can be saved.
    """

    def __init__(self, db_path: Path):
        """
        Initialize the store.

        Args:
            db_path: Database file; parent directories are created as needed
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"KeyValueStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)
        self.conn.commit()

    def get(self, key: str) -> Any:
        """
        Get a stored value.

        Args:
            key: The value name

        Returns:
            The decoded value, or None if never saved
        """
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def save(self, key: str, value: Any) -> None:
        """
        Save or replace a value.

        Args:
            key: The value name
            value: Any JSON-serializable value
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        """,
            (key, json.dumps(value)),
        )
        self.conn.commit()

    def delete(self, key: str) -> None:
        """Remove a single value."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()

    def reset(self) -> int:
        """
        Remove every value in this namespace.

        Returns:
            Number of values deleted
        """
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM kv")
        self.conn.commit()
        logger.info(f"Reset {cursor.rowcount} values in {self.db_path}")
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
