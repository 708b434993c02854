"""Key-value storage on SQLite: connection management and slot access."""
import sqlite3
from pathlib import Path
from typing import Optional

from flashquiz.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT,
    updated_at TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the slot table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def read_value(db_path: str, key: str) -> Optional[str]:
    """Return the stored value for key, or None when the slot is empty.

    Raises sqlite3.Error when the store itself is unreadable.
    """
    if not Path(db_path).exists():
        return None
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    finally:
        conn.close()
    return row["value"] if row else None


def write_value(db_path: str, key: str, value: str, updated_at: str) -> None:
    """Replace the whole value stored under key."""
    init_db(db_path)
    conn = get_connection(db_path)
    try:
        conn.execute(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at""",
            (key, value, updated_at),
        )
        conn.commit()
    finally:
        conn.close()


def delete_value(db_path: str, key: str) -> None:
    if not Path(db_path).exists():
        return
    conn = get_connection(db_path)
    try:
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
    finally:
        conn.close()
