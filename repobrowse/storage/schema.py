"""
Database schema for repobrowse.

The SQLite store holds a single container, the `secrets` table, with one
record for the access token. The schema is versioned through `_schema_info`.

Upgrades are destructive: when the stored version is older than
CURRENT_VERSION the secrets container is dropped and recreated empty, so
the saved token is lost across a version bump and the user logs in again.
"""

import logging
import sqlite3
from typing import List, Tuple

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
# v1: Initial secrets table
# v2: Added updated_at to secrets
CURRENT_VERSION = 2

SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

-- Named secrets (repobrowse stores exactly one: github_token)
CREATE TABLE IF NOT EXISTS secrets (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute(
            "SELECT MAX(version) FROM _schema_info"
        )
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def apply_schema(conn: sqlite3.Connection, version: int = CURRENT_VERSION) -> None:
    """
    Apply schema to database.

    If an older version is present, the secrets container is dropped
    first. Nothing is carried over from the old layout.
    """
    current = get_schema_version(conn)

    if current != 0 and current < version:
        logger.info(f"Schema version {current} -> {version}, recreating secret store (saved token is discarded)")

        conn.executescript("""
            DROP TABLE IF EXISTS secrets;
            DROP TABLE IF EXISTS _schema_info;
        """)

    conn.executescript(SCHEMA)
    conn.execute(
        "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
        (version, dict(get_migrations()).get(version, ""))
    )

    conn.commit()


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure database has current schema, recreating it if outdated."""
    current = get_schema_version(conn)

    if current < CURRENT_VERSION:
        apply_schema(conn, CURRENT_VERSION)


def get_migrations() -> List[Tuple[int, str]]:
    """
    Get list of schema versions.

    Returns:
        List of (version, description) tuples
    """
    return [
        (1, "Initial secrets table"),
        (2, "Added updated_at to secrets"),
    ]
