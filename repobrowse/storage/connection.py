"""
Database connection management for repobrowse.

Provides the context manager and transaction helper used by the
SQLite secret backend.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator

from .schema import ensure_schema


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Get the database file path.

    Checks in order:
    1. REPOBROWSE_DB environment variable
    2. config['storage']['database_path'] if provided
    3. Default: ~/.repobrowse/repobrowse.db

    Args:
        config: Optional configuration dictionary

    Returns:
        Path to database file
    """
    if 'REPOBROWSE_DB' in os.environ:
        return Path(os.environ['REPOBROWSE_DB'])

    storage = (config or {}).get('storage') or {}
    if storage.get('database_path'):
        return Path(storage['database_path']).expanduser()

    return Path.home() / '.repobrowse' / 'repobrowse.db'


def get_connection(db_path: Optional[Path] = None, config: Optional[dict] = None) -> sqlite3.Connection:
    """
    Get a database connection.

    Creates the database and applies schema if it doesn't exist.

    Args:
        db_path: Optional explicit path to database
        config: Optional configuration dictionary

    Returns:
        SQLite connection
    """
    if db_path is None:
        db_path = get_db_path(config)

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row

    try:
        ensure_schema(conn)
    except sqlite3.Error:
        conn.close()
        raise

    return conn


class Database:
    """
    Database context manager for repobrowse.

    Usage:
        with Database(db_path) as db:
            with transaction(db):
                db.execute("INSERT OR REPLACE INTO secrets ...")
    """

    def __init__(self, db_path: Optional[Path] = None, config: Optional[dict] = None):
        self.db_path = db_path
        self.config = config
        self._conn: Optional[sqlite3.Connection] = None
        self._cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> 'Database':
        self._conn = get_connection(db_path=self.db_path, config=self.config)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._cursor:
            self._cursor.close()
        if self._conn:
            if exc_type is None:
                self._conn.commit()
            self._conn.close()

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the underlying connection."""
        if self._conn is None:
            raise RuntimeError("Database not connected. Use 'with Database() as db:'")
        return self._conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL statement."""
        self._cursor = self.conn.execute(sql, params)
        return self._cursor

    def fetchone(self) -> Optional[sqlite3.Row]:
        """Fetch one row from last query."""
        if self._cursor is None:
            return None
        return self._cursor.fetchone()

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        self.conn.rollback()


@contextmanager
def transaction(db: Database) -> Generator[None, None, None]:
    """
    Context manager for explicit transactions.

    Commits on success, rolls back on exception.
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
