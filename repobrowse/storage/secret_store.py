"""
Secret storage for repobrowse.

The access token is persisted under one name, `github_token`, with
best-effort durability across two backends:

- SQLiteSecretBackend: the primary, a versioned transactional store.
  It can be unavailable (unwritable directory, locked or corrupt file)
  and loses its contents on a schema upgrade.
- FileSecretBackend: the fallback, a flat JSON key/value file.

FallbackSecretStore tries the primary first and the fallback second.
Only a write that both backends reject is reported to the caller.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .connection import Database, get_db_path, transaction
from .file_store import FileStore, get_store_path

logger = logging.getLogger(__name__)

SECRET_NAME = "github_token"
USERNAME_KEY = "github_username"


class StorageUnavailableError(Exception):
    """A storage backend is missing, inaccessible or failed mid-operation."""


class SecretStoreError(Exception):
    """Raised when the secret could not be written to any backend."""


class SecretBackend(ABC):
    """Persistence for a single named secret."""

    name = "backend"

    @abstractmethod
    def save(self, value: str) -> None:
        """Store value, replacing any previous one."""

    @abstractmethod
    def get(self) -> Optional[str]:
        """Return the stored value, or None if nothing is stored."""

    @abstractmethod
    def delete(self) -> None:
        """Remove the stored value. Deleting nothing is not an error."""


class SQLiteSecretBackend(SecretBackend):
    """
    Primary backend: one row in the `secrets` table.

    All sqlite3 and filesystem errors are reported as
    StorageUnavailableError.
    """

    name = "sqlite"

    def __init__(self, db_path: Path, secret_name: str = SECRET_NAME):
        self.db_path = Path(db_path).expanduser()
        self.secret_name = secret_name

    def save(self, value: str) -> None:
        try:
            with Database(self.db_path) as db:
                with transaction(db):
                    db.execute(
                        """INSERT OR REPLACE INTO secrets (name, value, updated_at)
                           VALUES (?, ?, CURRENT_TIMESTAMP)""",
                        (self.secret_name, value)
                    )
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError(f"sqlite store at {self.db_path}: {e}") from e

    def get(self) -> Optional[str]:
        try:
            with Database(self.db_path) as db:
                db.execute("SELECT value FROM secrets WHERE name = ?", (self.secret_name,))
                row = db.fetchone()
                return row['value'] if row else None
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError(f"sqlite store at {self.db_path}: {e}") from e

    def delete(self) -> None:
        try:
            with Database(self.db_path) as db:
                with transaction(db):
                    db.execute("DELETE FROM secrets WHERE name = ?", (self.secret_name,))
        except (sqlite3.Error, OSError) as e:
            raise StorageUnavailableError(f"sqlite store at {self.db_path}: {e}") from e


class FileSecretBackend(SecretBackend):
    """Fallback backend: one key in the flat JSON store."""

    name = "file"

    def __init__(self, store: FileStore, key: str = SECRET_NAME):
        self.store = store
        self.key = key

    def save(self, value: str) -> None:
        try:
            self.store.set(self.key, value)
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f"file store at {self.store.path}: {e}") from e

    def get(self) -> Optional[str]:
        try:
            value = self.store.get(self.key)
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f"file store at {self.store.path}: {e}") from e
        return value if isinstance(value, str) else None

    def delete(self) -> None:
        try:
            self.store.delete(self.key)
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f"file store at {self.store.path}: {e}") from e


class FallbackSecretStore:
    """
    Composite store: primary backend first, fallback second.

    Example:
        store = FallbackSecretStore(SQLiteSecretBackend(db), FileSecretBackend(fs))
        store.save("ghp_...")
        token = store.get()
    """

    def __init__(self, primary: SecretBackend, secondary: SecretBackend):
        self.primary = primary
        self.secondary = secondary

    def save(self, value: str) -> bool:
        """
        Persist the secret.

        Returns:
            True once one backend holds the value

        Raises:
            SecretStoreError: If both backends rejected the write
        """
        try:
            self.primary.save(value)
        except StorageUnavailableError as primary_error:
            logger.warning(f"Primary secret store unavailable, using fallback: {primary_error}")
            try:
                self.secondary.save(value)
            except StorageUnavailableError as secondary_error:
                raise SecretStoreError(
                    f"Could not save token: {primary_error}; {secondary_error}"
                ) from secondary_error
            return True

        # The primary now holds the record; drop any copy the fallback kept
        # from an earlier outage so only one record exists.
        try:
            self.secondary.delete()
        except StorageUnavailableError as e:
            logger.debug(f"Could not clear fallback secret copy: {e}")
        return True

    def get(self) -> Optional[str]:
        """Return the secret, or None if no backend holds one."""
        try:
            value = self.primary.get()
            if value is not None:
                return value
        except StorageUnavailableError as e:
            logger.warning(f"Primary secret store unavailable, reading fallback: {e}")

        try:
            return self.secondary.get()
        except StorageUnavailableError as e:
            logger.warning(f"Fallback secret store unavailable: {e}")
            return None

    def delete(self) -> bool:
        """Remove the secret from both backends. Always returns True."""
        for backend in (self.primary, self.secondary):
            try:
                backend.delete()
            except StorageUnavailableError as e:
                logger.warning(f"Could not delete secret from {backend.name} store: {e}")
        return True


def create_secret_store(config: Optional[dict] = None) -> FallbackSecretStore:
    """Build the default SQLite-then-file secret store from configuration."""
    return FallbackSecretStore(
        SQLiteSecretBackend(get_db_path(config)),
        FileSecretBackend(FileStore(get_store_path(config))),
    )


def get_username(config: Optional[dict] = None) -> Optional[str]:
    """Logged-in username, kept beside (not inside) the secret."""
    try:
        return FileStore(get_store_path(config)).get(USERNAME_KEY)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read username: {e}")
        return None


def save_username(username: str, config: Optional[dict] = None) -> None:
    FileStore(get_store_path(config)).set(USERNAME_KEY, username)


def clear_username(config: Optional[dict] = None) -> None:
    try:
        FileStore(get_store_path(config)).delete(USERNAME_KEY)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not clear username: {e}")
