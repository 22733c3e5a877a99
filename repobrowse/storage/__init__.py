"""
Storage module for repobrowse.

Persists the GitHub access token across sessions.

Key components:
- schema: Versioned SQLite schema (upgrades drop the stored secret)
- connection: Database context manager and transactions
- file_store: Flat JSON key/value file
- secret_store: Backends and the primary-then-fallback composite
"""

from .connection import Database, get_connection, get_db_path, transaction
from .schema import CURRENT_VERSION, ensure_schema, get_schema_version
from .file_store import FileStore, get_store_path
from .secret_store import (
    SECRET_NAME,
    USERNAME_KEY,
    SecretBackend,
    SQLiteSecretBackend,
    FileSecretBackend,
    FallbackSecretStore,
    StorageUnavailableError,
    SecretStoreError,
    create_secret_store,
    get_username,
    save_username,
    clear_username,
)

__all__ = [
    # Connection
    'Database',
    'get_connection',
    'get_db_path',
    'transaction',
    # Schema
    'CURRENT_VERSION',
    'ensure_schema',
    'get_schema_version',
    # File store
    'FileStore',
    'get_store_path',
    # Secrets
    'SECRET_NAME',
    'USERNAME_KEY',
    'SecretBackend',
    'SQLiteSecretBackend',
    'FileSecretBackend',
    'FallbackSecretStore',
    'StorageUnavailableError',
    'SecretStoreError',
    'create_secret_store',
    'get_username',
    'save_username',
    'clear_username',
]
