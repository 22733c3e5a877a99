"""
Flat key/value file store for repobrowse.

Holds the fallback copy of the access token and the logged-in username
in one small JSON file with:
- Atomic writes (write to temp, then rename)
- Owner-only permissions on the written file
- Automatic parent directory creation
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    JSON file persistence with atomic writes.

    Every read goes to disk, so values written by another
    process are seen on the next call.

    Example:
        store = FileStore(Path("~/.repobrowse/store.json"))
        store.set("github_username", "octocat")
        store.get("github_username")
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self.path)

        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def read(self) -> Dict[str, Any]:
        """
        Read entire store.

        A missing file is an empty store. An unreadable or corrupt
        file raises, so callers can tell "empty" from "broken".

        Raises:
            OSError: If the file exists but cannot be read
            ValueError: If the file is not a JSON object
        """
        if not self.path.exists():
            return {}

        with open(self.path, 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self.read()
            data[key] = value
            self._write_atomic(data)

    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            data = self.read()
            if key not in data:
                return False
            del data[key]
            self._write_atomic(data)
            return True

    def has(self, key: str) -> bool:
        return key in self.read()

    def __contains__(self, key: str) -> bool:
        return self.has(key)


def get_store_path(config: Optional[dict] = None) -> Path:
    """
    Get the flat store file path.

    Checks REPOBROWSE_STORE, then config['storage']['store_path'],
    then defaults to ~/.repobrowse/store.json.
    """
    if 'REPOBROWSE_STORE' in os.environ:
        return Path(os.environ['REPOBROWSE_STORE'])

    storage = (config or {}).get('storage') or {}
    if storage.get('store_path'):
        return Path(storage['store_path']).expanduser()

    return Path.home() / '.repobrowse' / 'store.json'
