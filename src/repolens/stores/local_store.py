"""Process-local, plain-text key/value store.

All persisted state lives in one JSON document under the state directory:
one record per cached analysis plus the provider settings records. Values are
stored unencrypted.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STORE_FILENAME = "store.json"
_STORE_VERSION = 1


class LocalStore:
    """JSON-file key/value store.

    Every write is persisted immediately (write to a temp file, then replace),
    so a crash never leaves a half-written document. A ``path`` of None keeps
    the store in memory only.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: dict[str, Any] = {}
        if self._path is not None:
            self._load(self._path)

    @classmethod
    def in_directory(cls, state_dir: Path) -> "LocalStore":
        return cls(state_dir / STORE_FILENAME)

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._commit({**self._entries, key: value})

    def remove(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        if key not in self._entries:
            return False
        self._commit({k: v for k, v in self._entries.items() if k != key})
        return True

    def remove_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix. Returns the number removed."""
        kept = {k: v for k, v in self._entries.items() if not k.startswith(prefix)}
        removed = len(self._entries) - len(kept)
        if removed:
            self._commit(kept)
        return removed

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self._entries if key.startswith(prefix))

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable store %s: %s", path, e)
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            logger.warning("Ignoring store %s with unsupported format", path)
            return
        entries = data.get("entries")
        if isinstance(entries, dict):
            self._entries = {str(k): v for k, v in entries.items()}

    def _commit(self, entries: dict[str, Any]) -> None:
        """Persist entries, then make them current. A failed write changes nothing."""
        self._persist(entries)
        self._entries = entries

    def _persist(self, entries: dict[str, Any]) -> None:
        if self._path is None:
            return
        payload = {"version": _STORE_VERSION, "entries": entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
