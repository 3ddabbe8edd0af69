"""JSON file-backed key-value store with schema migrations."""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from know_your_bite.services.store import USERS_KEY, KeyValueStore

SCHEMA_VERSION_KEY = "__schema_version__"
CURRENT_SCHEMA_VERSION = 2

_logger = logging.getLogger(__name__)


def _strip_plaintext_passwords(entries: dict[str, object]) -> dict[str, object]:
    """Version 1 stored passwords inside each profile; drop them."""
    users = entries.get(USERS_KEY)
    if isinstance(users, list):
        entries[USERS_KEY] = [
            {key: value for key, value in user.items() if key != "password"}
            for user in users
            if isinstance(user, dict)
        ]
    return entries


# Maps a schema version to the step that upgrades it to the next version.
MIGRATIONS: dict[int, Callable[[dict[str, object]], dict[str, object]]] = {
    1: _strip_plaintext_passwords,
}


def migrate(entries: dict[str, object]) -> dict[str, object]:
    """Upgrade raw store entries to the current schema version."""
    version = entries.get(SCHEMA_VERSION_KEY, 1)
    if not isinstance(version, int) or version < 1:
        version = 1
    while version < CURRENT_SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is not None:
            entries = step(entries)
        version += 1
        _logger.info("Migrated local store to schema version %s", version)
    entries[SCHEMA_VERSION_KEY] = version
    return entries


@dataclass
class JsonFileStore(KeyValueStore):
    """Key-value store persisted to a single JSON document."""

    path: Path
    _entries: dict[str, object] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._entries = migrate(self._load())

    @classmethod
    def open(cls, path: str | Path) -> "JsonFileStore":
        """Open (or create) a store at the given path."""
        return cls(path=Path(path))

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""
        return self._entries.get(key)

    def set(self, key: str, value: object) -> None:
        """Store a value and write the document to disk."""
        self._entries[key] = value
        self._write()

    def delete(self, key: str) -> None:
        """Remove a key and write the document to disk."""
        if self._entries.pop(key, None) is not None:
            self._write()

    def keys(self, prefix: str = "") -> list[str]:
        """Return keys starting with a prefix, excluding internal entries."""
        return [
            key
            for key in self._entries
            if key.startswith(prefix) and key != SCHEMA_VERSION_KEY
        ]

    def _load(self) -> dict[str, object]:
        if not self.path.exists():
            return {SCHEMA_VERSION_KEY: CURRENT_SCHEMA_VERSION}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            _logger.exception(
                "Local store is unreadable, starting empty: %s", self.path
            )
            return {SCHEMA_VERSION_KEY: CURRENT_SCHEMA_VERSION}
        if not isinstance(data, dict):
            return {SCHEMA_VERSION_KEY: CURRENT_SCHEMA_VERSION}
        return data

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._entries, handle)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
