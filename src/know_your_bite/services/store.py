"""Key-value storage abstractions for locally persisted state."""

from dataclasses import dataclass, field
from typing import Protocol

THEME_KEY = "theme"
CURRENT_USER_KEY = "kyb_current_user"
USERS_KEY = "kyb_users"
CREDENTIALS_KEY = "kyb_credentials"


class KeyValueStore(Protocol):
    """Interface for a JSON-compatible key-value store."""

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: object) -> None:
        """Store a JSON-compatible value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""

    def keys(self, prefix: str = "") -> list[str]:
        """Return keys starting with a prefix."""


@dataclass
class InMemoryStore(KeyValueStore):
    """Process-local store, lost on restart."""

    entries: dict[str, object] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""
        return self.entries.get(key)

    def set(self, key: str, value: object) -> None:
        """Store a value under a key."""
        self.entries[key] = value

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self.entries.pop(key, None)

    def keys(self, prefix: str = "") -> list[str]:
        """Return keys starting with a prefix."""
        return [key for key in self.entries if key.startswith(prefix)]
