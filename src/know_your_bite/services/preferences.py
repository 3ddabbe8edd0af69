"""Display preferences."""

from dataclasses import dataclass
from typing import Literal

from know_your_bite.services.store import THEME_KEY, KeyValueStore

Theme = Literal["light", "dark"]


@dataclass
class PreferencesService:
    """Persists the UI theme."""

    store: KeyValueStore
    default_theme: Theme = "light"

    def get_theme(self) -> Theme:
        """Return the saved theme or the default."""
        saved = self.store.get(THEME_KEY)
        if saved in ("light", "dark"):
            return saved
        return self.default_theme

    def set_theme(self, theme: Theme) -> Theme:
        """Save a theme."""
        self.store.set(THEME_KEY, theme)
        return theme

    def toggle_theme(self) -> Theme:
        """Switch between light and dark."""
        return self.set_theme("light" if self.get_theme() == "dark" else "dark")
