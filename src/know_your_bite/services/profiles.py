"""Profile state machine for guest and authenticated sessions."""

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

from know_your_bite.domain.products import ProductRecord
from know_your_bite.domain.profiles import (
    DailyGoals,
    DietLogEntry,
    UserIdentity,
    UserProfile,
    UserStats,
    guest_profile,
    new_profile,
)
from know_your_bite.services.auth import AuthProvider
from know_your_bite.services.store import CURRENT_USER_KEY, KeyValueStore
from know_your_bite.services.sync import ProfileSyncQueue

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get(self, user_id: str) -> UserProfile | None:
        """Return the stored profile for a user id, if present."""

    def create(self, profile: UserProfile) -> UserProfile:
        """Store a new profile and return it."""

    def update(self, profile: UserProfile) -> None:
        """Overwrite goals, history, log and stats of a stored profile."""


@dataclass
class ProfileSession:
    """Holds the active profile and routes its mutations to persistence."""

    repository: ProfileRepository
    auth_provider: AuthProvider
    store: KeyValueStore
    sync_queue: ProfileSyncQueue
    history_limit: int = 10
    profile: UserProfile = field(default_factory=guest_profile)
    authenticated: bool = False

    @property
    def state(self) -> Literal["guest", "authenticated"]:
        """Return the current state name."""
        return "authenticated" if self.authenticated else "guest"

    def restore(self) -> UserProfile:
        """Resume the user recorded by the current-user pointer, if any."""
        pointer = self.store.get(CURRENT_USER_KEY)
        user_id = pointer.get("id") if isinstance(pointer, dict) else None
        if not user_id:
            return self.profile
        stored = self.repository.get(str(user_id))
        if stored is None:
            _logger.warning("Current user %s has no stored profile", user_id)
            self.store.delete(CURRENT_USER_KEY)
            return self.profile
        self._enter(stored)
        return stored

    def sign_up(self, name: str, email: str, password: str) -> UserProfile:
        """Register, create the stored profile and sign in."""
        identity = self.auth_provider.sign_up(name, email, password)
        profile = self.repository.create(new_profile(identity))
        self._enter(profile)
        return profile

    def sign_in(self, email: str, password: str) -> UserProfile:
        """Check credentials and load the stored profile."""
        identity = self.auth_provider.sign_in(email, password)
        profile = self.repository.get(identity.id) or self._create_for(identity)
        self._enter(profile)
        return profile

    def continue_as_guest(self) -> UserProfile:
        """Use the ephemeral guest profile without touching storage."""
        if self.authenticated:
            return self.sign_out()
        self.profile = guest_profile()
        return self.profile

    def sign_out(self) -> UserProfile:
        """Write pending changes, forget the current user and become a guest."""
        if self.authenticated:
            self.sync_queue.flush()
            self.auth_provider.sign_out()
        self.sync_queue.discard()
        self.store.delete(CURRENT_USER_KEY)
        self.authenticated = False
        self.profile = guest_profile()
        return self.profile

    def record_view(self, product: ProductRecord) -> UserProfile:
        """Put a product at the front of the history, deduplicated by name."""
        history = [product] + [
            item for item in self.profile.history if item.name != product.name
        ]
        return self._apply(history=history[: self.history_limit])

    def add_to_log(
        self, product: ProductRecord, quantity: float = 1.0, unit: str | None = None
    ) -> DietLogEntry:
        """Append a diet log entry."""
        entry = DietLogEntry(product=product, quantity=quantity, unit=unit)
        self._apply(diet_plan=[*self.profile.diet_plan, entry])
        return entry

    def add_entries(self, entries: list[DietLogEntry]) -> UserProfile:
        """Append several diet log entries at once."""
        return self._apply(diet_plan=[*self.profile.diet_plan, *entries])

    def remove_from_log(self, index: int) -> DietLogEntry:
        """Remove the entry at a position; raises IndexError when absent."""
        if index < 0 or index >= len(self.profile.diet_plan):
            raise IndexError(f"No diet log entry at position {index}")
        entries = list(self.profile.diet_plan)
        removed = entries.pop(index)
        self._apply(diet_plan=entries)
        return removed

    def set_goals(self, goals: DailyGoals) -> UserProfile:
        """Replace the daily goals."""
        return self._apply(daily_goals=goals)

    def set_stats(self, stats: UserStats, goals: DailyGoals) -> UserProfile:
        """Store body metrics together with the goals derived from them."""
        return self._apply(stats=stats, daily_goals=goals)

    def _create_for(self, identity: UserIdentity) -> UserProfile:
        return self.repository.create(new_profile(identity))

    def _enter(self, profile: UserProfile) -> None:
        if self.authenticated:
            self.sync_queue.flush()
        self.sync_queue.discard()
        self.profile = profile
        self.authenticated = True
        self.store.set(
            CURRENT_USER_KEY,
            {"id": profile.id, "name": profile.name, "email": profile.email},
        )

    def _apply(self, **changes: object) -> UserProfile:
        self.profile = self.profile.model_copy(update=changes)
        if self.authenticated:
            self.sync_queue.enqueue(self.profile)
        return self.profile
