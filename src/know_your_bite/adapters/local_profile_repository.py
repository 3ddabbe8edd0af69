"""Profile repository kept in the local key-value store."""

from dataclasses import dataclass

from pydantic import ValidationError

from know_your_bite.domain.errors import PersistenceError
from know_your_bite.domain.profiles import UserProfile
from know_your_bite.services.profiles import ProfileRepository
from know_your_bite.services.store import USERS_KEY, KeyValueStore


@dataclass
class LocalProfileRepository(ProfileRepository):
    """Stores every registered profile in a single list entry."""

    store: KeyValueStore

    def get(self, user_id: str) -> UserProfile | None:
        """Return the stored profile for a user id, if present."""
        for row in self._rows():
            if row.get("id") == user_id:
                try:
                    return UserProfile.model_validate(row)
                except ValidationError as exc:
                    raise PersistenceError(
                        f"Stored profile {user_id} is invalid"
                    ) from exc
        return None

    def create(self, profile: UserProfile) -> UserProfile:
        """Append a new profile."""
        rows = [row for row in self._rows() if row.get("id") != profile.id]
        rows.append(profile.model_dump(mode="json"))
        self.store.set(USERS_KEY, rows)
        return profile

    def update(self, profile: UserProfile) -> None:
        """Replace the stored profile with the same id."""
        rows = self._rows()
        for index, row in enumerate(rows):
            if row.get("id") == profile.id:
                rows[index] = profile.model_dump(mode="json")
                self.store.set(USERS_KEY, rows)
                return
        raise PersistenceError(f"Profile {profile.id} is not stored")

    def _rows(self) -> list[dict[str, object]]:
        stored = self.store.get(USERS_KEY)
        if not isinstance(stored, list):
            return []
        return [dict(row) for row in stored if isinstance(row, dict)]
