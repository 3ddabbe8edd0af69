"""Supabase repository for user profiles."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from know_your_bite.domain.errors import PersistenceError
from know_your_bite.domain.profiles import DEFAULT_GOALS, UserProfile
from know_your_bite.services.profiles import ProfileRepository

_COLUMNS = "id, name, email, daily_goals, history, diet_plan, stats"

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """One ``profiles`` row per user, keyed by the auth provider id."""

    client: Client

    def get(self, user_id: str) -> UserProfile | None:
        """Return the profile row for a user id, if present."""
        try:
            response = (
                self.client.table("profiles")
                .select(_COLUMNS)
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            _logger.exception("Failed to load profile %s", user_id)
            raise PersistenceError("Failed to load profile from Supabase") from exc
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create(self, profile: UserProfile) -> UserProfile:
        """Insert a profile row and return it."""
        try:
            response = (
                self.client.table("profiles").insert(_serialize(profile)).execute()
            )
        except Exception as exc:
            _logger.exception("Failed to create profile %s", profile.id)
            raise PersistenceError("Failed to create profile in Supabase") from exc
        if not response.data:
            raise PersistenceError("Failed to create profile in Supabase")
        return _parse_profile(response.data[0])

    def update(self, profile: UserProfile) -> None:
        """Partially update the mutable columns of a profile row."""
        payload = _serialize(profile)
        payload.pop("id")
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        try:
            self.client.table("profiles").update(payload).eq(
                "id", profile.id
            ).execute()
        except Exception as exc:
            raise PersistenceError("Failed to update profile in Supabase") from exc


def _serialize(profile: UserProfile) -> dict[str, object]:
    data = profile.model_dump(mode="json")
    return {
        "id": data["id"],
        "name": data["name"],
        "email": data["email"],
        "daily_goals": data["daily_goals"],
        "history": data["history"],
        "diet_plan": data["diet_plan"],
        "stats": data["stats"],
    }


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile.model_validate(
        {
            "id": str(row["id"]),
            "name": row.get("name") or "",
            "email": row.get("email") or "",
            "daily_goals": row.get("daily_goals") or DEFAULT_GOALS.model_dump(),
            "history": row.get("history") or [],
            "diet_plan": row.get("diet_plan") or [],
            "stats": row.get("stats"),
        }
    )
